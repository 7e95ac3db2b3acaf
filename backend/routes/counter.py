"""Shared visit counter endpoints."""

import logging

from fastapi import APIRouter, Depends

from endless_tale.counter import Counter

from .deps import get_counter
from .models import CounterResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/counter")
async def read_counter(counter: Counter = Depends(get_counter)) -> CounterResponse:
    """Current counter value."""
    return CounterResponse(value=counter.value)


@router.post("/api/counter/increment")
async def increment_counter(counter: Counter = Depends(get_counter)) -> CounterResponse:
    """Add one to the counter and return the new value."""
    value = counter.increment()
    logger.info("Counter incremented to %d", value)
    return CounterResponse(value=value)
