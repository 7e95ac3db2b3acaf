"""Index and health check."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def index():
    """Plain-text welcome banner."""
    return "Welcome to the Collaborative Text Adventure API!"


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}
