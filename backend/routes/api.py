"""The wire endpoint: one tagged message in, one tagged message out."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from endless_tale import wire
from endless_tale.errors import SerializationError
from endless_tale.service import AdventureService

from .deps import get_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api")
async def api_message(request: Request, service: AdventureService = Depends(get_service)):
    """Decode a ServerMessage, dispatch it, and encode the reply."""
    try:
        message = wire.decode(await request.body())
    except SerializationError as e:
        logger.error("Wire deserialization error: %s", e)
        return PlainTextResponse(str(e), status_code=400)

    logger.info("Received API message: %s", message.kind)
    reply = await wire.handle_message(message, service)
    return Response(content=wire.encode(reply), media_type="application/json")
