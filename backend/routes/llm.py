"""LLM streaming proxy endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from backend.llm import CompletionProxy, CompletionRequest, LLMError

from .deps import get_llm_proxy
from .models import ErrorBody

router = APIRouter()

_STREAM_HEADERS = {
    "content-encoding": "identity",
    "cache-control": "no-cache",
    "x-accel-buffering": "no",
}


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorBody(error=message).model_dump(), status_code=status)


@router.post("/api/llm")
async def llm_proxy(body: CompletionRequest, proxy: CompletionProxy = Depends(get_llm_proxy)):
    """Relay a streaming chat completion from the reader's provider."""
    if not body.api_key:
        return _error(400, "API key is required")
    if not body.model:
        return _error(400, "Model name is required")

    try:
        chunks = await proxy.open_stream(body)
    except LLMError as e:
        return _error(502, str(e))

    return StreamingResponse(chunks, media_type="text/event-stream", headers=_STREAM_HEADERS)
