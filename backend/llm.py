"""Streaming chat-completion proxy.

Readers bring their own provider, key and model; the server only forwards.
open_stream() posts an OpenAI-compatible request with ``stream: true`` to
``{api_base_url}/chat/completions`` and returns the upstream body as an async
byte iterator, so the route can relay server-sent events unchanged.

Every failure that happens before the first byte (connection refused,
timeout, non-2xx status) raises LLMError, so the caller can still answer
with a normal JSON error instead of a broken stream.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class CompletionRequest(BaseModel):
    api_base_url: str
    api_key: str = ""
    model: str = ""
    prompt: str
    max_tokens: int | None = None
    temperature: float | None = None


class CompletionProxy:
    """Forwards completion requests to the reader's provider.

    Args:
        timeout:   HTTP timeout in seconds. Defaults to 60.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _build_request(self, req: CompletionRequest) -> tuple[str, dict, dict[str, str]]:
        """Return (url, body, headers) for the upstream call."""
        url = f"{req.api_base_url.rstrip('/')}/chat/completions"
        body = {
            "model": req.model,
            "messages": [{"role": "user", "content": req.prompt}],
            "max_tokens": req.max_tokens if req.max_tokens is not None else 1024,
            "temperature": req.temperature if req.temperature is not None else 0.8,
            "stream": True,
        }
        headers = {
            "Authorization": f"Bearer {req.api_key}",
            "Content-Type": "application/json",
        }
        return url, body, headers

    async def open_stream(self, req: CompletionRequest) -> AsyncIterator[bytes]:
        url, body, headers = self._build_request(req)
        logger.debug("llm proxy url=%s model=%s prompt_len=%d", url, req.model, len(req.prompt))

        client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        try:
            resp = await self._open(client, url, body, headers)
        except BaseException:
            await client.aclose()
            raise
        return _relay(client, resp)

    async def _open(
        self, client: httpx.AsyncClient, url: str, body: dict, headers: dict[str, str]
    ) -> httpx.Response:
        """Send the request and check the status; the body is left unread."""
        try:
            resp = await client.send(
                client.build_request("POST", url, json=body, headers=headers),
                stream=True,
            )
        except httpx.TimeoutException as e:
            logger.error("LLM proxy request timed out: %s", e)
            raise LLMError(f"Request failed: timed out after {self._timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("LLM proxy request failed: %s", e)
            raise LLMError(f"Request failed: {e}") from e

        if resp.is_error:
            try:
                error_text = (await resp.aread()).decode(errors="replace")
            except httpx.HTTPError as e:
                raise LLMError(f"LLM API error ({resp.status_code})") from e
            finally:
                await resp.aclose()
            logger.warning("LLM API returned status %d: %s", resp.status_code, error_text)
            raise LLMError(f"LLM API error ({resp.status_code}): {error_text}")
        return resp


async def _relay(client: httpx.AsyncClient, resp: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in resp.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        logger.error("LLM stream error: %s", e)
        raise LLMError(f"Stream error: {e}") from e
    finally:
        await resp.aclose()
        await client.aclose()


class LLMError(RuntimeError):
    """Raised when the upstream LLM API cannot be reached or returns an error."""
