"""Session verification — turns an opaque session token into a username.

Authorship is never taken from the client; it is resolved here from a token
issued by a third-party identity gateway. Callers inject a verifier matching
the protocol:

    async def verify(self, token: str) -> str | None: ...

None means the session is valid but carries no user. Any network or
protocol failure raises TransportError.

Two implementations are provided:

    NewgroundsVerifier — calls the Newgrounds.io gateway (App.checkSession).
    AnonymousVerifier  — resolves every token to None. Used when no gateway
                         is configured.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol

import httpx

from endless_tale.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://newgrounds.io/gateway_v3.php"


class SessionVerifier(Protocol):
    async def verify(self, token: str) -> str | None: ...


# ---------------------------------------------------------------------------
# NewgroundsVerifier
# ---------------------------------------------------------------------------

class NewgroundsVerifier:
    """Checks a session id against the Newgrounds.io gateway.

    The gateway expects a form-encoded ``input`` field holding a JSON call:

        {"app_id": ..., "session_id": ...,
         "call": {"component": "App.checkSession", "parameters": {}}}

    and answers with ``result.data.session.user.name`` when the session
    belongs to a logged-in user.

    Args:
        app_id:      Newgrounds application id.
        gateway_url: Gateway endpoint. Defaults to the public v3 gateway.
        timeout:     HTTP timeout in seconds. Defaults to 10.
        transport:   Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        app_id: str,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._app_id = app_id
        self._gateway_url = gateway_url
        self._timeout = timeout
        self._transport = transport

    def _payload(self, token: str) -> dict:
        return {
            "app_id": self._app_id,
            "session_id": token,
            "call": {"component": "App.checkSession", "parameters": {}},
        }

    async def verify(self, token: str) -> str | None:
        form = {"input": json.dumps(self._payload(token))}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._gateway_url, data=form)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Session gateway returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Session gateway timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Cannot reach session gateway: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError("Session gateway returned invalid JSON") from e
        return _username_from_response(data)


def _username_from_response(data: object) -> str | None:
    try:
        session = data["result"]["data"].get("session")  # type: ignore[index]
        user = (session or {}).get("user") or {}
        name = user.get("name")
    except (KeyError, TypeError, AttributeError) as e:
        raise TransportError("Unexpected response format from session gateway") from e
    return name or None


# ---------------------------------------------------------------------------
# AnonymousVerifier
# ---------------------------------------------------------------------------

class AnonymousVerifier:
    """Resolves every token to no user. No network calls."""

    async def verify(self, token: str) -> str | None:
        return None


# ---------------------------------------------------------------------------
# resolve_author — the degrade-to-anonymous policy
# ---------------------------------------------------------------------------

async def resolve_author(
    verifier: SessionVerifier, token: str | None, timeout: float = 10.0
) -> str | None:
    """Resolve a token to a username, or None.

    Never raises for gateway trouble: a failed or slow verification is
    logged and treated as anonymous.
    """
    if not token:
        return None
    try:
        return await asyncio.wait_for(verifier.verify(token), timeout)
    except asyncio.TimeoutError:
        logger.warning("Session verification timed out after %ss; continuing anonymously", timeout)
    except TransportError as e:
        logger.warning("Session verification failed (%s); continuing anonymously", e)
    return None
