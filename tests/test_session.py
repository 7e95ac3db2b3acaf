"""Tests for endless_tale.session — NewgroundsVerifier and resolve_author."""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs

import httpx
import pytest

from conftest import StubVerifier
from endless_tale.errors import TransportError
from endless_tale.session import (
    DEFAULT_GATEWAY_URL,
    AnonymousVerifier,
    NewgroundsVerifier,
    resolve_author,
)


def _session_body(name: str | None) -> dict:
    user = {"name": name} if name is not None else None
    return {"success": True, "result": {"data": {"session": {"user": user}}}}


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# NewgroundsVerifier
# ---------------------------------------------------------------------------

class TestNewgroundsVerifier:
    async def test_returns_username(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_session_body("alice"))

        verifier = NewgroundsVerifier("app:1", transport=_transport(handler))
        assert await verifier.verify("sess-1") == "alice"

        request = seen[0]
        assert str(request.url) == DEFAULT_GATEWAY_URL
        payload = json.loads(parse_qs(request.content.decode())["input"][0])
        assert payload == {
            "app_id": "app:1",
            "session_id": "sess-1",
            "call": {"component": "App.checkSession", "parameters": {}},
        }

    async def test_custom_gateway_url(self) -> None:
        mock_post = AsyncMock(return_value=MagicMock(
            raise_for_status=MagicMock(), json=MagicMock(return_value=_session_body("bob")),
        ))
        verifier = NewgroundsVerifier("app", gateway_url="http://gw.local/gateway")
        with patch("httpx.AsyncClient.post", mock_post):
            assert await verifier.verify("t") == "bob"
        assert mock_post.call_args[0][0] == "http://gw.local/gateway"

    async def test_session_without_user_is_none(self) -> None:
        verifier = NewgroundsVerifier(
            "app", transport=_transport(lambda r: httpx.Response(200, json=_session_body(None)))
        )
        assert await verifier.verify("t") is None

    async def test_empty_name_is_none(self) -> None:
        verifier = NewgroundsVerifier(
            "app", transport=_transport(lambda r: httpx.Response(200, json=_session_body("")))
        )
        assert await verifier.verify("t") is None

    async def test_http_error_raises_transport_error(self) -> None:
        verifier = NewgroundsVerifier(
            "app", transport=_transport(lambda r: httpx.Response(503, text="down"))
        )
        with pytest.raises(TransportError, match="HTTP 503"):
            await verifier.verify("t")

    async def test_timeout_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        verifier = NewgroundsVerifier("app", timeout=2, transport=_transport(handler))
        with pytest.raises(TransportError, match="timed out"):
            await verifier.verify("t")

    async def test_connection_error_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        verifier = NewgroundsVerifier("app", transport=_transport(handler))
        with pytest.raises(TransportError, match="Cannot reach"):
            await verifier.verify("t")

    async def test_invalid_json_raises_transport_error(self) -> None:
        verifier = NewgroundsVerifier(
            "app", transport=_transport(lambda r: httpx.Response(200, text="<html>"))
        )
        with pytest.raises(TransportError, match="invalid JSON"):
            await verifier.verify("t")

    async def test_unexpected_shape_raises_transport_error(self) -> None:
        verifier = NewgroundsVerifier(
            "app", transport=_transport(lambda r: httpx.Response(200, json={"result": "nope"}))
        )
        with pytest.raises(TransportError, match="Unexpected response format"):
            await verifier.verify("t")


async def test_anonymous_verifier_never_resolves() -> None:
    assert await AnonymousVerifier().verify("anything") is None


# ---------------------------------------------------------------------------
# resolve_author
# ---------------------------------------------------------------------------

class TestResolveAuthor:
    async def test_no_token_skips_verifier(self) -> None:
        verifier = StubVerifier({"t": "alice"})
        assert await resolve_author(verifier, None) is None
        assert await resolve_author(verifier, "") is None
        assert verifier.calls == []

    async def test_known_token(self) -> None:
        assert await resolve_author(StubVerifier({"t": "alice"}), "t") == "alice"

    async def test_unknown_token(self) -> None:
        assert await resolve_author(StubVerifier({"t": "alice"}), "other") is None

    async def test_transport_failure_degrades_to_anonymous(self, caplog) -> None:
        verifier = StubVerifier(failing={"t"})
        with caplog.at_level(logging.WARNING, logger="endless_tale.session"):
            assert await resolve_author(verifier, "t") is None
        assert "continuing anonymously" in caplog.text

    async def test_slow_gateway_degrades_to_anonymous(self) -> None:
        verifier = StubVerifier({"t": "alice"}, delay=1.0)
        assert await resolve_author(verifier, "t", timeout=0.05) is None
        assert verifier.calls == ["t"]
