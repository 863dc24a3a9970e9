"""Resilient HTTP — verifies retry policy and error mapping.

Invariants:
    - Idempotent requests retry transient failures (timeout, connection, 5xx)
    - Non-idempotent requests are attempted exactly once
    - 4xx and undecodable bodies are never retried
"""

import httpx
import pytest

from swapbridge.core.errors import NetworkClientError
from swapbridge.infrastructure.resilient_http import ResilientHttpClient


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    async def _sleep(_delay):
        return None
    monkeypatch.setattr(
        "swapbridge.infrastructure.resilient_http.asyncio.sleep", _sleep,
    )


def _client(handler, max_retries=2):
    return ResilientHttpClient(
        "loki", base_url="http://wallet.test", max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )


async def test_returns_decoded_json():
    client = _client(lambda request: httpx.Response(200, json={"ok": True}))
    assert await client.request_json("GET", "/x", idempotent=True) == {"ok": True}
    await client.aclose()


async def test_idempotent_request_retries_5xx_then_succeeds():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(502)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler)
    assert await client.request_json("GET", "/x", idempotent=True) == {"ok": True}
    assert len(calls) == 3
    await client.aclose()


async def test_idempotent_request_gives_up_after_max_retries():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler, max_retries=2)
    with pytest.raises(NetworkClientError) as exc_info:
        await client.request_json("GET", "/x", idempotent=True)
    assert exc_info.value.error_type == "connection_error"
    assert len(calls) == 3
    await client.aclose()


async def test_non_idempotent_request_is_never_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    client = _client(handler)
    with pytest.raises(NetworkClientError) as exc_info:
        await client.request_json("POST", "/send", idempotent=False, json={})
    assert exc_info.value.error_type == "http_error"
    assert len(calls) == 1
    await client.aclose()


async def test_client_error_status_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(401)

    client = _client(handler)
    with pytest.raises(NetworkClientError):
        await client.request_json("GET", "/x", idempotent=True)
    assert len(calls) == 1
    await client.aclose()


async def test_timeout_maps_to_timeout_error_type():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client = _client(handler, max_retries=0)
    with pytest.raises(NetworkClientError) as exc_info:
        await client.request_json("GET", "/x", idempotent=True)
    assert exc_info.value.error_type == "timeout"
    await client.aclose()


async def test_invalid_json_is_decode_error():
    client = _client(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(NetworkClientError) as exc_info:
        await client.request_json("GET", "/x", idempotent=True)
    assert exc_info.value.error_type == "decode_error"
    await client.aclose()
