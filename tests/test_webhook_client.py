from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.webhook_client import HttpxWebhookClient
from core.errors import DispatchError


def _post(handler, payload):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HttpxWebhookClient(client).post("https://hooks.test/123/token", payload)

    return asyncio.run(scenario())


def test_post_sends_json_and_returns_status_and_headers() -> None:
    received = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received["method"] = request.method
        received["body"] = json.loads(request.content)
        return httpx.Response(
            204,
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset-After": "2.5"},
        )

    response = _post(handler, {"content": "boo"})

    assert received == {"method": "POST", "body": {"content": "boo"}}
    assert response.status_code == 204
    assert response.header("X-RateLimit-Remaining") == "0"
    assert response.header("x-ratelimit-reset-after") == "2.5"


def test_error_statuses_are_returned_not_raised() -> None:
    response = _post(lambda request: httpx.Response(404), {"content": "boo"})

    assert response.status_code == 404
    assert not response.is_success


def test_transport_failure_becomes_dispatch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(DispatchError) as excinfo:
        _post(handler, {"content": "boo"})

    assert "token" not in str(excinfo.value)


def test_repeated_rate_limit_header_keeps_the_last_value() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            204,
            headers=[
                ("X-RateLimit-Remaining", "3"),
                ("X-RateLimit-Remaining", "0"),
                ("X-RateLimit-Reset-After", "1.0"),
            ],
        )

    response = _post(handler, {"content": "boo"})

    assert response.header("X-RateLimit-Remaining") == "0"
