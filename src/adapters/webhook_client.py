"""Webhook delivery adapter.

Posts JSON payloads over a shared httpx.AsyncClient and hands the raw status
and headers back to the dispatcher, which owns rate limit and status logic.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.errors import DispatchError
from core.models import WebhookResponse


class HttpxWebhookClient:
    """WebhookPort implementation backed by httpx."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def post(self, url: str, payload: dict[str, Any]) -> WebhookResponse:
        try:
            response = await self._client.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as exc:
            # Never include the URL in the message: it carries the webhook token.
            raise DispatchError(f"Couldn't reach webhook: {exc.__class__.__name__}", url=url) from exc
        # A repeated header keeps its last value rather than a comma-joined list.
        headers = {name: response.headers.get_list(name)[-1] for name in response.headers.keys()}
        return WebhookResponse(status_code=response.status_code, headers=headers)
