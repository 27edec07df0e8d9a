"""Rate-limited webhook fan-out (core domain).

Each endpoint carries its own rate limit window, reported back on every
delivery through two headers:

- X-RateLimit-Remaining: requests left in the current window
- X-RateLimit-Reset-After: seconds until the window resets

When the window is exhausted we sleep before returning, so the next delivery
to the same endpoint never trips the limit. The window itself is never
persisted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from core.errors import DispatchError, RateLimitHeaderError
from core.models import RenderingUnit, SubscriberEndpoint, WebhookResponse
from core.ports import PayloadBuilder, StoragePort, WebhookPort

LOGGER = logging.getLogger(__name__)

REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_AFTER_HEADER = "X-RateLimit-Reset-After"

FAN_OUT_MODES = ("sequential", "concurrent")

Sleep = Callable[[float], Awaitable[None]]


def parse_remaining(response: WebhookResponse, required: bool) -> int:
    """Return the remaining request budget reported by an endpoint.

    A missing header defaults to a spare budget of 1 unless ``required``.
    """

    raw = response.header(REMAINING_HEADER)
    if raw is None:
        if required:
            raise RateLimitHeaderError(f"missing {REMAINING_HEADER} header")
        return 1
    try:
        remaining = int(raw.strip())
    except ValueError as exc:
        raise RateLimitHeaderError(f"malformed {REMAINING_HEADER} header: {raw!r}") from exc
    if remaining < 0:
        raise RateLimitHeaderError(f"negative {REMAINING_HEADER} header: {raw!r}")
    return remaining


def parse_reset_after(response: WebhookResponse) -> float:
    """Return the seconds until the endpoint's window resets."""

    raw = response.header(RESET_AFTER_HEADER)
    if raw is None:
        raise RateLimitHeaderError(f"missing {RESET_AFTER_HEADER} header")
    try:
        reset_after = float(raw.strip())
    except ValueError as exc:
        raise RateLimitHeaderError(f"malformed {RESET_AFTER_HEADER} header: {raw!r}") from exc
    if not reset_after > 0:
        raise RateLimitHeaderError(f"non-positive {RESET_AFTER_HEADER} header: {raw!r}")
    return reset_after


class Dispatcher:
    """Sends a batch of rendering units to every known subscriber endpoint."""

    def __init__(
        self,
        storage: StoragePort,
        webhook: WebhookPort,
        payload_builder: PayloadBuilder,
        fan_out: str = "sequential",
        require_remaining_header: bool = False,
        sleep: Optional[Sleep] = None,
    ) -> None:
        if fan_out not in FAN_OUT_MODES:
            raise ValueError(f"Unsupported fan_out: {fan_out}")
        self._storage = storage
        self._webhook = webhook
        self._payload_builder = payload_builder
        self._fan_out = fan_out
        self._require_remaining = require_remaining_header
        self._sleep = sleep or asyncio.sleep

    async def dispatch(self, units: Sequence[RenderingUnit]) -> None:
        """Deliver ``units`` to all endpoints; any failure aborts the call."""

        if not units:
            return

        payload = self._payload_builder(units)
        endpoints = self._storage.list_endpoints()
        if not endpoints:
            LOGGER.warning("No subscriber endpoints, dropping %s notifications", len(units))
            return

        if self._fan_out == "concurrent":
            tasks = [asyncio.ensure_future(self._send(endpoint, payload)) for endpoint in endpoints]
            try:
                await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            return

        for endpoint in endpoints:
            await self._send(endpoint, payload)

    async def _send(self, endpoint: SubscriberEndpoint, payload: dict) -> None:
        response = await self._webhook.post(endpoint.url, payload)

        remaining = parse_remaining(response, required=self._require_remaining)
        LOGGER.debug("%s requests left", remaining)

        if remaining == 0:
            reset_after = parse_reset_after(response)
            LOGGER.debug("sleeping for %ss...", reset_after)
            await self._sleep(reset_after)
            LOGGER.debug("slept")

        if response.status_code == 404:
            # The remote side deleted the webhook; forget it and carry on.
            LOGGER.info("Webhook removed upstream, deleting endpoint from store")
            self._storage.remove_endpoint(endpoint.url)
            return

        if not response.is_success:
            raise DispatchError(
                f"Couldn't send webhook: {response.status_code}",
                url=endpoint.url,
                status_code=response.status_code,
            )
