"""Ports (interfaces) used by the watch loop.

Ports define the minimal contracts for storage, feed, and webhook adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from core.models import Event, OriginCategory, RenderingUnit, SubscriberEndpoint, WebhookResponse


class StoragePort(Protocol):
    """Storage operations required by the watch loop and dispatcher.

    Implementations must make single-key inserts and removals atomic; the
    dispatcher may remove endpoints from several tasks at once.
    """

    def contains_event_id(self, event_id: str) -> bool:
        ...

    def record_event_id(self, event_id: str) -> None:
        ...

    def dispatched_event_ids(self) -> set[str]:
        ...

    def list_endpoints(self) -> List[SubscriberEndpoint]:
        ...

    def remove_endpoint(self, url: str) -> None:
        ...

    def add_endpoints(self, urls: Iterable[str]) -> None:
        ...


class EventSourcePort(Protocol):
    """Feed operations required by the watch loop."""

    async def fetch_events(self, since: Optional[datetime] = None) -> List[Event]:
        ...

    async def classify_origin(self, actor_id: str) -> OriginCategory:
        ...


class WebhookPort(Protocol):
    """Delivers one JSON payload to one endpoint."""

    async def post(self, url: str, payload: dict[str, Any]) -> WebhookResponse:
        ...


class FormatterPort(Protocol):
    """Maps an event to a single bounded rendering unit."""

    def __call__(self, event: Event) -> RenderingUnit:
        ...


class PayloadBuilder(Protocol):
    def __call__(self, units: Sequence[RenderingUnit]) -> dict[str, Any]:
        ...
