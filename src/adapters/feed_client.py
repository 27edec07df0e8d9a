"""HTTP event source adapter.

Reads the public event feed and the actor history API over httpx and maps
their JSON into core models. Every failure surfaces as FetchError so the
watch loop can back off and retry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx

from core.classification import DEFAULT_CUTOFF, classify_actor
from core.config import FeedConfig
from core.errors import FetchError
from core.models import ActorRecord, Event, OriginCategory

LOGGER = logging.getLogger(__name__)


def parse_event(raw: dict[str, Any]) -> Event:
    """Map one camelCase feed object to an Event."""

    return Event(
        id=str(raw["id"]),
        description=str(raw["description"]),
        created=str(raw["created"]),
        season=int(raw["season"]),
        day=int(raw["day"]),
        actor_ids=tuple(str(tag) for tag in raw.get("playerTags") or ()),
    )


def parse_actor_record(raw: dict[str, Any]) -> ActorRecord:
    """Map one actor history entry (firstSeen + data.deceased) to an ActorRecord."""

    first_seen = datetime.fromisoformat(str(raw["firstSeen"]).replace("Z", "+00:00"))
    if first_seen.tzinfo is None:
        # The history API reports UTC; some records omit the offset.
        first_seen = first_seen.replace(tzinfo=timezone.utc)
    data = raw.get("data") or {}
    return ActorRecord(first_seen=first_seen, deceased=bool(data.get("deceased", False)))


class FeedClient:
    """EventSource backed by the feed and actor history HTTP APIs."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: FeedConfig,
        cutoff: datetime = DEFAULT_CUTOFF,
    ) -> None:
        self._client = client
        self._config = config
        self._cutoff = cutoff

    def _event_params(self, since: Optional[datetime]) -> dict[str, Any]:
        params: dict[str, Any] = {
            "limit": self._config.limit,
            "sortorder": "desc",
            "sortby": "{created}",
            "type": self._config.event_type,
            "metadata.mod": self._config.modification,
        }
        if since is not None:
            params["after"] = since.isoformat()
        return params

    async def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.get(url, params=params, timeout=self._config.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"GET {url} returned invalid JSON: {exc}") from exc

    async def fetch_events(self, since: Optional[datetime] = None) -> List[Event]:
        """Return the newest candidate events in feed order."""

        LOGGER.debug("fetching events from feed...")
        body = await self._get_json(self._config.events_url, self._event_params(since))
        if not isinstance(body, list):
            raise FetchError("event feed did not return a JSON array")
        try:
            return [parse_event(item) for item in body]
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"malformed event in feed: {exc!r}") from exc

    async def oldest_record(self, actor_id: str) -> Optional[ActorRecord]:
        """Return the earliest known record for an actor, if there is one."""

        params = {"order": "asc", "player": actor_id, "limit": 1}
        body = await self._get_json(self._config.actors_url, params)
        try:
            records = body["data"]
            if not records:
                return None
            return parse_actor_record(records[0])
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise FetchError(f"malformed actor record for {actor_id}: {exc!r}") from exc

    async def classify_origin(self, actor_id: str) -> OriginCategory:
        record = await self.oldest_record(actor_id)
        return classify_actor(record, self._cutoff)
