"""Feed watch loop.

Each cycle enforces a strict order:
1) Fetch the dedup set and the candidate events concurrently
2) Skip events whose id is already known (feed order is preserved)
3) Classify (optional) and format each new event
4) Record the event id as dispatched
5) Append to the batch, flushing as soon as it is full
6) Flush the remainder, then sleep until the next poll

Feed failures are logged and retried after a backoff. Store and dispatch
failures propagate and end the loop.

Event ids are recorded before their batch is delivered, so a fatal dispatch
error leaves those events marked as seen without ever reaching a subscriber.
Delivery is at-most-once per event.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Mapping, Optional

from core.config import WatchConfig
from core.errors import FetchError
from core.models import Event, OriginCategory, RenderingUnit
from core.ports import EventSourcePort, FormatterPort, StoragePort

LOGGER = logging.getLogger(__name__)


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class LoopContext:
    """State threaded through every cycle of one watch loop."""

    batch: List[RenderingUnit] = field(default_factory=list)
    last_poll: Optional[datetime] = None
    cycles: int = 0
    seen: int = 0
    new: int = 0
    flushes: int = 0
    fetch_failures: int = 0


@dataclass(frozen=True)
class CycleReport:
    """Outcome of a single poll cycle."""

    fetched: int = 0
    seen: int = 0
    new: int = 0
    flushes: int = 0
    fetch_failed: bool = False


class WatchLoop:
    """Polls the event source and dispatches unseen events in batches."""

    def __init__(
        self,
        storage: StoragePort,
        source: EventSourcePort,
        dispatcher,
        formatter: FormatterPort,
        config: WatchConfig,
        origin_labels: Optional[Mapping[OriginCategory, str]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._storage = storage
        self._source = source
        self._dispatcher = dispatcher
        self._formatter = formatter
        self._config = config
        self._origin_labels = origin_labels
        self._sleep = sleep or asyncio.sleep
        self._clock = clock

    async def run(self, context: Optional[LoopContext] = None) -> None:
        """Run forever; only returns by raising a fatal error."""

        context = context or LoopContext()
        while True:
            report = await self.run_cycle(context)
            if report.fetch_failed:
                await self._sleep(self._config.error_backoff_seconds)
                continue
            LOGGER.debug("sleeping...")
            await self._sleep(self._config.poll_interval_seconds)

    async def run_cycle(self, context: LoopContext) -> CycleReport:
        """Poll once, dispatch everything new, and report what happened."""

        context.cycles += 1
        poll_started = self._clock()

        LOGGER.debug("fetching dedup set and events...")
        known_task = asyncio.ensure_future(asyncio.to_thread(self._storage.dispatched_event_ids))
        try:
            events = await self._source.fetch_events(self._since(context, poll_started))
        except FetchError as exc:
            # The dedup read is still in flight; a store failure outranks the feed one.
            await known_task
            context.fetch_failures += 1
            LOGGER.error("error fetching events: %r", exc)
            return CycleReport(fetch_failed=True)
        except BaseException:
            known_task.cancel()
            raise
        known = set(await known_task)

        seen = 0
        new = 0
        flushes = 0
        for event in events:
            LOGGER.debug("checking %s", event.id)
            if event.id in known:
                LOGGER.debug("already seen")
                seen += 1
                continue

            LOGGER.info("%s", event.description)
            event = await self._classify(event)
            unit = self._formatter(event)

            LOGGER.debug("adding %s to db", event.id)
            self._storage.record_event_id(event.id)
            known.add(event.id)
            new += 1

            context.batch.append(unit)
            if len(context.batch) >= self._config.batch_size:
                LOGGER.debug("hit max batch size, sending early")
                await self._flush(context)
                flushes += 1

        if context.batch:
            await self._flush(context)
            flushes += 1
        else:
            LOGGER.debug("no new events found")

        context.last_poll = poll_started
        context.seen += seen
        context.new += new
        context.flushes += flushes
        return CycleReport(fetched=len(events), seen=seen, new=new, flushes=flushes)

    async def _flush(self, context: LoopContext) -> None:
        batch = list(context.batch)
        # Cleared first: the batch is not retried if delivery fails.
        context.batch.clear()
        await self._dispatcher.dispatch(batch)

    def _since(self, context: LoopContext, poll_started: datetime) -> Optional[datetime]:
        if not self._config.lookback_hours:
            return None
        anchor = context.last_poll or poll_started
        return anchor - timedelta(hours=self._config.lookback_hours)

    async def _classify(self, event: Event) -> Event:
        if self._origin_labels is None:
            return event

        category = OriginCategory.UNKNOWN
        if event.actor_ids:
            try:
                category = await self._source.classify_origin(event.actor_ids[0])
            except FetchError as exc:
                LOGGER.warning("actor lookup failed for %s: %r", event.actor_ids[0], exc)
        return replace(event, origin_tag=self._origin_labels.get(category, category.value))
