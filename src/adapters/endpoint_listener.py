"""Companion task that keeps the endpoint store in sync with seed config.

Seed URLs come from config.json (``endpoints``) and the WEBHOOK_URL
environment variable. They are written to the store at startup, and the
config is re-read periodically so endpoints added through the config panel
reach a running watcher without a restart.

Seeding is additive: endpoints are never removed here. A URL is added when it
appears in the seeds after being absent from the previous read, so disabling
and re-enabling a seed re-adds it, while an endpoint the dispatcher dropped
after a 404 stays dropped until its seed is removed and added back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional

from core.ports import StoragePort

LOGGER = logging.getLogger(__name__)


class EndpointSeedListener:
    """Adds newly configured webhook URLs to the store."""

    def __init__(
        self,
        storage: StoragePort,
        load_seed_urls: Callable[[], Iterable[str]],
        poll_interval: float = 10.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self._storage = storage
        self._load_seed_urls = load_seed_urls
        self._poll_interval = poll_interval
        self._sleep = sleep or asyncio.sleep
        self._previous: set[str] = set()

    def sync(self) -> list[str]:
        """Add seed URLs absent from the previous read; return the added ones."""

        try:
            urls = [url.strip() for url in self._load_seed_urls()]
        except (OSError, ValueError) as exc:
            # A half-written config file is retried on the next round.
            LOGGER.warning("Could not read seed endpoints: %s", exc)
            return []

        current = [url for url in dict.fromkeys(urls) if url]
        fresh = [url for url in current if url not in self._previous]
        if fresh:
            self._storage.add_endpoints(fresh)
        # Only advanced once the store accepted the new seeds.
        self._previous = set(current)
        if not fresh:
            return []
        LOGGER.info("Seeded %s endpoint(s)", len(fresh))
        return fresh

    async def run(self) -> None:
        """Sync forever; store failures propagate and end the task."""

        while True:
            self.sync()
            await self._sleep(self._poll_interval)
