"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from core.models import OriginCategory

# Webhook receivers accept at most ten embeds per message.
MAX_BATCH_SIZE = 10


@dataclass(frozen=True)
class WatchConfig:
    """Cadence and batching settings for the watch loop."""

    poll_interval_seconds: float = 5.0
    error_backoff_seconds: float = 30.0
    batch_size: int = MAX_BATCH_SIZE
    lookback_hours: float = 6.0

    def __post_init__(self) -> None:
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")


@dataclass(frozen=True)
class DispatchConfig:
    """Webhook delivery settings consumed by the dispatcher and formatter."""

    fan_out: str = "sequential"
    format: str = "embeds"
    avatar_url: Optional[str] = None
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class FeedConfig:
    """Event feed and actor lookup settings consumed by the feed adapter."""

    events_url: str
    actors_url: str
    limit: int = 100
    event_type: int = 106
    modification: str = "INHABITING"
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class ClassificationConfig:
    """Origin classification settings."""

    enabled: bool
    cutoff: datetime
    labels: Mapping[OriginCategory, str]
