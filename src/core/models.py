"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any feed- or webhook-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Event:
    """A single feed occurrence. Identity is ``id``."""

    id: str
    description: str
    created: str
    season: int
    day: int
    actor_ids: Tuple[str, ...] = ()
    origin_tag: Optional[str] = None


class OriginCategory(Enum):
    CATEGORY_A = "category_a"
    CATEGORY_B = "category_b"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ActorRecord:
    """Earliest known record for an actor, as returned by the actor lookup."""

    first_seen: datetime
    deceased: bool


@dataclass(frozen=True)
class Embed:
    """Rich rendering unit: title, footer text and an ISO-8601 timestamp."""

    title: str
    footer_text: str
    timestamp: str


@dataclass(frozen=True)
class TextLine:
    """Plain rendering unit: one line of message content."""

    text: str


RenderingUnit = Union[Embed, TextLine]


@dataclass(frozen=True)
class SubscriberEndpoint:
    url: str


@dataclass(frozen=True)
class WebhookResponse:
    """Status and headers of one webhook delivery attempt."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""

        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
