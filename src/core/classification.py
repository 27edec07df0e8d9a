"""Origin classification for event actors (core domain)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional

from core.models import ActorRecord, OriginCategory

# Actors first seen after this moment belong to the expansion era.
DEFAULT_CUTOFF = datetime(2021, 3, 1, tzinfo=timezone.utc)

DEFAULT_LABELS: Mapping[OriginCategory, str] = {
    OriginCategory.CATEGORY_A: "Ultra League Blaseball",
    OriginCategory.CATEGORY_B: "Internet League Blaseball",
    OriginCategory.UNKNOWN: "Unknown",
}


def classify_actor(record: Optional[ActorRecord], cutoff: datetime = DEFAULT_CUTOFF) -> OriginCategory:
    """Return the origin category for an actor's earliest record.

    - No record: UNKNOWN.
    - First seen strictly after ``cutoff`` and flagged deceased: CATEGORY_A.
    - Any other record: CATEGORY_B.
    """

    if record is None:
        return OriginCategory.UNKNOWN
    if record.deceased and record.first_seen > cutoff:
        return OriginCategory.CATEGORY_A
    return OriginCategory.CATEGORY_B
