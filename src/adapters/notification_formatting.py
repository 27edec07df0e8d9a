"""Shared notification formatting helpers.

Keeping formatting here prevents drift between delivery styles and keeps
notifications bounded regardless of how long a feed description gets.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from core.models import Embed, Event, RenderingUnit, TextLine

# Webhook receivers reject embed titles over 256 characters.
EMBED_TITLE_LIMIT = 256
# Ten lines plus separators must stay under the 2000 character content limit.
TEXT_LINE_LIMIT = 190

FORMAT_MODES = ("embeds", "text")


def _clip(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - 1].rstrip() + "…"


def format_game_day(event: Event) -> str:
    """Return the human-facing "Season S Day D" label (feed numbers are 0-based)."""

    return f"Season {event.season + 1} Day {event.day + 1}"


def format_embed(event: Event) -> Embed:
    """Render an event as an embed with title, footer and timestamp."""

    footer = format_game_day(event)
    if event.origin_tag:
        footer = f"{footer} | {event.origin_tag}"
    return Embed(
        title=_clip(event.description, EMBED_TITLE_LIMIT),
        footer_text=footer,
        timestamp=event.created,
    )


def format_text(event: Event) -> TextLine:
    """Render an event as a single line of message content."""

    label = format_game_day(event)
    if event.origin_tag:
        label = f"{label}, {event.origin_tag}"
    return TextLine(text=_clip(f"{event.description} ({label})", TEXT_LINE_LIMIT))


def build_formatter(mode: str) -> Callable[[Event], RenderingUnit]:
    """Return the formatter for the requested delivery mode."""

    if mode == "embeds":
        return format_embed
    if mode == "text":
        return format_text
    raise ValueError(f"Unsupported notification format: {mode}")


def build_payload(units: Sequence[RenderingUnit], avatar_url: Optional[str] = None) -> dict[str, Any]:
    """Serialize a batch into the webhook JSON body.

    Embeds become ``{"embeds": [...]}``; text lines are joined into one
    ``content`` string. A batch must not mix the two.
    """

    if all(isinstance(unit, Embed) for unit in units):
        return {
            "embeds": [
                {
                    "title": unit.title,
                    "footer": {"text": unit.footer_text},
                    "timestamp": unit.timestamp,
                }
                for unit in units
            ]
        }
    if all(isinstance(unit, TextLine) for unit in units):
        payload: dict[str, Any] = {"content": "\n".join(unit.text for unit in units)}
        if avatar_url:
            payload["avatar_url"] = avatar_url
        return payload
    raise ValueError("Cannot mix embeds and text lines in one batch")


def build_payload_builder(avatar_url: Optional[str]) -> Callable[[Sequence[RenderingUnit]], dict[str, Any]]:
    def builder(units: Sequence[RenderingUnit]) -> dict[str, Any]:
        return build_payload(units, avatar_url)

    return builder
