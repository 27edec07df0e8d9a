from __future__ import annotations

import pytest

from adapters.notification_formatting import (
    EMBED_TITLE_LIMIT,
    TEXT_LINE_LIMIT,
    build_formatter,
    build_payload,
    format_embed,
    format_text,
)
from core.models import Embed, Event, TextLine


def _event(**overrides) -> Event:
    values = dict(
        id="e1",
        description="A ghost inhabits Jaylen Hotdogfingers.",
        created="2021-04-05T16:00:00Z",
        season=13,
        day=40,
    )
    values.update(overrides)
    return Event(**values)


def test_embed_uses_one_based_season_and_day() -> None:
    embed = format_embed(_event())

    assert embed == Embed(
        title="A ghost inhabits Jaylen Hotdogfingers.",
        footer_text="Season 14 Day 41",
        timestamp="2021-04-05T16:00:00Z",
    )


def test_embed_footer_includes_origin_tag() -> None:
    embed = format_embed(_event(origin_tag="Ultra League Blaseball"))

    assert embed.footer_text == "Season 14 Day 41 | Ultra League Blaseball"


def test_long_descriptions_are_clipped() -> None:
    description = "x" * 800

    assert len(format_embed(_event(description=description)).title) == EMBED_TITLE_LIMIT
    assert len(format_text(_event(description=description)).text) == TEXT_LINE_LIMIT


def test_text_line_mentions_game_day() -> None:
    line = format_text(_event(origin_tag="Unknown"))

    assert line == TextLine("A ghost inhabits Jaylen Hotdogfingers. (Season 14 Day 41, Unknown)")


def test_full_text_batch_fits_content_limit() -> None:
    lines = [format_text(_event(description="x" * 500)) for _ in range(10)]

    assert len(build_payload(lines)["content"]) <= 2000


def test_build_formatter_selects_mode() -> None:
    assert build_formatter("embeds") is format_embed
    assert build_formatter("text") is format_text
    with pytest.raises(ValueError):
        build_formatter("markdown")


def test_embed_payload_shape() -> None:
    payload = build_payload([format_embed(_event())])

    assert payload == {
        "embeds": [
            {
                "title": "A ghost inhabits Jaylen Hotdogfingers.",
                "footer": {"text": "Season 14 Day 41"},
                "timestamp": "2021-04-05T16:00:00Z",
            }
        ]
    }


def test_text_payload_omits_unset_avatar() -> None:
    assert build_payload([TextLine("boo")]) == {"content": "boo"}


def test_mixed_batches_are_rejected() -> None:
    with pytest.raises(ValueError):
        build_payload([TextLine("boo"), format_embed(_event())])
