from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from adapters.feed_client import FeedClient
from core.config import FeedConfig
from core.errors import FetchError
from core.models import OriginCategory

EVENTS_URL = "https://feed.test/events"
ACTORS_URL = "https://feed.test/actors"

CONFIG = FeedConfig(events_url=EVENTS_URL, actors_url=ACTORS_URL)

RAW_EVENT = {
    "id": "e2",
    "description": "A ghost inhabits Jaylen Hotdogfingers.",
    "created": "2021-04-05T16:00:00Z",
    "season": 13,
    "day": 40,
    "playerTags": ["p1"],
    "metadata": {"mod": "INHABITING"},
}

ACTORS = {
    "actor-a": [{"firstSeen": "2021-04-01T00:00:00Z", "data": {"deceased": True}}],
    "actor-b": [{"firstSeen": "2021-04-01T00:00:00Z", "data": {"deceased": False}}],
    "actor-c": [],
}


def _run(handler, action):
    async def scenario():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as client:
            feed = FeedClient(client, CONFIG, cutoff=datetime(2021, 3, 1, tzinfo=timezone.utc))
            return await action(feed)

    return asyncio.run(scenario())


def test_fetch_events_sends_feed_query_and_maps_events() -> None:
    seen_params = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_params.update(dict(request.url.params))
        return httpx.Response(200, json=[RAW_EVENT])

    since = datetime(2021, 4, 5, 10, 0, tzinfo=timezone.utc)
    events = _run(handler, lambda feed: feed.fetch_events(since))

    assert seen_params == {
        "limit": "100",
        "sortorder": "desc",
        "sortby": "{created}",
        "type": "106",
        "metadata.mod": "INHABITING",
        "after": since.isoformat(),
    }
    assert len(events) == 1
    event = events[0]
    assert event.id == "e2"
    assert event.season == 13
    assert event.actor_ids == ("p1",)
    assert event.origin_tag is None


def test_fetch_events_without_since_omits_after() -> None:
    seen_params = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_params.update(dict(request.url.params))
        return httpx.Response(200, json=[])

    assert _run(handler, lambda feed: feed.fetch_events()) == []
    assert "after" not in seen_params


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(502, text="bad gateway"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"events": []}),
        httpx.Response(200, json=[{"id": "e1"}]),
    ],
)
def test_fetch_events_failures_become_fetch_error(response: httpx.Response) -> None:
    with pytest.raises(FetchError):
        _run(lambda request: response, lambda feed: feed.fetch_events())


def test_network_failure_becomes_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError):
        _run(handler, lambda feed: feed.fetch_events())


def _actor_handler(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    assert params["order"] == "asc"
    assert params["limit"] == "1"
    return httpx.Response(200, json={"data": ACTORS[params["player"]]})


@pytest.mark.parametrize(
    ("actor_id", "expected"),
    [
        ("actor-a", OriginCategory.CATEGORY_A),
        ("actor-b", OriginCategory.CATEGORY_B),
        ("actor-c", OriginCategory.UNKNOWN),
    ],
)
def test_classify_origin(actor_id: str, expected: OriginCategory) -> None:
    assert _run(_actor_handler, lambda feed: feed.classify_origin(actor_id)) == expected


def test_malformed_actor_record_becomes_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"data": {"deceased": True}}]})

    with pytest.raises(FetchError):
        _run(handler, lambda feed: feed.classify_origin("actor-a"))


def test_first_seen_without_offset_is_read_as_utc() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"data": [{"firstSeen": "2021-04-01T00:00:00", "data": {"deceased": True}}]}
        )

    record = _run(handler, lambda feed: feed.oldest_record("p1"))

    assert record.first_seen == datetime(2021, 4, 1, tzinfo=timezone.utc)
    assert _run(handler, lambda feed: feed.classify_origin("p1")) == OriginCategory.CATEGORY_A
