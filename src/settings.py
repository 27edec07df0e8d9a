"""Static configuration for hauntscope.

All user-editable settings (feed, watch cadence, delivery, seed endpoints,
logging) live in a single JSON file for quick edits without touching Python.
Secrets such as webhook URLs can also come from the environment via .env.
"""

import json
import os
from datetime import datetime

from dotenv import load_dotenv

from core.classification import DEFAULT_CUTOFF, DEFAULT_LABELS
from core.config import ClassificationConfig, DispatchConfig, FeedConfig, WatchConfig
from core.models import OriginCategory

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

# Where to store the SQLite database.
DB_PATH = os.getenv("DB_PATH") or os.path.join(os.path.dirname(__file__), "hauntscope.db")

# Everything else is loaded from config.json so users can tune cadence and
# delivery, and manage seed endpoints, without editing code.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _enabled_endpoint_urls(raw_endpoints: list) -> list[str]:
    urls = []
    for entry in raw_endpoints:
        if isinstance(entry, str):
            entry = {"url": entry}
        url = (entry.get("url") or "").strip()
        if not url or not entry.get("enabled", True):
            continue
        urls.append(url)
    return urls


def _env_webhook_urls() -> list[str]:
    raw = os.getenv("WEBHOOK_URL", "")
    return [url.strip() for url in raw.split(",") if url.strip()]


def load_seed_urls() -> list[str]:
    """Re-read config.json and the environment for seed webhook URLs.

    Called repeatedly by the endpoint listener, so it must not rely on the
    module-level snapshot below.
    """

    config = _load_json_config()
    return _env_webhook_urls() + _enabled_endpoint_urls(config.get("endpoints", []))


def _parse_cutoff(raw) -> datetime:
    if not raw:
        return DEFAULT_CUTOFF
    cutoff = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if cutoff.tzinfo is None:
        raise ValueError("classification.cutoff must include a UTC offset")
    return cutoff


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Feed endpoints and query shape.
_feed = _CONFIG.get("feed", {})
FEED = FeedConfig(
    events_url=_feed.get("events_url", "https://api.sibr.dev/eventually/v2/events"),
    actors_url=_feed.get("actors_url", "https://api.sibr.dev/chronicler/v1/players/updates"),
    limit=int(_feed.get("limit", 100)),
    event_type=int(_feed.get("event_type", 106)),
    modification=_feed.get("modification", "INHABITING"),
    timeout_seconds=float(_feed.get("timeout_seconds", 15.0)),
)

# Watch cadence:
# - poll_interval_seconds: sleep between successful polls
# - error_backoff_seconds: sleep after a failed feed fetch
# - batch_size: notifications per webhook message (max 10)
# - lookback_hours: how far before the previous poll to ask the feed for
_watch = _CONFIG.get("watch", {})
WATCH = WatchConfig(
    poll_interval_seconds=float(_watch.get("poll_interval_seconds", 5)),
    error_backoff_seconds=float(_watch.get("error_backoff_seconds", 30)),
    batch_size=int(_watch.get("batch_size", 10)),
    lookback_hours=float(_feed.get("lookback_hours", 6)),
)

# Delivery style and fan-out discipline switch behaviour without code edits.
_dispatch = _CONFIG.get("dispatch", {})
DISPATCH = DispatchConfig(
    fan_out=_dispatch.get("fan_out", "sequential"),
    format=_dispatch.get("format", "embeds"),
    avatar_url=_dispatch.get("avatar_url"),
    timeout_seconds=float(_dispatch.get("timeout_seconds", 10.0)),
)

# Origin classification is an extra lookup per new event, so it is opt-in.
_classification = _CONFIG.get("classification", {})
_labels = _classification.get("labels", {})
CLASSIFICATION = ClassificationConfig(
    enabled=bool(_classification.get("enabled", False)),
    cutoff=_parse_cutoff(_classification.get("cutoff")),
    labels={
        category: _labels.get(category.value, DEFAULT_LABELS[category])
        for category in OriginCategory
    },
)

# Seconds between re-reads of config.json by the endpoint listener.
ENDPOINT_SYNC_SECONDS = float(_CONFIG.get("endpoint_sync_seconds", 10))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
