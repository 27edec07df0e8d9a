"""Validation helpers for config editing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit


@dataclass
class WebhookUrlInfo:
    normalized: str | None
    host: str | None
    error: str | None = None


def parse_webhook_url(raw_value: str) -> WebhookUrlInfo:
    raw_value = raw_value.strip()
    if not raw_value:
        return WebhookUrlInfo(None, None, "url is required")

    parts = urlsplit(raw_value)
    if parts.scheme not in {"http", "https"}:
        return WebhookUrlInfo(None, None, "url must start with http:// or https://")
    if not parts.netloc:
        return WebhookUrlInfo(None, None, "url is missing a host")
    if parts.scheme == "http" and parts.hostname not in {"localhost", "127.0.0.1"}:
        return WebhookUrlInfo(None, parts.hostname, "use https for remote webhooks")
    if not parts.path.strip("/"):
        return WebhookUrlInfo(None, parts.hostname, "url is missing the webhook path")

    normalized = parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower()).geturl()
    return WebhookUrlInfo(normalized, parts.hostname)


def parse_positive_number(raw_value: str, *, integer: bool = False, maximum: Optional[float] = None):
    """Return (value, error) for a positive number typed into a form field."""

    raw_value = raw_value.strip()
    if not raw_value:
        return None, "value is required"
    try:
        value = int(raw_value) if integer else float(raw_value)
    except ValueError:
        return None, "must be a whole number" if integer else "must be a number"
    if value <= 0:
        return None, "must be greater than 0"
    if maximum is not None and value > maximum:
        return None, f"must be at most {maximum:g}"
    return value, None
