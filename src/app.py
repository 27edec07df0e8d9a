"""Application entry point for the hauntscope watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import httpx
from art import tprint

import settings
from adapters.endpoint_listener import EndpointSeedListener
from adapters.feed_client import FeedClient
from adapters.notification_formatting import build_formatter, build_payload_builder
from adapters.sqlite_storage import SQLiteStorage
from adapters.webhook_client import HttpxWebhookClient
from core.dispatcher import Dispatcher
from core.supervisor import run_until_first_exit
from core.watcher import WatchLoop

NAME = "HAUNTSCOPE"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if not value:
            continue
        # WEBHOOK_URL holds several URLs; each one is a credential on its own.
        values.extend(part.strip() for part in value.split(",") if part.strip())
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/hauntscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


async def _watch(storage: SQLiteStorage) -> None:
    """Wire adapters into the watch loop and race it against the seed listener."""

    listener = EndpointSeedListener(
        storage,
        settings.load_seed_urls,
        poll_interval=settings.ENDPOINT_SYNC_SECONDS,
    )
    # Seed once up front so the first poll already has its subscribers.
    listener.sync()
    LOGGER.info("%s endpoint(s) registered", len(storage.list_endpoints()))

    async with httpx.AsyncClient() as client:
        classification = settings.CLASSIFICATION
        source = FeedClient(client, settings.FEED, cutoff=classification.cutoff)
        dispatcher = Dispatcher(
            storage=storage,
            webhook=HttpxWebhookClient(client, timeout=settings.DISPATCH.timeout_seconds),
            payload_builder=build_payload_builder(settings.DISPATCH.avatar_url),
            fan_out=settings.DISPATCH.fan_out,
            # Plain-text deliveries must report their rate limit budget.
            require_remaining_header=settings.DISPATCH.format == "text",
        )
        loop = WatchLoop(
            storage=storage,
            source=source,
            dispatcher=dispatcher,
            formatter=build_formatter(settings.DISPATCH.format),
            config=settings.WATCH,
            origin_labels=classification.labels if classification.enabled else None,
        )
        LOGGER.info(
            "Watching feed every %ss (format=%s, fan_out=%s)",
            settings.WATCH.poll_interval_seconds,
            settings.DISPATCH.format,
            settings.DISPATCH.fan_out,
        )
        await run_until_first_exit(watcher=loop.run(), endpoint_listener=listener.run())


def _run() -> None:
    _print_banner()
    _configure_logging()

    LOGGER.info("Starting hauntscope")

    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()

    try:
        asyncio.run(_watch(storage))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted, shutting down")
    except Exception:
        LOGGER.exception("Watcher stopped with a fatal error")
        raise SystemExit(1)


def _setup() -> None:
    _print_banner()
    from frontend.app import ConfigPanelApp

    ConfigPanelApp().run()


def _list_endpoints() -> None:
    _print_banner()
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()

    endpoints = storage.list_endpoints()
    if not endpoints:
        print("No endpoints registered. Add one with `hauntscope config` or WEBHOOK_URL.")
    for index, endpoint in enumerate(endpoints, start=1):
        print(f"{index}. {_mask_url(endpoint.url)}")
    print(f"{storage.count_dispatched()} events dispatched so far.")


def _mask_url(url: str) -> str:
    # Webhook URLs end in a token; show only enough to tell them apart.
    head, sep, token = url.rpartition("/")
    if not sep or len(token) <= 6:
        return url
    return f"{head}/{token[:6]}***"


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="hauntscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the watcher")
    subparsers.add_parser("config", help="Launch the config TUI")
    subparsers.add_parser("endpoints", help="List subscriber endpoints in the store")

    args = parser.parse_args(argv)
    if args.command == "config":
        _setup()
        return
    if args.command == "endpoints":
        _list_endpoints()
        return
    _run()


if __name__ == "__main__":
    main()
