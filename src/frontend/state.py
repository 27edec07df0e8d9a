"""In-memory config.json state for the config panel.

The watcher's endpoint listener re-reads config.json while running, so saves
go through a sibling temp file and are refused when the edited values would
not load back into the watcher's settings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from adapters.notification_formatting import FORMAT_MODES
from core.config import MAX_BATCH_SIZE
from core.dispatcher import FAN_OUT_MODES


@dataclass
class ConfigState:
    data: dict[str, Any] | None = None
    dirty: bool = False
    error: str | None = None

    def loaded(self, data: dict[str, Any]) -> None:
        self.data = data
        self.dirty = False
        self.error = None

    def failed(self, error: str) -> None:
        self.data = None
        self.dirty = False
        self.error = error

    def load(self, path: Path) -> None:
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self.failed(f"{path.name} missing")
            return
        except json.JSONDecodeError as exc:
            self.failed(f"{path.name} error: {exc.msg}")
            return
        if not isinstance(loaded, dict):
            self.failed("config root must be an object")
            return
        self.loaded(loaded)

    def save(self, path: Path) -> bool:
        if self.data is None:
            self.error = "nothing to save"
            return False
        problems = self.validate()
        if problems:
            self.error = problems[0]
            return False
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(json.dumps(self.data, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            self.error = f"save failed: {exc.strerror or exc}"
            return False
        self.dirty = False
        self.error = None
        return True

    def update_section(self, section: str, value: Any) -> None:
        if self.data is None:
            self.data = {}
        self.data[section] = value
        self.dirty = True
        self.error = None

    def validate(self) -> list[str]:
        """Return problems that would stop the watcher from starting."""

        data = self.data or {}
        problems = []
        batch_size = (data.get("watch") or {}).get("batch_size", MAX_BATCH_SIZE)
        if not isinstance(batch_size, int) or not 1 <= batch_size <= MAX_BATCH_SIZE:
            problems.append(f"watch.batch_size must be 1..{MAX_BATCH_SIZE}")
        dispatch = data.get("dispatch") or {}
        if dispatch.get("format", "embeds") not in FORMAT_MODES:
            problems.append("dispatch.format must be embeds or text")
        if dispatch.get("fan_out", "sequential") not in FAN_OUT_MODES:
            problems.append("dispatch.fan_out must be sequential or concurrent")
        return problems

    def endpoint_urls(self) -> list[str]:
        """Seed URLs currently in the edited config, enabled or not."""

        if not self.data:
            return []
        endpoints = self.data.get("endpoints")
        if not isinstance(endpoints, list):
            return []
        return [
            str(entry.get("url", "")) if isinstance(entry, dict) else str(entry)
            for entry in endpoints
        ]

    def summary(self) -> str:
        """One-line view of what the watcher would run with."""

        data = self.data or {}
        dispatch = data.get("dispatch") or {}
        enabled = [
            entry
            for entry in data.get("endpoints") or []
            if not isinstance(entry, dict) or entry.get("enabled", True)
        ]
        classification = "on" if (data.get("classification") or {}).get("enabled") else "off"
        return (
            f"{len(enabled)} seed endpoint(s), {dispatch.get('format', 'embeds')}, "
            f"{dispatch.get('fan_out', 'sequential')} fan-out, classification {classification}"
        )
