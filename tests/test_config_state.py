from __future__ import annotations

import json

from frontend.state import ConfigState

CONFIG = {
    "watch": {"poll_interval_seconds": 5, "batch_size": 10},
    "dispatch": {"format": "embeds", "fan_out": "sequential"},
    "classification": {"enabled": True},
    "endpoints": [
        "https://hooks.test/a",
        {"url": "https://hooks.test/b", "enabled": False},
        {"url": "https://hooks.test/c"},
    ],
}


def test_load_reports_missing_and_broken_files(tmp_path) -> None:
    state = ConfigState()
    path = tmp_path / "config.json"

    state.load(path)
    assert state.data is None
    assert state.error == "config.json missing"

    path.write_text("{not json", encoding="utf-8")
    state.load(path)
    assert state.error.startswith("config.json error:")

    path.write_text("[]", encoding="utf-8")
    state.load(path)
    assert state.error == "config root must be an object"


def test_save_writes_edits_and_clears_dirty(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG), encoding="utf-8")
    state = ConfigState()
    state.load(path)

    state.update_section("dispatch", {"format": "text", "fan_out": "concurrent"})
    assert state.dirty

    assert state.save(path)
    assert not state.dirty
    assert json.loads(path.read_text(encoding="utf-8"))["dispatch"]["format"] == "text"
    assert not (tmp_path / "config.json.tmp").exists()


def test_save_is_refused_for_values_the_watcher_rejects(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG), encoding="utf-8")
    state = ConfigState()
    state.load(path)

    state.update_section("watch", {"batch_size": 25})

    assert not state.save(path)
    assert state.error == "watch.batch_size must be 1..10"
    assert state.dirty
    assert json.loads(path.read_text(encoding="utf-8"))["watch"]["batch_size"] == 10


def test_validate_flags_unknown_delivery_modes() -> None:
    state = ConfigState()
    state.loaded({"dispatch": {"format": "html", "fan_out": "broadcast"}})

    assert state.validate() == [
        "dispatch.format must be embeds or text",
        "dispatch.fan_out must be sequential or concurrent",
    ]


def test_summary_counts_enabled_seeds_only() -> None:
    state = ConfigState()
    state.loaded(dict(CONFIG))

    assert state.summary() == "2 seed endpoint(s), embeds, sequential fan-out, classification on"
