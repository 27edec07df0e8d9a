from __future__ import annotations

import pytest

import app


def test_config_command_opens_the_panel(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(app, "_setup", lambda: calls.append("config"))
    monkeypatch.setattr(app, "_run", lambda: calls.append("run"))

    app.main(["config"])

    assert calls == ["config"]


def test_unknown_commands_are_rejected(monkeypatch) -> None:
    monkeypatch.setattr(app, "_setup", lambda: pytest.fail("config panel opened"))
    monkeypatch.setattr(app, "_run", lambda: pytest.fail("watcher started"))

    with pytest.raises(SystemExit) as excinfo:
        app.main(["setup"])

    assert excinfo.value.code == 2


def test_mask_url_hides_webhook_token() -> None:
    assert app._mask_url("https://hooks.test/123/abcdefghij") == "https://hooks.test/123/abcdef***"
