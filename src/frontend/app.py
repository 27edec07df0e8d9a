"""Textual config panel for editing config.json next to a running watcher."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Footer, Static, TabbedContent, TabPane

from .constants import CONFIG_PATH, SPECTRAL_GREEN
from .modals import ConfirmScreen
from .state import ConfigState
from .tabs.endpoints import EndpointsTab
from .tabs.settings import SettingsTab


class ConfigPanelApp(App):
    """Endpoints and Settings tabs over a single ConfigState."""

    BINDINGS = [
        ("ctrl+s", "save_config", "Save"),
        ("q", "request_quit", "Quit"),
    ]

    CSS_PATH = "app.tcss"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.config_state = ConfigState()

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            yield Static(Text.assemble(("HAUNT", SPECTRAL_GREEN), ("SCOPE config", "bold")), id="title")
            with Horizontal(id="header-row"):
                yield Static("", id="header-status")
                yield Button("Save", id="save-btn")
        with TabbedContent(id="content"):
            with TabPane("Endpoints", id="endpoints"):
                yield EndpointsTab()
            with TabPane("Settings", id="settings"):
                yield SettingsTab()
        yield Footer()

    def on_mount(self) -> None:
        self.config_state.load(CONFIG_PATH)
        self._refresh()
        self.query_one(EndpointsTab).reload_from_config()
        self.query_one(SettingsTab).reload_from_config()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-btn":
            self.action_save_config()

    def action_save_config(self) -> None:
        self.config_state.save(CONFIG_PATH)
        self._refresh()

    def action_request_quit(self) -> None:
        if not self.config_state.dirty:
            self.exit()
            return
        screen = ConfirmScreen("Unsaved changes", f"Quit without saving {CONFIG_PATH.name}?", "Discard")
        self.push_screen(screen, lambda discard: self.exit() if discard else None)

    def update_config_section(self, section: str, value: Any) -> None:
        self.config_state.update_section(section, value)
        self._refresh()

    def _refresh(self) -> None:
        state = self.config_state
        status = self.query_one("#header-status", Static)
        status.set_class(bool(state.error), "status-error")
        status.set_class(state.dirty and not state.error, "status-modified")
        if state.error:
            status.update(state.error)
        else:
            status.update(state.summary() + (" (unsaved)" if state.dirty else ""))
        self.query_one("#save-btn", Button).disabled = state.data is None or not state.dirty
