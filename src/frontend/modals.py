"""Modal dialogs for the config panel."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static, Switch

from .validators import parse_webhook_url


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no prompt; dismisses with True only on the confirm button."""

    def __init__(self, title: str, body: str, confirm_label: str) -> None:
        super().__init__()
        self._title = title
        self._body = body
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self._title, classes="modal-title"),
            Static(self._body, classes="modal-body"),
            Horizontal(
                Button(self._confirm_label, id="confirm", variant="error"),
                Button("Cancel", id="cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")


class AddEndpointScreen(ModalScreen[dict[str, Any] | None]):
    """Form for a new seed webhook; rejects invalid and duplicate URLs."""

    def __init__(self, existing_urls: set[str]) -> None:
        super().__init__()
        self._existing_urls = existing_urls

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Add endpoint", classes="modal-title"),
            Static("", id="add-error", classes="modal-error"),
            Static("url", classes="form-label"),
            Input(placeholder="https://discord.com/api/webhooks/<id>/<token>", id="add-url"),
            Static("enabled", classes="form-label"),
            Switch(value=True, id="add-enabled"),
            Horizontal(
                Button("Add", id="add-confirm", variant="success"),
                Button("Cancel", id="add-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add-cancel":
            self.dismiss(None)
            return
        info = parse_webhook_url(self.query_one("#add-url", Input).value)
        error = self.query_one("#add-error", Static)
        if info.error or info.normalized is None:
            error.update(info.error or "invalid url")
        elif info.normalized in self._existing_urls:
            error.update("endpoint already configured")
        else:
            enabled = self.query_one("#add-enabled", Switch).value
            self.dismiss({"url": info.normalized, "enabled": bool(enabled)})
