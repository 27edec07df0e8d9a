"""Endpoints tab implementation."""

from __future__ import annotations

from typing import Any, Optional

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static, Switch

from ..modals import AddEndpointScreen, ConfirmScreen
from ..validators import parse_webhook_url


def mask_webhook_url(url: str) -> str:
    """Hide the token part of a webhook URL for on-screen display."""

    head, sep, token = url.rpartition("/")
    if not sep or len(token) <= 6:
        return url
    return f"{head}/{token[:6]}***"


class EndpointsTab(Container):
    """Endpoints tab for editing config.endpoints (seed webhook URLs)."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._loading_form = False
        self._current_row_key: Optional[str] = None
        self._table_ready = False

    def compose(self):
        with Vertical(id="endpoints-panel"):
            with Horizontal(id="endpoints-body"):
                with Container(id="endpoints-left"):
                    yield DataTable(id="endpoints-table", cursor_type="row")
                with Container(id="endpoints-right"):
                    yield Static("Endpoint details", id="endpoints-title")
                    yield Static("url", classes="form-label")
                    yield Static("", id="endpoint-url")
                    yield Static("host", classes="form-label")
                    yield Static("", id="endpoint-host")
                    yield Static("enabled", classes="form-label")
                    yield Switch(value=False, id="endpoint-enabled")
                    yield Static("", id="endpoint-error")
            with Horizontal(id="endpoints-actions"):
                yield Button("Add", id="add-endpoint", variant="success")
                yield Button("Delete", id="delete-endpoint", variant="error")

    def on_mount(self) -> None:
        table = self.query_one("#endpoints-table", DataTable)
        table.add_column("enabled", key="enabled", width=8)
        table.add_column("url", key="url", width=56)
        table.zebra_stripes = True
        self._table_ready = True
        self.reload_from_config()
        self._set_form_state(None)

    def reload_from_config(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#endpoints-table", DataTable)
        table.clear()
        for index, endpoint in enumerate(self._get_endpoints()):
            table.add_row(
                "yes" if endpoint.get("enabled", True) else "no",
                mask_webhook_url(str(endpoint.get("url", ""))),
                key=str(index),
            )
        self._update_action_state()

    def _get_endpoints(self) -> list[dict[str, Any]]:
        data = self.app.config_state.data or {}
        endpoints = data.get("endpoints")
        if not isinstance(endpoints, list):
            return []
        # Bare strings are accepted in config.json; normalise them for editing.
        return [entry if isinstance(entry, dict) else {"url": str(entry)} for entry in endpoints]

    def _set_endpoints(self, endpoints: list[dict[str, Any]]) -> None:
        self.app.update_config_section("endpoints", endpoints)

    def _update_action_state(self) -> None:
        delete_btn = self.query_one("#delete-endpoint", Button)
        delete_btn.disabled = self._current_row_key is None

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._current_row_key = self._coerce_row_key(event.row_key)
        self._set_form_state(self._current_row_key)
        self._update_action_state()

    @on(Switch.Changed, "#endpoint-enabled")
    def _on_enabled_changed(self, event: Switch.Changed) -> None:
        if self._loading_form:
            return
        index = self._current_index()
        endpoints = self._get_endpoints()
        if index is None or index >= len(endpoints):
            return
        endpoints[index]["enabled"] = bool(event.value)
        self._set_endpoints(endpoints)
        self.query_one("#endpoints-table", DataTable).update_cell(
            str(index), "enabled", "yes" if event.value else "no"
        )

    @on(Button.Pressed, "#add-endpoint")
    def _on_add_endpoint(self) -> None:
        existing = set(self.app.config_state.endpoint_urls())
        self.app.push_screen(AddEndpointScreen(existing), self._handle_add_endpoint)

    @on(Button.Pressed, "#delete-endpoint")
    def _on_delete_endpoint(self) -> None:
        index = self._current_index()
        endpoints = self._get_endpoints()
        if index is None or index >= len(endpoints):
            return
        label = mask_webhook_url(str(endpoints[index].get("url", "")))
        screen = ConfirmScreen("Delete endpoint?", f"{label}\nAlready stored endpoints stay in the store.", "Delete")
        self.app.push_screen(screen, self._handle_delete_endpoint)

    def _handle_add_endpoint(self, payload: dict[str, Any] | None) -> None:
        if not payload:
            return
        endpoints = self._get_endpoints()
        endpoints.append(payload)
        self._set_endpoints(endpoints)
        self.reload_from_config()

    def _handle_delete_endpoint(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        index = self._current_index()
        endpoints = self._get_endpoints()
        if index is None or index >= len(endpoints):
            return
        endpoints.pop(index)
        self._set_endpoints(endpoints)
        self._current_row_key = None
        self.reload_from_config()
        self._set_form_state(None)

    def _set_form_state(self, row_key: Optional[str]) -> None:
        self._loading_form = True
        url_display = self.query_one("#endpoint-url", Static)
        host_display = self.query_one("#endpoint-host", Static)
        enabled_toggle = self.query_one("#endpoint-enabled", Switch)
        error = self.query_one("#endpoint-error", Static)
        error.update("")
        endpoints = self._get_endpoints()
        if row_key is None or int(row_key) >= len(endpoints):
            url_display.update("")
            host_display.update("")
            enabled_toggle.value = False
            enabled_toggle.disabled = True
        else:
            endpoint = endpoints[int(row_key)]
            url = str(endpoint.get("url", ""))
            info = parse_webhook_url(url)
            url_display.update(mask_webhook_url(url))
            host_display.update(info.host or "")
            error.update(info.error or "")
            enabled_toggle.value = bool(endpoint.get("enabled", True))
            enabled_toggle.disabled = False
        self._loading_form = False

    def _current_index(self) -> Optional[int]:
        if self._current_row_key is None:
            return None
        try:
            return int(self._current_row_key)
        except ValueError:
            return None

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)
