"""Settings tab implementation."""

from __future__ import annotations

from typing import Any, Optional

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import ContentSwitcher, DataTable, Input, Select, Static, Switch

from ..validators import parse_positive_number


class SettingsTab(Container):
    """Settings tab for editing watch cadence, delivery, classification, and logging."""

    FAN_OUT_MODES = ["sequential", "concurrent"]
    FORMATS = ["embeds", "text"]
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

    SECTION_LABELS = [
        ("watch", "Watch", "Poll cadence, backoff, batching"),
        ("dispatch", "Dispatch", "Webhook format and fan-out"),
        ("classification", "Classification", "Origin lookup per event"),
        ("logging", "Logging", "Console logging level"),
    ]

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._loading_form = False
        self._table_ready = False

    def compose(self):
        with Vertical(id="settings-panel"):
            with Horizontal(id="settings-body"):
                with Container(id="settings-left"):
                    yield DataTable(id="settings-table", cursor_type="row")
                with Container(id="settings-right"):
                    with ContentSwitcher(id="settings-forms"):
                        with Container(id="settings-watch"):
                            yield Static("Watch", classes="settings-title")
                            yield Static("poll_interval_seconds", classes="form-label")
                            yield Input(placeholder="5", id="watch-poll")
                            yield Static("error_backoff_seconds", classes="form-label")
                            yield Input(placeholder="30", id="watch-backoff")
                            yield Static("batch_size (1-10)", classes="form-label")
                            yield Input(placeholder="10", id="watch-batch")
                            yield Static("", id="watch-error", classes="settings-error")

                        with Container(id="settings-dispatch"):
                            yield Static("Dispatch", classes="settings-title")
                            yield Static("format", classes="form-label")
                            yield Select(
                                [(mode, mode) for mode in self.FORMATS],
                                id="dispatch-format",
                                allow_blank=False,
                            )
                            yield Static("fan_out", classes="form-label")
                            yield Select(
                                [(mode, mode) for mode in self.FAN_OUT_MODES],
                                id="dispatch-fan-out",
                                allow_blank=False,
                            )
                            yield Static("avatar_url (text format only)", classes="form-label")
                            yield Input(placeholder="https://...", id="dispatch-avatar")
                            yield Static("", id="dispatch-error", classes="settings-error")

                        with Container(id="settings-classification"):
                            yield Static("Classification", classes="settings-title")
                            yield Static("enabled", classes="form-label")
                            yield Switch(id="classification-enabled")
                            yield Static("cutoff (ISO-8601 with offset)", classes="form-label")
                            yield Input(placeholder="2021-03-01T00:00:00+00:00", id="classification-cutoff")
                            yield Static("", id="classification-error", classes="settings-error")

                        with Container(id="settings-logging"):
                            yield Static("Logging", classes="settings-title")
                            yield Static("enabled", classes="form-label")
                            yield Switch(id="logging-enabled")
                            yield Static("level", classes="form-label")
                            yield Select(
                                [(level, level) for level in self.LOG_LEVELS],
                                id="logging-level",
                                allow_blank=False,
                            )
                            yield Static("", id="logging-error", classes="settings-error")

    def on_mount(self) -> None:
        table = self.query_one("#settings-table", DataTable)
        table.add_column("section", key="section", width=18)
        table.add_column("description", key="description", width=34)
        for key, label, description in self.SECTION_LABELS:
            table.add_row(label, description, key=key)
        table.zebra_stripes = True
        self._table_ready = True
        self._select_section("watch")
        self.reload_from_config()

    def reload_from_config(self) -> None:
        if not self._table_ready:
            return
        self._loading_form = True
        self._load_watch()
        self._load_dispatch()
        self._load_classification()
        self._load_logging()
        self._loading_form = False

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._select_section(self._coerce_row_key(event.row_key))

    def _select_section(self, section_id: str) -> None:
        switcher = self.query_one("#settings-forms", ContentSwitcher)
        switcher.current = f"settings-{section_id}"

    def _get_section(self, key: str) -> dict[str, Any]:
        data = self.app.config_state.data or {}
        section = data.get(key)
        if isinstance(section, dict):
            return section
        return {}

    def _update_section(self, key: str, section: dict[str, Any]) -> None:
        self.app.update_config_section(key, section)

    def _load_watch(self) -> None:
        watch = self._get_section("watch")
        self.query_one("#watch-poll", Input).value = str(watch.get("poll_interval_seconds", 5))
        self.query_one("#watch-backoff", Input).value = str(watch.get("error_backoff_seconds", 30))
        self.query_one("#watch-batch", Input).value = str(watch.get("batch_size", 10))
        self._set_error("watch-error", "")

    def _load_dispatch(self) -> None:
        dispatch = self._get_section("dispatch")
        self._set_select_value("#dispatch-format", dispatch.get("format", "embeds"), self.FORMATS, "dispatch-error")
        self._set_select_value(
            "#dispatch-fan-out",
            dispatch.get("fan_out", "sequential"),
            self.FAN_OUT_MODES,
            "dispatch-error",
        )
        self.query_one("#dispatch-avatar", Input).value = dispatch.get("avatar_url") or ""

    def _load_classification(self) -> None:
        classification = self._get_section("classification")
        self.query_one("#classification-enabled", Switch).value = bool(classification.get("enabled", False))
        self.query_one("#classification-cutoff", Input).value = str(classification.get("cutoff", ""))
        self._set_error("classification-error", "")

    def _load_logging(self) -> None:
        logging = self._get_section("logging")
        self.query_one("#logging-enabled", Switch).value = bool(logging.get("enabled", False))
        self._set_select_value("#logging-level", logging.get("level", "INFO"), self.LOG_LEVELS, "logging-error")

    def _set_select_value(self, selector: str, value: str, allowed: list[str], error_id: str) -> None:
        select = self.query_one(selector, Select)
        if value in allowed:
            select.value = value
            self._set_error(error_id, "")
        else:
            select.value = allowed[0]
            self._set_error(error_id, f"Invalid value: {value}")

    def _set_error(self, error_id: str, message: str) -> None:
        self.query_one(f"#{error_id}", Static).update(message)

    @on(Input.Changed, "#watch-poll")
    def _on_watch_poll(self, event: Input.Changed) -> None:
        self._update_number("watch", "poll_interval_seconds", event.value)

    @on(Input.Changed, "#watch-backoff")
    def _on_watch_backoff(self, event: Input.Changed) -> None:
        self._update_number("watch", "error_backoff_seconds", event.value)

    @on(Input.Changed, "#watch-batch")
    def _on_watch_batch(self, event: Input.Changed) -> None:
        self._update_number("watch", "batch_size", event.value, integer=True, maximum=10)

    @on(Select.Changed, "#dispatch-format")
    def _on_dispatch_format(self, event: Select.Changed) -> None:
        self._update_select("dispatch", "format", event)

    @on(Select.Changed, "#dispatch-fan-out")
    def _on_dispatch_fan_out(self, event: Select.Changed) -> None:
        self._update_select("dispatch", "fan_out", event)

    @on(Input.Changed, "#dispatch-avatar")
    def _on_dispatch_avatar(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        dispatch = self._get_section("dispatch")
        dispatch["avatar_url"] = event.value.strip() or None
        self._update_section("dispatch", dispatch)

    @on(Switch.Changed, "#classification-enabled")
    def _on_classification_enabled(self, event: Switch.Changed) -> None:
        if self._loading_form:
            return
        classification = self._get_section("classification")
        classification["enabled"] = bool(event.value)
        self._update_section("classification", classification)

    @on(Input.Changed, "#classification-cutoff")
    def _on_classification_cutoff(self, event: Input.Changed) -> None:
        if self._loading_form:
            return
        value = event.value.strip()
        if "+" not in value[10:] and not value.endswith("Z"):
            self._set_error("classification-error", "cutoff needs a UTC offset, e.g. +00:00")
            return
        self._set_error("classification-error", "")
        classification = self._get_section("classification")
        classification["cutoff"] = value
        self._update_section("classification", classification)

    @on(Switch.Changed, "#logging-enabled")
    def _on_logging_enabled(self, event: Switch.Changed) -> None:
        if self._loading_form:
            return
        logging = self._get_section("logging")
        logging["enabled"] = bool(event.value)
        self._update_section("logging", logging)

    @on(Select.Changed, "#logging-level")
    def _on_logging_level(self, event: Select.Changed) -> None:
        self._update_select("logging", "level", event)

    def _update_select(self, section: str, key: str, event: Select.Changed) -> None:
        if self._loading_form or event.value is Select.BLANK:
            return
        config = self._get_section(section)
        config[key] = event.value
        self._update_section(section, config)

    def _update_number(
        self,
        section: str,
        key: str,
        value: str,
        *,
        integer: bool = False,
        maximum: Optional[float] = None,
    ) -> None:
        if self._loading_form:
            return
        parsed, error = parse_positive_number(value, integer=integer, maximum=maximum)
        self._set_error(f"{section}-error", error or "")
        if parsed is None:
            return
        config = self._get_section(section)
        config[key] = parsed
        self._update_section(section, config)

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)
