"""Textual TUI for propscript.

Shows the configured rules and an activity log of processed changes and
script runs. Notices from the engine are shown as toasts and logged.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import DataTable, Footer, Header, RichLog, Static

from propscript.models import DispatchResult, ProcessResult
from textual_propscript.controller import PropscriptController

logger = logging.getLogger(__name__)


class TextualNotifier:
    """Notifier forwarding engine notices to a Textual app."""

    def __init__(self, app: "PropscriptApp"):
        self.app = app

    def info(self, message: str) -> None:
        self.app.post_notice(message, "information")

    def warning(self, message: str) -> None:
        self.app.post_notice(message, "warning")

    def error(self, message: str) -> None:
        self.app.post_notice(message, "error")


class HelpScreen(ModalScreen):
    """Modal help screen listing shortcuts and script variables."""

    BINDINGS = [("escape", "dismiss", "Close")]

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("# Shortcuts", classes="help-header")
            yield Static("  [r] - Reload configuration")
            yield Static("  [p] - Prune snapshots of deleted files")
            yield Static("  [h] - Show this help")
            yield Static("  [q] - Quit application")
            yield Static("")
            yield Static("# Script environment", classes="help-header")
            yield Static("  PROPERTY_NAME  - Name of the edited property")
            yield Static("  PROPERTY_VALUE - New value of the property")
            yield Static("  PREVIOUS_VALUE - Previous value of the property")
            yield Static("  FILE_PATH      - Path to the file (relative to vault)")
            yield Static("  FILE_NAME      - Name of the file")
            yield Static("  VAULT_PATH     - Full path to the vault")
            yield Static("")
            yield Static("Press ESC to close", classes="help-footer")


class PropscriptApp(App):
    """TUI shell around PropscriptController."""

    TITLE = "propscript"
    BINDINGS = [
        Binding("h", "show_help", "Help"),
        Binding("r", "reload_config", "Reload"),
        Binding("p", "prune_snapshots", "Prune"),
        Binding("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #rules-table {
        height: auto;
        max-height: 12;
        border: solid $accent;
    }

    #activity-log {
        height: 1fr;
        border: solid $accent;
    }

    HelpScreen {
        align: center middle;
    }

    HelpScreen > Vertical {
        width: 70;
        height: auto;
        background: $panel;
        border: solid $accent;
        padding: 2;
    }

    .help-header {
        text-style: bold;
        color: $accent;
    }

    .help-footer {
        text-style: italic;
        color: $text-muted;
    }
    """

    def __init__(self, config_path: str = "config.toml", enable_watchers: bool = True, **kwargs):
        """Initialize app.

        Args:
            config_path: Path to TOML config file
            enable_watchers: Start the vault watcher on mount
        """
        super().__init__(**kwargs)
        self.config_path = Path(config_path)
        self.enable_watchers = enable_watchers
        self.controller: PropscriptController | None = None
        self.activity: RichLog | None = None
        self.notices: list[tuple[str, str]] = []
        self._closing = False

    def compose(self) -> ComposeResult:
        yield Header()

        try:
            self.controller = PropscriptController(
                self.config_path,
                notifier=TextualNotifier(self),
                enable_watchers=self.enable_watchers,
            )
            yield DataTable(id="rules-table", cursor_type="row")
            self.activity = RichLog(id="activity-log", wrap=True, markup=False)
            yield self.activity
        except Exception as e:
            logger.error(f"Failed to initialize app: {e}")
            yield Static(f"❌ Configuration Error: {e}", id="config-error")

        yield Footer()

    async def on_mount(self) -> None:
        """Attach controller, populate the rules table and wire callbacks."""
        if not self.controller:
            logger.error("Controller not initialized")
            return

        self.controller.on_change_processed = self._on_change_processed
        self.controller.on_dispatch_finished = self._on_dispatch_finished
        self._populate_rules()

        validation = self.controller.validate_config()
        for warning in validation.warnings:
            self.post_notice(warning, "warning")
        for error in validation.errors:
            self.post_notice(error, "error")

        self.controller.attach(asyncio.get_running_loop())
        self.sub_title = str(self.controller.vault.root)

    async def on_unmount(self) -> None:
        self._closing = True
        if self.controller and self.controller.is_attached:
            self.controller.detach()

    def _populate_rules(self) -> None:
        table = self.query_one("#rules-table", DataTable)
        table.clear(columns=True)
        table.add_columns("#", "Enabled", "Property", "Command", "Notify")
        for index, rule in enumerate(self.controller.rules, start=1):
            table.add_row(
                str(index),
                "✓" if rule.enabled else "✗",
                rule.property_name or "(none)",
                rule.command or "(none)",
                "yes" if rule.notify_on_run else "no",
            )

    def _log(self, line: str) -> None:
        if self.activity is not None:
            stamp = datetime.now().strftime("%H:%M:%S")
            self.activity.write(f"{stamp} {line}")

    def post_notice(self, message: str, severity: str = "information") -> None:
        """Show a notice as a toast and record it in the activity log."""
        self.notices.append((severity, message))
        if self._closing:
            logger.info(message)
            return
        self._log(f"[{severity}] {message}")
        self.notify(message, severity=severity)

    def _on_change_processed(self, path: str, result: ProcessResult) -> None:
        if result.kind == "moved":
            self._log(f"{path}: moved from {result.moved_from}")
        elif result.kind == "edited":
            for trigger in result.triggers:
                self._log(f"{path}: {trigger.property_name} changed, running {trigger.rule.command or '(none)'}")

    def _on_dispatch_finished(self, result: DispatchResult) -> None:
        trigger = result.trigger
        self._log(f"{trigger.file.path}: {trigger.property_name} script {result.status}")

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_reload_config(self) -> None:
        if not self.controller:
            return
        self.controller.reload_config()
        self._populate_rules()

    def action_prune_snapshots(self) -> None:
        if not self.controller:
            return
        removed = self.controller.prune_snapshots()
        if not removed:
            self._log("No stale snapshots")
