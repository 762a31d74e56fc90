"""Non-Textual controller wiring the propscript engine to a vault. Primary embed point."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from propscript.config import load_config
from propscript.dispatcher import TriggerDispatcher
from propscript.models import ConfigValidationResult, DispatchResult, ProcessResult
from propscript.notifier import NoOpNotifier, PropscriptNotifier
from propscript.processor import ChangeProcessor
from propscript.rules import RuleStore, validate_rules
from propscript.snapshot import SnapshotTable
from propscript.vault import Vault

logger = logging.getLogger(__name__)


class PropscriptController:
    """Owns the rule store, snapshot table, processor and dispatcher.

    Stable methods: attach(), detach(), handle_change(), request_change(),
    reload_config(), validate_config(), prune_snapshots(), drain().
    """

    def __init__(
        self,
        config_path: str | Path,
        notifier: PropscriptNotifier | None = None,
        enable_watchers: bool = True,
    ):
        """Initialize controller.

        Args:
            config_path: Path to TOML config
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            enable_watchers: If True, the vault watcher starts on attach(). If False, host feeds changes.
        """
        self.config_path = Path(config_path)
        self.notifier = notifier or NoOpNotifier()
        self.enable_watchers = enable_watchers
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watcher = None

        try:
            self.config = load_config(self.config_path)
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

        self.vault = Vault(
            self.config.vault.path,
            ignore_dirs=self.config.vault.ignore_dirs,
            extensions=self.config.vault.extensions,
        )
        self.rules = RuleStore(self.config.rules)
        self.snapshots = SnapshotTable()
        self.processor = ChangeProcessor(self.snapshots, self.rules.snapshot)
        self.dispatcher = TriggerDispatcher(self.notifier)
        self.dispatcher.on_result = self._on_dispatch_result

        # Outbound events (host wires these)
        self.on_change_processed: Callable[[str, ProcessResult], None] | None = None
        self.on_dispatch_finished: Callable[[DispatchResult], None] | None = None

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to event loop, load the snapshot baseline and start the watcher.

        Idempotent. The loop must already be running.
        """
        if self._loop is not None:
            return

        if not loop.is_running():
            raise RuntimeError(
                "Event loop must be running before attach(). "
                "Call attach() from within on_mount() or after loop started."
            )

        self._loop = loop
        self.dispatcher.loop = loop
        self._load_baseline()

        if self.enable_watchers:
            try:
                from propscript.file_watcher import VaultWatcher

                self._watcher = VaultWatcher(
                    self.vault,
                    self.handle_change,
                    loop,
                    debounce_ms=self.config.vault.debounce_ms,
                )
                self._watcher.start()
                self.notifier.info(f"Watching {self.vault.root} ({len(self.rules.active_rules())} active rule(s))")
            except Exception as e:
                logger.error(f"Failed to start vault watcher: {e}")
                self.notifier.error(f"Vault watcher initialization failed: {e}")
                self._watcher = None

    def _load_baseline(self) -> None:
        snapshot_file = self.config.vault.snapshot_file
        if snapshot_file and snapshot_file.exists():
            try:
                restored = SnapshotTable.load(snapshot_file)
                self._replace_snapshots(restored)
                logger.info(f"Restored {len(restored)} snapshot(s) from {snapshot_file}")
                return
            except (OSError, ValueError) as e:
                logger.error(f"Failed to restore snapshots: {e}")
                self.notifier.warning(f"Could not restore snapshots: {e}")

        if self.config.vault.prime_on_start:
            primed = sum(1 for path in self.vault.iter_documents() if self.processor.prime(self.vault.build_event(path)))
            logger.info(f"Primed {primed} snapshot(s) from {self.vault.root}")

    def _replace_snapshots(self, table: SnapshotTable) -> None:
        self.snapshots = table
        self.processor.table = table

    def detach(self) -> None:
        """Stop the watcher and persist snapshots if configured."""
        if self._watcher:
            try:
                self._watcher.stop()
            except Exception as e:
                logger.error(f"Error stopping vault watcher: {e}")
            self._watcher = None

        snapshot_file = self.config.vault.snapshot_file
        if snapshot_file and self._loop is not None:
            try:
                self.snapshots.save(snapshot_file)
            except OSError as e:
                logger.error(f"Failed to save snapshots to {snapshot_file}: {e}")

        self._loop = None
        self.dispatcher.loop = None
        self.notifier.info("Vault watcher stopped")

    def handle_change(self, path: str | Path) -> ProcessResult | None:
        """Process a change notification for one document.

        Must run on the event loop thread, one call at a time. Triggers are
        dispatched without waiting for them.

        Returns:
            The processing result, or None if the path is not a vault document.
        """
        if not self.vault.contains(path):
            logger.debug(f"Ignoring change outside vault: {path}")
            return None

        try:
            event = self.vault.build_event(path)
            result = self.processor.process(event)
        except Exception as e:
            logger.exception(f"Error processing change for {path}")
            self.notifier.error(f"Failed to process change for {path}: {e}")
            return None

        for trigger in result.triggers:
            self.dispatcher.submit(trigger)

        if self.on_change_processed:
            try:
                self.on_change_processed(event.file.path, result)
            except Exception as e:
                logger.error(f"Error in change callback: {e}")
        return result

    def request_change(self, path: str | Path) -> None:
        """Schedule handle_change() on the attached loop. Safe from any thread."""
        if self._loop is None:
            logger.warning(f"Change for '{path}' ignored - controller not attached")
            return
        self._loop.call_soon_threadsafe(self.handle_change, path)

    def _on_dispatch_result(self, result: DispatchResult) -> None:
        if self.on_dispatch_finished:
            self.on_dispatch_finished(result)

    async def drain(self) -> None:
        """Wait for every in-flight script to finish."""
        await self.dispatcher.drain()

    def reload_config(self) -> None:
        """Reload rules from disk. Vault settings need a restart."""
        try:
            config = load_config(self.config_path)
        except Exception as e:
            logger.error(f"Failed to reload config: {e}")
            self.notifier.error(f"Failed to reload config: {e}")
            return

        if config.vault != self.config.vault:
            logger.info("Vault settings changed; restart to apply them")
        self.config.rules = config.rules
        self.rules.replace(config.rules)
        self.notifier.info("Configuration reloaded")

    def prune_snapshots(self) -> list[str]:
        """Forget snapshots of documents that no longer exist."""
        removed = self.snapshots.prune(self.vault.live_ids())
        if removed:
            self.notifier.info(f"Pruned {len(removed)} stale snapshot(s)")
        return removed

    def validate_config(self) -> ConfigValidationResult:
        """Validate configuration and return structured results."""
        result = validate_rules(self.rules)
        if not self.vault.root.is_dir():
            result.errors.append(f"Vault directory does not exist: {self.vault.root}")
        return result

    @property
    def is_attached(self) -> bool:
        return self._loop is not None
