"""Vault file watcher using watchdog."""

import asyncio
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from threading import Timer

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from propscript.vault import Vault

logger = logging.getLogger(__name__)


class _DebouncedVaultHandler(FileSystemEventHandler):
    """Debounces filesystem events per document and hands paths to the loop."""

    def __init__(
        self,
        vault: Vault,
        callback: Callable[[Path], None],
        loop: asyncio.AbstractEventLoop,
        debounce_ms: int,
    ):
        """Initialize handler.

        Args:
            vault: Vault used to filter paths
            callback: Called on the event loop thread with the changed path
            loop: Event loop for scheduling
            debounce_ms: Debounce delay in milliseconds
        """
        self.vault = vault
        self.callback = callback
        self.loop = loop
        self.debounce_ms = debounce_ms
        self._timers: dict[Path, Timer] = {}
        self._lock = threading.Lock()

    def _schedule(self, path: Path) -> None:
        """Schedule delivery of ``path`` after the debounce delay."""
        if not self.vault.contains(path):
            return

        def fire() -> None:
            with self._lock:
                self._timers.pop(path, None)
            try:
                self.loop.call_soon_threadsafe(self.callback, path)
            except RuntimeError as e:
                # loop already closed during shutdown
                logger.debug(f"Dropped change for {path}: {e}")

        with self._lock:
            existing = self._timers.get(path)
            if existing:
                existing.cancel()
            timer = Timer(self.debounce_ms / 1000.0, fire)
            timer.daemon = True
            self._timers[path] = timer
            timer.start()

    def cancel_pending(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._schedule(Path(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._schedule(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        # The destination is a new identity; move detection happens downstream
        if not event.is_directory:
            self._schedule(Path(event.dest_path))


class VaultWatcher:
    """Watches a vault directory and reports changed documents."""

    def __init__(
        self,
        vault: Vault,
        callback: Callable[[Path], None],
        loop: asyncio.AbstractEventLoop,
        debounce_ms: int = 300,
    ):
        self.vault = vault
        self.observer = Observer()
        self.handler = _DebouncedVaultHandler(vault, callback, loop, debounce_ms)
        self._started = False

    def start(self) -> None:
        """Start watching the vault root recursively."""
        if not self.vault.root.is_dir():
            logger.warning(f"Vault directory does not exist: {self.vault.root}")
            return

        self.observer.schedule(self.handler, str(self.vault.root), recursive=True)
        self.observer.start()
        self._started = True
        logger.info(f"Watching {self.vault.root} (debounce: {self.handler.debounce_ms}ms)")

    def stop(self) -> None:
        """Stop watching and cancel pending deliveries."""
        self.handler.cancel_pending()
        if self._started and self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=2.0)
            logger.info("Stopped vault watcher")
        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started
