"""Tests for the debounced vault watcher handler."""

import asyncio

import pytest
from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from propscript.file_watcher import VaultWatcher, _DebouncedVaultHandler
from propscript.vault import Vault


async def collect(handler_events, vault_dir, debounce_ms=20):
    loop = asyncio.get_running_loop()
    received = []
    handler = _DebouncedVaultHandler(Vault(vault_dir), received.append, loop, debounce_ms)
    for event in handler_events:
        getattr(handler, event[0])(event[1])
    await asyncio.sleep(debounce_ms / 1000.0 + 0.2)
    return received


@pytest.mark.asyncio
async def test_modified_events_are_debounced_per_path(vault_dir):
    todo = str(vault_dir / "todo.md")
    alpha = str(vault_dir / "projects" / "alpha.md")

    received = await collect(
        [
            ("on_modified", FileModifiedEvent(todo)),
            ("on_modified", FileModifiedEvent(todo)),
            ("on_created", FileCreatedEvent(alpha)),
        ],
        vault_dir,
    )

    assert sorted(p.name for p in received) == ["alpha.md", "todo.md"]


@pytest.mark.asyncio
async def test_moved_event_reports_destination(vault_dir):
    src = str(vault_dir / "todo.md")
    dest = str(vault_dir / "done" / "todo.md")

    received = await collect([("on_moved", FileMovedEvent(src, dest))], vault_dir)

    assert [str(p) for p in received] == [dest]


@pytest.mark.asyncio
async def test_filtered_events_are_dropped(vault_dir):
    received = await collect(
        [
            ("on_modified", DirModifiedEvent(str(vault_dir / "projects"))),
            ("on_modified", FileModifiedEvent(str(vault_dir / "image.png"))),
            ("on_modified", FileModifiedEvent(str(vault_dir / ".obsidian" / "workspace.md"))),
        ],
        vault_dir,
    )

    assert received == []


@pytest.mark.asyncio
async def test_watcher_on_missing_directory_does_not_start(tmp_path):
    watcher = VaultWatcher(Vault(tmp_path / "nope"), lambda path: None, asyncio.get_running_loop())
    watcher.start()

    assert not watcher.is_running
    watcher.stop()
