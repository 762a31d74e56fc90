#!/usr/bin/env python3
"""
Example: Headless property automation
Shows how to embed PropscriptController without the TUI.

This example demonstrates:
- Using PropscriptController with a custom notifier
- Feeding change notifications from your own host instead of the file watcher
- Observing processing results and script outcomes
"""

import asyncio
import sys
from pathlib import Path

try:
    from textual_propscript import PropscriptController
except ImportError:
    print("Error: Install textual-propscript first: pip install textual-propscript")
    sys.exit(1)


class PrintNotifier:
    """Print notices to the console."""

    def info(self, message: str) -> None:
        print(f"ℹ️  {message}")

    def warning(self, message: str) -> None:
        print(f"⚠️  {message}")

    def error(self, message: str) -> None:
        print(f"❌ {message}")


async def main(config_path: str, changed_files: list[str]) -> int:
    controller = PropscriptController(config_path, notifier=PrintNotifier(), enable_watchers=False)

    validation = controller.validate_config()
    if validation.errors:
        print(f"❌ Config errors: {validation.errors}")
        return 1
    for warning in validation.warnings:
        print(f"⚠️ {warning}")
    print(f"✓ Loaded {validation.rules_loaded} rules ({validation.rules_enabled} active)")

    controller.on_change_processed = lambda path, result: print(f"→ {path}: {result.kind}")
    controller.on_dispatch_finished = lambda result: print(
        f"→ {result.trigger.file.path}: {result.trigger.property_name} script {result.status}"
    )

    controller.attach(asyncio.get_running_loop())
    try:
        # Edit the files on disk, then report them here as your host sees them change
        for path in changed_files:
            controller.handle_change(Path(path).resolve())
        await controller.drain()
    finally:
        controller.detach()
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: embedding_headless.py CONFIG [CHANGED_FILE ...]")
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2:])))
