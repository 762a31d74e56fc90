"""CLI entry point for propscript-tui: auto-generates default config and launches the TUI."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from propscript.notifier import LoggingNotifier
from textual_propscript import __version__
from textual_propscript.app import PropscriptApp
from textual_propscript.controller import PropscriptController

logging.getLogger("textual_propscript").setLevel(logging.DEBUG)
logging.getLogger("propscript").setLevel(logging.DEBUG)

# Default config template: one rule per watched property
DEFAULT_CONFIG_TEMPLATE = """\
# Auto-generated config.toml for propscript-tui

[vault]
path = "."
ignore_dirs = [".obsidian", ".git", ".trash"]
extensions = [".md"]
debounce_ms = 300
prime_on_start = true
# snapshot_file = ".propscript-snapshots.json"

# Each rule runs its command when the named frontmatter property changes.
# The script receives PROPERTY_NAME, PROPERTY_VALUE, PREVIOUS_VALUE,
# FILE_PATH, FILE_NAME and VAULT_PATH in its environment.
[[rule]]
property = "status"
command = ""
enabled = false
notify = true
"""


def create_default_config(config_path: Path) -> bool:
    """
    Create a default config.toml if it doesn't exist.

    Args:
        config_path: Path where config should be created

    Returns:
        True if config was created, False if it already exists

    Raises:
        PermissionError: If unable to write to the directory
        OSError: If other file system errors occur
    """
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE)
    return True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="propscript-tui",
        description="Run scripts when watched frontmatter properties change.",
        epilog="Examples:\n"
        "  propscript-tui                        # Auto-create config.toml and launch\n"
        "  propscript-tui --config vault.toml    # Use custom config\n"
        "  propscript-tui --headless             # Run without the TUI\n"
        "  propscript-tui --version              # Show version",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to config file (default: config.toml)",
    )

    parser.add_argument(
        "--headless",
        action="store_true",
        help="Watch the vault and log notices instead of launching the TUI",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


async def run_headless(config_path: Path, stop: asyncio.Event | None = None) -> None:
    """Watch the vault until ``stop`` is set (or forever)."""
    controller = PropscriptController(config_path, notifier=LoggingNotifier())

    validation = controller.validate_config()
    for warning in validation.warnings:
        logging.warning(warning)
    if validation.errors:
        raise RuntimeError("; ".join(validation.errors))

    controller.attach(asyncio.get_running_loop())
    try:
        await (stop or asyncio.Event()).wait()
    finally:
        controller.detach()
        await controller.drain()


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for propscript-tui CLI.

    Handles:
    - Argument parsing
    - Auto-creation of config.toml
    - Launching PropscriptApp or headless mode
    - Error handling and exit codes
    """
    args = parse_args(argv)

    config_path = Path(args.config).resolve()

    try:
        if create_default_config(config_path):
            print(f"Created default config at: {config_path}")

        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)

        if args.headless:
            logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
            asyncio.run(run_headless(config_path))
        else:
            app = PropscriptApp(config_path=str(config_path))
            app.run()

    except KeyboardInterrupt:
        sys.exit(130)
    except (PermissionError, OSError) as e:
        print(f"Error: Failed to create config: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
