"""Configuration parsing for propscript."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from propscript.models import Rule
from propscript.vault import DEFAULT_EXTENSIONS, DEFAULT_IGNORE_DIRS

logger = logging.getLogger(__name__)


@dataclass
class VaultConfig:
    """Where the documents live and how changes are picked up."""

    path: Path
    """Vault root directory."""

    ignore_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    """Directories never watched."""

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    """Document extensions carrying frontmatter."""

    debounce_ms: int = 300
    """Per-file debounce delay for filesystem events."""

    prime_on_start: bool = True
    """Record existing documents as the baseline on attach, without running scripts."""

    snapshot_file: Path | None = None
    """Optional JSON file for keeping snapshots across restarts."""


@dataclass
class PropscriptConfig:
    """Full configuration."""

    vault: VaultConfig
    rules: list[Rule] = field(default_factory=list)


def _parse_rule(raw: object, index: int) -> Rule:
    if not isinstance(raw, dict):
        raise ValueError(f"Rule {index} must be a table")

    property_name = raw.get("property", "")
    command = raw.get("command", "")
    if not isinstance(property_name, str) or not isinstance(command, str):
        raise ValueError(f"Rule {index}: 'property' and 'command' must be strings")

    return Rule(
        property_name=property_name.strip(),
        command=command.strip(),
        enabled=bool(raw.get("enabled", True)),
        notify_on_run=bool(raw.get("notify", True)),
    )


def load_config(path: str | Path) -> PropscriptConfig:
    """Load configuration from a TOML file.

    Relative vault and snapshot paths are resolved against the config file's
    directory.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the file cannot be parsed or a rule is malformed
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\nRun 'propscript-tui' without arguments to auto-create a default config."
        )

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e

    vault_raw = raw.get("vault", {})
    snapshot_file = vault_raw.get("snapshot_file") or None

    vault = VaultConfig(
        path=(path.parent / Path(vault_raw.get("path", "."))).resolve(),
        ignore_dirs=vault_raw.get("ignore_dirs", list(DEFAULT_IGNORE_DIRS)),
        extensions=vault_raw.get("extensions", list(DEFAULT_EXTENSIONS)),
        debounce_ms=vault_raw.get("debounce_ms", 300),
        prime_on_start=vault_raw.get("prime_on_start", True),
        snapshot_file=(path.parent / Path(snapshot_file)).resolve() if snapshot_file else None,
    )

    rules = [_parse_rule(r, i) for i, r in enumerate(raw.get("rule", []), start=1)]
    logger.debug(f"Loaded {len(rules)} rule(s) from {path}")

    return PropscriptConfig(vault=vault, rules=rules)
