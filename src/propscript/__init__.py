"""propscript: run scripts when watched frontmatter properties change."""

__version__ = "0.1.0"

# Config
from propscript.config import PropscriptConfig, VaultConfig, load_config
from propscript.dispatcher import TriggerDispatcher, build_environment, resolve_command

# Models
from propscript.models import (
    MISSING,
    ChangeEvent,
    ConfigValidationResult,
    DispatchResult,
    FileIdentity,
    ProcessResult,
    Rule,
    Trigger,
    format_value,
    normalize_value,
    values_equal,
)
from propscript.notifier import LoggingNotifier, NoOpNotifier, PropscriptNotifier

# Engine
from propscript.processor import ChangeProcessor
from propscript.rules import RuleStore, validate_rules
from propscript.snapshot import SnapshotTable
from propscript.vault import Vault

__all__ = [
    "__version__",
    # Models
    "MISSING",
    "ChangeEvent",
    "ConfigValidationResult",
    "DispatchResult",
    "FileIdentity",
    "ProcessResult",
    "Rule",
    "Trigger",
    "format_value",
    "normalize_value",
    "values_equal",
    # Engine
    "ChangeProcessor",
    "RuleStore",
    "SnapshotTable",
    "TriggerDispatcher",
    "build_environment",
    "resolve_command",
    "validate_rules",
    # Config
    "PropscriptConfig",
    "VaultConfig",
    "load_config",
    "Vault",
    # Notifiers
    "PropscriptNotifier",
    "NoOpNotifier",
    "LoggingNotifier",
]
