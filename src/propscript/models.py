"""Shared data models for propscript."""

import datetime
import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal


class _Missing:
    """Marker for a property that is absent from a snapshot."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
"""Absent property value. Distinct from every present value, including ``""`` and ``None``."""


ValueKind = Literal["missing", "null", "boolean", "number", "string", "list", "mapping"]


def value_kind(value: Any) -> ValueKind:
    """Classify a property value into its closed variant.

    Raises:
        TypeError: For values outside the variants. Use :func:`normalize_value`
            to convert them first.
    """
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, Mapping):
        return "mapping"
    raise TypeError(f"Unsupported property value type: {type(value).__name__}")


def values_equal(a: Any, b: Any) -> bool:
    """Compare two property values by variant, then by deep equality.

    ``True`` and ``1`` are different values, as are ``None`` and an absent
    property. Numbers compare numerically (``1 == 1.0``).
    """
    kind = value_kind(a)
    if kind != value_kind(b):
        return False
    if kind == "list":
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if kind == "mapping":
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if kind == "missing":
        return True
    if kind == "number" and isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def format_value(value: Any) -> str:
    """Render a property value as the string handed to scripts.

    An absent value renders empty and ``None`` renders as ``null``. List items
    that are ``None`` render empty.
    """
    kind = value_kind(value)
    if kind == "missing":
        return ""
    if kind == "null":
        return "null"
    if kind == "boolean":
        return "true" if value else "false"
    if kind == "number":
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if kind == "list":
        return ",".join("" if item is None else format_value(item) for item in value)
    if kind == "mapping":
        return json.dumps(value, default=str)
    return value


def normalize_value(value: Any) -> Any:
    """Convert a value into one of the property value variants.

    Dates become ISO strings, sets and tuples become lists, bytes are decoded
    and mapping keys become strings. Other unsupported objects fall back to
    their ``str()`` form. Containers are always rebuilt, so the result shares
    no mutable state with the input.
    """
    if value is MISSING or value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_value(v) for v in value]
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass(frozen=True)
class Rule:
    """Binding of one watched frontmatter property to one external command."""

    property_name: str
    """Frontmatter key to diff. An empty name makes the rule inert."""

    command: str = ""
    """Script path (optionally followed by arguments) to run on change."""

    enabled: bool = True
    """Disabled rules never fire and never take part in move matching."""

    notify_on_run: bool = True
    """Whether a successful run is surfaced to the user."""

    @property
    def is_active(self) -> bool:
        """Enabled and watching a named property."""
        return self.enabled and bool(self.property_name)


@dataclass(frozen=True)
class FileIdentity:
    """Identity attributes of a vault document."""

    path: str
    """Vault-relative path using forward slashes. Used as the snapshot key."""

    name: str
    """Base file name."""

    vault_path: str
    """Absolute path to the vault root."""


@dataclass(frozen=True)
class ChangeEvent:
    """A metadata change notification with the properties read at event time.

    ``properties`` is ``None`` when the file has no frontmatter. Values are
    expected to be strings, numbers, booleans, ``None``, lists or mappings;
    anything else is converted by :func:`normalize_value` when processed.
    """

    file: FileIdentity
    properties: Mapping[str, Any] | None


@dataclass(frozen=True)
class Trigger:
    """One unit of dispatch work: a rule matched a value transition."""

    rule: Rule
    file: FileIdentity
    old_value: Any
    new_value: Any

    @property
    def property_name(self) -> str:
        return self.rule.property_name


@dataclass
class ProcessResult:
    """Outcome of running one change event through the change processor."""

    kind: Literal["ignored", "moved", "unchanged", "edited"]
    """How the event was classified."""

    triggers: list[Trigger] = field(default_factory=list)
    """Triggers to dispatch, in rule order."""

    moved_from: str | None = None
    """Previous snapshot key when ``kind == "moved"``."""


@dataclass
class DispatchResult:
    """Outcome of one script run."""

    trigger: Trigger
    status: Literal["succeeded", "failed", "misconfigured"]
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"


@dataclass
class ConfigValidationResult:
    """Results from configuration validation."""

    rules_loaded: int = 0
    """Number of rules in the configuration."""

    rules_enabled: int = 0
    """Number of enabled rules watching a named property."""

    warnings: list[str] = field(default_factory=list)
    """Config issues found (non-fatal)."""

    errors: list[str] = field(default_factory=list)
    """Config errors (should be fatal)."""
