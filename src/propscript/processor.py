"""Change processor: classifies metadata change events and produces triggers.

Each event is one of:

- ignored: the file has no frontmatter mapping
- moved: the path is new to the snapshot table and an existing entry holds
  exactly the same values for every watched property
- unchanged: no watched property differs from the previous snapshot
- edited: at least one watched property differs

Processing is synchronous and in-memory. Events must be delivered one at a
time; the snapshot table has a single writer.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from propscript.models import MISSING, ChangeEvent, ProcessResult, Rule, Trigger, normalize_value, values_equal
from propscript.snapshot import Snapshot, SnapshotTable

logger = logging.getLogger(__name__)

RulesSource = Iterable[Rule] | Callable[[], Iterable[Rule]]


class ChangeProcessor:
    """Diff change events against the snapshot table and match rules."""

    def __init__(self, table: SnapshotTable, rules: RulesSource):
        """Initialize processor.

        Args:
            table: Snapshot table owned by the caller
            rules: Rule list, or a callable returning the current rule list.
                   It is copied once at the start of every event.
        """
        self.table = table
        self._rules = rules

    def _current_rules(self) -> list[Rule]:
        rules = self._rules() if callable(self._rules) else self._rules
        return [rule for rule in list(rules) if rule.is_active]

    def process(self, event: ChangeEvent) -> ProcessResult:
        """Process one change event and update the snapshot table."""
        current = event.properties
        if not isinstance(current, Mapping):
            logger.debug(f"Ignoring {event.file.path}: no frontmatter")
            return ProcessResult(kind="ignored")
        current = normalize_value(current)

        file_id = event.file.path
        rules = self._current_rules()
        watched = list(dict.fromkeys(rule.property_name for rule in rules))

        if not self.table.has_entry(file_id):
            source = self._find_move_source(current, watched)
            if source is not None:
                self.table.rename(source, file_id)
                self.table.set(file_id, current)
                logger.debug(f"Treating {file_id} as moved from {source}")
                return ProcessResult(kind="moved", moved_from=source)

        previous: Snapshot = self.table.get(file_id) or {}

        has_changes = any(
            not values_equal(current.get(name, MISSING), previous.get(name, MISSING))
            for name in watched
        )

        triggers: list[Trigger] = []
        if has_changes:
            for rule in rules:
                new_value = current.get(rule.property_name, MISSING)
                old_value = previous.get(rule.property_name, MISSING)
                if new_value is not MISSING and not values_equal(new_value, old_value):
                    triggers.append(
                        Trigger(rule=rule, file=event.file, old_value=old_value, new_value=new_value)
                    )

        self.table.set(file_id, current)

        if not has_changes:
            return ProcessResult(kind="unchanged")

        logger.debug(f"{file_id}: {len(triggers)} trigger(s)")
        return ProcessResult(kind="edited", triggers=triggers)

    def prime(self, event: ChangeEvent) -> bool:
        """Record an event's properties as the baseline without matching rules.

        Returns:
            True if a snapshot was stored.
        """
        if not isinstance(event.properties, Mapping):
            return False
        self.table.set(event.file.path, normalize_value(event.properties))
        return True

    def _find_move_source(self, current: Mapping[str, Any], watched: list[str]) -> str | None:
        """Return the first stored identity whose watched values all match.

        With no watched properties every entry matches.
        """
        for stored_id, stored in self.table.items():
            if all(
                values_equal(current.get(name, MISSING), stored.get(name, MISSING))
                for name in watched
            ):
                return stored_id
        return None
