"""Per-file property snapshots used as the diff baseline."""

import copy
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Any]


class SnapshotTable:
    """Mapping of file identity (vault-relative path) to last-observed properties.

    Iteration follows insertion order, which is the tie-break order for move
    detection. A renamed entry is re-inserted at the end. Stored snapshots are
    read-only copies, so dispatch tasks holding one see the values captured
    before dispatch started.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Snapshot] = {}

    def get(self, file_id: str) -> Snapshot | None:
        return self._entries.get(file_id)

    def set(self, file_id: str, properties: Mapping[str, Any]) -> None:
        self._entries[file_id] = MappingProxyType(copy.deepcopy(dict(properties)))

    def rename(self, old_id: str, new_id: str) -> None:
        """Move an entry to a new identity, keeping its values.

        Raises:
            KeyError: If ``old_id`` has no entry.
        """
        snapshot = self._entries.pop(old_id)
        self._entries[new_id] = snapshot

    def has_entry(self, file_id: str) -> bool:
        return file_id in self._entries

    def remove(self, file_id: str) -> None:
        self._entries.pop(file_id, None)

    def items(self) -> list[tuple[str, Snapshot]]:
        """Entries in insertion order, copied so callers may mutate the table."""
        return list(self._entries.items())

    def prune(self, live_ids: Iterable[str]) -> list[str]:
        """Drop entries whose identity is not in ``live_ids``.

        Returns:
            Identities that were removed.
        """
        live = set(live_ids)
        stale = [file_id for file_id in self._entries if file_id not in live]
        for file_id in stale:
            del self._entries[file_id]
        if stale:
            logger.debug(f"Pruned {len(stale)} stale snapshot(s)")
        return stale

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    # ========================================================================
    # Persistence
    # ========================================================================

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {file_id: dict(snapshot) for file_id, snapshot in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "SnapshotTable":
        table = cls()
        for file_id, properties in data.items():
            if isinstance(properties, Mapping):
                table.set(file_id, properties)
            else:
                logger.warning(f"Skipping malformed snapshot for {file_id}")
        return table

    def save(self, path: str | Path) -> None:
        """Write the table as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, default=str), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "SnapshotTable":
        """Read a table written by :meth:`save`.

        Raises:
            ValueError: If the file is not a JSON object.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse snapshot file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot file {path} must contain a JSON object")
        return cls.from_dict(data)
