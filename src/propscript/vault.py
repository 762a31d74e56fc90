"""Vault: the directory of documents whose frontmatter is watched."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from propscript.frontmatter import read_properties
from propscript.models import ChangeEvent, FileIdentity

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_DIRS = [".obsidian", ".git", ".trash"]
DEFAULT_EXTENSIONS = [".md"]


class Vault:
    """Resolves document identities and reads their current properties."""

    def __init__(
        self,
        root: str | Path,
        ignore_dirs: Iterable[str] | None = None,
        extensions: Iterable[str] | None = None,
    ):
        self.root = Path(root).resolve()
        self.ignore_dirs = set(DEFAULT_IGNORE_DIRS if ignore_dirs is None else ignore_dirs)
        self.extensions = {ext.lower() for ext in (DEFAULT_EXTENSIONS if extensions is None else extensions)}

    def _absolute(self, path: str | Path) -> Path:
        path = Path(path)
        return path.resolve() if path.is_absolute() else self.root / path

    def contains(self, path: str | Path) -> bool:
        """Whether ``path`` is a watched document inside the vault."""
        path = self._absolute(path)
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return False
        if any(part in self.ignore_dirs for part in relative.parts[:-1]):
            return False
        return path.suffix.lower() in self.extensions

    def identity(self, path: str | Path) -> FileIdentity:
        """Identity attributes for a document.

        Raises:
            ValueError: If ``path`` is outside the vault.
        """
        path = self._absolute(path)
        relative = path.relative_to(self.root)
        return FileIdentity(path=relative.as_posix(), name=path.name, vault_path=str(self.root))

    def build_event(self, path: str | Path) -> ChangeEvent:
        """Build a change event carrying the properties on disk right now."""
        path = self._absolute(path)
        return ChangeEvent(file=self.identity(path), properties=read_properties(path))

    def iter_documents(self) -> Iterator[Path]:
        """Watched documents under the root, in sorted order."""
        if not self.root.is_dir():
            logger.warning(f"Vault directory does not exist: {self.root}")
            return
        for path in sorted(self.root.rglob("*")):
            if path.is_file() and self.contains(path):
                yield path

    def live_ids(self) -> list[str]:
        return [self.identity(path).path for path in self.iter_documents()]
