"""Pytest configuration and fixtures."""

import shlex
import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from propscript.models import ChangeEvent, FileIdentity, Rule  # noqa: E402


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of(self, level: str) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]


def make_event(path: str, properties, vault_path: str = "/vault") -> ChangeEvent:
    """Change event for a vault-relative path."""
    return ChangeEvent(
        file=FileIdentity(path=path, name=path.rsplit("/", 1)[-1], vault_path=vault_path),
        properties=properties,
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def status_rule():
    return Rule(property_name="status", command="echo", enabled=True, notify_on_run=True)


@pytest.fixture
def python_script(tmp_path):
    """Factory writing a Python script and returning a command that runs it."""

    def _make(name: str, body: str) -> str:
        script = tmp_path / "scripts" / name
        script.parent.mkdir(exist_ok=True)
        script.write_text(body)
        return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"

    return _make


@pytest.fixture
def vault_dir(tmp_path):
    """A small vault with two notes."""
    vault = tmp_path / "vault"
    (vault / "projects").mkdir(parents=True)
    (vault / ".obsidian").mkdir()
    (vault / "todo.md").write_text("---\nstatus: open\ntitle: Todo\n---\nBody\n")
    (vault / "projects" / "alpha.md").write_text("---\nstatus: draft\npriority: 2\n---\n")
    (vault / "plain.md").write_text("No frontmatter here\n")
    (vault / ".obsidian" / "workspace.md").write_text("---\nstatus: ignored\n---\n")
    return vault
