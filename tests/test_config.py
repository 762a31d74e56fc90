"""Tests for configuration loading and rule validation."""

import pytest

from propscript.config import load_config
from propscript.models import Rule
from propscript.rules import RuleStore, validate_rules


@pytest.fixture
def config_file(tmp_path):
    config = tmp_path / "config.toml"
    config.write_text(
        """
[vault]
path = "notes"
debounce_ms = 50
snapshot_file = "state/snapshots.json"

[[rule]]
property = "status"
command = "/usr/local/bin/on-status.sh"

[[rule]]
property = " owner "
command = ""
enabled = false
notify = false
"""
    )
    return config


def test_load_config(config_file, tmp_path):
    config = load_config(config_file)

    assert config.vault.path == (tmp_path / "notes").resolve()
    assert config.vault.debounce_ms == 50
    assert config.vault.prime_on_start is True
    assert config.vault.snapshot_file == (tmp_path / "state" / "snapshots.json").resolve()
    assert config.vault.ignore_dirs == [".obsidian", ".git", ".trash"]
    assert config.rules == [
        Rule(property_name="status", command="/usr/local/bin/on-status.sh", enabled=True, notify_on_run=True),
        Rule(property_name="owner", command="", enabled=False, notify_on_run=False),
    ]


def test_defaults_without_vault_table(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[rule]]\nproperty = "status"\ncommand = "x"\n')

    config = load_config(config_path)

    assert config.vault.path == tmp_path.resolve()
    assert config.vault.snapshot_file is None
    assert len(config.rules) == 1


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="propscript-tui"):
        load_config(tmp_path / "nope.toml")


def test_invalid_toml(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[[rule]\nproperty = ")
    with pytest.raises(ValueError, match="Failed to parse config file"):
        load_config(config_path)


def test_rule_with_non_string_command(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[rule]]\nproperty = "status"\ncommand = 5\n')
    with pytest.raises(ValueError, match="Rule 1"):
        load_config(config_path)


class TestValidateRules:
    """Tests for non-fatal rule warnings."""

    def test_clean_rules(self):
        result = validate_rules([Rule("status", "x")])
        assert result.rules_loaded == 1
        assert result.rules_enabled == 1
        assert result.warnings == []

    def test_warns_on_empty_property_and_command(self):
        result = validate_rules([Rule("", "x"), Rule("status", "")])
        assert any("no property name" in w for w in result.warnings)
        assert any("no command" in w for w in result.warnings)

    def test_warns_when_nothing_enabled(self):
        result = validate_rules([Rule("status", "x", enabled=False)])
        assert result.rules_enabled == 0
        assert any("No enabled rules" in w for w in result.warnings)


class TestRuleStore:
    """Tests for RuleStore."""

    def test_snapshot_is_stable_across_replace(self):
        store = RuleStore([Rule("status", "x")])
        before = store.snapshot()

        store.replace([Rule("owner", "y")])

        assert before == (Rule("status", "x"),)
        assert store.snapshot() == (Rule("owner", "y"),)

    def test_watched_properties_skips_inactive_and_duplicates(self):
        store = RuleStore(
            [
                Rule("status", "a"),
                Rule("status", "b"),
                Rule("owner", "c", enabled=False),
                Rule("", "d"),
                Rule("due", "e"),
            ]
        )
        assert store.watched_properties() == ["status", "due"]
        assert len(store) == 5
