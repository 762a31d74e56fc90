"""Tests for frontmatter parsing."""

from propscript.frontmatter import parse_frontmatter, read_properties


def test_parses_mapping():
    text = "---\nstatus: done\npriority: 2\ntags:\n  - a\n  - b\n---\n# Title\n"
    assert parse_frontmatter(text) == {"status": "done", "priority": 2, "tags": ["a", "b"]}


def test_no_frontmatter_returns_none():
    assert parse_frontmatter("# Just a heading\n") is None
    assert parse_frontmatter("text\n---\nstatus: x\n---\n") is None


def test_empty_block_is_empty_mapping():
    assert parse_frontmatter("---\n---\nBody") == {}


def test_non_mapping_block_is_none():
    assert parse_frontmatter("---\n- a\n- b\n---\n") is None


def test_invalid_yaml_is_none():
    assert parse_frontmatter("---\nstatus: [unclosed\n---\n") is None


def test_dates_become_iso_strings():
    props = parse_frontmatter("---\ndue: 2024-03-01\n---\n")
    assert props == {"due": "2024-03-01"}


def test_crlf_and_bom():
    assert parse_frontmatter("\ufeff---\r\nstatus: open\r\n---\r\n") == {"status": "open"}


def test_read_properties(tmp_path):
    note = tmp_path / "note.md"
    note.write_text("---\nstatus: open\n---\n", encoding="utf-8")

    assert read_properties(note) == {"status": "open"}
    assert read_properties(tmp_path / "missing.md") is None
