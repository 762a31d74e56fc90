"""YAML frontmatter extraction for markdown documents."""

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from propscript.models import normalize_value

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*\r?$", re.DOTALL | re.MULTILINE)


def parse_frontmatter(text: str) -> dict[str, Any] | None:
    """Extract frontmatter properties from document text.

    Returns:
        Property mapping, or None if the document has no frontmatter block or
        the block is not a YAML mapping. An empty block gives ``{}``.
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return None

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug(f"Malformed frontmatter: {e}")
        return None

    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    return normalize_value(data)


def read_properties(path: str | Path) -> dict[str, Any] | None:
    """Read a document and return its frontmatter, or None if it has none."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None
    return parse_frontmatter(text)
