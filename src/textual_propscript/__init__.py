"""textual-propscript: TUI and controller for propscript frontmatter automation."""

__version__ = "0.1.0"

# Public API
from textual_propscript.controller import PropscriptController

__all__ = [
    "__version__",
    # Primary components
    "PropscriptController",
]
