"""
Kotlin Script Runner: editor-side highlighting core.

Provides:
- A pure, Qt-free syntax highlighter for Kotlin scripts that returns style
  spans (comments, strings, numbers, keywords, builtin calls, type names)
- A size-1 highlight cache for re-running on every keystroke
- Parsing of kotlinc "<file>:<line>:<col>:" error locations from output lines
- Qt (PySide6/PySide2) adapters that paint spans onto a QTextDocument

Qt is only imported by the ``ui`` modules, so the core can be used and tested
without a display.
"""

from __future__ import annotations

from .backends.error_location import ErrorLocation, find_error_locations, offset_for_location, parse_error_location
from .backends.highlighter import (
    Category,
    DEFAULT_COLORS,
    HighlightCache,
    StyleSpan,
    highlight,
    is_inside_comment,
    is_inside_string,
)

__all__ = [
    "Category",
    "DEFAULT_COLORS",
    "ErrorLocation",
    "HighlightCache",
    "StyleSpan",
    "find_error_locations",
    "highlight",
    "is_inside_comment",
    "is_inside_string",
    "offset_for_location",
    "parse_error_location",
]
