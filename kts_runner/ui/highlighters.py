from __future__ import annotations

"""
Qt syntax highlighters for the script editor and the output pane.

- KotlinSpanHighlighter: paints the spans computed by backends.highlighter onto
  a QTextDocument. Spans are document-wide, so the whole text is highlighted
  once per change (size-1 cache), bucketed per line, and each block takes its
  bucket.
- ErrorLineHighlighter: marks compiler output lines that carry a
  "<file>:<line>:<col>:" location so the UI can offer click-to-navigate.

Factory helpers:
- create_kotlin_highlighter(document, colors=None, containment=None, debug=None)
- create_output_highlighter(document)
"""

try:
    from PySide6.QtCore import QTimer
    from PySide6.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor
    QT6 = True
except Exception:
    from PySide2.QtCore import QTimer  # type: ignore
    from PySide2.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor  # type: ignore
    QT6 = False

from ..backends.error_location import ErrorLocation, parse_error_location
from ..backends.highlighter import HEURISTIC, Category, HighlightCache, LineSpanIndex
from ..utils.config import category_colors, highlight_containment, highlight_debug, load_config


ERROR_FOREGROUND = "#FF6B6B"
ERROR_BACKGROUND = "#3D1F1F"

# Block states: what the end of a block (its newline) sits inside
_STATE_NORMAL = 0
_STATE_COMMENT = 1
_STATE_STRING = 2

# QTextDocument.toPlainText() rewrites these; block text keeps them
_PLAIN_TEXT_MAP = {0x00A0: " ", 0x2028: "\n", 0x2029: "\n", 0xFDD0: "\n", 0xFDD1: "\n"}


def _qcolor_from_css(css: str) -> QColor:
    try:
        c = QColor(css)
        return c if c.isValid() else QColor("#000000")
    except Exception:
        return QColor("#000000")


class KotlinSpanHighlighter(QSyntaxHighlighter):
    """QSyntaxHighlighter adapter over the pure span highlighter.

    Block states encode whether a block ends inside a multi-line comment or
    raw string, so Qt keeps re-highlighting following blocks while an opener
    or closer changes their coloring.

    The document text is only re-read when the current block no longer matches
    the last snapshot (edit, length change, explicit rehighlight). Spans are
    bucketed per line on each refresh so a block costs its own spans only.

    In heuristic mode spans before an edit can change too (a later "*/" or an
    odd quote), which Qt's forward cascade never revisits; a refresh that
    changes the spans there schedules one full rehighlight.
    """

    def __init__(self, document, colors=None, containment: str = "scan", debug: bool = False):
        QSyntaxHighlighter.__init__(self, document)
        self._debug = bool(debug)
        self._cache = HighlightCache(colors=colors, containment=containment)
        self._formats: dict = {}
        self._text: str | None = None
        self._char_count = -1
        self._spans = None
        self._index = LineSpanIndex("", [])
        self._stale = True
        self._rehighlight_pending = False
        if self._debug:
            print(f"[Highlighter] Kotlin: containment={containment} colors={'custom' if colors else 'default'}")

    @property
    def cache(self) -> HighlightCache:
        return self._cache

    def rehighlight(self) -> None:
        self._stale = True
        QSyntaxHighlighter.rehighlight(self)

    def set_colors(self, colors) -> None:
        self._cache.configure(colors=colors)
        self._formats.clear()
        self._spans = None
        self.rehighlight()

    def set_containment(self, containment: str) -> None:
        self._cache.configure(containment=containment)
        self._spans = None
        self.rehighlight()

    def _format_for(self, category: Category, color: str) -> QTextCharFormat:
        key = (category, color)
        fmt = self._formats.get(key)
        if fmt is None:
            fmt = QTextCharFormat()
            fmt.setForeground(_qcolor_from_css(color))
            if category is Category.COMMENT:
                fmt.setFontItalic(True)
            self._formats[key] = fmt
        return fmt

    def _is_stale(self, doc, block_start: int, text: str) -> bool:
        if self._stale or self._text is None:
            return True
        if doc.characterCount() != self._char_count:
            return True
        snapshot = self._text[block_start:block_start + len(text)]
        return snapshot != text.translate(_PLAIN_TEXT_MAP)

    def _refresh(self, doc) -> None:
        text = doc.toPlainText()
        old = self._spans
        spans = self._cache.spans(text)
        self._text = text
        self._char_count = doc.characterCount()
        self._stale = False
        if spans is old:
            return
        self._spans = spans
        self._index = LineSpanIndex(text, spans)
        if self._debug:
            print(f"[Highlighter] Kotlin: rehighlight chars={len(text)} spans={len(spans)}")
        if old is not None and self._cache.containment == HEURISTIC:
            self._schedule_rehighlight()

    def _schedule_rehighlight(self) -> None:
        if self._rehighlight_pending:
            return
        self._rehighlight_pending = True
        QTimer.singleShot(0, self._run_scheduled_rehighlight)

    def _run_scheduled_rehighlight(self) -> None:
        self._rehighlight_pending = False
        if self.document() is not None:
            self.rehighlight()

    def highlightBlock(self, text: str) -> None:  # type: ignore
        doc = self.document()
        if doc is None:
            return
        block_start = self.currentBlock().position()
        if self._is_stale(doc, block_start, text):
            self._refresh(doc)
        index = self._index
        block_end = block_start + len(text)

        setFormat = self.setFormat
        for span, a, b in index.spans_between(block_start, block_end):
            setFormat(a, b - a, self._format_for(span.category, span.color))
        # The newline itself is not part of the block text
        cat = index.end_category(index.line_at(block_end))
        if cat is None:
            state = _STATE_NORMAL
        else:
            state = _STATE_COMMENT if cat is Category.COMMENT else _STATE_STRING
        self.setCurrentBlockState(state)


class ErrorLineHighlighter(QSyntaxHighlighter):
    """Paints output lines that carry an error location."""

    def __init__(self, document, foreground: str = ERROR_FOREGROUND, background: str = ERROR_BACKGROUND):
        QSyntaxHighlighter.__init__(self, document)
        self.fmt_error = QTextCharFormat()
        self.fmt_error.setForeground(_qcolor_from_css(foreground))
        self.fmt_error.setBackground(_qcolor_from_css(background))

    def location_for_block(self, block) -> ErrorLocation | None:
        try:
            return parse_error_location(block.text())
        except Exception:
            return None

    def highlightBlock(self, text: str) -> None:  # type: ignore
        if text and parse_error_location(text) is not None:
            self.setFormat(0, len(text), self.fmt_error)


# --------------------------
# Factories
# --------------------------

def create_kotlin_highlighter(
    document,
    colors=None,
    containment: str | None = None,
    debug: bool | None = None,
):
    """Create the editor highlighter; unset options come from settings.json."""
    cfg = load_config()
    if colors is None:
        colors = category_colors(cfg)
    if containment is None:
        containment = highlight_containment(cfg)
    if debug is None:
        debug = highlight_debug(cfg)
    return KotlinSpanHighlighter(document, colors=colors, containment=containment, debug=debug)


def create_output_highlighter(document):
    return ErrorLineHighlighter(document)
