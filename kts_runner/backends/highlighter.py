"""
Kotlin script highlighter core (Qt-free).

Turns the full editor buffer into a list of StyleSpan objects. The result is a
pure function of the text: no state is kept between calls, nothing is printed
and nothing raises, whatever the input looks like. Half-typed code (open
strings, unmatched comments) just produces fewer spans.

Passes, in application order:
- line comments, block comments
- double-quoted strings (and char literals), triple-quoted raw strings
- numeric literals (decimal, float/exponent, 0x.., 0b.., '_' separators, suffixes)
- hard keywords, well-known builtin calls, primitive type names

Containment (is a candidate inside a comment or string?) has two modes:
- "scan": one left-to-right state machine builds the comment/string regions
  once; candidates are checked with a binary search. Default.
- "heuristic": the old per-candidate prefix rescans (quote parity, opener and
  closer counts). Kept for output parity; may produce overlapping spans.

The whole buffer is re-lexed on every change. That is fine for scripts of a few
hundred lines; bigger files would want an incremental lexer.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


class Category(str, Enum):
    KEYWORD = "keyword"
    STRING = "string"
    COMMENT = "comment"
    NUMBER = "number"
    BUILTIN_FUNCTION = "builtin_function"
    TYPE = "type"


DEFAULT_COLORS: Dict[Category, str] = {
    Category.KEYWORD: "#0033B3",
    Category.STRING: "#067D17",
    Category.COMMENT: "#8C8C8C",
    Category.NUMBER: "#1750EB",
    Category.BUILTIN_FUNCTION: "#00627A",
    Category.TYPE: "#000000",
}

# Hard keywords only; soft keywords need context to tell them from identifiers.
# Tuples keep declaration order (heuristic mode emits in this order).
KEYWORD_ORDER = tuple(
    "fun val var if else for while return class when is in object interface package as"
    " break continue do null true false this super throw try typealias typeof"
    .split()
)
BUILTIN_FUNCTION_ORDER = tuple(
    "println print readLine readln require check error repeat map filter".split()
)
TYPE_ORDER = tuple("Byte Short Int Long Float Double Boolean Char String".split())

KEYWORDS = frozenset(KEYWORD_ORDER)
BUILTIN_FUNCTIONS = frozenset(BUILTIN_FUNCTION_ORDER)
TYPES = frozenset(TYPE_ORDER)

SCAN = "scan"
HEURISTIC = "heuristic"
CONTAINMENT_MODES = (SCAN, HEURISTIC)

# Region kinds produced by scan_regions()
LINE_COMMENT = "line_comment"
BLOCK_COMMENT = "block_comment"
STRING = "string"
RAW_STRING = "raw_string"
CHAR = "char"

_COMMENT_KINDS = (LINE_COMMENT, BLOCK_COMMENT)
_STRING_KINDS = (STRING, RAW_STRING, CHAR)

_DEC = r"\d(?:[\d_]*\d)?"
NUMBER_RE = re.compile(
    r"\b0[xX][0-9a-fA-F](?:[0-9a-fA-F_]*[0-9a-fA-F])?(?:[uU][lL]?|[lL])?\b"
    r"|\b0[bB][01](?:[01_]*[01])?(?:[uU][lL]?|[lL])?\b"
    rf"|\b{_DEC}(?:\.(?:{_DEC})?)?(?:[eE][+-]?\d+)?(?:[fFdDlL]|[uU][lL]?)?\b"
)

# Legacy regex passes (heuristic mode)
LINE_COMMENT_RE = re.compile(r"//[^\r\n]*")
BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
RAW_STRING_RE = re.compile(r'"{3}.*?"{3}', re.DOTALL)

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


def _word_re(words) -> "re.Pattern[str]":
    alts = sorted(words, key=lambda w: (-len(w), w))
    return re.compile(r"\b(?:" + "|".join(map(re.escape, alts)) + r")\b")


KEYWORD_RE = _word_re(KEYWORDS)
BUILTIN_RE = _word_re(BUILTIN_FUNCTIONS)
TYPE_RE = _word_re(TYPES)

_WORD_PASSES = (
    (KEYWORD_RE, Category.KEYWORD),
    (BUILTIN_RE, Category.BUILTIN_FUNCTION),
    (TYPE_RE, Category.TYPE),
)


@dataclass(frozen=True)
class StyleSpan:
    start: int
    end: int  # exclusive
    category: Category
    color: str

    @property
    def length(self) -> int:
        return self.end - self.start


Region = Tuple[int, int, str]


def _scan_quoted(code: str, i: int, quote: str) -> int:
    """Return the end of the quoted literal opened at ``i``.

    Stops after the closing quote, or at the line break (LF or CR) / end of
    text when the literal is never closed.
    """
    n = len(code)
    j = i + 1
    while j < n:
        c = code[j]
        if c == "\\" and j + 1 < n and code[j + 1] not in "\r\n":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n" or c == "\r":
            return j
        j += 1
    return n


def scan_regions(code: str) -> List[Region]:
    """Split ``code`` into comment/string regions with one left-to-right pass.

    Returns sorted, non-overlapping ``(start, end, kind)`` triples. Unclosed
    block comments and raw strings run to the end of the text; unclosed
    single-line literals and line comments stop at LF or CR.
    """
    regions: List[Region] = []
    if not code:
        return regions
    i = 0; n = len(code); find = code.find
    while i < n:
        ch = code[i]
        if ch == "/" and i + 1 < n:
            nxt = code[i + 1]
            if nxt == "/":
                j = i + 2
                while j < n and code[j] not in "\r\n":
                    j += 1
                regions.append((i, j, LINE_COMMENT))
                i = j; continue
            if nxt == "*":
                j = find("*/", i + 2)
                j = n if j == -1 else j + 2
                regions.append((i, j, BLOCK_COMMENT))
                i = j; continue
            i += 1
        elif ch == '"':
            if code.startswith('"""', i):
                j = find('"""', i + 3)
                j = n if j == -1 else j + 3
                regions.append((i, j, RAW_STRING))
            else:
                j = _scan_quoted(code, i, '"')
                regions.append((i, j, STRING))
            i = j
        elif ch == "'":
            j = _scan_quoted(code, i, "'")
            regions.append((i, j, CHAR))
            i = j
        else:
            i += 1
    return regions


class RegionIndex:
    """Comment/string regions of one text with O(log n) position lookups."""

    def __init__(self, code: str):
        self.regions: List[Region] = scan_regions(code)
        self._starts = [r[0] for r in self.regions]

    def region_at(self, pos: int) -> Optional[Region]:
        idx = bisect.bisect_right(self._starts, pos) - 1
        if idx < 0:
            return None
        region = self.regions[idx]
        return region if pos < region[1] else None

    def in_comment(self, pos: int) -> bool:
        region = self.region_at(pos)
        return region is not None and region[2] in _COMMENT_KINDS

    def in_string(self, pos: int) -> bool:
        region = self.region_at(pos)
        return region is not None and region[2] in _STRING_KINDS

    def contains(self, pos: int) -> bool:
        return self.region_at(pos) is not None


# --------------------------
# Containment checks
# --------------------------

def _heuristic_inside_comment(code: str, pos: int) -> bool:
    before = code[:pos]
    if "//" in _LINE_SPLIT_RE.split(before)[-1]:
        return True
    # Counts every '/' as an opener once any "/*" exists (and every '*' as a
    # closer once any "*/" exists). Misfires on stray slashes and stars.
    opens = before.count("/") if "/*" in before else 0
    closes = before.count("*") if "*/" in before else 0
    return opens > closes


def _heuristic_inside_string(code: str, pos: int) -> bool:
    before = code[:pos]
    quotes = 0
    for i, ch in enumerate(before):
        if ch == '"' and (i == 0 or before[i - 1] != "\\"):
            quotes += 1
    return quotes % 2 == 1


def is_inside_comment(code: str, pos: int, strict: bool = True) -> bool:
    """True if the character at ``pos`` belongs to a comment.

    ``strict=False`` uses the legacy prefix heuristic instead of the scanner.
    """
    if not code or pos < 0 or pos > len(code):
        return False
    if not strict:
        return _heuristic_inside_comment(code, pos)
    return RegionIndex(code).in_comment(pos)


def is_inside_string(code: str, pos: int, strict: bool = True) -> bool:
    """True if the character at ``pos`` belongs to a string or char literal.

    ``strict=False`` uses the legacy quote-parity heuristic.
    """
    if not code or pos < 0 or pos > len(code):
        return False
    if not strict:
        return _heuristic_inside_string(code, pos)
    return RegionIndex(code).in_string(pos)


# --------------------------
# Highlighting
# --------------------------

def resolve_colors(colors: Optional[Mapping] = None) -> Dict[Category, str]:
    """Overlay ``colors`` (keyed by Category or its name) on DEFAULT_COLORS."""
    palette = dict(DEFAULT_COLORS)
    if not colors:
        return palette
    for key, value in colors.items():
        try:
            cat = key if isinstance(key, Category) else Category(str(key).lower())
        except ValueError:
            continue
        if isinstance(value, str) and value:
            palette[cat] = value
    return palette


_REGION_PASSES = (
    ((LINE_COMMENT,), Category.COMMENT),
    ((BLOCK_COMMENT,), Category.COMMENT),
    ((STRING, CHAR), Category.STRING),
    ((RAW_STRING,), Category.STRING),
)


def _highlight_scan(code: str, palette: Dict[Category, str]) -> List[StyleSpan]:
    index = RegionIndex(code)
    spans: List[StyleSpan] = []
    append = spans.append
    for kinds, cat in _REGION_PASSES:
        color = palette[cat]
        for start, end, kind in index.regions:
            if kind in kinds:
                append(StyleSpan(start, end, cat, color))

    contains = index.contains
    for rx, cat in ((NUMBER_RE, Category.NUMBER),) + _WORD_PASSES:
        color = palette[cat]
        for m in rx.finditer(code):
            a, b = m.span()
            if b > a and not contains(a):
                append(StyleSpan(a, b, cat, color))
    return spans


def _highlight_heuristic(code: str, palette: Dict[Category, str]) -> List[StyleSpan]:
    spans: List[StyleSpan] = []

    def run(rx, cat: Category, check_comment: bool, check_string: bool) -> None:
        color = palette[cat]
        for m in rx.finditer(code):
            a, b = m.span()
            if b <= a:
                continue
            if check_comment and _heuristic_inside_comment(code, a):
                continue
            if check_string and _heuristic_inside_string(code, a):
                continue
            spans.append(StyleSpan(a, b, cat, color))

    run(LINE_COMMENT_RE, Category.COMMENT, False, False)
    run(BLOCK_COMMENT_RE, Category.COMMENT, False, False)
    run(STRING_RE, Category.STRING, True, False)
    run(RAW_STRING_RE, Category.STRING, True, False)
    run(NUMBER_RE, Category.NUMBER, True, True)
    # One regex per word, in declaration order
    for words, cat in ((KEYWORD_ORDER, Category.KEYWORD), (BUILTIN_FUNCTION_ORDER, Category.BUILTIN_FUNCTION), (TYPE_ORDER, Category.TYPE)):
        for word in words:
            run(_word_re((word,)), cat, True, True)
    return spans


def highlight(
    code: str,
    colors: Optional[Mapping] = None,
    containment: str = SCAN,
) -> List[StyleSpan]:
    """Compute style spans for ``code``.

    Spans are returned in application order (pass order), not sorted by
    position. Unknown ``containment`` values fall back to "scan".
    """
    if not isinstance(code, str) or not code:
        return []
    palette = resolve_colors(colors)
    if containment == HEURISTIC:
        return _highlight_heuristic(code, palette)
    return _highlight_scan(code, palette)


class LineSpanIndex:
    """Spans of one text bucketed per LF-separated line.

    Built once per highlighting result so the editor can fetch the spans of a
    block with a bisect instead of walking the whole span list for every block.
    Buckets keep application order.
    """

    def __init__(self, text: str, spans: List[StyleSpan]):
        starts = [0]
        pos = text.find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = text.find("\n", pos + 1)
        self.line_starts: List[int] = starts
        count = len(starts); n = len(text)
        self._lines: List[List[Tuple[StyleSpan, int, int]]] = [[] for _ in range(count)]
        # Category of the first span covering each line's trailing newline
        self._ends: List[Optional[Category]] = [None] * count
        for span in spans:
            first = bisect.bisect_right(starts, span.start) - 1
            last = bisect.bisect_right(starts, max(span.end - 1, span.start)) - 1
            for i in range(max(first, 0), last + 1):
                line_start = starts[i]
                line_end = starts[i + 1] - 1 if i + 1 < count else n
                a = max(span.start, line_start)
                b = min(span.end, line_end)
                if b > a:
                    self._lines[i].append((span, a, b))
                if i + 1 < count and span.start <= line_end < span.end and self._ends[i] is None:
                    self._ends[i] = span.category

    def line_at(self, pos: int) -> int:
        idx = bisect.bisect_right(self.line_starts, pos) - 1
        return min(max(idx, 0), len(self.line_starts) - 1)

    def spans_between(self, start: int, end: int) -> List[Tuple[StyleSpan, int, int]]:
        """``(span, a, b)`` pieces inside ``[start, end)``, offsets relative to ``start``."""
        out: List[Tuple[StyleSpan, int, int]] = []
        for i in range(self.line_at(start), self.line_at(end) + 1):
            for span, a, b in self._lines[i]:
                a = max(a, start)
                b = min(b, end)
                if b > a:
                    out.append((span, a - start, b - start))
        return out

    def end_category(self, line: int) -> Optional[Category]:
        if 0 <= line < len(self._ends):
            return self._ends[line]
        return None


class HighlightCache:
    """Size-1 memo: last input text -> last span list.

    Owned by a single consumer (the editor's highlighter); not thread-safe.
    """

    def __init__(self, colors: Optional[Mapping] = None, containment: str = SCAN):
        if containment not in CONTAINMENT_MODES:
            raise ValueError(f"Unknown containment mode: {containment!r}")
        self.colors: Optional[Dict] = dict(colors) if colors else None
        self.containment = containment
        self._text: Optional[str] = None
        self._spans: List[StyleSpan] = []
        self.hits = 0
        self.misses = 0

    def spans(self, text: str) -> List[StyleSpan]:
        if self._text is not None and text == self._text:
            self.hits += 1
            return self._spans
        self.misses += 1
        self._spans = highlight(text, self.colors, self.containment)
        self._text = text
        return self._spans

    def configure(self, colors: Optional[Mapping] = None, containment: Optional[str] = None) -> None:
        if containment is not None:
            if containment not in CONTAINMENT_MODES:
                raise ValueError(f"Unknown containment mode: {containment!r}")
            self.containment = containment
        if colors is not None:
            self.colors = dict(colors) or None
        self.clear()

    def clear(self) -> None:
        self._text = None
        self._spans = []
