"""Inline rich-text markup used for bullet fragments.

Bullets are stored as small HTML fragments that may only carry bold, italic
and underline spans plus line breaks. Everything here works on a flat list of
``(character, formats)`` pairs, so formatting state is always derived from the
markup itself and never cached.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag


class TextFormat(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


_TAG_FORMATS = {
    "b": TextFormat.BOLD,
    "strong": TextFormat.BOLD,
    "i": TextFormat.ITALIC,
    "em": TextFormat.ITALIC,
    "u": TextFormat.UNDERLINE,
}

# Serialisation order, outermost first.
_FORMAT_TAGS: Tuple[Tuple[TextFormat, str], ...] = (
    (TextFormat.BOLD, "b"),
    (TextFormat.ITALIC, "i"),
    (TextFormat.UNDERLINE, "u"),
)

_DROPPED_TAGS = {"script", "style", "head", "title"}

_STYLE_RULES = (
    (re.compile(r"font-weight\s*:\s*(bold|[6-9]00)", re.I), TextFormat.BOLD),
    (re.compile(r"font-style\s*:\s*italic", re.I), TextFormat.ITALIC),
    (re.compile(r"text-decoration[a-z-]*\s*:[^;]*underline", re.I), TextFormat.UNDERLINE),
)

Formats = FrozenSet[TextFormat]


@dataclass(frozen=True)
class TextRun:
    """A stretch of text sharing one set of formats."""

    text: str
    formats: Formats = frozenset()

    @property
    def bold(self) -> bool:
        return TextFormat.BOLD in self.formats

    @property
    def italic(self) -> bool:
        return TextFormat.ITALIC in self.formats

    @property
    def underline(self) -> bool:
        return TextFormat.UNDERLINE in self.formats


@dataclass(frozen=True)
class TextSelection:
    """Character offsets into the plain text of a fragment (``end`` exclusive)."""

    start: int
    end: int

    @classmethod
    def caret(cls, offset: int) -> "TextSelection":
        return cls(offset, offset)

    @property
    def collapsed(self) -> bool:
        return self.start == self.end

    def clamp(self, length: int) -> "TextSelection":
        start, end = sorted((self.start, self.end))
        start = max(0, min(start, length))
        end = max(0, min(end, length))
        return TextSelection(start, end)


@dataclass(frozen=True)
class FormatState:
    bold: bool = False
    italic: bool = False
    underline: bool = False

    @classmethod
    def from_formats(cls, formats: Iterable[TextFormat]) -> "FormatState":
        formats = set(formats)
        return cls(
            bold=TextFormat.BOLD in formats,
            italic=TextFormat.ITALIC in formats,
            underline=TextFormat.UNDERLINE in formats,
        )

    def is_active(self, text_format: TextFormat) -> bool:
        return getattr(self, TextFormat(text_format).value)


# ---------------------------------------------------------------------------
# Parsing and serialisation
# ---------------------------------------------------------------------------

def parse_runs(markup: Optional[str]) -> List[TextRun]:
    """Parse ``markup`` into runs, keeping only supported formatting."""

    soup = BeautifulSoup(markup or "", "html.parser")
    runs: List[TextRun] = []
    _walk(soup, frozenset(), runs)
    return _merge_runs(runs)


def render_runs(runs: Iterable[TextRun]) -> str:
    """Serialise runs back into canonical markup."""

    parts: List[str] = []
    for run in _merge_runs(runs):
        body = "<br>".join(html.escape(line, quote=False) for line in run.text.split("\n"))
        for text_format, tag in reversed(_FORMAT_TAGS):
            if text_format in run.formats:
                body = f"<{tag}>{body}</{tag}>"
        parts.append(body)
    return "".join(parts)


def sanitize_markup(markup: Optional[str]) -> str:
    """Drop attributes and unsupported tags, returning canonical markup."""

    return render_runs(parse_runs(markup))


def plain_text(markup: Optional[str]) -> str:
    return "".join(run.text for run in parse_runs(markup))


def _walk(node: Tag, formats: Formats, runs: List[TextRun]) -> None:
    for child in node.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text:
                runs.append(TextRun(text, formats))
            continue
        if not isinstance(child, Tag) or child.name in _DROPPED_TAGS:
            continue
        if child.name == "br":
            runs.append(TextRun("\n", formats))
            continue
        _walk(child, formats | _tag_formats(child), runs)


def _tag_formats(tag: Tag) -> Formats:
    found = set()
    if tag.name in _TAG_FORMATS:
        found.add(_TAG_FORMATS[tag.name])
    style = tag.get("style")
    if style:
        for pattern, text_format in _STYLE_RULES:
            if pattern.search(style):
                found.add(text_format)
    return frozenset(found)


def _merge_runs(runs: Iterable[TextRun]) -> List[TextRun]:
    merged: List[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].formats == run.formats:
            merged[-1] = TextRun(merged[-1].text + run.text, run.formats)
        else:
            merged.append(run)
    return merged


def _characters(markup: Optional[str]) -> List[Tuple[str, Formats]]:
    return [(char, run.formats) for run in parse_runs(markup) for char in run.text]


# ---------------------------------------------------------------------------
# Formatting queries
# ---------------------------------------------------------------------------

def active_formats(markup: Optional[str], selection: Optional[TextSelection]) -> FormatState:
    """Return the formats active over ``selection`` in ``markup``.

    A format is active when every selected character carries it. A collapsed
    selection reports the formats of the character before the caret (or the
    first character when the caret is at the start).
    """

    chars = _characters(markup)
    if not chars or selection is None:
        return FormatState()

    selection = selection.clamp(len(chars))
    if selection.collapsed:
        index = max(selection.start - 1, 0)
        return FormatState.from_formats(chars[index][1])

    selected = chars[selection.start:selection.end]
    common = set(selected[0][1])
    for _, formats in selected[1:]:
        common &= formats
    return FormatState.from_formats(common)


def toggle_format(
    markup: Optional[str], selection: TextSelection, text_format: TextFormat
) -> str:
    """Apply or remove ``text_format`` over ``selection``.

    The format is removed when it is already active across the whole
    selection and applied everywhere otherwise. A collapsed selection leaves
    the markup unchanged apart from sanitisation.
    """

    text_format = TextFormat(text_format)
    chars = _characters(markup)
    selection = selection.clamp(len(chars))
    if selection.collapsed:
        return render_runs(TextRun(char, formats) for char, formats in chars)

    remove = active_formats(markup, selection).is_active(text_format)
    updated: List[TextRun] = []
    for idx, (char, formats) in enumerate(chars):
        if selection.start <= idx < selection.end:
            formats = formats - {text_format} if remove else formats | {text_format}
        updated.append(TextRun(char, formats))
    return render_runs(updated)
