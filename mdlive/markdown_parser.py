r"""Segment Markdown source into block-level document structure.

Lines are classified one at a time by a small state machine. Each open
paragraph or list accumulates its raw text and hands it to
:func:`~mdlive.inline_parser.parse_inline` once, when the block closes. Code
fences are collected verbatim. No input is rejected: anything that does not
match a structural rule becomes paragraph text, and an unterminated fence is
closed at the end of the document.

Classification precedence
-------------------------
1. Inside a code fence only the closing fence is recognised.
2. Opening fence (````` ``` ````` plus optional language).
3. ``#`` to ``######`` followed by a space: heading.
4. Three or more dashes alone: horizontal rule.
5. ``-``, ``+`` or ``*`` followed by a space: unordered list item.
6. ``<digits>.`` followed by a space: ordered list item.
7. Blank line: closes the open paragraph or list.
8. Anything else: paragraph text.

Example
-------
>>> from mdlive.markdown_parser import parse_document
>>> doc = parse_document("# Title\n\n- a\n- b\n")
>>> [type(block).__name__ for block in doc]
['Heading', 'UnorderedList']
"""

from __future__ import annotations

import enum
import re
import typing as typ

from .inline_parser import parse_inline
from .models import (
    Block,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    InlineSequence,
    OrderedList,
    Paragraph,
    UnorderedList,
)

FENCE_OPEN_PATTERN = re.compile(r"^ {0,3}```(?P<info>[^`]*)$")
FENCE_CLOSE_PATTERN = re.compile(r"^ {0,3}```\s*$")
HEADING_PATTERN = re.compile(r"^(?P<marks>#{1,6}) (?P<text>.*)$")
RULE_PATTERN = re.compile(r"^-{3,}$")
UNORDERED_ITEM_PATTERN = re.compile(r"^[-+*] (?P<text>.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^\d+\. (?P<text>.*)$")


class SegmenterState(enum.Enum):
    """States of the line-driven block segmenter."""

    DEFAULT = "default"
    IN_PARAGRAPH = "in_paragraph"
    IN_UNORDERED_LIST = "in_unordered_list"
    IN_ORDERED_LIST = "in_ordered_list"
    IN_CODE_BLOCK = "in_code_block"


def _fence_language(info: str) -> str | None:
    """Return the language tag from a fence info string such as ``rust,no_run``."""
    words = info.strip().split()
    if not words:
        return None
    language = words[0].split(",", 1)[0]
    return language or None


class BlockSegmenter:
    """Accumulate classified lines into :class:`~mdlive.models.Block` values.

    A segmenter instance is single use: feed every line through
    :meth:`feed` and call :meth:`finish` to obtain the document.
    """

    def __init__(self) -> None:
        self.state = SegmenterState.DEFAULT
        self._blocks: list[Block] = []
        self._pending: list[str] = []
        self._language: str | None = None

    def feed(self, line: str) -> None:
        """Classify ``line`` and update the open block accordingly."""
        line = line.rstrip("\r")
        if self.state is SegmenterState.IN_CODE_BLOCK:
            if FENCE_CLOSE_PATTERN.match(line):
                self._close()
            else:
                self._pending.append(line)
            return

        # heading and list markers are matched untrimmed to keep their space
        stripped = line.rstrip()
        if fence := FENCE_OPEN_PATTERN.match(stripped):
            self._close()
            self.state = SegmenterState.IN_CODE_BLOCK
            self._language = _fence_language(fence.group("info"))
        elif heading := HEADING_PATTERN.match(line):
            self._close()
            level = len(heading.group("marks"))
            content = parse_inline(heading.group("text").strip())
            self._blocks.append(Heading(level=level, content=content))
        elif RULE_PATTERN.match(stripped):
            self._close()
            self._blocks.append(HorizontalRule())
        elif item := UNORDERED_ITEM_PATTERN.match(line):
            self._add_item(SegmenterState.IN_UNORDERED_LIST, item.group("text"))
        elif item := ORDERED_ITEM_PATTERN.match(line):
            self._add_item(SegmenterState.IN_ORDERED_LIST, item.group("text"))
        elif not stripped:
            self._close()
        else:
            if self.state is not SegmenterState.IN_PARAGRAPH:
                self._close()
                self.state = SegmenterState.IN_PARAGRAPH
            self._pending.append(stripped.strip())

    def finish(self) -> Document:
        """Close any open block (including an unterminated fence)."""
        self._close()
        return Document(tuple(self._blocks))

    def _add_item(self, state: SegmenterState, text: str) -> None:
        if self.state is not state:
            self._close()
            self.state = state
        self._pending.append(text.strip())

    def _close(self) -> None:
        """Emit the open block, if any, and return to the default state."""
        match self.state:
            case SegmenterState.IN_PARAGRAPH:
                self._blocks.append(Paragraph(parse_inline("\n".join(self._pending))))
            case SegmenterState.IN_UNORDERED_LIST:
                self._blocks.append(UnorderedList(self._inline_items()))
            case SegmenterState.IN_ORDERED_LIST:
                self._blocks.append(OrderedList(self._inline_items()))
            case SegmenterState.IN_CODE_BLOCK:
                self._blocks.append(CodeBlock(tuple(self._pending), self._language))
            case SegmenterState.DEFAULT:
                pass
        self.state = SegmenterState.DEFAULT
        self._pending = []
        self._language = None

    def _inline_items(self) -> tuple[InlineSequence, ...]:
        return tuple(parse_inline(item) for item in self._pending)


def segment_lines(lines: typ.Iterable[str]) -> Document:
    """Build a :class:`~mdlive.models.Document` from source lines.

    Parameters
    ----------
    lines : Iterable[str]
        Source lines without their trailing ``\n`` (a trailing ``\r`` is
        tolerated).

    Returns
    -------
    Document
        Blocks in source order.
    """
    segmenter = BlockSegmenter()
    for line in lines:
        segmenter.feed(line)
    return segmenter.finish()


def parse_document(markdown_text: str) -> Document:
    """Split ``markdown_text`` into lines and segment it into blocks."""
    lines = markdown_text.split("\n")
    if lines and not lines[-1]:
        lines.pop()
    return segment_lines(lines)


__all__ = [
    "BlockSegmenter",
    "SegmenterState",
    "parse_document",
    "segment_lines",
]
