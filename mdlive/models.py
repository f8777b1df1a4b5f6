"""Immutable document tree produced by the Markdown parsers.

Blocks and spans are frozen, slotted dataclasses so a parsed
:class:`Document` can be shared between threads without copying. A fresh tree
is built on every render pass; nothing mutates it afterwards.

Example
-------
>>> from mdlive.models import Bold, Paragraph, Text
>>> para = Paragraph(content=(Text("Hello "), Bold((Text("world"),))))
>>> para.content[1].children[0].text
'world'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


@dc.dataclass(frozen=True, slots=True)
class Text:
    """Literal run of characters."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class Code:
    """Inline code; the text is never parsed for further markup."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class Link:
    """Hyperlink with literal label text."""

    text: str
    url: str


@dc.dataclass(frozen=True, slots=True)
class Bold:
    """Strong emphasis wrapping nested spans."""

    children: InlineSequence


@dc.dataclass(frozen=True, slots=True)
class Italic:
    """Emphasis wrapping nested spans."""

    children: InlineSequence


Span: typ.TypeAlias = Text | Code | Link | Bold | Italic
InlineSequence: typ.TypeAlias = tuple[Span, ...]


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """ATX heading with a level between one and six.

    Raises
    ------
    ValueError
        If ``level`` falls outside ``1..6``.
    """

    level: int
    content: InlineSequence

    def __post_init__(self) -> None:
        if not MIN_HEADING_LEVEL <= self.level <= MAX_HEADING_LEVEL:
            msg = f"Heading level must be between 1 and 6, got {self.level}."
            raise ValueError(msg)


@dc.dataclass(frozen=True, slots=True)
class Paragraph:
    """Run of consecutive text lines."""

    content: InlineSequence


@dc.dataclass(frozen=True, slots=True)
class UnorderedList:
    """Bulleted list; one inline sequence per item."""

    items: tuple[InlineSequence, ...]


@dc.dataclass(frozen=True, slots=True)
class OrderedList:
    """Numbered list; one inline sequence per item."""

    items: tuple[InlineSequence, ...]


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced code kept verbatim.

    Attributes
    ----------
    raw_lines : tuple[str, ...]
        Source lines between the fences, unmodified.
    language : str or None
        Language tag taken from the opening fence, if any.
    """

    raw_lines: tuple[str, ...]
    language: str | None = None


@dc.dataclass(frozen=True, slots=True)
class HorizontalRule:
    """Thematic break written as three or more dashes."""


Block: typ.TypeAlias = (
    Heading | Paragraph | UnorderedList | OrderedList | CodeBlock | HorizontalRule
)


@dc.dataclass(frozen=True, slots=True)
class Document:
    """Ordered blocks of a parsed Markdown source."""

    blocks: tuple[Block, ...] = ()

    def __iter__(self) -> typ.Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)


__all__ = [
    "MAX_HEADING_LEVEL",
    "MIN_HEADING_LEVEL",
    "Block",
    "Bold",
    "Code",
    "CodeBlock",
    "Document",
    "Heading",
    "HorizontalRule",
    "InlineSequence",
    "Italic",
    "Link",
    "OrderedList",
    "Paragraph",
    "Span",
    "Text",
    "UnorderedList",
]
