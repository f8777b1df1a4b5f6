r"""Tokenize inline Markdown markup into span trees.

The scanner walks a line (or a joined paragraph) left to right and recognises
inline code, links, bold and italic spans. Code spans and links are leaves and
win over emphasis: stars inside them are never treated as delimiters. Anything
that does not close before the end of the text is emitted as literal text, so
:func:`parse_inline` never fails.

Emphasis rules
--------------
- A run of two or more ``*`` tries ``**`` (bold) first. When no closer exists
  the first star becomes literal and scanning resumes at the next character.
- A single ``*`` tries italic.
- ``***text***`` resolves as bold wrapping italic.

Example
-------
>>> from mdlive.inline_parser import parse_inline
>>> parse_inline("a **b** `c`")
(Text(text='a '), Bold(children=(Text(text='b'),)), Text(text=' '), Code(text='c'))
"""

from __future__ import annotations

from .models import Bold, Code, InlineSequence, Italic, Link, Span, Text

BACKTICK = "`"
STAR = "*"
LINK_OPEN = "["
LINK_LABEL_CLOSE = "]"
LINK_URL_OPEN = "("
LINK_URL_CLOSE = ")"
BOLD_WIDTH = 2
ITALIC_WIDTH = 1


def _star_run(text: str, index: int) -> int:
    """Return the number of consecutive stars starting at ``index``."""
    end = index
    while end < len(text) and text[end] == STAR:
        end += 1
    return end - index


def _match_code(text: str, start: int) -> int | None:
    """Return the closing backtick index for a code span opened at ``start``."""
    close = text.find(BACKTICK, start + 1)
    if close <= start + 1:
        return None
    return close


def _match_link(text: str, start: int) -> tuple[int, int] | None:
    """Return ``(label_end, url_end)`` for a ``[text](url)`` link at ``start``.

    The label ends at the first ``]``, which must be followed directly by
    ``(``; the URL ends at the next ``)``. Links never span lines.
    """
    label_end = text.find(LINK_LABEL_CLOSE, start + 1)
    if label_end == -1 or text[label_end + 1 : label_end + 2] != LINK_URL_OPEN:
        return None
    url_end = text.find(LINK_URL_CLOSE, label_end + 2)
    if url_end == -1 or "\n" in text[start:url_end]:
        return None
    return label_end, url_end


def _skip_leaf(text: str, index: int) -> int | None:
    """Return the index just past a code span or link starting at ``index``."""
    char = text[index]
    if char == BACKTICK:
        close = _match_code(text, index)
        if close is not None:
            return close + 1
    elif char == LINK_OPEN:
        link = _match_link(text, index)
        if link is not None:
            return link[1] + 1
    return None


def _find_closer(text: str, start: int, width: int) -> int | None:
    """Locate the closing delimiter for an emphasis span.

    Parameters
    ----------
    text : str
        Full text being scanned.
    start : int
        Index of the first content character after the opener.
    width : int
        ``2`` for bold, ``1`` for italic.

    Returns
    -------
    int or None
        Index where the closing delimiter begins, or ``None`` when the span
        never closes. Empty spans are never formed.

    Notes
    -----
    An opener that never closes scans to the end of ``text``, as does each
    ``[`` or backtick probed as a leaf on the way. Text with many unmatched
    openers therefore costs time quadratic in its length; paragraphs are
    tokenized one at a time, which keeps that length small in practice.
    """
    index = start
    while index < len(text):
        skipped = _skip_leaf(text, index)
        if skipped is not None:
            index = skipped
            continue
        if text[index] != STAR:
            index += 1
            continue
        run = _star_run(text, index)
        if width == BOLD_WIDTH:
            # a lone star belongs to a nested italic span
            if run == ITALIC_WIDTH:
                index += run
                continue
            close = index + run - BOLD_WIDTH
        else:
            if run == BOLD_WIDTH:
                index += run
                continue
            close = index + run - ITALIC_WIDTH
        if close > start:
            return close
        index += run
    return None


def parse_inline(text: str) -> InlineSequence:
    """Parse inline markup in ``text`` into a tuple of spans.

    Parameters
    ----------
    text : str
        A single line or the newline-joined lines of a paragraph.

    Returns
    -------
    InlineSequence
        Spans in source order. Adjacent literal characters are merged into a
        single :class:`~mdlive.models.Text`.
    """
    spans: list[Span] = []
    literal: list[str] = []

    def _emit(span: Span) -> None:
        if literal:
            spans.append(Text("".join(literal)))
            literal.clear()
        spans.append(span)

    index = 0
    while index < len(text):
        char = text[index]
        if char == BACKTICK:
            close = _match_code(text, index)
            if close is not None:
                _emit(Code(text[index + 1 : close]))
                index = close + 1
                continue
        elif char == LINK_OPEN:
            link = _match_link(text, index)
            if link is not None:
                label_end, url_end = link
                _emit(Link(text[index + 1 : label_end], text[label_end + 2 : url_end]))
                index = url_end + 1
                continue
        elif char == STAR:
            width = BOLD_WIDTH if _star_run(text, index) >= BOLD_WIDTH else ITALIC_WIDTH
            close = _find_closer(text, index + width, width)
            if close is not None:
                children = parse_inline(text[index + width : close])
                _emit(Bold(children) if width == BOLD_WIDTH else Italic(children))
                index = close + width
                continue
        literal.append(char)
        index += 1

    if literal:
        spans.append(Text("".join(literal)))
    return tuple(spans)


__all__ = ["parse_inline"]
