"""Tests for ``mdlive.generator.renderer``.

The renderer must escape literal text exactly once, keep output byte-stable
for a given document and settings, and only emit Pygments markup when
highlighting is enabled and the fence names a language Pygments knows.
"""

from __future__ import annotations

import re

import pytest
from bs4 import BeautifulSoup

from mdlive import render_markdown
from mdlive.generator.renderer import HtmlRenderer, escape_text, escape_url
from mdlive.markdown_parser import parse_document
from mdlive.models import (
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    Link,
    OrderedList,
    Paragraph,
    Text,
)


def _squash(html: str) -> str:
    """Drop whitespace between tags so structure can be compared directly."""
    return re.sub(r">\s+<", "><", html.strip())


def test_heading_and_paragraph_end_to_end() -> None:
    html = render_markdown(
        "# Title\n\nHello **world** and *italic* and `code`.\n"
    )
    assert _squash(html) == (
        "<h1>Title</h1>"
        "<p>Hello <strong>world</strong> and <em>italic</em> and "
        "<code>code</code>.</p>"
    )


def test_lists_render_items_in_order() -> None:
    html = render_markdown("- a\n- b\n\n1. one\n2. two\n")
    assert _squash(html) == (
        "<ul><li>a</li><li>b</li></ul><ol><li>one</li><li>two</li></ol>"
    )


def test_horizontal_rule() -> None:
    assert HtmlRenderer().render(Document((HorizontalRule(),))) == "<hr>"


def test_heading_level_maps_to_tag() -> None:
    doc = Document((Heading(level=4, content=(Text("Deep"),)),))
    assert HtmlRenderer().render(doc) == "<h4>Deep</h4>"


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("a < b & c > d", "<p>a &lt; b &amp; c &gt; d</p>"),
        ("say \"hi\" & 'bye'", "<p>say &quot;hi&quot; &amp; &#x27;bye&#x27;</p>"),
        ("already &amp; escaped", "<p>already &amp;amp; escaped</p>"),
    ],
)
def test_text_is_escaped_exactly_once(source: str, expected: str) -> None:
    assert render_markdown(source) == expected


def test_code_span_content_is_escaped() -> None:
    assert render_markdown("`<div>`") == "<p><code>&lt;div&gt;</code></p>"


def test_link_href_and_label_are_escaped() -> None:
    renderer = HtmlRenderer()
    html = renderer.render_inline(
        (Link('a <b> & "c"', 'https://example.com/?q="x"&y=<z>'),)
    )
    assert html == (
        '<a href="https://example.com/?q=&quot;x&quot;&y=&lt;z&gt;">'
        "a &lt;b&gt; &amp; &quot;c&quot;</a>"
    )


def test_escape_helpers() -> None:
    assert escape_text("<&>") == "&lt;&amp;&gt;"
    assert escape_url("/a?b=1&c=2") == "/a?b=1&c=2"


def test_rendering_is_deterministic() -> None:
    doc = parse_document("# T\n\n- *a*\n- **b**\n\n```py\nx = 1\n```\n")
    renderer = HtmlRenderer(highlight_code=True)
    assert renderer.render(doc) == renderer.render(doc)
    assert HtmlRenderer(highlight_code=True).render(doc) == renderer.render(doc)


def test_code_block_without_highlighting() -> None:
    block = CodeBlock(raw_lines=("if a < b:", "    pass"), language="python")
    html = HtmlRenderer().code_block(block)
    assert html == (
        '<pre><code class="language-python">if a &lt; b:\n    pass</code></pre>'
    )


def test_code_block_without_language_has_no_class() -> None:
    html = HtmlRenderer(highlight_code=True).code_block(CodeBlock(("x",)))
    assert html == "<pre><code>x</code></pre>"


def test_highlighted_code_block_uses_pygments_spans() -> None:
    block = CodeBlock(raw_lines=("def f():", "    return 1"), language="python")
    html = HtmlRenderer(highlight_code=True).code_block(block)
    soup = BeautifulSoup(html, "html.parser")
    pre = soup.find("pre")
    assert pre is not None
    assert pre.get("class") == ["codehilite"]
    code = pre.find("code")
    assert code is not None
    assert code.get("class") == ["language-python"]
    assert code.find("span") is not None, "expected Pygments token spans"
    assert code.get_text() == "def f():\n    return 1"


def test_unknown_language_falls_back_to_plain_text() -> None:
    block = CodeBlock(raw_lines=("<x>",), language="no-such-lexer")
    html = HtmlRenderer(highlight_code=True).code_block(block)
    assert html == '<pre><code class="language-no-such-lexer">&lt;x&gt;</code></pre>'


def test_stylesheet_only_when_highlighting() -> None:
    assert HtmlRenderer().stylesheet == ""
    css = HtmlRenderer(highlight_code=True).stylesheet
    assert ".codehilite" in css


def test_unknown_block_type_is_rejected() -> None:
    with pytest.raises(TypeError, match="Unsupported block type"):
        HtmlRenderer().render_block(object())  # type: ignore[arg-type]


def test_paragraph_preserves_line_breaks_inside_text() -> None:
    doc = Document((Paragraph((Text("one\ntwo"),)),))
    assert HtmlRenderer().render(doc) == "<p>one\ntwo</p>"


def test_ordered_list_uses_ol() -> None:
    doc = Document((OrderedList(((Text("x"),),)),))
    assert HtmlRenderer().render(doc) == "<ol>\n<li>x</li>\n</ol>"


def test_empty_heading_and_item_render_empty_elements() -> None:
    assert _squash(render_markdown("# \n\n- \n")) == "<h1></h1><ul><li></li></ul>"
