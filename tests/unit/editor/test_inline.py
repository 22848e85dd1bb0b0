"""Unit tests for editor/inline.py"""

from mdblocks.core.models import (
    CodeContent,
    EmphasisContent,
    HardBreakContent,
    InlineMathContent,
    LinkContent,
    StrongContent,
    TextContent,
)
from mdblocks.editor.inline import from_editor_inline, to_editor_inline


def test_styles_flatten_to_runs():
    """Nested marks become style flags on text runs."""
    content = [StrongContent(children=[TextContent(text="a"), EmphasisContent(children=[TextContent(text="b")])])]
    assert to_editor_inline(content) == [
        {"type": "text", "text": "a", "styles": {"bold": True}},
        {"type": "text", "text": "b", "styles": {"bold": True, "italic": True}},
    ]


def test_styles_rebuild_nesting():
    """Styled runs regroup under strong and emphasis wrappers."""
    content = [
        TextContent(text="x "),
        StrongContent(children=[TextContent(text="a"), EmphasisContent(children=[TextContent(text="b")])]),
    ]
    assert from_editor_inline(to_editor_inline(content)) == content


def test_code_run():
    """Code is a text run with the code style."""
    runs = to_editor_inline([CodeContent(text="x")])
    assert runs == [{"type": "text", "text": "x", "styles": {"code": True}}]
    assert from_editor_inline(runs) == [CodeContent(text="x")]


def test_link_run():
    """Links keep href and their inner runs."""
    runs = to_editor_inline([LinkContent(href="/a", children=[TextContent(text="go")])])
    assert runs == [{"type": "link", "href": "/a", "content": [{"type": "text", "text": "go", "styles": {}}], "styles": {}}]
    assert from_editor_inline(runs) == [LinkContent(href="/a", children=[TextContent(text="go")])]


def test_inline_math_run():
    """Inline math is its own run type; display mode is kept."""
    runs = to_editor_inline([InlineMathContent(formula="x", display_mode=True)])
    assert runs == [{"type": "inlineMath", "props": {"formula": "x", "displayMode": True}, "styles": {}}]
    assert from_editor_inline(runs) == [InlineMathContent(formula="x", display_mode=True)]


def test_bare_string_content():
    """A bare string is one plain text run."""
    assert from_editor_inline("hello") == [TextContent(text="hello")]
    assert from_editor_inline("") == []
    assert from_editor_inline(None) == []


def test_unknown_run_placeholder():
    """Unknown run types become a visible placeholder."""
    assert from_editor_inline([{"type": "mention", "props": {}}]) == [
        TextContent(text="[unsupported inline type: mention]"),
    ]


def test_adjacent_plain_runs_merge():
    """Adjacent unstyled runs read back as one text item."""
    runs = [{"type": "text", "text": "a", "styles": {}}, {"type": "text", "text": "b", "styles": {}}]
    assert from_editor_inline(runs) == [TextContent(text="ab")]


def test_emphasis_around_strong_keeps_nesting():
    """A wider emphasis span stays the outer wrapper."""
    content = [EmphasisContent(children=[TextContent(text="a "), StrongContent(children=[TextContent(text="b")])])]
    assert from_editor_inline(to_editor_inline(content)) == content


def test_equal_spans_put_emphasis_outside():
    """Runs both bold and italic rebuild as emphasis around strong."""
    runs = [{"type": "text", "text": "a", "styles": {"bold": True, "italic": True}}]
    assert from_editor_inline(runs) == [EmphasisContent(children=[StrongContent(children=[TextContent(text="a")])])]


def test_styled_link_keeps_outer_style():
    """A link inside strong keeps strong outside, with the style shown on its text runs."""
    content = [StrongContent(children=[LinkContent(href="/u", children=[TextContent(text="x")])])]
    runs = to_editor_inline(content)
    assert runs[0]["styles"] == {"bold": True}
    assert runs[0]["content"] == [{"type": "text", "text": "x", "styles": {"bold": True}}]
    assert from_editor_inline(runs) == content


def test_strong_inside_link_stays_inside():
    """Strong text inside a link does not move outside it."""
    content = [LinkContent(href="/u", children=[StrongContent(children=[TextContent(text="x")])])]
    assert from_editor_inline(to_editor_inline(content)) == content


def test_styled_inline_math_keeps_style():
    """Inline math inside strong keeps its strong wrapper."""
    content = [StrongContent(children=[InlineMathContent(formula="x")])]
    runs = to_editor_inline(content)
    assert runs[0]["styles"] == {"bold": True}
    assert from_editor_inline(runs) == content


def test_hard_break_is_plain_newline_run():
    """A hard break shows as a newline run without a backslash."""
    content = [TextContent(text="one"), HardBreakContent(), TextContent(text="two")]
    runs = to_editor_inline(content)
    assert runs[1] == {"type": "text", "text": "\n", "styles": {"hardBreak": True}}
    assert "\\" not in "".join(run["text"] for run in runs)
    assert from_editor_inline(runs) == content


def test_raw_text_run_stays_raw():
    """Raw markup text keeps its raw flag through the editor."""
    content = [TextContent(text="a "), TextContent(text="<kbd>", raw=True)]
    assert from_editor_inline(to_editor_inline(content)) == content
