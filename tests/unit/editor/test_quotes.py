"""Unit tests for editor/quotes.py"""

import pytest

from mdblocks.core.models import (
    CodeBlock,
    ParagraphBlock,
    QuoteBlock,
    TextContent,
    content_dump,
)
from mdblocks.editor.adapter import from_editor_form, to_editor_form
from mdblocks.editor.models import EditorBlock
from mdblocks.editor.quotes import build_quote


def _p(text: str) -> ParagraphBlock:
    return ParagraphBlock(content=[TextContent(text=text)])


def _quote_node(text: str, group_id, first: bool = False) -> EditorBlock:
    return EditorBlock(
        type="quote",
        props={"groupId": group_id, "isFirstInGroup": first},
        content=[{"type": "text", "text": text, "styles": {}}],
    )


def test_three_paragraph_quote_expands_to_one_group():
    """Each paragraph becomes a quote node; all share one group and only the first is flagged."""
    quote = QuoteBlock(children=[_p("a"), _p("b"), _p("c")])
    nodes = to_editor_form([quote])
    assert [n.type for n in nodes] == ["quote", "quote", "quote"]
    assert len({n.props["groupId"] for n in nodes}) == 1
    assert [n.props["isFirstInGroup"] for n in nodes] == [True, False, False]
    assert nodes[0].id == quote.id


def test_three_node_group_merges_back():
    """The expanded nodes fold back into one quote with the same paragraphs."""
    quote = QuoteBlock(children=[_p("a"), _p("b"), _p("c")])
    (restored,) = from_editor_form(to_editor_form([quote]))
    assert isinstance(restored, QuoteBlock)
    assert content_dump([restored]) == content_dump([quote])


def test_two_line_group_merges_into_one_quote():
    """Quote nodes 'Line 1' and 'Line 2' of group g1 become one quote with two paragraphs."""
    nodes = [_quote_node("Line 1", "g1", True), _quote_node("Line 2", "g1")]
    (quote,) = from_editor_form(nodes)
    assert isinstance(quote, QuoteBlock)
    assert [type(child) for child in quote.children] == [ParagraphBlock, ParagraphBlock]
    assert [child.content for child in quote.children] == [
        [TextContent(text="Line 1")],
        [TextContent(text="Line 2")],
    ]


def test_groups_split_by_group_id():
    """Nodes in groups g1, g1, g2 fold into two quotes."""
    nodes = [_quote_node("a", "g1", True), _quote_node("b", "g1"), _quote_node("c", "g2", True)]
    blocks = from_editor_form(nodes)
    assert [type(b) for b in blocks] == [QuoteBlock, QuoteBlock]
    assert len(blocks[0].children) == 2
    assert len(blocks[1].children) == 1


def test_ungrouped_quote_nodes_stand_alone():
    """Quote nodes without a group id never merge."""
    blocks = from_editor_form([_quote_node("a", None), _quote_node("b", None)])
    assert len(blocks) == 2


def test_non_quote_node_ends_run():
    """A paragraph between same-group nodes splits them."""
    nodes = [
        _quote_node("a", "g1", True),
        EditorBlock(type="paragraph", content=[{"type": "text", "text": "x", "styles": {}}]),
        _quote_node("b", "g1"),
    ]
    blocks = from_editor_form(nodes)
    assert [type(b) for b in blocks] == [QuoteBlock, ParagraphBlock, QuoteBlock]


def test_groups_use_fresh_ids():
    """Two quotes expand into two distinct groups."""
    nodes = to_editor_form([QuoteBlock(children=[_p("a")]), QuoteBlock(children=[_p("b")])])
    assert nodes[0].props["groupId"] != nodes[1].props["groupId"]
    assert len(from_editor_form(nodes)) == 2


def test_nested_quote_hosted_by_latest_node():
    """A nested quote becomes the children of the quote node before it."""
    quote = QuoteBlock(children=[_p("outer"), QuoteBlock(children=[_p("inner")])])
    nodes = to_editor_form([quote])
    assert len(nodes) == 1
    assert nodes[0].children[0].type == "quote"
    assert content_dump(from_editor_form(nodes)) == content_dump([quote])


def test_leading_nested_quote_gets_empty_host():
    """A quote opening with a nested quote keeps that shape through the editor."""
    quote = QuoteBlock(children=[QuoteBlock(children=[_p("inner")])])
    nodes = to_editor_form([quote])
    assert nodes[0].content == []
    assert content_dump(from_editor_form(nodes)) == content_dump([quote])


def test_other_children_become_siblings():
    """Non-paragraph quote children are written as ungrouped siblings."""
    quote = QuoteBlock(children=[_p("a"), CodeBlock(code="x")])
    nodes = to_editor_form([quote])
    assert [n.type for n in nodes] == ["quote", "codeBlock"]


def test_build_quote_rejects_other_nodes():
    """Only quote nodes can be folded into a quote."""
    with pytest.raises(ValueError, match="Cannot merge"):
        build_quote([EditorBlock(type="paragraph")], from_editor_form)
