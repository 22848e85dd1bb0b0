"""Unit tests for editor/adapter.py"""

import json

from mdblocks.core.models import (
    CodeTab,
    ComponentBlock,
    ContainerBlock,
    DiagramBlock,
    HeadingBlock,
    ImageBlock,
    IncludeBlock,
    LineRange,
    ParagraphBlock,
    RichCodeBlock,
    TableBlock,
    TextContent,
    content_dump,
)
from mdblocks.editor.adapter import from_editor_form, load, save, to_editor_form
from mdblocks.editor.models import EditorBlock


def _text(text: str) -> list[dict]:
    return [{"type": "text", "text": text, "styles": {}}]


# --- Block -> editor ---

def test_heading_node():
    """Headings carry their level as a prop."""
    (node,) = to_editor_form([HeadingBlock(level=2, content=[TextContent(text="T")])])
    assert node.type == "heading"
    assert node.props == {"level": 2}
    assert node.content == _text("T")


def test_container_node_content():
    """A container's editor content is its title line followed by its paragraphs."""
    block = ContainerBlock(container_type="warning", title="Careful", children=[
        ParagraphBlock(content=[TextContent(text="one")]),
        ParagraphBlock(content=[TextContent(text="two")]),
    ])
    (node,) = to_editor_form([block])
    assert node.type == "container"
    assert node.props == {"containerType": "warning"}
    assert "".join(run["text"] for run in node.content) == "Careful\none\ntwo"


def test_container_default_title():
    """A container without a title shows the default title for its type."""
    (node,) = to_editor_form([ContainerBlock(container_type="tip")])
    assert node.content == _text("TIP")
    (restored,) = from_editor_form([node])
    assert restored.title is None


def test_container_keeps_non_paragraph_children():
    """Non-paragraph container children are nested editor nodes."""
    block = ContainerBlock(children=[DiagramBlock(code="graph TD")])
    (node,) = to_editor_form([block])
    assert node.children[0].type == "mermaid"
    assert content_dump(from_editor_form([node])) == content_dump([block])


def test_table_node():
    """Tables become tableContent rows with the header first."""
    (block,) = load("| A | B |\n| :---: | --- |\n| 1 | 2 |\n")
    assert block.type == "table"
    rows = block.content["rows"]
    assert len(rows) == 2
    assert rows[0]["cells"][0]["props"] == {"textAlignment": "center"}
    assert rows[1]["cells"][1]["content"] == _text("2")


def test_image_node_props():
    """Images map src, alt, and title to url, caption, and name."""
    (node,) = to_editor_form([ImageBlock(src="/a.png", alt="A", title="T")])
    assert node.props == {"url": "/a.png", "caption": "A", "name": "T", "previewWidth": 512}


def test_component_node_props():
    """Component attributes travel as a JSON string."""
    (node,) = to_editor_form([ComponentBlock(name="Badge", attributes={"type": "tip", "outline": True})])
    assert node.type == "vueComponent"
    assert node.props["componentName"] == "Badge"
    assert json.loads(node.props["attributesJson"]) == {"type": "tip", "outline": True}
    assert node.props["selfClosing"] is True


def test_include_node_props():
    """Include ranges are written as 'start-end'."""
    block = IncludeBlock(path="a.md", line_range=LineRange(start=3, end=9))
    (node,) = to_editor_form([block])
    assert node.props == {"path": "a.md", "lineRange": "3-9", "region": ""}
    assert content_dump(from_editor_form([node])) == content_dump([block])


def test_rich_code_node_props():
    """Rich code highlights gain braces and tabs are JSON."""
    block = RichCodeBlock(
        code="a()", language="js", filename="a.js", highlight_lines="1",
        tabs=[CodeTab(code="a()", language="js", filename="a.js", highlight_lines="1")],
    )
    (node,) = to_editor_form([block])
    assert node.type == "shikiCode"
    assert node.props["highlightLines"] == "{1}"
    assert json.loads(node.props["tabs"])[0]["filename"] == "a.js"
    assert content_dump(from_editor_form([node])) == content_dump([block])


# --- editor -> Block ---

def test_unknown_container_type_becomes_tip():
    """An editor container with an unknown type reads back as a tip."""
    node = {"type": "container", "props": {"containerType": "bogus"}, "content": _text("Hello\nBody")}
    (block,) = from_editor_form([node])
    assert isinstance(block, ContainerBlock)
    assert block.container_type == "tip"
    assert block.title == "Hello"
    assert block.children[0].content == [TextContent(text="Body")]


def test_localized_default_title_dropped():
    """Default titles in other locales are not kept as custom titles."""
    node = {"type": "container", "props": {"containerType": "warning"}, "content": _text("警告")}
    (block,) = from_editor_form([node])
    assert block.title is None


def test_table_from_editor():
    """The first editor row is the header."""
    node = {"type": "table", "content": {"type": "tableContent", "rows": [
        {"cells": [{"type": "tableCell", "content": _text("H"), "props": {"textAlignment": "right"}}]},
        {"cells": [{"type": "tableCell", "content": _text("v"), "props": {}}]},
    ]}}
    (block,) = from_editor_form([node])
    assert isinstance(block, TableBlock)
    assert block.header_row.cells[0].align == "right"
    assert block.rows[0].cells[0].content == [TextContent(text="v")]


def test_legacy_table_cells():
    """Cells stored as bare inline lists still read."""
    node = {"type": "table", "content": {"rows": [{"cells": [_text("H")]}]}}
    (block,) = from_editor_form([node])
    assert block.header_row.cells[0].content == [TextContent(text="H")]


def test_heading_level_clamped():
    """Out-of-range editor heading levels are clamped."""
    (block,) = from_editor_form([{"type": "heading", "props": {"level": 9}, "content": _text("T")}])
    assert block.level == 6


def test_code_block_from_string_content():
    """Code content may be a bare string."""
    (block,) = from_editor_form([{"type": "codeBlock", "props": {"language": ""}, "content": "x = 1"}])
    assert block.code == "x = 1"
    assert block.language is None


def test_unknown_node_type_placeholder():
    """Unsupported editor nodes become placeholder paragraphs."""
    (block,) = from_editor_form([{"type": "video", "props": {}}])
    assert isinstance(block, ParagraphBlock)
    assert block.content == [TextContent(text="[unsupported block type: video]")]


def test_children_of_flat_types_follow_node():
    """Children under a node type that cannot nest are written after it."""
    node = EditorBlock(type="paragraph", content=_text("a"), children=[
        EditorBlock(type="paragraph", content=_text("b")),
    ])
    blocks = from_editor_form([node])
    assert [b.content[0].text for b in blocks] == ["a", "b"]


def test_ids_carried_both_ways():
    """Editor node ids become block ids."""
    (block,) = from_editor_form([{"id": "n1", "type": "paragraph", "content": _text("a")}])
    assert block.id == "n1"
    assert to_editor_form([block])[0].id == "n1"


# --- load / save ---

def test_load_and_save():
    """load parses markup to editor nodes and save writes them back."""
    md = "# Title\n\n::: tip\nHello\n:::\n"
    nodes = load(md)
    assert [n.type for n in nodes] == ["heading", "container"]
    assert save(nodes) == "# Title\n\n:::tip\nHello\n:::\n"


def test_save_with_frontmatter():
    """save writes the frontmatter header first."""
    assert save([{"type": "paragraph", "content": _text("Body")}], {"title": "T"}) == "---\ntitle: T\n---\n\nBody\n"


def test_save_empty():
    """Saving no nodes yields an empty document."""
    assert save([]) == ""
