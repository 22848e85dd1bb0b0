"""Editor adapter: Document Model blocks <-> editor-native nodes

Each Block type maps 1:1 onto an editor node type with renamed fields, except
quotes (see editor/quotes.py) and containers, whose editor content is a single
inline sequence: the title line followed by one line per body paragraph.
"""

import logging
from typing import Any, Callable, Iterable, Optional, Union

from mdblocks.config import Settings
from mdblocks.core.export import serialize_document
from mdblocks.core.extract.inline import plain_text
from mdblocks.core.models import (
    CONTAINER_TYPES,
    DEFAULT_CONTAINER_TYPE,
    Block,
    BulletListItemBlock,
    CheckListItemBlock,
    CodeBlock,
    ComponentBlock,
    ContainerBlock,
    DiagramBlock,
    Document,
    HeadingBlock,
    ImageBlock,
    IncludeBlock,
    InlineContent,
    MathBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    RichCodeBlock,
    TableBlock,
    TableCell,
    TableRow,
    TextContent,
    ThematicBreakBlock,
)
from mdblocks.core.parse import parse
from mdblocks.editor.inline import from_editor_inline, to_editor_inline
from mdblocks.editor.models import EditorBlock
from mdblocks.editor.props import (
    attributes_from_json,
    attributes_to_json,
    default_title,
    format_line_range,
    highlight_from_prop,
    highlight_to_prop,
    is_default_title,
    parse_line_range,
    tabs_from_json,
    tabs_to_json,
)
from mdblocks.editor.quotes import QuoteGroupMerger, expand_quote


logger = logging.getLogger(__name__)

IMAGE_PREVIEW_WIDTH = 512


def _placeholder_node(kind: str) -> EditorBlock:
    logger.warning("Block type %r has no editor form; writing a placeholder", kind)
    return EditorBlock(type="paragraph", content=[
        {"type": "text", "text": f"[unsupported block type: {kind}]", "styles": {}},
    ])


def _placeholder_block(kind: str) -> ParagraphBlock:
    logger.warning("Editor node type %r is not supported; writing a placeholder", kind)
    return ParagraphBlock(content=[TextContent(text=f"[unsupported block type: {kind}]")])


# --- Block -> editor ---

def _node(block, type_: str, props: dict[str, Any] = None, content: Any = None, children: list = None) -> EditorBlock:
    return EditorBlock(
        id=block.id,
        type=type_,
        props=props or {},
        content=content,
        children=to_editor_form(children) if children else [],
    )


def _text_run(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": text, "styles": {}}] if text else []


def _table_row(row: TableRow) -> dict[str, Any]:
    return {"cells": [
        {
            "type": "tableCell",
            "content": to_editor_inline(cell.content),
            "props": {"textAlignment": cell.align} if cell.align else {},
        }
        for cell in row.cells
    ]}


def _container_to_editor(block: ContainerBlock) -> EditorBlock:
    content: list[InlineContent] = [TextContent(text=block.title or default_title(block.container_type))]
    others: list[Block] = []
    for child in block.children:
        if isinstance(child, ParagraphBlock):
            content += [TextContent(text="\n"), *child.content]
        else:
            others.append(child)
    return _node(
        block, "container",
        props={"containerType": block.container_type},
        content=to_editor_inline(content),
        children=others,
    )


TO_EDITOR: dict[type, Callable[[Any], EditorBlock]] = {
    ParagraphBlock: lambda b: _node(b, "paragraph", content=to_editor_inline(b.content)),
    HeadingBlock: lambda b: _node(b, "heading", {"level": b.level}, to_editor_inline(b.content)),
    BulletListItemBlock: lambda b: _node(b, "bulletListItem", content=to_editor_inline(b.content), children=b.children),
    NumberedListItemBlock: lambda b: _node(
        b, "numberedListItem", {"start": b.start}, to_editor_inline(b.content), b.children,
    ),
    CheckListItemBlock: lambda b: _node(
        b, "checkListItem", {"checked": b.checked}, to_editor_inline(b.content), b.children,
    ),
    CodeBlock: lambda b: _node(b, "codeBlock", {"language": b.language or ""}, _text_run(b.code)),
    TableBlock: lambda b: _node(b, "table", content={
        "type": "tableContent",
        "rows": [_table_row(b.header_row), *(_table_row(r) for r in b.rows)],
    }),
    ImageBlock: lambda b: _node(b, "image", {
        "url": b.src,
        "caption": b.alt or "",
        "name": b.title or "",
        "previewWidth": IMAGE_PREVIEW_WIDTH,
    }),
    ThematicBreakBlock: lambda b: _node(b, "thematicBreak"),
    ContainerBlock: _container_to_editor,
    MathBlock: lambda b: _node(b, "math", {"formula": b.formula, "display": b.display}),
    DiagramBlock: lambda b: _node(b, "mermaid", {"code": b.code, "language": b.language}),
    ComponentBlock: lambda b: _node(b, "vueComponent", {
        "componentName": b.name,
        "attributesJson": attributes_to_json(b.attributes),
        "selfClosing": b.self_closing,
    }, children=b.children),
    IncludeBlock: lambda b: _node(b, "include", {
        "path": b.path,
        "lineRange": format_line_range(b.line_range),
        "region": b.region or "",
    }),
    RichCodeBlock: lambda b: _node(b, "shikiCode", {
        "code": b.code,
        "language": b.language,
        "filename": b.filename or "",
        "highlightLines": highlight_to_prop(b.highlight_lines),
        "showLineNumbers": b.show_line_numbers,
        "startLineNumber": b.start_line_number,
        "tabs": tabs_to_json(b.tabs),
        "activeTabIndex": b.active_tab_index,
    }),
}


def to_editor_form(blocks: list[Block]) -> list[EditorBlock]:
    """Convert blocks into editor nodes. Quotes expand into grouped sibling runs."""
    nodes: list[EditorBlock] = []
    for block in blocks:
        if isinstance(block, QuoteBlock):
            nodes.extend(expand_quote(block, to_editor_form))
            continue
        converter = TO_EDITOR.get(type(block))
        if converter is None:
            nodes.append(_placeholder_node(getattr(block, "type", type(block).__name__)))
            continue
        nodes.append(converter(block))
    return nodes


# --- editor -> Block ---

def _code_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return "".join(str(run.get("text", "")) for run in content or [] if isinstance(run, dict))


def _row_from_editor(row: Any) -> TableRow:
    cells = []
    for cell in (row or {}).get("cells", []):
        if isinstance(cell, dict) and cell.get("type") == "tableCell":
            align = (cell.get("props") or {}).get("textAlignment")
            cells.append(TableCell(
                content=from_editor_inline(cell.get("content")),
                align=align if align in ("left", "center", "right") else None,
            ))
        else:
            # older editors store a cell as its bare inline list
            cells.append(TableCell(content=from_editor_inline(cell)))
    return TableRow(cells=cells)


def _table_from_editor(node: EditorBlock) -> TableBlock:
    rows = [_row_from_editor(r) for r in (node.content or {}).get("rows", [])] if isinstance(node.content, dict) else []
    return TableBlock(id=node.id, header_row=rows[0] if rows else TableRow(), rows=rows[1:])


def _split_lines(content: list[InlineContent]) -> list[list[InlineContent]]:
    """Split inline content at newlines in its top-level text runs."""
    lines: list[list[InlineContent]] = [[]]
    for item in content:
        if not isinstance(item, TextContent):
            lines[-1].append(item)
            continue
        for i, piece in enumerate(item.text.split("\n")):
            if i:
                lines.append([])
            if piece:
                lines[-1].append(TextContent(text=piece, raw=item.raw))
    return lines


def _container_from_editor(node: EditorBlock) -> ContainerBlock:
    container_type = node.props.get("containerType")
    if container_type not in CONTAINER_TYPES:
        logger.debug("Unknown container type %r replaced by %r", container_type, DEFAULT_CONTAINER_TYPE)
        container_type = DEFAULT_CONTAINER_TYPE
    lines = _split_lines(from_editor_inline(node.content))
    title = plain_text(lines[0]).strip()
    body: list[Block] = [ParagraphBlock(content=line) for line in lines[1:] if line]
    body += from_editor_form(node.children)
    return ContainerBlock(
        id=node.id,
        container_type=container_type,
        title=None if not title or is_default_title(title) else title,
        children=body,
    )


def _level(value: Any) -> int:
    try:
        return min(max(int(value), 1), 6)
    except (TypeError, ValueError):
        return 1


def _math_display(value: Any) -> str:
    return value if value in ("inline", "block") else "block"


FROM_EDITOR: dict[str, Callable[[EditorBlock], Block]] = {
    "paragraph": lambda n: ParagraphBlock(id=n.id, content=from_editor_inline(n.content)),
    "heading": lambda n: HeadingBlock(
        id=n.id, level=_level(n.props.get("level", 1)), content=from_editor_inline(n.content),
    ),
    "bulletListItem": lambda n: BulletListItemBlock(
        id=n.id, content=from_editor_inline(n.content), children=from_editor_form(n.children),
    ),
    "numberedListItem": lambda n: NumberedListItemBlock(
        id=n.id, start=int(n.props.get("start") or 1),
        content=from_editor_inline(n.content), children=from_editor_form(n.children),
    ),
    "checkListItem": lambda n: CheckListItemBlock(
        id=n.id, checked=bool(n.props.get("checked", False)),
        content=from_editor_inline(n.content), children=from_editor_form(n.children),
    ),
    "codeBlock": lambda n: CodeBlock(
        id=n.id, language=n.props.get("language") or None, code=_code_text(n.content),
    ),
    "table": _table_from_editor,
    "image": lambda n: ImageBlock(
        id=n.id, src=str(n.props.get("url", "")),
        alt=n.props.get("caption") or None, title=n.props.get("name") or None,
    ),
    "thematicBreak": lambda n: ThematicBreakBlock(id=n.id),
    "container": _container_from_editor,
    "math": lambda n: MathBlock(
        id=n.id, formula=str(n.props.get("formula", "")), display=_math_display(n.props.get("display")),
    ),
    "mermaid": lambda n: DiagramBlock(
        id=n.id, code=str(n.props.get("code", "")), language=n.props.get("language") or "mermaid",
    ),
    "vueComponent": lambda n: ComponentBlock(
        id=n.id,
        name=n.props.get("componentName") or "Component",
        attributes=attributes_from_json(n.props.get("attributesJson")),
        self_closing=bool(n.props.get("selfClosing", True)),
        children=from_editor_form(n.children),
    ),
    "include": lambda n: IncludeBlock(
        id=n.id, path=str(n.props.get("path", "")),
        line_range=parse_line_range(n.props.get("lineRange")),
        region=n.props.get("region") or None,
    ),
    "shikiCode": lambda n: RichCodeBlock(
        id=n.id,
        code=str(n.props.get("code", "")),
        language=str(n.props.get("language", "")),
        filename=n.props.get("filename") or None,
        highlight_lines=highlight_from_prop(n.props.get("highlightLines")),
        show_line_numbers=bool(n.props.get("showLineNumbers", False)),
        start_line_number=int(n.props.get("startLineNumber") or 1),
        tabs=tabs_from_json(n.props.get("tabs")),
        active_tab_index=int(n.props.get("activeTabIndex") or 0),
    ),
}

# editor types whose children map onto Block children; any other nesting is flattened after the node
NESTING_TYPES = {"bulletListItem", "numberedListItem", "checkListItem", "container", "vueComponent"}


def _node_to_blocks(node: EditorBlock) -> list[Block]:
    converter = FROM_EDITOR.get(node.type)
    if converter is None:
        blocks: list[Block] = [_placeholder_block(node.type)]
    else:
        blocks = [converter(node)]
    if node.children and node.type not in NESTING_TYPES:
        blocks += from_editor_form(node.children)
    return blocks


def from_editor_form(nodes: Iterable[Union[EditorBlock, dict[str, Any]]]) -> list[Block]:
    """Convert editor nodes back into blocks, folding quote groups into single quotes."""
    merger = QuoteGroupMerger(_node_to_blocks, from_editor_form)
    for node in nodes or []:
        merger.feed(node if isinstance(node, EditorBlock) else EditorBlock.model_validate(node))
    return merger.finish()


def load(markup: str, settings: Optional[Settings] = None) -> list[EditorBlock]:
    """Parse markup straight into editor nodes (frontmatter is dropped)."""
    return to_editor_form(parse(markup, settings))


def save(nodes: Iterable[Union[EditorBlock, dict[str, Any]]], frontmatter: Optional[dict[str, Any]] = None) -> str:
    """Serialize editor nodes to markdown, with an optional frontmatter header."""
    return serialize_document(Document(frontmatter=frontmatter or {}, blocks=from_editor_form(nodes)))
