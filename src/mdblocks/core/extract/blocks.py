"""Block syntax tree nodes to Document Model blocks

Recognizer precedence for overlapping syntax: container > code group >
diagram fence > component tag > include > generic fence. Custom syntax that
does not validate degrades to the generic construct and is never an error.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from markdown_it.tree import SyntaxTreeNode

from mdblocks.core.extract.directives import (
    CLOSING_MARKER_RE,
    CODE_GROUP,
    ESCAPED_BRACKET_RE,
    container_params,
    is_closing_tag,
    match_callout,
    match_component,
    match_include,
    match_task,
    parse_fence_info,
)
from mdblocks.core.extract.inline import convert_inline, inline_children, merge_text
from mdblocks.core.models import (
    Block,
    BulletListItemBlock,
    CheckListItemBlock,
    CodeBlock,
    CodeTab,
    ComponentBlock,
    ContainerBlock,
    DiagramBlock,
    HeadingBlock,
    ImageBlock,
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


logger = logging.getLogger(__name__)

ALIGN_RE = re.compile(r'text-align:\s*(left|center|right)')
CONTAINER_PREFIX = "container_"


@dataclass
class BlockContext:
    """Per-parse state shared by the block handlers."""
    lines:             list[str]                       # source lines the tree was built from
    diagram_languages: tuple[str, ...]
    parse_fragment:    Callable[[str], list[Block]]    # parses markup nested inside a component


def _fence_code(content: str) -> str:
    return content[:-1] if content.endswith("\n") else content


def _escaped_bracket(node: SyntaxTreeNode, ctx: BlockContext) -> bool:
    """True when the node's first source line opens its text with an escaped '['."""
    if not node.map or node.map[0] >= len(ctx.lines):
        return False
    return bool(ESCAPED_BRACKET_RE.match(ctx.lines[node.map[0]]))


def _paragraph(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    children = inline_children(node)
    if len(children) == 1 and children[0].type == "image":
        image = children[0]
        title = image.attrs.get("title")
        return [ImageBlock(
            src=str(image.attrs.get("src", "")),
            alt=image.content or None,
            title=str(title) if title else None,
        )]
    return [ParagraphBlock(content=convert_inline(children))]


def _heading(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    return [HeadingBlock(level=int(node.tag[1:]), content=convert_inline(inline_children(node)))]


def _list(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    """Flatten a list into one block per item; nested lists become item children."""
    ordered = node.type == "ordered_list"
    number = int(node.attrs.get("start", 1)) if ordered else 0
    items: list[Block] = []
    for offset, item in enumerate(node.children):
        content = []
        rest = []
        for child in item.children:
            if child.type == "paragraph":
                if content:
                    content.append(TextContent(text="\n"))
                content.extend(convert_inline(inline_children(child)))
            else:
                rest.append(child)
        content = merge_text(content)
        children = nodes_to_blocks(rest, ctx)

        if ordered:
            items.append(NumberedListItemBlock(start=number + offset, content=content, children=children))
            continue
        task = None
        if content and isinstance(content[0], TextContent) and not _escaped_bracket(item, ctx):
            task = match_task(content[0].text)
        if task is None:
            items.append(BulletListItemBlock(content=content, children=children))
            continue
        checked, remainder = task
        content = merge_text([TextContent(text=remainder), *content[1:]])
        items.append(CheckListItemBlock(checked=checked, content=content, children=children))
    return items


def _fence(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    info = parse_fence_info(node.info)
    code = _fence_code(node.content)
    if info.language and info.language in ctx.diagram_languages:
        return [DiagramBlock(code=code, language=info.language)]
    if info.annotated:
        return [RichCodeBlock(
            code=code,
            language=info.language,
            filename=info.filename,
            highlight_lines=info.highlight_lines,
            show_line_numbers=info.show_line_numbers,
            start_line_number=info.start_line_number,
        )]
    return [CodeBlock(language=info.language or None, code=code)]


def _code_block(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    return [CodeBlock(code=_fence_code(node.content))]


def _callout(children: list[Block]) -> Optional[ContainerBlock]:
    """Turn a quote opening with '[!NOTE]'-style marker into a container."""
    first = children[0] if children else None
    if not isinstance(first, ParagraphBlock) or not first.content or not isinstance(first.content[0], TextContent):
        return None
    found = match_callout(first.content[0].text)
    if found is None:
        return None
    container_type, title, remainder = found
    content = merge_text([TextContent(text=remainder), *first.content[1:]])
    body = ([ParagraphBlock(content=content)] if content else []) + children[1:]
    return ContainerBlock(container_type=container_type, title=title, children=body)


def _blockquote(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    children = nodes_to_blocks(node.children, ctx)
    callout = None if _escaped_bracket(node, ctx) else _callout(children)
    return [callout or QuoteBlock(children=children)]


def _cell(node: SyntaxTreeNode) -> TableCell:
    m = ALIGN_RE.search(str(node.attrs.get("style", "")))
    return TableCell(content=convert_inline(inline_children(node)), align=m.group(1) if m else None)


def _table(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    table = TableBlock()
    for section in node.children:
        for tr in section.children:
            row = TableRow(cells=[_cell(cell) for cell in tr.children])
            if section.type == "thead":
                table.header_row = row
            else:
                table.rows.append(row)
    return [table]


def _hr(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    return [ThematicBreakBlock()]


def _html_block(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    tag = match_component(node.content)
    if tag is not None and tag.closed:
        children = ctx.parse_fragment(tag.inner) if tag.inner and tag.inner.strip() else []
        return [ComponentBlock(
            name=tag.name,
            attributes=tag.attributes,
            self_closing=tag.self_closing,
            children=children,
        )]
    include = match_include(node.content)
    if include is not None:
        return [include]
    return [ParagraphBlock(content=[TextContent(text=node.content.rstrip("\n"), raw=True)])]


def _math_block(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    return [MathBlock(formula=node.content.strip(), display="block")]


def _is_closed(node: SyntaxTreeNode, ctx: BlockContext) -> bool:
    """True when the container's closing ':::' line is present in the source."""
    if not node.map:
        return True
    end = node.map[1]
    return end < len(ctx.lines) and bool(CLOSING_MARKER_RE.match(ctx.lines[end]))


def _code_group(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    tabs: list[CodeTab] = []
    others: list[SyntaxTreeNode] = []
    for child in node.children:
        if child.type != "fence":
            others.append(child)
            continue
        info = parse_fence_info(child.info)
        tabs.append(CodeTab(
            code=_fence_code(child.content),
            language=info.language,
            filename=info.filename,
            highlight_lines=info.highlight_lines,
            show_line_numbers=info.show_line_numbers,
            start_line_number=info.start_line_number,
        ))
    if not tabs:
        logger.debug("Code group without fences unwrapped at line %s", node.map)
        return nodes_to_blocks(node.children, ctx)
    first = tabs[0]
    group = RichCodeBlock(
        code=first.code,
        language=first.language,
        filename=first.filename,
        highlight_lines=first.highlight_lines,
        show_line_numbers=first.show_line_numbers,
        start_line_number=first.start_line_number,
        tabs=tabs,
        active_tab_index=0,
    )
    return [group, *nodes_to_blocks(others, ctx)]


def _container(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    if not _is_closed(node, ctx):
        logger.debug("Unterminated container at line %s kept as text", node.map)
        opener = ParagraphBlock(content=[TextContent(text=f"{node.markup}{node.info}", raw=True)])
        return [opener, *nodes_to_blocks(node.children, ctx)]
    name = node.type[len(CONTAINER_PREFIX):]
    if name == CODE_GROUP:
        return _code_group(node, ctx)
    container_type, title = container_params(node.info)
    return [ContainerBlock(
        container_type=container_type,
        title=title,
        children=nodes_to_blocks(node.children, ctx),
    )]


BLOCK_HANDLERS: dict[str, Callable[[SyntaxTreeNode, BlockContext], list[Block]]] = {
    "paragraph":        _paragraph,
    "heading":          _heading,
    "bullet_list":      _list,
    "ordered_list":     _list,
    "fence":            _fence,
    "code_block":       _code_block,
    "blockquote":       _blockquote,
    "table":            _table,
    "hr":               _hr,
    "html_block":       _html_block,
    "math_block":       _math_block,
    "math_block_label": _math_block,
}


def node_to_blocks(node: SyntaxTreeNode, ctx: BlockContext) -> list[Block]:
    """Convert one block node; unknown nodes contribute their children, if any."""
    if node.type.startswith(CONTAINER_PREFIX):
        return _container(node, ctx)
    handler = BLOCK_HANDLERS.get(node.type)
    if handler is None:
        logger.debug("Unhandled block node %r", node.type)
        return nodes_to_blocks(node.children, ctx) if node.children else []
    return handler(node, ctx)


def _closing_index(nodes: list[SyntaxTreeNode], start: int, name: str) -> Optional[int]:
    """Index of the html block closing component `name`, honouring nested same-name tags."""
    depth = 0
    for i in range(start, len(nodes)):
        if nodes[i].type != "html_block":
            continue
        tag = match_component(nodes[i].content)
        if tag is not None and tag.name == name and not tag.closed:
            depth += 1
        elif is_closing_tag(nodes[i].content, name):
            if depth == 0:
                return i
            depth -= 1
    return None


def nodes_to_blocks(nodes: list[SyntaxTreeNode], ctx: BlockContext) -> list[Block]:
    """Convert sibling block nodes, letting an opening component tag absorb siblings up to its close."""
    blocks: list[Block] = []
    i = 0
    while i < len(nodes):
        node = nodes[i]
        tag = match_component(node.content) if node.type == "html_block" else None
        if tag is not None and not tag.closed:
            end = _closing_index(nodes, i + 1, tag.name)
            if end is not None:
                blocks.append(ComponentBlock(
                    name=tag.name,
                    attributes=tag.attributes,
                    self_closing=False,
                    children=nodes_to_blocks(nodes[i + 1:end], ctx),
                ))
                i = end + 1
                continue
        blocks.extend(node_to_blocks(node, ctx))
        i += 1
    return blocks
