"""Serializer: Document Model blocks back to markdown text"""

import logging
import re
import string
from typing import Any, Callable

import yaml

from mdblocks.core.models import (
    Block,
    BulletListItemBlock,
    CheckListItemBlock,
    CodeBlock,
    CodeContent,
    CodeTab,
    ComponentBlock,
    ContainerBlock,
    DiagramBlock,
    Document,
    EmphasisContent,
    HardBreakContent,
    HeadingBlock,
    ImageBlock,
    IncludeBlock,
    InlineContent,
    InlineMathContent,
    LinkContent,
    MathBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    RichCodeBlock,
    StrongContent,
    TableBlock,
    TableCell,
    TextContent,
    ThematicBreakBlock,
)


logger = logging.getLogger(__name__)

BACKTICKS_RE = re.compile(r'`+')
ALIGN_MARKERS = {"left": ":---", "center": ":---:", "right": "---:"}

ASCII_PUNCTUATION = frozenset(string.punctuation)
INLINE_SPECIAL_RE = re.compile(r'[\\`*_\[\]$<]|&(?=#?[0-9A-Za-z]+;)')
# the empty group marks where the backslash goes
LINE_START_RES = (
    re.compile(r'^[ \t]*()(?:#{1,6}(?:[ \t]|$)|>|[-+](?:[ \t]|$)|-+[ \t]*$|=+[ \t]*$|~{3,})'),
    re.compile(r'^[ \t]*()(?::{3,}[ \t]*(?:tip|info|warning|danger|details|code-group)\b|:{3,}[ \t]*$)'),
    re.compile(r'^[ \t]*\d{1,9}()[.)](?:[ \t]|$)'),
)


# --- inline ---

def _escape_inline(text: str) -> str:
    """Backslash-escape characters that would otherwise start inline markup."""
    def escape(m: re.Match) -> str:
        char, i = m.group(), m.start()
        following = text[i + 1:i + 2]
        if char == "\\" and following and following != "\n" and following not in ASCII_PUNCTUATION:
            return char
        if char == "_" and text[i - 1:i].isalnum() and following.isalnum():
            return char
        return "\\" + char
    return INLINE_SPECIAL_RE.sub(escape, text)


def _escape_line_start(line: str) -> str:
    for pattern in LINE_START_RES:
        m = pattern.match(line)
        if m:
            return line[:m.start(1)] + "\\" + line[m.start(1):]
    return line


def _escape_text(text: str, at_line_start: bool) -> str:
    """Escape a text run; lines after its newlines (and the first one when at_line_start) get block-marker escapes."""
    lines = _escape_inline(text).split("\n")
    return "\n".join(
        _escape_line_start(line) if i or at_line_start else line
        for i, line in enumerate(lines)
    )


def _code_span(text: str) -> str:
    """Wrap text in a backtick run longer than any run it contains."""
    longest = max((len(run) for run in BACKTICKS_RE.findall(text)), default=0)
    ticks = "`" * (longest + 1)
    pad = " " if text.startswith("`") or text.endswith("`") else ""
    return f"{ticks}{pad}{text}{pad}{ticks}"


def _link(item: LinkContent) -> str:
    title = f' "{item.title}"' if item.title else ""
    return f"[{render_inline(item.children)}]({item.href}{title})"


INLINE_RENDERERS: dict[type, Callable[[Any], str]] = {
    TextContent:       lambda item: item.text,
    HardBreakContent:  lambda item: "\\\n",
    StrongContent:     lambda item: f"**{render_inline(item.children)}**",
    EmphasisContent:   lambda item: f"*{render_inline(item.children)}*",
    CodeContent:       lambda item: _code_span(item.text),
    LinkContent:       _link,
    InlineMathContent: lambda item: f"$${item.formula}$$" if item.display_mode else f"${item.formula}$",
}


def render_inline(content: list[InlineContent], line_start: bool = False) -> str:
    """Render inline content as markdown.

    Plain text runs are escaped so they read back as text. line_start is set
    for content that opens a line of block text (paragraphs, list items),
    where a leading '#', '>', '-', '+' or 'N.' would start a new block.
    """
    parts: list[str] = []
    at_line_start = line_start
    for i, item in enumerate(content):
        if isinstance(item, TextContent) and not item.raw:
            text = _escape_text(item.text, at_line_start)
            following = content[i + 1] if i + 1 < len(content) else None
            if text.endswith("!") and isinstance(following, LinkContent):
                text = text[:-1] + "\\!"
        else:
            text = INLINE_RENDERERS[type(item)](item)
        parts.append(text)
        at_line_start = text.endswith("\n")
    return "".join(parts)


# --- helpers ---

def _indent(text: str, prefix: str) -> str:
    """Prefix every non-empty line of text."""
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def _fence(info: str, code: str) -> str:
    longest = max((len(run) for run in BACKTICKS_RE.findall(code)), default=0)
    ticks = "`" * max(3, longest + 1)
    body = f"{code}\n" if code else ""
    return f"{ticks}{info}\n{body}{ticks}"


def _fence_info(
    language: str,
    filename: str = None,
    highlight_lines: str = None,
    show_line_numbers: bool = False,
    start_line_number: int = 1,
    ) -> str:
    """Build 'lang:line-numbers=N [file] {hl}' in that fixed order."""
    info = language or ""
    if show_line_numbers:
        info += ":line-numbers" if start_line_number == 1 else f":line-numbers={start_line_number}"
    if filename:
        info += f" [{filename}]"
    if highlight_lines:
        info += f" {{{highlight_lines}}}"
    return info.strip()


def _container_depth(blocks: list) -> int:
    """Deepest nesting of ':::' directives below these blocks."""
    depth = 0
    for block in blocks:
        if isinstance(block, ContainerBlock):
            depth = max(depth, 1 + _container_depth(block.children))
        elif isinstance(block, RichCodeBlock) and block.tabs:
            depth = max(depth, 1)
        else:
            depth = max(depth, _container_depth(getattr(block, "children", [])))
    return depth


# --- blocks ---

def _paragraph(block: ParagraphBlock) -> str:
    return render_inline(block.content, line_start=True)


def _heading(block: HeadingBlock) -> str:
    return f"{'#' * block.level} {render_inline(block.content)}".rstrip()


def _list_item(block, marker: str) -> str:
    indent = " " * (2 if isinstance(block, CheckListItemBlock) else len(marker))
    text = render_inline(block.content, line_start=True)
    first, _, rest = text.partition("\n")
    out = marker + first if text else marker.rstrip()
    if rest:
        out += "\n" + _indent(rest, indent)
    if block.children:
        out += "\n" + _indent(render_blocks(block.children), indent)
    return out


def _bullet(block: BulletListItemBlock) -> str:
    return _list_item(block, "- ")


def _numbered(block: NumberedListItemBlock) -> str:
    return _list_item(block, f"{block.start}. ")


def _check(block: CheckListItemBlock) -> str:
    return _list_item(block, "- [x] " if block.checked else "- [ ] ")


def _code(block: CodeBlock) -> str:
    return _fence(block.language or "", block.code)


def _cell_text(cell: TableCell) -> str:
    return render_inline(cell.content).replace("|", "\\|").replace("\n", " ")


def _row(cells: list[TableCell], width: int) -> str:
    texts = [_cell_text(c) for c in cells] + [""] * (width - len(cells))
    return "| " + " | ".join(texts) + " |"


def _table(block: TableBlock) -> str:
    width = max([len(block.header_row.cells)] + [len(r.cells) for r in block.rows])
    header = block.header_row.cells + [TableCell()] * (width - len(block.header_row.cells))
    separator = "| " + " | ".join(ALIGN_MARKERS.get(c.align, "---") for c in header) + " |"
    return "\n".join([_row(header, width), separator, *(_row(r.cells, width) for r in block.rows)])


def _image(block: ImageBlock) -> str:
    title = f' "{block.title}"' if block.title else ""
    return f"![{block.alt or ''}]({block.src}{title})"


def _quote(block: QuoteBlock) -> str:
    body = render_blocks(block.children)
    return "\n".join(f"> {line}" if line else ">" for line in body.split("\n"))


def _thematic_break(block: ThematicBreakBlock) -> str:
    return "---"


def _container(block: ContainerBlock) -> str:
    marker = ":" * (3 + _container_depth(block.children))
    head = f"{marker}{block.container_type}" + (f" {block.title}" if block.title else "")
    body = render_blocks(block.children)
    return f"{head}\n{body}\n{marker}" if body else f"{head}\n{marker}"


def _math(block: MathBlock) -> str:
    if block.display == "inline":
        return f"${block.formula}$"
    return f"$$\n{block.formula}\n$$"


def _diagram(block: DiagramBlock) -> str:
    return _fence(block.language, block.code)


def _attribute(key: str, value: Any) -> str:
    bound = key if key.startswith(":") else f":{key}"
    if value is True:
        return f" {key}"
    if value is False:
        return f' {bound}="false"'
    if isinstance(value, (int, float)):
        return f' {bound}="{value}"'
    quote = "'" if '"' in str(value) else '"'
    return f" {key}={quote}{value}{quote}"


def _component(block: ComponentBlock) -> str:
    opening = f"<{block.name}" + "".join(_attribute(k, v) for k, v in block.attributes.items())
    body = render_blocks(block.children)
    if block.self_closing and not body:
        return f"{opening} />"
    if not body:
        return f"{opening}>\n</{block.name}>"
    return f"{opening}>\n\n{body}\n\n</{block.name}>"


def _include(block: IncludeBlock) -> str:
    out = f"<!--@include: {block.path}"
    if block.region:
        out += f"#{block.region}"
    if block.line_range is not None:
        start = "" if block.line_range.start is None else block.line_range.start
        end = "" if block.line_range.end is None else block.line_range.end
        out += f"{{{start}-{end}}}"
    return out + "-->"


def _tab_fence(tab: CodeTab) -> str:
    info = _fence_info(tab.language, tab.filename, tab.highlight_lines, tab.show_line_numbers, tab.start_line_number)
    return _fence(info, tab.code)


def _rich_code(block: RichCodeBlock) -> str:
    if block.tabs:
        return "::: code-group\n" + "\n\n".join(_tab_fence(t) for t in block.tabs) + "\n:::"
    info = _fence_info(
        block.language, block.filename, block.highlight_lines,
        block.show_line_numbers, block.start_line_number,
    )
    return _fence(info, block.code)


BLOCK_RENDERERS: dict[type, Callable[[Any], str]] = {
    ParagraphBlock:        _paragraph,
    HeadingBlock:          _heading,
    BulletListItemBlock:   _bullet,
    NumberedListItemBlock: _numbered,
    CheckListItemBlock:    _check,
    CodeBlock:             _code,
    TableBlock:            _table,
    ImageBlock:            _image,
    QuoteBlock:            _quote,
    ThematicBreakBlock:    _thematic_break,
    ContainerBlock:        _container,
    MathBlock:             _math,
    DiagramBlock:          _diagram,
    ComponentBlock:        _component,
    IncludeBlock:          _include,
    RichCodeBlock:         _rich_code,
}


def render_block(block: Block) -> str:
    """Render one block without a trailing newline."""
    renderer = BLOCK_RENDERERS.get(type(block))
    if renderer is None:
        logger.warning("No markdown form for block type %r", getattr(block, "type", type(block).__name__))
        return f"[unsupported block type: {getattr(block, 'type', type(block).__name__)}]"
    return renderer(block)


def _list_family(block) -> str | None:
    if isinstance(block, (BulletListItemBlock, CheckListItemBlock)):
        return "-"
    if isinstance(block, NumberedListItemBlock):
        return "."
    return None


def render_blocks(blocks: list[Block]) -> str:
    """Join rendered blocks: one newline inside a list, a blank line everywhere else."""
    parts: list[str] = []
    previous = None
    for block in blocks:
        if parts:
            family = _list_family(block)
            parts.append("\n" if family and family == _list_family(previous) else "\n\n")
        parts.append(render_block(block))
        previous = block
    return "".join(parts)


# --- public ---

def build_frontmatter(frontmatter: dict[str, Any]) -> str:
    """Return a '---' YAML header for the non-empty frontmatter values, or ''."""
    cleaned = {k: v for k, v in (frontmatter or {}).items() if v is not None and v != ""}
    if not cleaned:
        return ""
    header = yaml.safe_dump(cleaned, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n"


def serialize(blocks: list[Block]) -> str:
    """Render blocks as markdown ending in exactly one newline ('' for no content)."""
    body = render_blocks(blocks).strip("\n")
    return f"{body}\n" if body else ""


def serialize_single_block(block: Block) -> str:
    """Render one block, e.g. for a live preview."""
    return serialize([block])


def serialize_document(doc: Document) -> str:
    """Render a Document with its frontmatter header."""
    text = build_frontmatter(doc.frontmatter) + serialize(doc.blocks)
    return text.rstrip("\n") + "\n" if text else ""
