"""Inline syntax tree nodes to InlineContent"""

import logging
from typing import Callable

from markdown_it.tree import SyntaxTreeNode

from mdblocks.core.models import (
    CodeContent,
    EmphasisContent,
    HardBreakContent,
    InlineContent,
    InlineMathContent,
    LinkContent,
    StrongContent,
    TextContent,
)


logger = logging.getLogger(__name__)


def _text(node: SyntaxTreeNode) -> list[InlineContent]:
    return [TextContent(text=node.content)]


def _softbreak(node: SyntaxTreeNode) -> list[InlineContent]:
    return [TextContent(text="\n")]


def _hardbreak(node: SyntaxTreeNode) -> list[InlineContent]:
    return [HardBreakContent()]


def _strong(node: SyntaxTreeNode) -> list[InlineContent]:
    return [StrongContent(children=convert_inline(node.children))]


def _em(node: SyntaxTreeNode) -> list[InlineContent]:
    return [EmphasisContent(children=convert_inline(node.children))]


def _strikethrough(node: SyntaxTreeNode) -> list[InlineContent]:
    # no strikethrough variant; keep the markers as literal text
    return [TextContent(text="~~"), *convert_inline(node.children), TextContent(text="~~")]


def _code_inline(node: SyntaxTreeNode) -> list[InlineContent]:
    return [CodeContent(text=node.content)]


def _link(node: SyntaxTreeNode) -> list[InlineContent]:
    title = node.attrs.get("title")
    return [LinkContent(
        href=str(node.attrs.get("href", "")),
        title=str(title) if title else None,
        children=convert_inline(node.children),
    )]


def _image(node: SyntaxTreeNode) -> list[InlineContent]:
    # images inside running text have no inline variant; keep their markup
    src = node.attrs.get("src", "")
    title = node.attrs.get("title")
    suffix = f' "{title}"' if title else ""
    return [TextContent(text=f"![{node.content}]({src}{suffix})", raw=True)]


def _html_inline(node: SyntaxTreeNode) -> list[InlineContent]:
    return [TextContent(text=node.content, raw=True)]


def _math_inline(node: SyntaxTreeNode) -> list[InlineContent]:
    return [InlineMathContent(formula=node.content)]


def _math_inline_double(node: SyntaxTreeNode) -> list[InlineContent]:
    return [InlineMathContent(formula=node.content.strip(), display_mode=True)]


INLINE_HANDLERS: dict[str, Callable[[SyntaxTreeNode], list[InlineContent]]] = {
    "text":               _text,
    "text_special":       _text,
    "softbreak":          _softbreak,
    "hardbreak":          _hardbreak,
    "strong":             _strong,
    "em":                 _em,
    "s":                  _strikethrough,
    "code_inline":        _code_inline,
    "link":               _link,
    "image":              _image,
    "html_inline":        _html_inline,
    "math_inline":        _math_inline,
    "math_inline_double": _math_inline_double,
}


def merge_text(items: list[InlineContent]) -> list[InlineContent]:
    """Join adjacent text runs of the same kind and drop empty ones."""
    merged: list[InlineContent] = []
    for item in items:
        if isinstance(item, TextContent):
            if not item.text:
                continue
            if merged and isinstance(merged[-1], TextContent) and merged[-1].raw == item.raw:
                merged[-1] = TextContent(text=merged[-1].text + item.text, raw=item.raw)
                continue
        merged.append(item)
    return merged


def convert_inline(nodes: list[SyntaxTreeNode]) -> list[InlineContent]:
    """Convert inline tree nodes to InlineContent; unknown nodes keep their raw content as text."""
    items: list[InlineContent] = []
    for node in nodes:
        handler = INLINE_HANDLERS.get(node.type)
        if handler is None:
            logger.debug("Unhandled inline node %r kept as text", node.type)
            items.append(TextContent(text=node.content or "", raw=True))
            continue
        items.extend(handler(node))
    return merge_text(items)


def inline_children(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    """Return the inline nodes under a block node (paragraph, heading, cell)."""
    if node.children and node.children[0].type == "inline":
        return node.children[0].children
    return []


def plain_text(content: list[InlineContent]) -> str:
    """Flatten inline content to its visible text."""
    parts = []
    for item in content:
        if isinstance(item, (TextContent, CodeContent)):
            parts.append(item.text)
        elif isinstance(item, InlineMathContent):
            parts.append(item.formula)
        elif isinstance(item, HardBreakContent):
            parts.append("\n")
        else:
            parts.append(plain_text(item.children))
    return "".join(parts)
