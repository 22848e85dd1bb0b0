"""Inline content <-> editor styled text runs"""

import logging
from dataclasses import dataclass
from typing import Any

from mdblocks.core.extract.inline import merge_text
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

# on equal spans emphasis goes outside, as markdown-it nests '***a***'
STYLE_ORDER = ("italic", "bold")
STYLE_WRAPPERS = {"bold": StrongContent, "italic": EmphasisContent}


def _runs(item: InlineContent, styles: dict[str, bool]) -> list[dict[str, Any]]:
    if isinstance(item, TextContent):
        run_styles = {**styles, "raw": True} if item.raw else dict(styles)
        return [{"type": "text", "text": item.text, "styles": run_styles}]
    if isinstance(item, HardBreakContent):
        return [{"type": "text", "text": "\n", "styles": {**styles, "hardBreak": True}}]
    if isinstance(item, CodeContent):
        return [{"type": "text", "text": item.text, "styles": {**styles, "code": True}}]
    if isinstance(item, StrongContent):
        return [run for child in item.children for run in _runs(child, {**styles, "bold": True})]
    if isinstance(item, EmphasisContent):
        return [run for child in item.children for run in _runs(child, {**styles, "italic": True})]
    if isinstance(item, LinkContent):
        # link text runs carry the full style set the editor displays
        content = [run for child in item.children for run in _runs(child, styles)]
        return [{"type": "link", "href": item.href, "content": content, "styles": dict(styles)}]
    props: dict[str, Any] = {"formula": item.formula}
    if item.display_mode:
        props["displayMode"] = True
    return [{"type": "inlineMath", "props": props, "styles": dict(styles)}]


def to_editor_inline(content: list[InlineContent]) -> list[dict[str, Any]]:
    """Flatten nested inline content into styled editor runs."""
    return [run for item in content for run in _runs(item, {})]


@dataclass
class _Run:
    styles: dict[str, Any]
    node:   InlineContent


def _without(items: Any, styles: dict[str, Any]) -> Any:
    """Drop the styles a link itself carries from the runs inside it."""
    outer = {k for k, v in styles.items() if v}
    if not outer or not isinstance(items, list):
        return items
    return [
        {**item, "styles": {k: v for k, v in (item.get("styles") or {}).items() if k not in outer}}
        if isinstance(item, dict) else item
        for item in items
    ]


def _to_runs(items: Any) -> list[_Run]:
    runs: list[_Run] = []
    for item in items or []:
        kind = item.get("type") if isinstance(item, dict) else None
        styles = (item.get("styles") or {}) if isinstance(item, dict) else {}
        if kind == "text":
            text = str(item.get("text", ""))
            if styles.get("hardBreak"):
                node = HardBreakContent()
            elif styles.get("code"):
                node = CodeContent(text=text)
            else:
                node = TextContent(text=text, raw=bool(styles.get("raw")))
            runs.append(_Run(styles, node))
        elif kind == "link":
            children = from_editor_inline(_without(item.get("content"), styles))
            runs.append(_Run(styles, LinkContent(href=str(item.get("href", "")), children=children)))
        elif kind == "inlineMath":
            props = item.get("props") or {}
            runs.append(_Run(styles, InlineMathContent(
                formula=str(props.get("formula", "")),
                display_mode=bool(props.get("displayMode", False)),
            )))
        else:
            logger.warning("Unsupported inline type %r replaced by a placeholder", kind)
            runs.append(_Run({}, TextContent(text=f"[unsupported inline type: {kind}]")))
    return runs


def _span_end(runs: list[_Run], start: int, style: str) -> int:
    end = start
    while end < len(runs) and runs[end].styles.get(style):
        end += 1
    return end


def _rebuild(runs: list[_Run], applied: frozenset = frozenset()) -> list[InlineContent]:
    """Regroup adjacent runs sharing a style under one wrapper.

    At each position the style covering the longest stretch of runs becomes
    the outer wrapper, so 'Em[a, Strong[b]]' and 'Strong[a, Em[b]]' both
    come back as they went out.
    """
    nodes: list[InlineContent] = []
    i = 0
    while i < len(runs):
        pending = [s for s in STYLE_ORDER if runs[i].styles.get(s) and s not in applied]
        if not pending:
            nodes.append(runs[i].node)
            i += 1
            continue
        style = max(pending, key=lambda s: _span_end(runs, i, s))
        end = _span_end(runs, i, style)
        inner = _rebuild(runs[i:end], applied | {style})
        nodes.append(STYLE_WRAPPERS[style](children=merge_text(inner)))
        i = end
    return nodes


def from_editor_inline(items: Any) -> list[InlineContent]:
    """Rebuild inline content from editor runs; a bare string is one plain text run."""
    if isinstance(items, str):
        return [TextContent(text=items)] if items else []
    return merge_text(_rebuild(_to_runs(items)))
