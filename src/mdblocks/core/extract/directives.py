"""Recognizers for the markdown extensions layered over the CommonMark tree

Everything here is a pure function over strings. A recognizer that does not
match returns None so the caller can fall back to the generic construct.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from mdblocks.core.models import IncludeBlock, LineRange


CODE_GROUP = "code-group"

FENCE_LANG_RE    = re.compile(r'^([^\s:\[{]*)')
FILENAME_RE      = re.compile(r'\[([^\]]*)\]')
HIGHLIGHT_RE     = re.compile(r'\{([^}]*)\}')
LINE_NUMBERS_RE  = re.compile(r':line-numbers(?:=(\d+))?')

COMPONENT_OPEN_RE = re.compile(r'^<([A-Z][A-Za-z0-9]*)(\s[^<>]*?)?\s*(/?)>')
ATTRIBUTE_RE = re.compile(
    r'''([a-zA-Z_:@][a-zA-Z0-9_:.@-]*)\s*(?:=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+)))?'''
)
INCLUDE_RE = re.compile(
    r'^<!--\s*@include:\s*([^\s{}#]+)(?:#([^\s{}]+))?(?:\{(\d*)-(\d*)\})?\s*-->$'
)
CALLOUT_RE = re.compile(r'^\[!(NOTE|TIP|WARNING|CAUTION|IMPORTANT)\][ \t]*([^\n]*)\n?')
TASK_RE = re.compile(r'^\[([ xX])\](?:[ \t]+|$)')
CLOSING_MARKER_RE = re.compile(r'^[\s>]*:{3,}\s*$')
ESCAPED_BRACKET_RE = re.compile(r'^[\s>]*(?:(?:[-*+]|\d+[.)])[ \t]+)?\\\[')

CALLOUT_TYPES: dict[str, str] = {
    "NOTE":      "info",
    "TIP":       "tip",
    "WARNING":   "warning",
    "CAUTION":   "danger",
    "IMPORTANT": "details",
}

AttributeValue = Union[str, bool]


@dataclass
class FenceInfo:
    """Language and display annotations from a fence info string."""
    language:          str = ""
    filename:          Optional[str] = None
    highlight_lines:   Optional[str] = None
    show_line_numbers: bool = False
    start_line_number: int = 1

    @property
    def annotated(self) -> bool:
        return self.filename is not None or self.highlight_lines is not None or self.show_line_numbers


@dataclass
class ComponentTag:
    """A capitalized component tag found at the start of an html block."""
    name:         str
    attributes:   dict[str, AttributeValue]
    self_closing: bool
    inner:        Optional[str] = None     # body when the closing tag sits in the same html block
    closed:       bool = True


def parse_fence_info(info: str) -> FenceInfo:
    """Split 'ts:line-numbers=3 [app.ts] {1,4-6}' into its parts."""
    info = info.strip()
    language = FENCE_LANG_RE.match(info).group(1)
    meta = info[len(language):]
    fence = FenceInfo(language=language)
    if m := FILENAME_RE.search(meta):
        fence.filename = m.group(1).strip()
    if m := HIGHLIGHT_RE.search(meta):
        fence.highlight_lines = m.group(1).strip()
    if m := LINE_NUMBERS_RE.search(meta):
        fence.show_line_numbers = True
        if m.group(1):
            fence.start_line_number = int(m.group(1))
    return fence


def container_validator(name: str) -> Callable[[str, str], bool]:
    """Build a container_plugin validate hook accepting exactly `name` as the first word."""
    def validate(params: str, *args) -> bool:
        return params.strip().split(None, 1)[:1] == [name]
    return validate


def container_params(params: str) -> tuple[str, Optional[str]]:
    """Return (type, custom title or None) from container params like ' warning Be careful'."""
    parts = params.strip().split(None, 1)
    title = parts[1].strip() if len(parts) > 1 else ""
    return parts[0], title or None


def parse_attributes(text: str) -> dict[str, AttributeValue]:
    """Parse tag attributes into an ordered map; bare attributes map to True."""
    attributes: dict[str, AttributeValue] = {}
    for m in ATTRIBUTE_RE.finditer(text or ""):
        key, double, single, bare = m.groups()
        if double is not None:
            attributes[key] = double
        elif single is not None:
            attributes[key] = single
        elif bare is not None:
            attributes[key] = bare
        else:
            attributes[key] = True
    return attributes


def match_component(html: str) -> Optional[ComponentTag]:
    """Recognize '<Name .../>', '<Name ...>...</Name>' or a lone opening '<Name ...>'."""
    html = html.strip()
    m = COMPONENT_OPEN_RE.match(html)
    if not m:
        return None
    name, attr_text, slash = m.groups()
    attributes = parse_attributes(attr_text)
    rest = html[m.end():].strip()
    if slash:
        return ComponentTag(name, attributes, self_closing=True) if not rest else None
    if not rest:
        return ComponentTag(name, attributes, self_closing=False, closed=False)
    close = f"</{name}>"
    if rest.endswith(close):
        return ComponentTag(name, attributes, self_closing=False, inner=rest[:-len(close)].strip("\n"))
    return None


def is_closing_tag(html: str, name: str) -> bool:
    return html.strip() == f"</{name}>"


def match_include(html: str) -> Optional[IncludeBlock]:
    """Recognize '<!--@include: path#region{start-end}-->'."""
    m = INCLUDE_RE.match(html.strip())
    if not m:
        return None
    path, region, start, end = m.groups()
    line_range = None
    if start is not None or end is not None:
        line_range = LineRange(start=int(start) if start else None, end=int(end) if end else None)
    return IncludeBlock(path=path, region=region, line_range=line_range)


def match_callout(text: str) -> Optional[tuple[str, Optional[str], str]]:
    """Recognize a '[!NOTE] title' marker line; returns (container type, title, remaining text)."""
    m = CALLOUT_RE.match(text)
    if not m:
        return None
    return CALLOUT_TYPES[m.group(1)], m.group(2).strip() or None, text[m.end():]


def match_task(text: str) -> Optional[tuple[bool, str]]:
    """Recognize a '[ ] ' / '[x] ' task prefix; returns (checked, remaining text)."""
    m = TASK_RE.match(text)
    if not m:
        return None
    return m.group(1) != " ", text[m.end():]
