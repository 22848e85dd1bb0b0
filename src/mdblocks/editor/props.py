"""Codecs for custom editor block props stored as strings"""

import json
import logging
import re
from typing import Any, Optional

from mdblocks.core.models import CodeTab, LineRange


logger = logging.getLogger(__name__)

LINE_RANGE_RE = re.compile(r'^\s*(\d*)\s*-\s*(\d*)\s*$')

DEFAULT_CONTAINER_TITLES: dict[str, str] = {
    "tip":     "TIP",
    "info":    "INFO",
    "warning": "WARNING",
    "danger":  "DANGER",
    "details": "Details",
}
# default titles other locales and older editors wrote into the content
_KNOWN_DEFAULT_TITLES = {
    *DEFAULT_CONTAINER_TITLES.values(),
    "DETAILS", "提示", "信息", "注意", "警告", "危险", "详情",
}


def default_title(container_type: str) -> str:
    return DEFAULT_CONTAINER_TITLES.get(container_type, container_type.upper())


def is_default_title(title: str) -> bool:
    return title.strip() in _KNOWN_DEFAULT_TITLES


# --- include line range ---

def format_line_range(line_range: Optional[LineRange]) -> str:
    """LineRange(1, 5) -> '1-5'; None -> ''."""
    if line_range is None:
        return ""
    start = "" if line_range.start is None else line_range.start
    end = "" if line_range.end is None else line_range.end
    return f"{start}-{end}"


def parse_line_range(value: Any) -> Optional[LineRange]:
    """'1-5' -> LineRange(1, 5); empty or malformed -> None."""
    if not value:
        return None
    m = LINE_RANGE_RE.match(str(value))
    if not m:
        logger.warning("Ignoring malformed include line range %r", value)
        return None
    start, end = m.groups()
    return LineRange(start=int(start) if start else None, end=int(end) if end else None)


# --- component attributes ---

def attributes_to_json(attributes: dict[str, Any]) -> str:
    return json.dumps(attributes, ensure_ascii=False)


def attributes_from_json(value: Any) -> dict[str, Any]:
    """Decode attributesJson; anything but a JSON object decodes to {}."""
    if isinstance(value, dict):
        return value
    try:
        decoded = json.loads(value or "{}")
    except (TypeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring malformed component attributes %r: %s", value, e)
        return {}
    return decoded if isinstance(decoded, dict) else {}


# --- highlight braces ---

def highlight_to_prop(highlight_lines: Optional[str]) -> str:
    """'1,3-5' -> '{1,3-5}'; None -> ''."""
    return f"{{{highlight_lines}}}" if highlight_lines else ""


def highlight_from_prop(value: Any) -> Optional[str]:
    """'{1,3-5}' -> '1,3-5'; '' -> None."""
    text = str(value or "").strip().strip("{}").strip()
    return text or None


# --- code group tabs ---

def _tab_to_prop(tab: CodeTab) -> dict[str, Any]:
    return {
        "code":            tab.code,
        "language":        tab.language,
        "filename":        tab.filename or "",
        "highlightLines":  highlight_to_prop(tab.highlight_lines),
        "showLineNumbers": tab.show_line_numbers,
        "startLineNumber": tab.start_line_number,
    }


def _tab_from_prop(data: dict[str, Any]) -> CodeTab:
    return CodeTab(
        code=str(data.get("code", "")),
        language=str(data.get("language", "")),
        filename=data.get("filename") or None,
        highlight_lines=highlight_from_prop(data.get("highlightLines")),
        show_line_numbers=bool(data.get("showLineNumbers", False)),
        start_line_number=int(data.get("startLineNumber") or 1),
    )


def tabs_to_json(tabs: Optional[list[CodeTab]]) -> str:
    return json.dumps([_tab_to_prop(t) for t in tabs or []], ensure_ascii=False)


def tabs_from_json(value: Any) -> Optional[list[CodeTab]]:
    """Decode the tabs prop; empty or malformed -> None (a plain rich code block)."""
    if isinstance(value, list):
        decoded = value
    else:
        try:
            decoded = json.loads(value or "[]")
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring malformed code group tabs: %s", e)
            return None
    tabs = [_tab_from_prop(item) for item in decoded if isinstance(item, dict)] if isinstance(decoded, list) else []
    return tabs or None
