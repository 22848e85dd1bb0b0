"""Unit tests for editor/props.py"""

import pytest

from mdblocks.core.models import CodeTab, LineRange
from mdblocks.editor.props import (
    attributes_from_json,
    default_title,
    format_line_range,
    highlight_from_prop,
    highlight_to_prop,
    is_default_title,
    parse_line_range,
    tabs_from_json,
    tabs_to_json,
)


def test_default_titles():
    """Each container type has a default title."""
    assert default_title("tip") == "TIP"
    assert default_title("details") == "Details"
    assert is_default_title(" WARNING ")
    assert not is_default_title("Careful")


@pytest.mark.parametrize("line_range, text", [
    (None, ""),
    (LineRange(start=1, end=5), "1-5"),
    (LineRange(start=3), "3-"),
    (LineRange(end=7), "-7"),
])
def test_format_line_range(line_range, text):
    """Line ranges format as 'start-end' with open ends left blank."""
    assert format_line_range(line_range) == text


def test_parse_line_range():
    """'start-end' strings parse back; blank or malformed values are None."""
    assert parse_line_range("2-4") == LineRange(start=2, end=4)
    assert parse_line_range("-4") == LineRange(end=4)
    assert parse_line_range("") is None
    assert parse_line_range("abc") is None


def test_attributes_from_json():
    """Only JSON objects decode to attributes."""
    assert attributes_from_json('{"a": "b"}') == {"a": "b"}
    assert attributes_from_json({"a": True}) == {"a": True}
    assert attributes_from_json("[1]") == {}
    assert attributes_from_json("{bad") == {}
    assert attributes_from_json(None) == {}


def test_highlight_braces():
    """Highlight props carry braces that the model does not."""
    assert highlight_to_prop("1,3-5") == "{1,3-5}"
    assert highlight_to_prop(None) == ""
    assert highlight_from_prop("{1,3-5}") == "1,3-5"
    assert highlight_from_prop("") is None


def test_tabs_json():
    """Tabs encode to camelCase JSON and decode back."""
    tabs = [CodeTab(code="x", language="js", filename="a.js", show_line_numbers=True, start_line_number=4)]
    encoded = tabs_to_json(tabs)
    assert '"showLineNumbers": true' in encoded
    assert tabs_from_json(encoded) == tabs


def test_tabs_from_json_empty_or_malformed():
    """Empty or malformed tabs mean a plain rich code block."""
    assert tabs_to_json(None) == "[]"
    assert tabs_from_json("[]") is None
    assert tabs_from_json("not json") is None
    assert tabs_from_json(None) is None
