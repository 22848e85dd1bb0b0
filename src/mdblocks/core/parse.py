"""Frontmatter extraction, markdown-it construction, and markup-to-block parsing"""

import logging
import re
from functools import partial
from typing import Any

import yaml
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin

from mdblocks.config import Settings
from mdblocks.core.extract.blocks import BlockContext, nodes_to_blocks
from mdblocks.core.extract.directives import CODE_GROUP, container_validator
from mdblocks.core.models import CONTAINER_TYPES, Block, Document


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)', re.DOTALL)


def _make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the preset plus math and ':::' container rules."""
    md = MarkdownIt(preset, options_update={"linkify": False})
    md.use(dollarmath_plugin, allow_digits=False, double_inline=True)
    for name in (*CONTAINER_TYPES, CODE_GROUP):
        md.use(container_plugin, name, validate=container_validator(name))
    return md


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed.

    A header that is not valid YAML, or not a mapping, is left in the body.
    """
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning("Ignoring invalid YAML frontmatter: %s", e)
        return {}, text
    if not isinstance(fm, dict):
        logger.warning("Ignoring frontmatter: expected a mapping, got %s", type(fm).__name__)
        return {}, text
    return fm, text[m.end():].lstrip("\n")


def extract_frontmatter(markup: str) -> dict[str, Any]:
    """Return the leading YAML frontmatter of markup as a dict (empty when absent)."""
    return _strip_frontmatter(markup)[0]


def _parse_body(body: str, settings: Settings) -> list[Block]:
    if not body.endswith("\n"):
        body += "\n"
    tokens = _make_parser(settings.parser_config).parse(body)
    ctx = BlockContext(
        lines=body.splitlines(),
        diagram_languages=tuple(settings.diagram_languages),
        parse_fragment=partial(_parse_body, settings=settings),
    )
    return nodes_to_blocks(SyntaxTreeNode(tokens).children, ctx)


def parse(markup: str, settings: Settings = None) -> list[Block]:
    """Parse markup into blocks. A leading frontmatter section is discarded."""
    _, body = _strip_frontmatter(markup)
    return _parse_body(body, settings or Settings())


def parse_document(markup: str, path: str = "", settings: Settings = None) -> Document:
    """Parse markup into a Document, keeping its frontmatter."""
    frontmatter, body = _strip_frontmatter(markup)
    return Document(path=path, frontmatter=frontmatter, blocks=_parse_body(body, settings or Settings()))
