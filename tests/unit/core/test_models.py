"""Unit tests for core/models.py"""

import pytest
from pydantic import ValidationError

from mdblocks.core.models import (
    ContainerBlock,
    Document,
    HeadingBlock,
    ParagraphBlock,
    QuoteBlock,
    TextContent,
    content_dump,
)


def test_block_ids_are_unique():
    """Every block gets its own id."""
    assert ParagraphBlock().id != ParagraphBlock().id


def test_quote_never_empty():
    """An empty quote is given one empty paragraph."""
    quote = QuoteBlock()
    assert len(quote.children) == 1
    assert isinstance(quote.children[0], ParagraphBlock)


def test_heading_level_bounds():
    """Heading levels outside 1-6 are rejected."""
    with pytest.raises(ValidationError):
        HeadingBlock(level=7)


def test_container_type_restricted():
    """Only the five container types validate."""
    with pytest.raises(ValidationError):
        ContainerBlock(container_type="foo")


def test_content_dump_ignores_ids():
    """Blocks with equal content and different ids dump equal."""
    a = [QuoteBlock(children=[ParagraphBlock(content=[TextContent(text="x")])])]
    b = [QuoteBlock(children=[ParagraphBlock(content=[TextContent(text="x")])])]
    assert a != b
    assert content_dump(a) == content_dump(b)


def test_document_json_round_trip(sample_blocks):
    """A Document survives JSON dump and validation with block types intact."""
    doc = Document(path="a.md", frontmatter={"title": "T"}, blocks=sample_blocks)
    restored = Document.model_validate_json(doc.model_dump_json())
    assert restored == doc
    assert [b.type for b in restored.blocks] == [b.type for b in sample_blocks]
