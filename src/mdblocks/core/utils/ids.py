"""Identifier generation for blocks and quote groups"""

from uuid import uuid4


def new_block_id() -> str:
    """Return a fresh block identifier (editor correlation only, never content)."""
    return f"block-{uuid4().hex[:12]}"


def new_group_id() -> str:
    """Return a fresh quote group identifier."""
    return f"group-{uuid4().hex[:12]}"
