"""Editor-native node shape (BlockNote-compatible)"""

from typing import Any

from pydantic import BaseModel, Field

from mdblocks.core.utils.ids import new_block_id


class EditorBlock(BaseModel):
    """One node of the editor's flat block list.

    `content` is inline run dicts, a tableContent dict, or None depending on `type`.
    Only the adapter builds these.
    """
    id:       str = Field(default_factory=new_block_id)
    type:     str
    props:    dict[str, Any] = {}
    content:  Any = None
    children: list["EditorBlock"] = []


EditorBlock.model_rebuild()
