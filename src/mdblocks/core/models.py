"""Document Model: typed inline content, blocks, and parsed documents"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from mdblocks.core.utils.ids import new_block_id


ContainerType = Literal["tip", "info", "warning", "danger", "details"]
CONTAINER_TYPES: tuple[str, ...] = ("tip", "info", "warning", "danger", "details")
DEFAULT_CONTAINER_TYPE = "tip"

Align = Literal["left", "center", "right"]


# --- inline content ---

class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str
    raw: bool = False               # markup kept verbatim (inline html, unsupported syntax), never escaped


class HardBreakContent(BaseModel):
    type: Literal["hard_break"] = "hard_break"


class StrongContent(BaseModel):
    type: Literal["strong"] = "strong"
    children: list["InlineContent"] = []


class EmphasisContent(BaseModel):
    type: Literal["emphasis"] = "emphasis"
    children: list["InlineContent"] = []


class CodeContent(BaseModel):
    type: Literal["code"] = "code"
    text: str


class LinkContent(BaseModel):
    type: Literal["link"] = "link"
    href: str
    title: Optional[str] = None
    children: list["InlineContent"] = []


class InlineMathContent(BaseModel):
    type: Literal["inline_math"] = "inline_math"
    formula: str
    display_mode: bool = False      # $$...$$ written inside running text


InlineContent = Annotated[
    Union[
        TextContent,
        HardBreakContent,
        StrongContent,
        EmphasisContent,
        CodeContent,
        LinkContent,
        InlineMathContent,
    ],
    Field(discriminator="type"),
]


# --- blocks ---

class BlockBase(BaseModel):
    """Common block fields. The id correlates editor nodes and never takes part in content equality."""
    id: str = Field(default_factory=new_block_id)


class ParagraphBlock(BlockBase):
    type: Literal["paragraph"] = "paragraph"
    content: list[InlineContent] = []


class HeadingBlock(BlockBase):
    type: Literal["heading"] = "heading"
    level: int = Field(default=1, ge=1, le=6)
    content: list[InlineContent] = []


class BulletListItemBlock(BlockBase):
    type: Literal["bullet_list_item"] = "bullet_list_item"
    content: list[InlineContent] = []
    children: list["Block"] = []


class NumberedListItemBlock(BlockBase):
    type: Literal["numbered_list_item"] = "numbered_list_item"
    start: int = 1                  # the number this item is written with
    content: list[InlineContent] = []
    children: list["Block"] = []


class CheckListItemBlock(BlockBase):
    type: Literal["check_list_item"] = "check_list_item"
    checked: bool = False
    content: list[InlineContent] = []
    children: list["Block"] = []


class CodeBlock(BlockBase):
    type: Literal["code_block"] = "code_block"
    language: Optional[str] = None
    code: str = ""


class TableCell(BaseModel):
    content: list[InlineContent] = []
    align: Optional[Align] = None


class TableRow(BaseModel):
    cells: list[TableCell] = []


class TableBlock(BlockBase):
    type: Literal["table"] = "table"
    header_row: TableRow = Field(default_factory=TableRow)
    rows: list[TableRow] = []


class ImageBlock(BlockBase):
    type: Literal["image"] = "image"
    src: str
    alt: Optional[str] = None
    title: Optional[str] = None


class QuoteBlock(BlockBase):
    """Blockquote. Always holds at least one child; an empty quote carries one empty paragraph."""
    type: Literal["quote"] = "quote"
    children: list["Block"] = []

    @model_validator(mode="after")
    def _never_empty(self) -> "QuoteBlock":
        if not self.children:
            self.children = [ParagraphBlock()]
        return self


class ThematicBreakBlock(BlockBase):
    type: Literal["thematic_break"] = "thematic_break"


class ContainerBlock(BlockBase):
    type: Literal["container"] = "container"
    container_type: ContainerType = DEFAULT_CONTAINER_TYPE
    title: Optional[str] = None     # None means the renderer's default title
    children: list["Block"] = []


class MathBlock(BlockBase):
    type: Literal["math"] = "math"
    formula: str
    display: Literal["inline", "block"] = "block"


class DiagramBlock(BlockBase):
    type: Literal["diagram"] = "diagram"
    code: str = ""
    language: str = "mermaid"


class ComponentBlock(BlockBase):
    type: Literal["component"] = "component"
    name: str
    attributes: dict[str, Union[str, bool, int, float]] = {}
    self_closing: bool = True
    children: list["Block"] = []


class LineRange(BaseModel):
    start: Optional[int] = None
    end: Optional[int] = None


class IncludeBlock(BlockBase):
    type: Literal["include"] = "include"
    path: str
    line_range: Optional[LineRange] = None
    region: Optional[str] = None


class CodeTab(BaseModel):
    """One tab of a code group."""
    code: str = ""
    language: str = ""
    filename: Optional[str] = None
    highlight_lines: Optional[str] = None   # e.g. "1,3-5" (without braces)
    show_line_numbers: bool = False
    start_line_number: int = 1


class RichCodeBlock(BlockBase):
    type: Literal["rich_code"] = "rich_code"
    code: str = ""
    language: str = ""
    filename: Optional[str] = None
    highlight_lines: Optional[str] = None
    show_line_numbers: bool = False
    start_line_number: int = 1
    tabs: Optional[list[CodeTab]] = None    # set only for code groups
    active_tab_index: int = 0


Block = Annotated[
    Union[
        ParagraphBlock,
        HeadingBlock,
        BulletListItemBlock,
        NumberedListItemBlock,
        CheckListItemBlock,
        CodeBlock,
        TableBlock,
        ImageBlock,
        QuoteBlock,
        ThematicBreakBlock,
        ContainerBlock,
        MathBlock,
        DiagramBlock,
        ComponentBlock,
        IncludeBlock,
        RichCodeBlock,
    ],
    Field(discriminator="type"),
]

LIST_ITEM_TYPES = (BulletListItemBlock, NumberedListItemBlock, CheckListItemBlock)


class Document(BaseModel):
    """A parsed markdown file: detached frontmatter plus its ordered blocks."""
    path: str = ""
    frontmatter: dict[str, Any] = {}
    blocks: list[Block] = []


for _model in (
    StrongContent, EmphasisContent, LinkContent,
    ParagraphBlock, HeadingBlock, TableCell, TableRow, TableBlock,
    BulletListItemBlock, NumberedListItemBlock, CheckListItemBlock,
    QuoteBlock, ContainerBlock, ComponentBlock, Document,
):
    _model.model_rebuild()


def _content(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return {name: _content(getattr(value, name)) for name in type(value).model_fields if name != "id"}
    if isinstance(value, list):
        return [_content(v) for v in value]
    if isinstance(value, dict):
        return {k: _content(v) for k, v in value.items()}
    return value


def content_dump(blocks: list) -> list[dict[str, Any]]:
    """Dump blocks to plain data with every block id removed, for content comparison."""
    return [_content(b) for b in blocks]
