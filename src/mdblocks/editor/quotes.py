"""Quote groups: nested quote Blocks <-> flat runs of editor quote nodes

The editor holds one paragraph per quote node, so a quote Block is written out
as one quote node per paragraph sharing a group id. The first node of a group
carries isFirstInGroup so the editor draws one quote bar for the whole run.
Reading back, adjacent quote nodes with the same non-empty group id fold into
one quote Block again.
"""

from typing import Callable, Optional

from mdblocks.core.models import Block, InlineContent, ParagraphBlock, QuoteBlock
from mdblocks.core.utils.ids import new_group_id
from mdblocks.editor.inline import from_editor_inline, to_editor_inline
from mdblocks.editor.models import EditorBlock


ToEditor = Callable[[list[Block]], list[EditorBlock]]
FromEditor = Callable[[list[EditorBlock]], list[Block]]


def _quote_node(group_id: str, first: bool, content: list[InlineContent], node_id: str = None) -> EditorBlock:
    node = EditorBlock(
        type="quote",
        props={"groupId": group_id, "isFirstInGroup": first},
        content=to_editor_inline(content),
    )
    if node_id:
        node.id = node_id
    return node


def expand_quote(block: QuoteBlock, to_editor: ToEditor) -> list[EditorBlock]:
    """Write a quote Block as flat editor siblings.

    Paragraph children become quote nodes of one fresh group. Nested quotes are
    converted recursively and attached under the latest quote node of the group.
    Any other child is converted on its own and emitted as an ungrouped sibling.
    """
    group_id = new_group_id()
    nodes: list[EditorBlock] = []
    host: Optional[EditorBlock] = None
    for child in block.children:
        if isinstance(child, ParagraphBlock):
            host = _quote_node(group_id, host is None, child.content, block.id if host is None else None)
            nodes.append(host)
        elif isinstance(child, QuoteBlock):
            if host is None:
                host = _quote_node(group_id, True, [], block.id)
                nodes.append(host)
            host.children.extend(to_editor([child]))
        else:
            nodes.extend(to_editor([child]))
    return nodes


def build_quote(nodes: list[EditorBlock], from_editor: FromEditor) -> QuoteBlock:
    """Fold one run of quote nodes into a single quote Block.

    Every node contributes a paragraph, except an empty node that only hosts
    nested children. Raises ValueError when handed anything but quote nodes.
    """
    children: list[Block] = []
    for node in nodes:
        if node.type != "quote":
            raise ValueError(f"Cannot merge a {node.type!r} node into a quote group")
        content = from_editor_inline(node.content)
        nested = from_editor(node.children) if node.children else []
        if content or not nested:
            children.append(ParagraphBlock(content=content))
        children.extend(nested)
    return QuoteBlock(id=nodes[0].id, children=children) if nodes else QuoteBlock()


class QuoteGroupMerger:
    """Single pass over sibling editor nodes, folding same-group quote runs into quote Blocks.

    State is the group id of the run being collected and the nodes in it.
    Non-quote nodes, and quote nodes without a group id, end the current run.
    """

    def __init__(self, convert_node: Callable[[EditorBlock], list[Block]], convert_children: FromEditor):
        self._convert_node = convert_node
        self._convert_children = convert_children
        self._group_id: Optional[str] = None
        self._run: list[EditorBlock] = []
        self._blocks: list[Block] = []

    def _flush(self) -> None:
        if self._run:
            self._blocks.append(build_quote(self._run, self._convert_children))
        self._run = []
        self._group_id = None

    def feed(self, node: EditorBlock) -> None:
        if node.type != "quote":
            self._flush()
            self._blocks.extend(self._convert_node(node))
            return
        group_id = node.props.get("groupId") or None
        if group_id is None or group_id != self._group_id:
            self._flush()
        self._run.append(node)
        self._group_id = group_id
        if group_id is None:
            self._flush()

    def finish(self) -> list[Block]:
        self._flush()
        return self._blocks
