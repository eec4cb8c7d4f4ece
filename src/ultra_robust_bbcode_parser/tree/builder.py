"""Tree assembly for ultra-robust BBCode parsing.

As a string such as ``"[b]I'm bold and the next word is [i]ITALIC[/i][/b]"``
is sifted, the tree grows one node per token:

* an opening tag node for ``[b]``
* a text node ``"I'm bold and the next word is "`` inside it
* an opening tag node for ``[i]`` inside ``[b]``
* a text node ``"ITALIC"`` inside ``[i]``

``BBTree`` keeps the root collection, the stack of currently open tags and a
cursor pointing at the node that receives new children.
"""

from typing import List, Optional

from ultra_robust_bbcode_parser.shared import get_logger

from .nodes import Node, NodeCollection, TagNode, TextNode


def _chomp(text: str) -> str:
    """Remove one trailing line break (``\\r\\n``, ``\\n`` or ``\\r``)."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text


class BBTree:
    """Output tree plus the open-tag stack used while building it."""

    def __init__(
        self,
        nodes: Optional[NodeCollection] = None,
        trim_self_closing_newlines: bool = True,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize an empty tree.

        Args:
            nodes: Root collection to append to (a new one by default)
            trim_self_closing_newlines: Treat a newline between self-closing
                tags on adjacent lines as a separator rather than content
            correlation_id: Optional correlation ID for request tracking
        """
        self.nodes = nodes if nodes is not None else NodeCollection()
        self.trim_self_closing_newlines = trim_self_closing_newlines
        self.tags_list: List[TagNode] = []
        self.current_node: Optional[TagNode] = None
        self.logger = get_logger(__name__, correlation_id, "bbtree")

    @property
    def within_open_tag(self) -> bool:
        """Check if any tag is currently open."""
        return bool(self.tags_list)

    expecting_a_closing_tag = within_open_tag

    @property
    def parent_tag(self) -> Optional[TagNode]:
        """Nearest open tag, ``None`` at the root."""
        if not self.within_open_tag:
            return None
        return self.tags_list[-1]

    @property
    def parent_has_constraints_on_children(self) -> bool:
        """Check if the nearest open tag only allows certain child tags."""
        parent = self.parent_tag
        return parent is not None and parent.definition.only_allow is not None

    @property
    def current_children(self) -> NodeCollection:
        """Collection that receives the next built node."""
        if self.current_node is None:
            return self.nodes
        return self.current_node.children

    @property
    def depth(self) -> int:
        return len(self.tags_list)

    def escalate(self, node: TagNode) -> None:
        """Advance one level down into ``node``, the tag just opened."""
        self.tags_list.append(node)
        self.current_node = node

    def retrogress(self) -> Optional[TagNode]:
        """Step back up one level because the current tag was closed.

        Returns:
            The tag that was closed, or ``None`` if nothing was open
        """
        if not self.tags_list:
            self.logger.warning("Retrogress requested with no open tag")
            return None

        closing = self.tags_list[-1]
        if closing.definition.self_closable and self.trim_self_closing_newlines:
            # A following self-closable tag is probably on the next line; the
            # newline separates the tags and is not content
            self._chomp_first_text(closing)
            if len(self.tags_list) >= 2:
                self._chomp_first_text(self.tags_list[-2])

        self.tags_list.pop()
        self.current_node = self.tags_list[-1] if self.tags_list else None
        return closing

    def build_up_new_tag(self, node: Node) -> None:
        """Append ``node`` as the last child of the current node."""
        self.current_children.append(node)

    @staticmethod
    def _chomp_first_text(tag: TagNode) -> None:
        first = tag.first_child
        if isinstance(first, TextNode):
            first.text = _chomp(first.text)
