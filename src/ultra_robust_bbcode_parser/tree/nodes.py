"""Node types making up a sifted BBCode tree.

The tree is a ``NodeCollection`` of root nodes. Tag nodes own a child
collection; text nodes are leaves. Every node carries its own list of error
messages for node-scoped diagnostics.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from ultra_robust_bbcode_parser.definitions import TagDefinition


class NodeCollection(list):
    """Ordered container of sibling nodes."""

    def walk(self) -> Iterator["Node"]:
        """Iterate over all nodes depth-first in document order."""
        for node in self:
            yield node
            if node.is_tag:
                yield from node.children.walk()

    def node_count(self) -> int:
        """Count all nodes in the collection, descendants included."""
        return sum(1 for _ in self.walk())

    def find_all(self, tag: str) -> List["TagNode"]:
        """Find all tag nodes named ``tag`` in document order."""
        return [node for node in self.walk() if node.is_tag and node.tag == tag]

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Convert the collection to a list of dictionaries."""
        return [node.to_dict() for node in self]


@dataclass(eq=False)
class TextNode:
    """Literal text content."""

    text: str
    errors: List[str] = field(default_factory=list)

    is_tag = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result: Dict[str, Any] = {"is_tag": False, "text": self.text}
        if self.errors:
            result["errors"] = list(self.errors)
        return result


@dataclass(eq=False)
class TagNode:
    """A tag together with its parameters and children.

    ``tag`` and ``definition`` may be replaced once, when a multi-tag
    placeholder is resolved to a concrete tag from its content.
    """

    tag: str
    definition: TagDefinition
    params: Dict[str, str] = field(default_factory=dict)
    between: Optional[str] = None
    children: NodeCollection = field(default_factory=NodeCollection)
    errors: List[str] = field(default_factory=list)
    invalid_quick_param: Optional[str] = None
    closed: bool = True

    is_tag = True

    def __post_init__(self) -> None:
        """Validate tag node."""
        if not self.tag:
            raise ValueError("Tag node name cannot be empty")

    @property
    def params_not_set(self) -> bool:
        """Check if no parameters were supplied or backfilled."""
        return not self.params

    @property
    def has_invalid_quick_param(self) -> bool:
        return self.invalid_quick_param is not None

    @property
    def is_unresolved_multi_tag(self) -> bool:
        """Check if this is a multi-tag placeholder still awaiting resolution."""
        return self.definition.multi_tag

    @property
    def first_child(self) -> Optional["Node"]:
        return self.children[0] if self.children else None

    def resolve_to(self, tag: str, definition: TagDefinition) -> None:
        """Turn a multi-tag placeholder into the concrete ``tag``."""
        if not self.is_unresolved_multi_tag:
            raise ValueError(f"[{self.tag}] is not an unresolved multi-tag")
        self.tag = tag
        self.definition = definition

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result: Dict[str, Any] = {
            "is_tag": True,
            "tag": self.tag,
            "params": dict(self.params),
            "closed": self.closed,
        }
        if self.between is not None:
            result["between"] = self.between
        if self.children:
            result["children"] = self.children.to_dicts()
        if self.errors:
            result["errors"] = list(self.errors)
        return result


Node = Union[TagNode, TextNode]
