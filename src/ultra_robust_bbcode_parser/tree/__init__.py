"""Tree building engine for ultra-robust BBCode parsing.

This module builds a validated tree of tag and text nodes from a token
stream, recording every markup error instead of failing.

Key Components:
    TagSifter: Parse driver that classifies, validates and builds
    BBTree: Output tree with the open-tag stack and cursor
    TagNode / TextNode: Nodes of the tree
    NodeCollection: Ordered container of sibling nodes
    ParseResult: Tree, errors, diagnostics and metrics of one sift
"""

from .builder import BBTree
from .errors import ErrorCategory, ErrorLog, SiftError
from .nodes import Node, NodeCollection, TagNode, TextNode
from .result import ParseResult
from .sifter import TagSifter
from .transitions import (
    ClosingTransition,
    OpeningTransition,
    closing_transition,
    opening_transition,
)
from .validation import ElementValidator

__all__ = [
    "BBTree",
    "ClosingTransition",
    "ElementValidator",
    "ErrorCategory",
    "ErrorLog",
    "Node",
    "NodeCollection",
    "OpeningTransition",
    "ParseResult",
    "SiftError",
    "TagNode",
    "TagSifter",
    "TextNode",
    "closing_transition",
    "opening_transition",
]
