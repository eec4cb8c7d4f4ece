"""Ultra-Robust BBCode Parser.

A never-fail BBCode parser that turns bracket-tag markup into a validated
tree of tag and text nodes, driven by a declarative tag dictionary, and
records every markup error instead of aborting.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), check_validity()
- Level 2: Configured parser - BBCodeParser class
- Level 3: Direct sifting - TagSifter and BBTree
"""

__version__ = "0.1.0"
__author__ = "Ultra Robust BBCode Parser Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured parser
from .api import BBCodeParser, check_validity, parse

# Tag dictionary interface
from .definitions import ParamToken, TagDefinition, TagDictionary

# Configuration classes for advanced usage
from .shared.config import ParserConfig, TokenizationConfig, TreeConfig

# Core result objects for all API levels
from .tree import ErrorCategory, NodeCollection, ParseResult, TagNode, TagSifter, TextNode

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "check_validity",

    # Level 2: Configured parser class
    "BBCodeParser",

    # Level 3: Direct sifting
    "TagSifter",

    # Tag dictionary interface
    "ParamToken",
    "TagDefinition",
    "TagDictionary",

    # Result objects and data structures
    "ErrorCategory",
    "NodeCollection",
    "ParseResult",
    "TagNode",
    "TextNode",

    # Configuration classes for advanced usage
    "ParserConfig",
    "TokenizationConfig",
    "TreeConfig",
]
