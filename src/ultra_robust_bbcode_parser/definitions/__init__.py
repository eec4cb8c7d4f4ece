"""Tag dictionary interface for ultra-robust BBCode parsing.

Key Components:
    TagDefinition: Immutable, declarative grammar rules for a single tag
    ParamToken: A named parameter accepted by a tag
    TagDictionary: Read-only lookup from tag name to definition
    DictionaryLike: A TagDictionary or a plain mapping of definitions
"""

from .tag_definition import DictionaryLike, ParamToken, TagDefinition, TagDictionary

__all__ = [
    "DictionaryLike",
    "ParamToken",
    "TagDefinition",
    "TagDictionary",
]
