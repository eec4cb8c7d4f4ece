"""Tokenization engine for ultra-robust BBCode parsing.

Key Components:
    BBCodeTokenizer: Splits markup into raw tag and text tokens
    TokenStream: Lazy, restartable sequence of raw tokens
    RawToken: A raw token substring with its captured pieces
    TagInfo: Classifies a raw token against the tag dictionary
    TokenKind: Opening tag, closing tag or text
"""

from .tokenizer import (
    BBCodeTokenizer,
    RawToken,
    TokenizationResult,
    TokenKind,
    TokenStream,
    escape_html,
)
from .tag_info import TagInfo, parse_named_params

__all__ = [
    "BBCodeTokenizer",
    "RawToken",
    "TagInfo",
    "TokenKind",
    "TokenStream",
    "TokenizationResult",
    "escape_html",
    "parse_named_params",
]
