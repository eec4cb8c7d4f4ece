"""Core BBCode tokenization built on a single regular expression.

This module converts markup text into a stream of raw tokens. It is purely
lexical: every bracketed ``[name ...]`` sequence is reported as a tag-shaped
token whether or not the name means anything, and the classifier decides
what to make of it later.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional

from ultra_robust_bbcode_parser.shared import get_logger

HTML_ESCAPES = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
)

# One alternative per token shape. A lone "[" that cannot start a tag is
# folded into the following text run (or stands alone before another "[")
# so that no input character is dropped. Text tokens are therefore not
# always free of "[": "a[b" scans as "a" and "[b" instead of losing the
# bracket.
TOKEN_PATTERN = re.compile(
    r"""
    (?P<tag>
        \[
        (?P<closing>/)?
        (?P<name>\*|\w+)
        (?P<params>(?:=[^\[\]]+)|(?:\s\w+=\w+)*|(?:[^\]]*))?
        \]
    )
    |
    (?P<text>\[?[^\[]+|\[)
    """,
    re.IGNORECASE | re.VERBOSE,
)


class TokenKind(Enum):
    """Kinds of tokens produced by classification."""

    OPENING_TAG = auto()    # [name], [name=value], [name key=value]
    CLOSING_TAG = auto()    # [/name]
    TEXT = auto()           # Literal text run


@dataclass(frozen=True)
class RawToken:
    """A raw token substring and the pieces the tokenizer captured."""

    complete_match: str
    offset: int
    name: Optional[str] = None
    closing: bool = False
    params: str = ""
    text: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate raw token."""
        if not self.complete_match:
            raise ValueError("Token cannot be empty")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    @property
    def is_tag_shaped(self) -> bool:
        """Check if the token has the ``[...]`` tag shape."""
        return self.name is not None


def escape_html(text: str) -> str:
    """Replace ``<``, ``>`` and ``"`` with their HTML entities."""
    for char, entity in HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


class TokenStream:
    """Lazy, restartable sequence of raw tokens over a fixed text.

    Each iteration rescans the text from the beginning.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[RawToken]:
        for match in TOKEN_PATTERN.finditer(self.text):
            if match.group("tag") is not None:
                yield RawToken(
                    complete_match=match.group(0),
                    offset=match.start(),
                    name=match.group("name"),
                    closing=match.group("closing") is not None,
                    params=match.group("params") or "",
                )
            else:
                yield RawToken(
                    complete_match=match.group(0),
                    offset=match.start(),
                    text=match.group("text"),
                )


@dataclass
class TokenizationResult:
    """Materialized token list with summary counts."""

    tokens: List[RawToken]
    source_length: int = 0
    escaped: bool = True
    shape_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def token_count(self) -> int:
        """Get number of tokens."""
        return len(self.tokens)


class BBCodeTokenizer:
    """Splits markup into opening-tag, closing-tag and text tokens."""

    def __init__(
        self, escape_html: bool = True, correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tokenizer.

        Args:
            escape_html: Escape ``<``, ``>`` and ``"`` before scanning
            correlation_id: Optional correlation ID for request tracking
        """
        self.escape_html = escape_html
        self.logger = get_logger(__name__, correlation_id, "bbcode_tokenizer")

    def prepare(self, text: str) -> str:
        """Apply the optional HTML pre-escaping to ``text``."""
        return escape_html(text) if self.escape_html else text

    def stream(self, text: str) -> TokenStream:
        """Return a lazy token stream over the prepared text."""
        return TokenStream(self.prepare(text))

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize ``text`` into a materialized result."""
        tokens = list(self.stream(text))
        distribution: Dict[str, int] = {}
        for token in tokens:
            if not token.is_tag_shaped:
                shape = "text"
            elif token.closing:
                shape = "closing_tag"
            else:
                shape = "opening_tag"
            distribution[shape] = distribution.get(shape, 0) + 1

        self.logger.debug(
            "Tokenization completed",
            extra={"token_count": len(tokens), "shapes": distribution}
        )
        return TokenizationResult(
            tokens=tokens,
            source_length=len(text),
            escaped=self.escape_html,
            shape_distribution=distribution,
        )
