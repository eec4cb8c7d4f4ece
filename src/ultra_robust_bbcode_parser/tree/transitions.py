"""Open-tag stack transitions.

The open-tag stack is the parser state. These functions compute, from the
current stack and the incoming token alone, which stack operations the token
causes. They never mutate anything, so the sifter can ask the same question
during validation and again while building the tree.

Transition table:

==========================  =====================================  ========================
incoming token              condition                              transition
==========================  =====================================  ========================
opening ``[x]``             current is self-closable ``x``          AUTO_CLOSE_THEN_OPEN
opening ``[x]``             otherwise                              OPEN
closing ``[/x]``            nothing open                           UNMATCHED
closing ``[/x]``            current self-closable ``y``, ``x``      AUTO_CLOSE_THEN_CLOSE
                            allows ``y`` and ``y`` has a parent
closing ``[/x]``            current is ``x``                        CLOSE
closing ``[/x]``            ``x`` lists current in supported tags   CLOSE
closing ``[/x]``            otherwise                              MISMATCHED
==========================  =====================================  ========================
"""

from enum import Enum, auto
from typing import Optional, Sequence

from ultra_robust_bbcode_parser.tokenization import TagInfo

from .nodes import TagNode


class OpeningTransition(Enum):
    """Stack operations caused by an opening tag."""

    OPEN = auto()                   # push
    AUTO_CLOSE_THEN_OPEN = auto()   # pop the self-closable current tag, then push


class ClosingTransition(Enum):
    """Stack operations caused by a closing tag."""

    UNMATCHED = auto()              # nothing open; closer becomes text
    MISMATCHED = auto()             # closer names another tag; becomes text
    CLOSE = auto()                  # pop
    AUTO_CLOSE_THEN_CLOSE = auto()  # pop the self-closable current tag, then pop

    @property
    def is_wrong_closing(self) -> bool:
        return self in (ClosingTransition.UNMATCHED, ClosingTransition.MISMATCHED)


def self_closing_tag_reached_a_closer(
    current: Optional[TagNode], ti: TagInfo
) -> bool:
    """Check if ``ti`` opens another instance of the self-closable current tag."""
    return (
        current is not None
        and ti.definition is not None
        and ti.definition.self_closable
        and current.tag == ti.tag
    )


def parent_of_self_closing_tag(current: Optional[TagNode], ti: TagInfo) -> bool:
    """Check if closer ``ti`` belongs to the parent of the self-closable current tag."""
    if current is None or ti.definition is None:
        return False
    allowed = ti.definition.only_allow
    return (
        current.definition.self_closable
        and allowed is not None
        and current.tag in allowed
    )


def opening_transition(
    current: Optional[TagNode], ti: TagInfo
) -> OpeningTransition:
    """Compute the transition for an opening tag token."""
    if self_closing_tag_reached_a_closer(current, ti):
        return OpeningTransition.AUTO_CLOSE_THEN_OPEN
    return OpeningTransition.OPEN


def closing_transition(
    stack: Sequence[TagNode], ti: TagInfo
) -> ClosingTransition:
    """Compute the transition for a closing tag token."""
    if not stack:
        return ClosingTransition.UNMATCHED

    parent = stack[-1]
    if parent_of_self_closing_tag(parent, ti) and len(stack) >= 2:
        return ClosingTransition.AUTO_CLOSE_THEN_CLOSE
    if parent.tag == ti.tag:
        return ClosingTransition.CLOSE

    supported = ti.definition.supported_tags if ti.definition else None
    if supported is not None and parent.tag in supported:
        # A resolved multi-tag closed by its placeholder name
        return ClosingTransition.CLOSE
    return ClosingTransition.MISMATCHED
