"""Append-only error log for a single sift.

Every markup error goes through ``ErrorLog.record``, which appends one entry
to the parse-wide log and the same message to the error list of the token or
node it concerns. The flat message list, the per-node lists and the result
diagnostics are all views of those single writes.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Protocol, Tuple

from ultra_robust_bbcode_parser.shared import CorrelationLogger


class ErrorCategory(Enum):
    """Kinds of recoverable markup errors."""

    LEXICAL = auto()      # Tag-shaped token that is not a usable tag
    STRUCTURAL = auto()   # Wrong parent, wrong child, bad or missing closer
    PARAMETER = auto()    # Missing, unexpected or malformed parameters
    RESOURCE = auto()     # Node count above the rendering ceiling
    RESOLUTION = auto()   # Multi-tag placeholder with no matching tag


class ErrorTarget(Protocol):
    """Anything carrying a per-node error list (tokens and nodes)."""

    errors: List[str]


@dataclass(frozen=True)
class SiftError:
    """One recorded violation."""

    message: str
    category: ErrorCategory
    tag: Optional[str] = None


class ErrorLog:
    """Ordered record of every error found while sifting."""

    def __init__(self, logger: Optional[CorrelationLogger] = None) -> None:
        self._entries: List[SiftError] = []
        # id(errors list) -> (the list itself, its entries); the list is kept
        # alive so its id cannot be reused
        self._by_target: Dict[int, Tuple[List[str], List[SiftError]]] = {}
        self.logger = logger

    def record(
        self,
        message: str,
        category: ErrorCategory,
        target: Optional[ErrorTarget] = None,
        tag: Optional[str] = None
    ) -> SiftError:
        """Record ``message`` globally and on ``target`` when given."""
        entry = SiftError(message=message, category=category, tag=tag)
        self._entries.append(entry)

        if target is not None:
            target.errors.append(message)
            key = id(target.errors)
            if key not in self._by_target:
                self._by_target[key] = (target.errors, [])
            self._by_target[key][1].append(entry)

        if self.logger is not None:
            self.logger.debug(
                "Markup error recorded",
                extra={"error": message, "category": category.name, "tag": tag}
            )
        return entry

    @property
    def entries(self) -> Tuple[SiftError, ...]:
        return tuple(self._entries)

    @property
    def messages(self) -> List[str]:
        """Flat list of every message in recording order."""
        return [entry.message for entry in self._entries]

    def entries_for(self, target: ErrorTarget) -> List[SiftError]:
        """Entries recorded against ``target`` (or the token it was built from)."""
        stored = self._by_target.get(id(target.errors))
        if stored is None or stored[0] is not target.errors:
            return []
        return list(stored[1])

    def by_category(self, category: ErrorCategory) -> List[SiftError]:
        return [entry for entry in self._entries if entry.category is category]

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
