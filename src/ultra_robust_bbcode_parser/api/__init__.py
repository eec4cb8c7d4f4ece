"""Public parsing API for ultra-robust BBCode parsing."""

from .parser import BBCodeParser, check_validity, parse

__all__ = [
    "BBCodeParser",
    "check_validity",
    "parse",
]
