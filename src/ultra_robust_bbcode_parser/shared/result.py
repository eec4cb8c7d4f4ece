"""Result objects and diagnostic types for ultra-robust BBCode parsing.

This module defines the diagnostic entries and performance metrics attached
to every parse result.
"""

import os
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

import psutil


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Warnings about potential issues
    ERROR = auto()      # Markup errors that were recorded and recovered
    CRITICAL = auto()   # Resource limits or internal failures


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class PerformanceMetrics:
    """Performance metrics for parsing operations."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    characters_processed: int = 0
    tokens_generated: int = 0
    nodes_created: int = 0
    errors_recorded: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms

    @property
    def error_rate(self) -> float:
        """Errors recorded per token."""
        if self.tokens_generated == 0:
            return 0.0
        return self.errors_recorded / self.tokens_generated


def current_memory_usage() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process(os.getpid()).memory_info().rss
