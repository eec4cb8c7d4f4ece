"""Shared utilities for ultra-robust BBCode parsing.

This module provides shared configuration objects, result types, and
logging utilities used across all processing layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    current_memory_usage,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
    set_package_log_level,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "current_memory_usage",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "ParserConfig",
    "TokenizationConfig",
    "TreeConfig",
    "CorrelationLogger",
    "get_logger",
    "set_package_log_level",
]
