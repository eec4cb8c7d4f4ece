"""Core parser API with progressive disclosure for ultra-robust BBCode parsing.

This module provides the main parsing API, from the module-level ``parse``
and ``check_validity`` functions to the reusable ``BBCodeParser`` class.
Markup errors are always reported inside the result; unexpected failures
are turned into an error result instead of propagating.
"""

import time
import uuid
from typing import Any, Dict, List, Optional, Union

from ultra_robust_bbcode_parser.definitions import DictionaryLike, TagDictionary
from ultra_robust_bbcode_parser.shared import (
    DiagnosticSeverity,
    ParserConfig,
    current_memory_usage,
    get_logger,
    set_package_log_level,
)
from ultra_robust_bbcode_parser.tree import ParseResult, TagSifter

InputType = Union[str, bytes]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse(
    text: InputType,
    dictionary: DictionaryLike,
    escape_html: bool = True,
    correlation_id: Optional[str] = None,
    config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse BBCode markup into a validated tree.

    This is the primary entry point. The returned result always carries a
    tree; ``result.valid`` tells whether the markup was free of errors.

    Args:
        text: Markup as string, or UTF-8 encoded bytes
        dictionary: Tag dictionary describing the accepted tags
        escape_html: Escape ``<``, ``>`` and ``"`` before tokenizing
        correlation_id: Optional correlation ID for request tracking
        config: Optional parser configuration; its tokenization setting
            takes precedence over ``escape_html``

    Returns:
        ParseResult containing the node tree, errors and metadata

    Examples:
        >>> result = parse("[b]bold[/b]", dictionary)
        >>> result.valid
        True
        >>> result.nodes[0].tag
        'b'

        Malformed markup still yields a tree:
        >>> result = parse("[b]bold", dictionary)
        >>> result.errors
        ['[b] not closed']
    """
    if config is None:
        config = ParserConfig.default().override(tokenization__escape_html=escape_html)
    return _run_sift(text, dictionary, config, correlation_id, "parse")


def check_validity(
    text: InputType,
    dictionary: DictionaryLike,
    escape_html: bool = True
) -> List[str]:
    """Validate markup and return its error messages.

    Args:
        text: Markup to validate
        dictionary: Tag dictionary describing the accepted tags
        escape_html: Escape ``<``, ``>`` and ``"`` before tokenizing

    Returns:
        Ordered list of error messages, empty when the markup is valid

    Examples:
        >>> check_validity("[b]ok[/b]", dictionary)
        []
        >>> check_validity("[/b]", dictionary)
        ["Closing tag [/b] doesn't match an opening tag"]
    """
    result = parse(text, dictionary, escape_html=escape_html)
    if not result.success:
        return [diag.message for diag in result.diagnostics]
    return list(result.errors)


def _run_sift(
    text: InputType,
    dictionary: DictionaryLike,
    config: ParserConfig,
    correlation_id: Optional[str],
    component: str
) -> ParseResult:
    """Run one sift with never-fail semantics."""
    start_time = time.time()
    global_config = config.global_
    if correlation_id is None and global_config.enable_correlation_tracking:
        correlation_id = str(uuid.uuid4())

    if global_config.logging_level is not None:
        set_package_log_level(global_config.logging_level)
    logger = get_logger(__name__, correlation_id, component)

    try:
        content = _decode_input(text)
        size = len(content.encode("utf-8"))

        logger.info(
            "Starting parse operation",
            extra={
                "content_length": len(content),
                "preview": (
                    content[:PREVIEW_LENGTH] + "..."
                    if len(content) > PREVIEW_LENGTH else content
                ),
                "config_name": config.name,
            }
        )

        limit = global_config.max_input_size_bytes
        if limit is not None and size > limit:
            logger.warning(
                "Input rejected by size limit",
                extra={"input_size_bytes": size, "max_input_size_bytes": limit}
            )
            return _create_error_result(
                f"Input of {size} bytes exceeds the limit of {limit} bytes",
                correlation_id,
                (time.time() - start_time) * MS_PER_SECOND
            )

        memory_before = (
            current_memory_usage() if global_config.enable_performance_metrics else 0
        )

        sifter = TagSifter(
            content,
            dictionary,
            escape_html=config.tokenization.escape_html,
            config=config.tree,
            correlation_id=correlation_id,
        )
        sifter.process_text()
        result = sifter.to_result()

        if not content:
            result.add_diagnostic(
                DiagnosticSeverity.INFO, "Empty input produced an empty tree", component
            )

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        result.performance.processing_time_ms = processing_time
        result.performance.characters_processed = len(content)
        if global_config.enable_performance_metrics:
            result.performance.memory_used_bytes = max(
                0, current_memory_usage() - memory_before
            )

        logger.info(
            "Parse operation completed",
            extra={
                "valid": result.valid,
                "error_count": len(result.errors),
                "node_count": result.node_count,
                "processing_time_ms": processing_time,
            }
        )
        return result

    except Exception as e:
        # Never-fail guarantee: return error result with diagnostics
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "Parse operation failed",
            extra={"processing_time_ms": processing_time}
        )
        return _create_error_result(
            f"Parse operation failed: {e}",
            correlation_id,
            processing_time
        )


def _decode_input(text: InputType) -> str:
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    if isinstance(text, str):
        return text
    raise TypeError(f"Unsupported input type {type(text).__name__}")


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create error result following never-fail philosophy.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        ParseResult with error information
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time

    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )

    return result


class BBCodeParser:
    """Reusable parser bound to one tag dictionary and configuration.

    Attributes:
        dictionary: Tag dictionary used for every parse
        config: Current parser configuration
        correlation_id: Correlation ID for request tracking

    Examples:
        Basic usage with default configuration:
        >>> parser = BBCodeParser(dictionary)
        >>> result = parser.parse("[i]text[/i]")
        >>> result.valid
        True

        Parser reuse:
        >>> results = [parser.parse(post) for post in posts]
        >>> parser.statistics["total_parses"] == len(posts)
        True
    """

    def __init__(
        self,
        dictionary: DictionaryLike,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize parser.

        Args:
            dictionary: Tag dictionary describing the accepted tags
            config: Parser configuration (defaults to ``ParserConfig.default()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.dictionary = TagDictionary.coerce(dictionary)
        self.config = config or ParserConfig.default()
        self.correlation_id = correlation_id

        self.logger = get_logger(__name__, self.correlation_id, "bbcode_parser")

        # Parser state for multi-parse scenarios
        self._parse_count = 0
        self._valid_parses = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0

        self.logger.info(
            "BBCodeParser initialized",
            extra={
                "config_name": self.config.name,
                "tag_count": len(self.dictionary),
            }
        )

    def parse(
        self,
        text: InputType,
        config_override: Optional[ParserConfig] = None,
        correlation_id_override: Optional[str] = None
    ) -> ParseResult:
        """Parse markup with the parser's dictionary and configuration.

        Args:
            text: Markup to parse
            config_override: Optional configuration for this parse only
            correlation_id_override: Optional correlation ID override

        Returns:
            ParseResult with the tree and all recorded errors
        """
        effective_config = config_override or self.config
        effective_correlation_id = correlation_id_override or self.correlation_id

        result = _run_sift(
            text,
            self.dictionary,
            effective_config,
            effective_correlation_id,
            "bbcode_parser",
        )

        self._parse_count += 1
        self._total_processing_time += result.performance.processing_time_ms
        if not result.success:
            self._failed_parses += 1
        elif result.valid:
            self._valid_parses += 1
        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the parser configuration.

        Args:
            config: New parser configuration
        """
        self.config = config
        self.logger.info(
            "Parser reconfigured",
            extra={"config_name": config.name}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics.

        Returns:
            Dictionary with parser usage statistics
        """
        return {
            "total_parses": self._parse_count,
            "valid_parses": self._valid_parses,
            "failed_parses": self._failed_parses,
            "validity_rate": (
                self._valid_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._valid_parses = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")
