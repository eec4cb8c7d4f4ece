"""Parse result returned by the sifter and the public API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ultra_robust_bbcode_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

from .errors import ErrorCategory, ErrorLog
from .nodes import Node, NodeCollection, TagNode

_SIFT_COMPONENT = "tag_sifter"


@dataclass
class ParseResult:
    """Comprehensive result object for a sift.

    ``valid`` is the single accept/reject signal; ``errors`` lists every
    violation in the order it was found. The tree in ``nodes`` is always
    present, even for invalid markup.
    """

    nodes: NodeCollection = field(default_factory=NodeCollection)
    errors: List[str] = field(default_factory=list)
    success: bool = True

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    error_log: Optional[ErrorLog] = None
    unclosed_tags: List[TagNode] = field(default_factory=list)
    aborted: bool = False
    correlation_id: Optional[str] = None

    @property
    def valid(self) -> bool:
        """Check if the markup was sifted without any error."""
        return self.success and not self.errors

    @property
    def node_count(self) -> int:
        """Total number of nodes in the tree."""
        return self.nodes.node_count()

    def errors_for(self, node: Node) -> List[str]:
        """Error messages attached to ``node``."""
        return list(node.errors)

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def add_sift_diagnostics(self) -> None:
        """Mirror every logged sift error into the diagnostics."""
        if self.error_log is None:
            return
        for entry in self.error_log.entries:
            severity = (
                DiagnosticSeverity.CRITICAL
                if entry.category is ErrorCategory.RESOURCE
                else DiagnosticSeverity.ERROR
            )
            self.add_diagnostic(
                severity,
                entry.message,
                _SIFT_COMPONENT,
                details={"category": entry.category.name, "tag": entry.tag},
            )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def errors_by_category(self) -> Dict[str, int]:
        """Count logged errors per category name."""
        counts: Dict[str, int] = {}
        if self.error_log is None:
            return counts
        for entry in self.error_log.entries:
            counts[entry.category.name] = counts.get(entry.category.name, 0) + 1
        return counts

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        return {
            "success": self.success,
            "valid": self.valid,
            "error_count": len(self.errors),
            "errors_by_category": self.errors_by_category(),
            "root_node_count": len(self.nodes),
            "node_count": self.node_count,
            "unclosed_tags": [tag.tag for tag in self.unclosed_tags],
            "aborted": self.aborted,
            "processing_time_ms": self.performance.processing_time_ms,
            "tokens_generated": self.performance.tokens_generated,
            "correlation_id": self.correlation_id,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result, tree included, to a dictionary."""
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "nodes": self.nodes.to_dicts(),
            "summary": self.summary(),
        }
