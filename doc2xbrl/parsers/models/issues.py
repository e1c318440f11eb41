# Path: doc2xbrl/parsers/models/issues.py
"""
Processing Issues

Structured warnings and errors recorded while parsing a document.
Parsers never raise past their boundary; every problem ends up as a
ProcessingIssue on the report's metadata.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from constants import IssueSeverity


@dataclass
class ProcessingIssue:
    """
    One problem found while processing a document.

    Attributes:
        code: Stable machine-readable code (e.g., 'PARSE_FAILED')
        message: Human-readable description
        severity: CRITICAL, ERROR, WARNING or INFO
        source: Component that reported the issue
        suggestion: Optional hint for fixing the input
        location: Optional pointer (row, sheet, page, line)
    """
    code: str
    message: str
    severity: IssueSeverity = IssueSeverity.WARNING
    source: str = ''
    suggestion: Optional[str] = None
    location: dict[str, Any] = field(default_factory=dict)

    @property
    def is_critical(self) -> bool:
        """Check if this issue stops the document from being used."""
        return self.severity == IssueSeverity.CRITICAL

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'code': self.code,
            'message': self.message,
            'severity': self.severity.value,
            'source': self.source,
            'suggestion': self.suggestion,
            'location': self.location,
        }

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.code}: {self.message}"


__all__ = ['ProcessingIssue']
