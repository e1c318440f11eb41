# Path: doc2xbrl/parsers/models/canonical.py
"""
Canonical Financial Data Model

Format-independent representation produced by every parser and consumed
by the matching engine and the XBRL generator.

Hierarchy:
    CanonicalReport
        DocumentInfo
        Statement[]
            StatementMetadata
            LineItem[]
                TaxonomyMatch (attached by the matching engine)
        ProcessingMetadata
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterator, Optional, Union

from constants import Framework, IssueSeverity, MatchMethod, StatementKind
from parsers.models.issues import ProcessingIssue


# A fact value is a scalar; composites are never stored on an item
FactValue = Union[int, float, bool, str]


@dataclass(frozen=True)
class TaxonomyMatch:
    """
    Result of matching a line item to a taxonomy concept.

    Frozen: a match is created once during matching and replaced,
    never edited, when an operator overrides it.

    Attributes:
        tag: Prefixed taxonomy tag (e.g., 'us-gaap:Assets')
        framework: Accounting framework of the tag
        confidence: 0-100 confidence in the match
        method: How the match was produced
        synonyms: Synonyms of the concept that were considered
    """
    tag: str
    framework: Framework
    confidence: int
    method: MatchMethod
    synonyms: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'tag': self.tag,
            'framework': self.framework.value,
            'confidence': self.confidence,
            'method': self.method.value,
            'synonyms': list(self.synonyms),
        }


@dataclass
class LineItem:
    """
    One reported fact before standardization.

    Invariant: a nil item has no value; a non-nil item has a value.

    Attributes:
        concept: Free-text label exactly as found in the source
        value: Scalar value (None only when is_nil)
        unit: Unit label (currency code, 'pure', 'shares')
        decimals: Declared precision; negative means rounding magnitude
        is_nil: Explicitly reported as nil
        source_reference: Pointer back to the source row/cell/line
        confidence: 0-100 extraction confidence
        taxonomy_match: Set once matching has run
    """
    concept: str
    value: Optional[FactValue]
    unit: str = 'USD'
    decimals: Optional[int] = None
    is_nil: bool = False
    source_reference: str = ''
    confidence: int = 0
    taxonomy_match: Optional[TaxonomyMatch] = None

    def __post_init__(self):
        if self.is_nil and self.value is not None:
            raise ValueError(f"Nil item '{self.concept}' must not carry a value")
        if not self.is_nil and self.value is None:
            raise ValueError(f"Item '{self.concept}' has no value and is not nil")

    @property
    def is_numeric(self) -> bool:
        """True for int/float values (booleans excluded)."""
        return isinstance(self.value, (int, float)) and not isinstance(self.value, bool)

    @property
    def is_matched(self) -> bool:
        """True once a taxonomy match has been attached."""
        return self.taxonomy_match is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'concept': self.concept,
            'value': self.value,
            'unit': self.unit,
            'decimals': self.decimals,
            'is_nil': self.is_nil,
            'source_reference': self.source_reference,
            'confidence': self.confidence,
            'taxonomy_match': self.taxonomy_match.to_dict() if self.taxonomy_match else None,
        }


@dataclass
class StatementMetadata:
    """Statement-level descriptive metadata."""
    framework: Framework = Framework.US_GAAP
    audit_status: Optional[str] = None
    consolidation_level: Optional[str] = None
    presentation_format: Optional[str] = None
    section_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'framework': self.framework.value,
            'audit_status': self.audit_status,
            'consolidation_level': self.consolidation_level,
            'presentation_format': self.presentation_format,
            'section_name': self.section_name,
        }


@dataclass
class Statement:
    """
    One financial statement instance.

    period_end is always set (parsers fall back to processing time)
    so statements are temporally orderable.
    """
    kind: StatementKind
    period_end: date
    fiscal_year: int
    items: list[LineItem] = field(default_factory=list)
    fiscal_quarter: Optional[int] = None
    period_start: Optional[date] = None
    metadata: StatementMetadata = field(default_factory=StatementMetadata)

    @property
    def is_instant(self) -> bool:
        """Balance sheets are reported at a point in time."""
        return self.kind == StatementKind.BALANCE_SHEET

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'kind': self.kind.value,
            'period_end': self.period_end.isoformat(),
            'period_start': self.period_start.isoformat() if self.period_start else None,
            'fiscal_year': self.fiscal_year,
            'fiscal_quarter': self.fiscal_quarter,
            'metadata': self.metadata.to_dict(),
            'items': [item.to_dict() for item in self.items],
        }


@dataclass
class DocumentInfo:
    """Document-level metadata detected by a parser."""
    file_name: str
    file_type: str
    file_size: int = 0
    currency: str = 'USD'
    report_type: StatementKind = StatementKind.UNKNOWN
    period_end: Optional[date] = None
    fiscal_year: Optional[int] = None
    fiscal_quarter: Optional[int] = None
    company_name: Optional[str] = None
    scale: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'file_name': self.file_name,
            'file_type': self.file_type,
            'file_size': self.file_size,
            'currency': self.currency,
            'report_type': self.report_type.value,
            'period_end': self.period_end.isoformat() if self.period_end else None,
            'fiscal_year': self.fiscal_year,
            'fiscal_quarter': self.fiscal_quarter,
            'company_name': self.company_name,
            'scale': self.scale,
        }


@dataclass
class ProcessingMetadata:
    """How the report was produced."""
    parser_version: str
    processed_at: datetime = field(default_factory=datetime.utcnow)
    processing_time_ms: float = 0.0
    warnings: list[ProcessingIssue] = field(default_factory=list)
    errors: list[ProcessingIssue] = field(default_factory=list)
    ai_assisted: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'parser_version': self.parser_version,
            'processed_at': self.processed_at.isoformat(),
            'processing_time_ms': self.processing_time_ms,
            'warnings': [w.to_dict() for w in self.warnings],
            'errors': [e.to_dict() for e in self.errors],
            'ai_assisted': self.ai_assisted,
        }


@dataclass
class CanonicalReport:
    """
    One parsed document.

    Owned by the conversion pipeline for the lifetime of one job;
    the matching engine attaches TaxonomyMatch objects to its items.
    """
    document_info: DocumentInfo
    statements: list[Statement] = field(default_factory=list)
    metadata: ProcessingMetadata = field(
        default_factory=lambda: ProcessingMetadata(parser_version='unknown')
    )

    def has_critical_errors(self) -> bool:
        """Check if the parser reported an unrecoverable failure."""
        return any(
            e.severity == IssueSeverity.CRITICAL for e in self.metadata.errors
        )

    @property
    def item_count(self) -> int:
        """Total number of line items across statements."""
        return sum(len(s.items) for s in self.statements)

    def iter_items(self) -> Iterator[tuple[Statement, LineItem]]:
        """Yield (statement, item) pairs in document order."""
        for statement in self.statements:
            for item in statement.items:
                yield statement, item

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            'document_info': self.document_info.to_dict(),
            'statements': [s.to_dict() for s in self.statements],
            'metadata': self.metadata.to_dict(),
        }


__all__ = [
    'FactValue',
    'TaxonomyMatch',
    'LineItem',
    'StatementMetadata',
    'Statement',
    'DocumentInfo',
    'ProcessingMetadata',
    'CanonicalReport',
]
