# Path: doc2xbrl/parsers/base_parser.py
"""
Base Parser

Abstract base class for all format parsers.

Every parser turns raw bytes into a CanonicalReport and never raises
past parse(): an unrecoverable failure produces a report with no
statements and one CRITICAL issue, a partial failure produces
best-effort statements plus WARNING issues.

Subclasses implement:
- _extract(): format-specific extraction into statements
- validate(): record counting over the format's intermediate representation
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import PurePath
from typing import Any, Optional

from constants import Framework, IssueSeverity, StatementKind
from core.logger.ipo_logging import get_input_logger
from parsers.detection import (
    detect_fiscal_quarter,
    detect_fiscal_year,
    detect_period_end,
    detect_scale,
    fiscal_year_for,
)
from parsers.models.canonical import (
    CanonicalReport,
    DocumentInfo,
    LineItem,
    ProcessingMetadata,
    Statement,
    StatementMetadata,
)
from parsers.models.issues import ProcessingIssue
from parsers.models.validation import ValidationResult
from parsers.values import sanitize_value


@dataclass
class ParseContext:
    """
    Per-call state of one parse() invocation.

    Parsers are shared between jobs, so anything collected while
    parsing lives here rather than on the parser instance.
    """
    file_name: str
    file_size: int
    source: str
    warnings: list[ProcessingIssue] = field(default_factory=list)
    errors: list[ProcessingIssue] = field(default_factory=list)
    ai_assisted: bool = False

    def warn(self, code: str, message: str, **location: Any) -> None:
        """Record a WARNING issue."""
        self.warnings.append(ProcessingIssue(
            code=code,
            message=message,
            severity=IssueSeverity.WARNING,
            source=self.source,
            location=location,
        ))

    def error(
        self,
        code: str,
        message: str,
        severity: IssueSeverity = IssueSeverity.ERROR,
        suggestion: Optional[str] = None,
        **location: Any
    ) -> None:
        """Record an ERROR (or CRITICAL) issue."""
        self.errors.append(ProcessingIssue(
            code=code,
            message=message,
            severity=severity,
            source=self.source,
            suggestion=suggestion,
            location=location,
        ))

    def critical(self, code: str, message: str, suggestion: Optional[str] = None) -> None:
        """Record a CRITICAL issue."""
        self.error(code, message, severity=IssueSeverity.CRITICAL, suggestion=suggestion)


@dataclass
class PeriodInfo:
    """Detected reporting period for one statement."""
    period_end: date
    fiscal_year: int
    fiscal_quarter: Optional[int] = None
    detected: bool = False


class BaseParser(ABC):
    """
    Abstract base class for format parsers.

    Class attributes set by subclasses:
        format_id: Primary format identifier ('csv', 'xlsx', ...)
        supported_formats: Every format id this parser accepts
        base_confidence: Extraction confidence for items it produces

    Example:
        parser = CsvParser()
        report = parser.parse(content, 'balance_sheet.csv')
        if report.has_critical_errors():
            print(report.metadata.errors[0].message)
    """

    format_id: str = ''
    supported_formats: tuple[str, ...] = ()
    parser_version: str = '1.0.0'
    base_confidence: int = 0

    def __init__(self, default_currency: str = 'USD'):
        """
        Initialize parser.

        Args:
            default_currency: Currency used when none can be detected
        """
        self.default_currency = default_currency
        self.logger = get_input_logger(f'parsers.{self.format_id}')

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def can_parse(self, format_id: str) -> bool:
        """Check if this parser accepts a format id."""
        return (format_id or '').lower() in self.supported_formats

    def get_supported_formats(self) -> list[str]:
        """Return a copy of the supported format ids."""
        return list(self.supported_formats)

    def parse(self, content: bytes, file_name: str) -> CanonicalReport:
        """
        Parse raw bytes into a CanonicalReport.

        Args:
            content: Raw document bytes
            file_name: Original file name (used for references and type)

        Returns:
            CanonicalReport; failures are reported in its metadata
        """
        start = time.perf_counter()
        context = ParseContext(
            file_name=file_name,
            file_size=len(content or b''),
            source=type(self).__name__,
        )

        self.logger.info(f"Parsing {file_name} ({context.file_size} bytes)")

        try:
            document_info, statements = self._extract(content or b'', context)
        except Exception as e:
            self.logger.error(f"Failed to parse {file_name}: {e}")
            context.critical(
                'PARSE_FAILED',
                f"Failed to parse {self.format_id.upper()} file: {e}",
            )
            document_info = self._empty_document_info(context)
            statements = []

        if not statements and not context.errors:
            context.warn('NO_FINANCIAL_DATA', f"No financial statements found in {file_name}")

        self._finalize_document_info(document_info, statements)

        elapsed_ms = (time.perf_counter() - start) * 1000
        report = CanonicalReport(
            document_info=document_info,
            statements=statements,
            metadata=ProcessingMetadata(
                parser_version=self.parser_version,
                processed_at=datetime.utcnow(),
                processing_time_ms=round(elapsed_ms, 3),
                warnings=context.warnings,
                errors=context.errors,
                ai_assisted=context.ai_assisted,
            ),
        )

        self.logger.info(
            f"Parsed {file_name}: {len(statements)} statements, "
            f"{report.item_count} items, {len(context.warnings)} warnings, "
            f"{len(context.errors)} errors"
        )
        return report

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate an intermediate representation of the format.

        Args:
            data: Rows, sheets, page text, decoded JSON or XML text

        Returns:
            ValidationResult with record counts
        """
        pass

    # ==========================================================================
    # SUBCLASS HOOK
    # ==========================================================================

    @abstractmethod
    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        """
        Extract document info and statements.

        May raise; parse() turns exceptions into a CRITICAL issue.
        """
        pass

    # ==========================================================================
    # SHARED HELPERS
    # ==========================================================================

    def _file_type(self, file_name: str) -> str:
        """Format id taken from the extension when this parser supports it."""
        suffix = PurePath(file_name or '').suffix.lower().lstrip('.')
        return suffix if suffix in self.supported_formats else self.format_id

    def _empty_document_info(self, context: ParseContext) -> DocumentInfo:
        return DocumentInfo(
            file_name=context.file_name,
            file_type=self._file_type(context.file_name),
            file_size=context.file_size,
            currency=self.default_currency,
        )

    def _document_info(
        self,
        context: ParseContext,
        currency: str,
        company_name: Optional[str] = None,
        scale_text: str = ''
    ) -> DocumentInfo:
        """Document info for a successful extraction."""
        return DocumentInfo(
            file_name=context.file_name,
            file_type=self._file_type(context.file_name),
            file_size=context.file_size,
            currency=currency,
            company_name=company_name,
            scale=detect_scale(scale_text) if scale_text else None,
        )

    def _finalize_document_info(
        self,
        document_info: DocumentInfo,
        statements: list[Statement]
    ) -> None:
        """Fill report type and period from the dominant statement."""
        if not statements:
            return
        dominant = max(statements, key=lambda s: len(s.items))
        if document_info.report_type == StatementKind.UNKNOWN:
            document_info.report_type = dominant.kind
        if document_info.period_end is None:
            document_info.period_end = dominant.period_end
        if document_info.fiscal_year is None:
            document_info.fiscal_year = dominant.fiscal_year
        if document_info.fiscal_quarter is None:
            document_info.fiscal_quarter = dominant.fiscal_quarter

    def _period_info(
        self,
        fields: Optional[dict[str, Any]] = None,
        text: str = ''
    ) -> PeriodInfo:
        """
        Detect the reporting period.

        Falls back to today when no date is found so every statement
        has a period end.
        """
        period_end = detect_period_end(fields=fields, text=text)
        detected = period_end is not None
        if period_end is None:
            period_end = date.today()

        fiscal_year = detect_fiscal_year(period_end if detected else None, fields, text)
        if fiscal_year is None:
            fiscal_year = fiscal_year_for(period_end)

        return PeriodInfo(
            period_end=period_end,
            fiscal_year=fiscal_year,
            fiscal_quarter=detect_fiscal_quarter(text=text, fields=fields),
            detected=detected,
        )

    def _make_item(
        self,
        concept: Any,
        raw_value: Any,
        reference: str,
        currency: str,
        confidence: Optional[int] = None,
        decimals: Optional[int] = None
    ) -> Optional[LineItem]:
        """
        Build a line item from a label and a raw value.

        Returns:
            LineItem, or None when the label is empty or the value is null
        """
        label = str(concept).strip() if concept is not None else ''
        if not label:
            return None

        value = sanitize_value(raw_value)
        if value is None:
            return None

        numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
        return LineItem(
            concept=label,
            value=value,
            unit=currency if numeric else 'pure',
            decimals=decimals,
            source_reference=reference,
            confidence=self.base_confidence if confidence is None else confidence,
        )

    def _make_statement(
        self,
        kind: StatementKind,
        items: list[LineItem],
        period: PeriodInfo,
        framework: Framework = Framework.US_GAAP,
        section_name: Optional[str] = None,
        **metadata: Any
    ) -> Statement:
        """Assemble a statement from items and a detected period."""
        if kind == StatementKind.BALANCE_SHEET:
            metadata.setdefault('consolidation_level', 'consolidated')
        return Statement(
            kind=kind,
            period_end=period.period_end,
            fiscal_year=period.fiscal_year,
            fiscal_quarter=period.fiscal_quarter,
            items=items,
            metadata=StatementMetadata(
                framework=framework,
                section_name=section_name,
                **metadata,
            ),
        )

    def _new_validation(self) -> tuple[ValidationResult, float]:
        return ValidationResult(), time.perf_counter()

    def _finish_validation(self, result: ValidationResult, started: float) -> ValidationResult:
        result.processing_time_ms = round((time.perf_counter() - started) * 1000, 3)
        return result


__all__ = ['BaseParser', 'ParseContext', 'PeriodInfo']
