# Path: doc2xbrl/parsers/models/validation.py
"""
Validation Result

Diagnostic result returned by each parser's validate() method.
Independent of parse(): it inspects an intermediate representation
(rows, sheets, pages, decoded JSON, XML text) and counts records.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ValidationIssue:
    """One validation finding tied to a field or record."""
    field: str
    message: str
    value: Any = None
    hint: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'field': self.field,
            'message': self.message,
            'value': self.value,
            'hint': self.hint,
        }


@dataclass
class ValidationResult:
    """
    Counts of valid and invalid records in an intermediate representation.

    Attributes:
        errors: Findings that make records unusable
        warnings: Findings worth reviewing
        total_records: Records inspected
        valid_records: Records that passed
        processing_time_ms: Time spent validating
    """
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    total_records: int = 0
    valid_records: int = 0
    processing_time_ms: float = 0.0

    @property
    def is_valid(self) -> bool:
        """Valid when no errors were recorded."""
        return not self.errors

    @property
    def invalid_records(self) -> int:
        """Records that failed validation."""
        return self.total_records - self.valid_records

    def add_error(self, field_name: str, message: str, value: Any = None) -> None:
        """Record an error."""
        self.errors.append(ValidationIssue(field=field_name, message=message, value=value))

    def add_warning(
        self,
        field_name: str,
        message: str,
        value: Any = None,
        hint: Optional[str] = None
    ) -> None:
        """Record a warning."""
        self.warnings.append(
            ValidationIssue(field=field_name, message=message, value=value, hint=hint)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'is_valid': self.is_valid,
            'errors': [e.to_dict() for e in self.errors],
            'warnings': [w.to_dict() for w in self.warnings],
            'total_records': self.total_records,
            'valid_records': self.valid_records,
            'invalid_records': self.invalid_records,
            'processing_time_ms': self.processing_time_ms,
        }


__all__ = ['ValidationIssue', 'ValidationResult']
