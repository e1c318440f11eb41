# Path: doc2xbrl/parsers/models/__init__.py
"""
Parser Models

Canonical data model and diagnostic result types shared by all parsers.
"""

from parsers.models.issues import ProcessingIssue
from parsers.models.validation import ValidationIssue, ValidationResult
from parsers.models.canonical import (
    FactValue,
    TaxonomyMatch,
    LineItem,
    StatementMetadata,
    Statement,
    DocumentInfo,
    ProcessingMetadata,
    CanonicalReport,
)

__all__ = [
    'ProcessingIssue',
    'ValidationIssue',
    'ValidationResult',
    'FactValue',
    'TaxonomyMatch',
    'LineItem',
    'StatementMetadata',
    'Statement',
    'DocumentInfo',
    'ProcessingMetadata',
    'CanonicalReport',
]
