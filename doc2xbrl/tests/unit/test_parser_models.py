# Path: doc2xbrl/tests/unit/test_parser_models.py
"""
Unit Tests for parsers.models

Tests the canonical data model, issues and validation results.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


class TestLineItem:
    """Test line item invariants."""

    def test_nil_item_must_not_have_value(self):
        """A nil item with a value is rejected."""
        from parsers.models import LineItem

        with pytest.raises(ValueError):
            LineItem(concept='Goodwill', value=10, is_nil=True)

    def test_non_nil_item_needs_value(self):
        """A non-nil item without a value is rejected."""
        from parsers.models import LineItem

        with pytest.raises(ValueError):
            LineItem(concept='Goodwill', value=None)

    def test_is_numeric_excludes_booleans(self):
        """Booleans are not numeric facts."""
        from parsers.models import LineItem

        assert LineItem(concept='Cash', value=1.5).is_numeric
        assert not LineItem(concept='Audited', value=True).is_numeric
        assert not LineItem(concept='Goodwill', value=None, is_nil=True).is_numeric

    def test_to_dict_includes_match(self):
        """Serialized item carries its taxonomy match."""
        from parsers.models import LineItem, TaxonomyMatch
        from constants import Framework, MatchMethod

        item = LineItem(concept='Total Assets', value=5)
        item.taxonomy_match = TaxonomyMatch('us-gaap:Assets', Framework.US_GAAP, 100, MatchMethod.EXACT)
        data = item.to_dict()

        assert item.is_matched
        assert data['taxonomy_match']['tag'] == 'us-gaap:Assets'
        assert data['taxonomy_match']['method'] == 'exact'


class TestTaxonomyMatch:
    """Test the frozen match value."""

    def test_is_frozen(self):
        """Matches are replaced, never edited."""
        from dataclasses import FrozenInstanceError
        from parsers.models import TaxonomyMatch
        from constants import Framework, MatchMethod

        match = TaxonomyMatch('us-gaap:Assets', Framework.US_GAAP, 100, MatchMethod.EXACT)

        with pytest.raises(FrozenInstanceError):
            match.confidence = 50


class TestCanonicalReport:
    """Test report helpers."""

    def _report(self, errors=()):
        from parsers.models import (
            CanonicalReport, DocumentInfo, LineItem, ProcessingMetadata, Statement,
        )
        from constants import StatementKind

        statements = [
            Statement(
                kind=StatementKind.BALANCE_SHEET,
                period_end=date(2023, 12, 31),
                fiscal_year=2023,
                items=[LineItem('Cash', 1), LineItem('Total Assets', 2)],
            ),
            Statement(
                kind=StatementKind.INCOME_STATEMENT,
                period_end=date(2023, 12, 31),
                fiscal_year=2023,
                items=[LineItem('Revenue', 3)],
            ),
        ]
        return CanonicalReport(
            document_info=DocumentInfo(file_name='x.csv', file_type='csv'),
            statements=statements,
            metadata=ProcessingMetadata(parser_version='1.0.0', errors=list(errors)),
        )

    def test_item_count_and_iteration(self):
        """Items are counted and iterated in document order."""
        report = self._report()

        assert report.item_count == 3
        assert [item.concept for _, item in report.iter_items()] == ['Cash', 'Total Assets', 'Revenue']

    def test_critical_errors(self):
        """Only CRITICAL issues count as critical errors."""
        from parsers.models import ProcessingIssue
        from constants import IssueSeverity

        assert not self._report().has_critical_errors()
        assert not self._report([ProcessingIssue('X', 'minor', IssueSeverity.ERROR)]).has_critical_errors()
        assert self._report([ProcessingIssue('X', 'fatal', IssueSeverity.CRITICAL)]).has_critical_errors()

    def test_only_balance_sheet_is_instant(self):
        """Balance sheets are point-in-time statements."""
        report = self._report()

        assert report.statements[0].is_instant
        assert not report.statements[1].is_instant

    def test_to_dict(self):
        """Report serializes dates as ISO text."""
        data = self._report().to_dict()

        assert data['statements'][0]['period_end'] == '2023-12-31'
        assert data['document_info']['report_type'] == 'unknown'


class TestProcessingIssue:
    """Test issue formatting."""

    def test_str(self):
        """String form shows severity and code."""
        from parsers.models import ProcessingIssue
        from constants import IssueSeverity

        issue = ProcessingIssue('PARSE_FAILED', 'broken', IssueSeverity.CRITICAL)

        assert str(issue) == '[CRITICAL] PARSE_FAILED: broken'
        assert issue.is_critical


class TestValidationResult:
    """Test validation counters."""

    def test_counts(self):
        """Invalid records are derived from totals."""
        from parsers.models import ValidationResult

        result = ValidationResult(total_records=5, valid_records=3)
        result.add_warning('row_1', 'empty')

        assert result.is_valid
        assert result.invalid_records == 2

        result.add_error('row_2', 'bad', 'x')

        assert not result.is_valid
        assert result.to_dict()['errors'][0]['value'] == 'x'
