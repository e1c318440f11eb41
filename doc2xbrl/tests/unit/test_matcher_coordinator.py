# Path: doc2xbrl/tests/unit/test_matcher_coordinator.py
"""
Unit Tests for TaxonomyMatcher

Tests stage order, fallback selection, report matching and learning.
"""

import sys
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


@pytest.fixture
def store():
    from process.matcher.stores.taxonomy_store import InMemoryTaxonomyStore
    return InMemoryTaxonomyStore()


@pytest.fixture
def matcher(store):
    from process.matcher import TaxonomyMatcher
    return TaxonomyMatcher(store, batch_size=2, max_workers=2)


def _item(label, value=100):
    from parsers.models.canonical import LineItem
    return LineItem(concept=label, value=value)


class TestMatchStages:
    """Test the accept-first stage order."""

    def test_exact(self, matcher):
        """Concept names are exact matches."""
        from constants import MatchMethod

        match = matcher.match(_item('Total Assets'))

        assert match.tag == 'us-gaap:Assets'
        assert match.method == MatchMethod.EXACT
        assert match.confidence == 100

    def test_fuzzy(self, matcher):
        """Synonyms are matched by the fuzzy stage."""
        from constants import MatchMethod

        match = matcher.match(_item('Sales'))

        assert match.tag == 'us-gaap:Revenues'
        assert match.method == MatchMethod.FUZZY
        assert match.synonyms

    def test_assisted(self, matcher):
        """Pattern hits are used when fuzzy scores are too low."""
        from constants import MatchMethod

        match = matcher.match(_item('Cash at bank'))

        assert match.tag == 'us-gaap:CashAndCashEquivalentsCarryingAmount'
        assert match.method == MatchMethod.ASSISTED
        assert match.confidence == 95

    def test_no_match(self, matcher):
        """Unknown labels need manual mapping."""
        assert matcher.match(_item('Widgets')) is None

    def test_empty_label(self, matcher):
        assert matcher.match(_item('   ')) is None


class TestFallback:
    """Test selection among rejected candidates."""

    def test_weak_learned_mapping_is_used(self, store, matcher):
        """A rejected candidate scoring at least 60 is still used."""
        from constants import MatchMethod

        store.upsert_learned_mapping('Widget income', 'us-gaap:Revenues', 65, MatchMethod.MANUAL)

        match = matcher.match(_item('Widget income'))

        assert match.tag == 'us-gaap:Revenues'
        assert match.confidence == 65

    def test_below_fallback_threshold(self, store, matcher):
        """Candidates under 60 are dropped."""
        from constants import MatchMethod

        store.upsert_learned_mapping('Widget income', 'us-gaap:Revenues', 55, MatchMethod.MANUAL)

        assert matcher.match(_item('Widget income')) is None

    def test_tie_goes_to_trusted_method(self, store):
        """Equal fallback scores prefer the exact stage."""
        from process.matcher import TaxonomyMatcher
        from process.matcher.stages import AssistedScorer
        from process.matcher.models.candidates import MatchCandidate
        from constants import Framework, MatchMethod

        class WeakScorer(AssistedScorer):
            def score(self, request):
                return MatchCandidate(
                    tag='us-gaap:OperatingIncomeLoss', framework=Framework.US_GAAP,
                    confidence=65, method=MatchMethod.ASSISTED,
                )

        store.upsert_learned_mapping('Widget income', 'us-gaap:Revenues', 65, MatchMethod.MANUAL)
        matcher = TaxonomyMatcher(store, assisted_scorer=WeakScorer(), max_workers=1)

        assert matcher.match(_item('Widget income')).tag == 'us-gaap:Revenues'


class TestBatches:
    """Test batch matching."""

    def test_order_is_preserved(self, matcher):
        """Results line up with inputs across batches and threads."""
        labels = ['Total Assets', 'Widgets', 'Sales', 'Net Income', 'Total Liabilities']

        matches = matcher.match_batch([_item(label) for label in labels])

        assert [m.tag if m else None for m in matches] == [
            'us-gaap:Assets', None, 'us-gaap:Revenues',
            'us-gaap:NetIncomeLoss', 'us-gaap:Liabilities',
        ]


class TestApplyMatches:
    """Test matching a whole report."""

    def test_csv_report(self, matcher, balance_sheet_csv):
        """Every item gets a match and the summary counts them."""
        from parsers.csv_parser import CsvParser

        report = CsvParser().parse(balance_sheet_csv, 'bs.csv')
        summary = matcher.apply_matches(report)

        assert summary.total_items == 2
        assert summary.matched_by_method['exact'] == 2
        assert summary.match_rate == 100.0
        assert all(item.is_matched for _, item in report.iter_items())

    def test_unmatched_are_listed(self, matcher):
        """Items without a match are listed for manual mapping."""
        from parsers.csv_parser import CsvParser

        report = CsvParser().parse(b"Item,Amount\nWidgets,5\nTotal Assets,10\n", 'x.csv')
        summary = matcher.apply_matches(report)

        assert summary.unmatched_labels == ['Widgets']
        assert summary.matched == 1

    def test_prematched_items_untouched(self, matcher, xbrl_instance):
        """Instance facts keep their own tags."""
        from parsers.xbrl_parser import XbrlParser

        report = XbrlParser().parse(xbrl_instance, 'filing.xbrl')
        summary = matcher.apply_matches(report)

        assert summary.already_matched == 3
        assert summary.matched == 3
        assert report.statements[0].items[0].taxonomy_match.tag == 'us-gaap:Assets'


class TestConfirmMatch:
    """Test learning from confirmed matches."""

    def test_confirmed_mapping_is_used(self, matcher):
        """A confirmed mapping becomes an exact hit."""
        from parsers.models.canonical import TaxonomyMatch
        from constants import Framework, MatchMethod

        confirmed = TaxonomyMatch(
            tag='us-gaap:Revenues', framework=Framework.US_GAAP,
            confidence=97, method=MatchMethod.MANUAL,
        )
        mapping = matcher.confirm_match('Takings for the year', confirmed)
        match = matcher.match(_item('Takings for the year'))

        assert mapping.method == MatchMethod.MANUAL
        assert match.tag == 'us-gaap:Revenues'
        assert match.method == MatchMethod.EXACT
        assert match.confidence == 97
