# Path: doc2xbrl/tests/unit/test_taxonomy_store.py
"""
Unit Tests for InMemoryTaxonomyStore

Tests lookups, shortlists and learned mapping upserts.
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


class TestFindCandidates:
    """Test the fuzzy shortlist."""

    def test_textual_matches_first(self, store):
        """Concepts containing the label come in store order."""
        tags = [c.tag for c in store.find_candidates('Receivable')]

        assert tags == [
            'us-gaap:AccountsReceivableNetCurrent',
            'ifrs-full:TradeAndOtherCurrentReceivables',
        ]

    def test_sector_concepts_follow(self, store):
        """Concepts of the request sector are appended."""
        tags = [c.tag for c in store.find_candidates('Receivable', sector='manufacturing')]

        assert tags == [
            'us-gaap:AccountsReceivableNetCurrent',
            'ifrs-full:TradeAndOtherCurrentReceivables',
            'us-gaap:InventoryNet',
            'us-gaap:CostOfGoodsSold',
        ]

    def test_statement_kind_concepts_follow(self, store):
        """Concepts of the request statement kind are appended."""
        tags = [c.tag for c in store.find_candidates('Widgets', statement_kind='cash_flow')]

        assert len(tags) == 4
        assert tags[0] == 'us-gaap:NetCashProvidedByUsedInOperatingActivities'

    def test_limit(self, store):
        """The shortlist is truncated."""
        assert len(store.find_candidates('Receivable', sector='manufacturing', limit=3)) == 3


class TestLearnedMappings:
    """Test mapping upserts."""

    def test_unknown_tag_rejected(self, store):
        """Mappings must point at a taxonomy tag."""
        from constants import MatchMethod

        with pytest.raises(ValueError, match='Taxonomy entry not found'):
            store.upsert_learned_mapping('Widgets', 'us-gaap:Widgets', 90, MatchMethod.MANUAL)

    def test_empty_label_rejected(self, store):
        """Mappings need a source label."""
        from constants import MatchMethod

        with pytest.raises(ValueError):
            store.upsert_learned_mapping('  ', 'us-gaap:Assets', 90, MatchMethod.MANUAL)

    def test_lower_confidence_keeps_existing(self, store):
        """A weaker mapping does not replace a stronger one."""
        from constants import MatchMethod

        first = store.upsert_learned_mapping('Takings', 'us-gaap:Revenues', 90, MatchMethod.MANUAL)
        second = store.upsert_learned_mapping('Takings', 'us-gaap:Assets', 85, MatchMethod.FUZZY)

        assert second is first
        assert store.find_exact('Takings').tag == 'us-gaap:Revenues'

    def test_higher_confidence_replaces(self, store):
        """A stronger mapping replaces the old one and keeps its creation time."""
        from constants import MatchMethod

        first = store.upsert_learned_mapping('Takings', 'us-gaap:Assets', 85, MatchMethod.FUZZY)
        second = store.upsert_learned_mapping('Takings', 'us-gaap:Revenues', 97, MatchMethod.MANUAL)

        assert second.tag == 'us-gaap:Revenues'
        assert second.concept == 'Revenue'
        assert second.created_at == first.created_at
        assert store.find_exact('Takings').confidence == 97

    def test_mappings_for_sector(self, store):
        """Only mappings onto the sector's concepts, best first."""
        from constants import MatchMethod

        store.upsert_learned_mapping('Stock on hand', 'us-gaap:InventoryNet', 80, MatchMethod.MANUAL)
        store.upsert_learned_mapping('Goods cost', 'us-gaap:CostOfGoodsSold', 90, MatchMethod.MANUAL)
        store.upsert_learned_mapping(
            'Cash at bank', 'us-gaap:CashAndCashEquivalentsCarryingAmount', 95, MatchMethod.MANUAL
        )

        labels = [m.source_label for m in store.mappings_for_sector('manufacturing')]
        balance = [
            m.source_label
            for m in store.mappings_for_sector('manufacturing', 'balance_sheet')
        ]

        assert labels == ['Goods cost', 'Stock on hand']
        assert balance == ['Stock on hand']


class TestLearnedMappingScope:
    """Test LearnedMapping.applies_to."""

    def _mapping(self, **kwargs):
        from process.matcher.models.candidates import LearnedMapping
        from constants import MatchMethod
        return LearnedMapping(
            source_label='Cash', tag='us-gaap:Assets', confidence=90,
            method=MatchMethod.MANUAL, **kwargs
        )

    def test_unscoped(self):
        assert self._mapping().applies_to()

    def test_inactive(self):
        assert not self._mapping(is_active=False).applies_to()

    def test_sector(self):
        assert self._mapping(sector='all').applies_to('banking')
        assert not self._mapping(sector='banking').applies_to(None)
        assert self._mapping(sector='banking').applies_to('banking')

    def test_statement_kind(self):
        from constants import StatementKind

        mapping = self._mapping(statement_kind='balance_sheet')

        assert mapping.applies_to(None, StatementKind.BALANCE_SHEET)
        assert not mapping.applies_to(None, StatementKind.INCOME_STATEMENT)


class TestConceptForTag:
    """Test tag lookup."""

    def test_known_and_unknown(self, store):
        assert store.concept_for_tag('us-gaap:Assets').concept == 'Total Assets'
        assert store.concept_for_tag('us-gaap:Widgets') is None
