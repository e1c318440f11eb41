# Path: doc2xbrl/tests/unit/test_match_stages.py
"""
Unit Tests for Matching Stages

Tests the exact, fuzzy and assisted stages against the default taxonomy.
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


def _request(label, **kwargs):
    from process.matcher.models.candidates import MatchRequest
    return MatchRequest(label=label, **kwargs)


class TestExactStage:
    """Test learned mappings and direct taxonomy hits."""

    @pytest.mark.parametrize('label,tag', [
        ('Total Assets', 'us-gaap:Assets'),
        ('assets', 'us-gaap:Assets'),
        ('us-gaap:Revenues', 'us-gaap:Revenues'),
        ('Accounts Receivable', 'us-gaap:AccountsReceivableNetCurrent'),
    ])
    def test_direct_hits(self, store, label, tag):
        """Concept names, tags and local names hit at 100."""
        from process.matcher.stages import ExactStage
        from constants import MatchMethod

        stage = ExactStage(store)
        candidate = stage.propose(_request(label))

        assert candidate.tag == tag
        assert candidate.confidence == 100
        assert candidate.method == MatchMethod.EXACT
        assert stage.accepts(candidate)

    def test_synonym_is_not_exact(self, store):
        """Synonyms are left to the fuzzy stage."""
        from process.matcher.stages import ExactStage

        assert ExactStage(store).propose(_request('Turnover')) is None

    def test_learned_mapping_keeps_confidence(self, store):
        """A weak learned mapping is proposed but not accepted."""
        from process.matcher.stages import ExactStage
        from constants import MatchMethod

        store.upsert_learned_mapping(
            'Cash at bank', 'us-gaap:CashAndCashEquivalentsCarryingAmount', 90, MatchMethod.MANUAL
        )
        stage = ExactStage(store)
        candidate = stage.propose(_request('Cash at bank'))

        assert candidate.confidence == 90
        assert candidate.method == MatchMethod.EXACT
        assert not stage.accepts(candidate)

    def test_scoped_mapping_needs_matching_sector(self, store):
        """A sector-scoped mapping is ignored for other sectors."""
        from process.matcher.stages import ExactStage
        from constants import MatchMethod

        store.upsert_learned_mapping(
            'Cash at bank', 'us-gaap:CashAndCashEquivalentsCarryingAmount', 99,
            MatchMethod.MANUAL, sector='banking',
        )
        stage = ExactStage(store)

        assert stage.propose(_request('Cash at bank')) is None
        assert stage.propose(_request('Cash at bank', sector='banking')).confidence == 99

    def test_empty_label(self, store):
        """Empty labels are never matched."""
        from process.matcher.stages import ExactStage

        assert ExactStage(store).propose(_request('')) is None


class TestFuzzyStage:
    """Test shortlist scoring."""

    def test_synonym_hit(self, store):
        """A synonym scores 95 and is accepted."""
        from process.matcher.stages import FuzzyStage
        from constants import MatchMethod

        stage = FuzzyStage(store)
        candidate = stage.propose(_request('Sales'))

        assert candidate.tag == 'us-gaap:Revenues'
        assert candidate.confidence == 95
        assert candidate.method == MatchMethod.FUZZY
        assert stage.accepts(candidate)

    def test_low_scores_are_not_emitted(self, store):
        """Shortlisted concepts scoring below 80 yield nothing."""
        from process.matcher.stages import FuzzyStage

        assert FuzzyStage(store).propose(_request('Net Income Loss')) is None

    def test_empty_shortlist(self, store):
        """Unknown labels yield nothing."""
        from process.matcher.stages import FuzzyStage

        assert FuzzyStage(store).propose(_request('Widgets')) is None


class TestPatternTableScorer:
    """Test the default assisted scorer."""

    def test_large_value_bonus(self):
        """Values above one million add 5, capped at 100."""
        from process.matcher.stages import PatternTableScorer

        candidate = PatternTableScorer().score(
            _request('Net income attributable', value=2_500_000)
        )

        assert candidate.tag == 'us-gaap:NetIncomeLoss'
        assert candidate.confidence == 100

    def test_banking_penalty(self):
        """The banking sector subtracts 5."""
        from process.matcher.stages import PatternTableScorer
        from constants import MatchMethod

        candidate = PatternTableScorer().score(_request('Cash at bank', value=500, sector='banking'))

        assert candidate.confidence == 90
        assert candidate.method == MatchMethod.ASSISTED

    def test_boolean_value_gets_no_bonus(self):
        """Booleans are not magnitudes."""
        from process.matcher.stages import PatternTableScorer

        assert PatternTableScorer().score(_request('Inventory', value=True)).confidence == 90

    def test_longest_pattern_wins(self):
        """The most specific pattern is chosen."""
        from process.matcher.stages import PatternTableScorer

        rule = PatternTableScorer().find_rule('Total assets and cash')

        assert rule.pattern == 'total assets'

    def test_reverse_containment(self):
        """A label contained in a pattern matches when long enough."""
        from process.matcher.stages import PatternTableScorer

        scorer = PatternTableScorer()

        assert scorer.find_rule('receivable').tag == 'us-gaap:AccountsReceivableNetCurrent'
        assert scorer.find_rule('in') is None


class TestAssistedStage:
    """Test scorer delegation."""

    def test_custom_scorer(self, store):
        """A supplied scorer replaces the pattern table."""
        from process.matcher.stages import AssistedScorer, AssistedStage
        from process.matcher.models.candidates import MatchCandidate
        from constants import Framework, MatchMethod

        class FixedScorer(AssistedScorer):
            def score(self, request):
                return MatchCandidate(
                    tag='us-gaap:GrossProfit', framework=Framework.US_GAAP,
                    confidence=72, method=MatchMethod.ASSISTED,
                )

        stage = AssistedStage(store, FixedScorer())
        candidate = stage.propose(_request('Margin'))

        assert candidate.tag == 'us-gaap:GrossProfit'
        assert stage.accepts(candidate)

    def test_threshold(self, store):
        """The assisted threshold is 70."""
        from process.matcher.stages import AssistedStage

        assert AssistedStage(store).threshold == 70
