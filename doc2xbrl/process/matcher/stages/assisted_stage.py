# Path: doc2xbrl/process/matcher/stages/assisted_stage.py
"""
Assisted Stage

Last scoring stage for labels the exact and fuzzy stages could not place.
The actual scoring is delegated to an AssistedScorer so that a model-backed
scorer can replace the default curated pattern table.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from constants import ASSISTED_MATCH_THRESHOLD, Framework, MatchMethod

from .base_stage import BaseStage
from ..models.candidates import MatchCandidate, MatchRequest


# Sector whose line items often use bank-specific variants
ADJUSTED_SECTOR = 'banking'
SECTOR_PENALTY = 5
LARGE_VALUE_THRESHOLD = 1_000_000
LARGE_VALUE_BONUS = 5
MIN_REVERSE_PATTERN_LENGTH = 3


@dataclass(frozen=True)
class PatternRule:
    """One row of the pattern table."""
    pattern: str
    tag: str
    confidence: int
    framework: Framework = Framework.US_GAAP


DEFAULT_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule('cash', 'us-gaap:CashAndCashEquivalentsCarryingAmount', 95),
    PatternRule('accounts receivable', 'us-gaap:AccountsReceivableNetCurrent', 95),
    PatternRule('inventory', 'us-gaap:InventoryNet', 90),
    PatternRule('property', 'us-gaap:PropertyPlantAndEquipmentNet', 85),
    PatternRule('revenue', 'us-gaap:Revenues', 95),
    PatternRule('sales', 'us-gaap:Revenues', 90),
    PatternRule('net income', 'us-gaap:NetIncomeLoss', 95),
    PatternRule('total assets', 'us-gaap:Assets', 98),
    PatternRule('total liabilities', 'us-gaap:Liabilities', 98),
    PatternRule('shareholders equity', 'us-gaap:StockholdersEquity', 95),
)


class AssistedScorer(ABC):
    """
    Scorer used by the assisted stage.

    Implementations receive the request (label, value, sector, statement
    kind) and return a candidate or None. They must not touch global state.
    """

    @abstractmethod
    def score(self, request: MatchRequest) -> Optional[MatchCandidate]:
        """Propose a candidate for a request."""
        pass


class PatternTableScorer(AssistedScorer):
    """
    Curated pattern table scorer.

    A pattern matches when it is contained in the label or the label is
    contained in it; the longest matching pattern wins. Confidence is then
    adjusted for context: -5 in the banking sector, +5 (capped at 100) for
    values above one million.

    Example:
        scorer = PatternTableScorer()
        scorer.score(MatchRequest(label='Net income attributable', value=2_500_000))
        # -> us-gaap:NetIncomeLoss at 100
    """

    def __init__(self, patterns: tuple[PatternRule, ...] = DEFAULT_PATTERNS):
        """
        Initialize scorer.

        Args:
            patterns: Pattern table
        """
        self.patterns = patterns

    def find_rule(self, label: str) -> Optional[PatternRule]:
        """Longest pattern matching a label, or None."""
        needle = (label or '').strip().lower()
        if not needle:
            return None

        best: Optional[PatternRule] = None
        for rule in self.patterns:
            forward = rule.pattern in needle
            reverse = len(needle) >= MIN_REVERSE_PATTERN_LENGTH and needle in rule.pattern
            if not (forward or reverse):
                continue
            if best is None or len(rule.pattern) > len(best.pattern):
                best = rule
        return best

    def score(self, request: MatchRequest) -> Optional[MatchCandidate]:
        rule = self.find_rule(request.label)
        if rule is None:
            return None

        confidence = rule.confidence
        if request.sector == ADJUSTED_SECTOR:
            confidence -= SECTOR_PENALTY

        value = request.value
        if (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and abs(value) > LARGE_VALUE_THRESHOLD
        ):
            confidence = min(100, confidence + LARGE_VALUE_BONUS)

        return MatchCandidate(
            tag=rule.tag,
            framework=rule.framework,
            confidence=confidence,
            method=MatchMethod.ASSISTED,
            concept=rule.pattern,
            stage='assisted',
        )


class AssistedStage(BaseStage):
    """Third matching stage: delegates to an AssistedScorer."""

    def __init__(self, store, scorer: Optional[AssistedScorer] = None):
        """
        Initialize stage.

        Args:
            store: Taxonomy store
            scorer: Scorer to delegate to (default: PatternTableScorer)
        """
        super().__init__(store)
        self.scorer = scorer or PatternTableScorer()

    @property
    def stage_name(self) -> str:
        return 'assisted'

    @property
    def threshold(self) -> int:
        return ASSISTED_MATCH_THRESHOLD

    def propose(self, request: MatchRequest) -> Optional[MatchCandidate]:
        if not request.label:
            return None
        candidate = self.scorer.score(request)
        if candidate is not None:
            self.logger.debug(
                f"Assisted hit '{request.label}' -> {candidate.tag} ({candidate.confidence})"
            )
        return candidate


__all__ = [
    'PatternRule',
    'DEFAULT_PATTERNS',
    'AssistedScorer',
    'PatternTableScorer',
    'AssistedStage',
]
