# Path: doc2xbrl/process/matcher/scoring/tiebreaker.py
"""
Tiebreaker

Selects the best of several stage candidates and resolves ties when
candidates share the top confidence.
"""

from enum import Enum
from typing import Optional

from core.logger.ipo_logging import get_process_logger

from ..models.candidates import MatchCandidate


class TiebreakerType(str, Enum):
    """Tiebreaker strategies."""
    MOST_TRUSTED_METHOD = 'most_trusted_method'
    FIRST_PROPOSED = 'first_proposed'


class Tiebreaker:
    """
    Resolves ties between equally-scored candidates.

    Tiebreaker strategies:
    - MOST_TRUSTED_METHOD: Prefer exact over fuzzy over assisted over manual
    - FIRST_PROPOSED: Prefer the candidate proposed by the earliest stage

    Example:
        tiebreaker = Tiebreaker()
        best, how = tiebreaker.select_best([exact, fuzzy, assisted])
    """

    def __init__(self, strategy: TiebreakerType = TiebreakerType.MOST_TRUSTED_METHOD):
        """
        Initialize tiebreaker.

        Args:
            strategy: Strategy used when confidences are equal
        """
        self.strategy = strategy
        self.logger = get_process_logger('matcher.scoring.tiebreaker')

    def select_best(
        self,
        candidates: list[Optional[MatchCandidate]]
    ) -> tuple[Optional[MatchCandidate], str]:
        """
        Pick the highest-confidence candidate.

        Args:
            candidates: Stage outputs; None entries are ignored

        Returns:
            Tuple of (best candidate or None, selection method used)
        """
        valid = [candidate for candidate in candidates if candidate is not None]
        if not valid:
            return None, 'no_candidates'

        top = max(candidate.confidence for candidate in valid)
        tied = [candidate for candidate in valid if candidate.confidence == top]
        if len(tied) == 1:
            return tied[0], 'highest_confidence'
        return self.resolve(tied)

    def resolve(self, matches: list[MatchCandidate]) -> tuple[MatchCandidate, str]:
        """
        Resolve ties between candidates.

        Args:
            matches: Equally-scored candidates

        Returns:
            Tuple of (best candidate, tiebreaker method used)
        """
        if len(matches) == 1:
            return matches[0], 'single_match'

        if len(matches) == 0:
            raise ValueError("No matches to resolve")

        self.logger.debug(
            f"Resolving tie between {len(matches)} candidates "
            f"using {self.strategy.value}"
        )

        if self.strategy == TiebreakerType.MOST_TRUSTED_METHOD:
            best = min(matches, key=lambda candidate: candidate.method.trust_rank)
            return best, 'most_trusted_method'

        return matches[0], 'first_proposed'


__all__ = ['TiebreakerType', 'Tiebreaker']
