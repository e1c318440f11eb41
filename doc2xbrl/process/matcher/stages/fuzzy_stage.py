# Path: doc2xbrl/process/matcher/stages/fuzzy_stage.py
"""
Fuzzy Stage

Scores a shortlist of taxonomy concepts with fuzzy_score() and proposes
the best one. Scores below the stage threshold are never emitted.
"""

from typing import Optional

from constants import FUZZY_CANDIDATE_LIMIT, FUZZY_MATCH_THRESHOLD, MatchMethod

from .base_stage import BaseStage
from ..models.candidates import MatchCandidate, MatchRequest
from ..scoring.fuzzy_score import fuzzy_score


class FuzzyStage(BaseStage):
    """Second matching stage: word-overlap similarity."""

    def __init__(self, store, candidate_limit: int = FUZZY_CANDIDATE_LIMIT):
        """
        Initialize stage.

        Args:
            store: Taxonomy store
            candidate_limit: Maximum shortlist size
        """
        super().__init__(store)
        self.candidate_limit = candidate_limit

    @property
    def stage_name(self) -> str:
        return 'fuzzy'

    @property
    def threshold(self) -> int:
        return FUZZY_MATCH_THRESHOLD

    def propose(self, request: MatchRequest) -> Optional[MatchCandidate]:
        if not request.label:
            return None

        concepts = self.store.find_candidates(
            request.label,
            request.sector,
            request.statement_kind,
            limit=self.candidate_limit,
        )

        best: Optional[MatchCandidate] = None
        for concept in concepts:
            score = fuzzy_score(request.label, concept.concept, concept.synonyms)
            if score < self.threshold:
                continue
            # Strict comparison keeps the earlier shortlist entry on ties
            if best is None or score > best.confidence:
                best = MatchCandidate.from_concept(
                    concept, score, MatchMethod.FUZZY, stage=self.stage_name
                )

        if best is not None:
            self.logger.debug(
                f"Fuzzy hit '{request.label}' -> {best.tag} ({best.confidence}) "
                f"from {len(concepts)} candidates"
            )
        return best


__all__ = ['FuzzyStage']
