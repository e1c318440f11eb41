# Path: doc2xbrl/process/matcher/stages/exact_stage.py
"""
Exact Stage

Learned mapping for the literal label, else a direct taxonomy hit on
concept name, tag or tag local name.
"""

from typing import Optional

from constants import EXACT_MATCH_THRESHOLD

from .base_stage import BaseStage
from ..models.candidates import MatchCandidate, MatchRequest


class ExactStage(BaseStage):
    """
    First matching stage.

    Learned mappings report their stored confidence, so a weakly learned
    mapping (below the threshold) is only used through the fallback.
    """

    @property
    def stage_name(self) -> str:
        return 'exact'

    @property
    def threshold(self) -> int:
        return EXACT_MATCH_THRESHOLD

    def propose(self, request: MatchRequest) -> Optional[MatchCandidate]:
        if not request.label:
            return None
        candidate = self.store.find_exact(
            request.label, request.sector, request.statement_kind
        )
        if candidate is not None:
            self.logger.debug(
                f"Exact hit '{request.label}' -> {candidate.tag} ({candidate.confidence})"
            )
        return candidate


__all__ = ['ExactStage']
