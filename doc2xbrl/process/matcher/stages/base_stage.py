# Path: doc2xbrl/process/matcher/stages/base_stage.py
"""
Base Stage

Abstract base class for the matching stages.

A stage proposes at most one candidate for a request. Whether the
candidate is accepted outright is decided by comparing its confidence
with the stage threshold; rejected candidates still take part in the
fallback selection.
"""

from abc import ABC, abstractmethod
from typing import Optional

from core.logger.ipo_logging import get_process_logger

from ..models.candidates import MatchCandidate, MatchRequest
from ..stores.taxonomy_store import TaxonomyStore


class BaseStage(ABC):
    """
    Abstract base class for matching stages.

    Stages, in order of trust:
    - ExactStage: learned mappings and direct taxonomy hits
    - FuzzyStage: word-overlap scoring over a shortlist
    - AssistedStage: pluggable scorer for the remaining labels

    Subclasses must implement stage_name, threshold and propose().

    Example:
        stage = ExactStage(store)
        candidate = stage.propose(MatchRequest(label='Total Assets'))
        if stage.accepts(candidate):
            ...
    """

    def __init__(self, store: TaxonomyStore):
        """
        Initialize stage.

        Args:
            store: Taxonomy store the stage reads from
        """
        self.store = store
        self.logger = get_process_logger(f'matcher.stages.{self.stage_name}')

    @property
    @abstractmethod
    def stage_name(self) -> str:
        """Return the name of this stage."""
        pass

    @property
    @abstractmethod
    def threshold(self) -> int:
        """Minimum confidence for the stage's candidate to be accepted."""
        pass

    @abstractmethod
    def propose(self, request: MatchRequest) -> Optional[MatchCandidate]:
        """
        Propose a candidate for a request.

        Args:
            request: Label plus context

        Returns:
            Best candidate of this stage, or None
        """
        pass

    def accepts(self, candidate: Optional[MatchCandidate]) -> bool:
        """Check whether a candidate clears this stage's threshold."""
        return candidate is not None and candidate.confidence >= self.threshold


__all__ = ['BaseStage']
