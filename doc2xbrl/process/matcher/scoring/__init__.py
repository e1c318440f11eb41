# Path: doc2xbrl/process/matcher/scoring/__init__.py
"""
Scoring Module

Components for scoring labels and choosing between candidates:
- fuzzy_score: Word-overlap label similarity
- Tiebreaker: Best-candidate selection with method-trust tie resolution
"""

from .fuzzy_score import fuzzy_score
from .tiebreaker import Tiebreaker, TiebreakerType

__all__ = [
    'fuzzy_score',
    'Tiebreaker',
    'TiebreakerType',
]
