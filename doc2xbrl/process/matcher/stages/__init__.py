# Path: doc2xbrl/process/matcher/stages/__init__.py
"""
Matching Stages

Each stage proposes at most one candidate:
- ExactStage (threshold 95)
- FuzzyStage (threshold 80)
- AssistedStage (threshold 70) with a pluggable AssistedScorer
"""

from .base_stage import BaseStage
from .exact_stage import ExactStage
from .fuzzy_stage import FuzzyStage
from .assisted_stage import (
    AssistedScorer,
    AssistedStage,
    PatternRule,
    PatternTableScorer,
    DEFAULT_PATTERNS,
)

__all__ = [
    'BaseStage',
    'ExactStage',
    'FuzzyStage',
    'AssistedStage',
    'AssistedScorer',
    'PatternTableScorer',
    'PatternRule',
    'DEFAULT_PATTERNS',
]
