# Path: doc2xbrl/process/matcher/models/__init__.py
"""
Matcher Models

Data structures for the taxonomy matching engine:
- TaxonomyConcept / LearnedMapping: reference data held by the stores
- MatchRequest / MatchCandidate: stage input and output
- MatchingSummary: per-report counts
"""

from .candidates import (
    ALL_SECTORS,
    kind_value,
    TaxonomyConcept,
    LearnedMapping,
    MatchRequest,
    MatchCandidate,
)
from .summary import MatchingSummary

__all__ = [
    'ALL_SECTORS',
    'kind_value',
    'TaxonomyConcept',
    'LearnedMapping',
    'MatchRequest',
    'MatchCandidate',
    'MatchingSummary',
]
