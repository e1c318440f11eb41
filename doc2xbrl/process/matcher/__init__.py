# Path: doc2xbrl/process/matcher/__init__.py
"""
Matching Engine - Taxonomy Matching

Maps free-form line item labels to taxonomy tags.

Core Components:
    - TaxonomyMatcher: Main orchestrator
    - Stages: exact, fuzzy and assisted matching
    - Scoring: fuzzy label score and tiebreaker
    - Stores: taxonomy concepts and learned mappings

Example:
    from process.matcher import TaxonomyMatcher, InMemoryTaxonomyStore

    matcher = TaxonomyMatcher(InMemoryTaxonomyStore())
    match = matcher.match(item, sector='all', statement_kind='balance_sheet')
    # match.tag == 'us-gaap:Assets'
"""

from .engine import TaxonomyMatcher
from .models import (
    TaxonomyConcept,
    LearnedMapping,
    MatchRequest,
    MatchCandidate,
    MatchingSummary,
)
from .stages import AssistedScorer, PatternTableScorer
from .stores import DEFAULT_TAXONOMY, TaxonomyStore, InMemoryTaxonomyStore

__all__ = [
    'TaxonomyMatcher',
    'TaxonomyConcept',
    'LearnedMapping',
    'MatchRequest',
    'MatchCandidate',
    'MatchingSummary',
    'AssistedScorer',
    'PatternTableScorer',
    'DEFAULT_TAXONOMY',
    'TaxonomyStore',
    'InMemoryTaxonomyStore',
]
