# Path: doc2xbrl/process/matcher/stores/__init__.py
"""
Taxonomy Stores

Reference data for the matching engine: taxonomy concepts plus learned
label mappings.
"""

from .seed import DEFAULT_TAXONOMY
from .taxonomy_store import (
    TaxonomyStore,
    InMemoryTaxonomyStore,
    concept_is_exact_hit,
    concept_contains_label,
    shortlist_concepts,
    select_learned,
)

__all__ = [
    'DEFAULT_TAXONOMY',
    'TaxonomyStore',
    'InMemoryTaxonomyStore',
    'concept_is_exact_hit',
    'concept_contains_label',
    'shortlist_concepts',
    'select_learned',
]
