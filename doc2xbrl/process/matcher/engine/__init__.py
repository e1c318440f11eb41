# Path: doc2xbrl/process/matcher/engine/__init__.py
"""
Matching Engine Core

TaxonomyMatcher: runs the matching stages and attaches results to items.
"""

from .coordinator import TaxonomyMatcher

__all__ = ['TaxonomyMatcher']
