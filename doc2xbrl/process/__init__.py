# Path: doc2xbrl/process/__init__.py
"""
Process Layer for doc2xbrl

The PROCESS layer turns parsed reports into matched ones and drives
conversions:
- matcher/ - Taxonomy matching (exact, fuzzy, assisted, fallback)
- jobs/ - Job orchestration, retries, schedulers and the service API

All components follow the IPO pattern:
- Read from INPUT layer (parsers, document stores)
- Process data (matching, job state)
- Hand results to OUTPUT layer (XBRL generator, result persistence)
"""

from process.matcher import TaxonomyMatcher, InMemoryTaxonomyStore
from process.jobs import ConversionOrchestrator, ConversionService

__all__ = [
    'TaxonomyMatcher',
    'InMemoryTaxonomyStore',
    'ConversionOrchestrator',
    'ConversionService',
]
