# Path: doc2xbrl/database/operations/__init__.py
"""
Database Operations for doc2xbrl.

Provides CRUD operations and queries for:
- Document operations (register and find uploads)
- Job operations (store, update and query conversion jobs)
- Taxonomy operations (seed concepts, upsert learned mappings)
"""

from database.operations.document_ops import DocumentOperations
from database.operations.job_ops import JobOperations
from database.operations.taxonomy_ops import TaxonomyOperations


__all__ = [
    'DocumentOperations',
    'JobOperations',
    'TaxonomyOperations',
]
