# Path: doc2xbrl/database/models/__init__.py
"""
Database Models for doc2xbrl.

Provides SQLAlchemy models for storing:
- Source document metadata
- Conversion jobs (state, processing log, output locator)
- Taxonomy concepts and learned label mappings
"""

from database.models.base import (
    Base,
    initialize_engine,
    get_engine,
    get_session,
    session_scope,
    create_all_tables,
    drop_all_tables,
)
from database.models.documents import DocumentRecord
from database.models.conversion_jobs import ConversionJobRecord
from database.models.taxonomy import TaxonomyConceptRecord, LearnedMappingRecord


__all__ = [
    'Base',
    'initialize_engine',
    'get_engine',
    'get_session',
    'session_scope',
    'create_all_tables',
    'drop_all_tables',
    'DocumentRecord',
    'ConversionJobRecord',
    'TaxonomyConceptRecord',
    'LearnedMappingRecord',
]
