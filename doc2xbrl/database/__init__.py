# Path: doc2xbrl/database/__init__.py
"""
doc2xbrl Database Module

Persists documents, conversion jobs and the taxonomy.

This module provides:
- Database models for documents, jobs, taxonomy concepts and mappings
- CRUD operations for each table
- SQL implementations of the DocumentStore, JobStore and TaxonomyStore
  interfaces

Database: SQLite file under the data root (default) or PostgreSQL
(DOC2XBRL_DATABASE_URL).

Example:
    from database import initialize_database, session_scope
    from database import JobOperations, TaxonomyOperations

    # Initialize database and seed the default taxonomy
    initialize_database()
    with session_scope() as session:
        TaxonomyOperations.seed_default_taxonomy(session)

    # Query jobs
    with session_scope() as session:
        pending = JobOperations.list_pending(session)
"""

from database.models.base import (
    Base,
    initialize_engine,
    get_engine,
    get_session,
    session_scope,
    create_all_tables,
    drop_all_tables,
    reset_engine,
    get_database_type,
    get_connection_info,
)
from database.models.documents import DocumentRecord
from database.models.conversion_jobs import ConversionJobRecord
from database.models.taxonomy import TaxonomyConceptRecord, LearnedMappingRecord

from database.operations.document_ops import DocumentOperations
from database.operations.job_ops import JobOperations
from database.operations.taxonomy_ops import TaxonomyOperations

from database.integration.sql_stores import (
    SqlDocumentStore,
    SqlJobStore,
    SqlTaxonomyStore,
)


def initialize_database(db_url: str = None) -> None:
    """
    Initialize the doc2xbrl database.

    Args:
        db_url: Optional database URL or ':memory:'.
                If None, uses default from config.

    Example:
        # Use default SQLite file
        initialize_database()

        # In-memory database for tests
        initialize_database(':memory:')
    """
    initialize_engine(db_url)
    create_all_tables()


__all__ = [
    # Initialization
    'initialize_database',
    'initialize_engine',
    'get_engine',
    'get_session',
    'session_scope',
    'create_all_tables',
    'drop_all_tables',
    'reset_engine',
    'get_database_type',
    'get_connection_info',
    # Models
    'Base',
    'DocumentRecord',
    'ConversionJobRecord',
    'TaxonomyConceptRecord',
    'LearnedMappingRecord',
    # Operations
    'DocumentOperations',
    'JobOperations',
    'TaxonomyOperations',
    # Integration
    'SqlDocumentStore',
    'SqlJobStore',
    'SqlTaxonomyStore',
]
