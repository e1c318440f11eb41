# Path: doc2xbrl/database/integration/__init__.py
"""
Database Integration Layer

Connects the job orchestrator and the matching engine with database
storage through SQL implementations of their store interfaces.
"""

from database.integration.sql_stores import SqlDocumentStore, SqlJobStore, SqlTaxonomyStore

__all__ = ['SqlDocumentStore', 'SqlJobStore', 'SqlTaxonomyStore']
