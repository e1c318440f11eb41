# Path: doc2xbrl/database/models/taxonomy.py
"""
Taxonomy Models

- TaxonomyConceptRecord: reference taxonomy concepts (table 'taxonomies')
- LearnedMappingRecord: source label -> tag mappings learned from
  conversions and operators (table 'taxonomy_mappings')
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, String, DateTime, Text, Integer, JSON

from database.models.base import Base


class TaxonomyConceptRecord(Base):
    """
    Taxonomy concept row.

    Example:
        record = TaxonomyConceptRecord(
            concept='Total Assets',
            tag='us-gaap:Assets',
            statement_kind='balance_sheet',
        )
    """
    __tablename__ = 'taxonomies'

    concept_id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Row identifier (preserves seed order)"
    )
    concept = Column(
        String(255),
        nullable=False,
        comment="Human-readable concept name"
    )
    tag = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Prefixed taxonomy tag"
    )
    sector = Column(
        String(100),
        nullable=False,
        default='all',
        index=True,
        comment="Sector the concept belongs to"
    )
    statement_kind = Column(
        String(50),
        nullable=False,
        default='unknown',
        comment="Statement kind"
    )
    framework = Column(
        String(20),
        nullable=False,
        default='US-GAAP',
        comment="Accounting framework"
    )
    description = Column(
        Text,
        default='',
        comment="Taxonomy description"
    )
    data_type = Column(
        String(50),
        default='monetary',
        comment="monetary, shares, string, ..."
    )
    is_required = Column(
        Boolean,
        default=False,
        comment="Whether filers are expected to report it"
    )
    hierarchy_level = Column(
        Integer,
        default=1,
        comment="Depth in the statement"
    )
    parent_concept = Column(
        String(255),
        comment="Parent concept name"
    )
    synonyms = Column(
        JSON,
        default=list,
        comment="Alternative labels"
    )

    def __repr__(self) -> str:
        return f"<TaxonomyConceptRecord(tag='{self.tag}', sector='{self.sector}')>"


class LearnedMappingRecord(Base):
    """Learned mapping row, unique per source label."""
    __tablename__ = 'taxonomy_mappings'

    mapping_id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Row identifier"
    )
    source_label = Column(
        String(500),
        nullable=False,
        unique=True,
        index=True,
        comment="Label exactly as found in source documents (trimmed)"
    )
    tag = Column(
        String(255),
        nullable=False,
        comment="Mapped taxonomy tag"
    )
    concept = Column(
        String(255),
        comment="Concept name of the mapped tag"
    )
    confidence = Column(
        Integer,
        nullable=False,
        comment="Confidence 0-100"
    )
    method = Column(
        String(20),
        nullable=False,
        comment="exact, fuzzy, assisted or manual"
    )
    framework = Column(
        String(20),
        default='US-GAAP',
        comment="Accounting framework"
    )
    sector = Column(
        String(100),
        comment="Sector scope (NULL = any)"
    )
    statement_kind = Column(
        String(50),
        comment="Statement kind scope (NULL = any)"
    )
    is_active = Column(
        Boolean,
        default=True,
        comment="Inactive mappings are ignored"
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        comment="Record creation timestamp"
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        comment="Record last update timestamp"
    )

    def __repr__(self) -> str:
        return (
            f"<LearnedMappingRecord(label='{self.source_label}', "
            f"tag='{self.tag}', confidence={self.confidence})>"
        )


__all__ = ['TaxonomyConceptRecord', 'LearnedMappingRecord']
