# Path: doc2xbrl/database/operations/taxonomy_ops.py
"""
Taxonomy Operations

CRUD operations for taxonomy concepts and learned mappings, plus
conversion between rows and the matcher's models.
"""

import logging
from typing import Iterable, Optional, List

from sqlalchemy.orm import Session

from constants import Framework, MatchMethod, StatementKind
from database.models.taxonomy import LearnedMappingRecord, TaxonomyConceptRecord
from process.matcher.models.candidates import LearnedMapping, TaxonomyConcept
from process.matcher.stores.seed import DEFAULT_TAXONOMY


logger = logging.getLogger(__name__)


class TaxonomyOperations:
    """
    Operations for taxonomy rows.

    Example:
        with session_scope() as session:
            TaxonomyOperations.seed_default_taxonomy(session)
            concepts = TaxonomyOperations.all_concepts(session)
    """

    # ==========================================================================
    # CONCEPTS
    # ==========================================================================

    @staticmethod
    def add_concept(session: Session, concept: TaxonomyConcept) -> TaxonomyConceptRecord:
        """
        Insert a taxonomy concept.

        Args:
            session: Database session
            concept: Concept to store

        Returns:
            Created TaxonomyConceptRecord
        """
        record = TaxonomyConceptRecord(
            concept=concept.concept,
            tag=concept.tag,
            sector=concept.sector,
            statement_kind=concept.statement_kind.value,
            framework=concept.framework.value,
            description=concept.description,
            data_type=concept.data_type,
            is_required=concept.is_required,
            hierarchy_level=concept.hierarchy_level,
            parent_concept=concept.parent_concept,
            synonyms=list(concept.synonyms),
        )
        session.add(record)
        session.flush()
        return record

    @staticmethod
    def seed_default_taxonomy(
        session: Session,
        concepts: Optional[Iterable[TaxonomyConcept]] = None
    ) -> int:
        """
        Insert seed concepts whose tag is not stored yet.

        Args:
            session: Database session
            concepts: Concepts to seed (default: DEFAULT_TAXONOMY)

        Returns:
            Number of inserted concepts
        """
        existing = {tag for (tag,) in session.query(TaxonomyConceptRecord.tag).all()}
        inserted = 0
        for concept in DEFAULT_TAXONOMY if concepts is None else concepts:
            if concept.tag in existing:
                continue
            TaxonomyOperations.add_concept(session, concept)
            existing.add(concept.tag)
            inserted += 1

        logger.info(f"Seeded {inserted} taxonomy concepts")
        return inserted

    @staticmethod
    def all_concepts(session: Session) -> List[TaxonomyConceptRecord]:
        """All concepts in insertion order."""
        return session.query(TaxonomyConceptRecord).order_by(
            TaxonomyConceptRecord.concept_id.asc()
        ).all()

    @staticmethod
    def find_concept_by_tag(session: Session, tag: str) -> Optional[TaxonomyConceptRecord]:
        """
        Find concept by tag.

        Returns:
            TaxonomyConceptRecord or None
        """
        return session.query(TaxonomyConceptRecord).filter_by(tag=tag).first()

    @staticmethod
    def to_concept(record: TaxonomyConceptRecord) -> TaxonomyConcept:
        """Convert a row to a TaxonomyConcept."""
        return TaxonomyConcept(
            concept=record.concept,
            tag=record.tag,
            sector=record.sector or 'all',
            statement_kind=StatementKind(record.statement_kind or 'unknown'),
            framework=Framework.from_value(record.framework),
            description=record.description or '',
            data_type=record.data_type or 'monetary',
            is_required=bool(record.is_required),
            hierarchy_level=record.hierarchy_level or 1,
            parent_concept=record.parent_concept,
            synonyms=tuple(record.synonyms or ()),
        )

    # ==========================================================================
    # LEARNED MAPPINGS
    # ==========================================================================

    @staticmethod
    def find_mapping(session: Session, source_label: str) -> Optional[LearnedMappingRecord]:
        """
        Find the mapping of a source label.

        Returns:
            LearnedMappingRecord or None
        """
        return session.query(LearnedMappingRecord).filter_by(
            source_label=source_label
        ).first()

    @staticmethod
    def upsert_mapping(
        session: Session,
        mapping: LearnedMapping
    ) -> tuple[LearnedMappingRecord, bool]:
        """
        Store a mapping unless an equal-or-better one exists.

        Args:
            session: Database session
            mapping: Candidate mapping

        Returns:
            Tuple of (stored row, changed) where changed is False when the
            existing row was kept
        """
        record = TaxonomyOperations.find_mapping(session, mapping.source_label)
        if record is not None and record.confidence >= mapping.confidence:
            return record, False

        if record is None:
            record = LearnedMappingRecord(source_label=mapping.source_label)
            session.add(record)

        record.tag = mapping.tag
        record.concept = mapping.concept
        record.confidence = mapping.confidence
        record.method = mapping.method.value
        record.framework = mapping.framework.value
        record.sector = mapping.sector
        record.statement_kind = mapping.statement_kind
        record.is_active = mapping.is_active
        session.flush()

        logger.info(
            f"Stored mapping '{mapping.source_label}' -> {mapping.tag} ({mapping.confidence})"
        )
        return record, True

    @staticmethod
    def active_mappings(session: Session) -> List[LearnedMappingRecord]:
        """Active mappings, best first."""
        return session.query(LearnedMappingRecord).filter_by(
            is_active=True
        ).order_by(
            LearnedMappingRecord.confidence.desc()
        ).all()

    @staticmethod
    def to_mapping(record: LearnedMappingRecord) -> LearnedMapping:
        """Convert a row to a LearnedMapping."""
        return LearnedMapping(
            source_label=record.source_label,
            tag=record.tag,
            confidence=record.confidence,
            method=MatchMethod(record.method),
            framework=Framework.from_value(record.framework),
            concept=record.concept,
            sector=record.sector,
            statement_kind=record.statement_kind,
            is_active=bool(record.is_active),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


__all__ = ['TaxonomyOperations']
