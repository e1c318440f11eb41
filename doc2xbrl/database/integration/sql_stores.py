# Path: doc2xbrl/database/integration/sql_stores.py
"""
SQL Store Integration

SQLAlchemy-backed implementations of the orchestrator's collaborator
interfaces:
- SqlJobStore (process.jobs.stores.JobStore)
- SqlDocumentStore (process.jobs.stores.DocumentStore): metadata rows,
  bytes on disk under the storage directory
- SqlTaxonomyStore (process.matcher.stores.TaxonomyStore)

Each call runs in its own session_scope() transaction. The engine must
be initialized first (initialize_database()).

Example:
    initialize_database(':memory:')
    with session_scope() as session:
        TaxonomyOperations.seed_default_taxonomy(session)

    service = ConversionService.build(
        document_store=SqlDocumentStore(),
        job_store=SqlJobStore(),
        taxonomy_store=SqlTaxonomyStore(),
        scheduler=ThreadPoolScheduler(),
    )
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from config_loader import ConfigLoader
from constants import DIRECT_TAXONOMY_CONFIDENCE, FUZZY_CANDIDATE_LIMIT, MatchMethod
from core.errors import JobNotFoundError
from database.models.base import session_scope
from database.operations.document_ops import DocumentOperations
from database.operations.job_ops import JobOperations
from database.operations.taxonomy_ops import TaxonomyOperations
from process.jobs.models import ConversionJob, ConversionOptions, SourceDocument, new_id
from process.jobs.stores import DocumentStore, JobStore, apply_job_update
from process.matcher.models.candidates import LearnedMapping, MatchCandidate, kind_value
from process.matcher.stores.taxonomy_store import (
    TaxonomyStore,
    concept_is_exact_hit,
    select_learned,
    shortlist_concepts,
)


logger = logging.getLogger(__name__)


# ==============================================================================
# JOBS
# ==============================================================================

class SqlJobStore(JobStore):
    """
    Job store over the conversion_jobs table.

    Example:
        store = SqlJobStore()
        job = store.create(document_id)
        store.update(job.id, progress=30)
    """

    def create(self, document_id: str, options: Optional[ConversionOptions] = None) -> ConversionJob:
        job = ConversionJob(
            id=new_id(),
            document_id=document_id,
            options=options or ConversionOptions(),
        )
        with session_scope() as session:
            JobOperations.create_job(session, job)
        return job

    def get(self, job_id: str) -> Optional[ConversionJob]:
        with session_scope() as session:
            record = JobOperations.find_by_id(session, job_id)
            return JobOperations.to_job(record) if record else None

    def update(self, job_id: str, **fields) -> ConversionJob:
        with session_scope() as session:
            record = JobOperations.find_by_id(session, job_id)
            if record is None:
                raise JobNotFoundError(job_id)
            # Same timestamp rules as the in-memory store
            job = apply_job_update(JobOperations.to_job(record), fields)
            stamped = dict(fields)
            stamped.update(
                started_at=job.started_at,
                completed_at=job.completed_at,
                updated_at=job.updated_at,
            )
            JobOperations.apply_fields(record, stamped)
            return job

    def list_pending(self, limit: int = 10) -> list[ConversionJob]:
        with session_scope() as session:
            return [JobOperations.to_job(r) for r in JobOperations.list_pending(session, limit)]

    def list_recent(self, limit: int = 20) -> list[ConversionJob]:
        with session_scope() as session:
            return [JobOperations.to_job(r) for r in JobOperations.list_recent(session, limit)]

    def delete_finished_before(self, cutoff: datetime) -> int:
        with session_scope() as session:
            return JobOperations.delete_finished_before(session, cutoff)

    def count_by_status(self) -> dict[str, int]:
        with session_scope() as session:
            return JobOperations.count_by_status(session)


# ==============================================================================
# DOCUMENTS
# ==============================================================================

class SqlDocumentStore(DocumentStore):
    """
    Document store: rows in the documents table, bytes on disk.

    Layout under the storage directory:
        documents/{document_id}/{file_name}
        outputs/{job_id}.xbrl
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        """
        Initialize store.

        Args:
            root: Storage directory (default: config storage_dir)
        """
        self.root = Path(root) if root else Path(ConfigLoader().get('storage_dir'))
        self.documents_dir = self.root / 'documents'
        self.outputs_dir = self.root / 'outputs'
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        self.outputs_dir.mkdir(parents=True, exist_ok=True)

    def retrieve(self, document_id: str) -> Optional[SourceDocument]:
        with session_scope() as session:
            record = DocumentOperations.find_by_id(session, document_id)
            if record is None:
                return None
            path = Path(record.storage_path)
            if not path.is_file():
                logger.warning(f"Document {document_id} is registered but {path} is missing")
                return None
            return SourceDocument(
                document_id=record.document_id,
                content=path.read_bytes(),
                file_name=record.file_name,
                format=record.file_format or '',
                mime_type=record.mime_type,
                metadata=dict(record.upload_metadata or {}),
                uploaded_at=record.uploaded_at,
            )

    def persist(self, job_id: str, output: bytes) -> str:
        path = self.outputs_dir / f"{job_id}.xbrl"
        path.write_bytes(output)
        logger.info(f"Saved output for job {job_id} to {path}")
        return str(path.resolve())

    def add(
        self,
        content: bytes,
        file_name: str,
        format: str = '',
        mime_type: Optional[str] = None,
        metadata: Optional[dict] = None,
        document_id: Optional[str] = None
    ) -> SourceDocument:
        document = SourceDocument(
            document_id=document_id or new_id(),
            content=bytes(content),
            file_name=Path(file_name).name,
            format=format or '',
            mime_type=mime_type,
            metadata=dict(metadata or {}),
        )
        directory = self.documents_dir / document.document_id
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / document.file_name
        path.write_bytes(document.content)

        with session_scope() as session:
            record = DocumentOperations.create_document(
                session,
                document_id=document.document_id,
                file_name=document.file_name,
                storage_path=str(path.resolve()),
                file_format=document.format,
                mime_type=mime_type,
                file_size=document.file_size,
                upload_metadata=document.metadata,
            )
            document.uploaded_at = record.uploaded_at
        return document

    def load_output(self, locator: str) -> bytes:
        return Path(locator).read_bytes()


# ==============================================================================
# TAXONOMY
# ==============================================================================

class SqlTaxonomyStore(TaxonomyStore):
    """
    Taxonomy store over the taxonomies and taxonomy_mappings tables.

    Lookup rules are shared with InMemoryTaxonomyStore; only storage
    differs.
    """

    def find_exact(self, label, sector=None, statement_kind=None):
        key = (label or '').strip()
        if not key:
            return None

        with session_scope() as session:
            record = TaxonomyOperations.find_mapping(session, key)
            mapping = TaxonomyOperations.to_mapping(record) if record else None
            mapping = select_learned(mapping, sector, statement_kind)
            if mapping is not None:
                return MatchCandidate.from_learned(mapping, stage='exact')

            for record in TaxonomyOperations.all_concepts(session):
                concept = TaxonomyOperations.to_concept(record)
                if concept_is_exact_hit(concept, key):
                    return MatchCandidate.from_concept(
                        concept, DIRECT_TAXONOMY_CONFIDENCE, MatchMethod.EXACT, stage='exact'
                    )
        return None

    def find_candidates(self, label, sector=None, statement_kind=None,
                        limit=FUZZY_CANDIDATE_LIMIT):
        return shortlist_concepts(self.all_concepts(), label, sector, statement_kind, limit)

    def upsert_learned_mapping(self, label, tag, confidence, method,
                               framework=None, sector=None, statement_kind=None):
        key = (label or '').strip()
        if not key:
            raise ValueError('Source label must not be empty')

        with session_scope() as session:
            concept_record = TaxonomyOperations.find_concept_by_tag(session, tag)
            if concept_record is None:
                raise ValueError(f"Taxonomy entry not found for tag: {tag}")
            concept = TaxonomyOperations.to_concept(concept_record)

            candidate = LearnedMapping(
                source_label=key,
                tag=tag,
                confidence=int(confidence),
                method=MatchMethod(method),
                framework=framework or concept.framework,
                concept=concept.concept,
                sector=sector,
                statement_kind=kind_value(statement_kind),
            )
            record, _ = TaxonomyOperations.upsert_mapping(session, candidate)
            return TaxonomyOperations.to_mapping(record)

    def mappings_for_sector(self, sector, statement_kind=None):
        kind = kind_value(statement_kind)
        with session_scope() as session:
            by_tag = {
                record.tag: record for record in TaxonomyOperations.all_concepts(session)
            }
            selected = []
            for record in TaxonomyOperations.active_mappings(session):
                concept = by_tag.get(record.tag)
                if concept is None or concept.sector != sector:
                    continue
                if kind and concept.statement_kind != kind:
                    continue
                selected.append(TaxonomyOperations.to_mapping(record))
        return selected

    def all_concepts(self):
        with session_scope() as session:
            return [
                TaxonomyOperations.to_concept(record)
                for record in TaxonomyOperations.all_concepts(session)
            ]


__all__ = ['SqlJobStore', 'SqlDocumentStore', 'SqlTaxonomyStore']
