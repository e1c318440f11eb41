# Path: doc2xbrl/process/jobs/service.py
"""
Conversion Service

Caller-facing API over the orchestrator: upload a document, start a
conversion, poll it, retry or cancel it, and fetch the generated
instance.

initiate_conversion() returns as soon as the job is created; with a
ThreadPoolScheduler the conversion then runs in the background, with an
InlineScheduler it has finished (retries included) by the time the call
returns.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from config_loader import ConfigLoader
from constants import DIRECT_TAXONOMY_CONFIDENCE, JobStatus, MatchMethod, StoreBackend
from core.logger.ipo_logging import get_process_logger
from core.xbrl_constants import framework_for_tag
from output.xbrl.generator import XBRLGenerator
from parsers.models.canonical import TaxonomyMatch
from parsers.registry import ParserRegistry

from ..matcher.engine.coordinator import TaxonomyMatcher
from ..matcher.models.candidates import LearnedMapping
from ..matcher.stores.taxonomy_store import InMemoryTaxonomyStore, TaxonomyStore
from .models import ConversionJob, ConversionOptions
from .orchestrator import ConversionOrchestrator
from .retry_policy import RetryPolicy
from .scheduler import InlineScheduler, TaskScheduler
from .stores import (
    DocumentStore, FileSystemDocumentStore, InMemoryDocumentStore, InMemoryJobStore, JobStore,
)


@dataclass
class ConversionResult:
    """
    Snapshot of a conversion job returned to callers.

    Attributes:
        job_id: Job id
        document_id: Source document id
        status: Job status
        progress: Percentage 0-100
        error: Error message (failed jobs and jobs waiting for a retry)
        output_locator: Where the generated instance is stored
        metadata: Generation and matching metadata of a completed job
    """
    job_id: str
    document_id: str
    status: JobStatus
    progress: int = 0
    retry_count: int = 0
    error: Optional[str] = None
    output_locator: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """Check if the job completed."""
        return self.status == JobStatus.COMPLETED

    @classmethod
    def from_job(cls, job: ConversionJob) -> 'ConversionResult':
        """Build a snapshot from a job."""
        return cls(
            job_id=job.id,
            document_id=job.document_id,
            status=job.status,
            progress=job.progress,
            retry_count=job.retry_count,
            error=job.error_message,
            output_locator=job.output_locator,
            metadata=dict(job.output_metadata),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'success': self.success,
            'job_id': self.job_id,
            'document_id': self.document_id,
            'status': self.status.value,
            'progress': self.progress,
            'retry_count': self.retry_count,
            'error': self.error,
            'output_locator': self.output_locator,
            'metadata': dict(self.metadata),
        }


class ConversionService:
    """
    Document conversion API.

    Example:
        service = ConversionService.in_memory()
        document_id = service.upload_document(content, 'balance.csv')
        result = service.initiate_conversion(document_id)
        status = service.get_status(result.job_id)
        if status.success:
            xml = service.fetch_output(result.job_id)
    """

    def __init__(self, orchestrator: ConversionOrchestrator):
        """
        Initialize service.

        Args:
            orchestrator: Configured orchestrator
        """
        self.orchestrator = orchestrator
        self.logger = get_process_logger('jobs.service')

    @classmethod
    def build(
        cls,
        document_store: DocumentStore,
        job_store: JobStore,
        taxonomy_store: TaxonomyStore,
        scheduler: TaskScheduler,
        registry: Optional[ParserRegistry] = None,
        retry_policy: Optional[RetryPolicy] = None,
        config: Optional[ConfigLoader] = None
    ) -> 'ConversionService':
        """
        Wire a service from its collaborators.

        Args:
            document_store: Source documents and outputs
            job_store: Job persistence
            taxonomy_store: Taxonomy concepts and learned mappings
            scheduler: Where attempts run
            registry: Parser registry (default: all built-in parsers)
            retry_policy: Retry ceiling and delays (default: from config)
            config: ConfigLoader (default: shared instance)

        Returns:
            ConversionService
        """
        config = config or ConfigLoader()
        registry = registry or ParserRegistry.default(config.get('default_currency'))
        orchestrator = ConversionOrchestrator(
            document_store=document_store,
            job_store=job_store,
            registry=registry,
            matcher=TaxonomyMatcher(taxonomy_store),
            generator=XBRLGenerator(),
            scheduler=scheduler,
            retry_policy=retry_policy,
            config=config,
        )
        return cls(orchestrator)

    @classmethod
    def in_memory(
        cls,
        scheduler: Optional[TaskScheduler] = None,
        retry_policy: Optional[RetryPolicy] = None
    ) -> 'ConversionService':
        """Service over in-memory stores (inline scheduler unless given)."""
        return cls.build(
            document_store=InMemoryDocumentStore(),
            job_store=InMemoryJobStore(),
            taxonomy_store=InMemoryTaxonomyStore(),
            scheduler=scheduler or InlineScheduler(),
            retry_policy=retry_policy,
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[ConfigLoader] = None,
        scheduler: Optional[TaskScheduler] = None,
        backend: Optional[str] = None,
        database_url: Optional[str] = None
    ) -> 'ConversionService':
        """
        Service over the stores selected by configuration.

        Args:
            config: ConfigLoader (default: shared instance)
            scheduler: Where attempts run (default: inline)
            backend: StoreBackend value (default: config store_backend)
            database_url: Database URL for the database backend
                          (default: config connection string)

        Returns:
            ConversionService

        Raises:
            ValueError: Unknown backend
        """
        config = config or ConfigLoader()
        scheduler = scheduler or InlineScheduler()
        backend = StoreBackend(backend or config.get('store_backend') or StoreBackend.MEMORY.value)
        storage_dir = config.get('storage_dir')

        if backend == StoreBackend.DATABASE:
            from database import initialize_database, session_scope
            from database.integration.sql_stores import (
                SqlDocumentStore, SqlJobStore, SqlTaxonomyStore,
            )
            from database.operations.taxonomy_ops import TaxonomyOperations

            initialize_database(database_url)
            with session_scope() as session:
                TaxonomyOperations.seed_default_taxonomy(session)
            document_store = SqlDocumentStore(storage_dir)
            job_store = SqlJobStore()
            taxonomy_store = SqlTaxonomyStore()

        elif backend == StoreBackend.FILESYSTEM:
            document_store = FileSystemDocumentStore(storage_dir)
            job_store = InMemoryJobStore()
            taxonomy_store = InMemoryTaxonomyStore()

        else:
            document_store = InMemoryDocumentStore()
            job_store = InMemoryJobStore()
            taxonomy_store = InMemoryTaxonomyStore()

        get_process_logger('jobs.service').info(f"Using {backend.value} stores")
        return cls.build(
            document_store=document_store,
            job_store=job_store,
            taxonomy_store=taxonomy_store,
            scheduler=scheduler,
            config=config,
        )

    @property
    def documents(self) -> DocumentStore:
        """Document store used by the service."""
        return self.orchestrator.documents

    # ==========================================================================
    # DOCUMENTS
    # ==========================================================================

    def upload_document(
        self,
        content: bytes,
        file_name: str,
        format: str = '',
        mime_type: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> str:
        """
        Register a source document.

        Returns:
            Document id
        """
        document = self.documents.add(
            content, file_name, format=format, mime_type=mime_type, metadata=metadata
        )
        self.logger.info(f"Uploaded {file_name} as document {document.document_id}")
        return document.document_id

    # ==========================================================================
    # JOBS
    # ==========================================================================

    def initiate_conversion(
        self,
        document_id: str,
        options: Optional[ConversionOptions] = None
    ) -> ConversionResult:
        """
        Start converting a document.

        Args:
            document_id: Source document id
            options: Conversion options (default: from config)

        Returns:
            Snapshot of the job right after submission
        """
        job = self.orchestrator.submit(document_id, options)
        return self.get_status(job.id)

    def get_status(self, job_id: str) -> ConversionResult:
        """
        Current state of a job.

        Raises:
            JobNotFoundError: Unknown job id
        """
        return ConversionResult.from_job(self.orchestrator.get_job(job_id))

    def get_job(self, job_id: str) -> ConversionJob:
        """Full job record including the processing log."""
        return self.orchestrator.get_job(job_id)

    def retry_job(self, job_id: str) -> ConversionResult:
        """
        Retry a failed job.

        Raises:
            JobStateError: Job is not failed
            RetryLimitError: Retry ceiling reached
        """
        self.orchestrator.retry_job(job_id)
        return self.get_status(job_id)

    def cancel_job(self, job_id: str) -> ConversionResult:
        """
        Cancel a pending or processing job.

        Raises:
            JobStateError: Job is already finished
        """
        return ConversionResult.from_job(self.orchestrator.cancel_job(job_id))

    def fetch_output(self, job_id: str) -> bytes:
        """
        Generated instance document of a completed job.

        Raises:
            JobStateError: Job is not completed
        """
        return self.orchestrator.fetch_output(job_id)

    # ==========================================================================
    # MAPPINGS
    # ==========================================================================

    def confirm_mapping(
        self,
        label: str,
        tag: str,
        confidence: int = DIRECT_TAXONOMY_CONFIDENCE,
        sector: Optional[str] = None,
        statement_kind: Optional[str] = None
    ) -> LearnedMapping:
        """
        Teach the taxonomy store that `label` reports `tag`.

        Later conversions match the label exactly through the learned
        mapping.

        Raises:
            ValueError: Tag is not in the taxonomy
        """
        match = TaxonomyMatch(
            tag=tag,
            framework=framework_for_tag(tag),
            confidence=confidence,
            method=MatchMethod.MANUAL,
        )
        return self.orchestrator.matcher.confirm_match(label, match, sector, statement_kind)

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    def pending_jobs(self, limit: int = 10) -> list[ConversionResult]:
        """Pending jobs, oldest first."""
        return [ConversionResult.from_job(j) for j in self.orchestrator.pending_jobs(limit)]

    def job_stats(self) -> dict[str, int]:
        """Job counts per status plus a total."""
        return self.orchestrator.job_stats()

    def cleanup_old_jobs(self, days: Optional[int] = None) -> int:
        """Delete finished jobs older than `days`."""
        return self.orchestrator.cleanup_old_jobs(days)

    def conversion_history(self, limit: int = 20) -> list[dict[str, Any]]:
        """Recent jobs with their document names."""
        return self.orchestrator.conversion_history(limit)

    def supported_formats(self) -> list[str]:
        """Format ids accepted by the parser registry."""
        return self.orchestrator.registry.supported_formats()


__all__ = ['ConversionResult', 'ConversionService']
