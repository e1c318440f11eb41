# Path: doc2xbrl/process/jobs/orchestrator.py
"""
Conversion Orchestrator

Runs conversion jobs through five sequential steps:

    retrieving_document  -> 10%
    parsing_document     -> 30%
    taxonomy_mapping     -> 60%
    generating_xbrl      -> 80%
    saving_results       -> 100%

Each step writes 'started' and then 'completed' or 'failed' to the job's
processing log. Step exceptions are caught at the job boundary and
classified by RetryPolicy: permanent failures end the job, transient ones
go back to pending and are rescheduled until the retry ceiling.

A cancelled job keeps its cancelled state: the running attempt checks
for cancellation before each step and before recording completion.
"""

import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from config_loader import ConfigLoader
from constants import (
    CANCELLED_MESSAGE,
    ConversionStep,
    FailureKind,
    Framework,
    JobStatus,
    STEP_PROGRESS,
    StepStatus,
)
from core.errors import (
    ConversionError,
    DocumentNotFoundError,
    JobCancelledError,
    JobNotFoundError,
    JobStateError,
    ParseFailedError,
    UnsupportedFormatError,
)
from core.logger.ipo_logging import get_process_logger
from output.xbrl.generator import GenerationOptions, GenerationResult, XBRLGenerator
from parsers.models.canonical import CanonicalReport
from parsers.registry import ParserRegistry

from ..matcher.engine.coordinator import TaxonomyMatcher
from ..matcher.models.summary import MatchingSummary
from .models import ConversionJob, ConversionOptions, ProcessingLogEntry, SourceDocument
from .retry_policy import RetryPolicy, classify_failure
from .scheduler import TaskScheduler
from .state_machine import JobStateMachine
from .stores import DocumentStore, JobStore


class _Attempt:
    """State of one processing attempt."""

    def __init__(self, job: ConversionJob):
        self.job_id = job.id
        self.number = job.retry_count + 1
        self.options = job.options
        self.log: list[ProcessingLogEntry] = list(job.processing_log)
        self.document: Optional[SourceDocument] = None
        self.report: Optional[CanonicalReport] = None
        self.summary: Optional[MatchingSummary] = None
        self.result: Optional[GenerationResult] = None
        self.locator: Optional[str] = None


class ConversionOrchestrator:
    """
    Drives conversion jobs from pending to completed or failed.

    Example:
        orchestrator = ConversionOrchestrator(
            document_store=InMemoryDocumentStore(),
            job_store=InMemoryJobStore(),
            registry=ParserRegistry.default(),
            matcher=TaxonomyMatcher(InMemoryTaxonomyStore()),
            generator=XBRLGenerator(),
            scheduler=InlineScheduler(),
        )
        job = orchestrator.submit(document_id, ConversionOptions())
    """

    def __init__(
        self,
        document_store: DocumentStore,
        job_store: JobStore,
        registry: ParserRegistry,
        matcher: TaxonomyMatcher,
        generator: XBRLGenerator,
        scheduler: TaskScheduler,
        retry_policy: Optional[RetryPolicy] = None,
        config: Optional[ConfigLoader] = None
    ):
        """
        Initialize orchestrator.

        Args:
            document_store: Source documents and outputs
            job_store: Job persistence
            registry: Parser registry
            matcher: Taxonomy matcher
            generator: XBRL generator
            scheduler: Where attempts run
            retry_policy: Retry ceiling and delays (default: from config)
            config: ConfigLoader (default: shared instance)
        """
        self.config = config or ConfigLoader()
        self.documents = document_store
        self.jobs = job_store
        self.registry = registry
        self.matcher = matcher
        self.generator = generator
        self.scheduler = scheduler
        self.retry_policy = retry_policy or RetryPolicy()
        self.state_machine = JobStateMachine(self.retry_policy.max_retries)
        self.logger = get_process_logger('jobs.orchestrator')

        # Serializes read-check-write sequences on job state
        self._state_lock = threading.RLock()
        # One running attempt per job
        self._run_locks: dict[str, threading.Lock] = {}
        self._run_locks_guard = threading.Lock()

    # ==========================================================================
    # JOB API
    # ==========================================================================

    def submit(self, document_id: str, options: Optional[ConversionOptions] = None) -> ConversionJob:
        """
        Create a job and hand it to the scheduler.

        Args:
            document_id: Id of the source document
            options: Conversion options (default: from config)

        Returns:
            The job as created (status pending)
        """
        options = options or ConversionOptions.from_config(self.config)
        job = self.jobs.create(document_id, options)
        self.logger.info(f"Created job {job.id} for document {document_id}")
        self._enqueue(job.id)
        return job

    def get_job(self, job_id: str) -> ConversionJob:
        """
        Load a job.

        Raises:
            JobNotFoundError: Unknown job id
        """
        job = self.jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def retry_job(self, job_id: str) -> ConversionJob:
        """
        Manually retry a failed job.

        Raises:
            JobNotFoundError: Unknown job id
            JobStateError: Job is not failed
            RetryLimitError: Job has reached the retry ceiling
        """
        with self._state_lock:
            job = self.get_job(job_id)
            self.state_machine.check_retry(job)
            self.state_machine.check(job.status, JobStatus.PENDING)
            job = self.jobs.update(
                job_id,
                status=JobStatus.PENDING,
                progress=0,
                retry_count=job.retry_count + 1,
                error_message=None,
                failure_kind=None,
            )

        self.logger.info(f"Manual retry of job {job_id} (attempt {job.retry_count + 1})")
        self._enqueue(job_id)
        return job

    def cancel_job(self, job_id: str) -> ConversionJob:
        """
        Cancel a pending or processing job.

        Raises:
            JobNotFoundError: Unknown job id
            JobStateError: Job is already completed or failed
        """
        with self._state_lock:
            job = self.get_job(job_id)
            self.state_machine.check_cancel(job)
            job = self.jobs.update(
                job_id,
                status=JobStatus.FAILED,
                error_message=CANCELLED_MESSAGE,
                failure_kind=FailureKind.CANCELLED,
            )

        self.logger.info(f"Cancelled job {job_id}")
        return job

    def fetch_output(self, job_id: str) -> bytes:
        """
        Generated instance of a completed job.

        Raises:
            JobNotFoundError: Unknown job id
            JobStateError: Job is not completed
        """
        job = self.get_job(job_id)
        if job.status != JobStatus.COMPLETED or not job.output_locator:
            raise JobStateError(f"Job {job_id} is {job.status.value}; no output available")
        return self.documents.load_output(job.output_locator)

    def pending_jobs(self, limit: int = 10) -> list[ConversionJob]:
        """Pending jobs, oldest first."""
        return self.jobs.list_pending(limit)

    def job_stats(self) -> dict[str, int]:
        """Job counts per status plus a total."""
        counts = self.jobs.count_by_status()
        stats = {status.value: counts.get(status.value, 0) for status in JobStatus}
        stats['total'] = sum(stats.values())
        return stats

    def cleanup_old_jobs(self, days: Optional[int] = None) -> int:
        """
        Delete completed and failed jobs older than `days`.

        Args:
            days: Age limit (default: config job_retention_days)

        Returns:
            Number of deleted jobs
        """
        if days is None:
            days = self.config.get('job_retention_days')
        cutoff = datetime.utcnow() - timedelta(days=days)
        deleted = self.jobs.delete_finished_before(cutoff)
        self.logger.info(f"Cleaned up {deleted} jobs older than {days} days")
        return deleted

    def conversion_history(self, limit: int = 20) -> list[dict[str, Any]]:
        """
        Recent jobs with their source document names, newest first.

        Returns:
            List of dictionaries
        """
        history = []
        for job in self.jobs.list_recent(limit):
            document = self.documents.retrieve(job.document_id)
            history.append({
                'job_id': job.id,
                'document_id': job.document_id,
                'file_name': document.file_name if document else None,
                'file_format': document.format if document else None,
                'status': job.status.value,
                'progress': job.progress,
                'retry_count': job.retry_count,
                'error_message': job.error_message,
                'output_locator': job.output_locator,
                'created_at': job.created_at.isoformat(),
                'completed_at': job.completed_at.isoformat() if job.completed_at else None,
            })
        return history

    # ==========================================================================
    # ATTEMPT EXECUTION
    # ==========================================================================

    def run_job(self, job_id: str) -> None:
        """
        Run one processing attempt of a pending job.

        A no-op when the job is unknown, not pending, or already being run
        by another worker.
        """
        run_lock = self._run_lock(job_id)
        if not run_lock.acquire(blocking=False):
            self.logger.debug(f"Job {job_id} is already running")
            return

        retry_delay = None
        try:
            attempt = self._begin(job_id)
            if attempt is None:
                return
            try:
                self._execute(attempt)
            except Exception as e:
                retry_delay = self._handle_failure(attempt, e)
        finally:
            self._release_run_lock(job_id, run_lock)

        if retry_delay is not None:
            self.scheduler.schedule(retry_delay, lambda: self.run_job(job_id))

    def _begin(self, job_id: str) -> Optional[_Attempt]:
        with self._state_lock:
            job = self.jobs.get(job_id)
            if job is None:
                self.logger.warning(f"Job {job_id} no longer exists")
                return None
            if job.status != JobStatus.PENDING:
                self.logger.debug(f"Job {job_id} is {job.status.value}, nothing to run")
                return None
            self.state_machine.check(job.status, JobStatus.PROCESSING)
            job = self.jobs.update(
                job_id,
                status=JobStatus.PROCESSING,
                progress=0,
                failure_kind=None,
            )

        attempt = _Attempt(job)
        self.logger.info(f"Processing job {job_id} (attempt {attempt.number})")
        return attempt

    def _execute(self, attempt: _Attempt) -> None:
        self._run_step(attempt, ConversionStep.RETRIEVE, self._retrieve)
        self._run_step(attempt, ConversionStep.PARSE, self._parse)
        self._run_step(attempt, ConversionStep.MATCH, self._match)
        self._run_step(attempt, ConversionStep.GENERATE, self._generate)
        self._run_step(attempt, ConversionStep.PERSIST, self._persist)
        self._complete(attempt)

    def _run_step(
        self,
        attempt: _Attempt,
        step: ConversionStep,
        action: Callable[[_Attempt], dict]
    ) -> None:
        self._check_cancelled(attempt)
        self._log(attempt, step, StepStatus.STARTED)

        try:
            details = action(attempt)
        except Exception as e:
            self._log(attempt, step, StepStatus.FAILED, error=str(e))
            raise

        self._log(attempt, step, StepStatus.COMPLETED, details=details)
        with self._state_lock:
            self._check_cancelled(attempt)
            self.jobs.update(
                attempt.job_id,
                progress=STEP_PROGRESS[step],
                processing_log=list(attempt.log),
            )
        self.logger.debug(f"Job {attempt.job_id}: {step.value} done ({STEP_PROGRESS[step]}%)")

    def _log(
        self,
        attempt: _Attempt,
        step: ConversionStep,
        status: StepStatus,
        details: Optional[dict] = None,
        error: Optional[str] = None
    ) -> None:
        attempt.log.append(ProcessingLogEntry(
            step=step.value,
            timestamp=datetime.utcnow(),
            status=status,
            details=details or {},
            error=error,
            attempt=attempt.number,
        ))

    def _check_cancelled(self, attempt: _Attempt) -> None:
        job = self.jobs.get(attempt.job_id)
        if job is None or job.is_cancelled:
            raise JobCancelledError(attempt.job_id)

    # ==========================================================================
    # STEPS
    # ==========================================================================

    def _retrieve(self, attempt: _Attempt) -> dict:
        job = self.get_job(attempt.job_id)
        document = self.documents.retrieve(job.document_id)
        if document is None:
            raise DocumentNotFoundError(job.document_id)
        attempt.document = document
        return {
            'document_id': document.document_id,
            'file_name': document.file_name,
            'file_size': document.file_size,
        }

    def _parse(self, attempt: _Attempt) -> dict:
        document = attempt.document
        parser = None
        if document.format:
            parser = self.registry.resolve(document.format, document.mime_type)
        if parser is None:
            parser = self.registry.resolve_for_file(document.file_name, document.mime_type)
        if parser is None:
            raise UnsupportedFormatError(document.format or document.file_name, document.mime_type)

        report = parser.parse(document.content, document.file_name)

        if report.has_critical_errors():
            critical = [e for e in report.metadata.errors if e.is_critical]
            raise ParseFailedError(
                f"Parsing failed: {critical[0].message}",
                issues=report.metadata.errors,
            )
        if not report.statements:
            raise ParseFailedError(
                'No financial data could be extracted from the document',
                issues=report.metadata.errors,
            )

        attempt.report = report
        return {
            'parser': type(parser).__name__,
            'statements_count': len(report.statements),
            'total_items': report.item_count,
            'warnings': len(report.metadata.warnings),
            'errors': len(report.metadata.errors),
        }

    def _match(self, attempt: _Attempt) -> dict:
        summary = self.matcher.apply_matches(attempt.report, attempt.options.sector)
        attempt.summary = summary
        return {
            'total_items': summary.total_items,
            'mapped_items': summary.matched,
            'unmatched_items': summary.unmatched,
            'match_rate': summary.match_rate,
        }

    def _generate(self, attempt: _Attempt) -> dict:
        options = self._generation_options(attempt)
        result = self.generator.generate(attempt.report.statements, options)
        attempt.result = result
        return {
            'facts_count': result.metadata.total_facts,
            'skipped_facts': result.metadata.skipped_facts,
            'frameworks': list(result.metadata.frameworks),
            'validation_issues': len(result.metadata.validation_issues),
        }

    def _persist(self, attempt: _Attempt) -> dict:
        attempt.locator = self.documents.persist(attempt.job_id, attempt.result.document)
        return {
            'output_locator': attempt.locator,
            'output_size': len(attempt.result.document),
        }

    def _generation_options(self, attempt: _Attempt) -> GenerationOptions:
        options = attempt.options
        info = attempt.report.document_info
        document = attempt.document

        framework = options.target_framework
        if not isinstance(framework, Framework):
            framework = Framework.from_value(framework)

        return GenerationOptions(
            framework=framework,
            currency=(
                options.target_currency
                or info.currency
                or self.config.get('default_currency')
            ),
            document_date=info.period_end,
            entity_name=options.company_name or info.company_name or document.file_name,
            entity_identifier=options.entity_identifier or document.document_id,
            entity_scheme=options.entity_scheme or self.config.get('entity_scheme'),
        )

    # ==========================================================================
    # ATTEMPT OUTCOMES
    # ==========================================================================

    def _complete(self, attempt: _Attempt) -> None:
        metadata = attempt.result.metadata.to_dict()
        metadata['matching'] = attempt.summary.to_dict()
        metadata['parser_warnings'] = len(attempt.report.metadata.warnings)

        with self._state_lock:
            self._check_cancelled(attempt)
            self.state_machine.check(JobStatus.PROCESSING, JobStatus.COMPLETED)
            self.jobs.update(
                attempt.job_id,
                status=JobStatus.COMPLETED,
                progress=100,
                output_locator=attempt.locator,
                output_metadata=metadata,
                error_message=None,
                failure_kind=None,
                processing_log=list(attempt.log),
            )

        self.logger.info(
            f"Job {attempt.job_id} completed: {attempt.result.metadata.total_facts} facts, "
            f"{attempt.summary.matched}/{attempt.summary.total_items} items mapped"
        )

    def _handle_failure(self, attempt: _Attempt, error: Exception) -> Optional[float]:
        """
        Record a failed attempt.

        Returns:
            Delay before the automatic retry, None when the job is not retried
        """
        kind = classify_failure(error)
        if kind == FailureKind.CANCELLED:
            self.logger.info(f"Job {attempt.job_id} stopped after cancellation")
            return None

        if isinstance(error, ConversionError):
            self.logger.warning(f"Job {attempt.job_id} attempt {attempt.number} failed: {error}")
        else:
            self.logger.error(
                f"Job {attempt.job_id} attempt {attempt.number} failed unexpectedly: {error}",
                exc_info=True,
            )

        with self._state_lock:
            job = self.jobs.get(attempt.job_id)
            if job is None or job.status != JobStatus.PROCESSING:
                # Cancelled (or deleted) while the step ran
                self.logger.info(f"Job {attempt.job_id} left unchanged after failure")
                return None

            if self.retry_policy.should_retry(job, kind):
                retry_number = job.retry_count + 1
                self.state_machine.check(job.status, JobStatus.FAILED, JobStatus.PENDING)
                self.jobs.update(
                    attempt.job_id,
                    status=JobStatus.PENDING,
                    progress=0,
                    retry_count=retry_number,
                    error_message=self.retry_policy.retry_message(retry_number, error),
                    failure_kind=kind,
                    processing_log=list(attempt.log),
                )
            else:
                retry_number = None
                self.state_machine.check(job.status, JobStatus.FAILED)
                self.jobs.update(
                    attempt.job_id,
                    status=JobStatus.FAILED,
                    error_message=str(error),
                    failure_kind=kind,
                    processing_log=list(attempt.log),
                )

        if retry_number is None:
            self.logger.error(f"Job {attempt.job_id} failed ({kind.value}): {error}")
            return None

        delay = self.retry_policy.delay_for(retry_number)
        self.logger.info(
            f"Job {attempt.job_id} retry {retry_number}/{self.retry_policy.max_retries} "
            f"scheduled in {delay:.1f}s"
        )
        return delay

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _enqueue(self, job_id: str) -> None:
        self.scheduler.submit(lambda: self.run_job(job_id))

    def _run_lock(self, job_id: str) -> threading.Lock:
        with self._run_locks_guard:
            lock = self._run_locks.get(job_id)
            if lock is None:
                lock = threading.Lock()
                self._run_locks[job_id] = lock
            return lock

    def _release_run_lock(self, job_id: str, lock: threading.Lock) -> None:
        # Entries exist only while an attempt runs; _begin rechecks the status
        with self._run_locks_guard:
            if self._run_locks.get(job_id) is lock:
                del self._run_locks[job_id]
            lock.release()


__all__ = ['ConversionOrchestrator']
