# Path: doc2xbrl/tests/unit/test_orchestrator.py
"""
Unit Tests for ConversionOrchestrator

Tests the five-step pipeline, failure classification, automatic retries
and cancellation.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fixtures.sample_documents import BALANCE_SHEET_CSV


STEPS = [
    'retrieving_document',
    'parsing_document',
    'taxonomy_mapping',
    'generating_xbrl',
    'saving_results',
]


class Pipeline:
    """Orchestrator wired to in-memory stores."""

    def __init__(self, scheduler, retry_policy, config, matcher=None):
        from process.jobs.orchestrator import ConversionOrchestrator
        from process.jobs.stores import InMemoryDocumentStore, InMemoryJobStore
        from process.matcher import TaxonomyMatcher
        from process.matcher.stores.taxonomy_store import InMemoryTaxonomyStore
        from parsers.registry import ParserRegistry
        from output.xbrl.generator import XBRLGenerator

        self.scheduler = scheduler
        self.documents = InMemoryDocumentStore()
        self.jobs = InMemoryJobStore()
        self.orchestrator = ConversionOrchestrator(
            document_store=self.documents,
            job_store=self.jobs,
            registry=ParserRegistry.default(),
            matcher=matcher or TaxonomyMatcher(InMemoryTaxonomyStore(), max_workers=1),
            generator=XBRLGenerator(),
            scheduler=scheduler,
            retry_policy=retry_policy,
            config=config,
        )

    def submit(self, content, file_name, format=''):
        from process.jobs.models import ConversionOptions

        document = self.documents.add(content, file_name, format)
        return self.orchestrator.submit(document.document_id, ConversionOptions())


@pytest.fixture
def pipeline(recording_scheduler, retry_policy, mock_config):
    return Pipeline(recording_scheduler, retry_policy, mock_config)


def _steps(job):
    return [(entry.step, entry.status.value) for entry in job.processing_log]


class TestSuccessfulConversion:
    """Test a conversion that completes on the first attempt."""

    def test_submit_returns_pending_job(self, pipeline):
        from constants import JobStatus

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')

        assert job.status == JobStatus.PENDING
        assert job.progress == 0
        assert len(pipeline.scheduler.submitted) == 1

    def test_completes(self, pipeline):
        from constants import JobStatus

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert job.retry_count == 0
        assert job.error_message is None
        assert job.started_at is not None
        assert job.completed_at is not None
        assert job.output_locator == f'memory://outputs/{job.id}.xbrl'
        assert pipeline.scheduler.delays == []

    def test_output_metadata(self, pipeline):
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()
        metadata = pipeline.orchestrator.get_job(job.id).output_metadata

        assert metadata['total_facts'] == 2
        assert metadata['currencies'] == ['USD']
        assert metadata['matching']['total_items'] == 2
        assert metadata['matching']['matched'] == 2
        assert 'parser_warnings' in metadata

    def test_processing_log(self, pipeline):
        """Every step is logged as started then completed, in order."""
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        expected = []
        for step in STEPS:
            expected += [(step, 'started'), (step, 'completed')]
        assert _steps(job) == expected
        assert {entry.attempt for entry in job.processing_log} == {1}

        details = {e.step: e.details for e in job.processing_log if e.status.value == 'completed'}
        assert details['parsing_document']['parser'] == 'CsvParser'
        assert details['parsing_document']['total_items'] == 2
        assert details['taxonomy_mapping']['mapped_items'] == 2
        assert details['generating_xbrl']['facts_count'] == 2
        assert details['saving_results']['output_locator'] == job.output_locator

    def test_format_from_file_name(self, pipeline):
        """Documents without a declared format are resolved by extension."""
        from constants import JobStatus

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv')
        pipeline.scheduler.run_all()

        assert pipeline.orchestrator.get_job(job.id).status == JobStatus.COMPLETED

    def test_fetch_output(self, pipeline):
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()

        output = pipeline.orchestrator.fetch_output(job.id)

        assert output.startswith(b'<?xml')
        assert b'us-gaap:Assets' in output

    def test_default_options_from_config(self, pipeline):
        from constants import Framework

        document = pipeline.documents.add(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        job = pipeline.orchestrator.submit(document.document_id)

        assert job.options.target_framework == Framework.US_GAAP
        assert job.options.sector == 'all'


class TestPermanentFailures:
    """Test failures that are never retried."""

    def test_missing_document(self, pipeline):
        from constants import FailureKind, JobStatus

        job = pipeline.orchestrator.submit('missing-doc')
        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert job.status == JobStatus.FAILED
        assert job.retry_count == 0
        assert job.error_message == 'Document not found: missing-doc'
        assert job.failure_kind == FailureKind.PERMANENT
        assert pipeline.scheduler.delays == []
        assert _steps(job) == [
            ('retrieving_document', 'started'),
            ('retrieving_document', 'failed'),
        ]
        assert job.processing_log[-1].error == 'Document not found: missing-doc'

    def test_unsupported_format(self, pipeline):
        from constants import FailureKind, JobStatus

        job = pipeline.submit(b'abc', 'notes.odt')
        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert job.status == JobStatus.FAILED
        assert job.failure_kind == FailureKind.PERMANENT
        assert job.error_message == 'No parser available for format: notes.odt'
        assert job.progress == 10

    def test_manual_retry_after_upload(self, pipeline):
        """A job failed for a missing document succeeds once it exists."""
        from constants import JobStatus

        job = pipeline.orchestrator.submit('late-doc')
        pipeline.scheduler.run_all()
        pipeline.documents.add(BALANCE_SHEET_CSV, 'balance.csv', 'csv', document_id='late-doc')

        retried = pipeline.orchestrator.retry_job(job.id)
        assert retried.status == JobStatus.PENDING
        assert retried.retry_count == 1
        assert retried.error_message is None

        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)
        assert job.status == JobStatus.COMPLETED
        assert {entry.attempt for entry in job.processing_log} == {1, 2}


class TestTransientFailures:
    """Test automatic retries."""

    def test_first_failure_is_rescheduled(self, pipeline):
        from constants import FailureKind, JobStatus

        job = pipeline.submit(b'', 'empty.csv', 'csv')
        pipeline.scheduler.submitted.pop(0)()
        job = pipeline.orchestrator.get_job(job.id)

        assert job.status == JobStatus.PENDING
        assert job.retry_count == 1
        assert job.progress == 0
        assert job.failure_kind == FailureKind.TRANSIENT
        assert job.error_message.startswith('Retrying (attempt 1/3): Parsing failed')
        assert pipeline.scheduler.delays == [2.0]

    def test_retry_ceiling(self, pipeline):
        """Three retries with linear delays, then the job fails."""
        from constants import FailureKind, JobStatus

        job = pipeline.submit(b'', 'empty.csv', 'csv')
        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert pipeline.scheduler.delays == [2.0, 4.0, 6.0]
        assert job.status == JobStatus.FAILED
        assert job.retry_count == 3
        assert job.failure_kind == FailureKind.TRANSIENT
        assert job.error_message.startswith('Parsing failed')
        assert {entry.attempt for entry in job.processing_log} == {1, 2, 3, 4}

    def test_manual_retry_at_ceiling(self, pipeline):
        from core.errors import RetryLimitError

        job = pipeline.submit(b'', 'empty.csv', 'csv')
        pipeline.scheduler.run_all()

        with pytest.raises(RetryLimitError):
            pipeline.orchestrator.retry_job(job.id)

    def test_unexpected_error(self, recording_scheduler, mock_config):
        """Errors outside the conversion hierarchy are transient."""
        from process.jobs.retry_policy import RetryPolicy
        from constants import FailureKind, JobStatus

        matcher = MagicMock()
        matcher.apply_matches.side_effect = RuntimeError('boom')
        pipeline = Pipeline(recording_scheduler, RetryPolicy(max_retries=1, base_delay=0.5),
                            mock_config, matcher=matcher)

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        recording_scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert recording_scheduler.delays == [0.5]
        assert job.status == JobStatus.FAILED
        assert job.retry_count == 1
        assert job.error_message == 'boom'
        assert job.failure_kind == FailureKind.TRANSIENT
        assert job.progress == 30


class TestCancellation:
    """Test cancelling jobs."""

    def test_cancel_pending(self, pipeline):
        from constants import FailureKind, JobStatus

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        cancelled = pipeline.orchestrator.cancel_job(job.id)

        assert cancelled.status == JobStatus.FAILED
        assert cancelled.error_message == 'cancelled by user'
        assert cancelled.failure_kind == FailureKind.CANCELLED

        pipeline.scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)
        assert job.is_cancelled
        assert job.processing_log == []

    def test_cancel_while_processing(self, recording_scheduler, retry_policy, mock_config):
        """A job cancelled mid-run is not completed and not retried."""
        from process.matcher.models.summary import MatchingSummary
        from constants import JobStatus

        matcher = MagicMock()
        pipeline = Pipeline(recording_scheduler, retry_policy, mock_config, matcher=matcher)
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')

        def cancel_during_matching(report, sector):
            pipeline.orchestrator.cancel_job(job.id)
            return MatchingSummary()

        matcher.apply_matches.side_effect = cancel_during_matching
        recording_scheduler.run_all()
        job = pipeline.orchestrator.get_job(job.id)

        assert job.status == JobStatus.FAILED
        assert job.error_message == 'cancelled by user'
        assert job.progress == 30
        assert job.output_locator is None
        assert recording_scheduler.delays == []
        assert _steps(job)[-1] == ('parsing_document', 'completed')

    def test_cancel_finished(self, pipeline):
        from core.errors import JobStateError

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()

        with pytest.raises(JobStateError):
            pipeline.orchestrator.cancel_job(job.id)


class TestJobApiErrors:
    """Test invalid requests."""

    @pytest.mark.parametrize('method', ['get_job', 'retry_job', 'cancel_job', 'fetch_output'])
    def test_unknown_job(self, pipeline, method):
        from core.errors import JobNotFoundError

        with pytest.raises(JobNotFoundError, match='Job not found: nope'):
            getattr(pipeline.orchestrator, method)('nope')

    def test_retry_completed(self, pipeline):
        from core.errors import JobStateError

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()

        with pytest.raises(JobStateError):
            pipeline.orchestrator.retry_job(job.id)

    def test_fetch_output_not_completed(self, pipeline):
        from core.errors import JobStateError

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')

        with pytest.raises(JobStateError, match='pending'):
            pipeline.orchestrator.fetch_output(job.id)

    def test_run_finished_job_is_noop(self, pipeline):
        from constants import JobStatus

        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()
        pipeline.orchestrator.run_job(job.id)
        pipeline.orchestrator.run_job('unknown')

        job = pipeline.orchestrator.get_job(job.id)
        assert job.status == JobStatus.COMPLETED
        assert len(job.processing_log) == 2 * len(STEPS)

    def test_run_locks_released_after_attempts(self, pipeline):
        """No per-job lock outlives the attempt that took it."""
        completed = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        failed = pipeline.submit(b'', 'empty.csv', 'csv')

        pipeline.scheduler.submitted.pop(0)()
        assert pipeline.orchestrator._run_locks == {}

        pipeline.scheduler.run_all()
        pipeline.orchestrator.run_job(completed.id)

        assert pipeline.orchestrator.get_job(failed.id).retry_count == 3
        assert pipeline.orchestrator._run_locks == {}

    def test_running_job_holds_lock(self, pipeline):
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        lock = pipeline.orchestrator._run_lock(job.id)
        lock.acquire()
        try:
            pipeline.orchestrator.run_job(job.id)
            assert pipeline.orchestrator.get_job(job.id).progress == 0
        finally:
            pipeline.orchestrator._release_run_lock(job.id, lock)

        assert pipeline.orchestrator._run_locks == {}


class TestJobQueries:
    """Test statistics, history and cleanup."""

    def test_pending_and_stats(self, pipeline):
        first = pipeline.submit(BALANCE_SHEET_CSV, 'a.csv', 'csv')
        pipeline.scheduler.run_all()
        second = pipeline.submit(BALANCE_SHEET_CSV, 'b.csv', 'csv')

        assert [j.id for j in pipeline.orchestrator.pending_jobs()] == [second.id]
        assert pipeline.orchestrator.job_stats() == {
            'pending': 1, 'processing': 0, 'completed': 1, 'failed': 0, 'total': 2,
        }
        assert first.id != second.id

    def test_history(self, pipeline):
        job = pipeline.submit(BALANCE_SHEET_CSV, 'balance.csv', 'csv')
        pipeline.scheduler.run_all()

        history = pipeline.orchestrator.conversion_history()

        assert len(history) == 1
        assert history[0]['job_id'] == job.id
        assert history[0]['file_name'] == 'balance.csv'
        assert history[0]['file_format'] == 'csv'
        assert history[0]['status'] == 'completed'
        assert history[0]['completed_at'] is not None

    def test_cleanup_uses_retention(self, pipeline):
        """Finished jobs older than the retention window are deleted."""
        old = pipeline.submit(BALANCE_SHEET_CSV, 'old.csv', 'csv')
        recent = pipeline.submit(BALANCE_SHEET_CSV, 'new.csv', 'csv')
        pipeline.scheduler.run_all()
        pipeline.jobs.update(old.id, created_at=datetime.utcnow() - timedelta(days=40))

        assert pipeline.orchestrator.cleanup_old_jobs() == 1
        assert pipeline.jobs.get(old.id) is None
        assert pipeline.jobs.get(recent.id) is not None
