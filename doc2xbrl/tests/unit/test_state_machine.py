# Path: doc2xbrl/tests/unit/test_state_machine.py
"""
Unit Tests for JobStateMachine

Tests allowed transitions, retry and cancellation checks.
"""

import sys
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


@pytest.fixture
def machine():
    from process.jobs.state_machine import JobStateMachine
    return JobStateMachine(max_retries=3)


def _job(status, retry_count=0):
    from process.jobs.models import ConversionJob
    return ConversionJob(id='job-1', document_id='doc-1', status=status, retry_count=retry_count)


class TestTransitions:
    """Test the transition table."""

    @pytest.mark.parametrize('current,target,allowed', [
        ('pending', 'processing', True),
        ('pending', 'failed', True),
        ('processing', 'completed', True),
        ('processing', 'failed', True),
        ('failed', 'pending', True),
        ('pending', 'completed', False),
        ('completed', 'pending', False),
        ('completed', 'failed', False),
        ('failed', 'processing', False),
    ])
    def test_can_transition(self, machine, current, target, allowed):
        from constants import JobStatus

        assert machine.can_transition(JobStatus(current), JobStatus(target)) is allowed

    def test_check_path(self, machine):
        """A whole path is validated step by step."""
        from constants import JobStatus

        machine.check(JobStatus.PROCESSING, JobStatus.FAILED, JobStatus.PENDING)

    def test_check_rejects(self, machine):
        from constants import JobStatus
        from core.errors import JobStateError

        with pytest.raises(JobStateError, match='completed -> pending'):
            machine.check(JobStatus.COMPLETED, JobStatus.PENDING)


class TestRetryChecks:
    """Test manual retry validation."""

    def test_failed_job_with_retries_left(self, machine):
        from constants import JobStatus

        job = _job(JobStatus.FAILED, retry_count=2)

        machine.check_retry(job)
        assert machine.retries_left(job) == 1

    def test_only_failed_jobs(self, machine):
        from constants import JobStatus
        from core.errors import JobStateError, RetryLimitError

        with pytest.raises(JobStateError) as excinfo:
            machine.check_retry(_job(JobStatus.COMPLETED))
        assert not isinstance(excinfo.value, RetryLimitError)

    def test_ceiling(self, machine):
        from constants import JobStatus
        from core.errors import RetryLimitError

        job = _job(JobStatus.FAILED, retry_count=3)

        with pytest.raises(RetryLimitError, match='3/3'):
            machine.check_retry(job)
        assert machine.retries_left(job) == 0


class TestCancelChecks:
    """Test cancellation validation."""

    @pytest.mark.parametrize('status', ['pending', 'processing'])
    def test_cancellable(self, machine, status):
        from constants import JobStatus

        machine.check_cancel(_job(JobStatus(status)))

    @pytest.mark.parametrize('status', ['completed', 'failed'])
    def test_finished_jobs(self, machine, status):
        from constants import JobStatus
        from core.errors import JobStateError

        with pytest.raises(JobStateError):
            machine.check_cancel(_job(JobStatus(status)))

    def test_default_ceiling_from_config(self, mock_env_vars, reset_singletons):
        from process.jobs.state_machine import JobStateMachine

        assert JobStateMachine().max_retries == 3
