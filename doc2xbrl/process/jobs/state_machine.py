# Path: doc2xbrl/process/jobs/state_machine.py
"""
Job State Machine

Allowed status transitions:

    pending    -> processing          (worker picks the job up)
    processing -> completed | failed  (attempt ends)
    failed     -> pending             (retry, while retry_count < ceiling)
    pending    -> failed              (cancellation)

Cancellation of a processing job is the forced processing -> failed
transition; it is allowed like any other failure.
"""

from typing import Optional

from config_loader import ConfigLoader
from constants import JobStatus
from core.errors import JobStateError, RetryLimitError

from .models import ConversionJob


TRANSITIONS: dict[JobStatus, frozenset] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.FAILED: frozenset({JobStatus.PENDING}),
    JobStatus.COMPLETED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({JobStatus.PENDING, JobStatus.PROCESSING})


class JobStateMachine:
    """
    Validates job status transitions.

    Example:
        machine = JobStateMachine(max_retries=3)
        machine.check(job.status, JobStatus.PROCESSING)
        machine.check_retry(job)
    """

    def __init__(self, max_retries: Optional[int] = None):
        """
        Initialize state machine.

        Args:
            max_retries: Retry ceiling (default: config max_retries)
        """
        if max_retries is None:
            max_retries = ConfigLoader().get('max_retries')
        self.max_retries = max_retries

    def can_transition(self, current: JobStatus, target: JobStatus) -> bool:
        """Check if current -> target is allowed."""
        return target in TRANSITIONS.get(current, frozenset())

    def check(self, current: JobStatus, *targets: JobStatus) -> None:
        """
        Validate a path of transitions starting at `current`.

        Raises:
            JobStateError: Some transition on the path is not allowed
        """
        status = current
        for target in targets:
            if not self.can_transition(status, target):
                raise JobStateError(
                    f"Invalid job transition: {status.value} -> {target.value}"
                )
            status = target

    def retries_left(self, job: ConversionJob) -> int:
        """Number of retry attempts still available."""
        return max(self.max_retries - job.retry_count, 0)

    def check_retry(self, job: ConversionJob) -> None:
        """
        Validate a manual retry request.

        Raises:
            JobStateError: Job is not failed
            RetryLimitError: Job has reached the retry ceiling
        """
        if job.status != JobStatus.FAILED:
            raise JobStateError(
                f"Job {job.id} is {job.status.value}; only failed jobs can be retried"
            )
        if job.retry_count >= self.max_retries:
            raise RetryLimitError(
                f"Job {job.id} has reached the retry limit "
                f"({job.retry_count}/{self.max_retries})"
            )

    def check_cancel(self, job: ConversionJob) -> None:
        """
        Validate a cancellation request.

        Raises:
            JobStateError: Job is already completed or failed
        """
        if job.status not in CANCELLABLE_STATUSES:
            raise JobStateError(
                f"Job {job.id} is {job.status.value}; only pending or processing "
                f"jobs can be cancelled"
            )


__all__ = ['TRANSITIONS', 'CANCELLABLE_STATUSES', 'JobStateMachine']
