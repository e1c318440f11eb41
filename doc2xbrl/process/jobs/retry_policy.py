# Path: doc2xbrl/process/jobs/retry_policy.py
"""
Retry Policy

Failure classification and retry timing for conversion attempts.

- cancelled: JobCancelledError; never retried
- permanent: ConversionError with retryable=False; fails the job at once
- transient: everything else; retried while retry_count < ceiling,
  after base_delay * attempt seconds
"""

from typing import Optional

from config_loader import ConfigLoader
from constants import FailureKind
from core.errors import ConversionError, JobCancelledError

from .models import ConversionJob


def classify_failure(error: BaseException) -> FailureKind:
    """
    Classify an exception raised during a processing attempt.

    Args:
        error: The exception

    Returns:
        FailureKind
    """
    if isinstance(error, JobCancelledError):
        return FailureKind.CANCELLED
    if isinstance(error, ConversionError) and not error.retryable:
        return FailureKind.PERMANENT
    return FailureKind.TRANSIENT


class RetryPolicy:
    """
    Decides whether and when a failed attempt is retried.

    Example:
        policy = RetryPolicy()
        if policy.should_retry(job, FailureKind.TRANSIENT):
            delay = policy.delay_for(job.retry_count + 1)
    """

    def __init__(
        self,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None
    ):
        """
        Initialize retry policy.

        Args:
            max_retries: Retry ceiling (default: config max_retries)
            base_delay: Seconds multiplied by the attempt number
                        (default: config retry_base_delay)
        """
        config = ConfigLoader()
        self.max_retries = config.get('max_retries') if max_retries is None else max_retries
        self.base_delay = (
            config.get('retry_base_delay') if base_delay is None else base_delay
        )

    def should_retry(self, job: ConversionJob, kind: FailureKind) -> bool:
        """Check if a failed attempt of `job` gets an automatic retry."""
        return kind == FailureKind.TRANSIENT and job.retry_count < self.max_retries

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds before retry number `attempt` (1-based)."""
        return self.base_delay * attempt

    def retry_message(self, attempt: int, error: BaseException) -> str:
        """Error message stored on a job waiting for a retry."""
        return f"Retrying (attempt {attempt}/{self.max_retries}): {error}"


__all__ = ['classify_failure', 'RetryPolicy']
