# Path: doc2xbrl/core/errors.py
"""
Conversion Errors

Exception hierarchy used across doc2xbrl.

Parsers and the generator never raise these past their own boundary;
they report problems as ProcessingIssue entries or issue lists.
Exceptions are raised by the job layer and the stores, and the
orchestrator classifies them through the `retryable` flag:

- retryable=True: transient, consumes a retry slot
- retryable=False: permanent precondition failure, fails the job at once
"""

from typing import Optional


class ConversionError(Exception):
    """
    Base class for all doc2xbrl errors.

    Attributes:
        message: Human-readable description
        retryable: Whether a new attempt could succeed
    """

    retryable: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ==============================================================================
# PRECONDITION FAILURES (permanent)
# ==============================================================================

class DocumentNotFoundError(ConversionError):
    """Source document does not exist in the document store."""

    retryable = False

    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class UnsupportedFormatError(ConversionError):
    """No parser is registered for the document's format."""

    retryable = False

    def __init__(self, format_id: str, mime_type: Optional[str] = None):
        hint = f" (mime type {mime_type})" if mime_type else ""
        super().__init__(f"No parser available for format: {format_id}{hint}")
        self.format_id = format_id
        self.mime_type = mime_type


# ==============================================================================
# PROCESSING FAILURES (transient)
# ==============================================================================

class ParseFailedError(ConversionError):
    """Parser returned no usable statements."""

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


# ==============================================================================
# JOB API ERRORS
# ==============================================================================

class JobNotFoundError(ConversionError):
    """Requested job does not exist."""

    retryable = False

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class JobStateError(ConversionError):
    """Requested transition is not allowed from the job's current state."""

    retryable = False


class RetryLimitError(JobStateError):
    """Job has already used every retry attempt."""


class JobCancelledError(ConversionError):
    """Raised inside a processing attempt once the job has been cancelled."""

    retryable = False

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} was cancelled")
        self.job_id = job_id


__all__ = [
    'ConversionError',
    'DocumentNotFoundError',
    'UnsupportedFormatError',
    'ParseFailedError',
    'JobNotFoundError',
    'JobStateError',
    'RetryLimitError',
    'JobCancelledError',
]
