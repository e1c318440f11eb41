# Path: doc2xbrl/process/jobs/models.py
"""
Job Models

Data structures shared by the job stores, the orchestrator and the
service API:
- ConversionOptions: settings applied to every attempt of a job
- ProcessingLogEntry: one step record in a job's processing log
- ConversionJob: a tracked conversion
- SourceDocument: an uploaded document as returned by a DocumentStore
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from config_loader import ConfigLoader
from constants import FailureKind, Framework, JobStatus, StepStatus


def new_id() -> str:
    """Generate a job or document id."""
    return str(uuid.uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# ==============================================================================
# OPTIONS
# ==============================================================================

@dataclass
class ConversionOptions:
    """
    Conversion settings.

    Attributes:
        target_framework: Framework of the generated instance
        target_currency: Monetary unit (None: currency found in the document)
        sector: Sector used to scope learned mappings ('all' = unscoped)
        entity_identifier: Entity identifier (None: document id)
        entity_scheme: Entity identifier scheme (None: configured scheme)
        company_name: dei:EntityRegistrantName (None: name found in the document)
    """
    target_framework: Framework = Framework.US_GAAP
    target_currency: Optional[str] = None
    sector: str = 'all'
    entity_identifier: Optional[str] = None
    entity_scheme: Optional[str] = None
    company_name: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None, **overrides) -> 'ConversionOptions':
        """
        Options with framework and sector defaults taken from configuration.

        Args:
            config: ConfigLoader (default: shared instance)
            **overrides: Explicit option values (None values are ignored)

        Returns:
            ConversionOptions
        """
        config = config or ConfigLoader()
        values = {
            'target_framework': Framework.from_value(config.get('default_framework')),
            'sector': config.get('default_sector') or 'all',
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if not isinstance(values['target_framework'], Framework):
            values['target_framework'] = Framework.from_value(values['target_framework'])
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'target_framework': self.target_framework.value,
            'target_currency': self.target_currency,
            'sector': self.sector,
            'entity_identifier': self.entity_identifier,
            'entity_scheme': self.entity_scheme,
            'company_name': self.company_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ConversionOptions':
        """Rebuild options stored with to_dict()."""
        data = dict(data or {})
        framework = data.pop('target_framework', None)
        options = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        if framework:
            options.target_framework = Framework.from_value(framework)
        return options


# ==============================================================================
# PROCESSING LOG
# ==============================================================================

@dataclass
class ProcessingLogEntry:
    """
    One step record.

    Attributes:
        step: Step name ('parsing_document')
        timestamp: When the record was made
        status: started / completed / failed
        details: Step output summary
        error: Error message for failed steps
        attempt: Attempt number the record belongs to (1-based)
    """
    step: str
    timestamp: datetime
    status: StepStatus
    details: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    attempt: int = 1

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'step': self.step,
            'timestamp': self.timestamp.isoformat(),
            'status': self.status.value,
            'details': dict(self.details),
            'error': self.error,
            'attempt': self.attempt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ProcessingLogEntry':
        """Rebuild an entry stored with to_dict()."""
        return cls(
            step=data['step'],
            timestamp=_parse_datetime(data['timestamp']),
            status=StepStatus(data['status']),
            details=data.get('details') or {},
            error=data.get('error'),
            attempt=data.get('attempt', 1),
        )


# ==============================================================================
# JOB
# ==============================================================================

@dataclass
class ConversionJob:
    """
    A conversion job.

    Status lifecycle: pending -> processing -> completed | failed,
    failed -> pending on retry.
    """
    id: str
    document_id: str
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    retry_count: int = 0
    output_locator: Optional[str] = None
    output_metadata: dict[str, Any] = field(default_factory=dict)
    options: ConversionOptions = field(default_factory=ConversionOptions)
    failure_kind: Optional[FailureKind] = None
    processing_log: list[ProcessingLogEntry] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        """Check if the job is completed or failed."""
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    @property
    def is_cancelled(self) -> bool:
        """Check if the job was cancelled."""
        return self.status == JobStatus.FAILED and self.failure_kind == FailureKind.CANCELLED

    def copy(self) -> 'ConversionJob':
        """Independent copy (stores hand out copies, never their own objects)."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'document_id': self.document_id,
            'status': self.status.value,
            'progress': self.progress,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'started_at': _iso(self.started_at),
            'completed_at': _iso(self.completed_at),
            'error_message': self.error_message,
            'retry_count': self.retry_count,
            'output_locator': self.output_locator,
            'output_metadata': dict(self.output_metadata),
            'options': self.options.to_dict(),
            'failure_kind': self.failure_kind.value if self.failure_kind else None,
            'processing_log': [entry.to_dict() for entry in self.processing_log],
        }


# ==============================================================================
# DOCUMENTS
# ==============================================================================

@dataclass
class SourceDocument:
    """
    An uploaded document.

    Attributes:
        document_id: Store id
        content: Raw bytes
        file_name: Original file name
        format: Declared format id ('csv', 'xlsx', ...); empty means infer
        mime_type: Optional MIME type hint
        metadata: Free-form upload metadata
    """
    document_id: str
    content: bytes
    file_name: str
    format: str = ''
    mime_type: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    uploaded_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def file_size(self) -> int:
        """Size of the content in bytes."""
        return len(self.content)

    def describe(self) -> dict:
        """Summary without the content."""
        return {
            'document_id': self.document_id,
            'file_name': self.file_name,
            'format': self.format,
            'mime_type': self.mime_type,
            'file_size': self.file_size,
            'uploaded_at': _iso(self.uploaded_at),
        }


__all__ = [
    'new_id',
    'ConversionOptions',
    'ProcessingLogEntry',
    'ConversionJob',
    'SourceDocument',
]
