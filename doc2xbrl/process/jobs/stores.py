# Path: doc2xbrl/process/jobs/stores.py
"""
Document and Job Stores

Collaborator interfaces of the orchestrator, with in-memory and
file-system implementations. SQLAlchemy-backed implementations live in
database.integration.

DocumentStore:
    retrieve(document_id) -> SourceDocument | None
    persist(job_id, output) -> locator
    add(...) -> SourceDocument
    load_output(locator) -> bytes

JobStore:
    create / get / update / list_pending / list_recent /
    delete_finished_before / count_by_status
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from config_loader import ConfigLoader
from constants import JobStatus
from core.errors import JobNotFoundError
from core.logger.ipo_logging import get_input_logger, get_output_logger

from .models import ConversionJob, ConversionOptions, SourceDocument, new_id


FINISHED_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)

MEMORY_LOCATOR_PREFIX = 'memory://outputs/'

OUTPUT_SUFFIX = '.xbrl'


def apply_job_update(job: ConversionJob, fields: dict[str, Any]) -> ConversionJob:
    """
    Apply field updates to a job, maintaining its timestamps.

    Moving to processing stamps started_at; moving to completed or failed
    stamps completed_at; moving back to pending clears completed_at.

    Raises:
        AttributeError: Unknown field name
    """
    for name, value in fields.items():
        if name not in ConversionJob.__dataclass_fields__ or name == 'id':
            raise AttributeError(f"ConversionJob has no updatable field '{name}'")
        setattr(job, name, value)

    now = datetime.utcnow()
    status = fields.get('status')
    if status == JobStatus.PROCESSING:
        job.started_at = now
    elif status in FINISHED_STATUSES:
        job.completed_at = now
    elif status == JobStatus.PENDING:
        job.completed_at = None
    job.updated_at = now
    return job


# ==============================================================================
# DOCUMENT STORES
# ==============================================================================

class DocumentStore(ABC):
    """Source documents in, generated instances out."""

    @abstractmethod
    def retrieve(self, document_id: str) -> Optional[SourceDocument]:
        """Load a source document, None when unknown."""
        pass

    @abstractmethod
    def persist(self, job_id: str, output: bytes) -> str:
        """Store a generated instance and return its locator."""
        pass

    @abstractmethod
    def add(
        self,
        content: bytes,
        file_name: str,
        format: str = '',
        mime_type: Optional[str] = None,
        metadata: Optional[dict] = None,
        document_id: Optional[str] = None
    ) -> SourceDocument:
        """Register an uploaded document."""
        pass

    @abstractmethod
    def load_output(self, locator: str) -> bytes:
        """
        Read a stored instance.

        Raises:
            FileNotFoundError: Nothing is stored under the locator
        """
        pass


class InMemoryDocumentStore(DocumentStore):
    """
    Dictionary-backed document store.

    Example:
        store = InMemoryDocumentStore()
        doc = store.add(b'Item,Value\\n...', 'balance.csv', 'csv')
        store.retrieve(doc.document_id)
    """

    def __init__(self):
        """Initialize empty store."""
        self._documents: dict[str, SourceDocument] = {}
        self._outputs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def retrieve(self, document_id: str) -> Optional[SourceDocument]:
        with self._lock:
            return self._documents.get(document_id)

    def persist(self, job_id: str, output: bytes) -> str:
        locator = f"{MEMORY_LOCATOR_PREFIX}{job_id}{OUTPUT_SUFFIX}"
        with self._lock:
            self._outputs[locator] = bytes(output)
        return locator

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
            file_name=file_name,
            format=format or '',
            mime_type=mime_type,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._documents[document.document_id] = document
        return document

    def load_output(self, locator: str) -> bytes:
        with self._lock:
            if locator not in self._outputs:
                raise FileNotFoundError(f"No output stored at {locator}")
            return self._outputs[locator]


class FileSystemDocumentStore(DocumentStore):
    """
    Directory-backed document store.

    Layout under the storage directory:
        documents/{document_id}/{file_name}
        documents/{document_id}/document.json   (format, mime type, metadata)
        outputs/{job_id}.xbrl

    The locator of an output is its absolute path.
    """

    META_FILE = 'document.json'

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
        self.input_logger = get_input_logger('documents.filesystem')
        self.output_logger = get_output_logger('documents.filesystem')

    def retrieve(self, document_id: str) -> Optional[SourceDocument]:
        directory = self.documents_dir / document_id
        meta_path = directory / self.META_FILE
        if not meta_path.is_file():
            self.input_logger.debug(f"Document {document_id} not found in {self.documents_dir}")
            return None

        meta = json.loads(meta_path.read_text(encoding='utf-8'))
        content_path = directory / meta['file_name']
        if not content_path.is_file():
            self.input_logger.warning(f"Document {document_id} has metadata but no content")
            return None

        uploaded_at = meta.get('uploaded_at')
        return SourceDocument(
            document_id=document_id,
            content=content_path.read_bytes(),
            file_name=meta['file_name'],
            format=meta.get('format') or '',
            mime_type=meta.get('mime_type'),
            metadata=meta.get('metadata') or {},
            uploaded_at=datetime.fromisoformat(uploaded_at) if uploaded_at else datetime.utcnow(),
        )

    def persist(self, job_id: str, output: bytes) -> str:
        path = self.outputs_dir / f"{job_id}{OUTPUT_SUFFIX}"
        path.write_bytes(output)
        self.output_logger.info(f"Saved output for job {job_id} to {path}")
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
        (directory / document.file_name).write_bytes(document.content)

        meta = document.describe()
        meta['metadata'] = document.metadata
        (directory / self.META_FILE).write_text(json.dumps(meta, indent=2), encoding='utf-8')

        self.input_logger.info(
            f"Stored document {document.document_id} ({document.file_name}, "
            f"{document.file_size} bytes)"
        )
        return document

    def load_output(self, locator: str) -> bytes:
        return Path(locator).read_bytes()


# ==============================================================================
# JOB STORES
# ==============================================================================

class JobStore(ABC):
    """Persistence of conversion jobs."""

    @abstractmethod
    def create(self, document_id: str, options: Optional[ConversionOptions] = None) -> ConversionJob:
        """Create a pending job."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[ConversionJob]:
        """Load a job, None when unknown."""
        pass

    @abstractmethod
    def update(self, job_id: str, **fields) -> ConversionJob:
        """
        Update job fields and return the updated job.

        Raises:
            JobNotFoundError: Unknown job id
        """
        pass

    @abstractmethod
    def list_pending(self, limit: int = 10) -> list[ConversionJob]:
        """Pending jobs, oldest first."""
        pass

    @abstractmethod
    def list_recent(self, limit: int = 20) -> list[ConversionJob]:
        """Most recently created jobs, newest first."""
        pass

    @abstractmethod
    def delete_finished_before(self, cutoff: datetime) -> int:
        """Delete completed/failed jobs created before `cutoff`; return the count."""
        pass

    @abstractmethod
    def count_by_status(self) -> dict[str, int]:
        """Number of jobs per status value."""
        pass


class InMemoryJobStore(JobStore):
    """
    Dictionary-backed job store.

    Jobs are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self):
        """Initialize empty store."""
        self._jobs: dict[str, ConversionJob] = {}
        self._lock = threading.Lock()

    def create(self, document_id: str, options: Optional[ConversionOptions] = None) -> ConversionJob:
        job = ConversionJob(
            id=new_id(),
            document_id=document_id,
            options=options or ConversionOptions(),
        )
        with self._lock:
            self._jobs[job.id] = job
            return job.copy()

    def get(self, job_id: str) -> Optional[ConversionJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.copy() if job else None

    def update(self, job_id: str, **fields) -> ConversionJob:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            apply_job_update(job, fields)
            return job.copy()

    def list_pending(self, limit: int = 10) -> list[ConversionJob]:
        with self._lock:
            pending = [j for j in self._jobs.values() if j.status == JobStatus.PENDING]
            pending.sort(key=lambda j: j.created_at)
            return [j.copy() for j in pending[:limit]]

    def list_recent(self, limit: int = 20) -> list[ConversionJob]:
        with self._lock:
            jobs = sorted(self._jobs.values(), key=lambda j: j.created_at, reverse=True)
            return [j.copy() for j in jobs[:limit]]

    def delete_finished_before(self, cutoff: datetime) -> int:
        with self._lock:
            doomed = [
                job_id for job_id, job in self._jobs.items()
                if job.status in FINISHED_STATUSES and job.created_at < cutoff
            ]
            for job_id in doomed:
                del self._jobs[job_id]
            return len(doomed)

    def count_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in JobStatus}
        with self._lock:
            for job in self._jobs.values():
                counts[job.status.value] += 1
        return counts


__all__ = [
    'FINISHED_STATUSES',
    'apply_job_update',
    'DocumentStore',
    'InMemoryDocumentStore',
    'FileSystemDocumentStore',
    'JobStore',
    'InMemoryJobStore',
]
