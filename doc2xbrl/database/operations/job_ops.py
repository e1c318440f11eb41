# Path: doc2xbrl/database/operations/job_ops.py
"""
Job Operations

CRUD operations for ConversionJobRecord rows, plus conversion between
rows and process.jobs.models.ConversionJob.
"""

import logging
from datetime import datetime
from typing import Any, Optional, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from constants import FailureKind, JobStatus
from database.models.conversion_jobs import ConversionJobRecord
from process.jobs.models import ConversionJob, ConversionOptions, ProcessingLogEntry


logger = logging.getLogger(__name__)

FINISHED_STATUS_VALUES = (JobStatus.COMPLETED.value, JobStatus.FAILED.value)


def _to_column(name: str, value: Any) -> Any:
    """Convert a ConversionJob field value to its column value."""
    if name == 'status':
        return JobStatus(value).value
    if name == 'failure_kind':
        return FailureKind(value).value if value else None
    if name == 'options':
        return value.to_dict() if isinstance(value, ConversionOptions) else dict(value or {})
    if name == 'processing_log':
        return [e.to_dict() if isinstance(e, ProcessingLogEntry) else e for e in value or []]
    if name == 'output_metadata':
        return dict(value or {})
    return value


class JobOperations:
    """
    Operations for ConversionJobRecord rows.

    All methods require a session to be passed in.

    Example:
        with session_scope() as session:
            record = JobOperations.create_job(session, job)
            pending = JobOperations.list_pending(session, limit=10)
    """

    @staticmethod
    def create_job(session: Session, job: ConversionJob) -> ConversionJobRecord:
        """
        Insert a job.

        Args:
            session: Database session
            job: Job to store

        Returns:
            Created ConversionJobRecord
        """
        record = ConversionJobRecord(job_id=job.id)
        JobOperations.apply_fields(record, {
            'document_id': job.document_id,
            'status': job.status,
            'progress': job.progress,
            'retry_count': job.retry_count,
            'error_message': job.error_message,
            'failure_kind': job.failure_kind,
            'output_locator': job.output_locator,
            'output_metadata': job.output_metadata,
            'options': job.options,
            'processing_log': job.processing_log,
            'created_at': job.created_at,
            'updated_at': job.updated_at,
            'started_at': job.started_at,
            'completed_at': job.completed_at,
        })
        session.add(record)
        session.flush()

        logger.info(f"Created job record {job.id} for document {job.document_id}")
        return record

    @staticmethod
    def find_by_id(session: Session, job_id: str) -> Optional[ConversionJobRecord]:
        """
        Find job by ID.

        Returns:
            ConversionJobRecord or None
        """
        return session.query(ConversionJobRecord).filter_by(job_id=job_id).first()

    @staticmethod
    def apply_fields(record: ConversionJobRecord, fields: dict[str, Any]) -> None:
        """Copy ConversionJob field values onto a row."""
        for name, value in fields.items():
            if name == 'id':
                continue
            setattr(record, name, _to_column(name, value))

    @staticmethod
    def list_pending(session: Session, limit: int = 10) -> List[ConversionJobRecord]:
        """Pending jobs, oldest first."""
        return session.query(ConversionJobRecord).filter_by(
            status=JobStatus.PENDING.value
        ).order_by(
            ConversionJobRecord.created_at.asc()
        ).limit(limit).all()

    @staticmethod
    def list_recent(session: Session, limit: int = 20) -> List[ConversionJobRecord]:
        """Most recently created jobs, newest first."""
        return session.query(ConversionJobRecord).order_by(
            ConversionJobRecord.created_at.desc()
        ).limit(limit).all()

    @staticmethod
    def delete_finished_before(session: Session, cutoff: datetime) -> int:
        """
        Delete completed and failed jobs created before `cutoff`.

        Returns:
            Number of deleted rows
        """
        deleted = session.query(ConversionJobRecord).filter(
            ConversionJobRecord.status.in_(FINISHED_STATUS_VALUES),
            ConversionJobRecord.created_at < cutoff,
        ).delete(synchronize_session=False)

        logger.info(f"Deleted {deleted} finished jobs created before {cutoff}")
        return deleted

    @staticmethod
    def count_by_status(session: Session) -> dict[str, int]:
        """Number of jobs per status value."""
        counts = {status.value: 0 for status in JobStatus}
        rows = session.query(
            ConversionJobRecord.status, func.count(ConversionJobRecord.job_id)
        ).group_by(ConversionJobRecord.status).all()
        for status, count in rows:
            counts[status] = count
        return counts

    @staticmethod
    def to_job(record: ConversionJobRecord) -> ConversionJob:
        """
        Convert a row to a ConversionJob.

        Args:
            record: Job row

        Returns:
            ConversionJob
        """
        return ConversionJob(
            id=record.job_id,
            document_id=record.document_id,
            status=JobStatus(record.status),
            progress=record.progress or 0,
            created_at=record.created_at,
            updated_at=record.updated_at,
            started_at=record.started_at,
            completed_at=record.completed_at,
            error_message=record.error_message,
            retry_count=record.retry_count or 0,
            output_locator=record.output_locator,
            output_metadata=dict(record.output_metadata or {}),
            options=ConversionOptions.from_dict(record.options),
            failure_kind=FailureKind(record.failure_kind) if record.failure_kind else None,
            processing_log=[
                ProcessingLogEntry.from_dict(entry) for entry in record.processing_log or []
            ],
        )


__all__ = ['JobOperations']
