# Path: doc2xbrl/database/models/conversion_jobs.py
"""
Conversion Job Model

Persistent form of process.jobs.models.ConversionJob. Options, output
metadata and the processing log are stored as JSON documents.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, Integer, JSON

from database.models.base import Base


class ConversionJobRecord(Base):
    """
    Conversion job row.

    document_id is not a foreign key: a job may be created
    for a document that does not exist and then fails permanently.
    """
    __tablename__ = 'conversion_jobs'

    job_id = Column(
        String(36),
        primary_key=True,
        comment="Unique job identifier"
    )
    document_id = Column(
        String(36),
        nullable=False,
        index=True,
        comment="Source document identifier"
    )

    # State
    status = Column(
        String(20),
        nullable=False,
        default='pending',
        index=True,
        comment="pending, processing, completed or failed"
    )
    progress = Column(
        Integer,
        default=0,
        comment="Progress percentage 0-100"
    )
    retry_count = Column(
        Integer,
        default=0,
        comment="Retries used so far"
    )
    error_message = Column(
        Text,
        comment="Last error or retry message"
    )
    failure_kind = Column(
        String(20),
        comment="transient, permanent or cancelled"
    )

    # Results
    output_locator = Column(
        Text,
        comment="Where the generated instance is stored"
    )
    output_metadata = Column(
        JSON,
        default=dict,
        comment="Generation and matching metadata"
    )
    options = Column(
        JSON,
        default=dict,
        comment="Conversion options"
    )
    processing_log = Column(
        JSON,
        default=list,
        comment="Ordered processing log entries"
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        index=True,
        comment="Job creation timestamp"
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        comment="Last update timestamp"
    )
    started_at = Column(
        DateTime,
        comment="Start of the latest attempt"
    )
    completed_at = Column(
        DateTime,
        comment="When the job completed or failed"
    )

    def __repr__(self) -> str:
        id_str = self.job_id[:8] + '...' if self.job_id else 'NEW'
        return f"<ConversionJobRecord(id={id_str}, status={self.status}, progress={self.progress})>"


__all__ = ['ConversionJobRecord']
