# Path: doc2xbrl/database/models/documents.py
"""
Document Model

Metadata of uploaded source documents. The document bytes live on disk
under the storage directory; storage_path points at them.
"""

import uuid as uuid_module
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, Integer, JSON

from database.models.base import Base


class DocumentRecord(Base):
    """
    Uploaded source document.

    Example:
        record = DocumentRecord(
            file_name='balance.csv',
            file_format='csv',
            file_size=512,
            storage_path='/data/storage/documents/.../balance.csv',
        )
    """
    __tablename__ = 'documents'

    document_id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid_module.uuid4()),
        comment="Unique document identifier"
    )

    # File identification
    file_name = Column(
        String(255),
        nullable=False,
        comment="Original file name"
    )
    file_format = Column(
        String(50),
        default='',
        comment="Declared format id (csv, xlsx, pdf, json, xbrl); empty = infer"
    )
    mime_type = Column(
        String(100),
        comment="MIME type hint"
    )
    file_size = Column(
        Integer,
        default=0,
        comment="Size in bytes"
    )

    # Storage
    storage_path = Column(
        Text,
        nullable=False,
        comment="Path to the stored document bytes"
    )
    upload_metadata = Column(
        JSON,
        default=dict,
        comment="Free-form upload metadata"
    )

    # Timestamps
    uploaded_at = Column(
        DateTime,
        default=datetime.utcnow,
        index=True,
        comment="Upload timestamp"
    )

    def __repr__(self) -> str:
        id_str = self.document_id[:8] + '...' if self.document_id else 'NEW'
        return f"<DocumentRecord(id={id_str}, file='{self.file_name}')>"

    def to_dict(self) -> dict:
        """
        Convert document to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            'document_id': self.document_id,
            'file_name': self.file_name,
            'format': self.file_format,
            'mime_type': self.mime_type,
            'file_size': self.file_size,
            'storage_path': self.storage_path,
            'uploaded_at': str(self.uploaded_at) if self.uploaded_at else None,
        }


__all__ = ['DocumentRecord']
