# Path: doc2xbrl/database/operations/document_ops.py
"""
Document Operations

CRUD operations for DocumentRecord rows.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from database.models.documents import DocumentRecord


logger = logging.getLogger(__name__)


class DocumentOperations:
    """
    Operations for DocumentRecord rows.

    Example:
        with session_scope() as session:
            record = DocumentOperations.create_document(
                session,
                document_id=doc_id,
                file_name='balance.csv',
                storage_path='/data/storage/documents/.../balance.csv',
            )
    """

    @staticmethod
    def create_document(
        session: Session,
        document_id: str,
        file_name: str,
        storage_path: str,
        file_format: str = '',
        mime_type: Optional[str] = None,
        file_size: int = 0,
        upload_metadata: Optional[dict] = None,
    ) -> DocumentRecord:
        """
        Create a document record.

        Args:
            session: Database session
            document_id: Document UUID
            file_name: Original file name
            storage_path: Where the bytes are stored
            file_format: Declared format id
            mime_type: MIME type hint
            file_size: Size in bytes
            upload_metadata: Free-form metadata

        Returns:
            Created DocumentRecord
        """
        record = DocumentRecord(
            document_id=document_id,
            file_name=file_name,
            file_format=file_format or '',
            mime_type=mime_type,
            file_size=file_size,
            storage_path=storage_path,
            upload_metadata=dict(upload_metadata or {}),
        )
        session.add(record)
        session.flush()

        logger.info(f"Created document record {document_id} ({file_name})")
        return record

    @staticmethod
    def find_by_id(session: Session, document_id: str) -> Optional[DocumentRecord]:
        """
        Find document by ID.

        Returns:
            DocumentRecord or None
        """
        return session.query(DocumentRecord).filter_by(document_id=document_id).first()


__all__ = ['DocumentOperations']
