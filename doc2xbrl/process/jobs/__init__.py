# Path: doc2xbrl/process/jobs/__init__.py
"""
Job Orchestration

Runs conversions as tracked, retryable background jobs.

Core Components:
    - ConversionService: Caller-facing API
    - ConversionOrchestrator: Step pipeline, retries and cancellation
    - JobStateMachine / RetryPolicy: Transition and retry rules
    - TaskScheduler: ThreadPoolScheduler and InlineScheduler
    - DocumentStore / JobStore: Collaborator interfaces

Example:
    from process.jobs import ConversionService

    service = ConversionService.in_memory()
    document_id = service.upload_document(content, 'balance.csv')
    result = service.initiate_conversion(document_id)
"""

from .models import ConversionJob, ConversionOptions, ProcessingLogEntry, SourceDocument
from .orchestrator import ConversionOrchestrator
from .retry_policy import RetryPolicy, classify_failure
from .scheduler import InlineScheduler, TaskScheduler, ThreadPoolScheduler
from .service import ConversionResult, ConversionService
from .state_machine import JobStateMachine
from .stores import (
    DocumentStore,
    FileSystemDocumentStore,
    InMemoryDocumentStore,
    InMemoryJobStore,
    JobStore,
)

__all__ = [
    'ConversionJob',
    'ConversionOptions',
    'ProcessingLogEntry',
    'SourceDocument',
    'ConversionOrchestrator',
    'RetryPolicy',
    'classify_failure',
    'TaskScheduler',
    'ThreadPoolScheduler',
    'InlineScheduler',
    'ConversionResult',
    'ConversionService',
    'JobStateMachine',
    'DocumentStore',
    'FileSystemDocumentStore',
    'InMemoryDocumentStore',
    'InMemoryJobStore',
    'JobStore',
]
