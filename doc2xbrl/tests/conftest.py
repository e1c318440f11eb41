# Path: doc2xbrl/tests/conftest.py
"""
Pytest Configuration and Shared Fixtures for doc2xbrl

Provides common test fixtures used across all test modules.
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add doc2xbrl to path for imports
DOC2XBRL_ROOT = Path(__file__).parent.parent
TESTS_ROOT = Path(__file__).parent
sys.path.insert(0, str(DOC2XBRL_ROOT))
sys.path.insert(0, str(TESTS_ROOT))

from fixtures.sample_documents import (
    BALANCE_SHEET_CSV,
    INCOME_STATEMENT_JSON,
    TEXT_REPORT,
    XBRL_INSTANCE,
    build_workbook,
)
from process.jobs.scheduler import TaskScheduler


# ==============================================================================
# ENVIRONMENT FIXTURES
# ==============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_env_vars(temp_dir):
    """Provide mock environment variables for testing."""
    env_vars = {
        'DOC2XBRL_ENVIRONMENT': 'test',
        'DOC2XBRL_DEBUG': 'true',

        # Paths
        'DOC2XBRL_DATA_ROOT': str(temp_dir / 'data'),
        'DOC2XBRL_LOG_DIR': str(temp_dir / 'data' / 'logs'),

        # Documents
        'DOC2XBRL_DEFAULT_CURRENCY': 'usd',
        'DOC2XBRL_DEFAULT_FRAMEWORK': 'US-GAAP',

        # Jobs
        'DOC2XBRL_MAX_RETRIES': '3',
        'DOC2XBRL_RETRY_BASE_DELAY': '2.5',

        # Database
        'DOC2XBRL_DB_HOST': 'localhost',
        'DOC2XBRL_DB_PORT': '5433',
        'DOC2XBRL_DB_NAME': 'doc2xbrl_test',
        'DOC2XBRL_DB_USER': 'test_user',
        'DOC2XBRL_DB_PASSWORD': 'test_pass',
    }

    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


# ==============================================================================
# SAMPLE DOCUMENT FIXTURES
# ==============================================================================

@pytest.fixture
def balance_sheet_csv():
    """Two-line balance sheet in CSV."""
    return BALANCE_SHEET_CSV


@pytest.fixture
def income_statement_json():
    """Income statement in the statements JSON shape."""
    return INCOME_STATEMENT_JSON


@pytest.fixture
def xbrl_instance():
    """Small XBRL instance with one instant and one duration context."""
    return XBRL_INSTANCE


@pytest.fixture
def text_report():
    """Plain-text balance sheet as extracted from a PDF."""
    return TEXT_REPORT


@pytest.fixture
def workbook_bytes():
    """Excel workbook with a balance sheet and an income statement sheet."""
    return build_workbook()


# ==============================================================================
# JOB FIXTURES
# ==============================================================================

class RecordingScheduler(TaskScheduler):
    """
    Scheduler that queues work instead of running it.

    Tests call run_all() to drain the queue; delayed tasks are recorded
    with their delay and run in order.
    """

    def __init__(self):
        self.submitted = []
        self.scheduled = []
        self.delays = []

    def submit(self, task):
        self.submitted.append(task)

    def schedule(self, delay_seconds, task):
        self.delays.append(delay_seconds)
        self.scheduled.append(task)

    def run_all(self, limit=50):
        """Run queued tasks, including tasks queued while running."""
        runs = 0
        while (self.submitted or self.scheduled) and runs < limit:
            queue = self.submitted if self.submitted else self.scheduled
            task = queue.pop(0)
            task()
            runs += 1
        return runs


@pytest.fixture
def recording_scheduler():
    """Scheduler that records tasks for manual draining."""
    return RecordingScheduler()


@pytest.fixture
def retry_policy():
    """Retry policy with a small base delay."""
    from process.jobs.retry_policy import RetryPolicy
    return RetryPolicy(max_retries=3, base_delay=2.0)


# ==============================================================================
# MOCK FIXTURES
# ==============================================================================

@pytest.fixture
def mock_config(temp_dir):
    """Create a mock ConfigLoader for testing."""
    config = MagicMock()
    config.get.side_effect = lambda key, default=None: {
        'environment': 'test',
        'debug': True,
        'data_root': temp_dir / 'data',
        'storage_dir': temp_dir / 'data' / 'storage',
        'output_dir': temp_dir / 'data' / 'output',
        'log_dir': temp_dir / 'data' / 'logs',
        'database_path': temp_dir / 'data' / 'doc2xbrl.db',
        'default_currency': 'USD',
        'default_framework': 'US-GAAP',
        'default_sector': 'all',
        'entity_scheme': 'http://www.sec.gov/CIK',
        'max_retries': 3,
        'retry_base_delay': 2.0,
        'max_concurrent_jobs': 2,
        'job_retention_days': 30,
    }.get(key, default)
    return config


# ==============================================================================
# UTILITY FIXTURES
# ==============================================================================

@pytest.fixture
def capture_logs():
    """Capture log output for testing."""
    import logging
    from io import StringIO

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    previous_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield log_capture

    root_logger.removeHandler(handler)
    root_logger.setLevel(previous_level)


@pytest.fixture
def reset_singletons():
    """Reset singleton instances between tests."""
    from config_loader import ConfigLoader
    ConfigLoader._instance = None
    ConfigLoader._initialized = False

    yield

    ConfigLoader._instance = None
    ConfigLoader._initialized = False


@pytest.fixture
def sqlite_memory():
    """In-memory SQLite database with all tables created."""
    from database.models.base import initialize_engine, create_all_tables, reset_engine

    reset_engine()
    initialize_engine(':memory:')
    create_all_tables()

    yield

    reset_engine()
