# Path: doc2xbrl/tests/unit/test_job_stores.py
"""
Unit Tests for Job Models and Stores

Tests job options, timestamp handling, the in-memory stores and the
file-system document store.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


class TestConversionOptions:
    """Test conversion option construction."""

    def test_from_config(self, mock_config):
        from process.jobs.models import ConversionOptions
        from constants import Framework

        options = ConversionOptions.from_config(mock_config, sector='banking', target_framework=None)

        assert options.target_framework == Framework.US_GAAP
        assert options.sector == 'banking'

    def test_dict_round_trip(self):
        from process.jobs.models import ConversionOptions
        from constants import Framework

        options = ConversionOptions(target_framework=Framework.IFRS, target_currency='EUR',
                                    company_name='Acme Holdings')

        assert ConversionOptions.from_dict(options.to_dict()) == options


class TestApplyJobUpdate:
    """Test timestamp maintenance."""

    def _job(self):
        from process.jobs.models import ConversionJob
        return ConversionJob(id='job-1', document_id='doc-1')

    def test_processing_stamps_start(self):
        from process.jobs.stores import apply_job_update
        from constants import JobStatus

        job = apply_job_update(self._job(), {'status': JobStatus.PROCESSING})

        assert job.started_at is not None
        assert job.completed_at is None

    def test_finish_and_reset(self):
        from process.jobs.stores import apply_job_update
        from constants import JobStatus

        job = apply_job_update(self._job(), {'status': JobStatus.FAILED})
        assert job.completed_at is not None

        apply_job_update(job, {'status': JobStatus.PENDING, 'retry_count': 1})
        assert job.completed_at is None
        assert job.retry_count == 1

    @pytest.mark.parametrize('field', ['id', 'colour'])
    def test_rejected_fields(self, field):
        from process.jobs.stores import apply_job_update

        with pytest.raises(AttributeError):
            apply_job_update(self._job(), {field: 'x'})


class TestInMemoryJobStore:
    """Test the dictionary-backed job store."""

    def test_create_and_get(self):
        from process.jobs.stores import InMemoryJobStore
        from constants import JobStatus

        store = InMemoryJobStore()
        job = store.create('doc-1')

        loaded = store.get(job.id)
        assert loaded.status == JobStatus.PENDING
        assert loaded.document_id == 'doc-1'
        assert store.get('unknown') is None

    def test_returns_copies(self):
        from process.jobs.stores import InMemoryJobStore

        store = InMemoryJobStore()
        job = store.create('doc-1')
        job.progress = 99

        assert store.get(job.id).progress == 0

    def test_update_unknown(self):
        from process.jobs.stores import InMemoryJobStore
        from core.errors import JobNotFoundError

        with pytest.raises(JobNotFoundError, match='Job not found: nope'):
            InMemoryJobStore().update('nope', progress=10)

    def test_listing_order(self):
        from process.jobs.stores import InMemoryJobStore
        from constants import JobStatus

        store = InMemoryJobStore()
        now = datetime.utcnow()
        old = store.create('doc-old')
        new = store.create('doc-new')
        done = store.create('doc-done')
        store.update(old.id, created_at=now - timedelta(hours=2))
        store.update(new.id, created_at=now - timedelta(hours=1))
        store.update(done.id, created_at=now, status=JobStatus.COMPLETED)

        assert [j.id for j in store.list_pending()] == [old.id, new.id]
        assert [j.id for j in store.list_recent()] == [done.id, new.id, old.id]
        assert [j.id for j in store.list_recent(limit=1)] == [done.id]

    def test_delete_finished_before(self):
        from process.jobs.stores import InMemoryJobStore
        from constants import JobStatus

        store = InMemoryJobStore()
        cutoff = datetime.utcnow() - timedelta(days=30)
        stale_done = store.create('a')
        stale_pending = store.create('b')
        fresh_failed = store.create('c')
        store.update(stale_done.id, status=JobStatus.COMPLETED, created_at=cutoff - timedelta(days=1))
        store.update(stale_pending.id, created_at=cutoff - timedelta(days=1))
        store.update(fresh_failed.id, status=JobStatus.FAILED)

        assert store.delete_finished_before(cutoff) == 1
        assert store.get(stale_done.id) is None
        assert store.get(stale_pending.id) is not None

    def test_count_by_status(self):
        from process.jobs.stores import InMemoryJobStore
        from constants import JobStatus

        store = InMemoryJobStore()
        store.create('a')
        store.update(store.create('b').id, status=JobStatus.FAILED)

        assert store.count_by_status() == {
            'pending': 1, 'processing': 0, 'completed': 0, 'failed': 1,
        }


class TestInMemoryDocumentStore:
    """Test the dictionary-backed document store."""

    def test_add_and_retrieve(self):
        from process.jobs.stores import InMemoryDocumentStore

        store = InMemoryDocumentStore()
        document = store.add(b'Item,Amount', 'balance.csv', 'csv', metadata={'source': 'upload'})

        loaded = store.retrieve(document.document_id)
        assert loaded.content == b'Item,Amount'
        assert loaded.format == 'csv'
        assert loaded.metadata == {'source': 'upload'}
        assert store.retrieve('missing') is None

    def test_persist_and_load(self):
        from process.jobs.stores import InMemoryDocumentStore

        store = InMemoryDocumentStore()
        locator = store.persist('job-1', b'<xbrl/>')

        assert locator == 'memory://outputs/job-1.xbrl'
        assert store.load_output(locator) == b'<xbrl/>'

    def test_load_missing_output(self):
        from process.jobs.stores import InMemoryDocumentStore

        with pytest.raises(FileNotFoundError):
            InMemoryDocumentStore().load_output('memory://outputs/none.xbrl')


class TestFileSystemDocumentStore:
    """Test the directory-backed document store."""

    def test_layout(self, temp_dir):
        from process.jobs.stores import FileSystemDocumentStore

        store = FileSystemDocumentStore(temp_dir)
        document = store.add(b'Item,Amount', 'uploads/balance.csv', 'csv')

        directory = temp_dir / 'documents' / document.document_id
        assert document.file_name == 'balance.csv'
        assert (directory / 'balance.csv').read_bytes() == b'Item,Amount'
        assert (directory / 'document.json').is_file()

    def test_retrieve(self, temp_dir):
        from process.jobs.stores import FileSystemDocumentStore

        store = FileSystemDocumentStore(temp_dir)
        document = store.add(b'{}', 'data.json', 'json', mime_type='application/json',
                             metadata={'pages': 1})

        loaded = FileSystemDocumentStore(temp_dir).retrieve(document.document_id)
        assert loaded.content == b'{}'
        assert loaded.format == 'json'
        assert loaded.mime_type == 'application/json'
        assert loaded.metadata == {'pages': 1}

    def test_retrieve_missing(self, temp_dir):
        from process.jobs.stores import FileSystemDocumentStore

        store = FileSystemDocumentStore(temp_dir)
        document = store.add(b'x', 'a.csv')
        (temp_dir / 'documents' / document.document_id / 'a.csv').unlink()

        assert store.retrieve(document.document_id) is None
        assert store.retrieve('unknown') is None

    def test_persist(self, temp_dir):
        from process.jobs.stores import FileSystemDocumentStore

        store = FileSystemDocumentStore(temp_dir)
        locator = store.persist('job-1', b'<xbrl/>')

        assert Path(locator).is_absolute()
        assert Path(locator).name == 'job-1.xbrl'
        assert store.load_output(locator) == b'<xbrl/>'
