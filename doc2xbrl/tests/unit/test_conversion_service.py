# Path: doc2xbrl/tests/unit/test_conversion_service.py
"""
Unit Tests for ConversionService

End-to-end conversions over in-memory and configured stores.
"""

import sys
import time
from pathlib import Path

import pytest
from lxml import etree

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


@pytest.fixture
def service(mock_env_vars, reset_singletons):
    from process.jobs.service import ConversionService
    from process.jobs.retry_policy import RetryPolicy
    return ConversionService.in_memory(retry_policy=RetryPolicy(max_retries=3, base_delay=0.0))


class TestConversions:
    """Test complete conversions per input format."""

    def test_balance_sheet_csv(self, service, balance_sheet_csv):
        from output.xbrl.validator import StructuralValidator

        document_id = service.upload_document(balance_sheet_csv, 'balance.csv', 'csv')
        result = service.initiate_conversion(document_id)

        assert result.success
        assert result.progress == 100
        assert result.document_id == document_id
        assert StructuralValidator().validate(service.fetch_output(result.job_id)) == []

    def test_income_statement_json(self, service, income_statement_json):
        from process.jobs.models import ConversionOptions
        from core.xbrl_constants import DEI_NS, XBRLI_NS

        document_id = service.upload_document(income_statement_json, 'income.json')
        result = service.initiate_conversion(document_id, ConversionOptions(entity_identifier='ACME'))

        assert result.success
        assert result.metadata['currencies'] == ['EUR']

        root = etree.fromstring(service.fetch_output(result.job_id))
        assert root.findtext(f'{{{DEI_NS}}}EntityRegistrantName') == 'Acme Holdings'
        assert root.findtext(f'.//{{{XBRLI_NS}}}identifier') == 'ACME'
        assert root.find(f'{{{XBRLI_NS}}}unit[@id="EUR"]') is not None

    def test_target_currency_and_name(self, service, balance_sheet_csv):
        from process.jobs.models import ConversionOptions
        from core.xbrl_constants import DEI_NS

        document_id = service.upload_document(balance_sheet_csv, 'balance.csv')
        options = ConversionOptions(target_currency='GBP', company_name='Widget Ltd')
        result = service.initiate_conversion(document_id, options)

        root = etree.fromstring(service.fetch_output(result.job_id))
        assert result.metadata['currencies'] == ['GBP']
        assert root.findtext(f'{{{DEI_NS}}}EntityRegistrantName') == 'Widget Ltd'

    def test_xbrl_instance(self, service, xbrl_instance):
        """Pre-tagged facts keep their concepts."""
        document_id = service.upload_document(xbrl_instance, 'filing.xbrl')
        result = service.initiate_conversion(document_id)

        output = service.fetch_output(result.job_id)
        assert result.success
        assert b'us-gaap:Assets' in output
        assert b'us-gaap:Revenues' in output

    def test_workbook(self, service, workbook_bytes):
        document_id = service.upload_document(workbook_bytes, 'statements.xlsx')

        assert service.initiate_conversion(document_id).success

    def test_background_scheduler(self, mock_env_vars, reset_singletons, balance_sheet_csv):
        from process.jobs.service import ConversionService
        from process.jobs.scheduler import ThreadPoolScheduler

        scheduler = ThreadPoolScheduler(max_workers=2)
        service = ConversionService.in_memory(scheduler=scheduler)
        try:
            document_id = service.upload_document(balance_sheet_csv, 'balance.csv')
            job_id = service.initiate_conversion(document_id).job_id

            deadline = time.monotonic() + 10
            while not service.get_job(job_id).is_finished and time.monotonic() < deadline:
                time.sleep(0.05)

            assert service.get_status(job_id).success
        finally:
            scheduler.shutdown()


class TestFailures:
    """Test failed conversions through the service."""

    def test_retries_exhausted(self, mock_env_vars, reset_singletons):
        from process.jobs.service import ConversionService
        from process.jobs.scheduler import InlineScheduler
        from process.jobs.retry_policy import RetryPolicy
        from core.errors import RetryLimitError

        scheduler = InlineScheduler()
        service = ConversionService.in_memory(
            scheduler=scheduler, retry_policy=RetryPolicy(max_retries=3, base_delay=2.0)
        )
        document_id = service.upload_document(b'   ', 'empty.csv')
        result = service.initiate_conversion(document_id)

        assert not result.success
        assert result.status.value == 'failed'
        assert result.retry_count == 3
        assert scheduler.delays == [2.0, 4.0, 6.0]
        with pytest.raises(RetryLimitError):
            service.retry_job(result.job_id)

    def test_missing_document(self, service):
        result = service.initiate_conversion('no-such-document')

        assert result.error == 'Document not found: no-such-document'
        assert result.retry_count == 0

    def test_cancel_completed(self, service, balance_sheet_csv):
        from core.errors import JobStateError

        result = service.initiate_conversion(service.upload_document(balance_sheet_csv, 'b.csv'))

        with pytest.raises(JobStateError):
            service.cancel_job(result.job_id)

    def test_unknown_job(self, service):
        from core.errors import JobNotFoundError

        with pytest.raises(JobNotFoundError):
            service.get_status('nope')


class TestQueries:
    """Test service queries."""

    def test_stats_and_history(self, service, balance_sheet_csv):
        service.initiate_conversion(service.upload_document(balance_sheet_csv, 'balance.csv'))
        service.initiate_conversion('missing')

        assert service.job_stats() == {
            'pending': 0, 'processing': 0, 'completed': 1, 'failed': 1, 'total': 2,
        }
        assert service.pending_jobs() == []
        names = {entry['file_name'] for entry in service.conversion_history()}
        assert names == {'balance.csv', None}

    def test_supported_formats(self, service):
        formats = service.supported_formats()

        assert {'csv', 'xlsx', 'pdf', 'json', 'xbrl'} <= set(formats)

    def test_result_dict(self, service, balance_sheet_csv):
        result = service.initiate_conversion(service.upload_document(balance_sheet_csv, 'b.csv'))
        data = result.to_dict()

        assert data['success'] is True
        assert data['status'] == 'completed'
        assert data['job_id'] == result.job_id
        assert data['metadata']['total_facts'] == 2


LEARNED_LABEL_CSV = (
    b"Item,Amount\n"
    b"Takings for the year,500\n"
    b"Total Assets,900\n"
)


class TestStoreBackends:
    """Test services wired from the configured store backend."""

    def test_memory_by_default(self, mock_env_vars, reset_singletons, mock_config):
        from process.jobs.service import ConversionService
        from process.jobs.stores import InMemoryDocumentStore, InMemoryJobStore

        service = ConversionService.from_config(mock_config)

        assert isinstance(service.documents, InMemoryDocumentStore)
        assert isinstance(service.orchestrator.jobs, InMemoryJobStore)

    def test_unknown_backend(self, mock_env_vars, reset_singletons, mock_config):
        from process.jobs.service import ConversionService

        with pytest.raises(ValueError):
            ConversionService.from_config(mock_config, backend='redis')

    def test_filesystem(self, mock_env_vars, reset_singletons, mock_config, temp_dir,
                        balance_sheet_csv):
        from process.jobs.service import ConversionService
        from process.jobs.stores import FileSystemDocumentStore

        service = ConversionService.from_config(mock_config, backend='filesystem')
        result = service.initiate_conversion(service.upload_document(balance_sheet_csv, 'b.csv'))

        storage = temp_dir / 'data' / 'storage'
        assert isinstance(service.documents, FileSystemDocumentStore)
        assert result.success
        assert Path(result.output_locator).parent == (storage / 'outputs').resolve()
        assert service.fetch_output(result.job_id).startswith(b'<?xml')

    def test_database_uses_learned_mappings(self, mock_env_vars, reset_singletons, sqlite_memory,
                                            mock_config):
        """A mapping confirmed through one service is used by the next."""
        from process.jobs.service import ConversionService
        from database.integration.sql_stores import SqlJobStore, SqlTaxonomyStore
        from core.xbrl_constants import US_GAAP_NS

        first = ConversionService.from_config(mock_config, backend='database')
        assert isinstance(first.orchestrator.jobs, SqlJobStore)
        assert isinstance(first.orchestrator.matcher.store, SqlTaxonomyStore)

        mapping = first.confirm_mapping('Takings for the year', 'us-gaap:Revenues')
        assert mapping.tag == 'us-gaap:Revenues'

        second = ConversionService.from_config(mock_config, backend='database')
        result = second.initiate_conversion(
            second.upload_document(LEARNED_LABEL_CSV, 'takings.csv')
        )

        assert result.success
        root = etree.fromstring(second.fetch_output(result.job_id))
        assert root.findtext(f'{{{US_GAAP_NS}}}Revenues') == '500'
        assert SqlJobStore().get(result.job_id).status.value == 'completed'

    def test_confirm_unknown_tag(self, service):
        with pytest.raises(ValueError):
            service.confirm_mapping('Takings', 'us-gaap:Widgets')
