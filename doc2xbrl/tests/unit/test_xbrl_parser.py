# Path: doc2xbrl/tests/unit/test_xbrl_parser.py
"""
Unit Tests for XbrlParser

Tests context, unit and fact parsing of XBRL instances.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


def _instance(body):
    """Wrap facts in a minimal instance root."""
    return (
        b'<?xml version="1.0"?>'
        b'<xbrli:xbrl xmlns:xbrli="http://www.xbrl.org/2003/instance"'
        b' xmlns:iso4217="http://www.xbrl.org/2003/iso4217"'
        b' xmlns:ifrs-full="http://xbrl.ifrs.org/taxonomy/2023-03-31/ifrs-full"'
        b' xmlns:dei="http://xbrl.sec.gov/dei/2023-01-31">'
        + body +
        b'</xbrli:xbrl>'
    )


class TestXbrlParserStatements:
    """Test grouping of facts into statements."""

    def test_one_statement_per_context(self, xbrl_instance):
        """Instant contexts are balance sheets, durations are classified by name."""
        from parsers.xbrl_parser import XbrlParser
        from constants import StatementKind

        report = XbrlParser().parse(xbrl_instance, 'filing.xbrl')

        assert [s.metadata.section_name for s in report.statements] == ['c1', 'c2']
        assert report.statements[0].kind == StatementKind.BALANCE_SHEET
        assert report.statements[1].kind == StatementKind.INCOME_STATEMENT
        assert report.statements[1].period_start == date(2023, 1, 1)
        assert report.statements[1].period_end == date(2023, 12, 31)

    def test_items_are_pre_matched(self, xbrl_instance):
        """Every fact carries its own tag as an exact match."""
        from parsers.xbrl_parser import XbrlParser
        from constants import MatchMethod, Framework

        report = XbrlParser().parse(xbrl_instance, 'filing.xbrl')
        assets = report.statements[0].items[0]

        assert assets.concept == 'us-gaap:Assets'
        assert assets.value == 5000000
        assert assets.unit == 'USD'
        assert assets.decimals == -3
        assert assets.confidence == 98
        assert assets.taxonomy_match.tag == 'us-gaap:Assets'
        assert assets.taxonomy_match.method == MatchMethod.EXACT
        assert assets.taxonomy_match.confidence == 100
        assert assets.taxonomy_match.framework == Framework.US_GAAP

    def test_nil_fact(self, xbrl_instance):
        """xsi:nil facts become nil items."""
        from parsers.xbrl_parser import XbrlParser

        report = XbrlParser().parse(xbrl_instance, 'filing.xbrl')
        goodwill = report.statements[0].items[1]

        assert goodwill.concept == 'us-gaap:Goodwill'
        assert goodwill.is_nil
        assert goodwill.value is None

    def test_inf_decimals(self, xbrl_instance):
        """decimals='INF' is treated as unspecified."""
        from parsers.xbrl_parser import XbrlParser

        revenues = XbrlParser().parse(xbrl_instance, 'filing.xbrl').statements[1].items[0]

        assert revenues.concept == 'us-gaap:Revenues'
        assert revenues.decimals is None

    def test_dei_facts_feed_document_info(self, xbrl_instance):
        """dei facts are not items but name the company."""
        from parsers.xbrl_parser import XbrlParser

        report = XbrlParser().parse(xbrl_instance, 'filing.xbrl')

        assert report.document_info.company_name == 'Acme Holdings'
        assert report.document_info.currency == 'USD'
        assert report.item_count == 3
        assert all(not i.concept.startswith('dei:') for _, i in report.iter_items())

    def test_fiscal_year_focus_overrides(self):
        """DocumentFiscalYearFocus sets the fiscal year."""
        from parsers.xbrl_parser import XbrlParser

        content = _instance(
            b'<xbrli:context id="q"><xbrli:period><xbrli:instant>2024-03-31</xbrli:instant>'
            b'</xbrli:period></xbrli:context>'
            b'<xbrli:unit id="eur"><xbrli:measure>iso4217:EUR</xbrli:measure></xbrli:unit>'
            b'<dei:DocumentFiscalYearFocus contextRef="q">2024</dei:DocumentFiscalYearFocus>'
            b'<ifrs-full:Assets contextRef="q" unitRef="eur">10</ifrs-full:Assets>'
        )
        report = XbrlParser().parse(content, 'ifrs.xml')
        statement = report.statements[0]

        assert statement.fiscal_year == 2024
        assert statement.items[0].unit == 'EUR'
        assert report.document_info.currency == 'EUR'
        assert report.document_info.file_type == 'xml'


class TestXbrlParserFailures:
    """Test warnings and failures."""

    def test_unknown_context_warns(self):
        """Facts on an undeclared context are kept with a warning."""
        from parsers.xbrl_parser import XbrlParser

        content = _instance(
            b'<ifrs-full:Revenue contextRef="missing">10</ifrs-full:Revenue>'
        )
        report = XbrlParser().parse(content, 'x.xbrl')

        assert report.item_count == 1
        assert report.metadata.warnings[0].code == 'UNKNOWN_CONTEXT'

    def test_no_facts_is_critical(self):
        """An instance without facts is a critical failure."""
        from parsers.xbrl_parser import XbrlParser

        report = XbrlParser().parse(_instance(b''), 'x.xbrl')

        assert report.has_critical_errors()

    def test_malformed_xml_is_critical(self):
        """Malformed XML is a critical failure."""
        from parsers.xbrl_parser import XbrlParser

        report = XbrlParser().parse(b'<xbrli:xbrl', 'x.xbrl')

        assert report.has_critical_errors()
        assert report.metadata.errors[0].message.startswith('Failed to parse XBRL file')


class TestXbrlParserValidate:
    """Test reference validation."""

    def test_valid_instance(self, xbrl_instance):
        """All references resolve in the sample instance."""
        from parsers.xbrl_parser import XbrlParser

        result = XbrlParser().validate(xbrl_instance)

        assert result.is_valid
        assert result.total_records == 3

    def test_dangling_references(self):
        """Undeclared contexts and units are errors."""
        from parsers.xbrl_parser import XbrlParser

        content = _instance(
            b'<xbrli:context id="c"><xbrli:period><xbrli:instant>2023-12-31</xbrli:instant>'
            b'</xbrli:period></xbrli:context>'
            b'<ifrs-full:Assets contextRef="c" unitRef="nope">1</ifrs-full:Assets>'
            b'<ifrs-full:Equity contextRef="other">1</ifrs-full:Equity>'
        )
        result = XbrlParser().validate(content.decode('utf-8'))

        assert result.total_records == 2
        assert result.valid_records == 0
        assert len(result.errors) == 2

    def test_malformed(self):
        """Malformed input is an error."""
        from parsers.xbrl_parser import XbrlParser

        assert not XbrlParser().validate(b'<broken').is_valid
        assert not XbrlParser().validate(42).is_valid


class TestSplitConceptName:
    """Test camel case splitting."""

    def test_split(self):
        """Camel case local names become lower-case words."""
        from parsers.xbrl_parser import split_concept_name

        assert split_concept_name('CashAndCashEquivalents') == 'cash and cash equivalents'
