# Path: doc2xbrl/parsers/xbrl_parser.py
"""
XML-Instance Parser

Reads XBRL instance documents with lxml.

This module handles:
- Context parsing (instant / duration periods, entity identifier)
- Unit parsing (iso4217 measures reduced to currency codes)
- Fact extraction (elements carrying contextRef, infrastructure excluded)
- Grouping facts by context, one statement per context

Every fact already carries its own taxonomy tag, so each item is
returned with an exact TaxonomyMatch at confidence 100.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from lxml import etree

from constants import (
    CONFIDENCE_XBRL,
    DIRECT_TAXONOMY_CONFIDENCE,
    Framework,
    MatchMethod,
    StatementKind,
)
from core.xbrl_constants import (
    DEI_NS,
    INFRASTRUCTURE_NAMESPACES,
    NON_FINANCIAL_PREFIXES,
    XBRLI_NS,
    XSI_NS,
    framework_for_tag,
)
from core.xml_parser import parse_xml
from parsers.base_parser import BaseParser, ParseContext, PeriodInfo
from parsers.detection import detect_fiscal_quarter, detect_statement_kind, fiscal_year_for, parse_date
from parsers.models.canonical import DocumentInfo, LineItem, Statement, TaxonomyMatch
from parsers.models.validation import ValidationResult
from parsers.values import sanitize_value, source_reference


# Keyword sets over split concept names ('CashAndCashEquivalents' -> 'cash and cash equivalents')
DURATION_INCOME_KEYWORDS: tuple[str, ...] = (
    'revenue', 'income', 'sales', 'expense', 'profit', 'cost', 'earnings',
)
DURATION_CASH_FLOW_KEYWORDS: tuple[str, ...] = (
    'cash flow', 'operating activities', 'investing activities',
    'financing activities', 'provided by', 'used in',
)
INSTANT_BALANCE_KEYWORDS: tuple[str, ...] = (
    'asset', 'liabilit', 'equity', 'cash', 'receivable', 'payable',
)

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')


@dataclass
class InstanceContext:
    """Parsed xbrli:context."""
    context_id: str
    entity_identifier: Optional[str] = None
    entity_scheme: Optional[str] = None
    instant: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_instant(self) -> bool:
        return self.instant is not None

    @property
    def period_end(self) -> Optional[date]:
        return self.instant or self.end_date


@dataclass
class InstanceFact:
    """One fact element as found in the instance."""
    tag: str
    context_ref: str
    raw_value: str
    unit_ref: Optional[str] = None
    decimals: Optional[int] = None
    is_nil: bool = False
    line: Optional[int] = None


def split_concept_name(local_name: str) -> str:
    """Turn 'CashAndCashEquivalents' into 'cash and cash equivalents'."""
    return _CAMEL_BOUNDARY.sub(' ', local_name).lower()


class XbrlParser(BaseParser):
    """
    Parser for XBRL instance documents.

    Example:
        parser = XbrlParser()
        report = parser.parse(instance_bytes, 'filing.xbrl')
        for statement in report.statements:
            print(statement.metadata.section_name, len(statement.items))
    """

    format_id = 'xbrl'
    supported_formats = ('xbrl', 'xml')
    base_confidence = CONFIDENCE_XBRL

    # ==========================================================================
    # EXTRACTION
    # ==========================================================================

    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        root = parse_xml(content)

        contexts = self.parse_contexts(root)
        units = self.parse_units(root)
        facts = self.extract_facts(root)
        dei = self._dei_values(root)

        if not facts:
            raise ValueError('No facts with a contextRef were found')

        groups: dict[str, list[InstanceFact]] = {}
        for fact in facts:
            groups.setdefault(fact.context_ref, []).append(fact)

        statements = []
        for context_ref, group in groups.items():
            instance_context = contexts.get(context_ref)
            if instance_context is None:
                context.warn(
                    'UNKNOWN_CONTEXT',
                    f"{len(group)} facts reference undeclared context '{context_ref}'",
                    context=context_ref,
                )
                instance_context = InstanceContext(context_id=context_ref)

            items = [
                item for item in (self._fact_to_item(f, units) for f in group)
                if item is not None
            ]
            if not items:
                continue
            statements.append(self._statement_for_context(instance_context, items, dei))

        currency = next(
            (u for u in units.values() if re.fullmatch(r'[A-Z]{3}', u)),
            self.default_currency,
        )

        company_name = dei.get('EntityRegistrantName')
        if not company_name:
            company_name = next(
                (c.entity_identifier for c in contexts.values() if c.entity_identifier),
                None,
            )

        info = self._document_info(context, currency=currency, company_name=company_name)
        return info, statements

    def parse_contexts(self, root: etree._Element) -> dict[str, InstanceContext]:
        """
        Parse all xbrli:context elements.

        Returns:
            Context id -> InstanceContext
        """
        contexts = {}
        for element in root.iter(f'{{{XBRLI_NS}}}context'):
            context_id = element.get('id')
            if not context_id:
                continue
            parsed = InstanceContext(context_id=context_id)

            identifier = element.find(f'{{{XBRLI_NS}}}entity/{{{XBRLI_NS}}}identifier')
            if identifier is not None and identifier.text:
                parsed.entity_identifier = identifier.text.strip()
                parsed.entity_scheme = identifier.get('scheme')

            period = element.find(f'{{{XBRLI_NS}}}period')
            if period is not None:
                parsed.instant = parse_date(period.findtext(f'{{{XBRLI_NS}}}instant'))
                parsed.start_date = parse_date(period.findtext(f'{{{XBRLI_NS}}}startDate'))
                parsed.end_date = parse_date(period.findtext(f'{{{XBRLI_NS}}}endDate'))

            contexts[context_id] = parsed
        return contexts

    def parse_units(self, root: etree._Element) -> dict[str, str]:
        """
        Parse all xbrli:unit elements.

        Returns:
            Unit id -> unit label ('USD', 'shares', 'USD/shares', 'pure')
        """
        units = {}
        for element in root.iter(f'{{{XBRLI_NS}}}unit'):
            unit_id = element.get('id')
            if not unit_id:
                continue
            divide = element.find(f'{{{XBRLI_NS}}}divide')
            if divide is not None:
                numerator = divide.findtext(
                    f'{{{XBRLI_NS}}}unitNumerator/{{{XBRLI_NS}}}measure', ''
                )
                denominator = divide.findtext(
                    f'{{{XBRLI_NS}}}unitDenominator/{{{XBRLI_NS}}}measure', ''
                )
                units[unit_id] = f"{self._measure_label(numerator)}/{self._measure_label(denominator)}"
                continue
            measure = element.findtext(f'{{{XBRLI_NS}}}measure', '')
            units[unit_id] = self._measure_label(measure)
        return units

    def _measure_label(self, measure: str) -> str:
        """'iso4217:USD' -> 'USD', 'xbrli:shares' -> 'shares'."""
        measure = (measure or '').strip()
        return measure.split(':', 1)[1] if ':' in measure else measure

    def extract_facts(self, root: etree._Element) -> list[InstanceFact]:
        """
        Collect fact elements in document order.

        Returns:
            Facts excluding infrastructure and dei elements
        """
        facts = []
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            context_ref = element.get('contextRef')
            if not context_ref:
                continue
            qname = etree.QName(element)
            if qname.namespace in INFRASTRUCTURE_NAMESPACES:
                continue
            prefix = element.prefix
            if prefix and prefix.lower() in NON_FINANCIAL_PREFIXES:
                continue

            decimals_attr = element.get('decimals')
            decimals = None
            if decimals_attr and decimals_attr.upper() != 'INF':
                try:
                    decimals = int(decimals_attr)
                except ValueError:
                    decimals = None

            facts.append(InstanceFact(
                tag=f"{prefix}:{qname.localname}" if prefix else qname.localname,
                context_ref=context_ref,
                raw_value=(element.text or '').strip(),
                unit_ref=element.get('unitRef'),
                decimals=decimals,
                is_nil=element.get(f'{{{XSI_NS}}}nil') == 'true',
                line=element.sourceline,
            ))
        return facts

    def _dei_values(self, root: etree._Element) -> dict[str, str]:
        """Document and entity information facts by local name."""
        values = {}
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            qname = etree.QName(element)
            if qname.namespace == DEI_NS or element.prefix == 'dei':
                if element.text and element.text.strip():
                    values.setdefault(qname.localname, element.text.strip())
        return values

    def _fact_to_item(
        self,
        fact: InstanceFact,
        units: dict[str, str]
    ) -> Optional[LineItem]:
        unit = units.get(fact.unit_ref, fact.unit_ref) if fact.unit_ref else 'pure'
        match = TaxonomyMatch(
            tag=fact.tag,
            framework=framework_for_tag(fact.tag),
            confidence=DIRECT_TAXONOMY_CONFIDENCE,
            method=MatchMethod.EXACT,
        )
        reference = source_reference(fact.context_ref, fact.line)

        if fact.is_nil:
            return LineItem(
                concept=fact.tag,
                value=None,
                unit=unit,
                decimals=fact.decimals,
                is_nil=True,
                source_reference=reference,
                confidence=self.base_confidence,
                taxonomy_match=match,
            )

        value = sanitize_value(fact.raw_value)
        if value is None:
            return None
        return LineItem(
            concept=fact.tag,
            value=value,
            unit=unit,
            decimals=fact.decimals,
            source_reference=reference,
            confidence=self.base_confidence,
            taxonomy_match=match,
        )

    def _statement_for_context(
        self,
        instance_context: InstanceContext,
        items: list[LineItem],
        dei: dict[str, str]
    ) -> Statement:
        words = ' '.join(split_concept_name(i.concept.split(':')[-1]) for i in items)
        if instance_context.is_instant:
            kind = StatementKind.BALANCE_SHEET
        else:
            kind = detect_statement_kind(
                words,
                balance_keywords=(),
                income_keywords=DURATION_INCOME_KEYWORDS,
                cash_flow_keywords=DURATION_CASH_FLOW_KEYWORDS,
            )
            if kind == StatementKind.UNKNOWN and instance_context.end_date is None:
                kind = detect_statement_kind(words, balance_keywords=INSTANT_BALANCE_KEYWORDS)

        period_end = instance_context.period_end or date.today()
        fiscal_year = fiscal_year_for(period_end)
        focus = dei.get('DocumentFiscalYearFocus')
        if focus and focus.isdigit():
            fiscal_year = int(focus)

        period = PeriodInfo(
            period_end=period_end,
            fiscal_year=fiscal_year,
            fiscal_quarter=detect_fiscal_quarter(text=dei.get('DocumentFiscalPeriodFocus', '')),
            detected=instance_context.period_end is not None,
        )

        framework = items[0].taxonomy_match.framework if items[0].taxonomy_match else Framework.US_GAAP
        statement = self._make_statement(
            kind,
            items,
            period,
            framework=framework,
            section_name=instance_context.context_id,
            audit_status='audited',
        )
        statement.period_start = instance_context.start_date
        return statement

    # ==========================================================================
    # VALIDATION
    # ==========================================================================

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate an instance document.

        Args:
            data: Instance XML as bytes or str

        Returns:
            ValidationResult with one record per fact; dangling
            contextRef/unitRef references are errors
        """
        result, started = self._new_validation()

        if isinstance(data, str):
            data = data.encode('utf-8')
        if not isinstance(data, bytes):
            result.add_error('data', 'XBRL data must be XML text')
            return self._finish_validation(result, started)

        try:
            root = parse_xml(data)
        except (etree.XMLSyntaxError, ValueError) as e:
            result.add_error('data', f'Malformed XML: {e}')
            return self._finish_validation(result, started)

        contexts = self.parse_contexts(root)
        units = self.parse_units(root)
        facts = self.extract_facts(root)

        if not contexts:
            result.add_warning('contexts', 'Instance declares no contexts')

        result.total_records = len(facts)
        for fact in facts:
            if fact.context_ref not in contexts:
                result.add_error(fact.tag, f"Undeclared context '{fact.context_ref}'", fact.context_ref)
            elif fact.unit_ref and fact.unit_ref not in units:
                result.add_error(fact.tag, f"Undeclared unit '{fact.unit_ref}'", fact.unit_ref)
            else:
                result.valid_records += 1

        return self._finish_validation(result, started)


__all__ = ['InstanceContext', 'InstanceFact', 'split_concept_name', 'XbrlParser']
