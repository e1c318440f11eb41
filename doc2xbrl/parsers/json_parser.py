# Path: doc2xbrl/parsers/json_parser.py
"""
Structured-Object Parser

Parses JSON and JSON Lines documents. The input shape is detected
explicitly and each shape has its own conversion:

STATEMENTS:
    {"statements": {"balanceSheet": {...}, "incomeStatement": {...}}}
    {"financialStatements": [{"type": "balance_sheet", "items": [...]}]}
    {"balanceSheet": {...}, "cashFlowStatement": {...}}
STATEMENT_ARRAY:
    [{"type": "income_statement", "items": [...]}, ...]
FLAT:
    {"totalAssets": 5000000, "cash": 1000000, "date": "2023-12-31"}
GENERIC:
    anything else, flattened recursively with dotted paths
"""

import json
from enum import Enum
from typing import Any, Iterator, Optional

from constants import (
    CONFIDENCE_JSON_FLAT,
    CONFIDENCE_JSON_GENERIC,
    CONFIDENCE_JSON_ITEMS,
    Framework,
    StatementKind,
)
from parsers.base_parser import BaseParser, ParseContext
from parsers.detection import (
    detect_currency,
    detect_statement_kind,
    is_currency_code,
    scale_from_word,
)
from parsers.models.canonical import DocumentInfo, LineItem, Statement
from parsers.models.validation import ValidationResult
from parsers.values import sanitize_value, source_reference


class JsonShape(str, Enum):
    """Recognized structured-object input shapes."""
    STATEMENTS = 'statements'
    STATEMENT_ARRAY = 'statement_array'
    FLAT = 'flat'
    GENERIC = 'generic'


SECTION_KINDS: tuple[tuple[str, StatementKind], ...] = (
    ('balanceSheet', StatementKind.BALANCE_SHEET),
    ('incomeStatement', StatementKind.INCOME_STATEMENT),
    ('cashFlowStatement', StatementKind.CASH_FLOW),
    ('equityStatement', StatementKind.EQUITY_STATEMENT),
)

STATEMENT_TYPE_ALIASES: dict[str, StatementKind] = {
    'balancesheet': StatementKind.BALANCE_SHEET,
    'statementoffinancialposition': StatementKind.BALANCE_SHEET,
    'financialposition': StatementKind.BALANCE_SHEET,
    'bs': StatementKind.BALANCE_SHEET,
    'incomestatement': StatementKind.INCOME_STATEMENT,
    'statementofoperations': StatementKind.INCOME_STATEMENT,
    'profitandloss': StatementKind.INCOME_STATEMENT,
    'profitloss': StatementKind.INCOME_STATEMENT,
    'pnl': StatementKind.INCOME_STATEMENT,
    'pl': StatementKind.INCOME_STATEMENT,
    'cashflow': StatementKind.CASH_FLOW,
    'cashflows': StatementKind.CASH_FLOW,
    'cashflowstatement': StatementKind.CASH_FLOW,
    'statementofcashflows': StatementKind.CASH_FLOW,
    'equitystatement': StatementKind.EQUITY_STATEMENT,
    'statementofchangesinequity': StatementKind.EQUITY_STATEMENT,
    'changesinequity': StatementKind.EQUITY_STATEMENT,
}

FLAT_KEYWORDS: tuple[str, ...] = (
    'assets', 'liabilities', 'equity', 'revenue', 'income', 'cash',
    'expenses', 'cost', 'profit', 'sales',
)

# Keys describing the document or statement rather than a fact
META_KEYS = frozenset({
    'type', 'statementType', 'currency', 'currencyCode', 'unit', 'date', 'period',
    'periodEnd', 'periodEndDate', 'periodStart', 'endDate', 'reportDate', 'asOf',
    'asOfDate', 'fiscalYear', 'fiscalYearEnd', 'fiscalQuarter', 'quarter',
    'metadata', 'framework', 'taxonomy', 'companyName', 'company', 'entityName',
    'auditStatus', 'consolidationLevel', 'presentationFormat', 'name', 'title',
})

CONCEPT_KEYS = ('concept', 'name', 'label', 'description')
VALUE_KEYS = ('value', 'amount', 'number')


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_statement_type(value: Any) -> Optional[StatementKind]:
    """Map a free-form statement type ('Balance Sheet', 'cash_flow') to a kind."""
    if isinstance(value, StatementKind):
        return value
    if not isinstance(value, str):
        return None
    compact = ''.join(ch for ch in value.lower() if ch.isalnum())
    if compact in STATEMENT_TYPE_ALIASES:
        return STATEMENT_TYPE_ALIASES[compact]
    try:
        return StatementKind(value.strip().lower())
    except ValueError:
        return None


def detect_shape(data: Any) -> JsonShape:
    """
    Detect the input shape of decoded JSON.

    Args:
        data: Decoded JSON value

    Returns:
        JsonShape
    """
    if isinstance(data, dict):
        if any(key in data for key in ('statements', 'financialStatements')):
            return JsonShape.STATEMENTS
        if any(key in data for key, _ in SECTION_KINDS):
            return JsonShape.STATEMENTS
        keys = [key.lower() for key in data if key not in META_KEYS]
        if any(keyword in key for key in keys for keyword in FLAT_KEYWORDS):
            return JsonShape.FLAT
        return JsonShape.GENERIC

    if isinstance(data, list) and data and isinstance(data[0], dict):
        first = data[0]
        if any(key in first for key in ('type', 'statementType', 'items')):
            return JsonShape.STATEMENT_ARRAY

    return JsonShape.GENERIC


class JsonParser(BaseParser):
    """
    Parser for JSON and JSON Lines documents.

    Example:
        parser = JsonParser()
        report = parser.parse(b'{"totalAssets": 5000000}', 'data.json')
    """

    format_id = 'json'
    supported_formats = ('json', 'jsonl')
    base_confidence = CONFIDENCE_JSON_ITEMS

    def decode(self, content: bytes, file_name: str = '') -> Any:
        """
        Decode JSON or JSON Lines content.

        Raises:
            ValueError: Malformed JSON
        """
        text = content.decode('utf-8-sig')
        if file_name.lower().endswith('.jsonl'):
            return [json.loads(line) for line in text.splitlines() if line.strip()]
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Newline-delimited objects without the .jsonl extension
            lines = [line for line in text.splitlines() if line.strip()]
            if len(lines) > 1:
                try:
                    return [json.loads(line) for line in lines]
                except json.JSONDecodeError:
                    pass
            raise

    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        try:
            data = self.decode(content, context.file_name)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValueError(f"Malformed JSON: {e}") from e

        shape = detect_shape(data)
        self.logger.debug(f"{context.file_name}: detected JSON shape '{shape.value}'")

        root = data if isinstance(data, dict) else {}
        currency = detect_currency(fields=root, default=self.default_currency)
        # A root unit is either a currency code or a scale word
        unit_scale = scale_from_word(root.get('unit'))
        if currency == self.default_currency and is_currency_code(root.get('unit')):
            currency = root['unit'].strip().upper()

        if shape == JsonShape.STATEMENTS:
            statements = self._from_statements(root, currency, context)
        elif shape == JsonShape.STATEMENT_ARRAY:
            statements = self._from_statement_array(data, currency, context)
        elif shape == JsonShape.FLAT:
            statements = self._from_flat(root, currency)
        else:
            statements = self._from_generic(data, currency)

        if shape == JsonShape.STATEMENT_ARRAY:
            for entry in data:
                if isinstance(entry, dict) and isinstance(entry.get('currency'), str):
                    currency = entry['currency'].upper()
                    break

        company = root.get('companyName') or root.get('company') or root.get('entityName')
        info = self._document_info(
            context,
            currency=currency,
            company_name=company if isinstance(company, str) else None,
            scale_text=str(root.get('scale') or root.get('units') or ''),
        )
        if info.scale is None and isinstance(root.get('scale'), str):
            info.scale = root['scale'].lower()
        if info.scale is None:
            info.scale = unit_scale
        return info, statements

    # ==========================================================================
    # SHAPE CONVERSIONS
    # ==========================================================================

    def _from_statements(
        self,
        root: dict[str, Any],
        currency: str,
        context: ParseContext
    ) -> list[Statement]:
        statements = []
        container = root.get('statements')
        sections = container if isinstance(container, dict) else root

        for key, kind in SECTION_KINDS:
            section = sections.get(key)
            if isinstance(section, dict):
                statements.append(self._statement_from_object(section, kind, currency, root))

        for key in ('financialStatements', 'statements'):
            entries = root.get(key)
            if not isinstance(entries, list):
                continue
            for index, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    context.warn('INVALID_STATEMENT', f"{key}[{index}] is not an object")
                    continue
                kind = self._entry_kind(entry)
                statements.append(self._statement_from_object(entry, kind, currency, root))
        return statements

    def _from_statement_array(
        self,
        entries: list[Any],
        currency: str,
        context: ParseContext
    ) -> list[Statement]:
        statements = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                context.warn('INVALID_STATEMENT', f"Entry {index} is not an object")
                continue
            entry_currency = entry.get('currency')
            statement_currency = entry_currency.upper() if isinstance(entry_currency, str) else currency
            kind = self._entry_kind(entry)
            statements.append(self._statement_from_object(entry, kind, statement_currency, {}))
        return statements

    def _from_flat(self, root: dict[str, Any], currency: str) -> list[Statement]:
        items = []
        for key, value in root.items():
            if key in META_KEYS or isinstance(value, (dict, list)):
                continue
            item = self._make_item(
                key, value, source_reference(key), currency,
                confidence=CONFIDENCE_JSON_FLAT,
            )
            if item:
                items.append(item)
        if not items:
            return []
        kind = detect_statement_kind(' '.join(i.concept for i in items))
        return [self._make_statement(kind, items, self._period_info(fields=root))]

    def _from_generic(self, data: Any, currency: str) -> list[Statement]:
        items = []
        for path, key, value in self._walk(data):
            sanitized = sanitize_value(value)
            if not isinstance(sanitized, (int, float)) or isinstance(sanitized, bool):
                continue
            items.append(LineItem(
                concept=key,
                value=sanitized,
                unit=currency,
                source_reference=path,
                confidence=CONFIDENCE_JSON_GENERIC,
            ))
        if not items:
            return []
        kind = detect_statement_kind(' '.join(i.concept for i in items))
        fields = data if isinstance(data, dict) else None
        return [self._make_statement(kind, items, self._period_info(fields=fields))]

    def _walk(self, node: Any, prefix: str = '') -> Iterator[tuple[str, str, Any]]:
        """Yield (dotted path, key, scalar) for every leaf under node."""
        if isinstance(node, dict):
            for key, value in node.items():
                path = f"{prefix}.{key}" if prefix else str(key)
                if isinstance(value, (dict, list)):
                    yield from self._walk(value, path)
                elif str(key) not in META_KEYS:
                    yield path, str(key), value
        elif isinstance(node, list):
            for index, value in enumerate(node):
                if isinstance(value, (dict, list)):
                    yield from self._walk(value, f"{prefix}[{index}]")

    # ==========================================================================
    # STATEMENT OBJECTS
    # ==========================================================================

    def _entry_kind(self, entry: dict[str, Any]) -> Optional[StatementKind]:
        return normalize_statement_type(entry.get('type') or entry.get('statementType'))

    def _statement_from_object(
        self,
        data: dict[str, Any],
        kind: Optional[StatementKind],
        currency: str,
        root: dict[str, Any]
    ) -> Statement:
        """Convert one statement object (item list or flat values)."""
        items = []
        item_list = data.get('items')
        if not isinstance(item_list, list):
            item_list = data.get('lineItems')

        if isinstance(item_list, list):
            for index, entry in enumerate(item_list):
                item = self._item_from_object(entry, index, currency)
                if item:
                    items.append(item)
        else:
            for key, value in data.items():
                if key in META_KEYS or isinstance(value, (dict, list)):
                    continue
                item = self._make_item(
                    key, value, source_reference(key), currency,
                    confidence=CONFIDENCE_JSON_FLAT,
                )
                if item:
                    items.append(item)

        if kind is None:
            kind = detect_statement_kind(' '.join(i.concept for i in items))

        # Statement fields win over document-level fields
        fields = {**root, **data}
        framework_value = data.get('framework') or data.get('taxonomy') or root.get('framework')
        framework = Framework.from_value(framework_value) if framework_value else Framework.US_GAAP

        return self._make_statement(
            kind,
            items,
            self._period_info(fields=fields),
            framework=framework,
            audit_status=data.get('auditStatus'),
            consolidation_level=data.get('consolidationLevel'),
            presentation_format=data.get('presentationFormat'),
        )

    def _item_from_object(
        self,
        entry: Any,
        index: int,
        currency: str
    ) -> Optional[LineItem]:
        """Convert {'concept': ..., 'value': ...} into a line item."""
        if not isinstance(entry, dict):
            return None

        concept = next((entry[k] for k in CONCEPT_KEYS if entry.get(k)), '')
        concept = str(concept).strip()
        if not concept:
            return None

        raw_value = next((entry[k] for k in VALUE_KEYS if k in entry), None)
        is_nil = bool(entry.get('isNil') or entry.get('nil'))
        decimals = _int_or_none(entry.get('decimals'))
        unit = entry.get('unit')
        if scale_from_word(unit):
            unit = None
        unit = unit or entry.get('currency') or currency

        if is_nil:
            return LineItem(
                concept=concept,
                value=None,
                unit=str(unit),
                decimals=decimals,
                is_nil=True,
                source_reference=source_reference(concept, index),
                confidence=CONFIDENCE_JSON_ITEMS,
            )

        value = sanitize_value(raw_value)
        if value is None:
            return None
        numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
        return LineItem(
            concept=concept,
            value=value,
            unit=str(unit) if numeric else 'pure',
            decimals=decimals,
            source_reference=source_reference(concept, index),
            confidence=CONFIDENCE_JSON_ITEMS,
        )

    # ==========================================================================
    # VALIDATION
    # ==========================================================================

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate decoded JSON.

        Args:
            data: Decoded JSON value

        Returns:
            ValidationResult; statement arrays count one record per entry
        """
        result, started = self._new_validation()

        if not isinstance(data, (dict, list)):
            result.add_error('data', 'JSON data must be a valid object')
            return self._finish_validation(result, started)

        if isinstance(data, list):
            result.total_records = len(data)
            for index, entry in enumerate(data):
                if isinstance(entry, dict) and entry:
                    result.valid_records += 1
                else:
                    result.add_error(f'entry_{index}', 'Entry must be a non-empty object', entry)
            if not data:
                result.add_warning('data', 'JSON array is empty')
            return self._finish_validation(result, started)

        result.total_records = 1
        if data:
            result.valid_records = 1
        else:
            result.add_warning('data', 'JSON object is empty')

        shape = detect_shape(data)
        if shape == JsonShape.GENERIC:
            result.add_warning(
                'data',
                'No recognizable financial structure',
                hint='Provide a statements object or financial keys',
            )
        return self._finish_validation(result, started)


__all__ = ['JsonShape', 'detect_shape', 'normalize_statement_type', 'JsonParser']
