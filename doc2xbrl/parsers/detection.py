# Path: doc2xbrl/parsers/detection.py
"""
Document Detection Helpers

Heuristics shared by all format parsers:
- statement kind detection by keyword-frequency scoring
- currency detection from explicit fields or symbols/keywords
- period end, fiscal year and fiscal quarter detection
- scale hints ('in thousands', 'in millions')

All functions are pure; parsers call them with whatever text or
field mapping their format produces.
"""

import re
from datetime import date, datetime
from typing import Any, Iterable, Optional

from constants import StatementKind


# ==============================================================================
# STATEMENT KIND KEYWORDS
# ==============================================================================

BALANCE_SHEET_KEYWORDS: tuple[str, ...] = (
    'assets', 'liabilities', 'equity', 'cash', 'receivables',
    'payables', 'inventory', 'property', 'plant', 'equipment',
)

INCOME_KEYWORDS: tuple[str, ...] = (
    'revenue', 'sales', 'income', 'expenses', 'cost', 'gross profit',
    'operating income', 'net income', 'earnings',
)

CASH_FLOW_KEYWORDS: tuple[str, ...] = (
    'cash flow', 'operating activities', 'investing activities',
    'financing activities', 'cash from', 'cash used',
)

# Unstructured text carries headings, so its vocabulary is phrase-based
TEXT_BALANCE_SHEET_KEYWORDS: tuple[str, ...] = (
    'balance sheet', 'statement of financial position', 'assets', 'liabilities',
    "shareholders' equity", 'cash and cash equivalents', 'accounts receivable',
    'inventory', 'property, plant', 'total assets', 'total liabilities',
)

TEXT_INCOME_KEYWORDS: tuple[str, ...] = (
    'income statement', 'statement of operations', 'profit and loss', 'revenue',
    'sales', 'gross profit', 'operating income', 'net income', 'earnings',
    'cost of goods sold', 'operating expenses',
)

TEXT_CASH_FLOW_KEYWORDS: tuple[str, ...] = (
    'cash flow statement', 'statement of cash flows', 'operating activities',
    'investing activities', 'financing activities', 'cash provided by',
    'cash used in', 'net cash flow',
)

# Sheet-name cues checked before keyword scoring
SHEET_NAME_CUES: tuple[tuple[StatementKind, tuple[str, ...]], ...] = (
    (StatementKind.BALANCE_SHEET, ('balance', 'assets', 'liabilities', 'equity')),
    (StatementKind.INCOME_STATEMENT, ('income', 'p&l', 'profit', 'loss')),
    (StatementKind.CASH_FLOW, ('cash', 'flow', 'cf')),
)

DEFAULT_MIN_SCORE = 1
TEXT_MIN_SCORE = 2


def _keyword_score(text: str, keywords: Iterable[str]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def detect_statement_kind(
    text: str,
    min_score: int = DEFAULT_MIN_SCORE,
    balance_keywords: Iterable[str] = BALANCE_SHEET_KEYWORDS,
    income_keywords: Iterable[str] = INCOME_KEYWORDS,
    cash_flow_keywords: Iterable[str] = CASH_FLOW_KEYWORDS
) -> StatementKind:
    """
    Classify text by keyword frequency.

    Highest hit count wins. Ties favour balance sheet, then income,
    then cash flow. Below min_score the kind is UNKNOWN.

    Args:
        text: Labels, headers or document text to score
        min_score: Minimum hits required for a classification
        balance_keywords: Balance sheet vocabulary
        income_keywords: Income statement vocabulary
        cash_flow_keywords: Cash flow vocabulary

    Returns:
        Detected StatementKind
    """
    lowered = (text or '').lower()
    scores = (
        (StatementKind.BALANCE_SHEET, _keyword_score(lowered, balance_keywords)),
        (StatementKind.INCOME_STATEMENT, _keyword_score(lowered, income_keywords)),
        (StatementKind.CASH_FLOW, _keyword_score(lowered, cash_flow_keywords)),
    )

    best_kind, best_score = StatementKind.UNKNOWN, 0
    for kind, score in scores:
        # strict comparison keeps the earlier kind on ties
        if score > best_score:
            best_kind, best_score = kind, score

    if best_score < max(min_score, 1):
        return StatementKind.UNKNOWN
    return best_kind


def detect_text_statement_kind(text: str) -> StatementKind:
    """Classify unstructured document text (phrase vocabulary, min score 2)."""
    return detect_statement_kind(
        text,
        min_score=TEXT_MIN_SCORE,
        balance_keywords=TEXT_BALANCE_SHEET_KEYWORDS,
        income_keywords=TEXT_INCOME_KEYWORDS,
        cash_flow_keywords=TEXT_CASH_FLOW_KEYWORDS,
    )


def detect_kind_from_sheet_name(sheet_name: str) -> Optional[StatementKind]:
    """
    Classify a worksheet by its name.

    Returns:
        StatementKind when a cue matches, None otherwise
    """
    lowered = (sheet_name or '').lower()
    words = set(re.split(r'[^a-z0-9&]+', lowered))
    for kind, cues in SHEET_NAME_CUES:
        for cue in cues:
            # short cues must be whole words ('cf' inside 'cfo' is not a hit)
            if (len(cue) <= 3 and cue in words) or (len(cue) > 3 and cue in lowered):
                return kind
    return None


# ==============================================================================
# CURRENCY
# ==============================================================================

CURRENCY_SYMBOLS: tuple[tuple[str, str], ...] = (
    ('$', 'USD'),
    ('€', 'EUR'),
    ('£', 'GBP'),
    ('¥', 'JPY'),
)

CURRENCY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ('USD', ('usd', 'dollars')),
    ('EUR', ('eur', 'euros')),
    ('GBP', ('gbp', 'pounds')),
    ('JPY', ('jpy', 'yen')),
)

CURRENCY_FIELDS: tuple[str, ...] = ('currency', 'currencyCode', 'reportingCurrency')

# ISO 4217 alphabetic code shape
CURRENCY_CODE_PATTERN = re.compile(r'^[A-Z]{3}$')


def is_currency_code(value: Any) -> bool:
    """True for a three-letter code that is not a scale abbreviation ('mln')."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    return bool(CURRENCY_CODE_PATTERN.match(text.upper())) and scale_from_word(text) is None


def detect_currency(
    text: str = '',
    fields: Optional[dict[str, Any]] = None,
    default: str = 'USD'
) -> str:
    """
    Detect the reporting currency.

    Order: explicit field, currency symbol, currency keyword, default.

    Args:
        text: Free text to scan
        fields: Mapping that may carry an explicit currency field
        default: Currency used when nothing is found

    Returns:
        ISO 4217 currency code
    """
    if fields:
        for name in CURRENCY_FIELDS:
            value = fields.get(name)
            if isinstance(value, str) and value.strip():
                return value.strip().upper()

    text = text or ''
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code

    lowered = text.lower()
    for code, keywords in CURRENCY_KEYWORDS:
        for keyword in keywords:
            if re.search(rf'\b{re.escape(keyword)}\b', lowered):
                return code

    return default


# ==============================================================================
# DATES AND PERIODS
# ==============================================================================

PERIOD_END_FIELDS: tuple[str, ...] = (
    'periodEndDate', 'date', 'endDate', 'reportDate',
    'asOfDate', 'asOf', 'fiscalYearEnd', 'periodEnd',
)

# Column headers that hold dates rather than values
DATE_COLUMN_MARKERS: tuple[str, ...] = ('date', 'period', 'asof', 'enddate', 'reportdate')

_DATE_FORMATS: tuple[str, ...] = (
    '%Y-%m-%d',
    '%Y/%m/%d',
    '%m/%d/%Y',
    '%m-%d-%Y',
    '%d.%m.%Y',
    '%m/%d/%y',
    '%B %d, %Y',
    '%B %d %Y',
    '%b %d, %Y',
    '%b %d %Y',
    '%d %B %Y',
    '%d %b %Y',
    '%Y%m%d',
)

TEXT_DATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r'(?:as\s*of|for\s*the\s*period\s*ending|period\s*ended)\s*([a-zA-Z]+\s*\d{1,2},?\s*\d{4})', re.I),
    re.compile(r'(?:year|fiscal year|fy)\s*(?:ended|ending)?\s*([a-zA-Z]+\s+\d{1,2},?\s+\d{4})', re.I),
    re.compile(r'(\d{4}-\d{2}-\d{2})'),
    re.compile(r'(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})'),
    re.compile(r'((?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4})', re.I),
)

FISCAL_YEAR_PATTERN = re.compile(r'(?:fiscal\s*year|fy)\s*(?:ended|ending)?\s*(\d{4})', re.I)

_QUARTER_WORDS = {'first': 1, 'second': 2, 'third': 3, 'fourth': 4}
QUARTER_PATTERN = re.compile(r'\bQ([1-4])\b', re.I)
QUARTER_PHRASE_PATTERN = re.compile(r'\b(first|second|third|fourth)\s+quarter\b', re.I)


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a value.

    Args:
        value: date, datetime or text in a common notation

    Returns:
        date or None when the value is not a recognizable date
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    # bare digits are only a date in compact yyyymmdd form
    if text.isdigit() and len(text) != 8:
        return None

    # ISO timestamps ('2023-12-31T00:00:00Z')
    if 'T' in text and text[:4].isdigit():
        text = text.split('T', 1)[0]

    normalized = re.sub(r'\s+', ' ', text.replace('.,', ','))
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(normalized, fmt).date()
        except ValueError:
            continue
    return None


def detect_period_end(
    fields: Optional[dict[str, Any]] = None,
    text: str = ''
) -> Optional[date]:
    """
    Detect the period end date.

    Prioritized field names are tried first, then regex date
    patterns over the text.

    Args:
        fields: Mapping with candidate date fields
        text: Free text to scan

    Returns:
        date or None; callers fall back to processing time
    """
    if fields:
        for name in PERIOD_END_FIELDS:
            if name in fields:
                parsed = parse_date(fields[name])
                if parsed:
                    return parsed

    if text:
        for pattern in TEXT_DATE_PATTERNS:
            for match in pattern.finditer(text):
                parsed = parse_date(match.group(1))
                if parsed:
                    return parsed
    return None


def fiscal_year_for(period_end: date) -> int:
    """
    Derive the fiscal year from a period end.

    Periods ending January to March belong to the previous fiscal year.
    """
    if period_end.month <= 3:
        return period_end.year - 1
    return period_end.year


def detect_fiscal_year(
    period_end: Optional[date],
    fields: Optional[dict[str, Any]] = None,
    text: str = ''
) -> Optional[int]:
    """Explicit fiscal year field or phrase, else derived from the period end."""
    if fields:
        explicit = fields.get('fiscalYear')
        if explicit is not None:
            try:
                return int(str(explicit).strip())
            except ValueError:
                pass
    if text:
        match = FISCAL_YEAR_PATTERN.search(text)
        if match:
            return int(match.group(1))
    if period_end:
        return fiscal_year_for(period_end)
    return None


def detect_fiscal_quarter(
    text: str = '',
    fields: Optional[dict[str, Any]] = None
) -> Optional[int]:
    """
    Detect the fiscal quarter.

    Args:
        text: Text that may mention 'Q3' or 'third quarter'
        fields: Mapping that may carry fiscalQuarter/quarter

    Returns:
        1..4 or None
    """
    if fields:
        for name in ('fiscalQuarter', 'quarter'):
            value = fields.get(name)
            if value is None:
                continue
            match = re.search(r'[1-4]', str(value))
            if match:
                return int(match.group(0))

    if text:
        match = QUARTER_PATTERN.search(text)
        if match:
            return int(match.group(1))
        match = QUARTER_PHRASE_PATTERN.search(text)
        if match:
            return _QUARTER_WORDS[match.group(1).lower()]
    return None


def is_date_column(header: str) -> bool:
    """Check if a column header names a date column."""
    compact = re.sub(r'[^a-z]', '', (header or '').lower())
    return any(marker in compact for marker in DATE_COLUMN_MARKERS)


# ==============================================================================
# SCALE
# ==============================================================================

SCALE_PATTERN = re.compile(r'\bin\s+(thousands|millions|billions)\b', re.I)

# Bare scale words and abbreviations used as unit labels
SCALE_WORDS: dict[str, str] = {
    'thousand': 'thousands',
    'thousands': 'thousands',
    'k': 'thousands',
    'million': 'millions',
    'millions': 'millions',
    'mln': 'millions',
    'mm': 'millions',
    'billion': 'billions',
    'billions': 'billions',
    'bln': 'billions',
    'bn': 'billions',
}


def scale_from_word(value: Any) -> Optional[str]:
    """Scale named by a bare word such as 'thousands' or 'mln'."""
    if not isinstance(value, str):
        return None
    return SCALE_WORDS.get(value.strip().lower())


def detect_scale(text: str) -> Optional[str]:
    """Detect a scale hint such as 'in thousands'; None when absent."""
    match = SCALE_PATTERN.search(text or '')
    if match:
        return match.group(1).lower()
    return None


__all__ = [
    'BALANCE_SHEET_KEYWORDS',
    'INCOME_KEYWORDS',
    'CASH_FLOW_KEYWORDS',
    'DEFAULT_MIN_SCORE',
    'TEXT_MIN_SCORE',
    'detect_statement_kind',
    'detect_text_statement_kind',
    'detect_kind_from_sheet_name',
    'detect_currency',
    'is_currency_code',
    'PERIOD_END_FIELDS',
    'parse_date',
    'detect_period_end',
    'fiscal_year_for',
    'detect_fiscal_year',
    'detect_fiscal_quarter',
    'is_date_column',
    'detect_scale',
    'SCALE_WORDS',
    'scale_from_word',
]
