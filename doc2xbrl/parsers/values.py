# Path: doc2xbrl/parsers/values.py
"""
Value Sanitization

Turns raw cell, field and text values into scalar fact values.

Rules:
- None, empty strings and null markers ('-', 'n/a', 'null', 'none')
  yield None and the caller drops the item
- currency symbols, thousands separators, percent signs and
  whitespace are stripped from numeric text
- parenthesized numbers are negative: '(1,234)' -> -1234
- integral numbers become exact ints, everything else float
- non-finite or out-of-range numbers yield None
- 'true'/'false'/'yes'/'no' become booleans
- any other text is kept as trimmed text
"""

import math
import re
from decimal import Decimal
from typing import Any, Optional

from parsers.models.canonical import FactValue


NULL_MARKERS = frozenset({'', '-', '--', 'n/a', 'na', 'null', 'none', 'nil'})

BOOLEAN_TRUE = frozenset({'true', 'yes'})
BOOLEAN_FALSE = frozenset({'false', 'no'})

# Characters removed from numeric text before conversion
_FORMATTING_CHARS = re.compile(r'[\s$€£¥,%]')

# Optional sign, digits with optional fraction, optional exponent
_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')

# Magnitudes at or above 10**30 are treated as unreadable
MAX_INTEGER_DIGITS = 30


def _to_number(text: str) -> Optional[Decimal]:
    """Parse cleaned numeric text, None if not a number."""
    if not _NUMBER_PATTERN.match(text):
        return None
    return Decimal(text)


def _narrow(number: Decimal) -> Optional[FactValue]:
    """Exact int when integral, float otherwise; None when out of range."""
    if not number.is_finite() or (number and number.adjusted() >= MAX_INTEGER_DIGITS):
        return None
    if number == number.to_integral_value():
        return int(number)
    return float(number)


def sanitize_value(value: Any) -> Optional[FactValue]:
    """
    Convert a raw value into a fact value.

    Args:
        value: Raw value from a cell, field or text line

    Returns:
        int, float, bool or str; None when the value is empty, a null marker
        or a number too large to report
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return _narrow(Decimal(repr(value)))

    if not isinstance(value, str):
        # Dates and other objects are kept as their text form
        value = str(value)

    text = value.strip()
    if text.lower() in NULL_MARKERS:
        return None

    lowered = text.lower()
    if lowered in BOOLEAN_TRUE:
        return True
    if lowered in BOOLEAN_FALSE:
        return False

    cleaned = _FORMATTING_CHARS.sub('', text)
    negative = False
    if cleaned.startswith('(') and cleaned.endswith(')'):
        negative = True
        cleaned = cleaned[1:-1]
    elif cleaned.endswith('-') and cleaned[:-1].replace('.', '', 1).isdigit():
        # Trailing minus as printed by some accounting exports
        negative = True
        cleaned = cleaned[:-1]

    number = _to_number(cleaned)
    if number is None:
        return text

    if negative:
        number = -abs(number)
    return _narrow(number)


def is_null_marker(value: Any) -> bool:
    """Check if a raw value means 'no value'."""
    return sanitize_value(value) is None


def source_reference(
    identifier: str,
    row: Optional[int] = None,
    column: Optional[int] = None
) -> str:
    """
    Build a pointer back to the source location.

    Args:
        identifier: File, sheet or section identifier
        row: 1-based row or line number
        column: 1-based column number

    Returns:
        Reference such as 'report.csv_row:3_col:2'
    """
    parts = [identifier]
    if row is not None:
        parts.append(f"row:{row}")
    if column is not None:
        parts.append(f"col:{column}")
    return '_'.join(parts)


__all__ = [
    'NULL_MARKERS',
    'sanitize_value',
    'is_null_marker',
    'source_reference',
]
