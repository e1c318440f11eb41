# Path: doc2xbrl/output/xbrl/formatting.py
"""
XBRL Value and Tag Formatting

Helpers used while writing an instance document:
- format_number / format_value: lexical form of fact values
- format_date / compact_date: ISO dates and the yyyymmdd form used in ids
- resolve_tag: the tag a line item is written under
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Optional, Union

from constants import Framework
from core.xbrl_constants import FRAMEWORK_PREFIX, PREFIX_ALIASES
from parsers.models.canonical import LineItem


DEFAULT_DECIMAL_PLACES = 2

# Prefixes facts may be written under
FACT_PREFIXES = frozenset({'us-gaap', 'ifrs-full', 'dei'})

# XML NCName restricted to what taxonomy element names use
LOCAL_NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_.\-]*$')

# Characters outside the XML 1.0 Char production
XML_INVALID_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


# ==============================================================================
# VALUES
# ==============================================================================

def _trim_zeros(text: str) -> str:
    if '.' in text:
        text = re.sub(r'\.?0+$', '', text)
    return text


def format_number(value: Union[int, float, Decimal], decimals: Optional[int] = None) -> str:
    """
    Lexical form of a numeric fact.

    Declared decimals >= 0 round to that many places; negative decimals
    round to a magnitude (-3 = nearest thousand); no decimals means two
    places. Trailing fractional zeros are trimmed.

    Args:
        value: Numeric value
        decimals: Declared decimals

    Returns:
        Formatted number, e.g. format_number(1234.5) -> '1234.5'

    Raises:
        ValueError: Value is not a finite number
    """
    try:
        number = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")

    if decimals is None:
        decimals = DEFAULT_DECIMAL_PLACES

    # Enough precision to hold every integer digit plus the rounded fraction
    with localcontext() as context:
        context.prec = max(context.prec, number.adjusted() + abs(decimals) + 2)
        if decimals >= 0:
            quantum = Decimal(1).scaleb(-decimals)
            text = format(number.quantize(quantum, rounding=ROUND_HALF_UP), 'f')
        else:
            magnitude = Decimal(10) ** abs(decimals)
            rounded = (number / magnitude).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            text = format(rounded * magnitude, 'f')

    text = _trim_zeros(text)
    if text in ('-0', ''):
        text = '0'
    return text


def format_value(value, decimals: Optional[int] = None) -> str:
    """Lexical form of any fact value."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float, Decimal)):
        return format_number(value, decimals)
    return str(value)


def is_xml_text(text: str) -> bool:
    """True when text can be written as XML element or attribute content."""
    return XML_INVALID_CHARS.search(text) is None


def format_date(value: Union[date, datetime]) -> str:
    """ISO date (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def compact_date(value: Union[date, datetime]) -> str:
    """Date as yyyymmdd, used inside context ids."""
    return format_date(value).replace('-', '')


# ==============================================================================
# TAGS
# ==============================================================================

@dataclass
class ResolvedTag:
    """
    Tag a fact is written under.

    Attributes:
        prefix: Namespace prefix ('us-gaap')
        local_name: Element local name ('Assets')
        synthesized: True when built from the label instead of a match
    """
    prefix: str
    local_name: str
    synthesized: bool = False

    @property
    def qname(self) -> str:
        """Prefixed name."""
        return f"{self.prefix}:{self.local_name}"


def normalize_prefix(prefix: str) -> str:
    """Normalize legacy prefix spellings ('ifrs' -> 'ifrs-full')."""
    prefix = (prefix or '').strip().lower()
    return PREFIX_ALIASES.get(prefix, prefix)


def synthesize_tag(label: str, framework: Framework) -> str:
    """Build '{prefix}:{alphanumerics of label}'."""
    clean = re.sub(r'[^A-Za-z0-9]', '', label or '')
    return f"{FRAMEWORK_PREFIX.get(framework, 'us-gaap')}:{clean}"


def resolve_tag(item: LineItem, framework: Framework) -> tuple[Optional[ResolvedTag], Optional[str]]:
    """
    Tag for a line item: its match tag, else one synthesized from the label.

    Args:
        item: Line item
        framework: Target framework (chooses the synthesized prefix)

    Returns:
        Tuple of (tag or None, reason when the tag is unusable)
    """
    synthesized = False
    if item.taxonomy_match is not None and item.taxonomy_match.tag:
        raw = item.taxonomy_match.tag
    else:
        raw = synthesize_tag(item.concept, framework)
        synthesized = True

    if ':' not in raw:
        return None, f"Tag '{raw}' has no prefix"

    prefix, local_name = raw.split(':', 1)
    prefix = normalize_prefix(prefix)

    if not local_name:
        return None, f"Empty tag for '{item.concept}'"
    if local_name[0].isdigit():
        return None, f"Tag '{raw}' starts with a digit"
    if prefix not in FACT_PREFIXES:
        return None, f"Unknown tag prefix '{prefix}' in '{raw}'"
    if not LOCAL_NAME_PATTERN.match(local_name):
        return None, f"Tag '{raw}' is not a valid element name"

    return ResolvedTag(prefix=prefix, local_name=local_name, synthesized=synthesized), None


__all__ = [
    'DEFAULT_DECIMAL_PLACES',
    'FACT_PREFIXES',
    'format_number',
    'format_value',
    'is_xml_text',
    'format_date',
    'compact_date',
    'ResolvedTag',
    'normalize_prefix',
    'synthesize_tag',
    'resolve_tag',
]
