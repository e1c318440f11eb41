# Path: doc2xbrl/output/xbrl/contexts.py
"""
Context Planning

Decides which xbrli:context elements an instance needs and builds them.

One context per distinct (period, statement kind, fiscal year, fiscal
quarter). Balance sheets are instants; every other kind is a duration
whose start is, in order of preference:
1. the statement's own period_start
2. the first day of its fiscal quarter
3. one year before the period end, plus one day
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from lxml import etree

from constants import StatementKind
from core.xbrl_constants import XBRLI_NS
from parsers.models.canonical import Statement

from .formatting import compact_date, format_date


# First month of each fiscal quarter
QUARTER_START_MONTHS = (1, 4, 7, 10)


@dataclass(frozen=True)
class ContextSpec:
    """
    A context to be written.

    Attributes:
        context_id: Context id attribute
        period_end: Instant or duration end date
        period_start: Duration start date (None for instants)
    """
    context_id: str
    period_end: date
    period_start: Optional[date] = None

    @property
    def is_instant(self) -> bool:
        """Check if this is an instant context."""
        return self.period_start is None


def one_year_before(end: date) -> date:
    """Start of the twelve months ending on `end`."""
    try:
        previous = end.replace(year=end.year - 1)
    except ValueError:
        # 29 February
        previous = end.replace(year=end.year - 1, day=28)
    return previous + timedelta(days=1)


def period_start_for(statement: Statement) -> date:
    """
    Duration start of a statement.

    Args:
        statement: Non-instant statement

    Returns:
        Start date
    """
    if statement.period_start is not None:
        return statement.period_start

    quarter = statement.fiscal_quarter
    if quarter and 1 <= quarter <= 4:
        return date(statement.fiscal_year, QUARTER_START_MONTHS[quarter - 1], 1)

    return one_year_before(statement.period_end)


def context_id_for(statement: Statement) -> str:
    """Context id: AsOf_{yyyymmdd}_{kind}_{fiscal year}Q{quarter}."""
    kind = statement.kind.value if isinstance(statement.kind, StatementKind) else str(statement.kind)
    quarter = statement.fiscal_quarter or ''
    return (
        f"AsOf_{compact_date(statement.period_end)}_{kind}_"
        f"{statement.fiscal_year}Q{quarter}"
    )


def document_context_id(document_date: date) -> str:
    """Id of the document-level context carrying entity facts."""
    return f"Document_{compact_date(document_date)}"


class ContextPlanner:
    """
    Assigns a context to every statement of an instance.

    Statements sharing period, kind, fiscal year and quarter share a
    context. Should two different periods produce the same id, the later
    one gets a numeric suffix.

    Example:
        planner = ContextPlanner()
        for statement in statements:
            context_id = planner.context_for(statement)
        specs = planner.specs
    """

    def __init__(self):
        """Initialize planner."""
        self._by_key: dict[tuple, ContextSpec] = {}
        self._ids: set[str] = set()
        self.specs: list[ContextSpec] = []

    def context_for(self, statement: Statement) -> str:
        """
        Context id for a statement, planning the context if new.

        Args:
            statement: Statement

        Returns:
            Context id
        """
        if statement.is_instant:
            start = None
        else:
            start = period_start_for(statement)

        key = (
            start,
            statement.period_end,
            statement.kind,
            statement.fiscal_year,
            statement.fiscal_quarter,
        )
        existing = self._by_key.get(key)
        if existing is not None:
            return existing.context_id

        context_id = context_id_for(statement)
        if context_id in self._ids:
            suffix = 2
            while f"{context_id}_{suffix}" in self._ids:
                suffix += 1
            context_id = f"{context_id}_{suffix}"

        spec = ContextSpec(context_id=context_id, period_end=statement.period_end, period_start=start)
        self._by_key[key] = spec
        self._ids.add(context_id)
        self.specs.append(spec)
        return context_id

    def add_instant(self, context_id: str, instant: date) -> ContextSpec:
        """Plan an explicit instant context (document context)."""
        spec = ContextSpec(context_id=context_id, period_end=instant)
        if context_id not in self._ids:
            self._ids.add(context_id)
            self.specs.append(spec)
        return spec

    @property
    def context_ids(self) -> list[str]:
        """Planned context ids in order."""
        return [spec.context_id for spec in self.specs]


def build_context(
    parent: etree._Element,
    spec: ContextSpec,
    identifier: str,
    scheme: str
) -> etree._Element:
    """
    Append an xbrli:context element.

    Args:
        parent: Instance root
        spec: Context to write
        identifier: Entity identifier text
        scheme: Entity identifier scheme

    Returns:
        The context element
    """
    context = etree.SubElement(parent, f'{{{XBRLI_NS}}}context', attrib={'id': spec.context_id})

    entity = etree.SubElement(context, f'{{{XBRLI_NS}}}entity')
    ident = etree.SubElement(entity, f'{{{XBRLI_NS}}}identifier', attrib={'scheme': scheme})
    ident.text = identifier

    period = etree.SubElement(context, f'{{{XBRLI_NS}}}period')
    if spec.is_instant:
        etree.SubElement(period, f'{{{XBRLI_NS}}}instant').text = format_date(spec.period_end)
    else:
        etree.SubElement(period, f'{{{XBRLI_NS}}}startDate').text = format_date(spec.period_start)
        etree.SubElement(period, f'{{{XBRLI_NS}}}endDate').text = format_date(spec.period_end)

    return context


__all__ = [
    'QUARTER_START_MONTHS',
    'ContextSpec',
    'one_year_before',
    'period_start_for',
    'context_id_for',
    'document_context_id',
    'ContextPlanner',
    'build_context',
]
