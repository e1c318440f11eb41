# Path: doc2xbrl/parsers/tabular.py
"""
Tabular Extraction

Line item extraction shared by the delimited-table and spreadsheet
parsers. Works on plain row lists so both csv rows and openpyxl
worksheet values go through the same code.

Two topologies are recognized:

Row-labelled:
    Item,Amount
    Cash and Cash Equivalents,1000000
    Total Assets,5000000
  First column holds labels; the first value column is used. Other
  value columns become extra items only when their header is not a date
  or a year. A first row of year headings (Item,2023,2022) is a header.

Column-labelled:
    Cash,Total Assets,Date
    1000000,5000000,2023-12-31
  Header cells are labels; each data row holds values.

Date columns and date rows feed period detection and are never
emitted as items.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from parsers.detection import is_date_column, parse_date
from parsers.models.canonical import LineItem
from parsers.values import sanitize_value, source_reference


ROW_LABELLED = 'row_labelled'
COLUMN_LABELLED = 'column_labelled'

# Labels in a row-labelled table that carry document fields, not facts
_FIELD_LABELS = {
    'currency': 'currency',
    'reporting currency': 'currency',
    'fiscal year': 'fiscalYear',
    'fiscal quarter': 'fiscalQuarter',
    'quarter': 'fiscalQuarter',
    'company': 'companyName',
    'company name': 'companyName',
    'entity name': 'companyName',
}

# Plain fiscal-year column headings
_YEAR_HEADING = re.compile(r'^(19|20)\d{2}$')

# First-row headings of the label column
_LABEL_COLUMN_HEADINGS = frozenset({
    'item', 'line item', 'description', 'account', 'particulars', 'label',
})

ItemFactory = Callable[[str, Any, str], Optional[LineItem]]


@dataclass
class TableExtraction:
    """
    Result of extracting one table.

    Attributes:
        items: Line items in table order
        fields: Document fields found in the table (date, currency, ...)
        labels: Item labels, used for statement kind detection
        topology: ROW_LABELLED or COLUMN_LABELLED
        rows_seen: Non-empty rows inspected
    """
    items: list[LineItem] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)
    labels: list[str] = field(default_factory=list)
    topology: str = ROW_LABELLED
    rows_seen: int = 0

    @property
    def label_text(self) -> str:
        """Labels joined for keyword scoring."""
        return ' '.join(self.labels)


def _cell_text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    return _cell_text(value) == ''


def _is_numeric(value: Any) -> bool:
    sanitized = sanitize_value(value)
    return isinstance(sanitized, (int, float)) and not isinstance(sanitized, bool)


def _is_label(value: Any) -> bool:
    """A label is non-blank text that is neither a number nor a date."""
    if _is_blank(value) or _is_numeric(value):
        return False
    return parse_date(value) is None


def _is_year_heading(value: Any) -> bool:
    return bool(_YEAR_HEADING.match(_cell_text(value)))


def _is_header_row(cells: list[Any]) -> bool:
    """
    First row holds column headings.

    Value cells that are all plain years ('Item,2023,2022') are headings
    when there are several of them or the first cell names the label column.
    """
    if len(cells) < 2:
        return False
    values = cells[1:]
    numeric = [c for c in values if _is_numeric(c)]
    if not numeric:
        return True
    if not all(_is_year_heading(c) for c in numeric):
        return False
    first = _cell_text(cells[0]).lower()
    return len(numeric) > 1 or not first or first in _LABEL_COLUMN_HEADINGS


def clean_rows(rows: list[list[Any]]) -> list[tuple[int, list[Any]]]:
    """
    Drop empty rows and trailing blank cells.

    Returns:
        (1-based source row number, cells) pairs
    """
    cleaned = []
    for index, row in enumerate(rows, 1):
        cells = list(row or [])
        while cells and _is_blank(cells[-1]):
            cells.pop()
        if cells:
            cleaned.append((index, cells))
    return cleaned


def detect_topology(rows: list[tuple[int, list[Any]]]) -> tuple[str, bool]:
    """
    Detect table topology.

    Returns:
        (topology, has_header_row)
    """
    if not rows:
        return ROW_LABELLED, False

    has_header = _is_header_row(rows[0][1])

    body = rows[1:] if has_header else rows
    if not body:
        return ROW_LABELLED, has_header

    first_cells = [cells[0] if cells else None for _, cells in body]
    labelled = sum(1 for c in first_cells if _is_label(c))
    if labelled * 2 >= len(first_cells):
        return ROW_LABELLED, has_header

    if has_header:
        return COLUMN_LABELLED, True
    return ROW_LABELLED, False


def _record_field(fields: dict[str, Any], name: str, value: Any) -> None:
    fields.setdefault(name, value)


def extract_table(
    rows: list[list[Any]],
    identifier: str,
    make_item: ItemFactory
) -> TableExtraction:
    """
    Extract line items from a table.

    Args:
        rows: Table rows as lists of cell values
        identifier: Source identifier for references (file or sheet name)
        make_item: Callback (concept, raw_value, reference) -> LineItem | None

    Returns:
        TableExtraction with items and detected fields
    """
    cleaned = clean_rows(rows)
    topology, has_header = detect_topology(cleaned)
    result = TableExtraction(topology=topology, rows_seen=len(cleaned))

    if topology == COLUMN_LABELLED:
        _extract_column_labelled(cleaned, identifier, make_item, result)
    else:
        _extract_row_labelled(cleaned, has_header, identifier, make_item, result)
    return result


def _extract_row_labelled(
    rows: list[tuple[int, list[Any]]],
    has_header: bool,
    identifier: str,
    make_item: ItemFactory,
    result: TableExtraction
) -> None:
    header: list[Any] = []
    body = rows
    if has_header:
        header = rows[0][1]
        body = rows[1:]
        # A date or year in the first value header is the period of that column
        if len(header) > 1:
            header_date = parse_date(header[1])
            if header_date:
                _record_field(result.fields, 'date', header_date)
            elif _is_year_heading(header[1]):
                _record_field(result.fields, 'fiscalYear', _cell_text(header[1]))

    for row_number, cells in body:
        label = _cell_text(cells[0])
        if not label:
            continue

        values = cells[1:]
        lowered = label.lower().rstrip(':')

        if is_date_column(lowered) and values:
            parsed = parse_date(values[0])
            if parsed:
                _record_field(result.fields, 'date', parsed)
                continue
        if lowered in _FIELD_LABELS and values:
            _record_field(result.fields, _FIELD_LABELS[lowered], _cell_text(values[0]))
            continue

        if not values:
            continue

        result.labels.append(label)
        item = make_item(label, values[0], source_reference(identifier, row_number, 2))
        if item:
            result.items.append(item)

        for offset, raw in enumerate(values[1:], 3):
            column_header = _cell_text(header[offset - 1]) if offset - 1 < len(header) else ''
            if (not column_header or parse_date(column_header)
                    or is_date_column(column_header) or _is_year_heading(column_header)):
                continue
            extra = make_item(
                f"{label} ({column_header})",
                raw,
                source_reference(identifier, row_number, offset),
            )
            if extra:
                result.items.append(extra)


def _extract_column_labelled(
    rows: list[tuple[int, list[Any]]],
    identifier: str,
    make_item: ItemFactory,
    result: TableExtraction
) -> None:
    header = [_cell_text(c) for c in rows[0][1]]

    for name in header:
        if name and not is_date_column(name):
            result.labels.append(name)

    for row_number, cells in rows[1:]:
        for column, raw in enumerate(cells, 1):
            if column > len(header):
                break
            name = header[column - 1]
            if not name:
                continue
            if is_date_column(name):
                parsed = parse_date(raw)
                if parsed:
                    _record_field(result.fields, 'date', parsed)
                continue
            if name.lower() in _FIELD_LABELS:
                _record_field(result.fields, _FIELD_LABELS[name.lower()], _cell_text(raw))
                continue
            item = make_item(name, raw, source_reference(identifier, row_number, column))
            if item:
                result.items.append(item)


__all__ = [
    'ROW_LABELLED',
    'COLUMN_LABELLED',
    'TableExtraction',
    'clean_rows',
    'detect_topology',
    'extract_table',
]
