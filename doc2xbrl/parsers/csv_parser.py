# Path: doc2xbrl/parsers/csv_parser.py
"""
Delimited-Table Parser

Parses comma, tab and semicolon separated files into one statement.
The dialect is sniffed from the first lines; .tsv files are always
tab separated.
"""

import csv
import io
from typing import Any

from constants import CONFIDENCE_CSV
from parsers.base_parser import BaseParser, ParseContext
from parsers.detection import detect_currency, detect_statement_kind
from parsers.models.canonical import DocumentInfo, Statement
from parsers.models.validation import ValidationResult
from parsers.tabular import extract_table


SNIFF_DELIMITERS = ',\t;'
SNIFF_SAMPLE_SIZE = 4096


class CsvParser(BaseParser):
    """
    Parser for delimited text tables.

    Example:
        parser = CsvParser()
        report = parser.parse(b"Cash and Cash Equivalents,1000000\\n", 'bs.csv')
    """

    format_id = 'csv'
    supported_formats = ('csv', 'tsv')
    base_confidence = CONFIDENCE_CSV

    def _decode(self, content: bytes) -> str:
        """Decode bytes, tolerating a UTF-8 BOM and latin-1 exports."""
        try:
            return content.decode('utf-8-sig')
        except UnicodeDecodeError:
            return content.decode('latin-1')

    def _dialect(self, text: str, file_name: str) -> Any:
        if file_name.lower().endswith('.tsv'):
            return csv.excel_tab
        try:
            return csv.Sniffer().sniff(text[:SNIFF_SAMPLE_SIZE], delimiters=SNIFF_DELIMITERS)
        except csv.Error:
            return csv.excel

    def read_rows(self, content: bytes, file_name: str = '') -> list[list[str]]:
        """
        Read delimited content into rows of trimmed cells.

        Args:
            content: Raw bytes
            file_name: Used to force tab dialect for .tsv

        Returns:
            List of rows
        """
        text = self._decode(content)
        reader = csv.reader(io.StringIO(text), self._dialect(text, file_name))
        return [[cell.strip() for cell in row] for row in reader]

    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        rows = self.read_rows(content, context.file_name)
        if not any(any(cell for cell in row) for row in rows):
            raise ValueError('CSV file is empty or contains no valid data')

        sample_text = '\n'.join(','.join(row) for row in rows[:6])
        table_text = '\n'.join(' '.join(row) for row in rows)

        currency = detect_currency(sample_text, default=self.default_currency)
        table = extract_table(
            rows,
            context.file_name,
            lambda concept, raw, ref: self._make_item(concept, raw, ref, currency),
        )

        # An explicit currency row overrides symbol detection
        explicit = detect_currency(fields=table.fields, default=currency)
        if explicit != currency:
            for item in table.items:
                if item.unit == currency:
                    item.unit = explicit
            currency = explicit

        kind = detect_statement_kind(table.label_text)
        period = self._period_info(fields=table.fields, text=table_text)

        statements = []
        if table.items:
            statements.append(self._make_statement(kind, table.items, period))

        info = self._document_info(
            context,
            currency=currency,
            company_name=table.fields.get('companyName') or None,
            scale_text=table_text,
        )
        return info, statements

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate parsed rows.

        Args:
            data: List of rows (lists or dicts)

        Returns:
            ValidationResult counting rows with at least one non-empty cell
        """
        result, started = self._new_validation()

        if not isinstance(data, list):
            result.add_error('data', 'Data must be a list of rows')
            return self._finish_validation(result, started)

        if not data:
            result.add_warning('data', 'CSV contains no data rows')

        result.total_records = len(data)
        for index, row in enumerate(data):
            cells = list(row.values()) if isinstance(row, dict) else row
            if isinstance(cells, (list, tuple)) and any(str(c).strip() for c in cells if c is not None):
                result.valid_records += 1
            else:
                result.add_error(f'row_{index}', 'Invalid row structure', row)

        return self._finish_validation(result, started)


__all__ = ['CsvParser']
