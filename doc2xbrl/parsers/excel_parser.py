# Path: doc2xbrl/parsers/excel_parser.py
"""
Spreadsheet Parser

Parses .xlsx/.xlsm workbooks with openpyxl. Every non-empty worksheet
becomes one statement; the statement kind is taken from the sheet name
when it carries a cue ('Balance Sheet', 'P&L', 'Cash Flow') and from
keyword scoring over the sheet's labels otherwise.

Legacy binary .xls workbooks are rejected.
"""

import re
from io import BytesIO
from typing import Any, Optional

from openpyxl import load_workbook

from constants import CONFIDENCE_EXCEL
from parsers.base_parser import BaseParser, ParseContext
from parsers.detection import (
    detect_currency,
    detect_kind_from_sheet_name,
    detect_statement_kind,
)
from parsers.models.canonical import DocumentInfo, Statement
from parsers.models.validation import ValidationResult
from parsers.tabular import extract_table


# OLE2 compound document signature used by legacy .xls files
OLE2_SIGNATURE = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'

COMPANY_NAME_PATTERN = re.compile(r'^[A-Z&\s\-.]+$')
COMPANY_SCAN_ROWS = 4
COMPANY_SCAN_COLUMNS = 3


class ExcelParser(BaseParser):
    """
    Parser for Office Open XML workbooks.

    Example:
        parser = ExcelParser()
        report = parser.parse(workbook_bytes, 'statements.xlsx')
        for statement in report.statements:
            print(statement.metadata.section_name, statement.kind.value)
    """

    format_id = 'xlsx'
    supported_formats = ('xlsx', 'xlsm')
    base_confidence = CONFIDENCE_EXCEL

    def read_sheets(self, content: bytes) -> tuple[dict[str, list[list[Any]]], dict[str, str]]:
        """
        Load every worksheet as a list of value rows.

        Args:
            content: Workbook bytes

        Returns:
            (sheet name -> rows, workbook properties)
        """
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
        try:
            sheets = {}
            for worksheet in workbook.worksheets:
                sheets[worksheet.title] = [
                    list(row) for row in worksheet.iter_rows(values_only=True)
                ]
            props = workbook.properties
            properties = {
                'subject': (props.subject or '').strip() if props else '',
                'title': (props.title or '').strip() if props else '',
            }
        finally:
            workbook.close()
        return sheets, properties

    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        if context.file_name.lower().endswith('.xls') or content.startswith(OLE2_SIGNATURE):
            raise ValueError('Legacy .xls workbooks are not supported; save the file as .xlsx')

        sheets, properties = self.read_sheets(content)
        if not sheets:
            raise ValueError('Excel file contains no worksheets')

        statements: list[Statement] = []
        document_currency: Optional[str] = None

        for sheet_name, rows in sheets.items():
            if not any(any(c is not None and str(c).strip() for c in row) for row in rows):
                continue
            try:
                statement, currency = self._parse_sheet(sheet_name, rows)
            except Exception as e:
                self.logger.warning(f"Sheet '{sheet_name}' failed: {e}")
                context.warn(
                    'SHEET_PARSE_ERROR',
                    f"Failed to parse sheet \"{sheet_name}\": {e}",
                    sheet=sheet_name,
                )
                continue

            if statement is None:
                context.warn(
                    'INSUFFICIENT_DATA',
                    f"Sheet \"{sheet_name}\" has no line items",
                    sheet=sheet_name,
                )
                continue

            statements.append(statement)
            if document_currency is None:
                document_currency = currency

        if not statements:
            raise ValueError('No valid financial data found in any worksheet')

        first_rows = next(iter(sheets.values()))
        company_name = self._company_name(properties, first_rows)
        all_text = ' '.join(
            str(c) for rows in sheets.values() for row in rows[:10] for c in row if c is not None
        )

        info = self._document_info(
            context,
            currency=document_currency or self.default_currency,
            company_name=company_name,
            scale_text=all_text,
        )
        return info, statements

    def _parse_sheet(
        self,
        sheet_name: str,
        rows: list[list[Any]]
    ) -> tuple[Optional[Statement], str]:
        """Turn one worksheet into a statement."""
        sheet_text = ' '.join(str(c) for row in rows for c in row if c is not None)
        currency = detect_currency(sheet_text, default=self.default_currency)

        table = extract_table(
            rows,
            sheet_name,
            lambda concept, raw, ref: self._make_item(concept, raw, ref, currency),
        )
        explicit = detect_currency(fields=table.fields, default=currency)
        if explicit != currency:
            for item in table.items:
                if item.unit == currency:
                    item.unit = explicit
            currency = explicit

        if not table.items:
            return None, currency

        kind = detect_kind_from_sheet_name(sheet_name) or detect_statement_kind(table.label_text)
        period = self._period_info(fields=table.fields, text=sheet_text)
        statement = self._make_statement(
            kind,
            table.items,
            period,
            section_name=sheet_name,
        )
        return statement, currency

    def _company_name(
        self,
        properties: dict[str, str],
        first_rows: list[list[Any]]
    ) -> Optional[str]:
        """Workbook subject, then title, then an upper-case heading cell."""
        for key in ('subject', 'title'):
            if properties.get(key):
                return properties[key]

        for row in first_rows[:COMPANY_SCAN_ROWS]:
            for cell in row[:COMPANY_SCAN_COLUMNS]:
                if not isinstance(cell, str):
                    continue
                value = cell.strip()
                lowered = value.lower()
                if (3 < len(value) < 50
                        and 'total' not in lowered
                        and 'summary' not in lowered
                        and COMPANY_NAME_PATTERN.match(value)):
                    return value
        return None

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate worksheet rows.

        Args:
            data: Rows of one sheet, or a mapping of sheet name to rows

        Returns:
            ValidationResult counting non-empty rows
        """
        result, started = self._new_validation()

        if isinstance(data, dict):
            sheets = data
        elif isinstance(data, list):
            sheets = {'sheet': data}
        else:
            result.add_error('data', 'Data must be an array of rows')
            return self._finish_validation(result, started)

        for sheet_name, rows in sheets.items():
            if not rows:
                result.add_warning(sheet_name, 'Worksheet contains no data')
                continue
            for index, row in enumerate(rows):
                result.total_records += 1
                if isinstance(row, (list, tuple)) and any(
                    c is not None and str(c).strip() for c in row
                ):
                    result.valid_records += 1
                elif index > 0:
                    result.add_warning(f'{sheet_name}_row_{index}', 'Row appears to be empty', row)

        return self._finish_validation(result, started)


__all__ = ['ExcelParser']
