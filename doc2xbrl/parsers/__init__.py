# Path: doc2xbrl/parsers/__init__.py
"""
doc2xbrl Format Parsers

Turns raw document bytes into the canonical financial model.

Parsers:
    - CsvParser: delimited tables (csv, tsv)
    - ExcelParser: workbooks (xlsx, xlsm)
    - PdfParser: unstructured text (pdf, txt)
    - JsonParser: structured objects (json, jsonl)
    - XbrlParser: XBRL instances (xbrl, xml)

Use ParserRegistry.default() to resolve a parser for a format.
"""

from parsers.base_parser import BaseParser
from parsers.csv_parser import CsvParser
from parsers.excel_parser import ExcelParser
from parsers.pdf_parser import PdfParser
from parsers.json_parser import JsonParser
from parsers.xbrl_parser import XbrlParser
from parsers.registry import ParserRegistry

__all__ = [
    'BaseParser',
    'CsvParser',
    'ExcelParser',
    'PdfParser',
    'JsonParser',
    'XbrlParser',
    'ParserRegistry',
]
