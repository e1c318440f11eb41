# Path: doc2xbrl/parsers/registry.py
"""
Parser Registry

Resolves a format identifier, MIME type or file name to a parser.

Resolution order:
1. Exact registered format id
2. MIME type table
3. File extension table
4. Alias table (non-alphanumerics become spaces; an alias matches when
   its words appear as whole words in the value)

A None result means the format is unsupported, which callers treat
as a terminal, non-retryable error.
"""

import re
from pathlib import PurePath
from typing import Optional

from core.logger.ipo_logging import get_input_logger
from parsers.base_parser import BaseParser
from parsers.csv_parser import CsvParser
from parsers.excel_parser import ExcelParser
from parsers.json_parser import JsonParser
from parsers.pdf_parser import PdfParser
from parsers.xbrl_parser import XbrlParser


MIME_TYPES: dict[str, str] = {
    'text/csv': 'csv',
    'application/csv': 'csv',
    'text/plain': 'csv',
    'text/tab-separated-values': 'tsv',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': 'xlsx',
    'application/vnd.ms-excel.sheet.macroenabled.12': 'xlsm',
    'application/vnd.ms-excel': 'xlsx',
    'application/pdf': 'pdf',
    'application/json': 'json',
    'text/json': 'json',
    'application/x-ndjson': 'jsonl',
    'application/xml': 'xbrl',
    'text/xml': 'xbrl',
    'application/xbrl+xml': 'xbrl',
    'application/xbrl': 'xbrl',
}

EXTENSIONS: dict[str, str] = {
    'xlsx': 'xlsx',
    'xlsm': 'xlsm',
    'csv': 'csv',
    'tsv': 'tsv',
    'pdf': 'pdf',
    'txt': 'txt',
    'json': 'json',
    'jsonl': 'jsonl',
    'xml': 'xml',
    'xbrl': 'xbrl',
}

ALIASES: dict[str, str] = {
    'spreadsheet': 'xlsx',
    'excel': 'xlsx',
    'excel file': 'xlsx',
    'comma separated values': 'csv',
    'financial report': 'xbrl',
    'instance': 'xbrl',
    'structured data': 'json',
    'text report': 'pdf',
}


def _normalize(value: str) -> str:
    return re.sub(r'[^a-z0-9]+', ' ', (value or '').lower()).strip()


class ParserRegistry:
    """
    Format id -> parser registry.

    Constructed explicitly and injected; there is no module-level instance.

    Example:
        registry = ParserRegistry.default()
        parser = registry.resolve('text/csv')
        report = parser.parse(content, 'report.csv')
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._parsers: dict[str, BaseParser] = {}
        self.logger = get_input_logger('parsers.registry')

    @classmethod
    def default(cls, default_currency: str = 'USD') -> 'ParserRegistry':
        """
        Create a registry with every built-in parser.

        Args:
            default_currency: Currency parsers fall back to

        Returns:
            Populated ParserRegistry
        """
        registry = cls()
        for parser in (
            CsvParser(default_currency),
            ExcelParser(default_currency),
            PdfParser(default_currency),
            JsonParser(default_currency),
            XbrlParser(default_currency),
        ):
            for format_id in parser.supported_formats:
                registry.register(format_id, parser)
        return registry

    def register(self, format_id: str, parser: BaseParser) -> None:
        """
        Register (or replace) the parser for a format id.

        Args:
            format_id: Format identifier ('csv', 'xlsx', ...)
            parser: Parser instance
        """
        key = (format_id or '').strip().lower()
        if not key:
            raise ValueError('format_id must not be empty')
        self._parsers[key] = parser
        self.logger.debug(f"Registered {type(parser).__name__} for '{key}'")

    def supported_formats(self) -> list[str]:
        """Sorted list of registered format ids."""
        return sorted(self._parsers)

    def resolve(self, format_id: str, mime_hint: Optional[str] = None) -> Optional[BaseParser]:
        """
        Resolve a parser for a format id or MIME type.

        Args:
            format_id: Format id, MIME type, extension or alias
            mime_hint: Optional MIME type tried when format_id fails

        Returns:
            Parser, or None when the format is unsupported
        """
        for candidate in (format_id, mime_hint):
            if not candidate:
                continue
            parser = self._resolve_one(candidate)
            if parser is not None:
                return parser

        self.logger.warning(f"No parser for format '{format_id}' (mime hint: {mime_hint})")
        return None

    def resolve_for_file(
        self,
        file_name: str,
        mime_hint: Optional[str] = None
    ) -> Optional[BaseParser]:
        """
        Resolve a parser from a file name's extension, then the MIME hint.

        Args:
            file_name: File name such as 'report.xlsx'
            mime_hint: Optional MIME type

        Returns:
            Parser or None
        """
        suffix = PurePath(file_name or '').suffix.lower().lstrip('.')
        return self.resolve(suffix, mime_hint)

    def _resolve_one(self, value: str) -> Optional[BaseParser]:
        key = value.strip().lower()

        # 1. exact registered format id
        if key in self._parsers:
            return self._parsers[key]

        # 2. MIME type (parameters such as charset dropped)
        mime = key.split(';', 1)[0].strip()
        if mime in MIME_TYPES:
            return self._parsers.get(MIME_TYPES[mime])

        # 3. extension
        extension = key.rsplit('.', 1)[-1]
        if extension in EXTENSIONS:
            return self._parsers.get(EXTENSIONS[extension])

        # 4. alias, by whole words
        normalized = _normalize(key)
        if not normalized:
            return None
        padded = f" {normalized} "
        for alias, target in ALIASES.items():
            if f" {alias} " in padded:
                return self._parsers.get(target)
        return None


__all__ = ['MIME_TYPES', 'EXTENSIONS', 'ALIASES', 'ParserRegistry']
