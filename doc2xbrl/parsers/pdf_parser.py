# Path: doc2xbrl/parsers/pdf_parser.py
"""
Unstructured Text Parser

Extracts line items from PDF reports (text layer via pdfplumber) and
plain-text reports. Text is scanned line by line with three layout
patterns:

    Total assets            5,000,000     (wide gap)
    Net income $ (1,250.00)               (label then number)
    1,000,000 Cash and cash equivalents   (number then label)

Extraction from free text is heuristic; confidence is 70.
"""

import re
from io import BytesIO
from typing import Any, Optional

import pdfplumber

from constants import CONFIDENCE_PDF, StatementKind
from parsers.base_parser import BaseParser, ParseContext
from parsers.detection import detect_currency, detect_period_end, detect_text_statement_kind
from parsers.models.canonical import DocumentInfo, LineItem, Statement
from parsers.models.validation import ValidationResult
from parsers.values import sanitize_value, source_reference


PDF_SIGNATURE = b'%PDF'

_NUMBER = r'([\d,]+\.\d{2}|\d{1,3}(?:,\d{3})*(?:\.\d+)?|\d+)'

# (pattern, number_first)
LINE_PATTERNS: tuple[tuple[re.Pattern, bool], ...] = (
    (re.compile(rf'^(.+?)\s{{3,}}[$]?\s*\(?\s*{_NUMBER}\s*\)?\s*$'), False),
    (re.compile(rf'^(.+?)\s*[$]?\s*\(?\s*{_NUMBER}\s*\)?\s*$'), False),
    (re.compile(rf'^[$]?\s*\(?\s*{_NUMBER}\s*\)?\s+(.+?)\s*$'), True),
)

COMMON_LINE_ITEMS: tuple[str, ...] = (
    'cash and cash equivalents', 'accounts receivable', 'inventory', 'total assets',
    'accounts payable', 'short-term debt', 'long-term debt', 'total liabilities',
    "shareholders' equity", 'retained earnings', 'common stock',
    'revenue', 'sales', 'gross profit', 'operating income', 'net income',
    'cost of goods sold', 'operating expenses',
    'operating cash flow', 'investing cash flow', 'financing cash flow',
    'total current assets', 'total current liabilities', 'total non-current assets',
    'total non-current liabilities', 'property, plant and equipment', 'goodwill',
    'intangible assets', 'accumulated depreciation',
)

FINANCIAL_WORDS: tuple[str, ...] = (
    'total', 'cash', 'assets', 'liabilities', 'equity',
    'income', 'expense', 'revenue', 'cost',
)

# Header and footer lines never hold line items
SKIP_LINE_WORDS: tuple[str, ...] = ('financial', 'statement', 'page')

COMPANY_SKIP_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r'^(financial|consolidated|annual|quarterly|statement)', re.I),
    re.compile(r'^(balance|income|cash)', re.I),
    re.compile(r'^(for the|as of|year ended)', re.I),
    re.compile(r'^\d{4}'),
    re.compile(r'^page', re.I),
)
COMPANY_SCAN_LINES = 5

MIN_LABEL_LENGTH = 3
MAX_LABEL_LENGTH = 100
LONG_LABEL_LENGTH = 10


class PdfParser(BaseParser):
    """
    Parser for PDF and plain-text financial reports.

    Example:
        parser = PdfParser()
        report = parser.parse(pdf_bytes, 'annual_report.pdf')
    """

    format_id = 'pdf'
    supported_formats = ('pdf', 'txt')
    base_confidence = CONFIDENCE_PDF

    # ==========================================================================
    # TEXT EXTRACTION
    # ==========================================================================

    def read_pages(self, content: bytes, context: Optional[ParseContext] = None) -> list[str]:
        """
        Extract text page by page.

        Plain-text input is returned as a single page. A page that fails
        to extract is skipped and reported as a warning.

        Args:
            content: PDF or text bytes
            context: Parse context receiving page warnings

        Returns:
            Page texts in order
        """
        if not content.startswith(PDF_SIGNATURE) and self._looks_like_text(content):
            return [content.decode('utf-8-sig', errors='replace')]

        pages = []
        with pdfplumber.open(BytesIO(content)) as pdf:
            if not pdf.pages:
                raise ValueError('PDF file contains no pages')
            for page_num, page in enumerate(pdf.pages, 1):
                try:
                    pages.append(page.extract_text() or '')
                except Exception as e:
                    self.logger.warning(f"Page {page_num} text extraction failed: {e}")
                    if context is not None:
                        context.warn(
                            'PAGE_PARSE_ERROR',
                            f"Failed to parse page {page_num}: {e}",
                            page=page_num,
                        )
        return pages

    def _looks_like_text(self, content: bytes) -> bool:
        try:
            content.decode('utf-8-sig')
        except UnicodeDecodeError:
            return False
        return b'\x00' not in content[:1024]

    # ==========================================================================
    # EXTRACTION
    # ==========================================================================

    def _extract(
        self,
        content: bytes,
        context: ParseContext
    ) -> tuple[DocumentInfo, list[Statement]]:
        pages = self.read_pages(content, context)
        if not pages:
            raise ValueError('No page text could be extracted')

        full_text = '\n'.join(pages)
        kind = detect_text_statement_kind(full_text)
        currency = detect_currency(full_text, default=self.default_currency)
        period = self._period_info(text=full_text)

        items = self.extract_line_items(full_text, currency, context.file_name)

        statements = []
        if items:
            metadata = {}
            if kind == StatementKind.BALANCE_SHEET:
                metadata['presentation_format'] = 'classified'
            statements.append(self._make_statement(kind, items, period, **metadata))

        info = self._document_info(
            context,
            currency=currency,
            company_name=self.extract_company_name(full_text),
            scale_text=full_text,
        )
        return info, statements

    def extract_line_items(
        self,
        text: str,
        currency: str,
        file_name: str = ''
    ) -> list[LineItem]:
        """
        Scan text lines for label/amount pairs.

        Args:
            text: Extracted document text
            currency: Unit for numeric items
            file_name: Document name used in source references

        Returns:
            Accepted line items in line order
        """
        items = []
        for line_number, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not line or line.isdigit():
                continue
            lowered = line.lower()
            if any(word in lowered for word in SKIP_LINE_WORDS):
                continue
            # date lines ('December 31, 2023') end in a number but are headings
            if detect_period_end(text=line) is not None:
                continue

            parsed = self._match_line(line)
            if parsed is None:
                continue
            concept, amount = parsed
            if not self._accept_label(concept):
                continue

            value = sanitize_value(amount)
            if value is None:
                continue
            items.append(LineItem(
                concept=concept,
                value=value,
                unit=currency,
                source_reference=source_reference(file_name or 'text', line_number),
                confidence=self.base_confidence,
            ))
        return items

    def _match_line(self, line: str) -> Optional[tuple[str, str]]:
        """Return (label, amount text) for the first matching layout."""
        for pattern, number_first in LINE_PATTERNS:
            match = pattern.match(line)
            if not match:
                continue
            if number_first:
                number, label = match.group(1), match.group(2)
                negative = '(' in line[:match.start(1)]
            else:
                label, number = match.group(1), match.group(2)
                negative = '(' in line[match.end(1):match.start(2)]

            concept = re.sub(r"[^a-zA-Z0-9\s&\-.']", ' ', label)
            concept = re.sub(r'\s+', ' ', concept).strip()
            amount = f"({number})" if negative else number
            return concept, amount
        return None

    def _accept_label(self, concept: str) -> bool:
        if not MIN_LABEL_LENGTH <= len(concept) <= MAX_LABEL_LENGTH:
            return False
        lowered = concept.lower()
        if any(item in lowered for item in COMMON_LINE_ITEMS):
            return True
        if any(word in lowered for word in FINANCIAL_WORDS):
            return True
        return len(concept) > LONG_LABEL_LENGTH

    def extract_company_name(self, text: str) -> Optional[str]:
        """
        Find a company name among the first non-empty lines.

        Returns:
            Cleaned name or None
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        for line in lines[:COMPANY_SCAN_LINES]:
            if any(pattern.search(line) for pattern in COMPANY_SKIP_PATTERNS):
                continue
            lowered = line.lower()
            if not 3 < len(line) < 100:
                continue
            if any(word in lowered for word in ('financial', 'statement', 'report')):
                continue
            if '$' in line or ',' in line or line.isdigit():
                continue
            cleaned = re.sub(r'[^a-zA-Z0-9\s&\-.,]', '', line).strip()
            if len(cleaned) > 5:
                return cleaned
        return None

    # ==========================================================================
    # VALIDATION
    # ==========================================================================

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate extracted text.

        Args:
            data: Document text, or a list of page texts

        Returns:
            ValidationResult with one record per page
        """
        result, started = self._new_validation()

        if isinstance(data, str):
            pages = [data]
        elif isinstance(data, list) and all(isinstance(p, str) for p in data):
            pages = data
        else:
            result.add_error('data', 'Extracted PDF text must be a string or list of page strings')
            return self._finish_validation(result, started)

        result.total_records = len(pages)
        for index, page in enumerate(pages, 1):
            if page.strip():
                result.valid_records += 1
            else:
                result.add_warning(f'page_{index}', 'Page contains no extractable text')

        if not any(page.strip() for page in pages):
            result.add_warning('data', 'PDF contains no extractable text')

        return self._finish_validation(result, started)


__all__ = ['PdfParser']
