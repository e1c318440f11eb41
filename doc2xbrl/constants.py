# Path: doc2xbrl/constants.py
"""
System-Wide Constants for doc2xbrl

Central repository for constant values shared across the system.
Module-specific vocabularies (keyword lists, namespace tables) live next
to the modules that use them; everything that crosses a layer boundary
is defined here.

Constants are organized by category:
- Statement Kinds
- Accounting Frameworks
- Matching Methods and Thresholds
- Job Status and Progress
- Issue Severity
- CLI Status Markers
"""

from enum import Enum
from typing import Final


# ==============================================================================
# STATEMENT KINDS
# ==============================================================================

class StatementKind(str, Enum):
    """
    Financial statement kinds recognized by the parsers.

    Closed enumeration: anything a parser cannot classify is UNKNOWN.
    """
    BALANCE_SHEET = 'balance_sheet'
    INCOME_STATEMENT = 'income_statement'
    CASH_FLOW = 'cash_flow'
    EQUITY_STATEMENT = 'equity_statement'
    UNKNOWN = 'unknown'


# Kinds reported at a point in time (instant contexts)
INSTANT_STATEMENT_KINDS: Final[frozenset] = frozenset({StatementKind.BALANCE_SHEET})


# ==============================================================================
# ACCOUNTING FRAMEWORKS
# ==============================================================================

class Framework(str, Enum):
    """Accounting frameworks a taxonomy tag can belong to."""
    US_GAAP = 'US-GAAP'
    IFRS = 'IFRS'
    OTHER = 'Other'

    @classmethod
    def from_value(cls, value: str) -> 'Framework':
        """
        Resolve a framework from loose user input.

        Args:
            value: Framework name such as 'US-GAAP', 'us_gaap', 'ifrs'

        Returns:
            Matching Framework, OTHER when unrecognized
        """
        normalized = (value or '').strip().upper().replace('_', '-')
        if normalized in ('US-GAAP', 'USGAAP', 'GAAP'):
            return cls.US_GAAP
        if normalized in ('IFRS', 'IFRS-FULL'):
            return cls.IFRS
        return cls.OTHER


# ==============================================================================
# MATCHING METHODS AND THRESHOLDS
# ==============================================================================

class MatchMethod(str, Enum):
    """Provenance tier of a taxonomy match, ordered by decreasing trust."""
    EXACT = 'exact'
    FUZZY = 'fuzzy'
    ASSISTED = 'assisted'
    MANUAL = 'manual'

    @property
    def trust_rank(self) -> int:
        """Lower rank means more trusted."""
        return MATCH_METHOD_TRUST_ORDER.index(self)


MATCH_METHOD_TRUST_ORDER: Final[tuple] = (
    MatchMethod.EXACT,
    MatchMethod.FUZZY,
    MatchMethod.ASSISTED,
    MatchMethod.MANUAL,
)

EXACT_MATCH_THRESHOLD: Final[int] = 95
FUZZY_MATCH_THRESHOLD: Final[int] = 80
ASSISTED_MATCH_THRESHOLD: Final[int] = 70
FALLBACK_MATCH_THRESHOLD: Final[int] = 60
DIRECT_TAXONOMY_CONFIDENCE: Final[int] = 100
SYNONYM_MATCH_CONFIDENCE: Final[int] = 95
FUZZY_CANDIDATE_LIMIT: Final[int] = 20


# ==============================================================================
# EXTRACTION CONFIDENCE (per input format)
# ==============================================================================

CONFIDENCE_XBRL: Final[int] = 98
CONFIDENCE_JSON_ITEMS: Final[int] = 95
CONFIDENCE_JSON_FLAT: Final[int] = 90
CONFIDENCE_EXCEL: Final[int] = 85
CONFIDENCE_CSV: Final[int] = 80
CONFIDENCE_PDF: Final[int] = 70
CONFIDENCE_JSON_GENERIC: Final[int] = 60


# ==============================================================================
# JOB STATUS AND PROGRESS
# ==============================================================================

class JobStatus(str, Enum):
    """Lifecycle states of a conversion job."""
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


class FailureKind(str, Enum):
    """Classification of the error that ended a processing attempt."""
    TRANSIENT = 'transient'
    PERMANENT = 'permanent'
    CANCELLED = 'cancelled'


class StepStatus(str, Enum):
    """Status recorded for a processing log entry."""
    STARTED = 'started'
    COMPLETED = 'completed'
    FAILED = 'failed'


class ConversionStep(str, Enum):
    """Ordered conversion steps, named as they appear in the processing log."""
    RETRIEVE = 'retrieving_document'
    PARSE = 'parsing_document'
    MATCH = 'taxonomy_mapping'
    GENERATE = 'generating_xbrl'
    PERSIST = 'saving_results'


# Progress reached once each step completes
STEP_PROGRESS: Final[dict] = {
    ConversionStep.RETRIEVE: 10,
    ConversionStep.PARSE: 30,
    ConversionStep.MATCH: 60,
    ConversionStep.GENERATE: 80,
    ConversionStep.PERSIST: 100,
}

CANCELLED_MESSAGE: Final[str] = 'cancelled by user'


class StoreBackend(str, Enum):
    """
    Where documents, jobs and the taxonomy live.

    MEMORY: process-local, nothing survives the run
    FILESYSTEM: documents and outputs under storage_dir, jobs in memory
    DATABASE: rows in the configured database, document bytes under storage_dir
    """
    MEMORY = 'memory'
    FILESYSTEM = 'filesystem'
    DATABASE = 'database'


# ==============================================================================
# ISSUE SEVERITY
# ==============================================================================

class IssueSeverity(str, Enum):
    """
    Severity of a processing issue.

    CRITICAL: input could not be interpreted at all
    ERROR: a record was wrong and was dropped
    WARNING: partial failure, processing continued
    INFO: informational
    """
    CRITICAL = 'CRITICAL'
    ERROR = 'ERROR'
    WARNING = 'WARNING'
    INFO = 'INFO'


# ==============================================================================
# CLI STATUS MARKERS
# ==============================================================================

STATUS_OK: Final[str] = '[OK]'
STATUS_FAIL: Final[str] = '[FAIL]'
STATUS_INFO: Final[str] = '[INFO]'
STATUS_WARN: Final[str] = '[WARN]'

MENU_HEADER: Final[str] = '=' * 60
MENU_SEPARATOR: Final[str] = '-' * 56


__all__ = [
    'StatementKind',
    'INSTANT_STATEMENT_KINDS',
    'Framework',
    'MatchMethod',
    'MATCH_METHOD_TRUST_ORDER',
    'EXACT_MATCH_THRESHOLD',
    'FUZZY_MATCH_THRESHOLD',
    'ASSISTED_MATCH_THRESHOLD',
    'FALLBACK_MATCH_THRESHOLD',
    'DIRECT_TAXONOMY_CONFIDENCE',
    'SYNONYM_MATCH_CONFIDENCE',
    'FUZZY_CANDIDATE_LIMIT',
    'CONFIDENCE_XBRL',
    'CONFIDENCE_JSON_ITEMS',
    'CONFIDENCE_JSON_FLAT',
    'CONFIDENCE_EXCEL',
    'CONFIDENCE_CSV',
    'CONFIDENCE_PDF',
    'CONFIDENCE_JSON_GENERIC',
    'JobStatus',
    'FailureKind',
    'StepStatus',
    'ConversionStep',
    'STEP_PROGRESS',
    'CANCELLED_MESSAGE',
    'StoreBackend',
    'IssueSeverity',
    'STATUS_OK',
    'STATUS_FAIL',
    'STATUS_INFO',
    'STATUS_WARN',
    'MENU_HEADER',
    'MENU_SEPARATOR',
]
