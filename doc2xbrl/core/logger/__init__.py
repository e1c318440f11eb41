# Path: doc2xbrl/core/logger/__init__.py
"""
doc2xbrl Logger Package

IPO-aware logging for the conversion system.

Provides separate log streams for:
- INPUT layer (document retrieval, parsers)
- PROCESS layer (matching, job orchestration)
- OUTPUT layer (XBRL generation, persistence)
"""

from .ipo_logging import (
    IPOFilter,
    setup_ipo_logging,
    get_input_logger,
    get_process_logger,
    get_output_logger,
)

__all__ = [
    'IPOFilter',
    'setup_ipo_logging',
    'get_input_logger',
    'get_process_logger',
    'get_output_logger',
]
