# Path: doc2xbrl/core/logger/ipo_logging.py
"""
IPO-Aware Logging for doc2xbrl

Input-Process-Output separated logging for document conversion.

This module sets up logging with separate files for:
- INPUT layer (document retrieval, format parsers, CLI)
- PROCESS layer (taxonomy matching, job orchestration)
- OUTPUT layer (XBRL generation, result persistence)
- Full activity (everything combined)

Layer files rotate by size so long-running workers do not grow
unbounded logs.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


# Layer prefix -> log file name
IPO_LAYERS: dict[str, str] = {
    'input': 'input_activity.log',
    'process': 'process_activity.log',
    'output': 'output_activity.log',
}

FULL_LOG_FILE = 'full_activity.log'

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s - %(message)s'
CONSOLE_FORMAT = '[%(levelname)s] %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class IPOFilter(logging.Filter):
    """Filter logs by IPO layer prefix."""

    def __init__(self, layer: str):
        """
        Initialize filter for specific IPO layer.

        Args:
            layer: 'input', 'process', or 'output'
        """
        super().__init__()
        self.layer = layer

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter records by logger name prefix."""
        return record.name == self.layer or record.name.startswith(f'{self.layer}.')


def _file_handler(
    path: Path,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int
) -> logging.Handler:
    """Build a size-rotating file handler at DEBUG level."""
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8',
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_ipo_logging(
    log_dir: Path,
    log_level: str = 'INFO',
    console_output: bool = True,
    max_size_mb: int = 10,
    backup_count: int = 5
) -> None:
    """
    Set up IPO-aware logging for doc2xbrl.

    Creates separate log files for:
    - input_activity.log (INPUT layer)
    - process_activity.log (PROCESS layer)
    - output_activity.log (OUTPUT layer)
    - full_activity.log (all activities combined)

    Args:
        log_dir: Directory for log files
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_output: Whether to also output to console
        max_size_mb: Size at which a log file rotates
        backup_count: Number of rotated files kept per log

    Example:
        setup_ipo_logging(
            log_dir=Path('/var/lib/doc2xbrl/logs'),
            log_level='INFO',
            console_output=True
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)
    max_bytes = max_size_mb * 1024 * 1024

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger.addHandler(
        _file_handler(log_dir / FULL_LOG_FILE, formatter, max_bytes, backup_count)
    )

    for layer, file_name in IPO_LAYERS.items():
        handler = _file_handler(log_dir / file_name, formatter, max_bytes, backup_count)
        handler.addFilter(IPOFilter(layer))
        root_logger.addHandler(handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)


def get_input_logger(name: str) -> logging.Logger:
    """
    Get logger for INPUT layer.

    Args:
        name: Logger name (e.g., 'csv_parser', 'document_store')

    Returns:
        Logger configured for INPUT layer

    Example:
        logger = get_input_logger('csv_parser')
        logger.info("Parsing balance_sheet.csv")
    """
    return logging.getLogger(f'input.{name}')


def get_process_logger(name: str) -> logging.Logger:
    """
    Get logger for PROCESS layer (matching and orchestration).

    Args:
        name: Logger name (e.g., 'matcher.coordinator', 'jobs.orchestrator')

    Returns:
        Logger configured for PROCESS layer

    Example:
        logger = get_process_logger('matcher.coordinator')
        logger.info("Matching 42 line items")
    """
    return logging.getLogger(f'process.{name}')


def get_output_logger(name: str) -> logging.Logger:
    """
    Get logger for OUTPUT layer.

    Args:
        name: Logger name (e.g., 'xbrl_generator', 'result_store')

    Returns:
        Logger configured for OUTPUT layer

    Example:
        logger = get_output_logger('xbrl_generator')
        logger.info("Generating instance document")
    """
    return logging.getLogger(f'output.{name}')


__all__ = [
    'IPOFilter',
    'setup_ipo_logging',
    'get_input_logger',
    'get_process_logger',
    'get_output_logger',
]
