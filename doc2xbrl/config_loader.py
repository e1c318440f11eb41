# Path: doc2xbrl/config_loader.py
"""
Configuration Loader for doc2xbrl

Loads configuration from .env file for the document-to-XBRL conversion system.
Singleton pattern ensures consistent configuration across all components.

All configuration comes from environment variables prefixed with DOC2XBRL_.
Nothing is required: every key has a default so the converter can run
from a bare checkout, and derived paths hang off DOC2XBRL_DATA_ROOT.
"""

import os
from typing import Optional, Any
from pathlib import Path
from dotenv import load_dotenv


# ==============================================================================
# DEFAULT CONFIGURATION VALUES
# ==============================================================================

# Logging Defaults
DEFAULT_LOG_LEVEL: str = 'INFO'
DEFAULT_LOG_MAX_SIZE_MB: int = 10
DEFAULT_LOG_BACKUP_COUNT: int = 5

# Document Defaults
DEFAULT_CURRENCY: str = 'USD'
DEFAULT_FRAMEWORK: str = 'US-GAAP'
DEFAULT_SECTOR: str = 'all'

# Matching Defaults
DEFAULT_MATCH_BATCH_SIZE: int = 50
DEFAULT_MATCH_WORKERS: int = 4

# Job Defaults
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_BASE_DELAY: float = 5.0
DEFAULT_MAX_CONCURRENT_JOBS: int = 3
DEFAULT_JOB_RETENTION_DAYS: int = 30
DEFAULT_STORE_BACKEND: str = 'memory'

# Data root used when DOC2XBRL_DATA_ROOT is not set
DEFAULT_DATA_ROOT: Path = Path.home() / '.doc2xbrl'


class ConfigLoader:
    """
    Thread-safe singleton configuration loader for doc2xbrl.

    Loads configuration from environment variables with type conversion
    and sensible defaults.

    Example:
        config = ConfigLoader()
        storage = config.get('storage_dir')  # Returns Path object
        retries = config.get('max_retries')  # Returns int
    """

    _instance: Optional['ConfigLoader'] = None
    _initialized: bool = False

    def __new__(cls) -> 'ConfigLoader':
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """
        Initialize configuration loader.

        Only runs once due to singleton pattern. Loads .env file
        from the program directory on first instantiation.
        """
        if ConfigLoader._initialized:
            return

        # doc2xbrl/config_loader.py -> .env is in same directory
        program_dir = Path(__file__).resolve().parent
        env_path = program_dir / '.env'

        if env_path.exists():
            load_dotenv(dotenv_path=env_path, interpolate=True)

        self._config = self._load_configuration(program_dir)
        ConfigLoader._initialized = True

    def _load_configuration(self, program_dir: Path) -> dict[str, Any]:
        """
        Load all configuration from environment.

        Args:
            program_dir: Directory holding this module

        Returns:
            Dictionary of configuration values with proper types
        """
        data_root = self._get_path('DOC2XBRL_DATA_ROOT') or DEFAULT_DATA_ROOT

        config = {
            # ================================================================
            # BASE PATHS
            # ================================================================
            'program_dir': program_dir,
            'data_root': data_root,
            'storage_dir': self._get_path('DOC2XBRL_STORAGE_DIR') or data_root / 'storage',
            'output_dir': self._get_path('DOC2XBRL_OUTPUT_DIR') or data_root / 'output',

            # ================================================================
            # ENVIRONMENT & DEBUG
            # ================================================================
            'environment': self._get_env('DOC2XBRL_ENVIRONMENT', 'development'),
            'debug': self._get_bool('DOC2XBRL_DEBUG', False),

            # ================================================================
            # LOGGING CONFIGURATION
            # ================================================================
            'log_dir': self._get_path('DOC2XBRL_LOG_DIR') or data_root / 'logs',
            'log_level': self._get_env('DOC2XBRL_LOG_LEVEL', DEFAULT_LOG_LEVEL),
            'log_console': self._get_bool('DOC2XBRL_LOG_CONSOLE', True),
            'log_max_size_mb': self._get_int(
                'DOC2XBRL_LOG_MAX_SIZE_MB', DEFAULT_LOG_MAX_SIZE_MB
            ),
            'log_backup_count': self._get_int(
                'DOC2XBRL_LOG_BACKUP_COUNT', DEFAULT_LOG_BACKUP_COUNT
            ),

            # ================================================================
            # DOCUMENT DEFAULTS
            # ================================================================
            'default_currency': self._get_env(
                'DOC2XBRL_DEFAULT_CURRENCY', DEFAULT_CURRENCY
            ).upper(),
            'default_framework': self._get_env(
                'DOC2XBRL_DEFAULT_FRAMEWORK', DEFAULT_FRAMEWORK
            ),
            'default_sector': self._get_env('DOC2XBRL_DEFAULT_SECTOR', DEFAULT_SECTOR),
            'entity_scheme': self._get_env(
                'DOC2XBRL_ENTITY_SCHEME', 'http://www.sec.gov/CIK'
            ),

            # ================================================================
            # MATCHING CONFIGURATION
            # ================================================================
            'match_batch_size': self._get_int(
                'DOC2XBRL_MATCH_BATCH_SIZE', DEFAULT_MATCH_BATCH_SIZE
            ),
            'match_workers': self._get_int(
                'DOC2XBRL_MATCH_WORKERS', DEFAULT_MATCH_WORKERS
            ),

            # ================================================================
            # JOB CONFIGURATION
            # ================================================================
            'max_retries': self._get_int('DOC2XBRL_MAX_RETRIES', DEFAULT_MAX_RETRIES),
            'retry_base_delay': self._get_float(
                'DOC2XBRL_RETRY_BASE_DELAY', DEFAULT_RETRY_BASE_DELAY
            ),
            'max_concurrent_jobs': self._get_int(
                'DOC2XBRL_MAX_CONCURRENT_JOBS', DEFAULT_MAX_CONCURRENT_JOBS
            ),
            'job_retention_days': self._get_int(
                'DOC2XBRL_JOB_RETENTION_DAYS', DEFAULT_JOB_RETENTION_DAYS
            ),
            'store_backend': self._get_env('DOC2XBRL_STORE_BACKEND', DEFAULT_STORE_BACKEND),

            # ================================================================
            # DATABASE CONFIGURATION
            # ================================================================
            # Full URL wins; otherwise SQLite file under data_root
            'database_url': self._get_env('DOC2XBRL_DATABASE_URL', ''),
            'database_path': self._get_path('DOC2XBRL_DATABASE_PATH')
            or data_root / 'doc2xbrl.db',

            # PostgreSQL configuration
            'db_host': self._get_env('DOC2XBRL_DB_HOST', 'localhost'),
            'db_port': self._get_int('DOC2XBRL_DB_PORT', 5432),
            'db_name': self._get_env('DOC2XBRL_DB_NAME', 'doc2xbrl_db'),
            'db_user': self._get_env('DOC2XBRL_DB_USER', ''),
            'db_password': self._get_env('DOC2XBRL_DB_PASSWORD', ''),
            'db_pool_size': self._get_int('DOC2XBRL_DB_POOL_SIZE', 5),
            'db_pool_max_overflow': self._get_int('DOC2XBRL_DB_POOL_MAX_OVERFLOW', 10),
            'db_pool_timeout': self._get_int('DOC2XBRL_DB_POOL_TIMEOUT', 30),
            'db_pool_recycle': self._get_int('DOC2XBRL_DB_POOL_RECYCLE', 3600),
        }

        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self._config.get(key, default)

    def _get_path(self, key: str, required: bool = False) -> Optional[Path]:
        """
        Get path from environment variable.

        Args:
            key: Environment variable name
            required: If True, raise error when missing

        Returns:
            Path object or None

        Raises:
            ValueError: If required and missing
        """
        value = os.getenv(key)

        if not value:
            if required:
                raise ValueError(f"Required path not configured: {key}")
            return None

        if '${' in value:
            value = os.path.expandvars(value)

        return Path(value).expanduser()

    def _get_env(self, key: str, default: str = '') -> str:
        """Get string environment variable."""
        return os.getenv(key, default)

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def _get_float(self, key: str, default: float) -> float:
        """Get float environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_db_connection_string(self) -> str:
        """
        Build database connection string.

        Uses DOC2XBRL_DATABASE_URL when set, otherwise a SQLite file URL.

        Returns:
            SQLAlchemy connection string
        """
        if self._config['database_url']:
            return self._config['database_url']
        return f"sqlite:///{self._config['database_path']}"

    def get_postgres_connection_string(self) -> str:
        """
        Build PostgreSQL connection string from the DOC2XBRL_DB_* values.

        Returns:
            PostgreSQL connection string
        """
        return (
            f"postgresql://{self._config['db_user']}:"
            f"{self._config['db_password']}@"
            f"{self._config['db_host']}:"
            f"{self._config['db_port']}/"
            f"{self._config['db_name']}"
        )

    def __repr__(self) -> str:
        """String representation showing key paths."""
        return (
            f"ConfigLoader("
            f"data_root={self._config.get('data_root')}, "
            f"environment={self._config.get('environment')})"
        )


__all__ = ['ConfigLoader']
