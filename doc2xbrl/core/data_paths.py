# Path: doc2xbrl/core/data_paths.py
"""
Data Paths Manager for doc2xbrl

Automatic directory creation for the conversion system's data partition.

Creates (under DOC2XBRL_DATA_ROOT unless overridden):
- storage/ (uploaded source documents and generated instances)
- output/ (CLI conversion output)
- logs/ (IPO logging)
- the directory holding the SQLite database file
"""

from pathlib import Path
from typing import Optional

from config_loader import ConfigLoader


class DataPathsManager:
    """
    Manages directory creation for doc2xbrl data directories.

    Example:
        manager = DataPathsManager()
        result = manager.ensure_all_directories()
        if result['failed']:
            print(result['failed'])
    """

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize the data paths manager.

        Args:
            config: Optional ConfigLoader instance (creates new if not provided)
        """
        self.config = config or ConfigLoader()
        self._created_dirs: list[Path] = []
        self._existing_dirs: list[Path] = []
        self._failed_dirs: list[tuple[Path, str]] = []

    def required_directories(self) -> list[Path]:
        """
        List the directories doc2xbrl writes into.

        Returns:
            Paths that must exist before conversions run
        """
        database_path = self.config.get('database_path')
        data_dirs = [
            self.config.get('data_root'),
            self.config.get('storage_dir'),
            self.config.get('output_dir'),
            self.config.get('log_dir'),
            Path(database_path).parent if database_path else None,
        ]
        return [Path(d) for d in data_dirs if d is not None]

    def ensure_all_directories(self) -> dict:
        """
        Create all required directories.

        Returns:
            Dictionary with statistics:
                - created: List of newly created directories
                - existing: List of directories that already existed
                - failed: List of (path, error) tuples for failed creations
        """
        self._created_dirs = []
        self._existing_dirs = []
        self._failed_dirs = []

        for directory in self.required_directories():
            self._ensure_directory(directory)

        return {
            'created': self._created_dirs,
            'existing': self._existing_dirs,
            'failed': self._failed_dirs,
        }

    def _ensure_directory(self, path: Path) -> bool:
        """
        Ensure a single directory exists, creating it if necessary.

        Args:
            path: Path to directory

        Returns:
            True if directory exists or was created, False if failed
        """
        if path in self._created_dirs or path in self._existing_dirs:
            return True

        try:
            if path.exists():
                if path.is_dir():
                    self._existing_dirs.append(path)
                    return True
                self._failed_dirs.append(
                    (path, f"Path exists but is not a directory: {path}")
                )
                return False

            path.mkdir(parents=True, exist_ok=True)
            self._created_dirs.append(path)
            return True

        except PermissionError as e:
            self._failed_dirs.append((path, f"Permission denied: {e}"))
            return False
        except OSError as e:
            self._failed_dirs.append((path, f"OS error: {e}"))
            return False


__all__ = ['DataPathsManager']
