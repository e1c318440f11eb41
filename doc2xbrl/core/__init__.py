# Path: doc2xbrl/core/__init__.py
"""
doc2xbrl Core Package

Core utilities for the conversion system.

Submodules:
    - logger: IPO-aware logging system
    - errors: Exception hierarchy with retry classification
    - data_paths: Directory management
"""

from .data_paths import DataPathsManager

__all__ = [
    'DataPathsManager',
]
