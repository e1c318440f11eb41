# Path: doc2xbrl/output/__init__.py
"""
Output Module for doc2xbrl

Turns matched canonical reports into XBRL instance documents.

Generation flow:
    Statement[] -> XBRLGenerator -> instance bytes -> StructuralValidator

Usage:
    from output import XBRLGenerator, GenerationOptions

    generator = XBRLGenerator()
    result = generator.generate(report.statements, GenerationOptions(currency='EUR'))
"""

from .xbrl import (
    GenerationOptions,
    GenerationResult,
    StructuralValidator,
    XBRLGenerator,
)

__all__ = [
    'GenerationOptions',
    'GenerationResult',
    'StructuralValidator',
    'XBRLGenerator',
]
