# Path: doc2xbrl/output/xbrl/__init__.py
"""
XBRL Instance Output

- XBRLGenerator: statements -> instance document bytes
- StructuralValidator: contexts/units/facts cross-reference checks
"""

from .contexts import ContextPlanner, ContextSpec, context_id_for, document_context_id
from .formatting import format_number, format_value, resolve_tag
from .generator import (
    GenerationOptions,
    GenerationMetadata,
    GenerationResult,
    XBRLGenerator,
)
from .validator import StructuralValidator

__all__ = [
    'ContextPlanner',
    'ContextSpec',
    'context_id_for',
    'document_context_id',
    'format_number',
    'format_value',
    'resolve_tag',
    'GenerationOptions',
    'GenerationMetadata',
    'GenerationResult',
    'XBRLGenerator',
    'StructuralValidator',
]
