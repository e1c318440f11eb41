# Path: doc2xbrl/process/matcher/models/candidates.py
"""
Matching Candidate Models

Models shared by the matching stages and the taxonomy stores:
- TaxonomyConcept: one concept of the reference taxonomy
- LearnedMapping: a source label previously mapped to a tag
- MatchRequest: what a stage is asked to match
- MatchCandidate: what a stage proposes
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from constants import Framework, MatchMethod, StatementKind
from parsers.models.canonical import LineItem, TaxonomyMatch


# Sector value meaning "applies to every sector"
ALL_SECTORS = 'all'


def kind_value(statement_kind: Union[StatementKind, str, None]) -> Optional[str]:
    """Normalize a statement kind (enum or string) to its string value."""
    if statement_kind is None:
        return None
    if isinstance(statement_kind, StatementKind):
        return statement_kind.value
    value = str(statement_kind).strip().lower()
    return value or None


@dataclass
class TaxonomyConcept:
    """
    One concept of the reference taxonomy.

    Attributes:
        concept: Human-readable concept name ('Total Assets')
        tag: Prefixed tag ('us-gaap:Assets')
        sector: Sector the concept belongs to ('all' for every sector)
        statement_kind: Statement the concept is reported on
        framework: Accounting framework of the tag
        description: Taxonomy description
        data_type: 'monetary', 'shares', 'string', ...
        is_required: Whether filers are expected to report it
        hierarchy_level: Depth in the statement (1 = total)
        parent_concept: Parent concept name, if any
        synonyms: Alternative labels
    """
    concept: str
    tag: str
    sector: str = ALL_SECTORS
    statement_kind: StatementKind = StatementKind.UNKNOWN
    framework: Framework = Framework.US_GAAP
    description: str = ''
    data_type: str = 'monetary'
    is_required: bool = False
    hierarchy_level: int = 1
    parent_concept: Optional[str] = None
    synonyms: tuple[str, ...] = ()

    @property
    def local_name(self) -> str:
        """Tag without its prefix."""
        return self.tag.split(':', 1)[-1]

    def labels(self) -> list[str]:
        """Concept name followed by its synonyms."""
        return [self.concept, *self.synonyms]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'concept': self.concept,
            'tag': self.tag,
            'sector': self.sector,
            'statement_kind': self.statement_kind.value,
            'framework': self.framework.value,
            'description': self.description,
            'data_type': self.data_type,
            'is_required': self.is_required,
            'hierarchy_level': self.hierarchy_level,
            'parent_concept': self.parent_concept,
            'synonyms': list(self.synonyms),
        }


@dataclass
class LearnedMapping:
    """
    A source label mapped to a taxonomy tag by an earlier conversion
    or by an operator.

    Keyed by source_label; a mapping carrying a sector or statement kind
    only applies when the request has the same scope.
    """
    source_label: str
    tag: str
    confidence: int
    method: MatchMethod
    framework: Framework = Framework.US_GAAP
    concept: Optional[str] = None
    sector: Optional[str] = None
    statement_kind: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def applies_to(
        self,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> bool:
        """
        Check whether this mapping's scope admits a request.

        Args:
            sector: Request sector
            statement_kind: Request statement kind

        Returns:
            True if the mapping may be used
        """
        if not self.is_active:
            return False
        if self.sector and self.sector != ALL_SECTORS and self.sector != sector:
            return False
        if self.statement_kind and self.statement_kind != kind_value(statement_kind):
            return False
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'source_label': self.source_label,
            'tag': self.tag,
            'confidence': self.confidence,
            'method': self.method.value,
            'framework': self.framework.value,
            'concept': self.concept,
            'sector': self.sector,
            'statement_kind': self.statement_kind,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }


@dataclass
class MatchRequest:
    """
    Input to a matching stage.

    Attributes:
        label: Free-text line item label
        value: Item value (the assisted stage looks at magnitude)
        sector: Industry sector context
        statement_kind: Statement the item was found on
    """
    label: str
    value: Any = None
    sector: Optional[str] = None
    statement_kind: Optional[str] = None

    @classmethod
    def from_item(
        cls,
        item: LineItem,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> 'MatchRequest':
        """Build a request for a line item."""
        return cls(
            label=(item.concept or '').strip(),
            value=item.value,
            sector=sector,
            statement_kind=kind_value(statement_kind),
        )


@dataclass
class MatchCandidate:
    """
    A tag proposed by one matching stage.

    Attributes:
        tag: Prefixed taxonomy tag
        framework: Framework of the tag
        confidence: 0-100 score from the proposing stage
        method: Method reported on the resulting match
        concept: Taxonomy concept name (or pattern) behind the proposal
        synonyms: Synonyms of the concept
        stage: Name of the stage that produced the candidate
    """
    tag: str
    framework: Framework
    confidence: int
    method: MatchMethod
    concept: Optional[str] = None
    synonyms: tuple[str, ...] = ()
    stage: str = ''

    @classmethod
    def from_concept(
        cls,
        concept: TaxonomyConcept,
        confidence: int,
        method: MatchMethod,
        stage: str = ''
    ) -> 'MatchCandidate':
        """Candidate pointing at a taxonomy concept."""
        return cls(
            tag=concept.tag,
            framework=concept.framework,
            confidence=confidence,
            method=method,
            concept=concept.concept,
            synonyms=tuple(concept.synonyms),
            stage=stage,
        )

    @classmethod
    def from_learned(cls, mapping: LearnedMapping, stage: str = '') -> 'MatchCandidate':
        """Candidate pointing at a learned mapping; keeps its stored confidence."""
        return cls(
            tag=mapping.tag,
            framework=mapping.framework,
            confidence=mapping.confidence,
            method=MatchMethod.EXACT,
            concept=mapping.concept,
            stage=stage,
        )

    def to_match(self) -> TaxonomyMatch:
        """Freeze into the TaxonomyMatch attached to a line item."""
        return TaxonomyMatch(
            tag=self.tag,
            framework=self.framework,
            confidence=self.confidence,
            method=self.method,
            synonyms=tuple(self.synonyms),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'tag': self.tag,
            'framework': self.framework.value,
            'confidence': self.confidence,
            'method': self.method.value,
            'concept': self.concept,
            'synonyms': list(self.synonyms),
            'stage': self.stage,
        }


__all__ = [
    'ALL_SECTORS',
    'kind_value',
    'TaxonomyConcept',
    'LearnedMapping',
    'MatchRequest',
    'MatchCandidate',
]
