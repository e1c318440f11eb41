# Path: doc2xbrl/process/matcher/stores/taxonomy_store.py
"""
Taxonomy Store

Read-mostly store of taxonomy concepts and learned label mappings.

The matching stages only talk to the TaxonomyStore interface. Two
implementations exist:
- InMemoryTaxonomyStore (this module): seeded with DEFAULT_TAXONOMY,
  guarded by a lock, used by the CLI and tests
- SqlTaxonomyStore (database.integration): SQLAlchemy-backed

Learned mapping writes are upserts keyed by source label; an existing
mapping is only replaced by one with higher confidence.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Union

from constants import (
    DIRECT_TAXONOMY_CONFIDENCE,
    FUZZY_CANDIDATE_LIMIT,
    Framework,
    MatchMethod,
    StatementKind,
)
from core.logger.ipo_logging import get_process_logger

from ..models.candidates import (
    ALL_SECTORS,
    LearnedMapping,
    MatchCandidate,
    TaxonomyConcept,
    kind_value,
)
from .seed import DEFAULT_TAXONOMY


# ==============================================================================
# SHARED LOOKUP RULES
# ==============================================================================

def concept_is_exact_hit(concept: TaxonomyConcept, label: str) -> bool:
    """
    Direct taxonomy hit: label equals the concept name, the tag, or the
    tag's local name (case-insensitive).
    """
    needle = (label or '').strip().lower()
    if not needle:
        return False
    return needle in (
        concept.concept.lower(),
        concept.tag.lower(),
        concept.local_name.lower(),
    )


def concept_contains_label(concept: TaxonomyConcept, label: str) -> bool:
    """Containment either way between the label and the concept name/synonyms."""
    needle = (label or '').strip().lower()
    if not needle:
        return False
    for text in concept.labels():
        text = text.lower()
        if needle in text or (len(text) >= 3 and text in needle):
            return True
    return False


def shortlist_concepts(
    concepts: Iterable[TaxonomyConcept],
    label: str,
    sector: Optional[str] = None,
    statement_kind: Union[StatementKind, str, None] = None,
    limit: int = FUZZY_CANDIDATE_LIMIT
) -> list[TaxonomyConcept]:
    """
    Fuzzy-stage shortlist.

    Concepts whose name or synonyms contain the label (or are contained
    in it) come first; concepts sharing the request's sector (when not
    'all') or statement kind follow. At most `limit` concepts.

    Args:
        concepts: All taxonomy concepts, in store order
        label: Item label
        sector: Request sector
        statement_kind: Request statement kind
        limit: Maximum shortlist size

    Returns:
        Ordered shortlist
    """
    kind = kind_value(statement_kind)
    textual: list[TaxonomyConcept] = []
    scoped: list[TaxonomyConcept] = []

    for concept in concepts:
        if concept_contains_label(concept, label):
            textual.append(concept)
        elif sector and sector != ALL_SECTORS and concept.sector == sector:
            scoped.append(concept)
        elif kind and concept.statement_kind.value == kind:
            scoped.append(concept)

    return (textual + scoped)[:limit]


def select_learned(
    mapping: Optional[LearnedMapping],
    sector: Optional[str],
    statement_kind: Union[StatementKind, str, None]
) -> Optional[LearnedMapping]:
    """Return the mapping when its scope admits the request."""
    if mapping is not None and mapping.applies_to(sector, statement_kind):
        return mapping
    return None


# ==============================================================================
# INTERFACE
# ==============================================================================

class TaxonomyStore(ABC):
    """
    Abstract taxonomy store.

    Example:
        store = InMemoryTaxonomyStore()
        hit = store.find_exact('Total Assets')
        # MatchCandidate(tag='us-gaap:Assets', confidence=100, ...)
    """

    @abstractmethod
    def find_exact(
        self,
        label: str,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> Optional[MatchCandidate]:
        """
        Learned mapping for the literal label (stored confidence), else a
        direct taxonomy hit (confidence 100).

        Args:
            label: Item label
            sector: Request sector
            statement_kind: Request statement kind

        Returns:
            Candidate or None
        """
        pass

    @abstractmethod
    def find_candidates(
        self,
        label: str,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None,
        limit: int = FUZZY_CANDIDATE_LIMIT
    ) -> list[TaxonomyConcept]:
        """Shortlist of concepts for fuzzy scoring (see shortlist_concepts)."""
        pass

    @abstractmethod
    def upsert_learned_mapping(
        self,
        label: str,
        tag: str,
        confidence: int,
        method: MatchMethod,
        framework: Optional[Framework] = None,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> LearnedMapping:
        """
        Create or improve the mapping for a source label.

        Raises:
            ValueError: Tag is not in the taxonomy
        """
        pass

    @abstractmethod
    def mappings_for_sector(
        self,
        sector: str,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> list[LearnedMapping]:
        """Active mappings whose concept belongs to a sector, best first."""
        pass

    @abstractmethod
    def all_concepts(self) -> list[TaxonomyConcept]:
        """Every taxonomy concept, in store order."""
        pass

    def concept_for_tag(self, tag: str) -> Optional[TaxonomyConcept]:
        """Concept carrying a tag, if any."""
        for concept in self.all_concepts():
            if concept.tag == tag:
                return concept
        return None


# ==============================================================================
# IN-MEMORY IMPLEMENTATION
# ==============================================================================

class InMemoryTaxonomyStore(TaxonomyStore):
    """
    Lock-guarded in-memory taxonomy store.

    Example:
        store = InMemoryTaxonomyStore()
        store.upsert_learned_mapping('Cash at bank', 'us-gaap:CashAndCashEquivalentsCarryingAmount',
                                     97, MatchMethod.MANUAL)
    """

    def __init__(
        self,
        concepts: Optional[Iterable[TaxonomyConcept]] = None,
        mappings: Optional[Iterable[LearnedMapping]] = None
    ):
        """
        Initialize store.

        Args:
            concepts: Taxonomy concepts (default: DEFAULT_TAXONOMY)
            mappings: Learned mappings to preload
        """
        self.logger = get_process_logger('matcher.taxonomy_store')
        self._lock = threading.Lock()
        self._concepts: list[TaxonomyConcept] = list(
            DEFAULT_TAXONOMY if concepts is None else concepts
        )
        self._mappings: dict[str, LearnedMapping] = {}
        for mapping in mappings or ():
            self._mappings[mapping.source_label] = mapping

        self.logger.debug(
            f"Taxonomy store ready: {len(self._concepts)} concepts, "
            f"{len(self._mappings)} learned mappings"
        )

    def add_concept(self, concept: TaxonomyConcept) -> None:
        """Add a concept to the taxonomy."""
        with self._lock:
            self._concepts.append(concept)

    def all_concepts(self) -> list[TaxonomyConcept]:
        with self._lock:
            return list(self._concepts)

    def find_exact(self, label, sector=None, statement_kind=None):
        key = (label or '').strip()
        with self._lock:
            mapping = select_learned(self._mappings.get(key), sector, statement_kind)
            if mapping is not None:
                return MatchCandidate.from_learned(mapping, stage='exact')

            for concept in self._concepts:
                if concept_is_exact_hit(concept, key):
                    return MatchCandidate.from_concept(
                        concept, DIRECT_TAXONOMY_CONFIDENCE, MatchMethod.EXACT, stage='exact'
                    )
        return None

    def find_candidates(self, label, sector=None, statement_kind=None,
                        limit=FUZZY_CANDIDATE_LIMIT):
        with self._lock:
            concepts = list(self._concepts)
        return shortlist_concepts(concepts, label, sector, statement_kind, limit)

    def upsert_learned_mapping(self, label, tag, confidence, method,
                               framework=None, sector=None, statement_kind=None):
        key = (label or '').strip()
        if not key:
            raise ValueError('Source label must not be empty')

        concept = self.concept_for_tag(tag)
        if concept is None:
            raise ValueError(f"Taxonomy entry not found for tag: {tag}")

        with self._lock:
            existing = self._mappings.get(key)
            if existing is not None and existing.confidence >= confidence:
                self.logger.debug(
                    f"Kept mapping '{key}' -> {existing.tag} "
                    f"({existing.confidence} >= {confidence})"
                )
                return existing

            mapping = LearnedMapping(
                source_label=key,
                tag=tag,
                confidence=int(confidence),
                method=MatchMethod(method),
                framework=framework or concept.framework,
                concept=concept.concept,
                sector=sector,
                statement_kind=kind_value(statement_kind),
            )
            if existing is not None:
                mapping.created_at = existing.created_at
                mapping.updated_at = datetime.utcnow()
            self._mappings[key] = mapping

        self.logger.info(f"Learned mapping '{key}' -> {tag} ({confidence})")
        return mapping

    def mappings_for_sector(self, sector, statement_kind=None):
        kind = kind_value(statement_kind)
        with self._lock:
            by_tag = {concept.tag: concept for concept in self._concepts}
            selected = []
            for mapping in self._mappings.values():
                concept = by_tag.get(mapping.tag)
                if not mapping.is_active or concept is None:
                    continue
                if concept.sector != sector:
                    continue
                if kind and concept.statement_kind.value != kind:
                    continue
                selected.append(mapping)
        return sorted(selected, key=lambda m: m.confidence, reverse=True)


__all__ = [
    'concept_is_exact_hit',
    'concept_contains_label',
    'shortlist_concepts',
    'select_learned',
    'TaxonomyStore',
    'InMemoryTaxonomyStore',
]
