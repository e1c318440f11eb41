# Path: doc2xbrl/process/matcher/engine/coordinator.py
"""
Taxonomy Matcher

The main orchestrator for label-to-tag matching.
This is the primary entry point for the matching engine.

Matching runs four stages per item:
1. Exact    - accepted at >= 95
2. Fuzzy    - accepted at >= 80
3. Assisted - accepted at >= 70
4. Fallback - best candidate of the three if >= 60, else no match

No match is not an error: the item simply needs manual mapping.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Union

from config_loader import ConfigLoader
from constants import FALLBACK_MATCH_THRESHOLD, StatementKind
from core.logger.ipo_logging import get_process_logger
from parsers.models.canonical import CanonicalReport, LineItem, TaxonomyMatch

from ..models.candidates import LearnedMapping, MatchCandidate, MatchRequest, kind_value
from ..models.summary import MatchingSummary
from ..scoring.tiebreaker import Tiebreaker
from ..stages import AssistedScorer, AssistedStage, ExactStage, FuzzyStage
from ..stores.taxonomy_store import TaxonomyStore


class TaxonomyMatcher:
    """
    Main orchestrator for taxonomy matching.

    The TaxonomyMatcher:
    1. Asks each stage, in order of trust, for a candidate
    2. Returns the first candidate that clears its stage threshold
    3. Otherwise falls back to the best candidate seen, if good enough
    4. Attaches matches to report items in place

    Example:
        matcher = TaxonomyMatcher(InMemoryTaxonomyStore())

        summary = matcher.apply_matches(report, sector='all')
        print(f"{summary.matched}/{summary.total_items} items matched")
    """

    def __init__(
        self,
        store: TaxonomyStore,
        assisted_scorer: Optional[AssistedScorer] = None,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize matcher.

        Args:
            store: Taxonomy store shared by all stages
            assisted_scorer: Scorer for the assisted stage
                            (default: PatternTableScorer)
            batch_size: Items per batch (default from config, 50)
            max_workers: Threads per batch (default from config, 4)
        """
        config = ConfigLoader()
        self.logger = get_process_logger('matcher.coordinator')

        self.store = store
        self.batch_size = max(1, batch_size or config.get('match_batch_size', 50))
        self.max_workers = max(1, max_workers or config.get('match_workers', 4))

        self.stages = [
            ExactStage(store),
            FuzzyStage(store),
            AssistedStage(store, assisted_scorer),
        ]
        self.tiebreaker = Tiebreaker()

    # ==========================================================================
    # SINGLE ITEM
    # ==========================================================================

    def match(
        self,
        item: LineItem,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> Optional[TaxonomyMatch]:
        """
        Match one line item.

        Args:
            item: Line item to match
            sector: Industry sector context
            statement_kind: Statement the item belongs to

        Returns:
            TaxonomyMatch or None when the item needs manual mapping
        """
        request = MatchRequest.from_item(item, sector, statement_kind)
        candidate = self._match_request(request)
        return candidate.to_match() if candidate is not None else None

    def _match_request(self, request: MatchRequest) -> Optional[MatchCandidate]:
        if not request.label:
            return None

        proposals: list[Optional[MatchCandidate]] = []
        for stage in self.stages:
            candidate = stage.propose(request)
            if stage.accepts(candidate):
                return candidate
            proposals.append(candidate)

        best, how = self.tiebreaker.select_best(proposals)
        if best is not None and best.confidence >= FALLBACK_MATCH_THRESHOLD:
            self.logger.debug(
                f"Fallback '{request.label}' -> {best.tag} "
                f"({best.confidence}, {best.method.value}, {how})"
            )
            return best

        self.logger.debug(f"No match for '{request.label}'")
        return None

    # ==========================================================================
    # BATCHES
    # ==========================================================================

    def match_batch(
        self,
        items: Iterable[LineItem],
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> list[Optional[TaxonomyMatch]]:
        """
        Match many items, batch by batch.

        Items inside a batch are matched concurrently; results keep the
        input order.

        Args:
            items: Line items
            sector: Industry sector context
            statement_kind: Statement the items belong to

        Returns:
            One TaxonomyMatch (or None) per input item, in input order
        """
        items = list(items)
        results: list[Optional[TaxonomyMatch]] = []

        for start in range(0, len(items), self.batch_size):
            batch = items[start:start + self.batch_size]

            if self.max_workers == 1 or len(batch) == 1:
                results.extend(self.match(item, sector, statement_kind) for item in batch)
                continue

            workers = min(self.max_workers, len(batch))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix='matcher'
            ) as executor:
                results.extend(executor.map(
                    lambda item: self.match(item, sector, statement_kind),
                    batch,
                ))

        return results

    def apply_matches(
        self,
        report: CanonicalReport,
        sector: Optional[str] = None
    ) -> MatchingSummary:
        """
        Attach matches to every item of a report in place.

        Items that already carry a match (XML-instance facts) are left
        untouched.

        Args:
            report: Parsed report
            sector: Industry sector context

        Returns:
            MatchingSummary
        """
        summary = MatchingSummary()

        for statement in report.statements:
            pending = [item for item in statement.items if item.taxonomy_match is None]
            pending_ids = {id(item) for item in pending}
            matches = self.match_batch(pending, sector, statement.kind)

            for item, match in zip(pending, matches):
                item.taxonomy_match = match

            for item in statement.items:
                if item.taxonomy_match is not None and id(item) not in pending_ids:
                    summary.already_matched += 1
                method = item.taxonomy_match.method if item.taxonomy_match else None
                summary.record(item.concept, method)

        self.logger.info(
            f"Matched {summary.matched}/{summary.total_items} items "
            f"({summary.unmatched} need manual mapping)"
        )
        return summary

    # ==========================================================================
    # LEARNING
    # ==========================================================================

    def confirm_match(
        self,
        label: str,
        match: TaxonomyMatch,
        sector: Optional[str] = None,
        statement_kind: Union[StatementKind, str, None] = None
    ) -> LearnedMapping:
        """
        Persist an operator-confirmed mapping for a label.

        The store keeps whichever of the old and new mapping has the higher
        confidence.

        Args:
            label: Source label
            match: Confirmed match
            sector: Sector scope of the mapping
            statement_kind: Statement kind scope of the mapping

        Returns:
            The mapping now stored for the label
        """
        mapping = self.store.upsert_learned_mapping(
            label,
            match.tag,
            match.confidence,
            match.method,
            framework=match.framework,
            sector=sector,
            statement_kind=kind_value(statement_kind),
        )
        self.logger.info(f"Confirmed '{label}' -> {mapping.tag}")
        return mapping


__all__ = ['TaxonomyMatcher']
