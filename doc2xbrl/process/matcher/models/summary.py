# Path: doc2xbrl/process/matcher/models/summary.py
"""
Matching Summary

Counts produced when a whole report is matched. Unmatched items are not
errors; they are listed here for manual mapping.
"""

from dataclasses import dataclass, field

from constants import MatchMethod


@dataclass
class MatchingSummary:
    """
    Outcome of matching every item of a report.

    Attributes:
        total_items: Items seen
        matched_by_method: Matched item count per method
        already_matched: Items that arrived with a match (left untouched)
        unmatched_labels: Labels that need manual mapping
    """
    total_items: int = 0
    matched_by_method: dict[str, int] = field(
        default_factory=lambda: {method.value: 0 for method in MatchMethod}
    )
    already_matched: int = 0
    unmatched_labels: list[str] = field(default_factory=list)

    @property
    def matched(self) -> int:
        """Items carrying a match after the run (including pre-matched)."""
        return sum(self.matched_by_method.values())

    @property
    def unmatched(self) -> int:
        """Items without a match."""
        return len(self.unmatched_labels)

    @property
    def match_rate(self) -> float:
        """Percentage of items carrying a match."""
        if self.total_items == 0:
            return 0.0
        return (self.matched / self.total_items) * 100

    def record(self, label: str, method) -> None:
        """
        Count one item.

        Args:
            label: Item label
            method: MatchMethod of its match, or None when unmatched
        """
        self.total_items += 1
        if method is None:
            self.unmatched_labels.append(label)
            return
        key = method.value if isinstance(method, MatchMethod) else str(method)
        self.matched_by_method[key] = self.matched_by_method.get(key, 0) + 1

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'total_items': self.total_items,
            'matched': self.matched,
            'unmatched': self.unmatched,
            'already_matched': self.already_matched,
            'matched_by_method': dict(self.matched_by_method),
            'unmatched_labels': list(self.unmatched_labels),
            'match_rate': round(self.match_rate, 1),
        }


__all__ = ['MatchingSummary']
