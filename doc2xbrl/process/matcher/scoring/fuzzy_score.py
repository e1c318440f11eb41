# Path: doc2xbrl/process/matcher/scoring/fuzzy_score.py
"""
Fuzzy Label Score

Word-overlap similarity between an item label and a taxonomy concept.

Scoring:
    equal labels (case-insensitive)      100
    label equals a synonym                95
    otherwise, per word pair:
        identical words                  +20
        one word contains the other      +10
    minus 20 * |len(a) - len(b)| / max(len(a), len(b))

The result is rounded half up and clamped to [0, 100].
"""

import math
import re
from typing import Iterable

from constants import DIRECT_TAXONOMY_CONFIDENCE, SYNONYM_MATCH_CONFIDENCE


EXACT_WORD_POINTS = 20
PARTIAL_WORD_POINTS = 10
LENGTH_PENALTY_POINTS = 20


def fuzzy_score(search_term: str, candidate_term: str, synonyms: Iterable[str] = ()) -> int:
    """
    Score a label against a concept name.

    Args:
        search_term: Item label
        candidate_term: Taxonomy concept name
        synonyms: Concept synonyms

    Returns:
        Integer score 0-100
    """
    search = (search_term or '').lower()
    candidate = (candidate_term or '').lower()

    if not search or not candidate:
        return 0

    if search == candidate:
        return DIRECT_TAXONOMY_CONFIDENCE

    for synonym in synonyms:
        if search == (synonym or '').lower():
            return SYNONYM_MATCH_CONFIDENCE

    search_words = re.split(r'\s+', search.strip())
    candidate_words = re.split(r'\s+', candidate.strip())

    overlap = 0
    for search_word in search_words:
        for candidate_word in candidate_words:
            if search_word == candidate_word:
                overlap += EXACT_WORD_POINTS
            elif candidate_word in search_word or search_word in candidate_word:
                overlap += PARTIAL_WORD_POINTS

    length_diff = abs(len(search) - len(candidate))
    penalty = (length_diff / max(len(search), len(candidate))) * LENGTH_PENALTY_POINTS

    score = max(0.0, overlap - penalty)
    return min(DIRECT_TAXONOMY_CONFIDENCE, int(math.floor(score + 0.5)))


__all__ = ['fuzzy_score']
