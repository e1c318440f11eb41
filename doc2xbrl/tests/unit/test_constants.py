# Path: doc2xbrl/tests/unit/test_constants.py
"""
Unit Tests for constants.py

Tests enumerations, thresholds and progress tables.
"""

import sys
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


class TestFramework:
    """Test framework resolution."""

    @pytest.mark.parametrize('value,expected', [
        ('US-GAAP', 'US-GAAP'),
        ('us_gaap', 'US-GAAP'),
        ('gaap', 'US-GAAP'),
        ('ifrs', 'IFRS'),
        ('IFRS-FULL', 'IFRS'),
        ('local gaap', 'Other'),
        (None, 'Other'),
    ])
    def test_from_value(self, value, expected):
        """Loose input should resolve to a Framework."""
        from constants import Framework

        assert Framework.from_value(value).value == expected


class TestMatchMethod:
    """Test match method trust order."""

    def test_trust_rank_order(self):
        """Exact is most trusted, manual least."""
        from constants import MatchMethod

        ranks = [m.trust_rank for m in (
            MatchMethod.EXACT, MatchMethod.FUZZY, MatchMethod.ASSISTED, MatchMethod.MANUAL
        )]

        assert ranks == [0, 1, 2, 3]

    def test_thresholds_descend(self):
        """Thresholds should follow exact > fuzzy > assisted > fallback."""
        from constants import (
            EXACT_MATCH_THRESHOLD,
            FUZZY_MATCH_THRESHOLD,
            ASSISTED_MATCH_THRESHOLD,
            FALLBACK_MATCH_THRESHOLD,
        )

        assert (EXACT_MATCH_THRESHOLD, FUZZY_MATCH_THRESHOLD,
                ASSISTED_MATCH_THRESHOLD, FALLBACK_MATCH_THRESHOLD) == (95, 80, 70, 60)


class TestJobConstants:
    """Test job status and progress tables."""

    def test_step_progress_is_monotonic(self):
        """Progress should grow with each step and end at 100."""
        from constants import ConversionStep, STEP_PROGRESS

        values = [STEP_PROGRESS[step] for step in ConversionStep]

        assert values == [10, 30, 60, 80, 100]

    def test_step_names(self):
        """Step values are the names written to the processing log."""
        from constants import ConversionStep

        assert [s.value for s in ConversionStep] == [
            'retrieving_document',
            'parsing_document',
            'taxonomy_mapping',
            'generating_xbrl',
            'saving_results',
        ]

    def test_status_values(self):
        """Job statuses should use lower-case values."""
        from constants import JobStatus

        assert {s.value for s in JobStatus} == {'pending', 'processing', 'completed', 'failed'}

    def test_cancelled_message(self):
        """Cancellation message is fixed."""
        from constants import CANCELLED_MESSAGE

        assert CANCELLED_MESSAGE == 'cancelled by user'


class TestStatusMarkers:
    """Test CLI markers."""

    def test_markers_are_ascii(self):
        """CLI markers should be plain ASCII."""
        from constants import STATUS_OK, STATUS_FAIL, STATUS_INFO, STATUS_WARN, MENU_HEADER

        for marker in (STATUS_OK, STATUS_FAIL, STATUS_INFO, STATUS_WARN, MENU_HEADER):
            assert all(ord(c) < 128 for c in marker)
