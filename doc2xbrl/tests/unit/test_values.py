# Path: doc2xbrl/tests/unit/test_values.py
"""
Unit Tests for parsers.values

Tests value sanitization and source references.
"""

import sys
from pathlib import Path

import pytest

# Add doc2xbrl to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


class TestSanitizeNumbers:
    """Test numeric text conversion."""

    @pytest.mark.parametrize('raw,expected', [
        ('$1,234', 1234),
        ('(1,234)', -1234),
        ('100-', -100),
        ('12.50', 12.5),
        ('  5 000 ', 5000),
        ('15%', 15),
        ('€2,500.75', 2500.75),
    ])
    def test_numeric_text(self, raw, expected):
        """Formatting characters are stripped and signs applied."""
        from parsers.values import sanitize_value

        assert sanitize_value(raw) == expected

    def test_integral_float_becomes_int(self):
        """3.0 should narrow to int."""
        from parsers.values import sanitize_value

        result = sanitize_value(3.0)

        assert result == 3
        assert isinstance(result, int)

    def test_nan_is_null(self):
        """NaN cells should be dropped."""
        from parsers.values import sanitize_value

        assert sanitize_value(float('nan')) is None

    def test_large_integer_text_is_exact(self):
        from parsers.values import sanitize_value

        assert sanitize_value('12345678901234567891') == 12345678901234567891
        assert sanitize_value('(98,765,432,109,876,543,210)') == -98765432109876543210

    @pytest.mark.parametrize('raw', ['1e999', '-1E+40', float('inf'), float('-inf'), 1e300])
    def test_unreportable_magnitudes_are_null(self, raw):
        """Infinite or absurdly large numbers are dropped."""
        from parsers.values import sanitize_value

        assert sanitize_value(raw) is None

    def test_int_and_bool_pass_through(self):
        """Native ints and booleans are kept."""
        from parsers.values import sanitize_value

        assert sanitize_value(42) == 42
        assert sanitize_value(True) is True


class TestSanitizeText:
    """Test null markers, booleans and text."""

    @pytest.mark.parametrize('raw', [None, '', '  ', '-', '--', 'N/A', 'null', 'None', 'nil'])
    def test_null_markers(self, raw):
        """Null markers yield None."""
        from parsers.values import sanitize_value, is_null_marker

        assert sanitize_value(raw) is None
        assert is_null_marker(raw)

    def test_booleans(self):
        """yes/no and true/false become booleans."""
        from parsers.values import sanitize_value

        assert sanitize_value('Yes') is True
        assert sanitize_value('false') is False

    def test_other_text_is_trimmed(self):
        """Non-numeric text is returned trimmed."""
        from parsers.values import sanitize_value

        assert sanitize_value('  Audited  ') == 'Audited'


class TestSourceReference:
    """Test source reference formatting."""

    def test_row_and_column(self):
        """Row and column are appended in order."""
        from parsers.values import source_reference

        assert source_reference('f.csv', 3, 2) == 'f.csv_row:3_col:2'

    def test_identifier_only(self):
        """Without row or column only the identifier remains."""
        from parsers.values import source_reference

        assert source_reference('Revenue') == 'Revenue'
        assert source_reference('Revenue', 0) == 'Revenue_row:0'
