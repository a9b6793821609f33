"""Unit tests for entity comparison and value formatting."""

import pytest

from defense_index.comparison import LEFT, RIGHT, compare_entities, format_stat_value
from defense_index.models import StatDefinition, StatFormat
from tests.conftest import make_nation


@pytest.mark.unit
class TestCompareEntities:
    """Test stat-by-stat comparison."""

    def test_missing_stat_counts_as_zero(self, nation_registry):
        left = make_nation("a", "A", 50, tanks=10)
        right = make_nation("b", "B", 50)

        comparison = compare_entities(left, right, nation_registry)

        tanks = next(row for row in comparison.rows if row.definition.id == "tanks")
        assert (tanks.left_value, tanks.right_value) == (10, 0)
        assert tanks.leader == LEFT
        assert comparison.score_leader is None

    def test_unregistered_keys_ignored(self, nation_registry):
        left = make_nation("a", "A", 50, legacy=100)
        right = make_nation("b", "B", 60)

        comparison = compare_entities(left, right, nation_registry)

        assert "legacy" not in [row.definition.id for row in comparison.rows]
        assert comparison.score_leader == RIGHT
        assert comparison.stats_won(LEFT) == comparison.stats_won(RIGHT) == 0


@pytest.mark.unit
class TestFormatStatValue:
    """Test display formatting."""

    @pytest.mark.parametrize(
        "fmt,value,expected",
        [
            (StatFormat.NUMBER, 1390000, "1,390,000"),
            (StatFormat.NUMBER, 2.5, "2.5"),
            (StatFormat.CURRENCY, 877000000000, "$877,000,000,000"),
            (StatFormat.SLIDER, 9.75, "9.75/10"),
            (StatFormat.SLIDER, 10, "10.00/10"),
        ],
    )
    def test_formats(self, fmt, value, expected):
        definition = StatDefinition("x", "X", format=fmt)
        assert format_stat_value(definition, value) == expected
