"""Rating summary arithmetic."""

from decimal import Decimal

import pytest

from fincomm.content.ratings import round_half_up, summarize


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.25, 2.3), (2.35, 2.4), (4.45, 4.5), (3.0, 3.0), (Decimal("1.05"), 1.1), (3.3333333, 3.3)],
    )
    def test_one_place(self, value, expected):
        assert round_half_up(value) == expected

    def test_zero_places(self):
        assert round_half_up(40.5, 0) == 41.0
        assert round_half_up(12.5, 0) == 13.0


class TestSummarize:
    def test_no_ratings(self):
        assert summarize(0, 0) == {"average": 0.0, "count": 0}
        assert summarize(None, None) == {"average": 0.0, "count": 0}

    def test_exact_average(self):
        assert summarize(6, 2) == {"average": 3.0, "count": 2}

    def test_rounds_half_up(self):
        # 9 / 4 = 2.25
        assert summarize(9, 4) == {"average": 2.3, "count": 4}
        # 14 / 3 = 4.666...
        assert summarize(14, 3) == {"average": 4.7, "count": 3}
