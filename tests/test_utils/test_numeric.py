"""Tests for nullable numeric helpers."""

import math
from datetime import datetime

import pytest

from fee_commission_calc.utils.numeric import (
    divide,
    finite_or_none,
    multiply,
    subtract_all,
    to_optional_float,
    to_percentage,
)


class TestToOptionalFloat:
    """Tests for to_optional_float."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, 0.0),
            (0.002, 0.002),
            ("0.0025", 0.0025),
            ("1,250.50", 1250.5),
            (" 15% ", 0.15),
        ],
    )
    def test_parses(self, value: object, expected: float) -> None:
        assert to_optional_float(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "abc", True, datetime(2024, 1, 1), float("nan"), math.inf],
    )
    def test_returns_none(self, value: object) -> None:
        assert to_optional_float(value) is None


class TestArithmetic:
    """Tests for None-propagating arithmetic."""

    def test_finite_or_none(self) -> None:
        assert finite_or_none(1.5) == 1.5
        assert finite_or_none(float("nan")) is None
        assert finite_or_none(-math.inf) is None
        assert finite_or_none(None) is None

    def test_multiply(self) -> None:
        assert multiply(2.0, 3.0, 0.5) == 3.0
        assert multiply(2.0, None) is None
        assert multiply(0.0, 5.0) == 0.0

    def test_divide(self) -> None:
        assert divide(1.0, 4.0) == 0.25
        assert divide(1.0, 0.0) is None
        assert divide(None, 2.0) is None
        assert divide(2.0, None) is None

    def test_subtract_all(self) -> None:
        assert subtract_all(1.0, 0.1, 0.05, 0.3, 0.05, 0.05) == pytest.approx(0.45)
        assert subtract_all(1.0) == 1.0
        assert subtract_all(1.0, 0.1, None) is None
        assert subtract_all(None, 0.1) is None

    def test_to_percentage(self) -> None:
        assert to_percentage(0.002) == pytest.approx(0.2)
        assert to_percentage(None) is None
