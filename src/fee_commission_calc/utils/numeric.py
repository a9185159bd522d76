"""Nullable numeric helpers shared by the extractor and calculator.

A missing input is always ``None`` and is kept distinct from ``0.0``. Every
helper propagates ``None`` and never lets ``NaN`` or infinity escape.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

OptionalFloat = float | None


def finite_or_none(value: float | None) -> OptionalFloat:
    """Return ``value`` unless it is ``None``, ``NaN`` or infinite."""
    if value is None:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def to_optional_float(value: Any) -> OptionalFloat:
    """Coerce a worksheet cell value to ``float | None``.

    Blank cells, booleans, dates and unparseable text yield ``None``. Text such
    as ``"1,250.50"`` or ``"15%"`` is parsed.
    """
    if value is None or isinstance(value, bool | datetime):
        return None
    if isinstance(value, int | float):
        return finite_or_none(float(value))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        scale = 1.0
        if text.endswith("%"):
            text = text[:-1].strip()
            scale = 0.01
        try:
            return finite_or_none(float(text) * scale)
        except ValueError:
            return None
    return None


def multiply(*factors: OptionalFloat) -> OptionalFloat:
    """Multiply factors, returning ``None`` if any factor is missing."""
    result = 1.0
    for factor in factors:
        if factor is None:
            return None
        result *= factor
    return finite_or_none(result)


def divide(numerator: OptionalFloat, denominator: OptionalFloat) -> OptionalFloat:
    """Divide, returning ``None`` for missing operands or a zero denominator."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return finite_or_none(numerator / denominator)


def subtract_all(start: OptionalFloat, *terms: OptionalFloat) -> OptionalFloat:
    """Compute ``start - sum(terms)``, or ``None`` if any operand is missing."""
    if start is None or any(term is None for term in terms):
        return None
    return finite_or_none(start - math.fsum(term for term in terms if term is not None))


def to_percentage(rate: OptionalFloat) -> OptionalFloat:
    """Express a fractional fee rate on the percentage scale (0.002 -> 0.2)."""
    return multiply(rate, 100.0)
