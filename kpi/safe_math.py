"""
kpi/safe_math.py

Numeric coercion and guarded division shared by every measure and ratio.

Any value that reaches a sum or a ratio passes through one of these two
functions, so the "never NaN, never infinite" guarantee lives here only.
"""

from __future__ import annotations

import math
from typing import Any

_STRIP_CHARS = (",", " ", "\t", "\u00a0")


def safe_number(value: Any, *, default: float = 0.0) -> float:
    """
    Coerce *value* to a finite float.

    Strings have thousands separators and whitespace removed before
    parsing. Anything unparsable or non-finite yields *default*.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value)
        for char in _STRIP_CHARS:
            cleaned = cleaned.replace(char, "")
        if not cleaned:
            return default
        try:
            number = float(cleaned)
        except ValueError:
            return default
    if not math.isfinite(number):
        return default
    return number


def safe_divide(numerator: float, denominator: float) -> float:
    """
    Return ``numerator / denominator``, or ``0.0`` when the result would
    not be a finite number (zero, NaN or infinite operands).
    """
    if not math.isfinite(numerator) or not math.isfinite(denominator):
        return 0.0
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_ratio_pct(numerator: float, denominator: float) -> float:
    """Percentage form of :func:`safe_divide`; zero for non-positive denominators."""
    if denominator <= 0:
        return 0.0
    return safe_divide(numerator, denominator) * 100.0
