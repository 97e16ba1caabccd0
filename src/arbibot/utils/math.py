"""
Numeric helpers.

Prices and profit figures travel as decimal strings; these helpers
convert between those strings and floats.
"""

import math
from decimal import Decimal


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide, returning `default` when the denominator is zero.

    Examples:
        >>> safe_divide(10, 4)
        2.5
        >>> safe_divide(1, 0)
        0.0
    """
    if denominator == 0:
        return default
    return numerator / denominator


def to_fixed(value: float, places: int = 2) -> str:
    """
    Render a number with a fixed number of decimal places.

    Negative zero is normalized so that tiny negative values do not
    render as "-0.00".

    Examples:
        >>> to_fixed(1.005, 4)
        '1.0050'
        >>> to_fixed(-0.0001)
        '0.00'
    """
    text = f"{value:.{places}f}"
    if text.startswith("-") and float(text) == 0:
        return text[1:]
    return text


def parse_decimal(value: object) -> float:
    """
    Convert a decimal-like value (str, int, float, Decimal) to float.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, float | int | Decimal):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise ValueError(f"Not a number: {value!r}")


def is_positive_finite(value: float) -> bool:
    """Check that a value is a finite number greater than zero."""
    return math.isfinite(value) and value > 0
