"""
Shared value helpers for source queries.

SQL NULL must stay None all the way to the scorer; nothing here ever
substitutes zero for a missing number.
"""

from typing import Any, Optional


def to_float(value: Any) -> Optional[float]:
    """Convert a DB value to float, keeping None as None."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def rate_per_100k(count: Any, population: Any) -> Optional[float]:
    """Events per 100,000 residents; None when either side is unknown or population is 0."""
    count_f = to_float(count)
    pop_f = to_float(population)
    if count_f is None or pop_f is None or pop_f == 0:
        return None
    return (count_f / pop_f) * 100000


def safe_ratio(numerator: Any, denominator: Any) -> Optional[float]:
    num = to_float(numerator)
    den = to_float(denominator)
    if num is None or den is None or den == 0:
        return None
    return num / den
