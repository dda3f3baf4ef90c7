"""
Numeric safety guards for money arithmetic.

Zero participants, zero totals and corrupted records are expected inputs,
so every division and aggregation degrades to zero instead of letting
NaN or infinity reach the caller.
"""
import logging
import math
from typing import Iterable

logger = logging.getLogger(__name__)

# Two amounts closer than this are treated as equal (one cent)
TOLERANCE = 0.01

# Float noise floor for conservation corrections
EPSILON = 1e-9


def safe(value: float, context: str = "unknown") -> float:
    """Return value if finite, otherwise 0.0 and log the call site."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric value {value!r} detected in {context}, using 0")
        return 0.0

    if math.isnan(number):
        logger.warning(f"NaN detected in {context}, using 0")
        return 0.0
    if math.isinf(number):
        logger.warning(f"Infinite value {number} detected in {context}, using 0")
        return 0.0
    return number


def safe_divide(numerator: float, denominator: float, context: str = "unknown") -> float:
    """Guarded division: a zero or non-finite divisor yields 0.0."""
    numerator = safe(numerator, f"{context}.numerator")
    denominator = safe(denominator, f"{context}.denominator")
    if denominator == 0:
        return 0.0
    return safe(numerator / denominator, context)


def safe_sum(values: Iterable[float], context: str = "unknown") -> float:
    """Sum values, skipping non-finite addends."""
    total = 0.0
    for value in values:
        total += safe(value, context)
    return safe(total, context)


def is_zero(value: float, tolerance: float = TOLERANCE) -> bool:
    """True when value is within tolerance of zero."""
    return abs(safe(value, "is_zero")) < tolerance


def round_cents(value: float) -> float:
    """Round a guarded amount to whole cents."""
    return round(safe(value, "round_cents"), 2)
