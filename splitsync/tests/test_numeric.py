"""
Tests for numeric safety guards.
"""
import math
from splitsync.core.numeric import is_zero, round_cents, safe, safe_divide, safe_sum


def test_safe_passes_finite_values():
    assert safe(12.5) == 12.5
    assert safe(-3) == -3.0


def test_safe_replaces_nan_and_infinity():
    assert safe(float("nan")) == 0.0
    assert safe(float("inf")) == 0.0
    assert safe(float("-inf")) == 0.0


def test_safe_replaces_non_numeric():
    assert safe(None) == 0.0
    assert safe("abc") == 0.0


def test_safe_divide_by_zero_is_zero():
    assert safe_divide(10, 0) == 0.0
    assert safe_divide(0, 0) == 0.0
    assert safe_divide(10, 4) == 2.5


def test_safe_divide_never_returns_nan():
    result = safe_divide(float("nan"), 3)
    assert not math.isnan(result)
    assert result == 0.0


def test_safe_sum_skips_bad_addends():
    assert safe_sum([1.0, float("nan"), 2.0, float("inf")]) == 3.0


def test_is_zero_and_round_cents():
    assert is_zero(0.004)
    assert not is_zero(0.02)
    assert round_cents(33.333) == 33.33
    assert round_cents(float("nan")) == 0.0
