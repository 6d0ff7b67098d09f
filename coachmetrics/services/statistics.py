"""
Statistics Primitives

Small, total functions shared by the readiness baseline and scorer.
Degenerate input (empty series, zero spread) returns a defined fallback
instead of raising: scoring must never fail a check-in.
"""
import math
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return sum(values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    """
    Population standard deviation (divides by N, not N-1).

    The baseline window is treated as the whole population, so every
    downstream Z-score depends on this being the population form.
    Returns 0 for fewer than 2 values.
    """
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    squared_diffs = [(v - avg) ** 2 for v in values]
    return math.sqrt(mean(squared_diffs))


def calculate_z_score(current: float, avg: float, sd: float) -> float:
    """
    How many standard deviations `current` is from `avg`.

    z = (current - avg) / sd, and 0 when sd is 0 (no variance means on baseline).
    """
    if sd == 0:
        return 0.0
    return (current - avg) / sd


def normalize_metric(value: float, min_value: float, max_value: float) -> int:
    """Linear rescale of `value` into [0, 100], rounded and clamped. 50 for a degenerate range."""
    if max_value == min_value:
        return 50
    scaled = ((value - min_value) / (max_value - min_value)) * 100
    return round_half_up(max(0.0, min(100.0, scaled)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (round_half_up(2.5) == 3)."""
    return int(math.floor(value + 0.5))


def round_to(value: float, digits: int) -> float:
    """round_half_up at a given number of decimal places."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
