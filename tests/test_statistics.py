"""
Unit tests for the statistics primitives

Population SD, divide-by-zero guards and the degenerate-range midpoint are
the behaviours every readiness number downstream depends on.
"""
import math

import pytest

from coachmetrics.services.statistics import (
    calculate_z_score,
    mean,
    normalize_metric,
    round_half_up,
    round_to,
    standard_deviation,
)


class TestMean:

    def test_empty_is_zero(self):
        assert mean([]) == 0

    def test_simple_mean(self):
        assert mean([2, 4, 6]) == 4

    def test_single_value(self):
        assert mean([42.5]) == 42.5


class TestStandardDeviation:

    def test_empty_is_zero(self):
        assert standard_deviation([]) == 0

    def test_single_value_is_zero(self):
        assert standard_deviation([55.0]) == 0

    def test_population_not_sample(self):
        """[2, 4, 4, 4, 5, 5, 7, 9] has population SD exactly 2 (sample SD would be ~2.14)."""
        assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_two_values(self):
        # mean 15, deviations ±5 → sqrt(25) = 5
        assert standard_deviation([10, 20]) == pytest.approx(5.0)

    def test_constant_series_is_zero(self):
        assert standard_deviation([60, 60, 60, 60]) == 0


class TestZScore:

    def test_value_at_mean_is_zero(self):
        for x, sd in [(50, 10), (0.5, 0.1), (-3, 2)]:
            assert calculate_z_score(x, x, sd) == 0

    def test_zero_sd_is_zero(self):
        assert calculate_z_score(80, 50, 0) == 0
        assert calculate_z_score(-5, 50, 0) == 0

    def test_two_sd_below(self):
        assert calculate_z_score(30, 50, 10) == pytest.approx(-2.0)

    def test_one_and_a_half_sd_above(self):
        assert calculate_z_score(65, 50, 10) == pytest.approx(1.5)


class TestNormalizeMetric:

    def test_degenerate_range_is_midpoint(self):
        assert normalize_metric(7, 3, 3) == 50
        assert normalize_metric(-100, 0, 0) == 50

    def test_linear_rescale(self):
        assert normalize_metric(5, 0, 10) == 50
        assert normalize_metric(2.5, 0, 10) == 25

    def test_clamped_below(self):
        assert normalize_metric(-5, 0, 10) == 0

    def test_clamped_above(self):
        assert normalize_metric(15, 0, 10) == 100

    def test_rounds_half_up(self):
        # 0.5 / 40 * 100 = 1.25 → 1; 1 / 40 * 100 = 2.5 → 3
        assert normalize_metric(0.5, 0, 40) == 1
        assert normalize_metric(1, 0, 40) == 3

    def test_returns_int(self):
        assert isinstance(normalize_metric(3.3, 0, 10), int)


class TestRounding:

    def test_half_goes_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_half_goes_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_round_to_places(self):
        assert round_to(70.14, 1) == pytest.approx(70.1)
        assert round_to(-0.125, 2) == pytest.approx(-0.12)
        assert math.isclose(round_to(1.005, 0), 1.0)
