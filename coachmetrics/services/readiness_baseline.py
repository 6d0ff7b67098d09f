"""
Readiness Baseline Aggregator

Rolling per-athlete baseline over the last READINESS_BASELINE_DAYS of
daily metrics. Only non-null readings count, and a metric needs at least
MIN_BASELINE_SAMPLES readings before its baseline exists at all.

An athlete with fewer than MIN_BASELINE_SAMPLES days on every metric is a
"new user": the scorer runs in subjective-only mode for them.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from coachmetrics.schemas import DailyMetricSample
from coachmetrics.services.statistics import mean, standard_deviation

# Rolling baseline window (days)
READINESS_BASELINE_DAYS = 30

# Minimum readings for a metric baseline to be valid
MIN_BASELINE_SAMPLES = 3


@dataclass
class BaselineWindow:
    """Rolling statistics for one athlete. Absent baselines are None."""
    hrv_mean: Optional[float] = None
    hrv_sd: Optional[float] = None
    rhr_mean: Optional[float] = None
    rhr_sd: Optional[float] = None
    sleep_mean: Optional[float] = None
    sample_count: int = 0

    @property
    def is_new_user(self) -> bool:
        return self.sample_count < MIN_BASELINE_SAMPLES

    @property
    def has_hrv(self) -> bool:
        return self.hrv_mean is not None

    @property
    def has_rhr(self) -> bool:
        return self.rhr_mean is not None


def _metric_stats(values: List[float]) -> Tuple[Optional[float], Optional[float]]:
    if len(values) < MIN_BASELINE_SAMPLES:
        return None, None
    return mean(values), standard_deviation(values)


def compute_baseline(samples: Iterable[DailyMetricSample]) -> BaselineWindow:
    """
    Aggregate a window of daily samples into a BaselineWindow.

    Order-independent. sample_count is the largest of the three per-metric
    counts (HRV, resting HR, sleep), not their sum.
    """
    hrv: List[float] = []
    rhr: List[float] = []
    sleep: List[float] = []

    for s in samples:
        if s.hrv_rmssd is not None:
            hrv.append(float(s.hrv_rmssd))
        if s.resting_heart_rate is not None:
            rhr.append(float(s.resting_heart_rate))
        if s.sleep_hours is not None:
            sleep.append(float(s.sleep_hours))

    hrv_mean, hrv_sd = _metric_stats(hrv)
    rhr_mean, rhr_sd = _metric_stats(rhr)
    sleep_mean, _ = _metric_stats(sleep)

    return BaselineWindow(
        hrv_mean=hrv_mean,
        hrv_sd=hrv_sd,
        rhr_mean=rhr_mean,
        rhr_sd=rhr_sd,
        sleep_mean=sleep_mean,
        sample_count=max(len(hrv), len(rhr), len(sleep)),
    )
