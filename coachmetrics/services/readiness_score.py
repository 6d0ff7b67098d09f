"""
Readiness Score Calculator

Two independent scorers live here. They are called from different places and
produce different numbers for the same morning; they are not interchangeable.

1. compute_readiness(): the check-in score with a full breakdown.

    Readiness Score (0-100) = HRV (0-60) + RHR (0-20) + Subjective (0-20)

   HRV and RHR are scored from today's Z-score against the athlete's rolling
   baseline. Without a baseline the subjective sub-score alone is rescaled to
   0-100, so a new athlete with no wearable history still gets a meaningful
   number from self-report.

2. calculate_readiness_score(): the standalone score.

    Subjective (0-100) = Sleep 40% + Stress 20% (inv) + Soreness 20% (inv) + Mood 20%

   Blended 50/50 with an objective Z-score component when any wearable
   baseline is available, subjective-only otherwise.

Missing data never lowers a score: absent readings map to the neutral
midpoint of their band.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from coachmetrics.services.statistics import calculate_z_score, clamp, round_half_up


class MetricStatus(str, Enum):
    """Qualitative status of an objective metric relative to baseline."""
    OPTIMAL = "optimal"
    LOW = "low"
    HIGH = "high"


# Component bands (sum to 100)
HRV_WEIGHT = 60
RHR_WEIGHT = 20
SUBJECTIVE_WEIGHT = 20

# Z-scores beyond this are treated as saturated
Z_CLAMP = 2.0

# Status thresholds: mild dips are flagged sooner than spikes
Z_LOW_THRESHOLD = -1.0
Z_HIGH_THRESHOLD = 1.5

# Subjective blend, each input rescaled from 1-10 to 0-1 first
SUBJECTIVE_WEIGHTS = {
    "energy": 0.30,
    "mood": 0.25,
    "stress": 0.25,        # inverted
    "sleep_quality": 0.20,
}

# Standalone scorer weights (percent of 100)
STANDALONE_WEIGHTS = {
    "sleep": 0.40,
    "stress": 0.20,        # inverted
    "soreness": 0.20,      # inverted
    "mood": 0.20,
}
SLEEP_TARGET_HOURS = 8.0


@dataclass
class ReadinessBreakdown:
    """Result of one compute_readiness() call."""
    score: int                   # 0-100
    hrv_component: int           # 0-60
    rhr_component: int           # 0-20
    subjective_component: int    # 0-20
    hrv_z: float                 # 0 when not scored
    rhr_z: float                 # raw (not inverted); 0 when not scored
    hrv_status: MetricStatus
    rhr_status: MetricStatus


def metric_status_from_z(z: float) -> MetricStatus:
    """
    Qualitative status from a Z-score.

    | Z-Score     | Status  |
    |-------------|---------|
    | z <= -1     | low     |
    | z >= +1.5   | high    |
    | otherwise   | optimal |
    """
    if z <= Z_LOW_THRESHOLD:
        return MetricStatus.LOW
    if z >= Z_HIGH_THRESHOLD:
        return MetricStatus.HIGH
    return MetricStatus.OPTIMAL


def _z_to_band(z: float, band: int) -> int:
    """Map z in [-2, +2] linearly onto [0, band]."""
    clamped = clamp(z, -Z_CLAMP, Z_CLAMP)
    return round_half_up(((clamped + Z_CLAMP) / (2 * Z_CLAMP)) * band)


def hrv_z_to_score(z: float) -> int:
    """HRV Z-score to the 0-60 band: -2 -> 0, 0 -> 30, +2 -> 60."""
    return _z_to_band(z, HRV_WEIGHT)


def rhr_z_to_score(z: float) -> int:
    """
    Resting HR Z-score to the 0-20 band.

    Lower resting HR is the favourable direction, so the Z-score is inverted
    first: -2 -> 20, 0 -> 10, +2 -> 0.
    """
    return _z_to_band(-z, RHR_WEIGHT)


def subjective_to_score(energy: float, mood: float, stress: float, sleep_quality: float) -> int:
    """Energy, mood, inverted stress and sleep quality (each 1-10) to the 0-20 band."""
    energy_norm = (energy - 1) / 9
    mood_norm = (mood - 1) / 9
    stress_norm = (10 - stress) / 9
    sleep_quality_norm = (sleep_quality - 1) / 9

    blended = (
        energy_norm * SUBJECTIVE_WEIGHTS["energy"]
        + mood_norm * SUBJECTIVE_WEIGHTS["mood"]
        + stress_norm * SUBJECTIVE_WEIGHTS["stress"]
        + sleep_quality_norm * SUBJECTIVE_WEIGHTS["sleep_quality"]
    )
    return round_half_up(blended * SUBJECTIVE_WEIGHT)


def compute_readiness(
    *,
    hrv_today: Optional[float],
    hrv_mean: float,
    hrv_sd: float,
    rhr_today: Optional[float],
    rhr_mean: float,
    rhr_sd: float,
    energy: float,
    mood: float,
    stress: float,
    sleep_quality: float,
    has_baseline: bool,
) -> ReadinessBreakdown:
    """
    Composite readiness score with component breakdown.

    Inputs are not range-checked here; callers validate check-in values.

    Args:
        hrv_today / rhr_today: Today's readings, None when not measured
        hrv_mean, hrv_sd, rhr_mean, rhr_sd: Rolling baseline (0 when absent)
        energy, mood, stress, sleep_quality: Self-report, 1-10 (stress 10 = worst)
        has_baseline: False routes to subjective-only mode

    Returns:
        ReadinessBreakdown
    """
    subjective = subjective_to_score(energy, mood, stress, sleep_quality)

    if not has_baseline:
        return ReadinessBreakdown(
            score=round_half_up((subjective / SUBJECTIVE_WEIGHT) * 100),
            hrv_component=0,
            rhr_component=0,
            subjective_component=subjective,
            hrv_z=0.0,
            rhr_z=0.0,
            hrv_status=MetricStatus.OPTIMAL,
            rhr_status=MetricStatus.OPTIMAL,
        )

    # Neutral midpoints when today's reading or baseline spread is missing
    hrv_component = HRV_WEIGHT // 2
    hrv_z = 0.0
    if hrv_today is not None and hrv_sd > 0:
        hrv_z = calculate_z_score(hrv_today, hrv_mean, hrv_sd)
        hrv_component = hrv_z_to_score(hrv_z)

    rhr_component = RHR_WEIGHT // 2
    rhr_z = 0.0
    if rhr_today is not None and rhr_sd > 0:
        rhr_z = calculate_z_score(rhr_today, rhr_mean, rhr_sd)
        rhr_component = rhr_z_to_score(rhr_z)

    total = int(clamp(hrv_component + rhr_component + subjective, 0, 100))

    return ReadinessBreakdown(
        score=total,
        hrv_component=hrv_component,
        rhr_component=rhr_component,
        subjective_component=subjective,
        hrv_z=hrv_z,
        rhr_z=rhr_z,
        hrv_status=metric_status_from_z(hrv_z),
        rhr_status=metric_status_from_z(-rhr_z),
    )


# ----------------------------------------------------------------------
# Standalone scorer
# ----------------------------------------------------------------------

@dataclass
class ReadinessInputs:
    """Inputs of the standalone scorer."""
    sleep_hours: float                    # 0-24
    stress: float                         # 1-10, 10 = highest stress
    soreness: float                       # 1-10, 10 = most sore
    mood: float                           # 1-10, 10 = best
    hrv: Optional[float] = None
    rhr: Optional[float] = None
    hrv_baseline: Optional[float] = None
    rhr_baseline: Optional[float] = None
    hrv_sd: Optional[float] = None
    rhr_sd: Optional[float] = None

    @property
    def has_hrv_baseline(self) -> bool:
        return (
            self.hrv is not None
            and self.hrv_baseline is not None
            and self.hrv_sd is not None
            and self.hrv_sd > 0
        )

    @property
    def has_rhr_baseline(self) -> bool:
        return (
            self.rhr is not None
            and self.rhr_baseline is not None
            and self.rhr_sd is not None
            and self.rhr_sd > 0
        )


def calculate_readiness_score(inputs: ReadinessInputs) -> int:
    """
    Standalone readiness score (0-100) with graceful fallback.

    Subjective-only when no wearable baseline is usable; otherwise a 50/50
    blend of the subjective score and an objective score averaged over
    whichever of HRV / resting HR have a baseline.
    """
    sleep_score = min(100.0, (inputs.sleep_hours / SLEEP_TARGET_HOURS) * 100) * STANDALONE_WEIGHTS["sleep"]
    stress_score = ((11 - inputs.stress) * 10) * STANDALONE_WEIGHTS["stress"]
    soreness_score = ((11 - inputs.soreness) * 10) * STANDALONE_WEIGHTS["soreness"]
    mood_score = (inputs.mood * 10) * STANDALONE_WEIGHTS["mood"]

    subjective_score = sleep_score + stress_score + soreness_score + mood_score

    if not (inputs.has_hrv_baseline or inputs.has_rhr_baseline):
        return round_half_up(clamp(subjective_score, 0, 100))

    objective_score = 50.0
    objective_components = 0

    if inputs.has_hrv_baseline:
        z = calculate_z_score(inputs.hrv, inputs.hrv_baseline, inputs.hrv_sd)
        objective_score = ((clamp(z, -Z_CLAMP, Z_CLAMP) + Z_CLAMP) / (2 * Z_CLAMP)) * 100
        objective_components += 1

    if inputs.has_rhr_baseline:
        z = calculate_z_score(inputs.rhr, inputs.rhr_baseline, inputs.rhr_sd)
        rhr_score = ((clamp(-z, -Z_CLAMP, Z_CLAMP) + Z_CLAMP) / (2 * Z_CLAMP)) * 100
        if objective_components > 0:
            objective_score = (objective_score + rhr_score) / 2
        else:
            objective_score = rhr_score
        objective_components += 1

    blended = subjective_score * 0.5 + objective_score * 0.5
    return round_half_up(clamp(blended, 0, 100))
