"""
Adaptive TDEE Estimator

Estimates total daily energy expenditure from what the athlete actually ate
and what their body weight actually did.

Daily scale weight is noisy (water, glycogen, gut content), so it is first
smoothed with an exponential moving average. The smoothed trend change over
the window is converted to an energy balance:

    Daily surplus/deficit = (StartTrend - EndTrend) x 7700 / days
    TDEE = AverageIntake + surplus/deficit

Requires at least 3 weigh-ins and 3 logged days of calories; below that the
estimate is the "insufficient" sentinel, never an exception.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Sequence

from coachmetrics.core.nutrition_config import NutritionCoachingConfig, nutrition_config
from coachmetrics.schemas import CalorieEntry, WeightEntry
from coachmetrics.services.statistics import round_half_up, round_to

# Energy content of 1 kg of body-mass change
KCAL_PER_KG = 7700

# EMA smoothing factor; 0.1 is very smooth, suited to daily weigh-ins
DEFAULT_EMA_ALPHA = 0.1

# Nutrition rolling window (days)
NUTRITION_BASELINE_DAYS = 21

MIN_WEIGHT_ENTRIES = 3
MIN_CALORIE_ENTRIES = 3

# Trend change (kg) inside which weight is considered stable
STABLE_TREND_KG = 0.1


class TDEEConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INSUFFICIENT = "insufficient"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Goal(str, Enum):
    CUT = "cut"
    MAINTAIN = "maintain"
    BULK = "bulk"


class SuggestionType(str, Enum):
    WARNING = "warning"
    SUGGESTION = "suggestion"
    INFO = "info"


@dataclass
class TDEEEstimate:
    tdee: Optional[int]
    confidence: TDEEConfidence
    weight_trend_start: Optional[float]       # kg, 1 dp
    weight_trend_end: Optional[float]         # kg, 1 dp
    weight_change_per_week: Optional[float]   # kg/week, 2 dp
    average_intake: Optional[int]             # kcal/day
    trend_direction: TrendDirection

    @classmethod
    def insufficient(cls) -> "TDEEEstimate":
        return cls(
            tdee=None,
            confidence=TDEEConfidence.INSUFFICIENT,
            weight_trend_start=None,
            weight_trend_end=None,
            weight_change_per_week=None,
            average_intake=None,
            trend_direction=TrendDirection.STABLE,
        )


@dataclass
class NutritionSuggestion:
    type: SuggestionType
    title: str
    message: str
    adjustment: Optional[int]  # kcal delta


def smooth_weight_series(
    raw_weights: Sequence[Optional[float]],
    alpha: float = DEFAULT_EMA_ALPHA,
) -> List[float]:
    """
    Exponential moving average over a daily series with gaps.

    A None after the first reading repeats the last EMA value without
    updating it. Leading Nones emit nothing, so the output is shorter than
    the input by the number of leading gaps.
    """
    result: List[float] = []
    ema: Optional[float] = None

    for w in raw_weights:
        if w is None:
            if ema is not None:
                result.append(ema)
            continue
        if ema is None:
            ema = float(w)
        else:
            ema = alpha * w + (1 - alpha) * ema
        result.append(ema)

    return result


def daily_weight_window(
    weights: Sequence[WeightEntry],
    lookback_days: int,
    today: date,
) -> List[Optional[float]]:
    """Dense array of length lookback_days ending today, None on unweighed days."""
    weight_map = {w.date: w.weight for w in weights}
    return [
        weight_map.get(today - timedelta(days=i))
        for i in range(lookback_days - 1, -1, -1)
    ]


def measured_span_days(daily_raw: Sequence[Optional[float]]) -> int:
    """Index distance between the first and last real readings, minimum 1."""
    indices = [i for i, w in enumerate(daily_raw) if w is not None]
    if not indices:
        return 1
    return max(indices[-1] - indices[0], 1)


def estimate_tdee(
    weights: Sequence[WeightEntry],
    calories: Sequence[CalorieEntry],
    lookback_days: int,
    today: date,
) -> TDEEEstimate:
    """
    Estimate TDEE from the weight trend delta and average caloric intake.

    Args:
        weights: Weigh-ins, one per date
        calories: Daily intake totals; all of them feed the average
        lookback_days: Length of the weight window ending today
        today: Window end date; the caller supplies it

    Returns:
        TDEEEstimate, the insufficient sentinel when data is too thin
    """
    if len(weights) < MIN_WEIGHT_ENTRIES or len(calories) < MIN_CALORIE_ENTRIES:
        return TDEEEstimate.insufficient()

    daily_raw = daily_weight_window(weights, lookback_days, today)

    trend = smooth_weight_series(daily_raw, DEFAULT_EMA_ALPHA)
    if len(trend) < 2:
        return TDEEEstimate.insufficient()

    start_trend = trend[0]
    end_trend = trend[-1]
    weight_change = end_trend - start_trend

    actual_days = measured_span_days(daily_raw)
    weight_change_per_week = (weight_change / actual_days) * 7

    total_calories = sum(c.calories for c in calories)
    average_intake = round_half_up(total_calories / len(calories))

    # Losing weight means intake was below expenditure: deficit is positive
    deficit = ((start_trend - end_trend) * KCAL_PER_KG) / actual_days
    tdee = round_half_up(average_intake + deficit)

    days_with_weight = sum(1 for w in daily_raw if w is not None)
    if days_with_weight >= 10 and len(calories) >= 10:
        confidence = TDEEConfidence.HIGH
    elif days_with_weight >= 7 and len(calories) >= 7:
        confidence = TDEEConfidence.MEDIUM
    else:
        confidence = TDEEConfidence.LOW

    if weight_change < -STABLE_TREND_KG:
        direction = TrendDirection.DOWN
    elif weight_change > STABLE_TREND_KG:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.STABLE

    return TDEEEstimate(
        tdee=tdee,
        confidence=confidence,
        weight_trend_start=round_to(start_trend, 1),
        weight_trend_end=round_to(end_trend, 1),
        weight_change_per_week=round_to(weight_change_per_week, 2),
        average_intake=average_intake,
        trend_direction=direction,
    )


def goal_target_calories(goal: Goal, tdee: int, config: NutritionCoachingConfig = nutrition_config) -> int:
    """Raw daily target for a goal: cut = TDEE - 550, maintain = TDEE, bulk = TDEE + 275."""
    if goal == Goal.CUT:
        return tdee - config.cut_offset_kcal
    if goal == Goal.BULK:
        return tdee + config.bulk_offset_kcal
    return tdee


def generate_nutrition_suggestion(
    goal: Goal,
    weight_change_per_week: Optional[float],
    tdee: Optional[int],
    current_intake: Optional[float],
    config: NutritionCoachingConfig = nutrition_config,
) -> Optional[NutritionSuggestion]:
    """
    Rule-based coaching suggestion for the athlete's goal.

    Rules are checked in order and the first that fires wins: goal-specific
    rate rules, then an intake-vs-target compliance check. None means there
    is nothing to say.
    """
    if weight_change_per_week is None or tdee is None:
        return None

    goal = Goal(goal)
    abs_change = abs(weight_change_per_week)

    if goal == Goal.CUT:
        threshold = config.cut_plateau_threshold_kg
        if abs_change < threshold and weight_change_per_week >= -threshold:
            return NutritionSuggestion(
                type=SuggestionType.SUGGESTION,
                title="Plateau detected",
                message=(
                    f"Weekly loss only {abs_change:.2f} kg. "
                    f"Reduce by {abs(config.cut_plateau_adjustment_kcal)} kcal."
                ),
                adjustment=config.cut_plateau_adjustment_kcal,
            )
        if weight_change_per_week < -config.cut_max_loss_kg:
            return NutritionSuggestion(
                type=SuggestionType.WARNING,
                title="Losing too fast",
                message=(
                    f"You are losing {abs_change:.1f} kg/week. Increase by "
                    f"{config.cut_too_fast_adjustment_kcal} kcal to preserve muscle mass."
                ),
                adjustment=config.cut_too_fast_adjustment_kcal,
            )

    if goal == Goal.BULK:
        threshold = config.bulk_stall_threshold_kg
        if abs_change < threshold and weight_change_per_week <= threshold:
            return NutritionSuggestion(
                type=SuggestionType.SUGGESTION,
                title="Not enough growth",
                message=f"Add {config.bulk_stall_adjustment_kcal} kcal to support muscle growth.",
                adjustment=config.bulk_stall_adjustment_kcal,
            )
        if weight_change_per_week > config.bulk_max_gain_kg:
            return NutritionSuggestion(
                type=SuggestionType.WARNING,
                title="Surplus too large",
                message=(
                    f"Gaining {weight_change_per_week:.1f} kg/week. "
                    f"Reduce by {abs(config.bulk_surplus_adjustment_kcal)} kcal."
                ),
                adjustment=config.bulk_surplus_adjustment_kcal,
            )

    # Compliance check
    if current_intake is not None and tdee > 0:
        target = goal_target_calories(goal, tdee, config)
        if target > 0:
            variance = ((current_intake - target) / target) * 100
            if abs(variance) > config.intake_variance_pct:
                side = "above" if variance > 0 else "below"
                return NutritionSuggestion(
                    type=SuggestionType.INFO,
                    title="Intake off target",
                    message=f"You are {abs(round_half_up(variance))}% {side} your target.",
                    adjustment=None,
                )

    return None
