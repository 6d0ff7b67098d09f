"""
Adaptive TDEE Report Service

Builds the nutrition dashboard for one athlete over the last
NUTRITION_BASELINE_DAYS: weight trend chart, TDEE estimate, a calorie target
for the goal, stall detection, intake compliance and a coaching action.

All numbers come from services.adaptive_tdee; this module only gathers data
and assembles the report.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence
from uuid import UUID

import logging

from coachmetrics.core.clock import Clock, SystemClock
from coachmetrics.core.nutrition_config import NutritionCoachingConfig, nutrition_config
from coachmetrics.schemas import CalorieEntry, WeightEntry
from coachmetrics.services.adaptive_tdee import (
    DEFAULT_EMA_ALPHA,
    NUTRITION_BASELINE_DAYS,
    Goal,
    SuggestionType,
    TDEEEstimate,
    daily_weight_window,
    estimate_tdee,
    generate_nutrition_suggestion,
    goal_target_calories,
    measured_span_days,
    smooth_weight_series,
)
from coachmetrics.services.history_store import HistoryStore
from coachmetrics.services.statistics import round_half_up, round_to

logger = logging.getLogger(__name__)


@dataclass
class WeightDataPoint:
    date: date
    day_index: int  # 1-based position in the window
    raw_weight: Optional[float]
    trend_weight: float


@dataclass
class Recommendation:
    goal: Goal
    target_calories: int
    weekly_change: float  # kg/week the target aims for
    message: str


@dataclass
class StallDetection:
    is_stalling: bool = False
    stall_weeks: int = 0
    suggested_adjustment: Optional[int] = None
    adjustment_message: Optional[str] = None


@dataclass
class GoalCompliance:
    is_compliant: bool
    target_calories: int
    actual_average: int
    variance: float  # percent, 1 dp
    message: str


@dataclass
class CoachingAction:
    type: SuggestionType
    title: str
    message: str
    action_label: Optional[str] = None
    action_value: Optional[int] = None


@dataclass
class TDEEReport:
    estimate: TDEEEstimate
    total_days: int
    days_with_weight: int
    days_with_calories: int
    weight_data: List[WeightDataPoint] = field(default_factory=list)
    weight_change: Optional[float] = None
    weight_change_percent: Optional[float] = None
    recommendation: Optional[Recommendation] = None
    stall_detection: StallDetection = field(default_factory=StallDetection)
    goal_compliance: Optional[GoalCompliance] = None
    coaching_action: Optional[CoachingAction] = None


def aggregate_calories_by_date(entries: Sequence[CalorieEntry]) -> List[CalorieEntry]:
    """Sum several log entries on the same date into one daily total."""
    totals: Dict[date, float] = defaultdict(float)
    for entry in entries:
        totals[entry.date] += entry.calories
    return [CalorieEntry(date=d, calories=c) for d, c in sorted(totals.items())]


def build_weight_chart(daily_raw: Sequence[Optional[float]], window_start: date) -> List[WeightDataPoint]:
    """
    Chart points for the window, skipping days before the first weigh-in.

    The smoothed series has no entries for leading gaps, so it is aligned by
    offsetting with the index of the first reading.
    """
    trend = smooth_weight_series(daily_raw, DEFAULT_EMA_ALPHA)
    offset = len(daily_raw) - len(trend)

    points = []
    for i, raw in enumerate(daily_raw):
        if i < offset:
            continue
        points.append(WeightDataPoint(
            date=window_start + timedelta(days=i),
            day_index=i + 1,
            raw_weight=raw,
            trend_weight=trend[i - offset],
        ))
    return points


def build_recommendation(
    tdee: int,
    goal: Goal,
    config: NutritionCoachingConfig = nutrition_config,
) -> Recommendation:
    """Calorie target for the goal, rounded to the nearest 50 kcal (cut never below 1200)."""
    step = config.target_rounding_kcal
    target = round_half_up(goal_target_calories(goal, tdee, config) / step) * step

    if goal == Goal.CUT:
        target = max(target, config.cut_floor_kcal)
        weekly = config.cut_weekly_change_kg
        message = f"To lose {abs(weekly)} kg/week, target {target} kcal"
    elif goal == Goal.BULK:
        weekly = config.bulk_weekly_change_kg
        message = f"To gain {weekly} kg/week, target {target} kcal"
    else:
        weekly = 0.0
        message = f"To maintain, target {target} kcal"

    return Recommendation(goal=goal, target_calories=target, weekly_change=weekly, message=message)


def detect_stall(
    weight_change_per_week: Optional[float],
    daily_raw: Sequence[Optional[float]],
    goal: Goal,
    config: NutritionCoachingConfig = nutrition_config,
) -> StallDetection:
    """Flat trend over at least two weeks of regular weigh-ins."""
    stall = StallDetection()
    days_with_weight = sum(1 for w in daily_raw if w is not None)

    if (
        weight_change_per_week is None
        or abs(weight_change_per_week) >= config.stall_threshold_kg
        or days_with_weight < config.stall_min_weigh_ins
    ):
        return stall

    stall_weeks = measured_span_days(daily_raw) // 7
    if stall_weeks >= config.stall_min_weeks:
        adjustment = (
            config.bulk_stall_adjustment_kcal if goal == Goal.BULK
            else config.cut_plateau_adjustment_kcal
        )
        verb = "Add" if adjustment > 0 else "Cut"
        stall.is_stalling = True
        stall.stall_weeks = stall_weeks
        stall.suggested_adjustment = adjustment
        stall.adjustment_message = (
            f"Weight stable for {stall_weeks} weeks. {verb} {abs(adjustment)} kcal."
        )
    return stall


def assess_compliance(
    recommendation: Recommendation,
    average_intake: Optional[int],
    config: NutritionCoachingConfig = nutrition_config,
) -> Optional[GoalCompliance]:
    """Average intake vs. the recommended target, compliant within ±5%."""
    if not recommendation.target_calories or not average_intake:
        return None

    target = recommendation.target_calories
    variance = ((average_intake - target) / target) * 100
    compliant = abs(variance) <= config.compliance_tolerance_pct

    if compliant:
        message = "On track!"
    else:
        side = "Above" if variance > 0 else "Below"
        message = f"{side} target by {abs(round_half_up(variance))}%"

    return GoalCompliance(
        is_compliant=compliant,
        target_calories=target,
        actual_average=average_intake,
        variance=round_to(variance, 1),
        message=message,
    )


class AdaptiveTDEEService:
    """Assemble the adaptive TDEE dashboard for an athlete."""

    def __init__(
        self,
        store: HistoryStore,
        clock: Optional[Clock] = None,
        lookback_days: int = NUTRITION_BASELINE_DAYS,
        config: NutritionCoachingConfig = nutrition_config,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.lookback_days = lookback_days
        self.config = config

    async def build_report(self, user_id: UUID, goal: Goal = Goal.CUT) -> TDEEReport:
        goal = Goal(goal)
        today = self.clock.today()
        since = today - timedelta(days=self.lookback_days)

        weight_log: List[WeightEntry] = await self.store.fetch_weight_log(user_id, since)
        calories = aggregate_calories_by_date(await self.store.fetch_calorie_log(user_id, since))

        daily_raw = daily_weight_window(weight_log, self.lookback_days, today)
        window_start = today - timedelta(days=self.lookback_days - 1)
        weights_in_window = [
            WeightEntry(date=window_start + timedelta(days=i), weight=w)
            for i, w in enumerate(daily_raw) if w is not None
        ]

        estimate = estimate_tdee(weights_in_window, calories, self.lookback_days, today=today)

        report = TDEEReport(
            estimate=estimate,
            total_days=self.lookback_days,
            days_with_weight=len(weights_in_window),
            days_with_calories=len(calories),
            weight_data=build_weight_chart(daily_raw, window_start),
        )

        if estimate.tdee is None:
            logger.info(
                f"TDEE {user_id} on {today}: insufficient data "
                f"(weights={report.days_with_weight}, calories={report.days_with_calories})"
            )
            return report

        report.weight_change = round_to(estimate.weight_trend_end - estimate.weight_trend_start, 2)
        if estimate.weight_trend_end > 0:
            report.weight_change_percent = round_to(
                (estimate.weight_change_per_week / estimate.weight_trend_end) * 100, 2
            )

        report.recommendation = build_recommendation(estimate.tdee, goal, self.config)
        report.stall_detection = detect_stall(estimate.weight_change_per_week, daily_raw, goal, self.config)
        report.goal_compliance = assess_compliance(report.recommendation, estimate.average_intake, self.config)

        suggestion = generate_nutrition_suggestion(
            goal, estimate.weight_change_per_week, estimate.tdee, estimate.average_intake, self.config
        )
        if suggestion is not None:
            action = CoachingAction(type=suggestion.type, title=suggestion.title, message=suggestion.message)
            if suggestion.adjustment is not None:
                sign = "+" if suggestion.adjustment > 0 else ""
                action.action_label = f"{sign}{suggestion.adjustment} kcal"
                action.action_value = suggestion.adjustment
            report.coaching_action = action

        logger.info(
            f"TDEE {user_id} on {today}: tdee={estimate.tdee}, confidence={estimate.confidence.value}, "
            f"trend={estimate.trend_direction.value}, weekly_change={estimate.weight_change_per_week}"
        )
        return report
