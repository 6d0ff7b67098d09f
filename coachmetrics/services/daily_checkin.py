"""
Daily Check-in Service

Orchestrates one readiness check-in:

    check-in input
         ↓
    last 30 days of daily metrics → BaselineWindow
         ↓
    compute_readiness(today, baseline, has_baseline = not new user)
         ↓
    upsert daily_readiness + daily_metrics for today (one unit)

Scoring must never fail a submission. If the history fetch fails the
check-in is scored in subjective-only mode; persistence failures propagate
and leave neither row written.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

import logging

from coachmetrics.core.clock import Clock, SystemClock
from coachmetrics.core.exceptions import HistoryStoreError
from coachmetrics.schemas import CheckInInput, DailyMetricSample, DailyReadinessRecord
from coachmetrics.services.history_store import HistoryStore
from coachmetrics.services.readiness_baseline import (
    READINESS_BASELINE_DAYS,
    BaselineWindow,
    compute_baseline,
)
from coachmetrics.services.readiness_score import (
    ReadinessBreakdown,
    ReadinessInputs,
    calculate_readiness_score,
    compute_readiness,
)
from coachmetrics.services.statistics import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    record: DailyReadinessRecord
    breakdown: ReadinessBreakdown
    baseline: BaselineWindow


def score_checkin(
    checkin: CheckInInput,
    baseline: BaselineWindow,
    hrv_today: Optional[float] = None,
    rhr_today: Optional[float] = None,
) -> ReadinessBreakdown:
    """Score a check-in against a baseline. New users score subjective-only."""
    return compute_readiness(
        hrv_today=hrv_today,
        hrv_mean=baseline.hrv_mean or 0.0,
        hrv_sd=baseline.hrv_sd or 0.0,
        rhr_today=rhr_today,
        rhr_mean=baseline.rhr_mean or 0.0,
        rhr_sd=baseline.rhr_sd or 0.0,
        energy=checkin.energy,
        mood=checkin.mood,
        stress=checkin.stress,
        sleep_quality=checkin.sleep_quality,
        has_baseline=not baseline.is_new_user,
    )


class DailyCheckinService:
    """Load baseline, score and persist an athlete's daily check-in."""

    def __init__(self, store: HistoryStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    async def get_today(self, user_id: UUID) -> Optional[DailyReadinessRecord]:
        """Today's saved check-in, or None when the athlete has not checked in."""
        return await self.store.fetch_daily_readiness(user_id, self.clock.today())

    async def load_baseline(self, user_id: UUID) -> BaselineWindow:
        """Baseline over the READINESS_BASELINE_DAYS before today (today excluded)."""
        history = await self._fetch_history(user_id)
        today = self.clock.today()
        return compute_baseline(s for s in history if s.date < today)

    async def _fetch_history(self, user_id: UUID) -> List[DailyMetricSample]:
        since = self.clock.today() - timedelta(days=READINESS_BASELINE_DAYS)
        return await self.store.fetch_daily_metrics(user_id, since)

    async def save_checkin(self, user_id: UUID, checkin: CheckInInput) -> CheckInResult:
        """
        Score and upsert today's check-in.

        Wearable values on the check-in win; otherwise whatever a device
        already synced into today's daily metrics is used.
        """
        today = self.clock.today()

        try:
            history = await self._fetch_history(user_id)
        except HistoryStoreError as e:
            logger.warning(
                f"Check-in {user_id} on {today}: history unavailable ({e.detail}), "
                f"scoring subjective-only"
            )
            history = []

        stored_today = next((s for s in history if s.date == today), None)
        baseline = compute_baseline(s for s in history if s.date < today)

        hrv_today = checkin.hrv_rmssd
        rhr_today = checkin.resting_heart_rate
        if stored_today is not None:
            if hrv_today is None:
                hrv_today = stored_today.hrv_rmssd
            if rhr_today is None:
                rhr_today = stored_today.resting_heart_rate

        breakdown = score_checkin(checkin, baseline, hrv_today, rhr_today)

        record = DailyReadinessRecord(
            date=today,
            score=breakdown.score,
            sleep_hours=checkin.sleep_hours,
            sleep_quality=checkin.sleep_quality,
            energy=checkin.energy,
            stress=checkin.stress,
            mood=checkin.mood,
            digestion=checkin.digestion,
            soreness_map=checkin.soreness_map,
            body_weight=checkin.body_weight,
        )
        sample = DailyMetricSample(
            date=today,
            hrv_rmssd=hrv_today,
            resting_heart_rate=rhr_today,
            sleep_hours=checkin.sleep_hours,
            # 0-20 subjective band on a 0-10 scale
            subjective_readiness=round_half_up(breakdown.subjective_component / 2),
            weight_kg=stored_today.weight_kg if stored_today is not None else None,
        )

        await self.store.upsert_checkin(user_id, today, record, sample)

        logger.info(
            f"Check-in {user_id} on {today}: score={breakdown.score}, "
            f"hrv={breakdown.hrv_component}, rhr={breakdown.rhr_component}, "
            f"subjective={breakdown.subjective_component}, "
            f"baseline_days={baseline.sample_count}, new_user={baseline.is_new_user}"
        )

        return CheckInResult(record=record, breakdown=breakdown, baseline=baseline)

    async def quick_score(
        self,
        user_id: UUID,
        sleep_hours: float,
        stress: float,
        soreness: float,
        mood: float,
        hrv: Optional[float] = None,
        rhr: Optional[float] = None,
    ) -> int:
        """
        Standalone readiness score for a quick (non-persisted) check.

        Uses the athlete's baseline when one exists; falls back to the
        subjective formula otherwise. Nothing is written.
        """
        try:
            baseline = await self.load_baseline(user_id)
        except HistoryStoreError as e:
            logger.warning(f"Quick score {user_id}: history unavailable ({e.detail})")
            baseline = BaselineWindow()

        return calculate_readiness_score(ReadinessInputs(
            sleep_hours=sleep_hours,
            stress=stress,
            soreness=soreness,
            mood=mood,
            hrv=hrv,
            rhr=rhr,
            hrv_baseline=baseline.hrv_mean,
            rhr_baseline=baseline.rhr_mean,
            hrv_sd=baseline.hrv_sd,
            rhr_sd=baseline.rhr_sd,
        ))
