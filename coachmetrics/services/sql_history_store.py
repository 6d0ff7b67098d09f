"""
SQLAlchemy-backed History Store

Upserts follow query-then-update-or-add on the (user, date) unique key and
commit per call; upsert_checkin stages both daily rows and commits once.
Any SQLAlchemy failure is rolled back and re-raised as HistoryStoreError so
services can decide whether to degrade.
"""
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coachmetrics.core.exceptions import HistoryStoreError
from coachmetrics.models import (
    AthleteCycleSettings,
    DailyCycleLog as DailyCycleLogRow,
    DailyMetric,
    DailyReadiness,
    NutritionLog,
)
from coachmetrics.schemas import (
    CalorieEntry,
    CycleSettings,
    DailyCycleLog,
    DailyMetricSample,
    DailyReadinessRecord,
    WeightEntry,
)
from coachmetrics.services.history_store import HistoryStore

logger = logging.getLogger(__name__)


def _metric_to_sample(row: DailyMetric) -> DailyMetricSample:
    return DailyMetricSample(
        date=row.date,
        hrv_rmssd=row.hrv_rmssd,
        resting_heart_rate=row.resting_hr,
        sleep_hours=row.sleep_hours,
        subjective_readiness=row.subjective_readiness,
        weight_kg=row.weight_kg,
    )


def _readiness_to_record(row: DailyReadiness) -> DailyReadinessRecord:
    return DailyReadinessRecord(
        date=row.date,
        score=row.score,
        sleep_hours=row.sleep_hours if row.sleep_hours is not None else 7,
        sleep_quality=row.sleep_quality or 7,
        energy=row.energy or 7,
        stress=row.stress_level or 3,
        mood=row.mood or 7,
        digestion=row.digestion or 7,
        soreness_map=row.soreness_map or {},
        body_weight=row.body_weight,
    )


class SqlAlchemyHistoryStore(HistoryStore):
    """History store over a synchronous SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, error: SQLAlchemyError) -> HistoryStoreError:
        self.db.rollback()
        logger.error(f"History store {operation} failed: {error}")
        return HistoryStoreError(operation, error)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_daily_metrics(self, user_id: UUID, since: date) -> List[DailyMetricSample]:
        try:
            rows = (
                self.db.query(DailyMetric)
                .filter(DailyMetric.user_id == user_id, DailyMetric.date >= since)
                .order_by(DailyMetric.date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch_daily_metrics", e) from e
        return [_metric_to_sample(r) for r in rows]

    async def fetch_daily_readiness(self, user_id: UUID, day: date) -> Optional[DailyReadinessRecord]:
        try:
            row = (
                self.db.query(DailyReadiness)
                .filter(DailyReadiness.athlete_id == user_id, DailyReadiness.date == day)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch_daily_readiness", e) from e
        return _readiness_to_record(row) if row else None

    async def fetch_weight_log(self, user_id: UUID, since: date) -> List[WeightEntry]:
        try:
            checkin_weights = (
                self.db.query(DailyReadiness.date, DailyReadiness.body_weight)
                .filter(
                    DailyReadiness.athlete_id == user_id,
                    DailyReadiness.date >= since,
                    DailyReadiness.body_weight.isnot(None),
                )
                .all()
            )
            metric_weights = (
                self.db.query(DailyMetric.date, DailyMetric.weight_kg)
                .filter(
                    DailyMetric.user_id == user_id,
                    DailyMetric.date >= since,
                    DailyMetric.weight_kg.isnot(None),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch_weight_log", e) from e

        # daily_metrics > daily_readiness for the same date
        by_date: Dict[date, float] = {d: float(w) for d, w in checkin_weights}
        by_date.update({d: float(w) for d, w in metric_weights})
        return [WeightEntry(date=d, weight=w) for d, w in sorted(by_date.items())]

    async def fetch_calorie_log(self, user_id: UUID, since: date) -> List[CalorieEntry]:
        try:
            rows = (
                self.db.query(NutritionLog.date, func.sum(NutritionLog.calories))
                .filter(
                    NutritionLog.athlete_id == user_id,
                    NutritionLog.date >= since,
                    NutritionLog.calories.isnot(None),
                )
                .group_by(NutritionLog.date)
                .order_by(NutritionLog.date)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch_calorie_log", e) from e
        return [CalorieEntry(date=d, calories=float(total)) for d, total in rows]

    async def fetch_cycle_settings(self, user_id: UUID) -> Optional[CycleSettings]:
        try:
            row = (
                self.db.query(AthleteCycleSettings)
                .filter(AthleteCycleSettings.athlete_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch_cycle_settings", e) from e
        return CycleSettings.model_validate(row) if row else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _stage_daily_readiness(self, user_id: UUID, day: date, record: DailyReadinessRecord) -> None:
        values = {
            "score": record.score,
            "sleep_hours": record.sleep_hours,
            "sleep_quality": record.sleep_quality,
            "energy": record.energy,
            "stress_level": record.stress,
            "mood": record.mood,
            "digestion": record.digestion,
            "soreness_map": dict(record.soreness_map),
            "body_weight": record.body_weight,
            "has_pain": record.has_pain,
        }
        existing = (
            self.db.query(DailyReadiness)
            .filter(DailyReadiness.athlete_id == user_id, DailyReadiness.date == day)
            .first()
        )
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
        else:
            self.db.add(DailyReadiness(athlete_id=user_id, date=day, **values))

    def _stage_daily_metrics(self, user_id: UUID, day: date, sample: DailyMetricSample) -> None:
        values = {
            "hrv_rmssd": sample.hrv_rmssd,
            "resting_hr": sample.resting_heart_rate,
            "sleep_hours": sample.sleep_hours,
            "subjective_readiness": sample.subjective_readiness,
            "weight_kg": sample.weight_kg,
        }
        existing = (
            self.db.query(DailyMetric)
            .filter(DailyMetric.user_id == user_id, DailyMetric.date == day)
            .first()
        )
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
        else:
            self.db.add(DailyMetric(user_id=user_id, date=day, **values))

    async def upsert_daily_readiness(self, user_id: UUID, day: date, record: DailyReadinessRecord) -> None:
        try:
            self._stage_daily_readiness(user_id, day, record)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("upsert_daily_readiness", e) from e

    async def upsert_daily_metrics(self, user_id: UUID, day: date, sample: DailyMetricSample) -> None:
        try:
            self._stage_daily_metrics(user_id, day, sample)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("upsert_daily_metrics", e) from e

    async def upsert_checkin(
        self,
        user_id: UUID,
        day: date,
        record: DailyReadinessRecord,
        sample: DailyMetricSample,
    ) -> None:
        """Both rows in one transaction: a failure leaves neither behind."""
        try:
            self._stage_daily_metrics(user_id, day, sample)
            self._stage_daily_readiness(user_id, day, record)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("upsert_checkin", e) from e

    async def upsert_cycle_settings(self, user_id: UUID, settings: CycleSettings) -> None:
        try:
            existing = (
                self.db.query(AthleteCycleSettings)
                .filter(AthleteCycleSettings.athlete_id == user_id)
                .first()
            )
            if existing:
                for key, value in settings.model_dump().items():
                    setattr(existing, key, value)
            else:
                self.db.add(AthleteCycleSettings(athlete_id=user_id, **settings.model_dump()))
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("upsert_cycle_settings", e) from e

    async def upsert_cycle_log(self, user_id: UUID, log: DailyCycleLog) -> None:
        try:
            existing = (
                self.db.query(DailyCycleLogRow)
                .filter(DailyCycleLogRow.athlete_id == user_id, DailyCycleLogRow.date == log.date)
                .first()
            )
            if existing:
                existing.current_phase = log.current_phase
                existing.symptom_tags = list(log.symptom_tags)
            else:
                self.db.add(DailyCycleLogRow(
                    athlete_id=user_id,
                    date=log.date,
                    current_phase=log.current_phase,
                    symptom_tags=list(log.symptom_tags),
                ))
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("upsert_cycle_log", e) from e
