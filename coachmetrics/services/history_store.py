"""
History Store

The I/O collaborator of the readiness, TDEE and cycle services. Services
only ever talk to this interface; the scoring math never sees it.

Every write is an upsert keyed on (user, date), or on user alone for cycle
settings. Concurrent writes for the same key are last-write-wins.
"""
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from coachmetrics.schemas import (
    CalorieEntry,
    CycleSettings,
    DailyCycleLog,
    DailyMetricSample,
    DailyReadinessRecord,
    WeightEntry,
)


class HistoryStore(ABC):
    """Async CRUD over an athlete's stored daily history."""

    @abstractmethod
    async def fetch_daily_metrics(self, user_id: UUID, since: date) -> List[DailyMetricSample]:
        """Samples dated on or after `since`, newest first."""

    @abstractmethod
    async def fetch_daily_readiness(self, user_id: UUID, day: date) -> Optional[DailyReadinessRecord]:
        ...

    @abstractmethod
    async def fetch_weight_log(self, user_id: UUID, since: date) -> List[WeightEntry]:
        """
        One weight per date on or after `since`, oldest first.

        A wearable/manual metric weight wins over the check-in body weight
        for the same date.
        """

    @abstractmethod
    async def fetch_calorie_log(self, user_id: UUID, since: date) -> List[CalorieEntry]:
        """Logged intake on or after `since`, oldest first. Several entries may share a date."""

    @abstractmethod
    async def upsert_daily_readiness(self, user_id: UUID, day: date, record: DailyReadinessRecord) -> None:
        ...

    @abstractmethod
    async def upsert_daily_metrics(self, user_id: UUID, day: date, sample: DailyMetricSample) -> None:
        ...

    @abstractmethod
    async def upsert_checkin(
        self,
        user_id: UUID,
        day: date,
        record: DailyReadinessRecord,
        sample: DailyMetricSample,
    ) -> None:
        """Write a check-in and its daily metrics together; all or nothing."""

    @abstractmethod
    async def fetch_cycle_settings(self, user_id: UUID) -> Optional[CycleSettings]:
        ...

    @abstractmethod
    async def upsert_cycle_settings(self, user_id: UUID, settings: CycleSettings) -> None:
        ...

    @abstractmethod
    async def upsert_cycle_log(self, user_id: UUID, log: DailyCycleLog) -> None:
        ...


class InMemoryHistoryStore(HistoryStore):
    """Dict-backed store for tests, demos and single-process use."""

    def __init__(self):
        self.metrics: Dict[Tuple[UUID, date], DailyMetricSample] = {}
        self.readiness: Dict[Tuple[UUID, date], DailyReadinessRecord] = {}
        self.calories: Dict[UUID, List[CalorieEntry]] = defaultdict(list)
        self.cycle_settings: Dict[UUID, CycleSettings] = {}
        self.cycle_logs: Dict[Tuple[UUID, date], DailyCycleLog] = {}

    def log_calories(self, user_id: UUID, day: date, calories: float) -> None:
        self.calories[user_id].append(CalorieEntry(date=day, calories=calories))

    async def fetch_daily_metrics(self, user_id: UUID, since: date) -> List[DailyMetricSample]:
        rows = [s for (uid, d), s in self.metrics.items() if uid == user_id and d >= since]
        return sorted(rows, key=lambda s: s.date, reverse=True)

    async def fetch_daily_readiness(self, user_id: UUID, day: date) -> Optional[DailyReadinessRecord]:
        return self.readiness.get((user_id, day))

    async def fetch_weight_log(self, user_id: UUID, since: date) -> List[WeightEntry]:
        by_date: Dict[date, float] = {}
        for (uid, d), record in self.readiness.items():
            if uid == user_id and d >= since and record.body_weight is not None:
                by_date[d] = record.body_weight
        for (uid, d), sample in self.metrics.items():
            if uid == user_id and d >= since and sample.weight_kg is not None:
                by_date[d] = sample.weight_kg
        return [WeightEntry(date=d, weight=w) for d, w in sorted(by_date.items())]

    async def fetch_calorie_log(self, user_id: UUID, since: date) -> List[CalorieEntry]:
        rows = [c for c in self.calories.get(user_id, []) if c.date >= since]
        return sorted(rows, key=lambda c: c.date)

    async def upsert_daily_readiness(self, user_id: UUID, day: date, record: DailyReadinessRecord) -> None:
        self.readiness[(user_id, day)] = record

    async def upsert_daily_metrics(self, user_id: UUID, day: date, sample: DailyMetricSample) -> None:
        self.metrics[(user_id, day)] = sample

    async def upsert_checkin(
        self,
        user_id: UUID,
        day: date,
        record: DailyReadinessRecord,
        sample: DailyMetricSample,
    ) -> None:
        self.metrics[(user_id, day)] = sample
        self.readiness[(user_id, day)] = record

    async def fetch_cycle_settings(self, user_id: UUID) -> Optional[CycleSettings]:
        return self.cycle_settings.get(user_id)

    async def upsert_cycle_settings(self, user_id: UUID, settings: CycleSettings) -> None:
        self.cycle_settings[user_id] = settings

    async def upsert_cycle_log(self, user_id: UUID, log: DailyCycleLog) -> None:
        self.cycle_logs[(user_id, log.date)] = log
