"""
Cycle Tracking Service

Reads and writes an athlete's cycle settings and daily symptom log, and
turns the stored last-period date into today's CycleStatus.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

import logging

from coachmetrics.core.clock import Clock, SystemClock
from coachmetrics.core.config import settings as app_settings
from coachmetrics.core.exceptions import NotFoundError
from coachmetrics.schemas import CycleSettings, DailyCycleLog
from coachmetrics.services.cycle_phase import CycleStatus, calculate_cycle_status
from coachmetrics.services.history_store import HistoryStore

logger = logging.getLogger(__name__)


class CycleTrackingService:

    def __init__(self, store: HistoryStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    async def get_status(self, user_id: UUID) -> Optional[CycleStatus]:
        """Today's cycle status, or None until a last period start is configured."""
        settings = await self.store.fetch_cycle_settings(user_id)
        if settings is None or settings.last_period_start_date is None:
            return None

        return calculate_cycle_status(
            settings.last_period_start_date,
            today=self.clock.today(),
            cycle_length=settings.cycle_length_days or app_settings.DEFAULT_CYCLE_LENGTH_DAYS,
        )

    async def save_settings(
        self,
        user_id: UUID,
        last_period_start: date,
        cycle_length: Optional[int] = None,
        contraceptive_type: Optional[str] = None,
    ) -> CycleSettings:
        settings = CycleSettings(
            last_period_start_date=last_period_start,
            cycle_length_days=cycle_length or app_settings.DEFAULT_CYCLE_LENGTH_DAYS,
            contraceptive_type=contraceptive_type or "none",
            auto_regulation_enabled=True,
        )
        await self.store.upsert_cycle_settings(user_id, settings)
        logger.info(
            f"Cycle settings saved for {user_id}: last_period={last_period_start}, "
            f"length={settings.cycle_length_days}"
        )
        return settings

    async def log_symptoms(self, user_id: UUID, symptoms: List[str]) -> DailyCycleLog:
        """Upsert today's symptom tags, stamped with the current phase."""
        status = await self.get_status(user_id)
        if status is None:
            raise NotFoundError("Cycle settings", str(user_id))

        log = DailyCycleLog(
            date=self.clock.today(),
            current_phase=status.current_phase.value,
            symptom_tags=list(symptoms),
        )
        await self.store.upsert_cycle_log(user_id, log)
        return log
