"""
Tests for the cycle tracking service
"""
import pytest
from datetime import timedelta

from coachmetrics.core.exceptions import NotFoundError
from coachmetrics.schemas import CycleSettings
from coachmetrics.services.cycle_phase import CyclePhase
from coachmetrics.services.cycle_tracking import CycleTrackingService


class TestCycleTrackingService:

    @pytest.mark.asyncio
    async def test_status_requires_settings(self, store, clock, user_id):
        service = CycleTrackingService(store, clock)
        assert await service.get_status(user_id) is None

    @pytest.mark.asyncio
    async def test_status_requires_period_date(self, store, clock, user_id):
        store.cycle_settings[user_id] = CycleSettings(last_period_start_date=None)
        service = CycleTrackingService(store, clock)
        assert await service.get_status(user_id) is None

    @pytest.mark.asyncio
    async def test_save_settings_defaults(self, store, clock, user_id, today):
        service = CycleTrackingService(store, clock)

        saved = await service.save_settings(user_id, today - timedelta(days=3))

        assert saved.cycle_length_days == 28
        assert saved.contraceptive_type == "none"
        assert saved.auto_regulation_enabled is True
        assert store.cycle_settings[user_id] == saved

    @pytest.mark.asyncio
    async def test_status_from_saved_settings(self, store, clock, user_id, today):
        service = CycleTrackingService(store, clock)
        await service.save_settings(user_id, today - timedelta(days=8), cycle_length=30)

        status = await service.get_status(user_id)

        assert status.days_into_cycle == 8
        assert status.current_phase == CyclePhase.FOLLICULAR
        assert status.predicted_next_period == today + timedelta(days=22)

    @pytest.mark.asyncio
    async def test_resaving_overwrites(self, store, clock, user_id, today):
        service = CycleTrackingService(store, clock)
        await service.save_settings(user_id, today - timedelta(days=20))
        await service.save_settings(user_id, today - timedelta(days=2), contraceptive_type="pill")

        status = await service.get_status(user_id)

        assert status.current_phase == CyclePhase.MENSTRUAL
        assert store.cycle_settings[user_id].contraceptive_type == "pill"

    @pytest.mark.asyncio
    async def test_log_symptoms_stamps_phase(self, store, clock, user_id, today):
        service = CycleTrackingService(store, clock)
        await service.save_settings(user_id, today - timedelta(days=14))

        log = await service.log_symptoms(user_id, ["bloating", "fatigue"])

        assert log.date == today
        assert log.current_phase == "ovulatory"
        assert store.cycle_logs[(user_id, today)].symptom_tags == ["bloating", "fatigue"]

    @pytest.mark.asyncio
    async def test_log_symptoms_same_day_overwrites(self, store, clock, user_id, today):
        service = CycleTrackingService(store, clock)
        await service.save_settings(user_id, today - timedelta(days=1))

        await service.log_symptoms(user_id, ["cramps"])
        await service.log_symptoms(user_id, [])

        assert store.cycle_logs[(user_id, today)].symptom_tags == []
        assert len(store.cycle_logs) == 1

    @pytest.mark.asyncio
    async def test_log_symptoms_without_settings(self, store, clock, user_id):
        service = CycleTrackingService(store, clock)

        with pytest.raises(NotFoundError) as exc_info:
            await service.log_symptoms(user_id, ["cramps"])

        assert exc_info.value.error_code == "NOT_FOUND"
