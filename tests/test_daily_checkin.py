"""
Tests for the daily check-in orchestration

Runs DailyCheckinService against the in-memory store with a fixed clock:
new-user cold start, baseline scoring, degraded history, upsert semantics
and the quick standalone score.
"""
import logging

import pytest

from coachmetrics.core.exceptions import HistoryStoreError
from coachmetrics.schemas import CheckInInput, DailyMetricSample
from coachmetrics.services.daily_checkin import DailyCheckinService, score_checkin
from coachmetrics.services.history_store import InMemoryHistoryStore
from coachmetrics.services.readiness_baseline import BaselineWindow
from coachmetrics.services.readiness_score import MetricStatus


# hrv mean 50 sd 10, rhr mean 50 sd 2
STEADY_HISTORY = [
    (40.0, 52.0, 7.0),
    (60.0, 48.0, 8.0),
    (40.0, 52.0, 7.0),
    (60.0, 48.0, 8.0),
]


class FailingHistoryStore(InMemoryHistoryStore):
    """Store whose history reads fail; writes still succeed."""

    async def fetch_daily_metrics(self, user_id, since):
        raise HistoryStoreError("fetch_daily_metrics", ConnectionError("database unreachable"))


class TestScoreCheckin:

    def test_new_user_baseline_is_subjective_only(self):
        breakdown = score_checkin(CheckInInput(), BaselineWindow(), hrv_today=80.0)
        assert breakdown.score == 70
        assert breakdown.hrv_component == 0

    def test_missing_metric_baseline_is_neutral(self):
        """Sleep history alone clears cold start; HRV/RHR then score neutral."""
        baseline = BaselineWindow(sleep_mean=7.5, sample_count=5)
        breakdown = score_checkin(CheckInInput(), baseline, hrv_today=80.0, rhr_today=40.0)
        assert breakdown.hrv_component == 30
        assert breakdown.rhr_component == 10
        assert breakdown.score == 54


class TestSaveCheckin:

    @pytest.mark.asyncio
    async def test_new_user_scores_subjective_only(self, store, clock, user_id, today):
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(user_id, CheckInInput())

        assert result.baseline.is_new_user is True
        assert result.breakdown.score == 70
        assert result.record.score == 70
        assert result.record.date == today

    @pytest.mark.asyncio
    async def test_persists_both_tables(self, store, clock, user_id, today):
        service = DailyCheckinService(store, clock)

        await service.save_checkin(user_id, CheckInInput(sleep_hours=6.5, body_weight=71.2))

        record = store.readiness[(user_id, today)]
        sample = store.metrics[(user_id, today)]
        assert record.sleep_hours == 6.5
        assert record.body_weight == 71.2
        assert sample.sleep_hours == 6.5
        # subjective component 14 of 20 → 7 of 10
        assert sample.subjective_readiness == 7

    @pytest.mark.asyncio
    async def test_baseline_mode_neutral_day(self, store, clock, user_id, seed_metrics):
        seed_metrics(STEADY_HISTORY)
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(
            user_id, CheckInInput(hrv_rmssd=50.0, resting_heart_rate=50.0)
        )

        assert result.baseline.is_new_user is False
        assert result.baseline.hrv_mean == pytest.approx(50.0)
        assert result.breakdown.score == 30 + 10 + 14

    @pytest.mark.asyncio
    async def test_low_hrv_morning(self, store, clock, user_id, seed_metrics):
        seed_metrics(STEADY_HISTORY)
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(user_id, CheckInInput(hrv_rmssd=30.0))

        assert result.breakdown.hrv_component == 0
        assert result.breakdown.hrv_status == MetricStatus.LOW
        assert result.breakdown.rhr_component == 10

    @pytest.mark.asyncio
    async def test_synced_wearable_reading_is_used(self, store, clock, user_id, today, seed_metrics):
        """A device sync earlier today fills in what the check-in leaves out."""
        seed_metrics(STEADY_HISTORY)
        store.metrics[(user_id, today)] = DailyMetricSample(
            date=today, hrv_rmssd=30.0, resting_heart_rate=50.0, weight_kg=72.4,
        )
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(user_id, CheckInInput())

        assert result.breakdown.hrv_component == 0
        # today is not part of its own baseline
        assert result.baseline.sample_count == 4
        saved = store.metrics[(user_id, today)]
        assert saved.hrv_rmssd == 30.0
        assert saved.weight_kg == 72.4

    @pytest.mark.asyncio
    async def test_checkin_reading_beats_synced_reading(self, store, clock, user_id, today, seed_metrics):
        seed_metrics(STEADY_HISTORY)
        store.metrics[(user_id, today)] = DailyMetricSample(date=today, hrv_rmssd=30.0)
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(user_id, CheckInInput(hrv_rmssd=50.0))

        assert result.breakdown.hrv_component == 30

    @pytest.mark.asyncio
    async def test_baseline_window_is_thirty_days(self, store, clock, user_id, seed_metrics):
        seed_metrics([(50.0, 50.0, 7.0)] * 40)
        service = DailyCheckinService(store, clock)

        baseline = await service.load_baseline(user_id)

        assert baseline.sample_count == 30

    @pytest.mark.asyncio
    async def test_history_failure_degrades_to_subjective(self, clock, user_id, today, caplog):
        store = FailingHistoryStore()
        service = DailyCheckinService(store, clock)

        with caplog.at_level(logging.WARNING, logger="coachmetrics.services.daily_checkin"):
            result = await service.save_checkin(user_id, CheckInInput(hrv_rmssd=20.0))

        assert result.baseline.is_new_user is True
        assert result.breakdown.score == 70
        assert (user_id, today) in store.readiness
        assert "scoring subjective-only" in caplog.text

    @pytest.mark.asyncio
    async def test_second_checkin_overwrites(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)

        await service.save_checkin(user_id, CheckInInput(energy=2))
        await service.save_checkin(user_id, CheckInInput(energy=9))

        saved = await service.get_today(user_id)
        assert saved.energy == 9
        assert len([k for k in store.readiness if k[0] == user_id]) == 1

    @pytest.mark.asyncio
    async def test_soreness_flags_pain(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(
            user_id, CheckInInput(soreness_map={"quads": 1, "lower_back": 2})
        )

        assert result.record.has_pain is True

    @pytest.mark.asyncio
    async def test_mild_soreness_is_not_pain(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)

        result = await service.save_checkin(user_id, CheckInInput(soreness_map={"calves": 1}))

        assert result.record.has_pain is False

    @pytest.mark.asyncio
    async def test_get_today_without_checkin(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)
        assert await service.get_today(user_id) is None


class TestQuickScore:

    @pytest.mark.asyncio
    async def test_subjective_only_without_history(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)

        score = await service.quick_score(user_id, sleep_hours=8, stress=1, soreness=1, mood=10, hrv=30.0)

        assert score == 100

    @pytest.mark.asyncio
    async def test_blends_with_baseline(self, store, clock, user_id, seed_metrics):
        seed_metrics(STEADY_HISTORY)
        service = DailyCheckinService(store, clock)

        score = await service.quick_score(user_id, sleep_hours=8, stress=1, soreness=1, mood=10, hrv=30.0)

        assert score == 50

    @pytest.mark.asyncio
    async def test_does_not_persist(self, store, clock, user_id):
        service = DailyCheckinService(store, clock)

        await service.quick_score(user_id, sleep_hours=7, stress=3, soreness=2, mood=7)

        assert store.readiness == {}
        assert store.metrics == {}

    @pytest.mark.asyncio
    async def test_history_failure_falls_back(self, clock, user_id):
        service = DailyCheckinService(FailingHistoryStore(), clock)

        score = await service.quick_score(user_id, sleep_hours=8, stress=1, soreness=1, mood=10, hrv=30.0)

        assert score == 100
