"""
Tests for settings, nutrition config, structured logging and the clock
"""
import json
import logging
from datetime import date

import pytest
from sqlalchemy import inspect

from coachmetrics.core.clock import FixedClock, SystemClock
from coachmetrics.core.config import Settings
from coachmetrics.core.database import build_engine, init_db
from coachmetrics.core.logging import JSONFormatter, setup_logging
from coachmetrics.core.nutrition_config import NutritionCoachingConfig


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_CYCLE_LENGTH_DAYS", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.DEFAULT_CYCLE_LENGTH_DAYS == 28
        assert settings.LOG_FORMAT == "json"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("DEFAULT_CYCLE_LENGTH_DAYS", "32")
        settings = Settings(_env_file=None)
        assert settings.DATABASE_URL == "sqlite:///./other.db"
        assert settings.DEFAULT_CYCLE_LENGTH_DAYS == 32

    def test_cycle_length_is_validated(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CYCLE_LENGTH_DAYS", "12")
        with pytest.raises(ValueError):
            Settings(_env_file=None)


class TestNutritionCoachingConfig:

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("NUTRITION_CUT_PLATEAU_ADJUSTMENT_KCAL", "-200")
        config = NutritionCoachingConfig()
        assert config.cut_plateau_adjustment_kcal == -200
        assert config.cut_offset_kcal == 550


class TestJSONFormatter:

    def _record(self, **extra):
        record = logging.LogRecord(
            name="coachmetrics.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="score=%s",
            args=(72,),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_fields(self):
        payload = json.loads(JSONFormatter().format(self._record()))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "coachmetrics.test"
        assert payload["message"] == "score=72"
        assert "timestamp" in payload

    def test_extra_fields_are_merged(self):
        record = self._record(extra_fields={"user_id": "abc", "baseline_days": 12})
        payload = json.loads(JSONFormatter().format(record))
        assert payload["user_id"] == "abc"
        assert payload["baseline_days"] == 12


class TestSetupLogging:

    def test_text_format_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            settings = Settings(_env_file=None, LOG_FORMAT="text", LOG_LEVEL="DEBUG", ENVIRONMENT="development")
            setup_logging(settings)
            assert len(root.handlers) == 1
            assert not isinstance(root.handlers[0].formatter, JSONFormatter)
            assert root.level == logging.DEBUG
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_production_forces_json(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging(Settings(_env_file=None, LOG_FORMAT="text", ENVIRONMENT="production"))
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestInfrastructure:

    def test_sqlite_engine(self):
        engine = build_engine("sqlite://")
        assert engine.dialect.name == "sqlite"
        engine.dispose()

    def test_init_db_creates_tables(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'coachmetrics.db'}")
        init_db(bind=engine)
        tables = set(inspect(engine).get_table_names())
        assert {"daily_metrics", "daily_readiness", "nutrition_logs", "daily_cycle_logs"} <= tables
        engine.dispose()

    def test_clocks(self):
        assert FixedClock(date(2026, 1, 2)).today() == date(2026, 1, 2)
        assert isinstance(SystemClock().today(), date)
