"""
Pytest configuration and fixtures

Services are exercised against the in-memory store with a fixed clock.
SQL store tests get a fresh in-memory SQLite database per test.
"""
import pytest
from datetime import date, timedelta
from uuid import uuid4

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coachmetrics.core.clock import FixedClock
from coachmetrics.core.database import init_db
from coachmetrics.schemas import DailyMetricSample
from coachmetrics.services.history_store import InMemoryHistoryStore


TODAY = date(2026, 3, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def store():
    return InMemoryHistoryStore()


@pytest.fixture
def seed_metrics(store, user_id):
    """
    Seed daily metrics for the days before TODAY.

    Takes a list of (hrv, rhr, sleep) tuples, most recent day first.
    """
    def _seed(readings, weight_kg=None):
        for offset, (hrv, rhr, sleep) in enumerate(readings, start=1):
            day = TODAY - timedelta(days=offset)
            store.metrics[(user_id, day)] = DailyMetricSample(
                date=day,
                hrv_rmssd=hrv,
                resting_heart_rate=rhr,
                sleep_hours=sleep,
                weight_kg=weight_kg,
            )
    return _seed


@pytest.fixture(scope="function")
def db_session():
    """
    In-memory SQLite session with all tables created.

    Discarded after the test; nothing persists.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()

    yield session

    session.close()
    engine.dispose()
