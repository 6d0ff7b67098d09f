"""
ORM tables for check-ins, wearable metrics, nutrition logs and cycle tracking.

One row per user per day for every daily table; writes are upserts keyed on
(user, date), last write wins.
"""
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    JSON,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)

from coachmetrics.core.database import Base


class DailyMetric(Base):
    """
    Wearable / manual objective readings for one day.

    Read in bulk (last 30 days) to build the readiness baseline.
    """
    __tablename__ = "daily_metrics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    date = Column(Date, nullable=False)
    hrv_rmssd = Column(Float, nullable=True)  # ms
    resting_hr = Column(Float, nullable=True)  # bpm
    sleep_hours = Column(Float, nullable=True)
    subjective_readiness = Column(Integer, nullable=True)  # 0-10, derived
    weight_kg = Column(Float, nullable=True)  # Preferred weight source for TDEE
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_metrics_user_date"),
    )


class DailyReadiness(Base):
    """
    Daily check-in with the derived readiness score.

    The score is stored for display/history; it is recomputed on every save.
    """
    __tablename__ = "daily_readiness"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, nullable=False, index=True)
    date = Column(Date, nullable=False)
    score = Column(Integer, nullable=False)  # 0-100
    sleep_hours = Column(Float, nullable=True)
    sleep_quality = Column(Integer, nullable=True)  # 1-10
    energy = Column(Integer, nullable=True)  # 1-10
    stress_level = Column(Integer, nullable=True)  # 1-10, 10 = worst
    mood = Column(Integer, nullable=True)  # 1-10
    digestion = Column(Integer, nullable=True)  # 1-10
    soreness_map = Column(JSON, nullable=True)  # {zone: 0-3}
    body_weight = Column(Float, nullable=True)  # kg, fallback weight source
    has_pain = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("athlete_id", "date", name="uq_daily_readiness_athlete_date"),
        Index("ix_daily_readiness_athlete_date", "athlete_id", "date"),
    )


class NutritionLog(Base):
    """Food log entry. Several rows per day are summed into daily intake."""
    __tablename__ = "nutrition_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, nullable=False, index=True)
    date = Column(Date, nullable=False)
    calories = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_nutrition_logs_athlete_date", "athlete_id", "date"),
    )


class AthleteCycleSettings(Base):
    """Menstrual cycle configuration, one row per athlete."""
    __tablename__ = "athlete_cycle_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, nullable=False, unique=True, index=True)
    cycle_length_days = Column(Integer, nullable=False, default=28)
    auto_regulation_enabled = Column(Boolean, nullable=False, default=True)
    last_period_start_date = Column(Date, nullable=True)
    contraceptive_type = Column(Text, nullable=True)


class DailyCycleLog(Base):
    """Symptoms logged on a given day, tagged with the phase at that time."""
    __tablename__ = "daily_cycle_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, nullable=False, index=True)
    date = Column(Date, nullable=False)
    current_phase = Column(Text, nullable=False)
    symptom_tags = Column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("athlete_id", "date", name="uq_daily_cycle_logs_athlete_date"),
    )
