from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import date
from typing import Optional, List, Dict, Annotated


SorenessLevel = Annotated[int, Field(ge=0, le=3)]
OneToTen = Annotated[int, Field(ge=1, le=10)]

# Soreness at or above this level counts as pain
PAIN_SORENESS_LEVEL = 2


def soreness_has_pain(soreness_map: Dict[str, int]) -> bool:
    return any(level >= PAIN_SORENESS_LEVEL for level in soreness_map.values())


class DailyMetricSample(BaseModel):
    """One day of wearable/manual objective readings."""
    date: date
    hrv_rmssd: Optional[float] = Field(default=None, ge=0)  # ms
    resting_heart_rate: Optional[float] = Field(default=None, ge=0)  # bpm
    sleep_hours: Optional[float] = Field(default=None, ge=0)
    subjective_readiness: Optional[int] = Field(default=None, ge=0, le=10)  # derived
    weight_kg: Optional[float] = Field(default=None, ge=0)

    model_config = ConfigDict(from_attributes=True)


class CheckInInput(BaseModel):
    """What the athlete submits for today's check-in."""
    sleep_hours: float = Field(default=7, ge=0, le=24)
    sleep_quality: OneToTen = 7
    energy: OneToTen = 7
    stress: OneToTen = 3  # 10 = worst
    mood: OneToTen = 7
    digestion: OneToTen = 7
    soreness_map: Dict[str, SorenessLevel] = Field(default_factory=dict)
    body_weight: Optional[float] = Field(default=None, ge=0)
    # Wearable readings, when a device synced this morning
    hrv_rmssd: Optional[float] = Field(default=None, ge=0)
    resting_heart_rate: Optional[float] = Field(default=None, ge=0)


class DailyReadinessRecord(BaseModel):
    """A saved check-in for one calendar day."""
    date: date
    score: int = Field(ge=0, le=100)
    sleep_hours: float = Field(ge=0, le=24)
    sleep_quality: OneToTen
    energy: OneToTen
    stress: OneToTen
    mood: OneToTen
    digestion: OneToTen
    soreness_map: Dict[str, SorenessLevel] = Field(default_factory=dict)
    body_weight: Optional[float] = Field(default=None, ge=0)

    @computed_field
    @property
    def has_pain(self) -> bool:
        return soreness_has_pain(self.soreness_map)


class WeightEntry(BaseModel):
    date: date
    weight: float


class CalorieEntry(BaseModel):
    date: date
    calories: float


class CycleSettings(BaseModel):
    cycle_length_days: int = Field(default=28, ge=20, le=45)
    auto_regulation_enabled: bool = True
    last_period_start_date: Optional[date] = None
    contraceptive_type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DailyCycleLog(BaseModel):
    date: date
    current_phase: str
    symptom_tags: List[str] = Field(default_factory=list)
