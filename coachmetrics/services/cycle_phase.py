"""
Cycle Phase Calculator

Maps days since the last period start onto one of four phases using fixed
day boundaries (1-based cycle days):

    1-5     menstrual
    6-12    follicular
    13-15   ovulatory
    16+     luteal (through the end of the cycle)

Each phase carries a fixed set of training/nutrition modifiers.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

DEFAULT_CYCLE_LENGTH_DAYS = 28

MENSTRUAL_LAST_DAY = 5
FOLLICULAR_LAST_DAY = 12
OVULATORY_LAST_DAY = 15


class CyclePhase(str, Enum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"


@dataclass(frozen=True)
class TrainingModifiers:
    volume_suggestion: str
    strength_potential: int  # 0-100
    injury_risk: str
    nutrition_focus: str


@dataclass
class CycleStatus:
    current_phase: CyclePhase
    days_into_cycle: int  # 1..cycle_length
    predicted_next_period: date
    training_modifiers: TrainingModifiers
    phase_label: str
    power_tip: str


PHASE_MODIFIERS = {
    CyclePhase.MENSTRUAL: TrainingModifiers(
        volume_suggestion="Deload",
        strength_potential=35,
        injury_risk="Low",
        nutrition_focus="Iron & Hydration",
    ),
    CyclePhase.FOLLICULAR: TrainingModifiers(
        volume_suggestion="Push Hard",
        strength_potential=80,
        injury_risk="Low",
        nutrition_focus="Carbs for intensity",
    ),
    CyclePhase.OVULATORY: TrainingModifiers(
        volume_suggestion="Peak Performance",
        strength_potential=95,
        injury_risk="High - Protect Knees",
        nutrition_focus="Protein & Antioxidants",
    ),
    CyclePhase.LUTEAL: TrainingModifiers(
        volume_suggestion="Maintenance",
        strength_potential=55,
        injury_risk="Moderate",
        nutrition_focus="Hydration & Magnesium",
    ),
}

PHASE_LABELS = {
    CyclePhase.MENSTRUAL: "Menstrual Phase",
    CyclePhase.FOLLICULAR: "Follicular Phase",
    CyclePhase.OVULATORY: "Ovulatory Phase",
    CyclePhase.LUTEAL: "Luteal Phase",
}

POWER_TIPS = {
    CyclePhase.MENSTRUAL: "Rest is productive. Focus on mobility and low-intensity work.",
    CyclePhase.FOLLICULAR: "Estrogen is rising. Go for a PR today!",
    CyclePhase.OVULATORY: "Peak strength window, but warm up thoroughly to protect joints.",
    CyclePhase.LUTEAL: "Body temp is higher. Focus on steady-state aerobic work.",
}


def phase_for_day(day_in_cycle: int) -> CyclePhase:
    """Phase for a 1-based cycle day."""
    if day_in_cycle <= MENSTRUAL_LAST_DAY:
        return CyclePhase.MENSTRUAL
    if day_in_cycle <= FOLLICULAR_LAST_DAY:
        return CyclePhase.FOLLICULAR
    if day_in_cycle <= OVULATORY_LAST_DAY:
        return CyclePhase.OVULATORY
    return CyclePhase.LUTEAL


def day_into_cycle(total_days: int, cycle_length: int) -> int:
    """
    1-based cycle day for a (possibly negative) day count since period start.

    A remainder of 0 is the last day of the cycle, not day 0.
    """
    remainder = ((total_days % cycle_length) + cycle_length) % cycle_length
    return remainder or cycle_length


def calculate_cycle_status(
    last_period_start: date,
    today: date,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
) -> CycleStatus:
    """
    Current cycle status.

    The day count is the plain calendar difference, so the period start day
    itself counts as day 0 (which wraps to the last cycle day).
    """
    cycle_length = cycle_length or DEFAULT_CYCLE_LENGTH_DAYS
    total_days = (today - last_period_start).days
    days_into = day_into_cycle(total_days, cycle_length)
    phase = phase_for_day(days_into)

    return CycleStatus(
        current_phase=phase,
        days_into_cycle=days_into,
        predicted_next_period=today + timedelta(days=cycle_length - days_into),
        training_modifiers=PHASE_MODIFIERS[phase],
        phase_label=PHASE_LABELS[phase],
        power_tip=POWER_TIPS[phase],
    )
