"""
Nutrition Coaching Configuration

Hand-tuned thresholds behind the adaptive TDEE coaching suggestions and the
dashboard recommendation. They are product decisions, not physiology, so they
can be adjusted via environment variables without code changes.

The energy-balance constant (7700 kcal/kg) and the EMA alpha are not here:
those are part of the estimation contract and live in services.adaptive_tdee.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class NutritionCoachingConfig(BaseSettings):
    """
    Configurable nutrition coaching settings.

    Defaults reproduce the values the coaching copy was written against.
    """
    model_config = SettingsConfigDict(env_prefix="NUTRITION_", case_sensitive=False)

    # Cut: weekly change smaller than this (and not a real loss) is a plateau
    cut_plateau_threshold_kg: float = 0.15
    cut_plateau_adjustment_kcal: int = -150

    # Cut: losing faster than this per week risks lean mass
    cut_max_loss_kg: float = 1.0
    cut_too_fast_adjustment_kcal: int = 200

    # Bulk: weekly gain below this is a stall
    bulk_stall_threshold_kg: float = 0.08
    bulk_stall_adjustment_kcal: int = 100

    # Bulk: weekly gain above this is an excessive surplus
    bulk_max_gain_kg: float = 0.5
    bulk_surplus_adjustment_kcal: int = -150

    # Goal targets relative to TDEE
    cut_offset_kcal: int = 550
    bulk_offset_kcal: int = 275

    # Suggestion compliance check (percent)
    intake_variance_pct: float = 10.0

    # Dashboard recommendation
    cut_floor_kcal: int = 1200
    target_rounding_kcal: int = 50
    cut_weekly_change_kg: float = -0.5
    bulk_weekly_change_kg: float = 0.25
    compliance_tolerance_pct: float = 5.0

    # Dashboard stall detection
    stall_threshold_kg: float = 0.15
    stall_min_weigh_ins: int = 10
    stall_min_weeks: int = 2


# Global config instance
nutrition_config = NutritionCoachingConfig()
