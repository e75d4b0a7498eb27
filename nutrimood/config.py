from pydantic import field_validator
from pydantic_settings import BaseSettings


class ConfigurationError(ValueError):
    """Raised when a threshold or analyzer parameter is out of range."""


class Settings(BaseSettings):
    database_url: str = "sqlite:///./nutrimood.db"

    # IANA timezone used for calendar-day and hour-of-day bucketing
    local_timezone: str = "UTC"

    # Sensitivity report thresholds
    sensitivity_min_occurrences: int = 3
    trigger_negative_ratio: float = 0.6
    safe_positive_ratio: float = 0.7

    # Menu/meal trigger matching (looser than the sensitivity report)
    menu_trigger_min_occurrences: int = 2

    # Temporal patterns
    worst_day_min_samples: int = 2
    worst_day_top_n: int = 2

    # Deficiency detection (window counts entries, not days)
    deficiency_window_entries: int = 7
    protein_floor_grams: float = 20
    protein_target_grams: float = 50
    calorie_floor: float = 1200
    calorie_target: float = 2000

    # Streaks and insights
    streak_horizon_days: int = 365
    insights_min_meal_logs: int = 5

    class Config:
        env_file = ".env"

    @field_validator("trigger_negative_ratio", "safe_positive_ratio")
    @classmethod
    def _ratio_in_unit_interval(cls, value: float) -> float:
        if not 0 <= value < 1:
            raise ValueError(f"ratio thresholds must be in [0, 1), got {value}")
        return value

    @field_validator(
        "sensitivity_min_occurrences",
        "menu_trigger_min_occurrences",
        "worst_day_min_samples",
        "worst_day_top_n",
        "deficiency_window_entries",
        "streak_horizon_days",
    )
    @classmethod
    def _positive_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"count thresholds must be >= 1, got {value}")
        return value


def require_positive(name: str, value: int) -> int:
    """Reject a non-positive analyzer parameter at the call boundary."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


settings = Settings()
