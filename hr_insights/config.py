# hr_insights/config.py

from dataclasses import dataclass
from datetime import date
from typing import Optional
import copy

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from the environment (prefix HR_) or .env."""

    model_config = SettingsConfigDict(
        env_prefix="HR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite:///hr_insights.db"
    source_csv: str = "data/WA_Fn-UseC_-HR-Employee-Attrition.csv"
    seed: Optional[int] = None
    log_level: str = "INFO"


settings = Settings()


@dataclass
class GenerationConfig:
    review_window_months:       int   = 18
    min_review_months:          int   = 2
    max_review_months:          int   = 4
    review_day_max:             int   = 28
    score_min:                  int   = 1
    score_max:                  int   = 5
    training_lookback_days:     int   = 365
    benefit_lookback_days:      int   = 1460
    survey_lookback_days:       int   = 180
    min_benefits:               int   = 1
    max_benefits:               int   = 3
    benefit_active_probability: float = 0.85
    seed:                       Optional[int]  = None
    as_of:                      Optional[date] = None

    def __post_init__(self):
        if self.review_window_months < 0:
            raise ValueError("review_window_months must be >= 0")
        if not 0 <= self.min_review_months <= self.max_review_months:
            raise ValueError(
                f"Invalid review month range: [{self.min_review_months}, {self.max_review_months}]"
            )
        if not 1 <= self.review_day_max <= 28:
            raise ValueError("review_day_max must be within 1-28")
        if self.score_min > self.score_max:
            raise ValueError(f"Invalid score range: [{self.score_min}, {self.score_max}]")
        if not 1 <= self.min_benefits <= self.max_benefits:
            raise ValueError(
                f"Invalid benefit count range: [{self.min_benefits}, {self.max_benefits}]"
            )
        for name in ("training_lookback_days", "benefit_lookback_days", "survey_lookback_days"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if not 0.0 <= self.benefit_active_probability <= 1.0:
            raise ValueError("benefit_active_probability must be within [0, 1]")

    @property
    def today(self) -> date:
        return self.as_of or date.today()


PRESETS = {
    "default": GenerationConfig(),

    # Short history: one quarter of reviews, recent enrolments only
    "recent": GenerationConfig(
        review_window_months=3,
        min_review_months=1,
        max_review_months=2,
        benefit_lookback_days=365,
    ),

    # Long history with a denser review cadence
    "dense_history": GenerationConfig(
        review_window_months=36,
        min_review_months=6,
        max_review_months=12,
        training_lookback_days=730,
    ),

    # Benefits churn scenario
    "high_churn": GenerationConfig(
        benefit_active_probability=0.6,
    ),
}


def get_preset(name: str, **overrides) -> GenerationConfig:
    if name not in PRESETS:
        raise ValueError(f"Unknown preset: {name}. "
                         f"Available: {list(PRESETS.keys())}")
    config = copy.copy(PRESETS[name])
    for key, value in overrides.items():
        if not hasattr(config, key):
            raise ValueError(f"Unknown config option: {key}")
        setattr(config, key, value)
    config.__post_init__()
    return config
