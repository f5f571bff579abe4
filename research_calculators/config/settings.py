"""
Settings Management with Pydantic

Provides type-safe configuration for the calculators with:
- Environment variable support
- Validation
- Per-organisation tuning of thresholds and design heuristics
"""

from enum import Enum
from typing import Dict
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReliabilityTier(str, Enum):
    """Target reliability of a MaxDiff design."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeasibilityConfig(BaseSettings):
    """Verdict thresholds and dimension weights for feasibility scoring."""
    model_config = SettingsConfigDict(
        env_prefix="FEASIBILITY_",
        extra="ignore"
    )

    feasible_threshold: float = 75.0
    at_risk_threshold: float = 40.0

    # Any single dimension under this score raises a risk
    risk_floor: float = 30.0

    default_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "timeline": 0.25,
            "incidence": 0.20,
            "sample_market": 0.20,
            "loi": 0.15,
            "market_difficulty": 0.20,
        }
    )

    @field_validator("at_risk_threshold")
    @classmethod
    def _below_feasible(cls, value: float, info) -> float:
        feasible = info.data.get("feasible_threshold", 75.0)
        if value > feasible:
            raise ValueError("at_risk_threshold must not exceed feasible_threshold")
        return value


class MaxDiffConfig(BaseSettings):
    """Items-per-set heuristic for MaxDiff designs."""
    model_config = SettingsConfigDict(
        env_prefix="MAXDIFF_",
        extra="ignore"
    )

    items_per_set_small: int = 4
    items_per_set_large: int = 5
    large_design_threshold: int = 12
    min_items_per_set: int = 3
    max_items_per_set: int = 6


class AutoFillConfig(BaseSettings):
    """Calculator defaults layered under values inferred from past work."""
    model_config = SettingsConfigDict(
        env_prefix="AUTOFILL_",
        extra="ignore"
    )

    default_confidence: int = 95
    default_margin_of_error: float = 5.0
    default_timeline_days: int = 14
    default_incidence_rate: float = 30.0
    default_country: str = "Turkey"
    default_reliability: ReliabilityTier = ReliabilityTier.MEDIUM


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_name: str = "Research Calculators"
    log_level: str = "INFO"
    log_json: bool = False

    feasibility: FeasibilityConfig = Field(default_factory=FeasibilityConfig)
    maxdiff: MaxDiffConfig = Field(default_factory=MaxDiffConfig)
    autofill: AutoFillConfig = Field(default_factory=AutoFillConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            feasibility=FeasibilityConfig(),
            maxdiff=MaxDiffConfig(),
            autofill=AutoFillConfig()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
