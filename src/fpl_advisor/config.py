"""
Configuration management for FPL Advisor using pydantic-settings.

Every engine knob lives in an explicit settings section with a documented
default. Values are validated once at construction; environment variables
and a .env file can override any of them.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FPLSettings(BaseSettings):
    """FPL API access settings."""

    manager_id: int = Field(default=0, description="Your FPL team/manager ID")
    timeout: float = Field(
        default=10.0, gt=0, description="Per-request timeout in seconds"
    )
    max_retries: int = Field(
        default=3, ge=1, le=10, description="Attempts per request before giving up"
    )

    model_config = SettingsConfigDict(env_prefix="FPL_")


class EngineSettings(BaseSettings):
    """Squad optimization engine settings."""

    # Value model
    horizon: int = Field(
        default=2, ge=1, le=10, description="Planning horizon in gameweeks"
    )
    min_minutes_pct: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Minutes-probability cutoff; players below it score 0",
    )
    dgw_damp: float = Field(
        default=0.94,
        gt=0,
        le=1,
        description="Damping applied to every fixture after the first in a gameweek",
    )
    home_mult: float = Field(default=1.05, gt=0, description="Home fixture multiplier")
    away_mult: float = Field(default=0.95, gt=0, description="Away fixture multiplier")

    # Gain thresholds
    min_delta_single: float = Field(
        default=0.8, ge=0, description="Minimum EV gain for a single transfer"
    )
    min_delta_combo: float = Field(
        default=2.0, ge=0, description="Minimum EV gain for a 2+ move combination"
    )
    step_raw_per_extra: float = Field(
        default=0.0,
        ge=0,
        description="Extra raw gain a combination needs per move beyond two",
    )

    # Hit policy
    hit_threshold: float = Field(
        default=6.0, description="Net a 2+ move plan must clear to be eligible"
    )
    hit_step_per_extra: float = Field(
        default=1.0, ge=0, description="Added to the hit bar per move beyond the first"
    )
    soft_penalty_per_extra: float = Field(
        default=0.5, ge=0, description="Ranking penalty per move beyond the first"
    )
    conservative_margin: float = Field(
        default=1.0,
        ge=0,
        description="A multi-move plan must beat the best 0/1-move plan by this much",
    )

    # Search-space caps
    max_pool_per_position: int = Field(
        default=500, ge=1, description="Market candidates kept per position"
    )
    max_singles: int = Field(
        default=600, ge=1, description="Accepted single moves before the scan halts"
    )
    pair_universe: int = Field(
        default=140, ge=2, description="Top singles considered for pairs"
    )
    triple_universe: int = Field(
        default=90, ge=3, description="Top singles considered for triples"
    )

    # Optional bench guard
    bench_guard: bool = Field(
        default=False, description="Require a larger gain to sell a bench player"
    )
    bench_min_delta: float = Field(
        default=2.0, ge=0, description="Minimum gain when selling a bench player"
    )

    # Budget derivation fallback
    default_budget: float = Field(
        default=100.0, gt=0, description="Budget used when none can be derived"
    )
    budget_floor: float = Field(
        default=70.0,
        ge=0,
        description="Derived budgets at or below this are treated as missing",
    )

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    @model_validator(mode="after")
    def check_thresholds(self) -> "EngineSettings":
        """Combinations must clear at least the single-move bar."""
        if self.min_delta_combo < self.min_delta_single:
            raise ValueError(
                "min_delta_combo must be >= min_delta_single "
                f"({self.min_delta_combo} < {self.min_delta_single})"
            )
        return self


class ChipSettings(BaseSettings):
    """Chip advisory thresholds."""

    tc_min: float = Field(default=8.0, ge=0, description="Captain EV to play Triple Captain")
    bb_min: float = Field(default=10.0, ge=0, description="Bench EV to play Bench Boost")
    fh_min: float = Field(default=10.0, ge=0, description="XI gain to play Free Hit")
    fh_over_budget_penalty: float = Field(
        default=0.25,
        ge=0,
        description="Score penalty per 1.0m the Free Hit XI costs above budget",
    )
    bb_plan_min: float = Field(
        default=12.0, ge=0, description="Bench EV after transfers to play Bench Boost now"
    )
    wc_risky_min: int = Field(
        default=75,
        ge=0,
        le=100,
        description="Starters below this minutes probability need fixing",
    )
    wc_risky_count: int = Field(
        default=4, ge=1, description="Must-fix starters that justify a Wildcard"
    )
    wc_hit_bar: int = Field(
        default=8, ge=0, description="Likely hit points that justify a Wildcard"
    )
    wildcards_per_season: int = Field(default=2, ge=0)

    model_config = SettingsConfigDict(env_prefix="CHIP_")


class AppSettings(BaseSettings):
    """General application settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    model_config = SettingsConfigDict(env_prefix="")


class Settings(BaseSettings):
    """Main settings class combining all configuration sections."""

    fpl: FPLSettings = Field(default_factory=FPLSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    chips: ChipSettings = Field(default_factory=ChipSettings)
    app: AppSettings = Field(default_factory=AppSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def has_manager(self) -> bool:
        """Check if a manager ID is configured."""
        return self.fpl.manager_id > 0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.
    """
    from dotenv import load_dotenv

    env_paths = [
        Path(".env"),
        Path(__file__).parent.parent.parent / ".env",
    ]

    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path, override=True)
            break

    return Settings()
