"""
Solver settings using pydantic-settings for type-safe configuration.

Every default can be overridden from the environment (prefix ASSIGNGROUPS_)
or a .env file. Settings are loaded once and cached.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

FORMULATIONS = ("linear", "pairwise_product")


class Settings(BaseSettings):
    """Defaults for solver runs and objective weights."""

    model_config = SettingsConfigDict(
        env_prefix="ASSIGNGROUPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Solver ===
    time_limit_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Wall-clock budget handed to the solver; the best solution found so far is used",
    )
    verbose: bool = Field(
        default=False,
        description="Let the solver print its own search log",
    )
    objective_scale: int = Field(
        default=1000,
        ge=1,
        description="Multiplier turning real scores and weights into integer objective coefficients",
    )

    # === Immersion objective weights ===
    weight_preference: float = Field(default=1.0, ge=0, description="Weight of the preference cost")
    weight_size_imbalance: float = Field(default=1.0, ge=0, description="Weight of per-week group size spread")
    weight_same_program: float = Field(default=1.0, ge=0, description="Weight of same-program co-assignment")
    weight_repeat_partner: float = Field(default=1.0, ge=0, description="Weight of repeated partners across weeks")
    balance_includes_sentinel_weeks: bool = Field(
        default=True,
        description="Count all-zero (externally decided) weeks in the group size penalty",
    )
    immersion_formulation: str = Field(
        default="linear",
        description="'linear' (extra-occurrence penalties) or 'pairwise_product' (legacy raw pair counts)",
    )

    # === Partner requests ===
    partner_bonus: float = Field(
        default=-1.0,
        description="Preference value written for each requested partner pair",
    )

    # === Logging ===
    log_level: str = Field(default="INFO", description="INFO, DEBUG or TRACE")

    @field_validator("immersion_formulation", mode="after")
    @classmethod
    def validate_formulation(cls, v: str) -> str:
        """Validate and normalize the immersion formulation name."""
        v = v.lower()
        if v not in FORMULATIONS:
            raise ValueError(f"Invalid immersion formulation: {v}. Must be one of {', '.join(FORMULATIONS)}")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("INFO", "DEBUG", "TRACE"):
            raise ValueError(f"Invalid log level: {v}. Must be INFO, DEBUG or TRACE")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Call get_settings.cache_clear() after changing the environment.
    """
    return Settings()
