"""Simulation settings with environment variable support.

Uses pydantic-settings for typed configuration validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class SimulationSettings(BaseSettings):
    """Simulation configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    # Ownership arithmetic
    ownership_tolerance: float = Field(default=1e-4, gt=0, le=0.01)

    # Fiscal defaults
    life_insurance_rebate_per_person: float = Field(
        default=4600.0, ge=0, description="Yearly life insurance interest rebate per adult in €"
    )
    social_taxes_rate_pct: float = Field(default=17.2, ge=0, le=100)
    flat_tax_rate_pct: float = Field(default=12.8, ge=0, le=100)
    rent_abatement_pct: float = Field(default=30.0, ge=0, le=100, description="Micro-foncier abatement")
    inflation_rate_pct: float = Field(default=2.0, ge=-10, le=50)
    fiscal_child_max_age: int = Field(default=25, ge=0, le=30)

    # Succession
    default_fiscal_option: str = Field(
        default="full_usufruct",
        description="Spouse option used when none is set (full_usufruct, quotite_disponible, usufruct_plus_bare)",
    )

    model_config = {
        "env_prefix": "PATRISIM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> SimulationSettings:
    """Get cached simulation settings."""
    return SimulationSettings()
