# fiplanner/config.py
"""Model defaults and environment-driven engine settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SWR = 0.03
DEFAULT_NOMINAL_RETURN = 0.07
DEFAULT_INFLATION = 0.03
DEFAULT_MODELING_MODE = "real"
DEFAULT_CURRENT_MONTHLY_SPEND = 6353.0
DEFAULT_RETIREMENT_AGE_TARGET = 65

# First full year without early-withdrawal penalty.
PENALTY_FREE_AGE_TRADITIONAL = 60
PENALTY_FREE_AGE_HSA = 65

# Coast FI target when nobody has a birth year on file.
COAST_FI_FALLBACK_YEARS = 30

DEFAULT_HORIZON_YEARS = 50
RECONCILIATION_TOLERANCE = 0.01

DEFAULT_MC_PATHS = 200
DEFAULT_MC_VOLATILITY = 0.15

AGGRESSIVE_RETURN_THRESHOLD = 0.07
CASHFLOW_DEFICIT_THRESHOLD = -1000.0
MAX_SWR = 0.10
RATE_BOUNDS = (-0.5, 0.5)


@dataclass
class EngineSettings:
    horizon_years: int = DEFAULT_HORIZON_YEARS
    mc_paths: int = DEFAULT_MC_PATHS
    mc_volatility: float = DEFAULT_MC_VOLATILITY
    mc_seed: Optional[int] = None
    mc_workers: int = 1


def _env_number(name: str, cast, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from exc


def settings_from_env() -> EngineSettings:
    """Build engine settings from ``FIPLANNER_*`` environment variables."""
    settings = EngineSettings(
        horizon_years=_env_number("FIPLANNER_HORIZON_YEARS", int, DEFAULT_HORIZON_YEARS),
        mc_paths=_env_number("FIPLANNER_MC_PATHS", int, DEFAULT_MC_PATHS),
        mc_volatility=_env_number("FIPLANNER_MC_VOLATILITY", float, DEFAULT_MC_VOLATILITY),
        mc_seed=_env_number("FIPLANNER_MC_SEED", int, None),
        mc_workers=_env_number("FIPLANNER_MC_WORKERS", int, 1),
    )
    if settings.horizon_years <= 0:
        raise ValueError("FIPLANNER_HORIZON_YEARS must be positive")
    if settings.mc_paths < 0:
        raise ValueError("FIPLANNER_MC_PATHS cannot be negative")
    if settings.mc_workers < 1:
        raise ValueError("FIPLANNER_MC_WORKERS must be at least 1")
    return settings
