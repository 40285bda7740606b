# engine/monte_carlo.py
"""FI-year distribution under randomized annual returns.

Each path draws one lognormal return per year and re-runs the full projection
with those returns substituted for the scenario rate. Draws come from an
injected ``numpy.random.Generator`` and are taken up front, so a seeded run is
reproducible whether paths are evaluated serially or in a process pool.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import DEFAULT_HORIZON_YEARS, DEFAULT_MC_PATHS, DEFAULT_MC_VOLATILITY, EngineSettings, settings_from_env
from ..data_model import Household, MonteCarloResult, Scenario
from .limits import LimitTable
from .rates import base_rate
from .simulator import run_projection

logger = logging.getLogger(__name__)

PERCENTILES = (25, 50, 75)


def standard_normal(rng: np.random.Generator) -> float:
    """Box-Muller transform over two uniforms from ``rng``."""
    u1 = rng.random()
    u2 = rng.random()
    if u1 <= 0:
        return 0.0
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def sample_lognormal_return(mean: float, volatility: float, rng: np.random.Generator) -> float:
    # Log-mean chosen so E[1 + R] = 1 + mean.
    mu = math.log(1 + mean) - volatility * volatility / 2
    return math.exp(mu + volatility * standard_normal(rng)) - 1


def draw_rate_paths(
    mean: float,
    volatility: float,
    paths: int,
    horizon_years: int,
    rng: np.random.Generator,
) -> List[List[float]]:
    return [
        [sample_lognormal_return(mean, volatility, rng) for _ in range(horizon_years)]
        for _ in range(paths)
    ]


def _path_fi_year(job: Tuple[Household, Scenario, int, Sequence[float], Optional[LimitTable]]) -> Optional[int]:
    household, scenario, horizon_years, rates, limits = job
    result = run_projection(
        household,
        scenario,
        horizon_years,
        annual_rates=rates,
        limits=limits,
        check_inputs=False,
    )
    return result.fi_year


def fi_year_percentiles(fi_years: Sequence[float]) -> List[Optional[float]]:
    if not fi_years:
        return [None for _ in PERCENTILES]
    values = np.percentile(np.asarray(fi_years, dtype=float), PERCENTILES)
    return [float(value) for value in values]


def run_monte_carlo(
    household: Household,
    scenario: Scenario,
    paths: int = DEFAULT_MC_PATHS,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
    volatility: float = DEFAULT_MC_VOLATILITY,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    limits: Optional[LimitTable] = None,
    max_workers: int = 1,
) -> MonteCarloResult:
    if rng is None:
        rng = np.random.default_rng(seed)
    mean = base_rate(scenario)
    rate_paths = draw_rate_paths(mean, volatility, paths, horizon_years, rng)
    jobs = [(household, scenario, horizon_years, rates, limits) for rates in rate_paths]

    if max_workers > 1 and len(jobs) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_path_fi_year, jobs))
    else:
        results = [_path_fi_year(job) for job in jobs]

    sentinel = household.start_year + horizon_years
    fi_years = sorted(year if year is not None else sentinel for year in results)
    hit = sum(1 for year in results if year is not None)
    p25, p50, p75 = fi_year_percentiles(fi_years)
    logger.info("Monte Carlo: %d/%d paths reached FI, median year %s", hit, paths, p50)

    return MonteCarloResult(
        fi_year_25=p25,
        fi_year_50=p50,
        fi_year_75=p75,
        paths_run=paths,
        paths_hit_fi=hit,
        fi_years=fi_years,
    )


def run_monte_carlo_from_settings(
    household: Household,
    scenario: Scenario,
    settings: Optional[EngineSettings] = None,
    limits: Optional[LimitTable] = None,
) -> MonteCarloResult:
    """Monte Carlo run configured by ``settings`` (``FIPLANNER_*`` environment when omitted)."""
    settings = settings or settings_from_env()
    return run_monte_carlo(
        household,
        scenario,
        paths=settings.mc_paths,
        horizon_years=settings.horizon_years,
        volatility=settings.mc_volatility,
        seed=settings.mc_seed,
        limits=limits,
        max_workers=settings.mc_workers,
    )
