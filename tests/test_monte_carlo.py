import numpy as np
import pytest

from fiplanner.config import EngineSettings
from fiplanner.engine import run_monte_carlo, run_monte_carlo_from_settings, run_projection
from fiplanner.engine.monte_carlo import (
    draw_rate_paths,
    fi_year_percentiles,
    sample_lognormal_return,
    standard_normal,
)
from tests.builders import make_account, make_household, make_scenario


class _FixedUniforms:
    def __init__(self, values):
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


def _near_fi_household():
    return make_household(accounts=[make_account("brokerage", "taxable", 3000000.0)])


def test_zero_volatility_matches_deterministic_fi_year():
    household, scenario = _near_fi_household(), make_scenario()
    expected = run_projection(household, scenario, horizon_years=10).fi_year

    result = run_monte_carlo(household, scenario, paths=20, horizon_years=10, volatility=0.0, seed=7)

    assert expected == 2026
    assert result.fi_year_25 == result.fi_year_50 == result.fi_year_75 == 2026
    assert result.paths_hit_fi == 20
    assert result.success_rate == 1.0


def test_percentiles_are_ordered():
    result = run_monte_carlo(_near_fi_household(), make_scenario(), paths=50, horizon_years=20, seed=3)

    assert result.paths_run == 50
    assert len(result.fi_years) == 50
    assert result.fi_year_25 <= result.fi_year_50 <= result.fi_year_75


def test_same_seed_gives_same_distribution():
    first = run_monte_carlo(_near_fi_household(), make_scenario(), paths=25, horizon_years=20, seed=11)
    second = run_monte_carlo(_near_fi_household(), make_scenario(), paths=25, horizon_years=20, seed=11)

    assert first.fi_years == second.fi_years
    assert first.fi_year_50 == second.fi_year_50


def test_injected_generator_is_used():
    first = run_monte_carlo(
        _near_fi_household(), make_scenario(), paths=10, horizon_years=20, rng=np.random.default_rng(5)
    )
    second = run_monte_carlo(_near_fi_household(), make_scenario(), paths=10, horizon_years=20, seed=5)

    assert first.fi_years == second.fi_years


def test_unreachable_fi_uses_horizon_sentinel():
    household = make_household(accounts=[make_account("brokerage", "taxable", 1000.0)])

    result = run_monte_carlo(household, make_scenario(), paths=5, horizon_years=5, volatility=0.0, seed=1)

    assert result.paths_hit_fi == 0
    assert result.fi_years == [2030] * 5
    assert result.fi_year_50 == 2030
    assert result.success_rate == 0.0


def test_no_paths_gives_no_percentiles():
    result = run_monte_carlo(make_household(), make_scenario(), paths=0, horizon_years=5, seed=1)

    assert (result.fi_year_25, result.fi_year_50, result.fi_year_75) == (None, None, None)
    assert result.success_rate == 0.0
    assert fi_year_percentiles([]) == [None, None, None]


def test_box_muller_guards_zero_uniform():
    assert standard_normal(_FixedUniforms([0.0, 0.5])) == 0.0
    assert standard_normal(_FixedUniforms([1.0, 0.25])) == pytest.approx(0.0, abs=1e-12)


def test_lognormal_draws_center_on_mean():
    rng = np.random.default_rng(42)

    draws = [sample_lognormal_return(0.05, 0.15, rng) for _ in range(20000)]

    assert np.mean(draws) == pytest.approx(0.05, abs=0.01)
    assert min(draws) > -1.0


def test_rate_paths_shape():
    paths = draw_rate_paths(0.04, 0.1, 3, 7, np.random.default_rng(0))

    assert len(paths) == 3
    assert all(len(path) == 7 for path in paths)


def test_settings_drive_the_run():
    settings = EngineSettings(horizon_years=10, mc_paths=4, mc_volatility=0.0, mc_seed=9)

    result = run_monte_carlo_from_settings(_near_fi_household(), make_scenario(), settings)

    assert result.paths_run == 4
    assert result.fi_year_50 == 2026


def test_zero_volatility_matches_deterministic_run_with_money_market_cash():
    household = make_household(
        accounts=[
            make_account("mm", "money_market", 1500000.0, apy=0.0),
            make_account("brokerage", "taxable", 1500000.0),
        ]
    )
    scenario = make_scenario(modeling_mode="nominal")
    expected = run_projection(household, scenario, horizon_years=10).fi_year

    result = run_monte_carlo(household, scenario, paths=5, horizon_years=10, volatility=0.0, seed=2)

    assert expected is not None
    assert result.fi_years == [expected] * 5


def test_money_market_only_household_ignores_sampled_returns():
    household = make_household(accounts=[make_account("mm", "money_market", 3000000.0, apy=0.0)])
    scenario = make_scenario(modeling_mode="nominal")

    deterministic = run_projection(household, scenario, horizon_years=5)
    result = run_monte_carlo(household, scenario, paths=5, horizon_years=5, seed=4)

    assert deterministic.fi_year is None
    assert result.paths_hit_fi == 0
    assert result.fi_years == [2030] * 5


def test_percentiles_do_not_depend_on_input_order():
    assert fi_year_percentiles([2030, 2026, 2028, 2027, 2029]) == [2027.0, 2028.0, 2029.0]
