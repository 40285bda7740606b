import pytest

from fiplanner.engine import run_projection
from fiplanner.engine.milestones import (
    AgeTrigger,
    EitherTrigger,
    FiTrigger,
    check_retirement_shortfall,
    coast_fi_year,
    coast_target_year,
    resolve_trigger,
    savings_rate,
)
from fiplanner.engine.rates import real_return
from tests.builders import make_account, make_household, make_person, make_scenario


def test_age_trigger_uses_birth_year_plus_target():
    household = make_household(people=[make_person(birth_year=1980)])

    trigger = resolve_trigger(household, make_scenario(retire_when="age", retirement_age_target=60))

    assert trigger == AgeTrigger(2040)
    assert trigger.reason(2039, None) is None
    assert trigger.reason(2040, None) == "age"


def test_age_trigger_prefers_explicit_year():
    household = make_household(people=[make_person(birth_year=1980)])

    trigger = resolve_trigger(household, make_scenario(retire_when="age", retirement_start_year=2030))

    assert trigger == AgeTrigger(2030)


def test_fi_trigger_ignores_explicit_year():
    trigger = resolve_trigger(make_household(), make_scenario(retire_when="fi", retirement_start_year=2026))

    assert trigger == FiTrigger()
    assert trigger.reason(2030, None) is None
    assert trigger.reason(2030, 2030) is None
    assert trigger.reason(2031, 2030) == "fi"


def test_either_trigger_takes_the_earlier_switch():
    trigger = resolve_trigger(make_household(), make_scenario(retire_when="either", retirement_start_year=2040))

    assert trigger == EitherTrigger(2040)
    assert trigger.reason(2035, 2033) == "fi"
    assert trigger.reason(2040, None) == "age"
    assert EitherTrigger(None).reason(2040, None) is None


def test_unknown_trigger_is_rejected():
    with pytest.raises(ValueError):
        resolve_trigger(make_household(), make_scenario(retire_when="someday"))


def test_coast_fi_year_found_when_growth_alone_reaches_target():
    household = make_household(
        people=[make_person(birth_year=1990)],
        accounts=[make_account("brokerage", "taxable", 1000000.0)],
    )
    scenario = make_scenario()

    result = run_projection(household, scenario, horizon_years=5)

    assert coast_target_year(household, scenario) == 2055
    assert result.coast_fi_year == 2025
    assert coast_fi_year(result.rows, result.fi_number, real_return(0.07, 0.03), 2055) == 2025


def test_coast_fi_year_none_when_unreachable():
    household = make_household(
        people=[make_person(birth_year=1990)],
        accounts=[make_account("brokerage", "taxable", 500000.0)],
    )

    result = run_projection(household, make_scenario(), horizon_years=30)

    assert result.coast_fi_year is None


def test_coast_target_falls_back_to_thirty_years():
    assert coast_target_year(make_household(), make_scenario()) == 2055


def test_retirement_shortfall_check():
    scenario = make_scenario()

    short = check_retirement_shortfall(2025, 500000.0, scenario)

    assert short.portfolio_supports_per_year == pytest.approx(15000.0)
    assert short.target_spend_per_year == pytest.approx(96000.0)
    assert short.gap == pytest.approx(81000.0)
    assert check_retirement_shortfall(2025, 4000000.0, scenario) is None


def test_savings_rate_guards_zero_income():
    assert savings_rate(30000.0, 150000.0) == pytest.approx(0.2)
    assert savings_rate(30000.0, 0.0) == 0.0


def test_coast_target_and_age_trigger_share_the_first_known_birth_year():
    household = make_household(people=[make_person("p1"), make_person("p2", birth_year=1985)])
    scenario = make_scenario(retire_when="age")

    assert coast_target_year(household, scenario) == 2050
    assert resolve_trigger(household, scenario) == AgeTrigger(2050)
