from fiplanner.data_model import (
    Contribution,
    ContributionOverride,
    EmergencyFundGoal,
    EquityGrant,
    OneTimeEvent,
    PriceAssumption,
)
from fiplanner.engine import run_projection, validate
from tests.builders import make_account, make_household, make_person, make_scenario


def _grant(**kwargs):
    values = dict(
        id="g1",
        owner_person_id="p1",
        start_year=2025,
        destination_account_id="inv",
        vesting={2026: 10},
        price=PriceAssumption(fixed_price=100.0),
    )
    values.update(kwargs)
    return EquityGrant(**values)


def _error_codes(household, scenario=None):
    return [issue.code for issue in validate(household, scenario or make_scenario()).errors]


def _warning_codes(household, scenario=None, horizon_years=50):
    return [issue.code for issue in validate(household, scenario or make_scenario(), horizon_years).warnings]


def test_clean_inputs_pass():
    report = validate(make_household(), make_scenario())

    assert report.ok
    assert report.errors == []


def test_dangling_account_references_are_errors():
    person = make_person(contributions=[Contribution("missing", amount_annual=1000.0)])
    household = make_household(
        people=[person],
        equity_grants=[_grant(destination_account_id="nowhere")],
        events=[OneTimeEvent("trip", 2026, 1000.0, account_id="gone")],
        emergency_fund=EmergencyFundGoal("ghost", 10000.0),
    )

    errors = validate(household, make_scenario()).errors

    assert [e.code for e in errors].count("MISSING_ACCOUNT_REF") == 4
    assert any("trip" in e.message for e in errors)


def test_unknown_grant_owner_is_an_error():
    household = make_household(equity_grants=[_grant(owner_person_id="p9")])

    assert "MISSING_PERSON_REF" in _error_codes(household)


def test_override_references_are_checked():
    scenario = make_scenario(
        contribution_overrides=[ContributionOverride(source="payroll", account_id="nope", person_id="p7")]
    )

    codes = _error_codes(make_household(), scenario)

    assert "MISSING_ACCOUNT_REF" in codes
    assert "MISSING_PERSON_REF" in codes


def test_swr_must_be_in_range():
    assert "INVALID_SWR" in _error_codes(make_household(), make_scenario(swr=0.0))
    assert "INVALID_SWR" in _error_codes(make_household(), make_scenario(swr=0.12))
    assert "INVALID_SWR" not in _error_codes(make_household(), make_scenario(swr=0.04))


def test_rates_must_be_in_range():
    assert "INVALID_RATES" in _error_codes(make_household(), make_scenario(nominal_return=0.8))
    assert "INVALID_RATES" in _error_codes(make_household(), make_scenario(inflation=-0.6))
    assert "INVALID_RATES" in _error_codes(make_household(), make_scenario(stress_test_first_year_return=-0.7))


def test_negative_starting_balance_is_an_error():
    household = make_household(accounts=[make_account(balance=-1.0)])

    assert "NEGATIVE_BALANCE" in _error_codes(household)


def test_conflicting_tax_inputs():
    both = make_scenario(effective_tax_rate=0.2)
    override_without_value = make_scenario(take_home_definition="override")

    assert "INPUT_DEFINITION_CONFLICT" in _error_codes(make_household(), both)
    assert "INPUT_DEFINITION_CONFLICT" in _error_codes(make_household(), override_without_value)


def test_contribution_needs_exactly_one_amount():
    household = make_household(
        out_of_pocket_contributions=[Contribution("inv", amount_annual=1000.0, amount_monthly=100.0)],
    )

    assert "INVALID_CONTRIBUTION" in _error_codes(household)


def test_outflow_without_account_is_unresolved():
    household = make_household(
        accounts=[make_account("cash", "cash", 5000.0)],
        events=[
            OneTimeEvent("roof", 2027, 2000.0, kind="outflow"),
            OneTimeEvent("gift", 2027, 2000.0, kind="inflow"),
        ],
    )

    errors = validate(household, make_scenario()).errors

    assert [e.code for e in errors] == ["EVENT_ACCOUNT_UNRESOLVED"]
    assert "roof" in errors[0].message


def test_event_larger_than_starting_balance_warns_with_event_id():
    household = make_household(
        accounts=[make_account("cash", "cash", 1000.0)],
        events=[OneTimeEvent("wedding", 2026, 25000.0, account_id="cash")],
    )

    warnings = validate(household, make_scenario()).warnings

    overdraft = [w for w in warnings if w.code == "EVENT_OVERDRAFT"]
    assert len(overdraft) == 1
    assert "wedding" in overdraft[0].message


def test_equity_vesting_warnings():
    empty = make_household(equity_grants=[_grant(vesting={})])
    early = make_household(equity_grants=[_grant(vesting={2023: 10, 2026: 10})])
    late = make_household(equity_grants=[_grant(vesting={2040: 10})])
    disabled = make_household(equity_grants=[_grant(vesting={}, enabled=False)])

    assert "EQUITY_EMPTY_VESTING" in _warning_codes(empty)
    assert "EQUITY_VESTED_BEFORE_START" in _warning_codes(early)
    late_warnings = validate(late, make_scenario(), horizon_years=10).warnings
    assert [w.code for w in late_warnings if w.code.startswith("EQUITY")] == ["EQUITY_VESTING_PAST_HORIZON"]
    assert "g1" in late_warnings[0].message
    assert not [code for code in _warning_codes(disabled) if code.startswith("EQUITY")]


def test_aggressive_returns_warn():
    assert "AGGRESSIVE_RETURNS" in _warning_codes(make_household(), make_scenario(nominal_return=0.09))
    assert "AGGRESSIVE_RETURNS" not in _warning_codes(make_household(), make_scenario(nominal_return=0.07))


def test_retirement_spend_below_current_warns():
    scenario = make_scenario(retirement_monthly_spend=5000.0)

    assert "RETIREMENT_SPEND_LT_CURRENT" in _warning_codes(make_household(), scenario)


def test_first_year_deficit_warns():
    household = make_household(
        out_of_pocket_contributions=[Contribution("inv", amount_annual=10000.0)],
    )

    assert "CASHFLOW_DEFICIT" in _warning_codes(household, make_scenario(take_home_annual=80000.0))
    assert "CASHFLOW_DEFICIT" not in _warning_codes(household, make_scenario(take_home_annual=86000.0))


def test_no_deficit_warning_without_salary():
    household = make_household(people=[make_person(salary=0.0)])

    assert "CASHFLOW_DEFICIT" not in _warning_codes(household, make_scenario(take_home_annual=0.0))


def test_employer_money_excluded_by_scenario_warns():
    person = make_person(contributions=[Contribution("inv", amount_annual=5000.0, contributor="employer")])

    codes = _warning_codes(make_household(people=[person]), make_scenario(include_employer_match=False))

    assert "EMPLOYER_MATCH_DISABLED_BUT_PRESENT" in codes


def test_assumptions_are_recorded():
    scenario = make_scenario(current_monthly_spend=None, take_home_annual=None)

    assumptions = validate(make_household(), scenario).assumptions

    assert any("today's dollars" in text for text in assumptions)
    assert any("6,353" in text for text in assumptions)
    assert any("untaxed" in text for text in assumptions)
    assert any("birth year" in text for text in assumptions)


def test_projection_still_runs_with_blocking_errors():
    household = make_household(accounts=[make_account(balance=-100.0)])

    result = run_projection(household, make_scenario(), horizon_years=3)

    assert len(result.rows) == 3
    assert not result.validation.ok
    assert result.validation.has("NEGATIVE_BALANCE")


def test_event_covered_by_savings_built_up_beforehand_does_not_warn():
    household = make_household(
        accounts=[make_account("cash", "cash", 1000.0), make_account()],
        monthly_savings_contributions=[Contribution("cash", amount_monthly=1000.0)],
        events=[OneTimeEvent("roof", 2030, 5000.0, account_id="cash")],
    )

    assert "EVENT_OVERDRAFT" not in _warning_codes(household)


def test_event_after_account_is_drained_warns():
    household = make_household(
        accounts=[make_account("cash", "cash", 8000.0), make_account()],
        events=[
            OneTimeEvent("car", 2026, 8000.0, account_id="cash"),
            OneTimeEvent("boat", 2028, 3000.0, account_id="cash"),
        ],
    )

    overdraft = [w for w in validate(household, make_scenario()).warnings if w.code == "EVENT_OVERDRAFT"]

    assert [w.year for w in overdraft] == [2028]
    assert "boat" in overdraft[0].message
