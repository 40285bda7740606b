# engine/validation.py
"""Referential and range checks on household/scenario inputs.

Errors mean the projection cannot be trusted; warnings and assumptions are
informational. Nothing here raises for bad input: every finding is an
:class:`~fiplanner.data_model.Issue` with a stable code.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

from ..config import (
    AGGRESSIVE_RETURN_THRESHOLD,
    CASHFLOW_DEFICIT_THRESHOLD,
    DEFAULT_CURRENT_MONTHLY_SPEND,
    DEFAULT_HORIZON_YEARS,
    MAX_SWR,
    RATE_BOUNDS,
)
from ..data_model import Contribution, Household, Issue, Ledger, Scenario, ValidationReport
from .contributions import aggregate_contributions
from .income import IncomeResolver

logger = logging.getLogger(__name__)

MISSING_ACCOUNT_REF = "MISSING_ACCOUNT_REF"
MISSING_PERSON_REF = "MISSING_PERSON_REF"
INVALID_SWR = "INVALID_SWR"
INVALID_RATES = "INVALID_RATES"
NEGATIVE_BALANCE = "NEGATIVE_BALANCE"
INPUT_DEFINITION_CONFLICT = "INPUT_DEFINITION_CONFLICT"
INVALID_CONTRIBUTION = "INVALID_CONTRIBUTION"
EVENT_ACCOUNT_UNRESOLVED = "EVENT_ACCOUNT_UNRESOLVED"

EVENT_OVERDRAFT = "EVENT_OVERDRAFT"
EQUITY_EMPTY_VESTING = "EQUITY_EMPTY_VESTING"
EQUITY_VESTED_BEFORE_START = "EQUITY_VESTED_BEFORE_START"
EQUITY_VESTING_PAST_HORIZON = "EQUITY_VESTING_PAST_HORIZON"
AGGRESSIVE_RETURNS = "AGGRESSIVE_RETURNS"
RETIREMENT_SPEND_LT_CURRENT = "RETIREMENT_SPEND_LT_CURRENT"
CASHFLOW_DEFICIT = "CASHFLOW_DEFICIT"
EMPLOYER_MATCH_DISABLED_BUT_PRESENT = "EMPLOYER_MATCH_DISABLED_BUT_PRESENT"


def _labelled_contributions(household: Household) -> Iterable[Tuple[str, Contribution]]:
    for person in household.people:
        for contribution in person.payroll.contributions:
            yield f"payroll contribution for {person.id}", contribution
    for contribution in household.out_of_pocket_contributions:
        yield "out-of-pocket contribution", contribution
    for contribution in household.monthly_savings_contributions:
        yield "monthly savings contribution", contribution


def _check_references(household: Household, scenario: Scenario) -> List[Issue]:
    errors: List[Issue] = []
    account_ids = set(household.account_ids())
    person_ids = {person.id for person in household.people}

    for label, contribution in _labelled_contributions(household):
        if contribution.account_id not in account_ids:
            errors.append(
                Issue(MISSING_ACCOUNT_REF, f"{label.capitalize()} references unknown account {contribution.account_id}.")
            )
        if contribution.amount_mode() is None:
            errors.append(
                Issue(
                    INVALID_CONTRIBUTION,
                    f"{label.capitalize()} to {contribution.account_id} must set exactly one of "
                    "annual amount, monthly amount or percent of income.",
                )
            )

    for grant in household.equity_grants:
        if grant.destination_account_id not in account_ids:
            errors.append(
                Issue(
                    MISSING_ACCOUNT_REF,
                    f"Equity grant {grant.id} deposits into unknown account {grant.destination_account_id}.",
                )
            )
        if grant.owner_person_id not in person_ids:
            errors.append(
                Issue(MISSING_PERSON_REF, f"Equity grant {grant.id} is owned by unknown person {grant.owner_person_id}.")
            )

    for event in household.events:
        if event.account_id is not None and event.account_id not in account_ids:
            errors.append(
                Issue(MISSING_ACCOUNT_REF, f"Event {event.id} references unknown account {event.account_id}.")
            )
        elif event.account_id is None and event.is_outflow:
            errors.append(
                Issue(EVENT_ACCOUNT_UNRESOLVED, f"Outflow event {event.id} does not name an account.", year=event.year)
            )

    goal = household.emergency_fund
    if goal is not None and goal.account_id not in account_ids:
        errors.append(Issue(MISSING_ACCOUNT_REF, f"Emergency fund goal references unknown account {goal.account_id}."))

    for override in scenario.contribution_overrides:
        if override.account_id not in account_ids:
            errors.append(
                Issue(MISSING_ACCOUNT_REF, f"Contribution override references unknown account {override.account_id}.")
            )
        if override.person_id is not None and override.person_id not in person_ids:
            errors.append(
                Issue(MISSING_PERSON_REF, f"Contribution override references unknown person {override.person_id}.")
            )
    return errors


def _check_ranges(household: Household, scenario: Scenario) -> List[Issue]:
    errors: List[Issue] = []
    if scenario.swr <= 0 or scenario.swr > MAX_SWR:
        errors.append(Issue(INVALID_SWR, f"Safe withdrawal rate {scenario.swr:.2%} must be above 0% and at most 10%."))

    low, high = RATE_BOUNDS
    for label, value in (
        ("Nominal return", scenario.nominal_return),
        ("Inflation", scenario.inflation),
        ("Stress-test return", scenario.stress_test_first_year_return),
    ):
        if value is not None and not low <= value <= high:
            errors.append(Issue(INVALID_RATES, f"{label} {value:.2%} is outside -50%..50%."))

    for account in household.accounts:
        if account.starting_balance < 0:
            errors.append(
                Issue(NEGATIVE_BALANCE, f"Account {account.id} starts with a negative balance.")
            )

    if scenario.take_home_definition == "override" and scenario.net_to_checking_override is None:
        errors.append(
            Issue(INPUT_DEFINITION_CONFLICT, "Take-home definition is override but no net-to-checking figure is set.")
        )
    if scenario.take_home_annual is not None and scenario.effective_tax_rate is not None:
        errors.append(
            Issue(INPUT_DEFINITION_CONFLICT, "Set either take-home pay or an effective tax rate, not both.")
        )
    return errors


def _check_equity(household: Household, horizon_years: int) -> List[Issue]:
    warnings: List[Issue] = []
    last_year = household.start_year + horizon_years - 1
    for grant in household.equity_grants:
        if not grant.enabled:
            continue
        years = [year for year, shares in grant.vesting.items() if shares and shares > 0]
        if not years:
            warnings.append(Issue(EQUITY_EMPTY_VESTING, f"Equity grant {grant.id} has no vesting shares."))
            continue
        if min(years) < household.start_year:
            warnings.append(
                Issue(
                    EQUITY_VESTED_BEFORE_START,
                    f"Equity grant {grant.id} has shares vesting before {household.start_year}; they are ignored.",
                )
            )
        if max(years) > last_year:
            warnings.append(
                Issue(
                    EQUITY_VESTING_PAST_HORIZON,
                    f"Equity grant {grant.id} vests after the projection ends in {last_year}.",
                )
            )
    return warnings


def _balances_before(household: Household, scenario: Scenario, last_year: int) -> Dict[int, Ledger]:
    """Projected balances at the start of each year up to ``last_year``, before that year's events."""
    # Deferred: the simulator runs this validator.
    from .simulator import ProjectionContext, initial_state, step_year

    ctx = ProjectionContext.build(household, scenario)
    state = initial_state(household)
    before: Dict[int, Ledger] = {}
    for year in range(household.start_year, last_year + 1):
        before[year] = state.balances
        state, _, _ = step_year(ctx, state)
    return before


def _check_events(household: Household, scenario: Scenario) -> List[Issue]:
    outflows = [
        event
        for event in household.events
        if event.is_outflow
        and household.account(event.account_id) is not None
        and event.year >= household.start_year
    ]
    if not outflows:
        return []

    before = _balances_before(household, scenario, max(event.year for event in outflows))
    warnings: List[Issue] = []
    for event in outflows:
        balance = before[event.year].get(event.account_id)
        if event.amount > balance:
            warnings.append(
                Issue(
                    EVENT_OVERDRAFT,
                    f"Event {event.id} in {event.year} withdraws ${event.amount:,.0f} from {event.account_id}, "
                    f"which holds about ${balance:,.0f} beforehand.",
                    year=event.year,
                    details={"account_id": event.account_id, "balance": balance},
                )
            )
    return warnings


def _first_year_surplus(household: Household, scenario: Scenario) -> float:
    income = IncomeResolver(household, scenario)
    year = household.start_year
    balances = Ledger(
        household.account_ids(),
        {account.id: account.starting_balance for account in household.accounts},
    )
    plan = aggregate_contributions(household, scenario, income, year, balances, income.vests(year))
    net = income.net_and_taxes(income.total_salary(year), plan.payroll).net_to_checking
    monthly = scenario.current_monthly_spend
    if monthly is None:
        monthly = DEFAULT_CURRENT_MONTHLY_SPEND
    return net - monthly * 12 - plan.out_of_pocket_total - plan.savings_total


def _check_assumptions(household: Household, scenario: Scenario) -> Tuple[List[Issue], List[str]]:
    warnings: List[Issue] = []
    assumptions: List[str] = []

    if scenario.nominal_return > AGGRESSIVE_RETURN_THRESHOLD:
        warnings.append(
            Issue(AGGRESSIVE_RETURNS, f"Nominal return {scenario.nominal_return:.1%} is above 7%; results may be optimistic.")
        )

    current = scenario.current_monthly_spend
    if current is None:
        current = DEFAULT_CURRENT_MONTHLY_SPEND
        assumptions.append(f"Current monthly spend defaults to ${DEFAULT_CURRENT_MONTHLY_SPEND:,.0f}.")
    if scenario.retirement_monthly_spend < current:
        warnings.append(
            Issue(
                RETIREMENT_SPEND_LT_CURRENT,
                f"Retirement spend ${scenario.retirement_monthly_spend:,.0f}/mo is below current spend ${current:,.0f}/mo.",
            )
        )

    has_salary = any(person.income.base_annual > 0 for person in household.people)
    if has_salary:
        surplus = _first_year_surplus(household, scenario)
        if surplus < CASHFLOW_DEFICIT_THRESHOLD:
            warnings.append(
                Issue(
                    CASHFLOW_DEFICIT,
                    f"First-year take-home pay falls ${-surplus:,.0f} short of spending and savings.",
                    year=household.start_year,
                )
            )

    employer_present = any(
        contribution.is_employer for person in household.people for contribution in person.payroll.contributions
    )
    if employer_present and not scenario.include_employer_match:
        warnings.append(
            Issue(
                EMPLOYER_MATCH_DISABLED_BUT_PRESENT,
                "Employer contributions are defined but excluded because employer match is turned off.",
            )
        )

    if scenario.is_real:
        assumptions.append("Figures are in today's dollars (real returns).")
    else:
        assumptions.append("Figures are in nominal dollars; current spending inflates each year.")
    if scenario.take_home_annual is None and scenario.effective_tax_rate is None:
        if scenario.net_to_checking_override is None:
            assumptions.append("No take-home pay or tax rate set; salary is treated as untaxed.")
    if not any(person.birth_year is not None for person in household.people):
        assumptions.append("No birth year on file; every account type is treated as accessible in retirement.")
    return warnings, assumptions


def validate(household: Household, scenario: Scenario, horizon_years: int = DEFAULT_HORIZON_YEARS) -> ValidationReport:
    report = ValidationReport()
    report.errors.extend(_check_references(household, scenario))
    report.errors.extend(_check_ranges(household, scenario))
    if not report.errors:
        # Event balances come from a projection, which needs clean inputs.
        report.warnings.extend(_check_events(household, scenario))
    report.warnings.extend(_check_equity(household, horizon_years))
    warnings, assumptions = _check_assumptions(household, scenario)
    report.warnings.extend(warnings)
    report.assumptions.extend(assumptions)
    if report.errors:
        logger.debug("Validation found %d errors: %s", len(report.errors), [e.code for e in report.errors])
    return report
