# engine/simulator.py
"""Annual step driver.

``step_year`` is a pure transition ``(context, state) -> (state, row, issues)``;
``run_projection`` folds it over the horizon and assembles the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import DEFAULT_CURRENT_MONTHLY_SPEND, DEFAULT_HORIZON_YEARS, RECONCILIATION_TOLERANCE
from ..data_model import (
    Household,
    Issue,
    Ledger,
    ProjectionResult,
    ReconciliationBreakdown,
    Scenario,
    ShortfallData,
    ValidationReport,
    YearRow,
)
from .contributions import aggregate_contributions
from .effective import get_effective_household
from .income import IncomeResolver
from .limits import NO_LIMITS, LimitTable
from .milestones import (
    BY_AGE,
    RetirementTrigger,
    check_retirement_shortfall,
    coast_fi_year,
    coast_target_year,
    resolve_trigger,
    savings_rate,
    shortfall_warning,
)
from .rates import RateResolver, accumulation_growth, withdrawal_growth
from .validation import CASHFLOW_DEFICIT, validate
from .withdrawals import WithdrawalAllocator

logger = logging.getLogger(__name__)

ACCUMULATION = "accumulation"
WITHDRAWAL = "withdrawal"

CASHFLOW_NOT_RECONCILED = "CASHFLOW_NOT_RECONCILED"
RETIREMENT_TAX_ZERO = "RETIREMENT_TAX_ZERO"
CONTRIBUTION_LIMIT_CAPPED = "CONTRIBUTION_LIMIT_CAPPED"
AUTO_OVERFLOW_ROUTING_ENABLED = "AUTO_OVERFLOW_ROUTING_ENABLED"
UNRESOLVED_CASH_SURPLUS = "UNRESOLVED_CASH_SURPLUS"
EQUITY_VEST_AFTER_RETIREMENT = "EQUITY_VEST_AFTER_RETIREMENT"

# Reported once per run (per account or grant where one is named).
ONCE_PER_RUN = {
    RETIREMENT_TAX_ZERO,
    CONTRIBUTION_LIMIT_CAPPED,
    AUTO_OVERFLOW_ROUTING_ENABLED,
    UNRESOLVED_CASH_SURPLUS,
    EQUITY_VEST_AFTER_RETIREMENT,
}
RUNTIME_ERRORS = {CASHFLOW_NOT_RECONCILED, RETIREMENT_TAX_ZERO}


@dataclass(frozen=True)
class ProjectionContext:
    household: Household
    scenario: Scenario
    rates: RateResolver
    income: IncomeResolver
    allocator: WithdrawalAllocator
    trigger: RetirementTrigger
    limits: LimitTable
    fi_number: float

    @classmethod
    def build(
        cls,
        household: Household,
        scenario: Scenario,
        annual_rates: Optional[Sequence[float]] = None,
        limits: Optional[LimitTable] = None,
    ) -> "ProjectionContext":
        return cls(
            household=household,
            scenario=scenario,
            rates=RateResolver.for_scenario(scenario, annual_rates),
            income=IncomeResolver(household, scenario),
            allocator=WithdrawalAllocator.for_scenario(household.accounts, scenario),
            trigger=resolve_trigger(household, scenario),
            limits=limits or NO_LIMITS,
            fi_number=scenario.fi_number,
        )


@dataclass(frozen=True)
class ProjectionState:
    index: int
    balances: Ledger
    phase: str = ACCUMULATION
    fi_year: Optional[int] = None
    retirement_year: Optional[int] = None
    shortfall: Optional[ShortfallData] = None


def initial_state(household: Household) -> ProjectionState:
    balances = Ledger(
        household.account_ids(),
        {account.id: account.starting_balance for account in household.accounts},
    )
    return ProjectionState(index=0, balances=balances)


@dataclass
class _YearFlows:
    salary: float = 0.0
    gross_income: float = 0.0
    taxes: float = 0.0
    spending: float = 0.0
    net_to_checking: float = 0.0
    surplus: float = 0.0
    other_inflows: float = 0.0
    contributions: Dict[str, float] = field(default_factory=dict)
    withdrawals: Dict[str, float] = field(default_factory=dict)
    diagnostics: Dict[str, float] = field(default_factory=dict)


def _invested(household: Household, balances: Ledger) -> float:
    return sum(balances.get(a.id) for a in household.accounts if a.included_in_fi_assets)


def apply_events(household: Household, year: int, balances: Ledger) -> Ledger:
    """One-time events for ``year``; outflows never push a balance below zero."""
    default_cash = household.default_cash_account()
    for event in household.events:
        if event.year != year:
            continue
        account_id = event.account_id
        if account_id is None and default_cash is not None:
            account_id = default_cash.id
        if account_id not in balances:
            continue
        current = balances.get(account_id)
        if event.is_outflow:
            balances = balances.with_amount(account_id, max(0.0, current - event.amount))
        else:
            balances = balances.with_amount(account_id, current + event.amount)
    return balances


def _overflow_account(household: Household) -> Optional[str]:
    for account in household.accounts:
        if account.normalized_type() == "taxable":
            return account.id
    cash = household.default_cash_account()
    return cash.id if cash is not None else None


def _overflow_room(household: Household, account_id: str, balances: Ledger, contributions: Dict[str, float]) -> float:
    """Dollars ``account_id`` can still take this year; the emergency fund stops at its target."""
    goal = household.emergency_fund
    if goal is None or goal.account_id != account_id:
        return float("inf")
    committed = balances.get(account_id) + contributions.get(account_id, 0.0)
    return max(0.0, goal.target_amount - committed)


def _accumulation_year(
    ctx: ProjectionContext, year: int, index: int, balances: Ledger, issues: List[Issue]
) -> _YearFlows:
    household, scenario = ctx.household, ctx.scenario
    salary = ctx.income.total_salary(year)
    vests = [vest for vest in ctx.income.vests(year) if vest.account_id in balances]
    plan = aggregate_contributions(household, scenario, ctx.income, year, balances, vests, ctx.limits)
    salary_taxes = ctx.income.net_and_taxes(salary, plan.payroll)

    monthly = scenario.current_monthly_spend
    if monthly is None:
        monthly = DEFAULT_CURRENT_MONTHLY_SPEND
    living = monthly * 12
    if not scenario.is_real and index > 0:
        living *= (1 + scenario.inflation) ** index
    deductions = ctx.income.deductions

    contributions = plan.amounts()
    surplus = salary_taxes.net_to_checking - living - plan.out_of_pocket_total - plan.savings_total
    unallocated = overflow = 0.0
    overflow_target = _overflow_account(household)

    if surplus > 0:
        if scenario.surplus_routing == "unallocated":
            unallocated = surplus
        elif scenario.surplus_routing == "taxable" and overflow_target is not None:
            target = overflow_target
            overflow = min(surplus, _overflow_room(household, target, balances, contributions))
            unallocated = surplus - overflow
            if overflow > 0:
                contributions[target] = contributions.get(target, 0.0) + overflow
                issues.append(
                    Issue(
                        AUTO_OVERFLOW_ROUTING_ENABLED,
                        f"Cash surplus is routed into account {target}.",
                        year=year,
                        details={"account_id": target},
                    )
                )
        else:
            issues.append(
                Issue(
                    UNRESOLVED_CASH_SURPLUS,
                    "Cash surplus is not assigned to any account or expense.",
                    year=year,
                )
            )
    elif surplus < -RECONCILIATION_TOLERANCE:
        issues.append(
            Issue(
                CASHFLOW_DEFICIT,
                f"Spending and savings exceed take-home pay by ${-surplus:,.0f} in {year}.",
                year=year,
                details={"deficit": -surplus},
            )
        )

    for account_id in plan.capped_accounts:
        issues.append(
            Issue(
                CONTRIBUTION_LIMIT_CAPPED,
                f"Contributions to {account_id} exceed the annual limit and were capped.",
                year=year,
                details={"account_id": account_id},
            )
        )

    withholding = sum(vest.withholding for vest in vests)
    vest_value = sum(vest.value for vest in vests)
    return _YearFlows(
        salary=salary,
        gross_income=salary + vest_value,
        taxes=salary_taxes.taxes + withholding,
        spending=living + deductions,
        net_to_checking=salary_taxes.net_to_checking,
        surplus=surplus,
        other_inflows=plan.payroll.employer,
        contributions=contributions,
        diagnostics={
            "employee_pre_tax_contributions": plan.payroll.employee_pre_tax,
            "employee_roth_contributions": plan.payroll.employee_roth,
            "employer_contributions": plan.payroll.employer,
            "rsu_vest_value": vest_value,
            "rsu_withholding": withholding,
            "rsu_net_proceeds": vest_value - withholding,
            "unallocated_surplus": unallocated,
            "overflow_to_taxable": overflow,
            "limit_excess": plan.limit_excess,
        },
    )


def _withdrawal_year(ctx: ProjectionContext, year: int, balances: Ledger, issues: List[Issue]) -> _YearFlows:
    household, scenario = ctx.household, ctx.scenario
    need = scenario.annual_retirement_spend
    oldest = household.oldest_birth_year()
    oldest_age = year - oldest if oldest is not None else None
    plan = ctx.allocator.allocate(need, balances, oldest_age)

    if plan.by_bucket["tax_deferred"] > 0 and ctx.allocator.rates.tax_deferred == 0:
        issues.append(
            Issue(
                RETIREMENT_TAX_ZERO,
                "Traditional withdrawals occur but the retirement tax rate is 0%; set a withdrawal tax rate.",
                year=year,
            )
        )
    for vest in ctx.income.vests(year):
        issues.append(
            Issue(
                EQUITY_VEST_AFTER_RETIREMENT,
                f"Grant {vest.grant_id} vests after retirement; the vest is not modeled.",
                year=year,
                details={"grant_id": vest.grant_id},
            )
        )

    return _YearFlows(
        spending=need,
        taxes=plan.taxes,
        surplus=-need,
        # Unfunded spending is counted as a source so the shortfall stays visible.
        other_inflows=plan.total + plan.shortfall,
        withdrawals=dict(plan.draws),
        diagnostics={
            "withdrawals_taxable": plan.by_bucket["taxable"],
            "withdrawals_tax_deferred": plan.by_bucket["tax_deferred"],
            "withdrawals_roth": plan.by_bucket["roth"],
            "withdrawal_taxes": plan.taxes,
            "withdrawal_shortfall": plan.shortfall,
        },
    )


def step_year(ctx: ProjectionContext, state: ProjectionState) -> Tuple[ProjectionState, YearRow, List[Issue]]:
    household, scenario = ctx.household, ctx.scenario
    index = state.index
    year = household.start_year + index
    issues: List[Issue] = []

    begin = apply_events(household, year, state.balances)

    phase = state.phase
    retirement_year = state.retirement_year
    shortfall = state.shortfall
    if phase == ACCUMULATION:
        reason = ctx.trigger.reason(year, state.fi_year)
        if reason is not None:
            phase = WITHDRAWAL
            retirement_year = year
            logger.info("Withdrawal phase starts in %s (%s trigger)", year, reason)
            if reason == BY_AGE:
                data = check_retirement_shortfall(year, _invested(household, begin), scenario)
                if data is not None:
                    shortfall = data
                    issues.append(shortfall_warning(data))

    if phase == WITHDRAWAL:
        flows = _withdrawal_year(ctx, year, begin, issues)
    else:
        flows = _accumulation_year(ctx, year, index, begin, issues)

    contributions = Ledger(begin.keys(), flows.contributions)
    withdrawals = Ledger(begin.keys(), flows.withdrawals)
    growth_values: Dict[str, float] = {}
    ending_values: Dict[str, float] = {}
    for account in household.accounts:
        rate = ctx.rates.account_rate(account, index)
        start = begin[account.id]
        if phase == WITHDRAWAL:
            growth = withdrawal_growth(start, withdrawals[account.id], rate)
            ending_values[account.id] = start - withdrawals[account.id] + growth
        else:
            growth = accumulation_growth(start, contributions[account.id], rate)
            ending_values[account.id] = start + contributions[account.id] + growth
        growth_values[account.id] = growth
    ending = Ledger(begin.keys(), ending_values)

    net_worth = ending.total()
    invested = _invested(household, ending)

    fi_year = state.fi_year
    if fi_year is None and invested >= ctx.fi_number:
        fi_year = year
        logger.info("FI reached in %s with invested assets %.0f", year, invested)

    unallocated = flows.diagnostics.get("unallocated_surplus", 0.0)
    delta = (
        flows.gross_income
        + flows.other_inflows
        - flows.spending
        - contributions.total()
        - flows.taxes
        - unallocated
    )
    breakdown = ReconciliationBreakdown(
        year=year,
        phase=phase,
        income=flows.gross_income,
        other_inflows=flows.other_inflows,
        spending=flows.spending,
        contributions=contributions.total(),
        taxes=flows.taxes,
        unallocated=unallocated,
        delta=delta,
    )
    if abs(delta) > RECONCILIATION_TOLERANCE:
        issues.append(
            Issue(
                CASHFLOW_NOT_RECONCILED,
                f"Cash sources and uses differ by ${delta:,.2f} in {year}.",
                year=year,
                details={"breakdown": breakdown},
            )
        )

    row = YearRow(
        year=year,
        index=index,
        phase=phase,
        rate=ctx.rates.investment_rate(index),
        gross_income=flows.gross_income,
        salary_income=flows.salary,
        taxes=flows.taxes,
        spending=flows.spending,
        net_to_checking=flows.net_to_checking,
        net_cash_surplus=flows.surplus,
        begin_balances=begin,
        contributions=contributions,
        growth=Ledger(begin.keys(), growth_values),
        withdrawals=withdrawals,
        ending_balances=ending,
        net_worth=net_worth,
        invested_assets=invested,
        reconciliation=breakdown,
        **flows.diagnostics,
    )
    logger.debug("%s %s net worth %.2f invested %.2f", year, phase, net_worth, invested)

    next_state = ProjectionState(
        index=index + 1,
        balances=ending,
        phase=phase,
        fi_year=fi_year,
        retirement_year=retirement_year,
        shortfall=shortfall,
    )
    return next_state, row, issues


def _issue_key(issue: Issue) -> Tuple[str, str]:
    details = issue.details or {}
    return issue.code, str(details.get("account_id") or details.get("grant_id") or "")


def _collect(issues: List[Issue], report: ValidationReport) -> None:
    seen = set()
    for issue in issues:
        if issue.code in ONCE_PER_RUN:
            key = _issue_key(issue)
            if key in seen:
                continue
            seen.add(key)
        if issue.code in RUNTIME_ERRORS:
            logger.warning("%s: %s", issue.code, issue.message)
            report.errors.append(issue)
        else:
            report.warnings.append(issue)


def run_projection(
    household: Household,
    scenario: Scenario,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
    annual_rates: Optional[Sequence[float]] = None,
    limits: Optional[LimitTable] = None,
    check_inputs: bool = True,
) -> ProjectionResult:
    """Project ``household`` under ``scenario`` one year at a time.

    Args:
        horizon_years: number of simulated years starting at ``household.start_year``.
        annual_rates: per-year investment return overrides (Monte Carlo paths).
        limits: contribution-limit table; no caps when omitted.
        check_inputs: run the validator and attach its report.

    The run never raises for domain problems; blocking validation errors and
    runtime inconsistencies are attached to ``result.validation``.
    """
    effective = get_effective_household(household, scenario)
    report = validate(effective, scenario, horizon_years) if check_inputs else ValidationReport()

    ctx = ProjectionContext.build(effective, scenario, annual_rates, limits)
    state = initial_state(effective)
    rows: List[YearRow] = []
    runtime: List[Issue] = []
    for _ in range(horizon_years):
        state, row, issues = step_year(ctx, state)
        rows.append(row)
        runtime.extend(issues)

    _collect(runtime, report)

    coast = coast_fi_year(rows, ctx.fi_number, ctx.rates.base, coast_target_year(effective, scenario))
    first = rows[0] if rows else None
    rate = 0.0
    if first is not None and first.phase == ACCUMULATION:
        saved = (
            first.contributions.total()
            - first.employer_contributions
            - first.rsu_net_proceeds
            - first.overflow_to_taxable
        )
        rate = savings_rate(saved, first.salary_income)

    return ProjectionResult(
        rows=rows,
        fi_number=ctx.fi_number,
        fi_year=state.fi_year,
        coast_fi_year=coast,
        retirement_year=state.retirement_year,
        fi_not_met_at_retirement_age=state.shortfall is not None,
        shortfall=state.shortfall,
        savings_rate=rate,
        validation=report,
    )
