# engine/contributions.py
"""Per-account contribution totals for one accumulation year."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..data_model import Contribution, Household, Ledger, Scenario
from ..data_model.accounts import LIMIT_GROUP
from .income import IncomeResolver, PayrollSplit, Vest
from .limits import NO_LIMITS, LimitTable

logger = logging.getLogger(__name__)

# Order in which employee-side money is given back when a limit is exceeded.
LIMIT_TRIM_ORDER = ("out_of_pocket", "savings", "employee_payroll")


@dataclass
class AccountContribution:
    employee_payroll: float = 0.0
    employer: float = 0.0
    out_of_pocket: float = 0.0
    savings: float = 0.0
    vest_proceeds: float = 0.0

    @property
    def employee_side(self) -> float:
        return self.employee_payroll + self.out_of_pocket + self.savings

    @property
    def total(self) -> float:
        return self.employee_side + self.employer + self.vest_proceeds


@dataclass
class ContributionPlan:
    by_account: Dict[str, AccountContribution]
    payroll: PayrollSplit = field(default_factory=PayrollSplit)
    limit_excess: float = 0.0
    capped_accounts: List[str] = field(default_factory=list)
    goal_clamped: float = 0.0

    def amounts(self) -> Dict[str, float]:
        return {account_id: entry.total for account_id, entry in self.by_account.items()}

    def _sum(self, attr: str) -> float:
        return sum(getattr(entry, attr) for entry in self.by_account.values())

    @property
    def out_of_pocket_total(self) -> float:
        return self._sum("out_of_pocket")

    @property
    def savings_total(self) -> float:
        return self._sum("savings")

    @property
    def vest_total(self) -> float:
        return self._sum("vest_proceeds")

    @property
    def total(self) -> float:
        return self._sum("total")


def _add(
    by_account: Dict[str, AccountContribution],
    contributions: Iterable[Contribution],
    year: int,
    gross_income: float,
    attr: str,
) -> None:
    for contribution in contributions:
        entry = by_account.get(contribution.account_id)
        if entry is None:
            # Dangling references are reported by the validator.
            continue
        amount = contribution.amount_for_year(year, gross_income)
        if amount:
            setattr(entry, attr, getattr(entry, attr) + amount)


def _add_payroll(
    by_account: Dict[str, AccountContribution],
    household: Household,
    scenario: Scenario,
    income: IncomeResolver,
    year: int,
) -> None:
    for person in household.people:
        gross = income.person_salary(person, year)
        employee = [c for c in person.payroll.contributions if not c.is_employer]
        employer = [c for c in person.payroll.contributions if c.is_employer]
        _add(by_account, employee, year, gross, "employee_payroll")
        if scenario.include_employer_match:
            _add(by_account, employer, year, gross, "employer")


def _clamp_to_goal(household: Household, by_account: Dict[str, AccountContribution], balances: Ledger) -> float:
    """Keep the emergency-fund account from overshooting its target.

    Recurring savings claim the remaining headroom before out-of-pocket money.
    Returns the dollars that were not contributed.
    """
    goal = household.emergency_fund
    if goal is None or goal.account_id not in by_account:
        return 0.0
    entry = by_account[goal.account_id]
    committed = entry.employee_payroll + entry.employer + entry.vest_proceeds
    headroom = max(0.0, goal.target_amount - balances.get(goal.account_id) - committed)

    savings = min(entry.savings, headroom)
    headroom -= savings
    out_of_pocket = min(entry.out_of_pocket, headroom)

    clamped = (entry.savings - savings) + (entry.out_of_pocket - out_of_pocket)
    entry.savings = savings
    entry.out_of_pocket = out_of_pocket
    return clamped


def _apply_limits(
    household: Household,
    by_account: Dict[str, AccountContribution],
    limits: LimitTable,
    year: int,
) -> Dict[str, float]:
    excess_by_account: Dict[str, float] = {}
    for account in household.accounts:
        group = LIMIT_GROUP.get(account.normalized_type())
        if group is None:
            continue
        limit = limits.limit(group, year)
        if limit is None:
            continue
        entry = by_account[account.id]
        excess = entry.employee_side - limit
        if excess <= 0:
            continue
        excess_by_account[account.id] = excess
        for attr in LIMIT_TRIM_ORDER:
            cut = min(getattr(entry, attr), excess)
            setattr(entry, attr, getattr(entry, attr) - cut)
            excess -= cut
            if excess <= 0:
                break
        logger.debug("%s capped at %.2f for %s (%s limit)", account.id, limit, year, group)
    return excess_by_account


def _split_payroll(household: Household, by_account: Dict[str, AccountContribution]) -> PayrollSplit:
    pre_tax = roth = after_tax = employer = 0.0
    for account in household.accounts:
        entry = by_account[account.id]
        employer += entry.employer
        if account.is_pre_tax:
            pre_tax += entry.employee_payroll
        elif account.is_roth:
            roth += entry.employee_payroll
        else:
            after_tax += entry.employee_payroll
    return PayrollSplit(
        employee_pre_tax=pre_tax,
        employee_roth=roth,
        employee_after_tax=after_tax,
        employer=employer,
    )


def aggregate_contributions(
    household: Household,
    scenario: Scenario,
    income: IncomeResolver,
    year: int,
    balances: Ledger,
    vests: Iterable[Vest] = (),
    limits: Optional[LimitTable] = None,
) -> ContributionPlan:
    """Merge payroll, out-of-pocket, savings and vest proceeds per account.

    ``balances`` are the begin-of-year balances after one-time events; they
    size the emergency-fund headroom. Limits only ever trim employee-side
    money, so the employer/employee split survives for tax tracing.
    """
    by_account = {account.id: AccountContribution() for account in household.accounts}

    _add_payroll(by_account, household, scenario, income, year)
    household_gross = income.total_salary(year)
    _add(by_account, household.out_of_pocket_contributions, year, household_gross, "out_of_pocket")
    _add(by_account, household.monthly_savings_contributions, year, household_gross, "savings")
    for vest in vests:
        if vest.account_id in by_account:
            by_account[vest.account_id].vest_proceeds += vest.net_proceeds

    goal_clamped = _clamp_to_goal(household, by_account, balances)
    excess = _apply_limits(household, by_account, limits or NO_LIMITS, year)

    return ContributionPlan(
        by_account=by_account,
        payroll=_split_payroll(household, by_account),
        limit_excess=sum(excess.values()),
        capped_accounts=list(excess),
        goal_clamped=goal_clamped,
    )
