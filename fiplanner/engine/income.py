# engine/income.py
"""Salary, bonus and equity income plus the take-home/tax resolution.

Scenario fields that pick a salary-growth rule or a tax mode are resolved once
per run into small frozen variants (``NominalGrowth``/``RealGrowth``/
``InflationGrowth`` and ``EffectiveRate``/``TakeHome``/``Override``) so the
annual loop never re-inspects optional scenario fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from ..data_model import EquityGrant, Household, Person, Scenario

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NominalGrowth:
    rate: float

    def factor(self, years: int) -> float:
        return (1 + self.rate) ** years


@dataclass(frozen=True)
class RealGrowth:
    """The person's growth rate is already expressed in real terms."""

    rate: float

    def factor(self, years: int) -> float:
        return (1 + self.rate) ** years


@dataclass(frozen=True)
class InflationGrowth:
    inflation: float

    def factor(self, years: int) -> float:
        return (1 + self.inflation) ** years


SalaryGrowth = Union[NominalGrowth, RealGrowth, InflationGrowth]


def resolve_salary_growth(person: Person, scenario: Scenario) -> SalaryGrowth:
    rate = scenario.salary_growth_override
    if rate is None:
        rate = person.income.growth_rate
    if scenario.salary_growth_mode == "nominal":
        return NominalGrowth(rate)
    if person.income.growth_is_real:
        return RealGrowth(rate)
    return InflationGrowth(scenario.inflation)


@dataclass(frozen=True)
class EffectiveRate:
    rate: float


@dataclass(frozen=True)
class TakeHome:
    amount: float
    definition: str = "net_to_checking"


@dataclass(frozen=True)
class Override:
    net_to_checking: float


TaxMode = Union[EffectiveRate, TakeHome, Override]


def resolve_tax_mode(scenario: Scenario) -> TaxMode:
    if scenario.take_home_definition == "override" and scenario.net_to_checking_override is not None:
        return Override(scenario.net_to_checking_override)
    if scenario.take_home_annual is not None:
        definition = scenario.take_home_definition
        if definition == "override":
            definition = "net_to_checking"
        return TakeHome(scenario.take_home_annual, definition)
    if scenario.effective_tax_rate is not None:
        return EffectiveRate(scenario.effective_tax_rate)
    return EffectiveRate(0.0)


@dataclass(frozen=True)
class PayrollSplit:
    employee_pre_tax: float = 0.0
    employee_roth: float = 0.0
    employee_after_tax: float = 0.0
    employer: float = 0.0

    @property
    def employee_total(self) -> float:
        return self.employee_pre_tax + self.employee_roth + self.employee_after_tax


@dataclass(frozen=True)
class SalaryTaxes:
    net_to_checking: float
    taxes: float


def resolve_net_and_taxes(mode: TaxMode, salary: float, payroll: PayrollSplit, deductions: float) -> SalaryTaxes:
    """Net cash landing in checking and the salary-path tax for one year."""
    if isinstance(mode, EffectiveRate):
        taxable = salary - payroll.employee_pre_tax - deductions
        taxes = max(0.0, taxable * mode.rate)
        net = salary - payroll.employee_total - deductions - taxes
        return SalaryTaxes(net_to_checking=net, taxes=taxes)

    if isinstance(mode, TakeHome):
        if mode.definition == "after_tax_only":
            net = mode.amount - payroll.employee_pre_tax - payroll.employee_roth
        else:
            net = mode.amount
    elif isinstance(mode, Override):
        net = mode.net_to_checking
    else:
        raise ValueError(f"Unsupported tax mode: {mode!r}")

    # Taxes are whatever the paycheck lost besides contributions and deductions.
    taxes = salary - payroll.employee_total - deductions - net
    return SalaryTaxes(net_to_checking=net, taxes=taxes)


@dataclass(frozen=True)
class Vest:
    grant_id: str
    account_id: str
    shares: float
    price: float
    value: float
    withholding: float

    @property
    def net_proceeds(self) -> float:
        return self.value - self.withholding


def vest_for_year(grant: EquityGrant, year: int) -> Optional[Vest]:
    if not grant.enabled:
        return None
    shares = grant.shares_in(year)
    if shares <= 0:
        return None
    price = grant.price.price_in(year, grant.start_year)
    value = shares * price
    return Vest(
        grant_id=grant.id,
        account_id=grant.destination_account_id,
        shares=shares,
        price=price,
        value=value,
        withholding=value * grant.withholding_rate,
    )


class IncomeResolver:
    def __init__(self, household: Household, scenario: Scenario) -> None:
        self.start_year = household.start_year
        self.people = list(household.people)
        self.grants = list(household.equity_grants)
        self.deductions = household.payroll_deductions()
        self.tax_mode = resolve_tax_mode(scenario)
        self._growth: Dict[str, SalaryGrowth] = {
            person.id: resolve_salary_growth(person, scenario) for person in self.people
        }
        logger.debug("Resolved tax mode %s and salary growth %s", self.tax_mode, self._growth)

    def person_salary(self, person: Person, year: int) -> float:
        """Base salary compounded to ``year`` plus fixed and percent bonus."""
        growth = self._growth.get(person.id) or NominalGrowth(person.income.growth_rate)
        years = year - self.start_year
        return person.income.base_annual * growth.factor(years) + person.income.bonus()

    def total_salary(self, year: int) -> float:
        return sum(self.person_salary(person, year) for person in self.people)

    def vests(self, year: int) -> List[Vest]:
        return [vest for vest in (vest_for_year(grant, year) for grant in self.grants) if vest is not None]

    def net_and_taxes(self, salary: float, payroll: PayrollSplit) -> SalaryTaxes:
        return resolve_net_and_taxes(self.tax_mode, salary, payroll, self.deductions)
