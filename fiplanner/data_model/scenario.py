# data_model/scenario.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from ..config import (
    DEFAULT_INFLATION,
    DEFAULT_MODELING_MODE,
    DEFAULT_NOMINAL_RETURN,
    DEFAULT_RETIREMENT_AGE_TARGET,
    DEFAULT_SWR,
)
from .accounts import DEFAULT_WITHDRAWAL_ORDER
from .cashflow import ContributorType, OneTimeEvent

ModelingMode = Literal["real", "nominal"]
TakeHomeDefinition = Literal["net_to_checking", "after_tax_only", "override"]
SalaryGrowthMode = Literal["real", "nominal"]
RetireWhen = Literal["age", "fi", "either"]
WithdrawalPolicy = Literal["declared", "balance_ascending", "balance_descending"]
SurplusRouting = Literal["unallocated", "taxable", "none"]
ContributionSource = Literal["payroll", "out_of_pocket", "monthly_savings"]

MODELING_MODES = ("real", "nominal")
TAKE_HOME_DEFINITIONS = ("net_to_checking", "after_tax_only", "override")
RETIRE_WHEN_OPTIONS = ("age", "fi", "either")
WITHDRAWAL_POLICIES = ("declared", "balance_ascending", "balance_descending")
SURPLUS_ROUTING_OPTIONS = ("unallocated", "taxable", "none")
CONTRIBUTION_SOURCES = ("payroll", "out_of_pocket", "monthly_savings")


@dataclass(frozen=True)
class ContributionOverride:
    """Scenario-level replacement for one household contribution."""

    source: ContributionSource
    account_id: str
    person_id: Optional[str] = None
    amount_annual: Optional[float] = None
    amount_monthly: Optional[float] = None
    percent_of_income: Optional[float] = None
    enabled: bool = True
    # None keeps the matched contribution's own value.
    contributor: Optional[ContributorType] = None
    start_year: Optional[int] = None
    start_month: Optional[int] = None
    end_year: Optional[int] = None
    end_month: Optional[int] = None


@dataclass(frozen=True)
class Scenario:
    id: str = "base"
    name: str = "Base"
    modeling_mode: ModelingMode = DEFAULT_MODELING_MODE
    nominal_return: float = DEFAULT_NOMINAL_RETURN
    inflation: float = DEFAULT_INFLATION
    swr: float = DEFAULT_SWR
    retirement_monthly_spend: float = 0.0
    current_monthly_spend: Optional[float] = None

    effective_tax_rate: Optional[float] = None
    take_home_annual: Optional[float] = None
    take_home_definition: TakeHomeDefinition = "net_to_checking"
    net_to_checking_override: Optional[float] = None
    include_employer_match: bool = True

    salary_growth_mode: SalaryGrowthMode = "real"
    salary_growth_override: Optional[float] = None

    retire_when: RetireWhen = "either"
    retirement_age_target: int = DEFAULT_RETIREMENT_AGE_TARGET
    retirement_start_year: Optional[int] = None

    withdrawal_order: Tuple[str, ...] = DEFAULT_WITHDRAWAL_ORDER
    withdrawal_policy: WithdrawalPolicy = "declared"
    traditional_withdrawals_tax_rate: Optional[float] = None
    retirement_effective_tax_rate: Optional[float] = None
    roth_withdrawals_tax_rate: float = 0.0
    taxable_withdrawals_tax_rate: float = 0.0

    stress_test_first_year_return: Optional[float] = None
    surplus_routing: SurplusRouting = "unallocated"

    contribution_overrides: List[ContributionOverride] = field(default_factory=list)
    equity_grant_overrides: Dict[str, bool] = field(default_factory=dict)
    event_overrides: List[OneTimeEvent] = field(default_factory=list)

    @property
    def is_real(self) -> bool:
        return self.modeling_mode == "real"

    @property
    def annual_retirement_spend(self) -> float:
        return self.retirement_monthly_spend * 12.0

    @property
    def fi_number(self) -> float:
        return self.annual_retirement_spend / self.swr if self.swr > 0 else float("inf")
