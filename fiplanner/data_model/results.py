# data_model/results.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .ledger import Ledger

Phase = str  # "accumulation" | "withdrawal"


@dataclass(frozen=True)
class Issue:
    code: str
    message: str
    year: Optional[int] = None
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationReport:
    errors: List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)
    assumptions: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def codes(self) -> List[str]:
        return [issue.code for issue in self.errors + self.warnings]

    def has(self, code: str) -> bool:
        return code in self.codes()

    def extend(self, other: "ValidationReport") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.assumptions.extend(other.assumptions)


@dataclass(frozen=True)
class ReconciliationBreakdown:
    year: int
    phase: Phase
    income: float
    other_inflows: float
    spending: float
    contributions: float
    taxes: float
    unallocated: float
    delta: float


@dataclass(frozen=True)
class ShortfallData:
    year: int
    portfolio_supports_per_year: float
    target_spend_per_year: float

    @property
    def gap(self) -> float:
        return self.target_spend_per_year - self.portfolio_supports_per_year


@dataclass(frozen=True)
class YearRow:
    year: int
    index: int
    phase: Phase
    rate: float
    gross_income: float
    salary_income: float
    taxes: float
    spending: float
    net_to_checking: float
    net_cash_surplus: float
    begin_balances: Ledger
    contributions: Ledger
    growth: Ledger
    withdrawals: Ledger
    ending_balances: Ledger
    net_worth: float
    invested_assets: float
    reconciliation: ReconciliationBreakdown
    employee_pre_tax_contributions: float = 0.0
    employee_roth_contributions: float = 0.0
    employer_contributions: float = 0.0
    rsu_vest_value: float = 0.0
    rsu_withholding: float = 0.0
    rsu_net_proceeds: float = 0.0
    withdrawals_taxable: float = 0.0
    withdrawals_tax_deferred: float = 0.0
    withdrawals_roth: float = 0.0
    withdrawal_taxes: float = 0.0
    withdrawal_shortfall: float = 0.0
    unallocated_surplus: float = 0.0
    overflow_to_taxable: float = 0.0
    limit_excess: float = 0.0

    @property
    def reconciliation_delta(self) -> float:
        return self.reconciliation.delta

    @property
    def is_withdrawal(self) -> bool:
        return self.phase == "withdrawal"


@dataclass
class ProjectionResult:
    rows: List[YearRow]
    fi_number: float
    fi_year: Optional[int] = None
    coast_fi_year: Optional[int] = None
    retirement_year: Optional[int] = None
    fi_not_met_at_retirement_age: bool = False
    shortfall: Optional[ShortfallData] = None
    savings_rate: float = 0.0
    validation: ValidationReport = field(default_factory=ValidationReport)

    def row_for(self, year: int) -> Optional[YearRow]:
        for row in self.rows:
            if row.year == year:
                return row
        return None

    @property
    def has_withdrawal_phase(self) -> bool:
        return any(row.is_withdrawal for row in self.rows)


@dataclass
class MonteCarloResult:
    fi_year_25: Optional[float]
    fi_year_50: Optional[float]
    fi_year_75: Optional[float]
    paths_run: int
    paths_hit_fi: int
    fi_years: List[int] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return self.paths_hit_fi / self.paths_run if self.paths_run else 0.0
