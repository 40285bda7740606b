from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .cashflow import Contribution


@dataclass(frozen=True)
class Income:
    base_annual: float = 0.0
    growth_rate: float = 0.0
    growth_is_real: bool = False
    bonus_annual: float = 0.0
    bonus_percent: float = 0.0

    def bonus(self) -> float:
        return self.bonus_annual + self.base_annual * (self.bonus_percent / 100.0)


@dataclass(frozen=True)
class Payroll:
    contributions: List[Contribution] = field(default_factory=list)
    # Non-investing deductions (insurance premiums and the like); treated as spending.
    deductions_annual: float = 0.0


@dataclass(frozen=True)
class Person:
    id: str
    name: str = ""
    birth_year: Optional[int] = None
    income: Income = field(default_factory=Income)
    payroll: Payroll = field(default_factory=Payroll)

