# data_model/household.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .accounts import Account
from .cashflow import Contribution, EmergencyFundGoal, OneTimeEvent
from .equity import EquityGrant
from .people import Person


@dataclass(frozen=True)
class Household:
    id: str
    name: str
    start_year: int
    people: List[Person] = field(default_factory=list)
    accounts: List[Account] = field(default_factory=list)
    events: List[OneTimeEvent] = field(default_factory=list)
    equity_grants: List[EquityGrant] = field(default_factory=list)
    out_of_pocket_contributions: List[Contribution] = field(default_factory=list)
    monthly_savings_contributions: List[Contribution] = field(default_factory=list)
    emergency_fund: Optional[EmergencyFundGoal] = None
    currency: str = "USD"

    def account(self, account_id: Optional[str]) -> Optional[Account]:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    def account_ids(self) -> List[str]:
        return [account.id for account in self.accounts]

    def default_cash_account(self) -> Optional[Account]:
        for wanted in ("cash", "checking"):
            for account in self.accounts:
                if account.normalized_type() == wanted:
                    return account
        return None

    def payroll_deductions(self) -> float:
        return sum(person.payroll.deductions_annual for person in self.people)

    def oldest_birth_year(self) -> Optional[int]:
        years = [person.birth_year for person in self.people if person.birth_year is not None]
        return min(years) if years else None
