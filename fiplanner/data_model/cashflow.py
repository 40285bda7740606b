from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

ContributorType = Literal["employee", "employer"]
EventKind = Literal["inflow", "outflow"]
AmountMode = Literal["annual", "monthly", "percent"]

CONTRIBUTOR_TYPES = ("employee", "employer")
EVENT_KINDS = ("inflow", "outflow")


@dataclass(frozen=True)
class Contribution:
    account_id: str
    amount_annual: Optional[float] = None
    amount_monthly: Optional[float] = None
    percent_of_income: Optional[float] = None
    contributor: ContributorType = "employee"
    start_year: Optional[int] = None
    start_month: Optional[int] = None
    end_year: Optional[int] = None
    end_month: Optional[int] = None

    def amount_mode(self) -> Optional[AmountMode]:
        """Return the single populated amount mode, or None when zero or several are set."""
        modes = [
            mode
            for mode, value in (
                ("annual", self.amount_annual),
                ("monthly", self.amount_monthly),
                ("percent", self.percent_of_income),
            )
            if value is not None
        ]
        return modes[0] if len(modes) == 1 else None

    @property
    def is_employer(self) -> bool:
        return self.contributor == "employer"

    def applies_in_year(self, year: int) -> bool:
        if self.start_year is not None and year < self.start_year:
            return False
        if self.end_year is not None and year > self.end_year:
            return False
        return True

    def months_in_year(self, year: int) -> int:
        if not self.applies_in_year(year):
            return 0
        first = self.start_month if self.start_year == year and self.start_month else 1
        last = self.end_month if self.end_year == year and self.end_month else 12
        return max(0, min(last, 12) - max(first, 1) + 1)

    def amount_for_year(self, year: int, gross_income: float = 0.0) -> float:
        """Prorated dollar amount for ``year``; percentages apply to ``gross_income``."""
        months = self.months_in_year(year)
        if months == 0:
            return 0.0
        mode = self.amount_mode()
        if mode == "annual":
            return self.amount_annual * months / 12.0
        if mode == "monthly":
            return self.amount_monthly * months
        if mode == "percent":
            return gross_income * (self.percent_of_income / 100.0) * months / 12.0
        return 0.0


@dataclass(frozen=True)
class OneTimeEvent:
    id: str
    year: int
    amount: float
    kind: EventKind = "outflow"
    account_id: Optional[str] = None
    description: str = ""

    @property
    def is_outflow(self) -> bool:
        return self.kind == "outflow"


@dataclass(frozen=True)
class EmergencyFundGoal:
    account_id: str
    target_amount: float
