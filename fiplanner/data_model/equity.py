from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal

PriceMode = Literal["fixed", "growth"]


@dataclass(frozen=True)
class PriceAssumption:
    mode: PriceMode = "fixed"
    fixed_price: float = 0.0
    growth_rate: float = 0.0

    def price_in(self, year: int, start_year: int) -> float:
        if self.mode == "fixed":
            return self.fixed_price
        return self.fixed_price * (1.0 + self.growth_rate) ** (year - start_year)


@dataclass(frozen=True)
class EquityGrant:
    id: str
    owner_person_id: str
    start_year: int
    destination_account_id: str
    vesting: Dict[int, float] = field(default_factory=dict)
    price: PriceAssumption = field(default_factory=PriceAssumption)
    withholding_rate: float = 0.0
    enabled: bool = True
    name: str = ""

    def shares_in(self, year: int) -> float:
        return float(self.vesting.get(year, 0.0) or 0.0)
