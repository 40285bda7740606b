# engine/rates.py
"""Per-year, per-account growth rates and the mid-year growth convention."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..data_model import Account, Scenario


def real_return(nominal: float, inflation: float) -> float:
    return (1 + nominal) / (1 + inflation) - 1


def base_rate(scenario: Scenario) -> float:
    if scenario.is_real:
        return real_return(scenario.nominal_return, scenario.inflation)
    return scenario.nominal_return


def accumulation_growth(begin: float, contribution: float, rate: float) -> float:
    # Contributions land evenly through the year on average.
    return rate * (begin + 0.5 * contribution)


def withdrawal_growth(begin: float, withdrawal: float, rate: float) -> float:
    # Withdrawals leave at the start of the year.
    return rate * (begin - withdrawal)


@dataclass(frozen=True)
class RateResolver:
    base: float
    inflation: float
    is_real: bool
    stress_first_year: Optional[float] = None
    annual_rates: Optional[Sequence[float]] = None

    @classmethod
    def for_scenario(cls, scenario: Scenario, annual_rates: Optional[Sequence[float]] = None) -> "RateResolver":
        return cls(
            base=base_rate(scenario),
            inflation=scenario.inflation,
            is_real=scenario.is_real,
            stress_first_year=scenario.stress_test_first_year_return,
            annual_rates=tuple(annual_rates) if annual_rates is not None else None,
        )

    def _override(self, index: int) -> Optional[float]:
        if self.annual_rates is not None and 0 <= index < len(self.annual_rates):
            override = self.annual_rates[index]
            if override is not None:
                return float(override)
        if index == 0 and self.stress_first_year is not None:
            return self.stress_first_year
        return None

    def investment_rate(self, index: int) -> float:
        override = self._override(index)
        return self.base if override is None else override

    def account_rate(self, account: Account, index: int) -> float:
        # A money-market yield is fixed: sampled and stress returns never replace it.
        if account.normalized_type() == "money_market" and account.apy is not None:
            return real_return(account.apy, self.inflation) if self.is_real else account.apy
        return self.investment_rate(index)
