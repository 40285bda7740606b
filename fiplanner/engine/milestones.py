# engine/milestones.py
"""Phase transitions, FI / coast-FI detection and the retirement-age check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..config import COAST_FI_FALLBACK_YEARS
from ..data_model import Household, Issue, Scenario, ShortfallData, YearRow

FI_NOT_MET_AT_RETIREMENT_AGE = "FI_NOT_MET_AT_RETIREMENT_AGE"

# Reasons a year is spent in the withdrawal phase.
BY_AGE = "age"
BY_FI = "fi"


@dataclass(frozen=True)
class AgeTrigger:
    year: Optional[int]

    def reason(self, year: int, fi_year: Optional[int]) -> Optional[str]:
        if self.year is not None and year >= self.year:
            return BY_AGE
        return None


@dataclass(frozen=True)
class FiTrigger:
    def reason(self, year: int, fi_year: Optional[int]) -> Optional[str]:
        if fi_year is not None and year > fi_year:
            return BY_FI
        return None


@dataclass(frozen=True)
class EitherTrigger:
    year: Optional[int]

    def reason(self, year: int, fi_year: Optional[int]) -> Optional[str]:
        if self.year is not None and year >= self.year:
            return BY_AGE
        if fi_year is not None and year > fi_year:
            return BY_FI
        return None


RetirementTrigger = Union[AgeTrigger, FiTrigger, EitherTrigger]


def target_retirement_year(household: Household, scenario: Scenario) -> Optional[int]:
    for person in household.people:
        if person.birth_year is not None:
            return person.birth_year + scenario.retirement_age_target
    return None


def resolve_trigger(household: Household, scenario: Scenario) -> RetirementTrigger:
    if scenario.retire_when == "fi":
        return FiTrigger()
    if scenario.retire_when == "age":
        explicit = scenario.retirement_start_year
        return AgeTrigger(explicit if explicit is not None else target_retirement_year(household, scenario))
    if scenario.retire_when == "either":
        return EitherTrigger(scenario.retirement_start_year)
    raise ValueError(f"Unknown retirement trigger: {scenario.retire_when!r}")


def coast_fi_year(
    rows: Sequence[YearRow],
    fi_number: float,
    rate: float,
    target_year: int,
) -> Optional[int]:
    """First year whose invested assets, left alone until ``target_year``, reach ``fi_number``."""
    for row in rows:
        years_to_target = max(1, target_year - row.year)
        if row.invested_assets * (1 + rate) ** years_to_target >= fi_number:
            return row.year
    return None


def coast_target_year(household: Household, scenario: Scenario) -> int:
    target = target_retirement_year(household, scenario)
    if target is not None:
        return target
    return household.start_year + COAST_FI_FALLBACK_YEARS


def check_retirement_shortfall(year: int, invested_assets: float, scenario: Scenario) -> Optional[ShortfallData]:
    supports = invested_assets * scenario.swr
    target = scenario.annual_retirement_spend
    if supports >= target:
        return None
    return ShortfallData(
        year=year,
        portfolio_supports_per_year=supports,
        target_spend_per_year=target,
    )


def shortfall_warning(data: ShortfallData) -> Issue:
    return Issue(
        code=FI_NOT_MET_AT_RETIREMENT_AGE,
        message=(
            f"FI not reached at retirement in {data.year}: portfolio supports "
            f"${data.portfolio_supports_per_year:,.0f}/yr vs target spend "
            f"${data.target_spend_per_year:,.0f}/yr."
        ),
        year=data.year,
        details={
            "portfolio_supports_per_year": data.portfolio_supports_per_year,
            "target_spend_per_year": data.target_spend_per_year,
            "gap": data.gap,
        },
    )


def savings_rate(first_year_savings: float, first_year_income: float) -> float:
    return first_year_savings / first_year_income if first_year_income > 0 else 0.0
