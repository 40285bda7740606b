from .accounts import (
    ACCOUNT_OWNERS,
    ACCOUNT_TYPES,
    BUCKETS,
    DEFAULT_WITHDRAWAL_ORDER,
    Account,
)
from .cashflow import Contribution, EmergencyFundGoal, OneTimeEvent
from .equity import EquityGrant, PriceAssumption
from .household import Household
from .ledger import Ledger
from .people import Income, Payroll, Person
from .results import (
    Issue,
    MonteCarloResult,
    ProjectionResult,
    ReconciliationBreakdown,
    ShortfallData,
    ValidationReport,
    YearRow,
)
from .scenario import ContributionOverride, Scenario

__all__ = [
    "ACCOUNT_OWNERS",
    "ACCOUNT_TYPES",
    "BUCKETS",
    "DEFAULT_WITHDRAWAL_ORDER",
    "Account",
    "Contribution",
    "ContributionOverride",
    "EmergencyFundGoal",
    "EquityGrant",
    "Household",
    "Income",
    "Issue",
    "Ledger",
    "MonteCarloResult",
    "OneTimeEvent",
    "Payroll",
    "Person",
    "PriceAssumption",
    "ProjectionResult",
    "ReconciliationBreakdown",
    "Scenario",
    "ShortfallData",
    "ValidationReport",
    "YearRow",
]
