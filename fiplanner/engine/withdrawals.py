# engine/withdrawals.py
"""Bucketed, age-gated withdrawal ordering for retirement years."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..data_model import Account, Ledger, Scenario
from ..data_model.accounts import ACCESS_AGE, DEFAULT_WITHDRAWAL_ORDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WithdrawalRates:
    taxable: float = 0.0
    tax_deferred: float = 0.0
    roth: float = 0.0

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "WithdrawalRates":
        tax_deferred = scenario.traditional_withdrawals_tax_rate
        if tax_deferred is None:
            tax_deferred = scenario.retirement_effective_tax_rate
        return cls(
            taxable=scenario.taxable_withdrawals_tax_rate or 0.0,
            tax_deferred=tax_deferred or 0.0,
            roth=scenario.roth_withdrawals_tax_rate or 0.0,
        )

    def rate_for(self, account: Account) -> float:
        if account.is_cash_like:
            return 0.0
        return getattr(self, account.bucket)


@dataclass
class WithdrawalPlan:
    draws: Dict[str, float] = field(default_factory=dict)
    by_bucket: Dict[str, float] = field(default_factory=lambda: {"taxable": 0.0, "tax_deferred": 0.0, "roth": 0.0})
    taxes: float = 0.0
    shortfall: float = 0.0

    @property
    def total(self) -> float:
        return sum(self.draws.values())

    @property
    def net_proceeds(self) -> float:
        return self.total - self.taxes


def is_accessible(account: Account, oldest_age: Optional[int]) -> bool:
    if oldest_age is None:
        return True
    access_age = ACCESS_AGE.get(account.normalized_type())
    return access_age is None or oldest_age >= access_age


class WithdrawalAllocator:
    """
    Walks accounts bucket by bucket and draws until the net spending need is met.

    Tax-deferred and taxable (non-cash) draws are grossed up so the after-tax
    proceeds cover the need: draw = need / (1 - rate). Cash-like accounts are
    always drawn 1:1. Anything left once accessible balances run out is the
    shortfall.
    """

    def __init__(
        self,
        accounts: Sequence[Account],
        rates: WithdrawalRates,
        order: Sequence[str] = DEFAULT_WITHDRAWAL_ORDER,
        policy: str = "declared",
    ) -> None:
        self.accounts = list(accounts)
        self.rates = rates
        self.order = list(order) or list(DEFAULT_WITHDRAWAL_ORDER)
        self.policy = policy

    @classmethod
    def for_scenario(cls, accounts: Sequence[Account], scenario: Scenario) -> "WithdrawalAllocator":
        return cls(
            accounts,
            WithdrawalRates.from_scenario(scenario),
            scenario.withdrawal_order,
            scenario.withdrawal_policy,
        )

    def ordered_accounts(self, balances: Ledger, oldest_age: Optional[int]) -> List[Account]:
        ordered: List[Account] = []
        for bucket in self.order:
            members = [a for a in self.accounts if a.bucket == bucket and is_accessible(a, oldest_age)]
            if self.policy == "balance_ascending":
                members.sort(key=lambda a: balances.get(a.id))
            elif self.policy == "balance_descending":
                members.sort(key=lambda a: balances.get(a.id), reverse=True)
            ordered.extend(members)
        return ordered

    def allocate(self, need: float, balances: Ledger, oldest_age: Optional[int]) -> WithdrawalPlan:
        plan = WithdrawalPlan()
        remaining = max(0.0, need)

        for account in self.ordered_accounts(balances, oldest_age):
            if remaining <= 0:
                break
            available = balances.get(account.id)
            if available <= 0:
                continue
            rate = self.rates.rate_for(account)
            if rate >= 1:
                continue

            draw = min(available, remaining / (1 - rate))
            tax = draw * rate
            plan.draws[account.id] = plan.draws.get(account.id, 0.0) + draw
            plan.by_bucket[account.bucket] += draw
            plan.taxes += tax
            remaining -= draw - tax

        # Float residue from the gross-up is not a shortfall.
        plan.shortfall = remaining if remaining > 1e-9 else 0.0
        if plan.shortfall:
            logger.debug("Withdrawal shortfall of %.2f", plan.shortfall)
        return plan
