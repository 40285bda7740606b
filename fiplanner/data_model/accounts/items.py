from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import CASH_LIKE_TYPES, PRE_TAX_TYPES, ROTH_TYPES, AccountOwner, AccountType, bucket_for


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: AccountType
    starting_balance: float = 0.0
    owner: AccountOwner = "joint"
    included_in_fi_assets: bool = True
    apy: Optional[float] = None

    def normalized_type(self) -> str:
        return self.type.lower()

    @property
    def bucket(self) -> str:
        return bucket_for(self.normalized_type())

    @property
    def is_cash_like(self) -> bool:
        return self.normalized_type() in CASH_LIKE_TYPES

    @property
    def is_pre_tax(self) -> bool:
        return self.normalized_type() in PRE_TAX_TYPES

    @property
    def is_roth(self) -> bool:
        return self.normalized_type() in ROTH_TYPES
