from __future__ import annotations

from typing import Dict, Literal

from ...config import PENALTY_FREE_AGE_HSA, PENALTY_FREE_AGE_TRADITIONAL

AccountType = Literal[
    "cash",
    "checking",
    "taxable",
    "money_market",
    "employer_stock",
    "traditional_401k",
    "roth_401k",
    "traditional_ira",
    "roth_ira",
    "403b",
    "hsa",
]
AccountOwner = Literal["person_a", "person_b", "joint"]
Bucket = Literal["taxable", "tax_deferred", "roth"]

ACCOUNT_TYPES = (
    "cash",
    "checking",
    "taxable",
    "money_market",
    "employer_stock",
    "traditional_401k",
    "roth_401k",
    "traditional_ira",
    "roth_ira",
    "403b",
    "hsa",
)
ACCOUNT_OWNERS = ("person_a", "person_b", "joint")
BUCKETS = ("taxable", "tax_deferred", "roth")
DEFAULT_WITHDRAWAL_ORDER = ("taxable", "tax_deferred", "roth")

CASH_LIKE_TYPES = frozenset({"cash", "checking", "money_market"})
PRE_TAX_TYPES = frozenset({"traditional_401k", "traditional_ira", "403b", "hsa"})
ROTH_TYPES = frozenset({"roth_401k", "roth_ira"})

_BUCKET_BY_TYPE: Dict[str, str] = {
    "cash": "taxable",
    "checking": "taxable",
    "taxable": "taxable",
    "money_market": "taxable",
    "employer_stock": "taxable",
    "traditional_401k": "tax_deferred",
    "traditional_ira": "tax_deferred",
    "403b": "tax_deferred",
    "hsa": "tax_deferred",
    "roth_401k": "roth",
    "roth_ira": "roth",
}

ACCESS_AGE: Dict[str, int] = {
    "traditional_401k": PENALTY_FREE_AGE_TRADITIONAL,
    "traditional_ira": PENALTY_FREE_AGE_TRADITIONAL,
    "403b": PENALTY_FREE_AGE_TRADITIONAL,
    "hsa": PENALTY_FREE_AGE_HSA,
}

# Annual contribution-limit groups; employer money is never counted.
LIMIT_GROUP: Dict[str, str] = {
    "traditional_401k": "401k",
    "roth_401k": "401k",
    "403b": "401k",
    "traditional_ira": "ira",
    "roth_ira": "ira",
    "hsa": "hsa",
}


def bucket_for(account_type: str) -> str:
    try:
        return _BUCKET_BY_TYPE[account_type]
    except KeyError as exc:
        raise ValueError(f"Unknown account type: {account_type!r}") from exc
