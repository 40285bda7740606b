from .items import Account
from .types import (
    ACCESS_AGE,
    ACCOUNT_OWNERS,
    ACCOUNT_TYPES,
    BUCKETS,
    CASH_LIKE_TYPES,
    DEFAULT_WITHDRAWAL_ORDER,
    LIMIT_GROUP,
    PRE_TAX_TYPES,
    ROTH_TYPES,
    AccountOwner,
    AccountType,
    Bucket,
    bucket_for,
)

__all__ = [
    "ACCESS_AGE",
    "ACCOUNT_OWNERS",
    "ACCOUNT_TYPES",
    "BUCKETS",
    "CASH_LIKE_TYPES",
    "DEFAULT_WITHDRAWAL_ORDER",
    "LIMIT_GROUP",
    "PRE_TAX_TYPES",
    "ROTH_TYPES",
    "Account",
    "AccountOwner",
    "AccountType",
    "Bucket",
    "bucket_for",
]
