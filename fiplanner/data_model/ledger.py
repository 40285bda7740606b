from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Optional


class Ledger(Mapping[str, float]):
    """Ordered account-id to amount map with a fixed key set.

    Keys come from the household's declared account order and never change.
    Writes go through :meth:`with_amount`, which returns a new
    ledger, so a ledger handed out in a year row stays as recorded.
    """

    __slots__ = ("_values",)

    def __init__(self, account_ids: Iterable[str], values: Optional[Mapping[str, float]] = None) -> None:
        self._values: Dict[str, float] = {account_id: 0.0 for account_id in account_ids}
        for account_id, amount in (values or {}).items():
            if account_id not in self._values:
                raise KeyError(f"Unknown account id: {account_id}")
            self._values[account_id] = float(amount)

    def __getitem__(self, account_id: str) -> float:
        return self._values[account_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Ledger({self._values!r})"

    def get(self, account_id: str, default: float = 0.0) -> float:
        return self._values.get(account_id, default)

    def total(self, account_ids: Optional[Iterable[str]] = None) -> float:
        if account_ids is None:
            return sum(self._values.values())
        return sum(self._values[account_id] for account_id in account_ids)

    def with_amount(self, account_id: str, amount: float) -> "Ledger":
        if account_id not in self._values:
            raise KeyError(f"Unknown account id: {account_id}")
        values = dict(self._values)
        values[account_id] = float(amount)
        return Ledger(values.keys(), values)

