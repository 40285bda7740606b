# engine/limits.py
"""Annual contribution-limit lookup.

The engine never ships limit numbers. Callers build a :class:`LimitTable` from
whatever source they trust (an IRS table, a plan document) keyed by calendar
year and limit group (``"401k"``, ``"ira"``, ``"hsa"``). Years outside the
table borrow the nearest known year; an empty table means no caps at all.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional


class LimitTable:
    def __init__(self, limits: Optional[Mapping[int, Mapping[str, float]]] = None) -> None:
        self._limits: Dict[int, Dict[str, float]] = {
            int(year): {str(group): float(amount) for group, amount in groups.items()}
            for year, groups in (limits or {}).items()
        }

    def __bool__(self) -> bool:
        return bool(self._limits)

    def _nearest_year(self, year: int) -> Optional[int]:
        if not self._limits:
            return None
        if year in self._limits:
            return year
        known = sorted(self._limits)
        if year < known[0]:
            return known[0]
        if year > known[-1]:
            return known[-1]
        # Gap inside the table: latest year before the requested one.
        return max(y for y in known if y < year)

    def limit(self, group: str, year: int) -> Optional[float]:
        nearest = self._nearest_year(year)
        if nearest is None:
            return None
        return self._limits[nearest].get(group)


NO_LIMITS = LimitTable()
