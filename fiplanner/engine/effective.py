# engine/effective.py
"""Overlay a scenario's contribution, equity-grant and event overrides on a household."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from ..data_model import Contribution, ContributionOverride, Household, OneTimeEvent, Scenario

logger = logging.getLogger(__name__)

_KEPT_WHEN_UNSET = ("contributor", "start_year", "start_month", "end_year", "end_month")


def _overridden(contribution: Contribution, override: ContributionOverride) -> Contribution:
    changes = dict(
        amount_annual=override.amount_annual,
        amount_monthly=override.amount_monthly,
        percent_of_income=override.percent_of_income,
    )
    for name in _KEPT_WHEN_UNSET:
        value = getattr(override, name)
        if value is not None:
            changes[name] = value
    return replace(contribution, **changes)


def _apply(contributions: List[Contribution], overrides: List[ContributionOverride]) -> List[Contribution]:
    out: List[Contribution] = []
    for contribution in contributions:
        match: Optional[ContributionOverride] = None
        for override in overrides:
            if override.account_id == contribution.account_id:
                match = override
        if match is None:
            out.append(contribution)
        elif match.enabled:
            out.append(_overridden(contribution, match))
    return out


def _merge_events(events: List[OneTimeEvent], overrides: List[OneTimeEvent]) -> List[OneTimeEvent]:
    """Scenario events replace household events with the same id; the rest are added."""
    by_id = {event.id: event for event in overrides}
    merged = [by_id.pop(event.id, event) for event in events]
    merged.extend(event for event in overrides if event.id in by_id)
    return merged


def get_effective_household(household: Household, scenario: Scenario) -> Household:
    """Household as the scenario sees it; the input household is untouched."""
    overrides = list(scenario.contribution_overrides)
    grant_flags = dict(scenario.equity_grant_overrides)
    event_overrides = list(scenario.event_overrides)
    if not overrides and not grant_flags and not event_overrides:
        return household

    people = []
    for person in household.people:
        payroll_overrides = [
            o for o in overrides if o.source == "payroll" and o.person_id in (None, person.id)
        ]
        if payroll_overrides:
            payroll = replace(
                person.payroll,
                contributions=_apply(list(person.payroll.contributions), payroll_overrides),
            )
            person = replace(person, payroll=payroll)
        people.append(person)

    grants = [
        replace(grant, enabled=grant_flags[grant.id]) if grant.id in grant_flags else grant
        for grant in household.equity_grants
    ]
    logger.debug(
        "Applied %d contribution, %d grant and %d event overrides",
        len(overrides),
        len(grant_flags),
        len(event_overrides),
    )

    return replace(
        household,
        people=people,
        equity_grants=grants,
        events=_merge_events(list(household.events), event_overrides),
        out_of_pocket_contributions=_apply(
            list(household.out_of_pocket_contributions),
            [o for o in overrides if o.source == "out_of_pocket"],
        ),
        monthly_savings_contributions=_apply(
            list(household.monthly_savings_contributions),
            [o for o in overrides if o.source == "monthly_savings"],
        ),
    )
