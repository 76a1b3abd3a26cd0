"""
Classification Rule Tables
==========================

Decides, per related secondary item, membership in the Current and
Target columns from the item's own lifecycle and the lifecycle of the
specific connecting relationship.

Two tables exist. They are selected explicitly and never blended:

STANDARD (default), first match wins:

    item status               edge status          current  target
    Invest / Divest / Stable  any                  yes      unless planned-to-remove
    none                      Planned to add       no       yes
    none                      Planned to remove    yes      no
    none                      Existing / absent    yes      yes
    Plan / Emerging           any                  no       unless planned-to-remove

STRICT_INVEST: as STANDARD, except an Invest item qualifies for Current
only when the edge carries no lifecycle annotation at all.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..contracts.base import (
    ESTABLISHED_STATUSES, PROSPECTIVE_STATUSES,
    LifecycleStatus, RelationshipLifecycleStatus,
)


class RuleSet(Enum):
    STANDARD = "standard"
    STRICT_INVEST = "strict_invest"


@dataclass(frozen=True)
class Membership:
    """Column membership for one related item."""
    current: bool
    target: bool


def classify_membership(
    item_status: Optional[LifecycleStatus],
    edge_status: Optional[RelationshipLifecycleStatus],
    rule_set: RuleSet = RuleSet.STANDARD
) -> Membership:
    """Apply the selected rule table. Total: every input maps to a row."""
    effective = edge_status or RelationshipLifecycleStatus.EXISTING
    removing = effective == RelationshipLifecycleStatus.PLANNED_TO_REMOVE

    if item_status in ESTABLISHED_STATUSES:
        current = True
        if rule_set == RuleSet.STRICT_INVEST and item_status == LifecycleStatus.INVEST:
            current = edge_status is None
        return Membership(current=current, target=not removing)

    if item_status is None:
        if effective == RelationshipLifecycleStatus.PLANNED_TO_ADD:
            return Membership(current=False, target=True)
        if removing:
            return Membership(current=True, target=False)
        return Membership(current=True, target=True)

    if item_status in PROSPECTIVE_STATUSES:
        return Membership(current=False, target=not removing)

    # unreachable for the closed LifecycleStatus enum
    return Membership(current=True, target=True)
