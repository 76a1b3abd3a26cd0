"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.
No behavior beyond validation and trivial derived properties.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Domain records (Lens, Item, Relationship) are owned by the external store
- The core never mutates them; all types are frozen dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit codes for reportable, non-fatal conditions.

    The core is total: these are recorded alongside results,
    never raised.
    """
    # Index construction
    DANGLING_RELATIONSHIP = auto()

    # Selection
    UNKNOWN_LENS = auto()
    FILTER_ITEM_NOT_FOUND = auto()

    # Store / migration
    LOSSY_LIFECYCLE_MIGRATION = auto()

    # Engine
    SUPERSEDED_GENERATION = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    Equality ignores the timestamp.
    """
    code: ErrorCode
    message: str
    timestamp: datetime = field(compare=False)
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> Error:
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in sorted(context.items()))
        )


# =============================================================================
# LIFECYCLE STATES (Explicit vocabularies)
# =============================================================================

class LifecycleStatus(Enum):
    """Lifecycle state of an item itself."""
    PLAN = "Plan"
    EMERGING = "Emerging"
    INVEST = "Invest"
    DIVEST = "Divest"
    STABLE = "Stable"


# Statuses that count as "in service today"
ESTABLISHED_STATUSES = frozenset({
    LifecycleStatus.INVEST,
    LifecycleStatus.DIVEST,
    LifecycleStatus.STABLE,
})

# Statuses that only exist in the future state
PROSPECTIVE_STATUSES = frozenset({
    LifecycleStatus.PLAN,
    LifecycleStatus.EMERGING,
})

NO_STATUS_LABEL = "No Status"


class RelationshipLifecycleStatus(Enum):
    """Transition annotation on an edge. Absent means EXISTING."""
    PLANNED_TO_ADD = "Planned to add"
    PLANNED_TO_REMOVE = "Planned to remove"
    EXISTING = "Existing"


def lifecycle_label(status: Optional[LifecycleStatus]) -> str:
    """Display label for an item status ('No Status' when absent)."""
    return status.value if status else NO_STATUS_LABEL


# =============================================================================
# DOMAIN RECORDS (Owned by the external store)
# =============================================================================

@dataclass(frozen=True)
class Lens:
    """A named analytical dimension. `order` is display sequence only."""
    key: str
    label: str
    order: int = 0


@dataclass(frozen=True)
class Item:
    """
    An entity belonging to exactly one lens.

    `name` is unique within `lens`. `parent` is a free-text
    grouping label used by attribute rollup and primary grouping.
    """
    id: int
    lens: str
    name: str
    lifecycle_status: Optional[LifecycleStatus] = None
    parent: Optional[str] = None
    description: Optional[str] = None
    business_contact: Optional[str] = None
    tech_contact: Optional[str] = None
    primary_architect: Optional[str] = None
    secondary_architects: Tuple[str, ...] = field(default_factory=tuple)
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def sort_key(self) -> Tuple[str, int]:
        return (self.name, self.id)


@dataclass(frozen=True)
class Relationship:
    """
    An edge between two items.

    Stored directed, traversed undirected: either endpoint may be
    "the other side" relative to a given item.
    """
    id: int
    from_lens: str
    from_item_id: int
    to_lens: str
    to_item_id: int
    lifecycle_status: Optional[RelationshipLifecycleStatus] = None

    def other_side(self, item_id: int) -> Optional[Tuple[int, str]]:
        """(other_item_id, other_lens) relative to item_id, or None."""
        if self.from_item_id == item_id:
            return (self.to_item_id, self.to_lens)
        if self.to_item_id == item_id:
            return (self.from_item_id, self.from_lens)
        return None


def has_gap(item: Item) -> bool:
    """True when an item lacks its name, contacts or primary architect."""
    for value in (item.name, item.business_contact,
                  item.tech_contact, item.primary_architect):
        if not value or not value.strip():
            return True
    # secondary architects may be empty
    return False
