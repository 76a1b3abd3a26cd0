"""
Derived Result Contracts

Immutable outputs of the classification and rollup layers, plus the
selection objects that drive them.

LIFECYCLE:
==========
Every instance here lives for exactly one computation pass.
Nothing is cached or patched; a changed selection rebuilds all of it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .base import Item, Lens, Relationship, RelationshipLifecycleStatus


NO_PARENT_BUCKET = "(No Parent)"
PARENT_ROLLUP_LABEL = "Parent"


# =============================================================================
# SNAPSHOT (Input to every computation)
# =============================================================================

@dataclass(frozen=True)
class Snapshot:
    """A flat, read-only view of the domain store at one point in time."""
    lenses: Tuple[Lens, ...] = field(default_factory=tuple)
    items: Tuple[Item, ...] = field(default_factory=tuple)
    relationships: Tuple[Relationship, ...] = field(default_factory=tuple)

    def lens_label(self, key: str) -> str:
        for lens in self.lenses:
            if lens.key == key:
                return lens.label
        return key

    def has_lens(self, key: str) -> bool:
        if any(lens.key == key for lens in self.lenses):
            return True
        # lenses may be implicit when the store does not list them
        return any(item.lens == key for item in self.items)


# =============================================================================
# ROLLUP SELECTION
# =============================================================================

class RollupMode(Enum):
    """Grouping strategy for the secondary set."""
    ATTRIBUTE = "attribute"   # group by the item's `parent` text
    RELATION = "relation"     # group by related items in a third lens


class RollupFilterMode(Enum):
    """Visibility of secondary items that fall in no group."""
    ONLY_RELATED = "only-related"
    SHOW_SECONDARY = "show-secondary"


@dataclass(frozen=True)
class RollupSpec:
    """Caller-selected rollup. Relation mode needs the third lens."""
    mode: RollupMode
    filter_mode: RollupFilterMode = RollupFilterMode.ONLY_RELATED
    lens: Optional[str] = None

    def __post_init__(self):
        if self.mode == RollupMode.RELATION and not self.lens:
            raise ValueError("relation rollup requires a rollup lens")
        if self.mode == RollupMode.ATTRIBUTE and self.lens:
            raise ValueError("attribute rollup does not take a lens")

    @staticmethod
    def attribute(filter_mode: RollupFilterMode = RollupFilterMode.ONLY_RELATED) -> RollupSpec:
        return RollupSpec(mode=RollupMode.ATTRIBUTE, filter_mode=filter_mode)

    @staticmethod
    def relation(
        lens: str,
        filter_mode: RollupFilterMode = RollupFilterMode.ONLY_RELATED
    ) -> RollupSpec:
        return RollupSpec(mode=RollupMode.RELATION, filter_mode=filter_mode, lens=lens)


# =============================================================================
# ROLLUP KEY (Tagged variant)
# =============================================================================

class RollupKeyKind(Enum):
    BY_ID = "by_id"       # a real item in the rollup lens
    BY_NAME = "by_name"   # a literal attribute bucket


@dataclass(frozen=True)
class RollupKey:
    """
    Grouping key: ById(item_id) | ByName(label).

    Exactly one of item_id / name is set, matching `kind`.
    """
    kind: RollupKeyKind
    item_id: Optional[int] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind == RollupKeyKind.BY_ID:
            if self.item_id is None or self.name is not None:
                raise ValueError("BY_ID rollup key carries only an item id")
        else:
            if self.name is None or self.item_id is not None:
                raise ValueError("BY_NAME rollup key carries only a name")

    @staticmethod
    def by_id(item_id: int) -> RollupKey:
        return RollupKey(kind=RollupKeyKind.BY_ID, item_id=item_id)

    @staticmethod
    def by_name(name: str) -> RollupKey:
        return RollupKey(kind=RollupKeyKind.BY_NAME, name=name)

    @property
    def identity(self) -> Tuple[str, str]:
        """Dedup identity: ids for real items, bucket name otherwise."""
        if self.kind == RollupKeyKind.BY_ID:
            return ("id", str(self.item_id))
        return ("name", self.name or "")

    @property
    def is_no_parent(self) -> bool:
        return self.kind == RollupKeyKind.BY_NAME and self.name == NO_PARENT_BUCKET


@dataclass(frozen=True)
class RollupGroup:
    """
    One rollup bucket within a primary item.

    `rollup_item` is the third-lens item for BY_ID keys, None for
    attribute buckets. Lists are subsets of the owning result's sets.
    """
    key: RollupKey
    label: str
    current_items: Tuple[Item, ...] = field(default_factory=tuple)
    target_items: Tuple[Item, ...] = field(default_factory=tuple)
    rollup_item: Optional[Item] = None

    @property
    def member_ids(self) -> Tuple[int, ...]:
        seen: Dict[int, None] = {}
        for item in self.current_items + self.target_items:
            seen.setdefault(item.id, None)
        return tuple(seen)


# =============================================================================
# CLASSIFICATION RESULT
# =============================================================================

@dataclass(frozen=True)
class ClassificationResult:
    """
    Current/Target split for one primary item.

    related_items holds every related secondary item, including
    items that qualify for neither column. relationship_statuses
    maps related item id -> connecting edge status, sorted by id.
    The ungrouped counts tally classified Current/Target items that
    fell into no rollup group, before display filtering.
    """
    primary_item: Item
    secondary_lens: str
    current_items: Tuple[Item, ...] = field(default_factory=tuple)
    target_items: Tuple[Item, ...] = field(default_factory=tuple)
    related_items: Tuple[Item, ...] = field(default_factory=tuple)
    relationship_statuses: Tuple[Tuple[int, RelationshipLifecycleStatus], ...] = field(default_factory=tuple)
    rollup_spec: Optional[RollupSpec] = None
    rollup_groups: Optional[Tuple[RollupGroup, ...]] = None
    ungrouped_items: Optional[Tuple[Item, ...]] = None
    ungrouped_current_count: int = 0
    ungrouped_target_count: int = 0

    @property
    def primary_lens(self) -> str:
        return self.primary_item.lens

    @property
    def has_rollup(self) -> bool:
        return self.rollup_groups is not None

    def relationship_status(self, item_id: int) -> RelationshipLifecycleStatus:
        for related_id, status in self.relationship_statuses:
            if related_id == item_id:
                return status
        return RelationshipLifecycleStatus.EXISTING
