"""
Test Fixtures

Explicit, hand-built snapshots for deterministic testing.
No random generation here; property tests build their own strategies.
"""

from typing import Iterable, List, Optional, Sequence

from targetview.contracts.base import (
    Item, Lens, LifecycleStatus, Relationship, RelationshipLifecycleStatus,
)
from targetview.contracts.results import Snapshot
from targetview.core.index import RelationshipIndex

APPS = "applications"
PLATFORMS = "platforms"
CAPS = "capabilities"

LENSES = (
    Lens(APPS, "Applications", 0),
    Lens(PLATFORMS, "Platforms", 1),
    Lens(CAPS, "Capabilities", 2),
)


def item(
    id: int,
    lens: str,
    name: str,
    status: Optional[LifecycleStatus] = None,
    parent: Optional[str] = None,
    description: Optional[str] = None
) -> Item:
    return Item(id=id, lens=lens, name=name, lifecycle_status=status,
                parent=parent, description=description)


class SnapshotBuilder:
    """Accumulates items and relationships with auto-numbered edge ids."""

    def __init__(self, lenses: Sequence[Lens] = LENSES):
        self._lenses = tuple(lenses)
        self._items: List[Item] = []
        self._relationships: List[Relationship] = []
        self._by_id = {}

    def add(self, *items: Item) -> "SnapshotBuilder":
        for it in items:
            self._items.append(it)
            self._by_id[it.id] = it
        return self

    def relate(
        self,
        from_id: int,
        to_id: int,
        status: Optional[RelationshipLifecycleStatus] = None,
        to_lens: Optional[str] = None
    ) -> "SnapshotBuilder":
        rel_id = len(self._relationships) + 1
        from_item = self._by_id.get(from_id)
        to_item = self._by_id.get(to_id)
        self._relationships.append(Relationship(
            id=rel_id,
            from_lens=from_item.lens if from_item else APPS,
            from_item_id=from_id,
            to_lens=to_lens or (to_item.lens if to_item else PLATFORMS),
            to_item_id=to_id,
            lifecycle_status=status
        ))
        return self

    def snapshot(self) -> Snapshot:
        return Snapshot(
            lenses=self._lenses,
            items=tuple(self._items),
            relationships=tuple(self._relationships)
        )

    def index(self) -> RelationshipIndex:
        return RelationshipIndex.build(self._items, self._relationships)


def names(items: Iterable[Item]) -> List[str]:
    return [i.name for i in items]


# =============================================================================
# SCENARIO SNAPSHOTS
# =============================================================================

CHECKOUT = item(1, APPS, "CheckoutApp", LifecycleStatus.STABLE, description="Web checkout flow")
PAYMENTS = item(10, PLATFORMS, "PaymentsPlatform", LifecycleStatus.STABLE)
NEW_GATEWAY = item(11, PLATFORMS, "NewGateway")
LEGACY_LEDGER = item(12, PLATFORMS, "LegacyLedger", LifecycleStatus.DIVEST)


def scenario_snapshot() -> SnapshotBuilder:
    """
    CheckoutApp related to:
      PaymentsPlatform (Stable)  via Existing
      NewGateway (no status)     via Planned to add
      LegacyLedger (Divest)      via Planned to remove
    """
    return (
        SnapshotBuilder()
        .add(CHECKOUT, PAYMENTS, NEW_GATEWAY, LEGACY_LEDGER)
        .relate(1, 10, RelationshipLifecycleStatus.EXISTING)
        .relate(1, 11, RelationshipLifecycleStatus.PLANNED_TO_ADD)
        .relate(1, 12, RelationshipLifecycleStatus.PLANNED_TO_REMOVE)
    )


def core_banking_snapshot() -> SnapshotBuilder:
    """
    One application related to three platforms: two share the
    parent "Core Banking", one has no parent.
    """
    return (
        SnapshotBuilder()
        .add(
            item(1, APPS, "Teller"),
            item(20, PLATFORMS, "Deposits", parent="Core Banking"),
            item(21, PLATFORMS, "Loans", parent="Core Banking"),
            item(22, PLATFORMS, "Notifications"),
        )
        .relate(1, 20)
        .relate(1, 21)
        .relate(1, 22)
    )


def capability_snapshot() -> SnapshotBuilder:
    """
    Relation rollup fixture. One application related to three
    platforms; platforms map to capabilities:

      Compute -> Hosting, Resilience   (multiple membership)
      Storage -> Hosting
      Queue   -> (none)
    """
    return (
        SnapshotBuilder()
        .add(
            item(1, APPS, "Orders"),
            item(30, PLATFORMS, "Compute", LifecycleStatus.INVEST),
            item(31, PLATFORMS, "Storage"),
            item(32, PLATFORMS, "Queue"),
            item(40, CAPS, "Hosting", LifecycleStatus.STABLE, description="Runs workloads"),
            item(41, CAPS, "Resilience"),
        )
        .relate(1, 30)
        .relate(1, 31)
        .relate(1, 32)
        .relate(30, 40)
        .relate(30, 41)
        .relate(31, 40)
    )


def wide_snapshot(count: int = 7) -> SnapshotBuilder:
    """One application related to `count` stable platforms."""
    builder = SnapshotBuilder().add(item(1, APPS, "Hub"))
    for n in range(count):
        builder.add(item(100 + n, PLATFORMS, f"P{n}", LifecycleStatus.STABLE))
        builder.relate(1, 100 + n)
    return builder
