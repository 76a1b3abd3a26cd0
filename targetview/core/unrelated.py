"""
Unrelated Secondary Items

Secondary-lens items with no relationship to any selected primary
item, shown as a trailing "(Not Related)" section. Without a
connecting edge only the item's own lifecycle applies:

    Current: Divest, Stable, or no status
    Target:  anything except Divest
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence, Set, Tuple

from ..contracts.base import Item, LifecycleStatus, RelationshipLifecycleStatus
from ..contracts.results import ClassificationResult
from .dedup import sort_items
from .index import RelationshipIndex


_UNRELATED_CURRENT = frozenset({LifecycleStatus.DIVEST, LifecycleStatus.STABLE, None})


@dataclass(frozen=True)
class UnrelatedSection:
    items: Tuple[Item, ...] = field(default_factory=tuple)
    current_items: Tuple[Item, ...] = field(default_factory=tuple)
    target_items: Tuple[Item, ...] = field(default_factory=tuple)


def unrelated_secondary_items(
    index: RelationshipIndex,
    results: Sequence[ClassificationResult],
    secondary_lens: str
) -> UnrelatedSection:
    """Secondary items related to none of the results' primary items."""
    if not results:
        return UnrelatedSection()

    related: Set[int] = set()
    for result in results:
        related.update(index.related_ids(result.primary_item.id, lens=secondary_lens))

    items = sort_items(
        item for item in index.items_in_lens(secondary_lens)
        if item.id not in related
    )
    return UnrelatedSection(
        items=items,
        current_items=tuple(i for i in items if i.lifecycle_status in _UNRELATED_CURRENT),
        target_items=tuple(i for i in items if i.lifecycle_status != LifecycleStatus.DIVEST)
    )


def has_any_lifecycle_status(results: Sequence[ClassificationResult]) -> bool:
    """
    True when any shown item carries a lifecycle status, or any
    connecting edge is annotated with something other than Existing.
    """
    for result in results:
        shown = list(result.current_items) + list(result.target_items)
        for group in result.rollup_groups or ():
            shown.extend(group.current_items)
            shown.extend(group.target_items)
            if group.rollup_item is not None:
                shown.append(group.rollup_item)
        shown.extend(result.ungrouped_items or ())

        if any(item.lifecycle_status for item in shown):
            return True
        if any(status != RelationshipLifecycleStatus.EXISTING
               for _, status in result.relationship_statuses):
            return True
    return False
