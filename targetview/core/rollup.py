"""
Rollup Aggregator
=================

Regroups each primary item's classified Current/Target sets by a
third dimension.

STRATEGIES (mutually exclusive):
================================
- ATTRIBUTE: bucket by the secondary item's `parent` text. Items
  without a parent land in the synthetic "(No Parent)" bucket.
- RELATION: bucket by related items in a third lens. An item with no
  such relation is ungrouped; one with several belongs to several
  groups.

DISPLAY FILTER:
===============
- ONLY_RELATED: ungrouped items are removed from the visible Current
  and Target sets. `ungrouped_items` still lists every related
  secondary item without a group, and the ungrouped counts record
  how many of them the rule table put in each column.
- SHOW_SECONDARY: Current and Target are untouched; ungrouped items
  drawn from them surface as a separate bucket in `ungrouped_items`.

Groups are sorted by label; the ungrouped bucket is always last since
it is never part of `rollup_groups`.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..contracts.base import Item
from ..contracts.results import (
    NO_PARENT_BUCKET,
    ClassificationResult, RollupFilterMode, RollupGroup, RollupKey,
    RollupMode, RollupSpec,
)
from .dedup import dedupe_groups, dedupe_items, sort_items, union_items
from .index import RelationshipIndex


class RollupAggregator:
    """Applies a RollupSpec to classification results."""

    def __init__(self, index: RelationshipIndex):
        self._index = index

    def aggregate(
        self,
        classification: Sequence[ClassificationResult],
        spec: Optional[RollupSpec]
    ) -> Tuple[ClassificationResult, ...]:
        """Results with rollup_groups/ungrouped_items added."""
        if spec is None:
            return tuple(classification)

        if spec.mode == RollupMode.ATTRIBUTE:
            return tuple(self._by_attribute(result, spec) for result in classification)
        return tuple(self._by_relation(result, spec) for result in classification)

    # =========================================================================
    # ATTRIBUTE ROLLUP
    # =========================================================================

    def _by_attribute(self, result: ClassificationResult, spec: RollupSpec) -> ClassificationResult:
        buckets: Dict[str, List[Item]] = {}
        for item in result.related_items:
            buckets.setdefault(item.parent or NO_PARENT_BUCKET, []).append(item)

        def has_parent(item: Item) -> bool:
            return bool(item.parent)

        if spec.filter_mode == RollupFilterMode.ONLY_RELATED:
            current = tuple(i for i in result.current_items if has_parent(i))
            target = tuple(i for i in result.target_items if has_parent(i))
            ungrouped = [i for i in result.related_items if not has_parent(i)]
        else:
            current = result.current_items
            target = result.target_items
            ungrouped = [
                i for i in union_items(current, target) if not has_parent(i)
            ]

        groups = []
        for name in sorted(b for b in buckets if b != NO_PARENT_BUCKET):
            member_ids = {item.id for item in buckets[name]}
            groups.append(RollupGroup(
                key=RollupKey.by_name(name),
                label=name,
                current_items=tuple(i for i in current if i.id in member_ids),
                target_items=tuple(i for i in target if i.id in member_ids)
            ))

        return self._finish(result, spec, current, target, groups, ungrouped, has_parent)

    # =========================================================================
    # RELATION ROLLUP
    # =========================================================================

    def _by_relation(self, result: ClassificationResult, spec: RollupSpec) -> ClassificationResult:
        rollup_lens = spec.lens or ""

        secondary_to_rollup: Dict[int, Tuple[Item, ...]] = {}
        rollup_to_secondary: Dict[int, List[Item]] = {}
        rollup_items: Dict[int, Item] = {}

        for secondary in result.related_items:
            related = []
            for rollup_id in self._index.related_ids(secondary.id, lens=rollup_lens):
                rollup_item = self._index.item(rollup_id)
                if rollup_item is not None and rollup_item.lens == rollup_lens:
                    related.append(rollup_item)
            secondary_to_rollup[secondary.id] = sort_items(related)

            for rollup_item in related:
                rollup_items[rollup_item.id] = rollup_item
                rollup_to_secondary.setdefault(rollup_item.id, []).append(secondary)

        def is_grouped(item: Item) -> bool:
            return len(secondary_to_rollup.get(item.id, ())) > 0

        if spec.filter_mode == RollupFilterMode.ONLY_RELATED:
            current = tuple(i for i in result.current_items if is_grouped(i))
            target = tuple(i for i in result.target_items if is_grouped(i))
            ungrouped = [i for i in result.related_items if not is_grouped(i)]
        else:
            current = result.current_items
            target = result.target_items
            ungrouped = [i for i in union_items(current, target) if not is_grouped(i)]

        groups = []
        for rollup_item in sort_items(rollup_items.values()):
            member_ids = {item.id for item in rollup_to_secondary[rollup_item.id]}
            groups.append(RollupGroup(
                key=RollupKey.by_id(rollup_item.id),
                label=rollup_item.name,
                current_items=tuple(i for i in current if i.id in member_ids),
                target_items=tuple(i for i in target if i.id in member_ids),
                rollup_item=rollup_item
            ))

        return self._finish(result, spec, current, target, groups, ungrouped, is_grouped)

    # =========================================================================
    # SHARED
    # =========================================================================

    @staticmethod
    def _finish(
        result: ClassificationResult,
        spec: RollupSpec,
        current: Sequence[Item],
        target: Sequence[Item],
        groups: Sequence[RollupGroup],
        ungrouped: Sequence[Item],
        is_grouped: Callable[[Item], bool]
    ) -> ClassificationResult:
        # groups whose members all fell out of both columns carry nothing
        visible = [g for g in dedupe_groups(groups) if g.current_items or g.target_items]
        return replace(
            result,
            current_items=dedupe_items(current),
            target_items=dedupe_items(target),
            rollup_spec=spec,
            rollup_groups=tuple(visible),
            ungrouped_items=sort_items(dedupe_items(ungrouped)),
            ungrouped_current_count=sum(1 for i in result.current_items if not is_grouped(i)),
            ungrouped_target_count=sum(1 for i in result.target_items if not is_grouped(i))
        )


def aggregate(
    index: RelationshipIndex,
    classification: Sequence[ClassificationResult],
    spec: Optional[RollupSpec]
) -> Tuple[ClassificationResult, ...]:
    """Functional entry point over a prebuilt index."""
    return RollupAggregator(index).aggregate(classification, spec)
