"""
Dedup / Union Resolver

Several branches re-derive overlapping item collections (plain
classification, attribute-rollup ungrouped set, relation-rollup
ungrouped set). Everything leaving the aggregator passes through here
so each real item appears at most once, keyed by id. Synthetic
attribute buckets have no id and are keyed by bucket name.

First occurrence wins its position; later duplicates are dropped.
"""

from __future__ import annotations
from typing import Dict, Iterable, Tuple

from ..contracts.base import Item
from ..contracts.results import RollupGroup, RollupKey


def dedupe_items(items: Iterable[Item]) -> Tuple[Item, ...]:
    """Unique items by id, first-seen order."""
    seen: Dict[int, Item] = {}
    for item in items:
        if item.id not in seen:
            seen[item.id] = item
    return tuple(seen.values())


def union_items(*collections: Iterable[Item]) -> Tuple[Item, ...]:
    """Concatenate collections, then dedupe."""
    merged = []
    for collection in collections:
        merged.extend(collection)
    return dedupe_items(merged)


def sort_items(items: Iterable[Item]) -> Tuple[Item, ...]:
    """Name ascending, ties by id ascending."""
    return tuple(sorted(items, key=lambda item: item.sort_key))


def dedupe_rollup_keys(keys: Iterable[RollupKey]) -> Tuple[RollupKey, ...]:
    seen: Dict[Tuple[str, str], RollupKey] = {}
    for key in keys:
        seen.setdefault(key.identity, key)
    return tuple(seen.values())


def dedupe_groups(groups: Iterable[RollupGroup]) -> Tuple[RollupGroup, ...]:
    """
    Unique groups by key identity with their own lists deduplicated.

    Groups sharing a key are merged.
    """
    merged: Dict[Tuple[str, str], RollupGroup] = {}
    for group in groups:
        existing = merged.get(group.key.identity)
        if existing is None:
            merged[group.key.identity] = RollupGroup(
                key=group.key,
                label=group.label,
                current_items=dedupe_items(group.current_items),
                target_items=dedupe_items(group.target_items),
                rollup_item=group.rollup_item
            )
        else:
            merged[group.key.identity] = RollupGroup(
                key=existing.key,
                label=existing.label,
                current_items=union_items(existing.current_items, group.current_items),
                target_items=union_items(existing.target_items, group.target_items),
                rollup_item=existing.rollup_item
            )
    return tuple(merged.values())
