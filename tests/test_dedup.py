"""
Dedup / Union Resolver Tests
"""

from targetview.contracts.results import RollupGroup, RollupKey
from targetview.core.dedup import (
    dedupe_groups, dedupe_items, dedupe_rollup_keys, sort_items, union_items,
)

from fixtures import APPS, item, names

A = item(1, APPS, "Alpha")
B = item(2, APPS, "Bravo")
B_DUP = item(2, APPS, "Bravo (stale)")
C = item(3, APPS, "Alpha")


class TestDedupItems:

    def test_first_occurrence_wins(self):
        assert dedupe_items([B, A, B_DUP]) == (B, A)

    def test_union_preserves_order(self):
        assert union_items([A], [B, A], [C]) == (A, B, C)

    def test_sort_by_name_then_id(self):
        assert [i.id for i in sort_items([C, B, A])] == [1, 3, 2]


class TestDedupGroups:

    def test_keys_by_identity(self):
        keys = [RollupKey.by_id(1), RollupKey.by_name("x"), RollupKey.by_id(1), RollupKey.by_name("x")]
        assert dedupe_rollup_keys(keys) == (RollupKey.by_id(1), RollupKey.by_name("x"))

    def test_groups_sharing_key_merge(self):
        first = RollupGroup(RollupKey.by_name("Core"), "Core", current_items=(A,), target_items=(A,))
        second = RollupGroup(RollupKey.by_name("Core"), "Core", current_items=(B, A), target_items=())

        merged = dedupe_groups([first, second])

        assert len(merged) == 1
        assert names(merged[0].current_items) == ["Alpha", "Bravo"]
        assert names(merged[0].target_items) == ["Alpha"]

    def test_group_lists_deduplicated(self):
        group = RollupGroup(RollupKey.by_id(9), "Nine", current_items=(A, A, B))
        assert dedupe_groups([group])[0].current_items == (A, B)
