"""
Current / Target Classifier
===========================

For a primary/secondary lens pair, splits each primary item's related
secondary items into a Current column (state today) and a Target
column (state after planned transitions). An item may sit in both.

TOTALITY:
=========
Unknown lenses, an unresolvable filter item and empty snapshots all
produce an empty result. Nothing here raises for data problems; the
conditions are reported through `check_selection`.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..contracts.base import (
    Error, ErrorCode, Item, RelationshipLifecycleStatus,
)
from ..contracts.results import ClassificationResult
from .dedup import dedupe_items, sort_items
from .index import RelationshipIndex
from .rules import RuleSet, classify_membership


@dataclass
class ClassifierConfig:
    """Configuration for the classifier."""
    rule_set: RuleSet = RuleSet.STANDARD


class Classifier:
    """
    Computes per-primary-item Current and Target sets.

    Holds a prebuilt RelationshipIndex; never mutates it.
    """

    def __init__(self, index: RelationshipIndex, config: Optional[ClassifierConfig] = None):
        self._index = index
        self._config = config or ClassifierConfig()

    @property
    def rule_set(self) -> RuleSet:
        return self._config.rule_set

    # =========================================================================
    # PRIMARY SELECTION
    # =========================================================================

    def select_primary_items(
        self,
        primary_lens: str,
        filter_item_id: Optional[int] = None
    ) -> Tuple[Item, ...]:
        """
        Primary-lens items, optionally narrowed to those related to a
        filter item. The filter item itself is kept when it belongs to
        the primary lens.
        """
        candidates = self._index.items_in_lens(primary_lens)

        if filter_item_id is not None:
            filter_item = self._index.item(filter_item_id)
            if filter_item is None:
                return ()

            allowed = set(self._index.related_ids(filter_item_id, lens=primary_lens))
            if filter_item.lens == primary_lens:
                allowed.add(filter_item_id)
            candidates = [item for item in candidates if item.id in allowed]

        return sort_items(candidates)

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def classify(
        self,
        primary_lens: str,
        secondary_lens: str,
        filter_item_id: Optional[int] = None
    ) -> Tuple[ClassificationResult, ...]:
        """Classification results in primary-item order."""
        primary_items = self.select_primary_items(primary_lens, filter_item_id)
        return tuple(
            self.classify_item(primary_item, secondary_lens)
            for primary_item in primary_items
        )

    def classify_item(self, primary_item: Item, secondary_lens: str) -> ClassificationResult:
        """Classify one primary item's secondary neighborhood."""
        edge_statuses: Dict[int, Optional[RelationshipLifecycleStatus]] = {}
        for neighbor in self._index.neighbors(primary_item.id, lens=secondary_lens):
            # last edge examined wins for duplicate pairs
            edge_statuses[neighbor.other_item_id] = neighbor.relationship.lifecycle_status

        related: List[Item] = []
        for item_id in edge_statuses:
            item = self._index.item(item_id)
            if item is not None and item.lens == secondary_lens:
                related.append(item)
        related_items = sort_items(dedupe_items(related))

        current: List[Item] = []
        target: List[Item] = []
        for item in related_items:
            membership = classify_membership(
                item.lifecycle_status,
                edge_statuses.get(item.id),
                self._config.rule_set
            )
            if membership.current:
                current.append(item)
            if membership.target:
                target.append(item)

        statuses = tuple(
            (item.id, edge_statuses.get(item.id) or RelationshipLifecycleStatus.EXISTING)
            for item in sorted(related_items, key=lambda i: i.id)
        )

        return ClassificationResult(
            primary_item=primary_item,
            secondary_lens=secondary_lens,
            current_items=dedupe_items(current),
            target_items=dedupe_items(target),
            related_items=related_items,
            relationship_statuses=statuses
        )

    # =========================================================================
    # DIAGNOSTICS
    # =========================================================================

    def check_selection(
        self,
        primary_lens: str,
        secondary_lens: str,
        filter_item_id: Optional[int] = None,
        known_lenses: Tuple[str, ...] = ()
    ) -> Tuple[Error, ...]:
        """Report selection problems that explain an empty result."""
        errors = []
        for role, lens in (("primary", primary_lens), ("secondary", secondary_lens)):
            if lens not in known_lenses and not self._index.has_lens(lens):
                errors.append(Error.create(
                    ErrorCode.UNKNOWN_LENS,
                    f"Unknown {role} lens '{lens}'",
                    lens=lens,
                    role=role
                ))
        if filter_item_id is not None and self._index.item(filter_item_id) is None:
            errors.append(Error.create(
                ErrorCode.FILTER_ITEM_NOT_FOUND,
                f"Filter item {filter_item_id} not found",
                filter_item_id=filter_item_id
            ))
        return tuple(errors)


def classify(
    index: RelationshipIndex,
    primary_lens: str,
    secondary_lens: str,
    filter_item_id: Optional[int] = None,
    rule_set: RuleSet = RuleSet.STANDARD
) -> Tuple[ClassificationResult, ...]:
    """Functional entry point over a prebuilt index."""
    classifier = Classifier(index, ClassifierConfig(rule_set=rule_set))
    return classifier.classify(primary_lens, secondary_lens, filter_item_id)
