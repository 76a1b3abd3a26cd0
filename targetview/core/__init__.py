"""
Core Target View Engine

RESPONSIBILITY: Relationship indexing, Current/Target classification,
rollup aggregation and deduplication.
ALLOWED INPUTS: Snapshot contracts (items, relationships, lenses)
OUTPUTS: ClassificationResult (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Mutate items, relationships or lenses
- Retain state between computations
- Raise for missing lenses, fields or items
- Depend on rendering concerns (see visualization/)
"""

from .index import RelationshipIndex, Neighbor
from .rules import RuleSet, Membership, classify_membership
from .classifier import Classifier, ClassifierConfig, classify
from .rollup import RollupAggregator, aggregate
from .dedup import (
    dedupe_items, union_items, sort_items, dedupe_rollup_keys, dedupe_groups,
)
from .migration import migrate_relationship_status
from .unrelated import UnrelatedSection, unrelated_secondary_items, has_any_lifecycle_status

__all__ = [
    'RelationshipIndex', 'Neighbor',
    'RuleSet', 'Membership', 'classify_membership',
    'Classifier', 'ClassifierConfig', 'classify',
    'RollupAggregator', 'aggregate',
    'dedupe_items', 'union_items', 'sort_items', 'dedupe_rollup_keys', 'dedupe_groups',
    'migrate_relationship_status',
    'UnrelatedSection', 'unrelated_secondary_items', 'has_any_lifecycle_status',
]
