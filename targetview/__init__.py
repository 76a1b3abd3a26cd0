"""
Target View Engine

Classifies the items of a primary lens against a secondary lens into a
Current column (state today) and a Target column (state after planned
transitions), optionally rolls them up, and projects the result into
deterministic geometry. Each layer communicates only through
immutable contracts.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Items, lenses, relationships, results, audit records
   - MUST NOT: Contain behavior beyond validation and derived properties

2. CORE (core/)
   - Responsibility: Relationship index, classification, rollup, dedup
   - Allowed inputs: Snapshot records
   - Outputs: ClassificationResult (immutable)
   - MUST NOT: Mutate inputs, retain state, raise on data problems

3. VISUALIZATION (visualization/)
   - Responsibility: Absolute layout geometry and SVG export
   - Allowed inputs: ClassificationResult + DisplayOptions
   - Outputs: Geometry, SVG text
   - MUST NOT: Classify, or let renderers compute positions

4. STORE (store.py)
   - Responsibility: Validated, migrated snapshots from JSON or memory
   - MUST NOT: Write back to the backing store

5. OBSERVABILITY (observability/)
   - Responsibility: Audit log and metrics per layer
   - MUST NOT: Modify results

6. API (api/)
   - Read-only HTTP surface over the engine

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: All contracts are frozen dataclasses
- Deterministic: Identical inputs always produce identical outputs
- Total: Unknown lenses and missing data give empty results, not errors
- Explicit errors: Reportable conditions are queryable Error data
"""

from .contracts import (
    Item, Lens, Relationship, LifecycleStatus, RelationshipLifecycleStatus,
    Snapshot, ClassificationResult, RollupSpec, RollupMode, RollupFilterMode,
    RollupKey, RollupGroup, Error, ErrorCode,
)
from .core import RuleSet, classify, aggregate, unrelated_secondary_items
from .visualization import (
    ColumnViewMode, DisplayOptions, LayoutConfig, MinorTextOption,
    Geometry, project, export_svg,
)
from .engine import EngineConfig, TargetViewEngine, TargetViewResult

__version__ = "0.1.0"

__all__ = [
    'Item', 'Lens', 'Relationship', 'LifecycleStatus', 'RelationshipLifecycleStatus',
    'Snapshot', 'ClassificationResult', 'RollupSpec', 'RollupMode', 'RollupFilterMode',
    'RollupKey', 'RollupGroup', 'Error', 'ErrorCode',
    'RuleSet', 'classify', 'aggregate', 'unrelated_secondary_items',
    'ColumnViewMode', 'DisplayOptions', 'LayoutConfig', 'MinorTextOption',
    'Geometry', 'project', 'export_svg',
    'EngineConfig', 'TargetViewEngine', 'TargetViewResult',
]
