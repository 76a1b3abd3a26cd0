"""
Contracts Module

This module defines the explicit interfaces and data transfer objects
that form the contracts between layers. All inter-layer communication
MUST use these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Reportable conditions are data (Error/ErrorCode), not exceptions
3. Item and edge lifecycle vocabularies are separate enums
4. Derived results hold no identity beyond one computation pass
"""

from .base import (
    ErrorCode, Error,
    LifecycleStatus, RelationshipLifecycleStatus,
    ESTABLISHED_STATUSES, PROSPECTIVE_STATUSES, NO_STATUS_LABEL,
    Lens, Item, Relationship,
    lifecycle_label, has_gap,
)
from .results import (
    NO_PARENT_BUCKET, PARENT_ROLLUP_LABEL,
    Snapshot,
    RollupMode, RollupFilterMode, RollupSpec,
    RollupKeyKind, RollupKey, RollupGroup,
    ClassificationResult,
)
from .events import AuditEventType, AuditLogEntry, MetricPoint

__all__ = [
    'ErrorCode', 'Error',
    'LifecycleStatus', 'RelationshipLifecycleStatus',
    'ESTABLISHED_STATUSES', 'PROSPECTIVE_STATUSES', 'NO_STATUS_LABEL',
    'Lens', 'Item', 'Relationship',
    'lifecycle_label', 'has_gap',
    'NO_PARENT_BUCKET', 'PARENT_ROLLUP_LABEL',
    'Snapshot',
    'RollupMode', 'RollupFilterMode', 'RollupSpec',
    'RollupKeyKind', 'RollupKey', 'RollupGroup',
    'ClassificationResult',
    'AuditEventType', 'AuditLogEntry', 'MetricPoint',
]
