"""
Relationship Lifecycle Vocabulary Migration

Older snapshots annotated edges with the item vocabulary
(Plan, Emerging, Invest, Divest, Stable). The current vocabulary is
(Planned to add, Planned to remove, Existing).

Mapping:
    absent                     -> Existing
    "Plan"                     -> Planned to add
    current-vocabulary value   -> unchanged
    anything else              -> Existing   (lossy, reported)
"""

from __future__ import annotations
from typing import Optional, Tuple

from ..contracts.base import Error, ErrorCode, RelationshipLifecycleStatus


_CURRENT_VOCABULARY = {status.value: status for status in RelationshipLifecycleStatus}


def migrate_relationship_status(
    raw: Optional[str],
    relationship_id: Optional[int] = None
) -> Tuple[RelationshipLifecycleStatus, Optional[Error]]:
    """Map a stored edge status onto the current vocabulary."""
    if raw is None or not str(raw).strip():
        return RelationshipLifecycleStatus.EXISTING, None

    value = str(raw).strip()
    if value in _CURRENT_VOCABULARY:
        return _CURRENT_VOCABULARY[value], None
    if value == "Plan":
        return RelationshipLifecycleStatus.PLANNED_TO_ADD, None

    return RelationshipLifecycleStatus.EXISTING, Error.create(
        ErrorCode.LOSSY_LIFECYCLE_MIGRATION,
        f"Legacy relationship status '{value}' mapped to Existing",
        relationship_id=relationship_id if relationship_id is not None else "",
        legacy_value=value
    )
