"""
Domain Store Adapters

RESPONSIBILITY: Read lenses, items and relationships from a backing
store and hand them to the engine as an immutable Snapshot.
ALLOWED INPUTS: JSON snapshot documents, in-memory records
OUTPUTS: Snapshot, migration reports

WHAT THIS MODULE MUST NOT DO:
=============================
- Classify, aggregate or lay out (see core/ and visualization/)
- Write back to the backing store

Document format (camelCase keys, unknown keys ignored):

    {
      "lenses": [{"key": "applications", "label": "Applications", "order": 3}],
      "items": [{"id": 1, "lens": "applications", "name": "CRM", ...}],
      "relationships": [{"id": 7, "fromLens": ..., "fromItemId": 1,
                         "toLens": ..., "toItemId": 2,
                         "lifecycleStatus": "Planned to add"}]
    }

"lenses" is optional; the default lens set is used when it is absent.
"""

from __future__ import annotations
import json
import os
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .contracts.base import (
    Error, Item, Lens, LifecycleStatus, Relationship, RelationshipLifecycleStatus,
)
from .contracts.results import Snapshot
from .core.migration import migrate_relationship_status


DEFAULT_LENSES: Tuple[Lens, ...] = (
    Lens('businessUnits', 'Business Units', 0),
    Lens('domains', 'Domains', 1),
    Lens('channels', 'Channels', 2),
    Lens('applications', 'Applications', 3),
    Lens('productFamilies', 'Product Families', 4),
    Lens('platforms', 'Platforms', 5),
    Lens('processes', 'Processes', 6),
    Lens('capabilities', 'Capabilities', 7),
    Lens('enablers', 'Enablers', 8),
)


class SnapshotLoadError(Exception):
    """The backing store could not produce a valid snapshot."""


def order_lenses(lenses: Sequence[Lens], saved_order: Optional[Sequence[str]] = None) -> Tuple[Lens, ...]:
    """
    Apply a saved display order.

    The saved order is honoured only when it is a permutation of the
    known lens keys; otherwise lenses keep their `order` field.
    """
    by_order = tuple(sorted(lenses, key=lambda lens: (lens.order, lens.key)))
    if not saved_order:
        return by_order

    by_key = {lens.key: lens for lens in lenses}
    if len(saved_order) != len(by_key) or set(saved_order) != set(by_key):
        return by_order
    return tuple(by_key[key] for key in saved_order)


# =============================================================================
# STORE INTERFACE (Dependency Inversion)
# =============================================================================

class DomainStore:
    """
    Abstract read interface consumed by the engine.
    """

    def list_lenses(self) -> List[Lens]:
        raise NotImplementedError

    def list_items(self) -> List[Item]:
        raise NotImplementedError

    def list_relationships(self) -> List[Relationship]:
        raise NotImplementedError

    def snapshot(self) -> Snapshot:
        return Snapshot(
            lenses=tuple(self.list_lenses()),
            items=tuple(self.list_items()),
            relationships=tuple(self.list_relationships())
        )


class InMemoryStore(DomainStore):
    """Store over records already held in memory. Suitable for testing."""

    def __init__(
        self,
        items: Sequence[Item] = (),
        relationships: Sequence[Relationship] = (),
        lenses: Optional[Sequence[Lens]] = None
    ):
        self._items = list(items)
        self._relationships = list(relationships)
        self._lenses = list(lenses) if lenses is not None else list(DEFAULT_LENSES)

    def list_lenses(self) -> List[Lens]:
        return list(order_lenses(self._lenses))

    def list_items(self) -> List[Item]:
        return list(self._items)

    def list_relationships(self) -> List[Relationship]:
        return list(self._relationships)


# =============================================================================
# JSON DOCUMENT MODELS (Validation boundary)
# =============================================================================

class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LensRecord(_Record):
    key: str
    label: str
    order: int = 0


class ItemRecord(_Record):
    id: int
    lens: str
    name: str
    lifecycle_status: Optional[LifecycleStatus] = Field(default=None, alias="lifecycleStatus")
    parent: Optional[str] = None
    description: Optional[str] = None
    business_contact: Optional[str] = Field(default=None, alias="businessContact")
    tech_contact: Optional[str] = Field(default=None, alias="techContact")
    primary_architect: Optional[str] = Field(default=None, alias="primaryArchitect")
    secondary_architects: List[str] = Field(default_factory=list, alias="secondaryArchitects")
    tags: List[str] = Field(default_factory=list)

    @field_validator("lifecycle_status", "parent", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_item(self) -> Item:
        return Item(
            id=self.id,
            lens=self.lens,
            name=self.name,
            lifecycle_status=self.lifecycle_status,
            parent=self.parent,
            description=self.description,
            business_contact=self.business_contact,
            tech_contact=self.tech_contact,
            primary_architect=self.primary_architect,
            secondary_architects=tuple(self.secondary_architects),
            tags=tuple(self.tags)
        )


class RelationshipRecord(_Record):
    id: int
    from_lens: str = Field(alias="fromLens")
    from_item_id: int = Field(alias="fromItemId")
    to_lens: str = Field(alias="toLens")
    to_item_id: int = Field(alias="toItemId")
    lifecycle_status: Optional[str] = Field(default=None, alias="lifecycleStatus")

    def to_relationship(self) -> Tuple[Relationship, Optional[Error]]:
        status: Optional[RelationshipLifecycleStatus] = None
        error = None
        if self.lifecycle_status is not None and self.lifecycle_status.strip():
            status, error = migrate_relationship_status(self.lifecycle_status, self.id)
        return Relationship(
            id=self.id,
            from_lens=self.from_lens,
            from_item_id=self.from_item_id,
            to_lens=self.to_lens,
            to_item_id=self.to_item_id,
            lifecycle_status=status
        ), error


class SnapshotDocument(_Record):
    lenses: Optional[List[LensRecord]] = None
    items: List[ItemRecord] = Field(default_factory=list)
    relationships: List[RelationshipRecord] = Field(default_factory=list)


# =============================================================================
# JSON SNAPSHOT STORE
# =============================================================================

class JsonSnapshotStore(DomainStore):
    """
    Read-only store over one JSON snapshot document.

    The document is validated and migrated once, on load. Legacy edge
    statuses that cannot be mapped exactly are reported through
    `migration_errors`.
    """

    def __init__(self, path: str, lens_order: Optional[Sequence[str]] = None):
        self._path = path
        self._lens_order = list(lens_order) if lens_order else None
        self._lenses: List[Lens] = []
        self._items: List[Item] = []
        self._relationships: List[Relationship] = []
        self._migration_errors: List[Error] = []
        self._load()

    @classmethod
    def from_document(cls, document: Dict, lens_order: Optional[Sequence[str]] = None) -> JsonSnapshotStore:
        """Build a store from an already-parsed document."""
        store = cls.__new__(cls)
        store._path = "<memory>"
        store._lens_order = list(lens_order) if lens_order else None
        store._apply(store._validate(document))
        return store

    def _load(self):
        if not os.path.exists(self._path):
            raise SnapshotLoadError(f"Snapshot not found: {self._path}")
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotLoadError(f"Cannot read snapshot {self._path}: {e}") from e
        self._apply(self._validate(raw))

    def _validate(self, raw) -> SnapshotDocument:
        try:
            return SnapshotDocument.model_validate(raw)
        except ValidationError as e:
            raise SnapshotLoadError(f"Invalid snapshot {self._path}: {e}") from e

    def _apply(self, document: SnapshotDocument):
        if document.lenses is None:
            self._lenses = list(DEFAULT_LENSES)
        else:
            self._lenses = [Lens(r.key, r.label, r.order) for r in document.lenses]
        self._items = [record.to_item() for record in document.items]

        self._relationships = []
        self._migration_errors = []
        for record in document.relationships:
            relationship, error = record.to_relationship()
            self._relationships.append(relationship)
            if error is not None:
                self._migration_errors.append(error)

    @property
    def path(self) -> str:
        return self._path

    @property
    def migration_errors(self) -> Tuple[Error, ...]:
        return tuple(self._migration_errors)

    def list_lenses(self) -> List[Lens]:
        return list(order_lenses(self._lenses, self._lens_order))

    def list_items(self) -> List[Item]:
        return list(self._items)

    def list_relationships(self) -> List[Relationship]:
        return list(self._relationships)
