"""
Relationship Index
==================

Adjacency over the flat relationship list, built once per snapshot.

Relationships are stored directed but traversed undirected, so the
index is an undirected multigraph: one edge per relationship, keyed
by relationship id, so parallel edges between the same pair survive.

DANGLING REFERENCES:
====================
A relationship whose endpoint resolves to no item in the snapshot is
dropped during construction and reported, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import networkx as nx

from ..contracts.base import Error, ErrorCode, Item, Relationship


@dataclass(frozen=True)
class Neighbor:
    """The far side of one relationship, relative to a queried item."""
    other_item_id: int
    other_lens: str
    relationship: Relationship


class RelationshipIndex:
    """
    Undirected adjacency over items and relationships.

    Neighbor lists come back in stored relationship order, which is
    what makes "last edge examined wins" deterministic downstream.
    """

    def __init__(self):
        self._graph = nx.MultiGraph()
        self._items: Dict[int, Item] = {}
        self._dropped: List[Error] = []

    @classmethod
    def build(
        cls,
        items: Iterable[Item],
        relationships: Iterable[Relationship]
    ) -> RelationshipIndex:
        index = cls()
        index.rebuild(items, relationships)
        return index

    def rebuild(
        self,
        items: Iterable[Item],
        relationships: Iterable[Relationship]
    ) -> None:
        """
        Build the index from a full snapshot.

        Replaces internal state.
        """
        self._graph = nx.MultiGraph()
        self._items = {}
        self._dropped = []

        for item in items:
            self._items[item.id] = item
            self._graph.add_node(item.id, lens=item.lens)

        for sequence, rel in enumerate(relationships):
            missing = [
                endpoint for endpoint in (rel.from_item_id, rel.to_item_id)
                if endpoint not in self._items
            ]
            if missing:
                self._dropped.append(Error.create(
                    ErrorCode.DANGLING_RELATIONSHIP,
                    f"Relationship {rel.id} references unknown item(s)",
                    relationship_id=rel.id,
                    missing_item_ids=",".join(str(m) for m in missing)
                ))
                continue

            self._graph.add_edge(
                rel.from_item_id,
                rel.to_item_id,
                key=(rel.id, sequence),
                relationship=rel,
                sequence=sequence
            )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def neighbors(self, item_id: int, lens: Optional[str] = None) -> List[Neighbor]:
        """
        Items related to item_id, optionally restricted to one lens.

        The lens filter applies to the lens recorded on the
        relationship for the far endpoint.
        """
        if item_id not in self._graph:
            return []

        edges = sorted(
            self._graph.edges(item_id, keys=True, data=True),
            key=lambda edge: edge[3]["sequence"]
        )

        result = []
        for _, _, _, data in edges:
            rel: Relationship = data["relationship"]
            other = rel.other_side(item_id)
            if other is None:
                continue
            other_id, other_lens = other
            if lens is not None and other_lens != lens:
                continue
            result.append(Neighbor(other_id, other_lens, rel))
        return result

    def related_ids(self, item_id: int, lens: Optional[str] = None) -> Tuple[int, ...]:
        """Distinct related item ids in first-seen order."""
        seen: Dict[int, None] = {}
        for neighbor in self.neighbors(item_id, lens):
            seen.setdefault(neighbor.other_item_id, None)
        return tuple(seen)

    def item(self, item_id: int) -> Optional[Item]:
        return self._items.get(item_id)

    def items_in_lens(self, lens: str) -> List[Item]:
        return [item for item in self._items.values() if item.lens == lens]

    def has_lens(self, lens: str) -> bool:
        return any(item.lens == lens for item in self._items.values())

    @property
    def dropped_relationships(self) -> Tuple[Error, ...]:
        return tuple(self._dropped)

    @property
    def relationship_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def item_count(self) -> int:
        return self._graph.number_of_nodes()
