"""
API Mapper
==========

Transforms engine results and geometry into JSON-ready DTOs.
Field names are camelCase to match the snapshot document format.
"""
from typing import Any, Dict, Optional

from ..contracts.base import Error, Item, Lens, lifecycle_label
from ..contracts.results import ClassificationResult, RollupGroup
from ..core.unrelated import UnrelatedSection
from ..engine import TargetViewResult
from ..visualization.geometry import Geometry, ItemBox, Line, Rect


def map_lens(lens: Lens) -> Dict[str, Any]:
    return {"key": lens.key, "label": lens.label, "order": lens.order}


def map_item(item: Item) -> Dict[str, Any]:
    return {
        "id": item.id,
        "lens": item.lens,
        "name": item.name,
        "lifecycleStatus": item.lifecycle_status.value if item.lifecycle_status else None,
        "lifecycleLabel": lifecycle_label(item.lifecycle_status),
        "parent": item.parent,
        "description": item.description,
    }


def map_error(error: Error) -> Dict[str, Any]:
    return {
        "code": error.code.name,
        "message": error.message,
        "context": dict(error.context),
    }


def _map_group(group: RollupGroup) -> Dict[str, Any]:
    return {
        "key": {
            "kind": group.key.kind.value,
            "itemId": group.key.item_id,
            "name": group.key.name,
        },
        "label": group.label,
        "currentItems": [map_item(i) for i in group.current_items],
        "targetItems": [map_item(i) for i in group.target_items],
        "rollupItem": map_item(group.rollup_item) if group.rollup_item else None,
    }


def map_result(result: ClassificationResult) -> Dict[str, Any]:
    dto = {
        "primaryItem": map_item(result.primary_item),
        "secondaryLens": result.secondary_lens,
        "currentItems": [map_item(i) for i in result.current_items],
        "targetItems": [map_item(i) for i in result.target_items],
        "relationshipStatuses": {
            str(item_id): status.value for item_id, status in result.relationship_statuses
        },
    }
    if result.has_rollup:
        spec = result.rollup_spec
        dto["rollup"] = {
            "mode": spec.mode.value if spec else None,
            "filterMode": spec.filter_mode.value if spec else None,
            "lens": spec.lens if spec else None,
            "groups": [_map_group(g) for g in result.rollup_groups or ()],
            "ungroupedItems": [map_item(i) for i in result.ungrouped_items or ()],
            "ungroupedCounts": {
                "current": result.ungrouped_current_count,
                "target": result.ungrouped_target_count,
            },
        }
    return dto


def map_unrelated(section: Optional[UnrelatedSection]) -> Optional[Dict[str, Any]]:
    if section is None:
        return None
    return {
        "items": [map_item(i) for i in section.items],
        "currentItems": [map_item(i) for i in section.current_items],
        "targetItems": [map_item(i) for i in section.target_items],
    }


def map_view(view: TargetViewResult) -> Dict[str, Any]:
    return {
        "generation": view.generation,
        "results": [map_result(r) for r in view.results],
        "unrelated": map_unrelated(view.unrelated),
        "errors": [map_error(e) for e in view.errors],
    }


def _map_primitive(primitive) -> Dict[str, Any]:
    if isinstance(primitive, Rect):
        return {
            "type": "rect", "x": primitive.x, "y": primitive.y,
            "width": primitive.width, "height": primitive.height,
            "fill": primitive.fill, "stroke": primitive.stroke,
            "strokeWidth": primitive.stroke_width, "rx": primitive.rx,
        }
    if isinstance(primitive, Line):
        return {
            "type": "line", "x1": primitive.x1, "y1": primitive.y1,
            "x2": primitive.x2, "y2": primitive.y2,
            "stroke": primitive.stroke, "strokeWidth": primitive.stroke_width,
        }
    return {
        "type": "text", "x": primitive.x, "y": primitive.y, "text": primitive.text,
        "class": primitive.css_class.value, "anchor": primitive.anchor.value,
    }


def _map_box(box: ItemBox) -> Dict[str, Any]:
    return {
        "itemId": box.item_id,
        "label": box.label,
        "column": box.column.value,
        "x": box.rect.x, "y": box.rect.y,
        "width": box.rect.width, "height": box.rect.height,
    }


def map_geometry(geometry: Geometry) -> Dict[str, Any]:
    """Flat primitive list in paint order plus box hit-areas."""
    return {
        "width": geometry.width,
        "height": geometry.height,
        "primitives": [_map_primitive(p) for p in geometry.primitives()],
        "boxes": [_map_box(b) for b in geometry.boxes()],
    }
