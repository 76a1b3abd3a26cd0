"""
Target View Engine: Read-Only API Server
========================================

Serves classification, rollup and layout results over one JSON snapshot.
No endpoint mutates the snapshot.

Endpoints:
- GET /health               -> Snapshot status
- GET /api/v1/lenses        -> Ordered lens list
- GET /api/v1/classify      -> Current/Target classification
- GET /api/v1/aggregate     -> Classification with rollup groups
- GET /api/v1/layout        -> Projected geometry
- GET /api/v1/export.svg    -> Static SVG export

Usage:
    TARGETVIEW_SNAPSHOT=data/snapshot.json uvicorn targetview.api.server:app --reload
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from ..contracts.results import RollupFilterMode, RollupMode, RollupSpec
from ..engine import EngineConfig, TargetViewEngine
from ..store import JsonSnapshotStore, SnapshotLoadError
from ..visualization.layout import ColumnViewMode, DisplayOptions, MinorTextOption
from .mapper import map_geometry, map_lens, map_view

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

# Global engine instance; None until a snapshot has loaded
engine_instance: Optional[TargetViewEngine] = None
store_instance: Optional[JsonSnapshotStore] = None


def load_engine(snapshot_path: str, config: Optional[EngineConfig] = None) -> TargetViewEngine:
    """Load a snapshot file into a fresh engine. Raises SnapshotLoadError."""
    global engine_instance, store_instance

    store = JsonSnapshotStore(snapshot_path)
    engine = TargetViewEngine(config)
    engine.recompute(store.snapshot(), errors=store.migration_errors)

    store_instance = store
    engine_instance = engine
    return engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the snapshot on startup."""
    global engine_instance, store_instance

    snapshot_path = os.environ.get(
        "TARGETVIEW_SNAPSHOT", os.path.join(os.getcwd(), "data", "snapshot.json")
    )
    print(f"[*] Loading Target View snapshot from: {snapshot_path}")

    try:
        engine = load_engine(snapshot_path)
        print(f"[*] Snapshot loaded (generation {engine.generation}).")
    except SnapshotLoadError as e:
        print(f"[!] FAILED to load snapshot: {e}")
        engine_instance = None

    yield

    print("[*] Shutting down Target View engine.")
    engine_instance = None
    store_instance = None


app = FastAPI(
    title="Target View Engine API",
    version="0.1.0",
    description="Read-only Current/Target views over an architecture snapshot",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],  # STRICT READ-ONLY
    allow_headers=["*"],
)


# =============================================================================
# REQUEST PARSING
# =============================================================================

def _require_engine() -> TargetViewEngine:
    if not engine_instance:
        raise HTTPException(status_code=503, detail="Snapshot not loaded")
    return engine_instance


def _parse_rollup(
    rollup: Optional[str],
    rollup_lens: Optional[str],
    rollup_filter: str
) -> Optional[RollupSpec]:
    if not rollup:
        return None
    try:
        return RollupSpec(
            mode=RollupMode(rollup),
            filter_mode=RollupFilterMode(rollup_filter),
            lens=rollup_lens or None
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _parse_options(
    minor_text: str,
    columns: str,
    rollup_filter: Optional[str],
    show_unrelated: bool
) -> DisplayOptions:
    try:
        return DisplayOptions(
            minor_text=MinorTextOption(minor_text),
            column_view_mode=ColumnViewMode(columns),
            rollup_mode=RollupFilterMode(rollup_filter) if rollup_filter else None,
            show_unrelated=show_unrelated
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    engine = _require_engine()
    return {
        "status": "online",
        "generation": engine.generation,
        "items": engine.index.item_count,
        "relationships": engine.index.relationship_count,
        "migration_errors": len(store_instance.migration_errors) if store_instance else 0,
    }


@app.get("/api/v1/lenses")
async def get_lenses():
    engine = _require_engine()
    return {"lenses": [map_lens(lens) for lens in engine.snapshot.lenses]}


@app.get("/api/v1/classify")
async def get_classification(
    primary: str,
    secondary: str,
    filter_item_id: Optional[int] = None
):
    engine = _require_engine()
    return map_view(engine.classify(primary, secondary, filter_item_id))


@app.get("/api/v1/aggregate")
async def get_aggregation(
    primary: str,
    secondary: str,
    rollup: str,
    rollup_lens: Optional[str] = None,
    rollup_filter: str = RollupFilterMode.ONLY_RELATED.value,
    filter_item_id: Optional[int] = None
):
    engine = _require_engine()
    spec = _parse_rollup(rollup, rollup_lens, rollup_filter)
    return map_view(engine.aggregate(engine.classify(primary, secondary, filter_item_id), spec))


@app.get("/api/v1/layout")
async def get_layout(
    primary: str,
    secondary: str,
    filter_item_id: Optional[int] = None,
    rollup: Optional[str] = None,
    rollup_lens: Optional[str] = None,
    rollup_filter: str = RollupFilterMode.ONLY_RELATED.value,
    minor_text: str = MinorTextOption.LIFECYCLE.value,
    columns: str = ColumnViewMode.BOTH.value,
    show_unrelated: bool = False
):
    engine = _require_engine()
    spec = _parse_rollup(rollup, rollup_lens, rollup_filter)
    options = _parse_options(minor_text, columns, rollup_filter if rollup else None, show_unrelated)

    view = engine.view(primary, secondary, filter_item_id, spec, options)
    dto = map_view(view)
    dto["geometry"] = map_geometry(view.geometry)
    return dto


@app.get("/api/v1/export.svg")
async def get_svg_export(
    primary: str,
    secondary: str,
    filter_item_id: Optional[int] = None,
    rollup: Optional[str] = None,
    rollup_lens: Optional[str] = None,
    rollup_filter: str = RollupFilterMode.ONLY_RELATED.value,
    minor_text: str = MinorTextOption.LIFECYCLE.value,
    columns: str = ColumnViewMode.BOTH.value,
    show_unrelated: bool = False
):
    engine = _require_engine()
    spec = _parse_rollup(rollup, rollup_lens, rollup_filter)
    options = _parse_options(minor_text, columns, rollup_filter if rollup else None, show_unrelated)

    view = engine.view(primary, secondary, filter_item_id, spec, options)
    return Response(content=engine.export_svg(view.geometry), media_type="image/svg+xml")
