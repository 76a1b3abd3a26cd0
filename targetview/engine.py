"""
Engine Orchestration Module

Coordinates the index, classifier, rollup aggregator and layout
projector over one immutable snapshot at a time.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. Each snapshot gets a new generation id; results carry the
   generation they were computed from (last-request-wins)
3. All operations are traceable through observability
4. Reportable conditions are collected as Error data, never raised
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import time

from .contracts.base import Error, ErrorCode
from .contracts.events import AuditEventType
from .contracts.results import ClassificationResult, RollupSpec, Snapshot
from .core.classifier import Classifier, ClassifierConfig
from .core.index import RelationshipIndex
from .core.rollup import RollupAggregator
from .core.unrelated import UnrelatedSection, unrelated_secondary_items
from .observability import ObservabilityConfig, ObservabilityEngine
from .visualization.geometry import Geometry
from .visualization.layout import DisplayOptions, LayoutConfig, LayoutProjector
from .visualization.svg import export_svg
from .visualization.theme import Theme


@dataclass
class EngineConfig:
    """Unified configuration for the whole engine."""
    classifier: ClassifierConfig = None
    layout: LayoutConfig = None
    observability: ObservabilityConfig = None
    theme: Theme = None

    def __post_init__(self):
        self.classifier = self.classifier or ClassifierConfig()
        self.layout = self.layout or LayoutConfig()
        self.observability = self.observability or ObservabilityConfig()
        self.theme = self.theme or Theme()


@dataclass(frozen=True)
class TargetViewResult:
    """
    Output of one engine call, tagged with the snapshot generation
    it was computed from.
    """
    generation: int
    results: Tuple[ClassificationResult, ...] = field(default_factory=tuple)
    errors: Tuple[Error, ...] = field(default_factory=tuple)
    unrelated: Optional[UnrelatedSection] = None
    geometry: Optional[Geometry] = None

    @property
    def is_empty(self) -> bool:
        return not self.results


def _elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


class TargetViewEngine:
    """
    Target View Engine.

    LAYER FLOW:
    ===========
    1. recompute: Snapshot -> RelationshipIndex (new generation)
    2. classify: lenses + filter -> ClassificationResult[]
    3. aggregate: ClassificationResult[] + RollupSpec -> ClassificationResult[]
    4. project: ClassificationResult[] + DisplayOptions -> Geometry
    5. export_svg: Geometry -> SVG text
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._observability = ObservabilityEngine(self._config.observability)
        self._projector = LayoutProjector(self._config.layout, self._config.theme)

        self._snapshot = Snapshot()
        self._index = RelationshipIndex()
        self._generation = 0
        self._snapshot_errors: Tuple[Error, ...] = ()

    # =========================================================================
    # SNAPSHOT LIFECYCLE
    # =========================================================================

    def recompute(self, snapshot: Snapshot, errors: Sequence[Error] = ()) -> int:
        """
        Accept a new snapshot and rebuild the index.

        `errors` are store-side reports (e.g. lossy migrations) carried
        into every result of this generation. Returns the new
        generation id.
        """
        self._generation += 1
        self._snapshot = snapshot
        self._index = RelationshipIndex.build(snapshot.items, snapshot.relationships)

        dropped = self._index.dropped_relationships
        self._snapshot_errors = tuple(errors) + dropped

        self._observability.collect_metric("recompute_total", 1.0)
        if dropped:
            self._observability.collect_metric("dangling_relationships_total", float(len(dropped)))
        for error in dropped:
            self._observability.log_error(error, layer="index", generation=self._generation)

        self._observability.log_audit(
            action="recompute",
            layer="index",
            event_type=AuditEventType.INDEX,
            generation=self._generation,
            details=(
                f"items={self._index.item_count} "
                f"relationships={self._index.relationship_count} "
                f"dropped={len(dropped)}"
            )
        )
        return self._generation

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def index(self) -> RelationshipIndex:
        return self._index

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def accept(self, result: TargetViewResult) -> bool:
        """
        False (and recorded) when the result belongs to a superseded
        generation and must be discarded by the caller.
        """
        if self.is_current(result.generation):
            return True
        error = Error.create(
            ErrorCode.SUPERSEDED_GENERATION,
            f"Result from generation {result.generation} superseded by {self._generation}",
            generation=result.generation,
            current_generation=self._generation
        )
        self._observability.collect_metric("superseded_generations_total", 1.0)
        self._observability.log_error(error, layer="engine", generation=result.generation)
        return False

    # =========================================================================
    # COMPUTATION INTERFACE
    # =========================================================================

    def classify(
        self,
        primary_lens: str,
        secondary_lens: str,
        filter_item_id: Optional[int] = None
    ) -> TargetViewResult:
        """Current/Target classification for every selected primary item."""
        start_time = time.time()
        classifier = Classifier(self._index, self._config.classifier)
        results = classifier.classify(primary_lens, secondary_lens, filter_item_id)

        known = tuple(lens.key for lens in self._snapshot.lenses)
        selection_errors = classifier.check_selection(primary_lens, secondary_lens, filter_item_id, known)
        for error in selection_errors:
            self._observability.log_error(error, layer="classifier", generation=self._generation)

        self._observability.collect_metric(
            "classify_duration_ms",
            _elapsed_ms(start_time),
            {"primary_lens": primary_lens, "secondary_lens": secondary_lens}
        )
        self._observability.log_audit(
            action="classify",
            layer="classifier",
            event_type=AuditEventType.CLASSIFICATION,
            generation=self._generation,
            details=f"{primary_lens}->{secondary_lens} results={len(results)}"
        )
        return TargetViewResult(
            generation=self._generation,
            results=results,
            errors=self._snapshot_errors + selection_errors
        )

    def aggregate(
        self,
        classification: TargetViewResult,
        spec: Optional[RollupSpec]
    ) -> TargetViewResult:
        """Apply a rollup to a classification. spec=None is a no-op."""
        if spec is None:
            return classification

        start_time = time.time()
        results = RollupAggregator(self._index).aggregate(classification.results, spec)

        errors = classification.errors
        if spec.lens and not self._index.has_lens(spec.lens) and not self._snapshot.has_lens(spec.lens):
            error = Error.create(
                ErrorCode.UNKNOWN_LENS,
                f"Unknown rollup lens '{spec.lens}'",
                lens=spec.lens,
                role="rollup"
            )
            self._observability.log_error(error, layer="rollup", generation=classification.generation)
            errors = errors + (error,)

        self._observability.collect_metric(
            "aggregate_duration_ms", _elapsed_ms(start_time), {"mode": spec.mode.value}
        )
        self._observability.log_audit(
            action="aggregate",
            layer="rollup",
            event_type=AuditEventType.AGGREGATION,
            generation=classification.generation,
            details=f"mode={spec.mode.value} filter={spec.filter_mode.value}"
        )
        return TargetViewResult(
            generation=classification.generation,
            results=results,
            errors=errors,
            unrelated=classification.unrelated,
            geometry=classification.geometry
        )

    def unrelated_secondary_items(
        self,
        results: Sequence[ClassificationResult],
        secondary_lens: str
    ) -> UnrelatedSection:
        return unrelated_secondary_items(self._index, results, secondary_lens)

    def project(
        self,
        results: Sequence[ClassificationResult],
        options: Optional[DisplayOptions] = None,
        unrelated: Optional[UnrelatedSection] = None,
        primary_lens: Optional[str] = None,
        secondary_lens: Optional[str] = None
    ) -> Geometry:
        """Layout geometry for results; lens labels come from the snapshot."""
        start_time = time.time()
        labels: Dict[str, str] = {lens.key: lens.label for lens in self._snapshot.lenses}
        geometry = self._projector.project(
            results,
            options,
            lens_labels=labels,
            unrelated=unrelated,
            primary_lens=primary_lens,
            secondary_lens=secondary_lens
        )
        self._observability.collect_metric("project_duration_ms", _elapsed_ms(start_time))
        self._observability.log_audit(
            action="project",
            layer="layout",
            event_type=AuditEventType.LAYOUT,
            generation=self._generation,
            details=f"width={geometry.width} height={geometry.height}"
        )
        return geometry

    def export_svg(self, geometry: Geometry) -> str:
        return export_svg(geometry, self._config.theme)

    def view(
        self,
        primary_lens: str,
        secondary_lens: str,
        filter_item_id: Optional[int] = None,
        rollup: Optional[RollupSpec] = None,
        options: Optional[DisplayOptions] = None
    ) -> TargetViewResult:
        """Full pipeline: classify, aggregate, unrelated section, project."""
        options = options or DisplayOptions()
        classification = self.aggregate(
            self.classify(primary_lens, secondary_lens, filter_item_id), rollup
        )

        unrelated = None
        if options.show_unrelated:
            unrelated = self.unrelated_secondary_items(classification.results, secondary_lens)

        geometry = self.project(
            classification.results, options, unrelated,
            primary_lens=primary_lens, secondary_lens=secondary_lens
        )
        return TargetViewResult(
            generation=classification.generation,
            results=classification.results,
            errors=classification.errors,
            unrelated=unrelated,
            geometry=geometry
        )

    # =========================================================================
    # OBSERVABILITY INTERFACE
    # =========================================================================

    def get_audit_log(self, layers: Optional[List[str]] = None) -> List:
        return self._observability.get_unified_log(layers)

    def get_audit_report(self) -> Dict:
        return self._observability.generate_audit_report()

    def get_metrics(self):
        return self._observability.get_metrics()

    @property
    def config(self) -> EngineConfig:
        return self._config
