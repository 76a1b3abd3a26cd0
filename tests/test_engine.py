"""
Engine Orchestration Tests
==========================

Generations, error collection, full pipeline and observability.
"""

import pytest

from targetview.contracts.base import (
    Error, ErrorCode, LifecycleStatus, RelationshipLifecycleStatus,
)
from targetview.contracts.events import AuditEventType
from targetview.contracts.results import RollupSpec, Snapshot
from targetview.core.rules import RuleSet
from targetview.core.classifier import ClassifierConfig
from targetview.engine import EngineConfig, TargetViewEngine
from targetview.observability import ObservabilityConfig
from targetview.visualization.layout import DisplayOptions

from fixtures import (
    APPS, CAPS, PLATFORMS, SnapshotBuilder, capability_snapshot, item, names, scenario_snapshot,
)


@pytest.fixture
def engine():
    engine = TargetViewEngine()
    engine.recompute(scenario_snapshot().snapshot())
    return engine


class TestGenerations:

    def test_recompute_increments_generation(self):
        engine = TargetViewEngine()
        assert engine.generation == 0
        assert engine.recompute(Snapshot()) == 1
        assert engine.recompute(Snapshot()) == 2
        assert engine.is_current(2)
        assert not engine.is_current(1)

    def test_superseded_result_rejected(self, engine):
        stale = engine.classify(APPS, PLATFORMS)
        engine.recompute(scenario_snapshot().snapshot())
        fresh = engine.classify(APPS, PLATFORMS)

        assert not engine.accept(stale)
        assert engine.accept(fresh)
        assert engine.get_metrics().total("superseded_generations_total") == 1

    def test_empty_engine_is_total(self):
        result = TargetViewEngine().classify(APPS, PLATFORMS)
        assert result.is_empty
        assert result.generation == 0


class TestComputation:

    def test_classify(self, engine):
        view = engine.classify(APPS, PLATFORMS)
        assert len(view.results) == 1
        assert names(view.results[0].target_items) == ["NewGateway", "PaymentsPlatform"]
        assert view.errors == ()

    def test_classify_reports_unknown_lens(self, engine):
        view = engine.classify("nowhere", PLATFORMS)
        assert view.is_empty
        assert [e.code for e in view.errors] == [ErrorCode.UNKNOWN_LENS]

    def test_repeated_calls_with_errors_are_equal(self, engine):
        assert engine.classify("nowhere", PLATFORMS) == engine.classify("nowhere", PLATFORMS)
        assert engine.classify(APPS, PLATFORMS, 404) == engine.classify(APPS, PLATFORMS, 404)

        spec = RollupSpec.relation("nowhere")
        first = engine.view("nowhere", PLATFORMS, rollup=spec)
        second = engine.view("nowhere", PLATFORMS, rollup=spec)
        assert first.errors == second.errors
        assert first == second

    def test_dangling_relationship_reported_on_results(self):
        builder = scenario_snapshot().relate(1, 404)
        engine = TargetViewEngine()
        engine.recompute(builder.snapshot())

        view = engine.classify(APPS, PLATFORMS)
        assert ErrorCode.DANGLING_RELATIONSHIP in [e.code for e in view.errors]
        assert engine.get_metrics().total("dangling_relationships_total") == 1

    def test_store_errors_carried(self):
        lossy = Error.create(ErrorCode.LOSSY_LIFECYCLE_MIGRATION, "lossy")
        engine = TargetViewEngine()
        engine.recompute(Snapshot(), errors=[lossy])
        assert engine.classify(APPS, PLATFORMS).errors[0] == lossy

    def test_aggregate_keeps_generation(self):
        engine = TargetViewEngine()
        generation = engine.recompute(capability_snapshot().snapshot())

        view = engine.aggregate(engine.classify(APPS, PLATFORMS), RollupSpec.relation(CAPS))
        assert view.generation == generation
        assert [g.label for g in view.results[0].rollup_groups] == ["Hosting", "Resilience"]

    def test_aggregate_without_spec_is_identity(self, engine):
        view = engine.classify(APPS, PLATFORMS)
        assert engine.aggregate(view, None) is view

    def test_configured_rule_set(self):
        builder = (
            SnapshotBuilder()
            .add(item(1, APPS, "A"), item(2, PLATFORMS, "Grow", LifecycleStatus.INVEST))
            .relate(1, 2, RelationshipLifecycleStatus.EXISTING)
        )
        config = EngineConfig(classifier=ClassifierConfig(rule_set=RuleSet.STRICT_INVEST))
        engine = TargetViewEngine(config)
        engine.recompute(builder.snapshot())
        assert engine.config.classifier.rule_set == RuleSet.STRICT_INVEST
        assert names(engine.classify(APPS, PLATFORMS).results[0].current_items) == []

    def test_view_runs_full_pipeline(self):
        builder = scenario_snapshot().add(item(50, PLATFORMS, "Orphan"))
        engine = TargetViewEngine()
        engine.recompute(builder.snapshot())

        view = engine.view(APPS, PLATFORMS, options=DisplayOptions(show_unrelated=True))
        assert view.geometry is not None
        assert names(view.unrelated.items) == ["Orphan"]
        assert view.geometry.unrelated is not None

    def test_export_svg(self, engine):
        svg = engine.export_svg(engine.view(APPS, PLATFORMS).geometry)
        assert svg.startswith("<svg")
        assert "CheckoutApp" in svg


class TestObservability:

    def test_audit_log_per_layer(self, engine):
        engine.view(APPS, PLATFORMS)
        report = engine.get_audit_report()

        assert report["by_layer"]["index"] == 1
        assert report["by_layer"]["classifier"] == 1
        assert report["by_layer"]["layout"] == 1

    def test_errors_logged_as_error_events(self, engine):
        engine.classify("nowhere", PLATFORMS)
        errors = [e for e in engine.get_audit_log() if e.event_type == AuditEventType.ERROR]
        assert [e.action for e in errors] == ["unknown_lens"]

    def test_metrics_recorded(self, engine):
        engine.view(APPS, PLATFORMS)
        metrics = engine.get_metrics()

        assert metrics.total("recompute_total") == 1
        assert metrics.compute_aggregates("classify_duration_ms")["count"] == 1
        assert metrics.compute_aggregates("project_duration_ms")["count"] == 1

    def test_observability_does_not_alter_results(self):
        quiet = TargetViewEngine(EngineConfig(
            observability=ObservabilityConfig(enable_metrics=False, enable_audit=False)
        ))
        loud = TargetViewEngine()
        for engine in (quiet, loud):
            engine.recompute(scenario_snapshot().snapshot())

        assert quiet.view(APPS, PLATFORMS).results == loud.view(APPS, PLATFORMS).results
        assert quiet.get_metrics() is None
        assert quiet.get_audit_report()["total_entries"] == 0
