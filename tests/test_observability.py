"""
Observability Tests
"""

from targetview.contracts.base import Error, ErrorCode
from targetview.contracts.events import AuditEventType
from targetview.observability import (
    LAYERS, MetricDefinition, MetricType, MetricsCollector,
    ObservabilityConfig, ObservabilityEngine,
)


class TestMetricsCollector:

    def test_default_metrics_registered(self):
        metrics = MetricsCollector()
        definition = metrics.definition("classify_duration_ms")
        assert definition.metric_type == MetricType.TIMING
        assert metrics.get_metric("recompute_total") == []

    def test_record_and_aggregate(self):
        metrics = MetricsCollector()
        for value in (2.0, 4.0, 6.0):
            metrics.record("project_duration_ms", value)

        stats = metrics.compute_aggregates("project_duration_ms")
        assert stats["count"] == 3
        assert stats["min"] == 2.0
        assert stats["avg"] == 4.0
        assert metrics.get_latest("project_duration_ms").value == 6.0

    def test_labels_sorted(self):
        metrics = MetricsCollector()
        metrics.record("classify_duration_ms", 1.0, {"secondary_lens": "b", "primary_lens": "a"})
        point = metrics.get_latest("classify_duration_ms")
        assert point.labels == (("primary_lens", "a"), ("secondary_lens", "b"))

    def test_custom_metric(self):
        metrics = MetricsCollector()
        metrics.register_metric(MetricDefinition("exports_total", MetricType.COUNTER, "SVG exports"))
        metrics.record("exports_total", 1)
        assert metrics.total("exports_total") == 1

    def test_empty_series_has_no_aggregates(self):
        assert MetricsCollector().compute_aggregates("recompute_total") == {}


class TestObservabilityEngine:

    def test_layer_collectors(self):
        obs = ObservabilityEngine()
        obs.log_audit("snapshot_indexed", layer="index", event_type=AuditEventType.INDEX, generation=1)
        obs.log_audit("classified", layer="classifier", event_type=AuditEventType.CLASSIFICATION,
                      generation=1)

        assert len(obs.get_layer_log("index")) == 1
        assert [e.action for e in obs.get_unified_log()] == ["snapshot_indexed", "classified"]
        assert obs.get_unified_log(layers=["classifier"])[0].layer == "classifier"
        assert set(LAYERS) >= {"index", "classifier"}

    def test_unknown_layer_ignored(self):
        obs = ObservabilityEngine()
        obs.log_audit("noise", layer="elsewhere")
        assert obs.get_unified_log() == []
        assert obs.get_layer_log("elsewhere") == []

    def test_log_error(self):
        obs = ObservabilityEngine()
        obs.log_error(Error.create(ErrorCode.DANGLING_RELATIONSHIP, "gone"), layer="index", generation=3)

        entry = obs.get_layer_log("index")[0]
        assert entry.event_type == AuditEventType.ERROR
        assert entry.action == "dangling_relationship"
        assert entry.generation == 3
        assert entry.metadata_value("details") == "gone"

    def test_audit_report(self):
        obs = ObservabilityEngine()
        obs.log_audit("a", layer="layout", event_type=AuditEventType.LAYOUT)
        obs.log_audit("b", layer="layout", event_type=AuditEventType.LAYOUT)

        report = obs.generate_audit_report()
        assert report["total_entries"] == 2
        assert report["by_layer"] == {"layout": 2}
        assert report["by_event_type"] == {"layout": 2}
        assert report["time_range"]["start"] is not None

    def test_disabled(self):
        obs = ObservabilityEngine(ObservabilityConfig(enable_metrics=False, enable_audit=False))
        obs.log_audit("a", layer="layout")
        obs.collect_metric("recompute_total", 1)

        assert obs.get_metrics() is None
        assert obs.generate_audit_report()["total_entries"] == 0
