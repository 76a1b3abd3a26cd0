"""
Observability & Audit Layer

RESPONSIBILITY: Audit logging and metrics for every recomputation
ALLOWED INPUTS: Audit entries and metric points from other layers
OUTPUTS: Per-layer audit logs, metric series, audit reports

WHAT THIS LAYER MUST NOT DO:
============================
- Modify classification, aggregation or layout results
- Filter or interpret events (only record them)
- Make decisions based on logged data
- Raise into the calling layer

BOUNDARY ENFORCEMENT:
=====================
- Receives immutable entries (frozen dataclasses)
- Provides read-only copies of logs and metrics
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple
import hashlib

from ..contracts.base import Error
from ..contracts.events import AuditEventType, AuditLogEntry, MetricPoint

LAYERS: Tuple[str, ...] = ('index', 'classifier', 'rollup', 'layout', 'engine')


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only audit collector for one layer.
    """

    def __init__(self, layer_name: str):
        self._layer_name = layer_name
        self._entries: List[AuditLogEntry] = []

    def collect(self, entry: AuditLogEntry):
        self._entries.append(entry)

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        generation: Optional[int] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if generation is not None:
            entries = [e for e in entries if e.generation == generation]
        return list(entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Append-only metric series, keyed by metric name.
    """

    def __init__(self):
        self._metrics: Dict[str, List[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        defaults = [
            MetricDefinition(
                name="recompute_total",
                metric_type=MetricType.COUNTER,
                description="Snapshots accepted by the engine"
            ),
            MetricDefinition(
                name="classify_duration_ms",
                metric_type=MetricType.TIMING,
                description="Classification time in milliseconds",
                labels=("primary_lens", "secondary_lens")
            ),
            MetricDefinition(
                name="aggregate_duration_ms",
                metric_type=MetricType.TIMING,
                description="Rollup aggregation time in milliseconds",
                labels=("mode",)
            ),
            MetricDefinition(
                name="project_duration_ms",
                metric_type=MetricType.TIMING,
                description="Layout projection time in milliseconds"
            ),
            MetricDefinition(
                name="dangling_relationships_total",
                metric_type=MetricType.COUNTER,
                description="Relationships dropped for a missing endpoint"
            ),
            MetricDefinition(
                name="superseded_generations_total",
                metric_type=MetricType.COUNTER,
                description="Results discarded because a newer snapshot arrived"
            ),
        ]
        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = []

    def definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        if metric_name not in self._metrics:
            self._metrics[metric_name] = []

        label_tuple = tuple(sorted(labels.items())) if labels else ()
        self._metrics[metric_name].append(MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=_now(),
            labels=label_tuple
        ))

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, []))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        points = self._metrics.get(metric_name, [])
        return points[-1] if points else None

    def total(self, metric_name: str) -> float:
        return sum(p.value for p in self._metrics.get(metric_name, []))

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """count/sum/min/max/avg over the recorded series."""
        values = [p.value for p in self._metrics.get(metric_name, [])]
        if not values:
            return {}
        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for observability engine."""
    enable_metrics: bool = True
    enable_audit: bool = True


class ObservabilityEngine:
    """
    Central Observability Engine.

    ONLY observes: every method returns None or a copy.
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, LogCollector] = {
            name: LogCollector(name) for name in LAYERS
        }
        self._metrics = MetricsCollector() if self._config.enable_metrics else None
        self._sequence = 0

    def collect_audit(self, entry: AuditLogEntry):
        if not self._config.enable_audit:
            return
        collector = self._collectors.get(entry.layer)
        if collector:
            collector.collect(entry)

    def log_audit(
        self,
        action: str,
        layer: str = "engine",
        event_type: AuditEventType = AuditEventType.SYSTEM,
        entity_id: Optional[str] = None,
        generation: Optional[int] = None,
        outcome: str = "success",
        details: str = ""
    ):
        """Helper to log audit entry directly."""
        self._sequence += 1
        digest = hashlib.sha256(
            f"{layer}_{action}|{self._sequence}|{_now().timestamp()}".encode()
        ).hexdigest()[:16]

        self.collect_audit(AuditLogEntry(
            entry_id=f"audit_{digest}",
            event_type=event_type,
            timestamp=_now(),
            layer=layer,
            action=action,
            entity_id=entity_id,
            generation=generation,
            metadata=(
                ("outcome", outcome),
                ("details", details)
            )
        ))

    def log_error(self, error: Error, layer: str, generation: Optional[int] = None):
        """Record a reportable condition as an ERROR audit entry."""
        self.log_audit(
            action=error.code.name.lower(),
            layer=layer,
            event_type=AuditEventType.ERROR,
            generation=generation,
            outcome="reported",
            details=error.message
        )

    def collect_metric(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        if self._metrics:
            self._metrics.record(metric_name, value, labels)

    def get_unified_log(self, layers: Optional[List[str]] = None) -> List[AuditLogEntry]:
        """Entries from all (or selected) layers, oldest first."""
        target_layers = layers or list(self._collectors.keys())
        entries: List[AuditLogEntry] = []
        for layer_name in target_layers:
            collector = self._collectors.get(layer_name)
            if collector:
                entries.extend(collector.get_entries())
        entries.sort(key=lambda e: e.timestamp)
        return entries

    def get_layer_log(self, layer_name: str) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        if not collector:
            return []
        return collector.get_entries()

    def get_metrics(self) -> Optional[MetricsCollector]:
        return self._metrics

    def generate_audit_report(self) -> Dict:
        """Counts by layer and event type plus the covered time span."""
        entries = self.get_unified_log()

        by_layer: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1

        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_event_type': by_type,
            'time_range': {
                'start': entries[0].timestamp.isoformat() if entries else None,
                'end': entries[-1].timestamp.isoformat() if entries else None,
            },
            'generated_at': _now().isoformat()
        }


__all__ = [
    'LAYERS',
    'LogCollector', 'MetricType', 'MetricDefinition', 'MetricsCollector',
    'ObservabilityConfig', 'ObservabilityEngine',
]
