"""
Observability Contracts

Immutable records handed to the observability layer. Layers emit
copies of these; nothing downstream reads them back to make decisions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class AuditEventType(Enum):
    """Explicit audit event types."""
    INDEX = "index"
    CLASSIFICATION = "classification"
    AGGREGATION = "aggregation"
    LAYOUT = "layout"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: datetime
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    generation: Optional[int] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def metadata_value(self, key: str) -> Optional[str]:
        for k, v in self.metadata:
            if k == key:
                return v
        return None


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
