"""
Workload snapshots and the per-evaluation samples supplied by collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .annotations import WorkloadState


@dataclass
class Workload:
    """A horizontally scalable unit of compute, e.g. a Deployment."""
    namespace: str
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    replicas: int = 1
    kind: str = "Deployment"

    @property
    def ref(self) -> str:
        return f"{self.namespace}/{self.name}"

    def state(self) -> WorkloadState:
        return WorkloadState.from_annotations(self.annotations)


@dataclass(frozen=True)
class CostSample:
    """Point-in-time hourly cost for one workload. No history."""
    hourly_cost: float
    currency: str = "USD"
    observed_at: Optional[datetime] = None


@dataclass(frozen=True)
class UsageSample:
    """Activity figures from a telemetry collaborator; any field may be unknown."""
    requests_per_minute: Optional[float] = None
    cpu_percent: Optional[float] = None
    memory_percent: Optional[float] = None
