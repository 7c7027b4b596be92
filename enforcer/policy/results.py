"""
Evaluation output records. Freshly built per call and owned by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..workload.models import CostSample, Workload
from .models import ActionType, Policy


@dataclass(frozen=True)
class EnforcementAction:
    type: ActionType
    workload: str                    # "namespace/name"
    original_replicas: int           # restored on reactivation
    reason: str
    estimated_monthly_savings: float
    policy: str
    dry_run: bool


@dataclass(frozen=True)
class EvaluationResult:
    policy: Policy
    workload: Workload
    cost: CostSample
    matched: bool
    reason: str
    evaluated_at: datetime
    action: Optional[EnforcementAction] = None
