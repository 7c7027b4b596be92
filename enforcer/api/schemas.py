"""
Pydantic schemas for the enforcer HTTP API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..policy.models import Policy

# ── Inputs ─────────────────────────────────────────────────────────────────

class WorkloadIn(BaseModel):
    namespace: str
    name: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    replicas: int = Field(1, ge=0)
    kind: str = "Deployment"


class CostIn(BaseModel):
    hourly_cost: float
    currency: str = "USD"


class UsageIn(BaseModel):
    requests_per_minute: Optional[float] = None
    cpu_percent: Optional[float] = None
    memory_percent: Optional[float] = None


class _PolicyRef(BaseModel):
    policy_name: Optional[str] = Field(None, description="Name of a stored policy")
    policy: Optional[Policy] = Field(None, description="Inline policy, wins over policy_name")
    now: Optional[datetime] = Field(None, description="Evaluation instant; defaults to the server clock")


class EvaluateRequest(_PolicyRef):
    workload: WorkloadIn
    cost: CostIn
    usage: Optional[UsageIn] = None


class CandidateIn(BaseModel):
    workload: WorkloadIn
    cost: CostIn
    usage: Optional[UsageIn] = None


class RunRequest(_PolicyRef):
    candidates: List[CandidateIn]


# ── Outputs ────────────────────────────────────────────────────────────────

class EnforcementActionOut(BaseModel):
    type: str
    workload: str
    original_replicas: int
    reason: str
    estimated_monthly_savings: float
    policy: str
    dry_run: bool


class EvaluationOut(BaseModel):
    policy: str
    workload: str
    matched: bool
    reason: str
    hourly_cost: float
    evaluated_at: datetime
    action: Optional[EnforcementActionOut] = None
    annotations: Dict[str, str] = Field(
        default_factory=dict,
        description="Annotation patch to write back after applying the action",
    )
    notification: Optional[Dict[str, Any]] = None


class RunPlanOut(BaseModel):
    policy: str
    evaluated_at: datetime
    results: List[EvaluationOut]
    actions: List[EnforcementActionOut]
    deferred: List[EnforcementActionOut]
    estimated_monthly_savings: float


class GateTraceOut(BaseModel):
    gate: str
    outcome: str = Field(..., description="pass | fail | skipped")
    reason: str


class ExplainOut(BaseModel):
    policy: str
    workload: str
    gates: List[GateTraceOut]
