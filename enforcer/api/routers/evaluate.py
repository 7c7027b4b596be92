"""
/evaluate — single evaluations, batch run plans and per-gate explanations.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ...actions.notifications import build_notification
from ...api.schemas import (
    CandidateIn,
    CostIn,
    EnforcementActionOut,
    EvaluateRequest,
    EvaluationOut,
    ExplainOut,
    GateTraceOut,
    RunPlanOut,
    RunRequest,
    UsageIn,
    WorkloadIn,
)
from ...policy.models import Policy
from ...policy.planner import Candidate, plan_run
from ...policy.results import EnforcementAction, EvaluationResult
from ...workload.annotations import pause_annotations
from ...workload.models import CostSample, UsageSample, Workload

router = APIRouter(prefix="/evaluate", tags=["evaluate"])


def _get_engine(request: Request):
    return request.app.state.engine


def _get_store(request: Request):
    return request.app.state.store


# ── Conversion helpers ──────────────────────────────────────────────────────

def _resolve_policy(req, store) -> Policy:
    if req.policy is not None:
        return req.policy
    if not req.policy_name:
        raise HTTPException(status_code=422, detail="Either policy or policy_name is required")
    policy = store.get(req.policy_name)
    if policy is None:
        raise HTTPException(status_code=404, detail=f"Policy not found: {req.policy_name!r}")
    return policy


def _workload(w: WorkloadIn) -> Workload:
    return Workload(
        namespace=w.namespace,
        name=w.name,
        labels=dict(w.labels),
        annotations=dict(w.annotations),
        replicas=w.replicas,
        kind=w.kind,
    )


def _cost(c: CostIn) -> CostSample:
    return CostSample(hourly_cost=c.hourly_cost, currency=c.currency)


def _usage(u: Optional[UsageIn]) -> Optional[UsageSample]:
    if u is None:
        return None
    return UsageSample(
        requests_per_minute=u.requests_per_minute,
        cpu_percent=u.cpu_percent,
        memory_percent=u.memory_percent,
    )


def _candidate(c: CandidateIn) -> Candidate:
    return Candidate(workload=_workload(c.workload), cost=_cost(c.cost), usage=_usage(c.usage))


def _action_out(a: EnforcementAction) -> EnforcementActionOut:
    return EnforcementActionOut(
        type=a.type.value,
        workload=a.workload,
        original_replicas=a.original_replicas,
        reason=a.reason,
        estimated_monthly_savings=a.estimated_monthly_savings,
        policy=a.policy,
        dry_run=a.dry_run,
    )


def _evaluation_out(r: EvaluationResult) -> EvaluationOut:
    return EvaluationOut(
        policy=r.policy.name,
        workload=r.workload.ref,
        matched=r.matched,
        reason=r.reason,
        hourly_cost=r.cost.hourly_cost,
        evaluated_at=r.evaluated_at,
        action=_action_out(r.action) if r.action else None,
        annotations=pause_annotations(r.action, r.evaluated_at) if r.action else {},
        notification=build_notification(r),
    )


# ── Endpoints ───────────────────────────────────────────────────────────────

@router.post("", response_model=EvaluationOut)
def evaluate(
    req: EvaluateRequest,
    engine=Depends(_get_engine),
    store=Depends(_get_store),
):
    """Evaluate one workload against a policy."""
    policy = _resolve_policy(req, store)
    result = engine.evaluate(
        policy,
        _workload(req.workload),
        _cost(req.cost),
        now=req.now,
        usage=_usage(req.usage),
    )
    return _evaluation_out(result)


@router.post("/run", response_model=RunPlanOut)
def run(
    req: RunRequest,
    engine=Depends(_get_engine),
    store=Depends(_get_store),
):
    """Evaluate a batch of candidates and apply the policy's per-run action cap."""
    policy = _resolve_policy(req, store)
    plan = plan_run(engine, policy, [_candidate(c) for c in req.candidates], now=req.now)
    return RunPlanOut(
        policy=plan.policy,
        evaluated_at=plan.evaluated_at,
        results=[_evaluation_out(r) for r in plan.results],
        actions=[_action_out(a) for a in plan.actions],
        deferred=[_action_out(a) for a in plan.deferred],
        estimated_monthly_savings=plan.estimated_monthly_savings,
    )


@router.post("/explain", response_model=ExplainOut)
def explain(
    req: EvaluateRequest,
    engine=Depends(_get_engine),
    store=Depends(_get_store),
):
    """Show every gate's outcome without short-circuiting."""
    policy = _resolve_policy(req, store)
    workload = _workload(req.workload)
    trace = engine.explain(
        policy, workload, _cost(req.cost), now=req.now, usage=_usage(req.usage)
    )
    return ExplainOut(
        policy=policy.name,
        workload=workload.ref,
        gates=[GateTraceOut(**t) for t in trace],
    )
