"""
Run Planner — evaluates a batch of candidate workloads for one policy and
decides which matches become actions in this run.

The engine has no notion of ordering across workloads; the planner does:
matches are ranked by estimated monthly savings (highest first, ties keep
input order) and the policy's maxActionsPerRun cap is applied to that
ranking. Matches beyond the cap are deferred to a later run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..workload.models import CostSample, UsageSample, Workload
from .engine import PolicyEngine
from .models import Policy
from .results import EnforcementAction, EvaluationResult


@dataclass
class Candidate:
    workload: Workload
    cost: CostSample
    usage: Optional[UsageSample] = None


@dataclass
class RunPlan:
    policy: str
    evaluated_at: datetime
    results: List[EvaluationResult] = field(default_factory=list)
    actions: List[EnforcementAction] = field(default_factory=list)
    deferred: List[EnforcementAction] = field(default_factory=list)

    @property
    def estimated_monthly_savings(self) -> float:
        return sum(a.estimated_monthly_savings for a in self.actions)


def rank_actions(actions: List[EnforcementAction]) -> List[EnforcementAction]:
    """Highest savings first; sorted() is stable so ties keep input order."""
    return sorted(actions, key=lambda a: a.estimated_monthly_savings, reverse=True)


def plan_run(
    engine: PolicyEngine,
    policy: Policy,
    candidates: Iterable[Candidate],
    *,
    now: Optional[datetime] = None,
) -> RunPlan:
    # every candidate in a run sees the same instant
    if now is None:
        now = engine.now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    results = [
        engine.evaluate(policy, c.workload, c.cost, now=now, usage=c.usage)
        for c in candidates
    ]

    ranked = rank_actions([r.action for r in results if r.action is not None])
    limit = policy.enforcement.max_actions_per_run
    if limit > 0:
        actions, deferred = ranked[:limit], ranked[limit:]
    else:
        actions, deferred = ranked, []

    return RunPlan(
        policy=policy.name,
        evaluated_at=now,
        results=results,
        actions=actions,
        deferred=deferred,
    )
