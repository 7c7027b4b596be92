"""
Policy Engine — runs the gate registry against one (policy, workload, cost)
triple and, on a full match, builds the scale-to-zero action.

The engine is stateless and reentrant: independent evaluations may run in
parallel. The wall clock is read once per call and shared by all gates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from ..cost.projection import format_duration, monthly_savings
from ..reporting import EvaluationReporter, NullReporter
from ..workload.models import CostSample, UsageSample, Workload
from .gates import GATES, EvaluationContext, Gate
from .models import Policy
from .results import EnforcementAction, EvaluationResult

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_match_reason(policy: Policy, cost: CostSample) -> str:
    return (
        f"Idle for at least {format_duration(policy.conditions.idle_window)}, "
        f"hourly cost: ${cost.hourly_cost:.2f}"
    )


class PolicyEngine:
    """
    Evaluates a workload against a policy's gates in registry order and
    short-circuits at the first failure.
    """

    def __init__(
        self,
        reporter: Optional[EvaluationReporter] = None,
        clock: Callable[[], datetime] = _utcnow,
        gates: Optional[List[Gate]] = None,
    ):
        self._reporter = reporter or NullReporter()
        self._clock = clock
        self._gates = GATES if gates is None else gates

    def evaluate(
        self,
        policy: Policy,
        workload: Workload,
        cost: CostSample,
        *,
        now: Optional[datetime] = None,
        usage: Optional[UsageSample] = None,
    ) -> EvaluationResult:
        ctx = self._context(policy, workload, cost, now, usage)

        failed = next(
            (g for g in self._gates if g.applies(ctx) and not g.check(ctx)),
            None,
        )
        if failed is not None:
            result = EvaluationResult(
                policy=policy,
                workload=workload,
                cost=cost,
                matched=False,
                reason=failed.reason,
                evaluated_at=ctx.now,
            )
        else:
            reason = build_match_reason(policy, cost)
            result = EvaluationResult(
                policy=policy,
                workload=workload,
                cost=cost,
                matched=True,
                reason=reason,
                evaluated_at=ctx.now,
                action=EnforcementAction(
                    type=policy.actions.type,
                    workload=workload.ref,
                    original_replicas=workload.replicas,
                    reason=reason,
                    estimated_monthly_savings=monthly_savings(cost.hourly_cost),
                    policy=policy.name,
                    dry_run=policy.enforcement.dry_run,
                ),
            )

        logger.debug(
            "policy_evaluated",
            policy=policy.name,
            workload=workload.ref,
            matched=result.matched,
            reason=result.reason,
        )
        self._reporter.record(result)
        return result

    def explain(
        self,
        policy: Policy,
        workload: Workload,
        cost: CostSample,
        *,
        now: Optional[datetime] = None,
        usage: Optional[UsageSample] = None,
    ) -> List[dict]:
        """Per-gate trace without short-circuiting: name, outcome, reason."""
        ctx = self._context(policy, workload, cost, now, usage)
        trace = []
        for gate in self._gates:
            if not gate.applies(ctx):
                outcome = "skipped"
            else:
                outcome = "pass" if gate.check(ctx) else "fail"
            trace.append({
                "gate": gate.name,
                "outcome": outcome,
                "reason": gate.reason if outcome == "fail" else "",
            })
        return trace

    def now(self) -> datetime:
        return self._clock()

    def _context(self, policy, workload, cost, now, usage) -> EvaluationContext:
        if now is None:
            now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return EvaluationContext(
            policy=policy,
            workload=workload,
            state=workload.state(),
            cost=cost,
            now=now,
            usage=usage,
        )
