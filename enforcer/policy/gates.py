"""
Evaluation Gates — declarative, ordered gate definitions.

Each gate is one boolean check over an EvaluationContext. Optional gates
declare when they apply; a gate that does not apply is skipped (passes).
The registry order is the evaluation order and must not be changed: the
first failing gate fixes the verdict's reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..workload.annotations import WorkloadState
from ..workload.models import CostSample, UsageSample, Workload
from .cooldown import is_cooldown_expired
from .idle import is_idle_long_enough, is_quiet
from .models import Policy
from .schedule import is_within_schedule
from .scope import labels_match, namespace_in_scope

REASON_PAUSED = "already paused"
REASON_EXCLUDED = "excluded by annotation"
REASON_NAMESPACE = "namespace not in scope"
REASON_LABELS = "labels do not match"
REASON_COST = "cost below threshold"
REASON_NOT_IDLE = "not idle long enough"
REASON_ACTIVE = "activity above idle threshold"
REASON_SCHEDULE = "outside scheduled hours"
REASON_COOLDOWN = "cooldown not expired"


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs for one evaluation; ``now`` is shared by every gate."""
    policy: Policy
    workload: Workload
    state: WorkloadState
    cost: CostSample
    now: datetime
    usage: Optional[UsageSample] = None


@dataclass(frozen=True)
class Gate:
    name: str
    reason: str                                   # recorded when the check fails
    check: Callable[[EvaluationContext], bool]
    applies: Callable[[EvaluationContext], bool] = lambda ctx: True


def _has_label_filter(ctx: EvaluationContext) -> bool:
    return ctx.policy.scope is not None and ctx.policy.scope.labels is not None


def _has_usage_thresholds(ctx: EvaluationContext) -> bool:
    c = ctx.policy.conditions
    return ctx.usage is not None and (
        c.traffic_threshold is not None or c.utilization_threshold is not None
    )


# ---------------------------------------------------------------------------
# Gate registry: evaluated top to bottom, first failure wins
# ---------------------------------------------------------------------------

GATES: List[Gate] = [

    Gate(
        name="paused",
        reason=REASON_PAUSED,
        check=lambda ctx: not ctx.state.paused,
    ),

    Gate(
        name="excluded",
        reason=REASON_EXCLUDED,
        check=lambda ctx: not ctx.state.excluded,
    ),

    Gate(
        name="namespace",
        reason=REASON_NAMESPACE,
        applies=lambda ctx: ctx.policy.scope is not None,
        check=lambda ctx: namespace_in_scope(
            ctx.workload.namespace, ctx.policy.scope.namespaces
        ),
    ),

    Gate(
        name="labels",
        reason=REASON_LABELS,
        applies=_has_label_filter,
        check=lambda ctx: labels_match(ctx.workload.labels, ctx.policy.scope.labels),
    ),

    Gate(
        name="cost",
        reason=REASON_COST,
        check=lambda ctx: ctx.cost.hourly_cost >= ctx.policy.conditions.min_hourly_cost,
    ),

    Gate(
        name="idle",
        reason=REASON_NOT_IDLE,
        check=lambda ctx: is_idle_long_enough(
            ctx.state, ctx.policy.conditions.idle_window, ctx.now
        ),
    ),

    Gate(
        name="usage",
        reason=REASON_ACTIVE,
        applies=_has_usage_thresholds,
        check=lambda ctx: is_quiet(ctx.policy.conditions, ctx.usage),
    ),

    Gate(
        name="schedule",
        reason=REASON_SCHEDULE,
        applies=lambda ctx: ctx.policy.schedule is not None,
        check=lambda ctx: is_within_schedule(ctx.policy.schedule, ctx.now),
    ),

    Gate(
        name="cooldown",
        reason=REASON_COOLDOWN,
        applies=lambda ctx: ctx.policy.enforcement.cooldown_window.total_seconds() > 0,
        check=lambda ctx: is_cooldown_expired(
            ctx.state, ctx.policy.enforcement.cooldown_window, ctx.now
        ),
    ),
]
