"""Tests for the policy evaluation engine (gate ordering, reasons, actions)."""

from datetime import datetime, timedelta, timezone

import pytest

from enforcer.policy.engine import PolicyEngine, build_match_reason
from enforcer.policy.gates import GATES
from enforcer.policy.models import ActionType, Policy
from enforcer.reporting import EvaluationStats
from enforcer.workload.models import CostSample, UsageSample, Workload

NOW = datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)   # Monday


def _policy(**spec) -> Policy:
    base = {
        "name": "dev-idle",
        "scope": {"namespaces": {"include": ["dev-*"]}},
        "conditions": {"idleWindow": "24h", "minHourlyCost": 1.0},
    }
    base.update(spec)
    return Policy.model_validate(base)


def _workload(namespace="dev-a", labels=None, replicas=3, **annotations) -> Workload:
    return Workload(
        namespace=namespace,
        name="api",
        labels=labels or {},
        annotations={f"finops.io/{k.replace('_', '-')}": v for k, v in annotations.items()},
        replicas=replicas,
    )


def _idle_48h() -> dict:
    return {"last_activity": "2024-01-13T14:00:00Z"}


class TestGateOrder:
    engine = PolicyEngine()

    def test_registry_order(self):
        assert [g.name for g in GATES] == [
            "paused", "excluded", "namespace", "labels", "cost",
            "idle", "usage", "schedule", "cooldown",
        ]

    def test_paused_workload(self):
        r = self.engine.evaluate(_policy(), _workload(paused="true"), CostSample(5.0), now=NOW)
        assert r.matched is False
        assert r.reason == "already paused"
        assert r.action is None

    def test_paused_checked_before_exclusion_and_scope(self):
        w = _workload(namespace="prod", paused="true", exclude="true")
        r = self.engine.evaluate(_policy(), w, CostSample(0.0), now=NOW)
        assert r.reason == "already paused"

    def test_paused_flag_must_be_literal_true(self):
        r = self.engine.evaluate(
            _policy(), _workload(paused="false", **_idle_48h()), CostSample(5.0), now=NOW
        )
        assert r.matched is True

    def test_excluded_by_annotation(self):
        r = self.engine.evaluate(_policy(), _workload(exclude="true"), CostSample(5.0), now=NOW)
        assert r.reason == "excluded by annotation"

    def test_namespace_not_in_scope(self):
        r = self.engine.evaluate(_policy(), _workload(namespace="prod"), CostSample(5.0), now=NOW)
        assert r.reason == "namespace not in scope"

    def test_labels_do_not_match(self):
        p = _policy(scope={
            "namespaces": {"include": ["dev-*"]},
            "labels": {"match": {"env": "dev"}},
        })
        r = self.engine.evaluate(p, _workload(labels={"env": "prod"}), CostSample(5.0), now=NOW)
        assert r.reason == "labels do not match"

    def test_cost_below_threshold(self):
        p = _policy(conditions={"idleWindow": "24h", "minHourlyCost": 5.0})
        r = self.engine.evaluate(p, _workload(), CostSample(3.0), now=NOW)
        assert r.matched is False
        assert r.reason == "cost below threshold"

    def test_cost_checked_before_idle(self):
        p = _policy(conditions={"idleWindow": "24h", "minHourlyCost": 5.0})
        w = _workload(last_activity="2024-01-15T13:00:00Z")
        r = self.engine.evaluate(p, w, CostSample(3.0), now=NOW)
        assert r.reason == "cost below threshold"

    def test_not_idle_long_enough(self):
        w = _workload(last_activity="2024-01-15T13:00:00Z")
        r = self.engine.evaluate(_policy(), w, CostSample(5.0), now=NOW)
        assert r.reason == "not idle long enough"

    def test_usage_above_threshold(self):
        p = _policy(conditions={
            "idleWindow": "24h", "minHourlyCost": 1.0,
            "trafficThreshold": {"requestsPerMinute": 0},
        })
        w = _workload(**_idle_48h())
        r = self.engine.evaluate(
            p, w, CostSample(5.0), now=NOW, usage=UsageSample(requests_per_minute=12)
        )
        assert r.reason == "activity above idle threshold"
        # without a usage sample the thresholds stay declarative
        assert self.engine.evaluate(p, w, CostSample(5.0), now=NOW).matched is True

    def test_outside_scheduled_hours(self):
        p = _policy(schedule={
            "timezone": "UTC",
            "activeHours": [{"days": ["Sat", "Sun"], "hours": [0, 23]}],
        })
        r = self.engine.evaluate(p, _workload(**_idle_48h()), CostSample(5.0), now=NOW)
        assert r.reason == "outside scheduled hours"

    def test_invalid_timezone_schedule_passes(self):
        p = _policy(schedule={
            "timezone": "Invalid/Zone",
            "activeHours": [{"days": ["Sat"], "hours": [0, 1]}],
        })
        r = self.engine.evaluate(p, _workload(**_idle_48h()), CostSample(5.0), now=NOW)
        assert r.matched is True

    def test_cooldown_not_expired(self):
        p = _policy(enforcement={"cooldownWindow": "6h"})
        w = _workload(paused_at="2024-01-15T12:00:00Z", **_idle_48h())
        r = self.engine.evaluate(p, w, CostSample(5.0), now=NOW)
        assert r.reason == "cooldown not expired"

    def test_zero_cooldown_ignores_recent_action(self):
        w = _workload(paused_at="2024-01-15T13:59:00Z", **_idle_48h())
        r = self.engine.evaluate(_policy(), w, CostSample(5.0), now=NOW)
        assert r.matched is True

    def test_no_scope_means_every_namespace(self):
        p = Policy.model_validate({
            "name": "all",
            "conditions": {"idleWindow": "1h", "minHourlyCost": 0},
        })
        r = self.engine.evaluate(p, _workload(namespace="anything"), CostSample(0.1), now=NOW)
        assert r.matched is True


class TestFullMatch:
    engine = PolicyEngine()

    def test_full_match_builds_action(self):
        w = _workload(replicas=3, **_idle_48h())
        r = self.engine.evaluate(_policy(), w, CostSample(2.0), now=NOW)
        assert r.matched is True
        a = r.action
        assert a is not None
        assert a.type == ActionType.SCALE_TO_ZERO
        assert a.workload == "dev-a/api"
        assert a.original_replicas == 3
        assert a.estimated_monthly_savings == 1460.0
        assert a.policy == "dev-idle"
        assert a.dry_run is False
        assert a.reason == r.reason == "Idle for at least 1d, hourly cost: $2.00"

    def test_dry_run_copied_from_policy(self):
        p = _policy(enforcement={"dryRun": True})
        r = self.engine.evaluate(p, _workload(**_idle_48h()), CostSample(2.0), now=NOW)
        assert r.action.dry_run is True

    def test_missing_activity_matches(self):
        r = self.engine.evaluate(_policy(), _workload(), CostSample(2.0), now=NOW)
        assert r.matched is True

    def test_reason_text(self):
        p = _policy(conditions={"idleWindow": "36h", "minHourlyCost": 0.5})
        assert build_match_reason(p, CostSample(0.125)) == "Idle for at least 36h, hourly cost: $0.12"


class TestProperties:
    def test_idempotent_for_same_now(self):
        engine = PolicyEngine()
        p, w, c = _policy(), _workload(**_idle_48h()), CostSample(2.0)
        assert engine.evaluate(p, w, c, now=NOW) == engine.evaluate(p, w, c, now=NOW)

    @pytest.mark.parametrize("base", [0.0, 0.5, 1.0, 3.0])
    def test_monotonic_in_cost(self, base):
        engine = PolicyEngine()
        p, w = _policy(), _workload(**_idle_48h())
        before = engine.evaluate(p, w, CostSample(base), now=NOW).matched
        after = engine.evaluate(p, w, CostSample(base + 10.0), now=NOW).matched
        assert not (before and not after)

    def test_clock_read_once_per_evaluation(self):
        calls = []

        def clock():
            calls.append(1)
            return NOW + timedelta(minutes=len(calls))

        engine = PolicyEngine(clock=clock)
        p = _policy(
            schedule={"timezone": "UTC", "activeHours": [{"days": ["Mon"], "hours": [0, 23]}]},
            enforcement={"cooldownWindow": "1h"},
        )
        r = engine.evaluate(p, _workload(**_idle_48h()), CostSample(2.0))
        assert len(calls) == 1
        assert r.evaluated_at == NOW + timedelta(minutes=1)

    def test_naive_now_is_utc(self):
        r = PolicyEngine().evaluate(
            _policy(), _workload(), CostSample(2.0), now=datetime(2024, 1, 15, 14, 0)
        )
        assert r.evaluated_at == NOW

    def test_naive_clock_is_utc(self):
        engine = PolicyEngine(clock=lambda: datetime(2024, 1, 15, 14, 0))
        r = engine.evaluate(_policy(), _workload(**_idle_48h()), CostSample(2.0))
        assert r.matched is True
        assert r.evaluated_at == NOW

    def test_inputs_are_not_mutated(self):
        w = _workload(**_idle_48h())
        before = dict(w.annotations), w.replicas
        PolicyEngine().evaluate(_policy(), w, CostSample(2.0), now=NOW)
        assert (dict(w.annotations), w.replicas) == before


class TestReporting:
    def test_reporter_receives_every_verdict(self):
        stats = EvaluationStats()
        engine = PolicyEngine(reporter=stats)
        engine.evaluate(_policy(), _workload(**_idle_48h()), CostSample(2.0), now=NOW)
        engine.evaluate(_policy(), _workload(paused="true"), CostSample(2.0), now=NOW)
        engine.evaluate(
            _policy(enforcement={"dryRun": True}), _workload(), CostSample(1.0), now=NOW
        )
        snap = stats.snapshot()
        assert snap["evaluations"] == 3
        assert snap["matches"] == {"dev-idle": 2}
        assert snap["skip_reasons"] == {"already paused": 1}
        assert snap["actions"] == [
            {"policy": "dev-idle", "dry_run": False, "count": 1},
            {"policy": "dev-idle", "dry_run": True, "count": 1},
        ]
        # dry-run savings are not counted
        assert snap["estimated_monthly_savings"] == 1460.0


class TestExplain:
    def test_trace_covers_every_gate(self):
        engine = PolicyEngine()
        w = _workload(namespace="prod", exclude="true")
        trace = engine.explain(_policy(), w, CostSample(0.5), now=NOW)
        outcomes = {t["gate"]: t["outcome"] for t in trace}
        assert outcomes == {
            "paused": "pass",
            "excluded": "fail",
            "namespace": "fail",
            "labels": "skipped",
            "cost": "fail",
            "idle": "pass",
            "usage": "skipped",
            "schedule": "skipped",
            "cooldown": "skipped",
        }
        reasons = [t["reason"] for t in trace if t["outcome"] == "fail"]
        assert reasons == ["excluded by annotation", "namespace not in scope", "cost below threshold"]

    def test_explain_does_not_report(self):
        stats = EvaluationStats()
        PolicyEngine(reporter=stats).explain(_policy(), _workload(), CostSample(1.0), now=NOW)
        assert stats.snapshot()["evaluations"] == 0
