"""
Evaluation reporting — the engine hands every verdict to an injected reporter
instead of bumping process-wide counters.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Any, Dict, Protocol

from .policy.results import EvaluationResult


class EvaluationReporter(Protocol):
    def record(self, result: EvaluationResult) -> None: ...


class NullReporter:
    def record(self, result: EvaluationResult) -> None:
        return None


class EvaluationStats:
    """Thread-safe in-memory counters, shared by every request of one app."""

    def __init__(self):
        self._lock = threading.Lock()
        self._evaluations = 0
        self._matches: Counter = Counter()           # policy → count
        self._actions: Counter = Counter()           # (policy, dry_run) → count
        self._skip_reasons: Counter = Counter()      # reason → count
        self._savings = 0.0

    def record(self, result: EvaluationResult) -> None:
        with self._lock:
            self._evaluations += 1
            if not result.matched:
                self._skip_reasons[result.reason] += 1
                return
            self._matches[result.policy.name] += 1
            action = result.action
            if action is not None:
                self._actions[(action.policy, action.dry_run)] += 1
                if not action.dry_run:
                    self._savings += action.estimated_monthly_savings

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "evaluations": self._evaluations,
                "matches": dict(self._matches),
                "actions": [
                    {"policy": policy, "dry_run": dry_run, "count": count}
                    for (policy, dry_run), count in sorted(self._actions.items())
                ],
                "skip_reasons": dict(self._skip_reasons),
                "estimated_monthly_savings": self._savings,
            }
