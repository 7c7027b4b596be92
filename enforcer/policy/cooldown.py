"""
Cooldown Tracker — minimum spacing between enforcement actions on a workload.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..workload.annotations import WorkloadState

# Missing or unparsable paused-at timestamp: never acted before
COOLDOWN_EXPIRED_WHEN_UNKNOWN = True


def is_cooldown_expired(state: WorkloadState, cooldown_window: timedelta, now: datetime) -> bool:
    if cooldown_window <= timedelta(0):
        return True
    if state.paused_at is None:
        return COOLDOWN_EXPIRED_WHEN_UNKNOWN
    return now - state.paused_at >= cooldown_window
