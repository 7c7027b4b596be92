"""
Idle Detector — has the workload been inactive for at least the idle window?

With no recorded activity the workload counts as idle: no observed activity
means eligible. This is aggressive by intent; callers that cannot tolerate it
should stamp ``finops.io/last-activity`` before evaluating.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional

from ..workload.annotations import WorkloadState
from ..workload.models import UsageSample
from .models import ConditionsSpec

# Missing or unparsable last-activity timestamp
IDLE_WHEN_UNKNOWN = True

_PERCENT = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%?\s*$")


def is_idle_long_enough(state: WorkloadState, idle_window: timedelta, now: datetime) -> bool:
    if state.last_activity is None:
        return IDLE_WHEN_UNKNOWN
    return now - state.last_activity >= idle_window


def parse_percent(value: Optional[str]) -> Optional[float]:
    """Parse a threshold like "5%" into 5.0; None when missing or unparsable."""
    if not value:
        return None
    m = _PERCENT.match(value)
    return float(m.group(1)) if m else None


def is_quiet(conditions: ConditionsSpec, usage: Optional[UsageSample]) -> bool:
    """
    Check the traffic / utilization thresholds against a usage sample.

    Thresholds are only consulted when the telemetry collaborator supplied a
    sample; an unknown figure or an unparsable threshold is not held against
    the workload. A figure at or below its threshold counts as quiet.
    """
    if usage is None:
        return True

    traffic = conditions.traffic_threshold
    if traffic is not None and usage.requests_per_minute is not None:
        if usage.requests_per_minute > traffic.requests_per_minute:
            return False

    utilization = conditions.utilization_threshold
    if utilization is not None:
        cpu_max = parse_percent(utilization.cpu)
        if cpu_max is not None and usage.cpu_percent is not None and usage.cpu_percent > cpu_max:
            return False
        mem_max = parse_percent(utilization.memory)
        if mem_max is not None and usage.memory_percent is not None and usage.memory_percent > mem_max:
            return False

    return True
