"""
Policy schema — immutable pydantic models for EnforcementPolicy manifests.

Field names follow the manifest's camelCase keys (``idleWindow``,
``minHourlyCost`` …) but can also be populated by their snake_case names.
"""

from __future__ import annotations

import re
from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Go-style durations: "24h", "1h30m", "90s", "250ms"
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Any) -> Any:
    """Accept a timedelta, a number of seconds, a Go-style or an ISO 8601 duration."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    if text.startswith(("P", "-P")):
        # ISO 8601 ("P1D", "PT30M"); left to pydantic's own timedelta parsing
        return text
    if text == "0":
        return timedelta(0)
    total = 0.0
    pos = 0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(text) or pos == 0:
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=total)


Duration = Annotated[timedelta, BeforeValidator(parse_duration)]


class _Spec(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ── Scope ──────────────────────────────────────────────────────────────────

class NamespaceFilter(_Spec):
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class LabelFilter(_Spec):
    match: Optional[Dict[str, str]] = None
    exclude: Optional[Dict[str, str]] = None


class ScopeSpec(_Spec):
    namespaces: NamespaceFilter
    labels: Optional[LabelFilter] = None


# ── Conditions ─────────────────────────────────────────────────────────────

class TrafficThreshold(_Spec):
    requests_per_minute: int = Field(..., ge=0)


class UtilizationThreshold(_Spec):
    cpu: Optional[str] = None        # e.g. "5%"
    memory: Optional[str] = None


class ConditionsSpec(_Spec):
    idle_window: Duration
    min_hourly_cost: float = Field(..., ge=0.0)
    traffic_threshold: Optional[TrafficThreshold] = None
    utilization_threshold: Optional[UtilizationThreshold] = None


# ── Actions / enforcement ──────────────────────────────────────────────────

class ActionType(str, Enum):
    SCALE_TO_ZERO = "scaleToZero"


class NotifyType(str, Enum):
    SLACK = "slack"
    NONE = "none"


class ActionsSpec(_Spec):
    type: ActionType = ActionType.SCALE_TO_ZERO
    notify: NotifyType = NotifyType.NONE
    reactivation_allowed: bool = False


class EnforcementSpec(_Spec):
    dry_run: bool = False
    max_actions_per_run: int = Field(0, ge=0)     # 0 = unlimited
    cooldown_window: Duration = timedelta(0)


# ── Schedule ───────────────────────────────────────────────────────────────

class ActiveHours(_Spec):
    days: List[str] = Field(default_factory=list)   # "Mon" … "Sun"
    hours: List[int] = Field(default_factory=list)  # [start, end], inclusive


class ScheduleSpec(_Spec):
    timezone: str
    active_hours: List[ActiveHours] = Field(default_factory=list)


# ── Policy ─────────────────────────────────────────────────────────────────

class Policy(_Spec):
    name: str
    conditions: ConditionsSpec
    scope: Optional[ScopeSpec] = None
    actions: ActionsSpec = Field(default_factory=ActionsSpec)
    enforcement: EnforcementSpec = Field(default_factory=EnforcementSpec)
    schedule: Optional[ScheduleSpec] = None

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "Policy":
        """
        Build a Policy from an EnforcementPolicy manifest:

        {
            "metadata": {"name": "dev-idle"},
            "spec": {"scope": {...}, "conditions": {...}, ...}
        }
        """
        name = manifest.get("metadata", {}).get("name", "")
        return cls.model_validate({"name": name, **manifest.get("spec", {})})
