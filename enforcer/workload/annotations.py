"""
Annotation translation — the workload's annotation map is the only persisted
enforcement state. This module turns it into a typed WorkloadState on the way
in, and produces the annotation patch an applier writes on the way out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict, Mapping, Optional

if TYPE_CHECKING:
    from ..policy.results import EnforcementAction

PAUSED = "finops.io/paused"
PAUSED_AT = "finops.io/paused-at"
EXCLUDE = "finops.io/exclude"
LAST_ACTIVITY = "finops.io/last-activity"
ORIGINAL_REPLICAS = "finops.io/original-replicas"
PAUSED_BY = "finops.io/paused-by"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; None when missing or unparsable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class WorkloadState:
    paused: bool = False
    paused_at: Optional[datetime] = None      # last enforcement action
    excluded: bool = False
    last_activity: Optional[datetime] = None

    @classmethod
    def from_annotations(cls, annotations: Optional[Mapping[str, str]]) -> "WorkloadState":
        annotations = annotations or {}
        return cls(
            paused=annotations.get(PAUSED) == "true",
            paused_at=parse_timestamp(annotations.get(PAUSED_AT)),
            excluded=annotations.get(EXCLUDE) == "true",
            last_activity=parse_timestamp(annotations.get(LAST_ACTIVITY)),
        )


def pause_annotations(action: "EnforcementAction", now: datetime) -> Dict[str, str]:
    """
    Annotations to write back after applying *action*.
    Dry-run actions change nothing, so they produce an empty patch.
    """
    if action.dry_run:
        return {}
    return {
        PAUSED: "true",
        PAUSED_AT: format_timestamp(now),
        ORIGINAL_REPLICAS: str(action.original_replicas),
        PAUSED_BY: action.policy,
    }
