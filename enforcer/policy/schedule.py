"""
Schedule Evaluator — is "now" inside one of the policy's active-hour windows?

Hours are whole-hour resolution and inclusive at both ends: [9, 17] covers
09:00 through 17:59. A window whose start is after its end ("22 to 6") never
matches; overnight coverage needs two windows ([22, 23] and [0, 6]).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from .models import ActiveHours, ScheduleSpec

logger = structlog.get_logger(__name__)

# A broken timezone must not block enforcement forever
ACTIVE_WHEN_TIMEZONE_INVALID = True
# No windows means no active time
ACTIVE_WHEN_NO_WINDOWS = False

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def resolve_timezone(name: str) -> Optional[ZoneInfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def window_matches(window: ActiveHours, weekday: str, hour: int) -> bool:
    if weekday not in window.days:
        return False
    if len(window.hours) != 2:
        return False
    start, end = window.hours
    return start <= hour <= end


def is_within_schedule(schedule: ScheduleSpec, now: datetime) -> bool:
    tz = resolve_timezone(schedule.timezone)
    if tz is None:
        logger.warning("schedule_timezone_invalid", timezone=schedule.timezone)
        return ACTIVE_WHEN_TIMEZONE_INVALID

    if not schedule.active_hours:
        return ACTIVE_WHEN_NO_WINDOWS

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(tz)
    weekday = _WEEKDAYS[local.weekday()]

    return any(window_matches(w, weekday, local.hour) for w in schedule.active_hours)
