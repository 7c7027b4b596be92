"""
Cost Projection — turns an hourly cost figure into a monthly estimate.

The month is the usual 730-hour average (8760 h / 12), not a calendar month.
Rounding and currency formatting are left to whoever presents the number.
"""

from __future__ import annotations

from datetime import timedelta

HOURS_PER_MONTH = 730


def monthly_savings(hourly_cost: float) -> float:
    """Estimated monthly cost avoided by scaling a workload to zero."""
    return hourly_cost * HOURS_PER_MONTH


def format_duration(duration: timedelta) -> str:
    """
    Compact duration label used in reason strings.

    48h → "2d", 36h → "36h", 90m → "90m", 45s → "45s".
    """
    seconds = int(duration.total_seconds())
    if seconds >= 86400 and seconds % 86400 == 0:
        return f"{seconds // 86400}d"
    if seconds >= 3600 and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds >= 60 and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"
