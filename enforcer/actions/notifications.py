"""
Notification formatting — turns a matched evaluation into a chat message.

Delivery (webhook calls, retries) is the surrounding controller's job; this
module only builds the payload.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..policy.models import NotifyType
from ..policy.results import EvaluationResult


def format_savings(amount: float, currency: str = "USD") -> str:
    if currency == "USD":
        return f"${amount:,.2f}"
    return f"{amount:,.2f} {currency}"


def build_message(result: EvaluationResult) -> str:
    action = result.action
    verb = "Would scale" if action.dry_run else "Scaled"
    lines = [
        f"{verb} {action.workload} to zero (was {action.original_replicas} replicas)",
        f"Policy: {action.policy}",
        f"Reason: {action.reason}",
        f"Estimated monthly savings: "
        f"{format_savings(action.estimated_monthly_savings, result.cost.currency)}",
    ]
    if action.dry_run:
        lines.append("Dry run: no changes were applied.")
    elif result.policy.actions.reactivation_allowed:
        lines.append("Reactivation is allowed: restore the replica count to resume.")
    return "\n".join(lines)


def build_notification(
    result: EvaluationResult,
    notify: Optional[NotifyType] = None,
) -> Optional[Dict[str, Any]]:
    """Slack-style ``{"text": ...}`` payload, or None when nothing should be sent."""
    notify = result.policy.actions.notify if notify is None else notify
    if notify == NotifyType.NONE or not result.matched or result.action is None:
        return None
    return {"text": build_message(result)}
