"""Dispute state machine.

States: open → under_review → resolved
"""

from enum import Enum

from app.core.exceptions import TransitionRejected


class DisputeStatus(str, Enum):
    OPEN = "open"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"


class IssueType(str, Enum):
    NO_SHOW = "no_show"
    POOR_QUALITY = "poor_quality"
    DAMAGE = "damage"
    SAFETY_CONCERN = "safety_concern"
    PRICING_DISPUTE = "pricing_dispute"
    OTHER = "other"


DISPUTE_TRANSITIONS: dict[str, set[str]] = {
    "open": {"under_review", "resolved"},
    "under_review": {"resolved"},
    "resolved": set(),  # Terminal state
}


def assert_dispute_transition(current_status: str, new_status: str) -> None:
    """Validate dispute state transition."""
    if not DISPUTE_TRANSITIONS.get(current_status):
        raise TransitionRejected("AlreadyTerminal", f"Dispute is already {current_status}")
    if new_status not in DISPUTE_TRANSITIONS[current_status]:
        raise TransitionRejected(
            "InvalidTransition", f"Invalid dispute transition: {current_status} → {new_status}"
        )


def can_resolve_dispute(status: str) -> tuple[bool, str | None]:
    """Check if dispute can be resolved."""
    if status == DisputeStatus.RESOLVED.value:
        return False, "Dispute is already resolved"
    return True, None
