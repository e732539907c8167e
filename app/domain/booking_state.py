"""Booking state machine.

pending ──accept──▶ confirmed ──start──▶ in_progress ──complete──▶ completed
   │                    │                                              │
   └─reject─▶ rejected  └─cancel─▶ cancelled              dispute (window)
                                                                       ▼
                                               resolved ◀──resolve── disputed
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from app.core.exceptions import TransitionRejected


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    DISPUTED = "disputed"
    RESOLVED = "resolved"


class ActorRole(str, Enum):
    """Role a user plays with respect to one booking."""

    CONSUMER = "consumer"
    PROFESSIONAL = "professional"
    ADMIN = "admin"


class RejectionReason(str, Enum):
    """Why a requested transition was refused."""

    INVALID_TRANSITION = "InvalidTransition"
    UNAUTHORIZED_ACTOR = "UnauthorizedActor"
    ALREADY_TERMINAL = "AlreadyTerminal"


# (current, target) -> roles allowed to take the edge
BOOKING_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[ActorRole]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({ActorRole.PROFESSIONAL}),
    (BookingStatus.PENDING, BookingStatus.REJECTED): frozenset({ActorRole.PROFESSIONAL}),
    (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS): frozenset(
        {ActorRole.CONSUMER, ActorRole.PROFESSIONAL}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset(
        {ActorRole.CONSUMER, ActorRole.PROFESSIONAL}
    ),
    (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED): frozenset({ActorRole.PROFESSIONAL}),
    (BookingStatus.COMPLETED, BookingStatus.DISPUTED): frozenset({ActorRole.CONSUMER}),
    (BookingStatus.DISPUTED, BookingStatus.RESOLVED): frozenset({ActorRole.ADMIN}),
}

TERMINAL_STATUSES = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.REJECTED, BookingStatus.RESOLVED}
)

ACTIVE_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)

PAST_STATUSES = frozenset(BookingStatus) - ACTIVE_STATUSES

# Column stamped alongside each target status
TRANSITION_TIMESTAMPS: dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.IN_PROGRESS: "started_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
    BookingStatus.DISPUTED: "disputed_at",
    BookingStatus.RESOLVED: "resolved_at",
}


@dataclass(frozen=True)
class TransitionDecision:
    """Outcome of evaluating a requested status change."""

    status: BookingStatus | None = None
    reason: RejectionReason | None = None
    message: str | None = None

    @property
    def accepted(self) -> bool:
        return self.reason is None


def as_utc(value: datetime) -> datetime:
    # Some drivers hand back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_within_dispute_window(
    completed_at: datetime | None,
    window: timedelta,
    now: datetime | None = None,
) -> bool:
    """Check whether a completed booking can still be disputed."""
    if completed_at is None:
        return False
    now = now or datetime.now(UTC)
    return as_utc(now) - as_utc(completed_at) <= window


def check_booking_transition(
    current: str | BookingStatus,
    target: str | BookingStatus,
    actor_role: str | ActorRole | None,
    *,
    completed_at: datetime | None = None,
    dispute_window: timedelta = timedelta(days=7),
    now: datetime | None = None,
) -> TransitionDecision:
    """Evaluate a status change for an actor without side effects.

    Terminal states are checked first, then the edge itself, then the actor,
    and finally the dispute window for completed -> disputed.
    """
    current = BookingStatus(current)
    target = BookingStatus(target)
    role = ActorRole(actor_role) if actor_role is not None else None

    if current in TERMINAL_STATUSES:
        return TransitionDecision(
            reason=RejectionReason.ALREADY_TERMINAL,
            message=f"Booking is already {current.value}",
        )

    allowed_roles = BOOKING_TRANSITIONS.get((current, target))
    if allowed_roles is None:
        return TransitionDecision(
            reason=RejectionReason.INVALID_TRANSITION,
            message=f"Invalid booking transition: {current.value} → {target.value}",
        )

    if role not in allowed_roles:
        actor = role.value if role else "unknown actor"
        return TransitionDecision(
            reason=RejectionReason.UNAUTHORIZED_ACTOR,
            message=f"A {actor} cannot move a booking from {current.value} to {target.value}",
        )

    if target is BookingStatus.DISPUTED and not is_within_dispute_window(
        completed_at, dispute_window, now
    ):
        return TransitionDecision(
            reason=RejectionReason.INVALID_TRANSITION,
            message="The dispute window for this booking has closed",
        )

    return TransitionDecision(status=target)


def assert_booking_transition(
    current: str | BookingStatus,
    target: str | BookingStatus,
    actor_role: str | ActorRole | None,
    **kwargs,
) -> BookingStatus:
    """Like check_booking_transition but raise TransitionRejected on refusal."""
    decision = check_booking_transition(current, target, actor_role, **kwargs)
    if not decision.accepted:
        raise TransitionRejected(decision.reason.value, decision.message)
    return decision.status
