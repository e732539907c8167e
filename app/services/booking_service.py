"""Booking lifecycle service.

Every status change goes through the transition guard and is then written
as a single conditional UPDATE on (id, expected status). A booking whose
status moved underneath the caller yields ConflictError.
"""

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    TransitionRejected,
    UnauthorizedError,
    ValidationError,
)
from app.domain.booking_state import (
    ACTIVE_STATUSES,
    PAST_STATUSES,
    TRANSITION_TIMESTAMPS,
    ActorRole,
    BookingStatus,
    as_utc,
    assert_booking_transition,
)
from app.models.booking import Booking
from app.models.user import ProfessionalProfile, User
from app.schemas.booking import BookingCreate
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)


class BookingService:
    """Service for creating, querying and transitioning bookings."""

    def __init__(self, dispute_window: timedelta | None = None):
        self.dispute_window = dispute_window or timedelta(days=settings.dispute_window_days)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """Get booking by ID (with its professional) or raise NotFoundError."""
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.professional))
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    def resolve_actor_role(self, booking: Booking, user: User) -> ActorRole:
        """Work out which role the user plays on this booking.

        Admins act as admin. The consumer who made the booking acts as
        consumer. The professional, or the provider managing that
        professional, acts as professional.
        """
        if user.role == "admin":
            return ActorRole.ADMIN
        if booking.consumer_id == user.id:
            return ActorRole.CONSUMER
        professional = booking.professional
        if professional is not None and user.id in (professional.user_id, professional.provider_id):
            return ActorRole.PROFESSIONAL
        raise UnauthorizedError("You are not a participant in this booking")

    async def get_booking_for_user(self, db: AsyncSession, booking_id: UUID, user: User) -> Booking:
        """Get a booking the user participates in (or any booking, for admins)."""
        booking = await self.get_booking(db, booking_id)
        self.resolve_actor_role(booking, user)
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        user: User,
        role: str = "consumer",
        status_filter: str = "all",
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        """List the user's bookings as consumer or as professional."""
        if role == "professional":
            profiles = select(ProfessionalProfile.id).where(
                (ProfessionalProfile.user_id == user.id)
                | (ProfessionalProfile.provider_id == user.id)
            )
            query = select(Booking).where(Booking.professional_id.in_(profiles))
        else:
            query = select(Booking).where(Booking.consumer_id == user.id)

        if status_filter == "active":
            query = query.where(Booking.status.in_([s.value for s in ACTIVE_STATUSES]))
        elif status_filter == "past":
            query = query.where(Booking.status.in_([s.value for s in PAST_STATUSES]))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = (
            query.order_by(Booking.scheduled_date.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_booking(self, db: AsyncSession, consumer: User, data: BookingCreate) -> Booking:
        """Create a pending booking request for a professional."""
        result = await db.execute(
            select(ProfessionalProfile).where(ProfessionalProfile.id == data.professional_id)
        )
        professional = result.scalar_one_or_none()
        if not professional:
            raise NotFoundError("Professional", str(data.professional_id))

        if not professional.is_available:
            raise ValidationError("Professional is not accepting bookings")
        if professional.professional_type != data.professional_type:
            raise ValidationError(
                f"Professional type mismatch: expected {professional.professional_type}"
            )
        if data.professional_type == "artist" and data.project_details is None:
            raise ValidationError("Project details are required for artist bookings")
        if professional.user_id == consumer.id:
            raise ValidationError("You cannot book your own services")

        start = as_utc(data.scheduled_date).astimezone(UTC)
        end = start + timedelta(minutes=data.estimated_duration)
        if await self._has_overlapping_booking(db, professional.id, start, end):
            logger.warning(
                f"Booking overlap for professional {professional.id} at {start.isoformat()}"
            )
            raise ConflictError(
                "Professional already has a booking in this time slot", code="SlotUnavailable"
            )

        booking = Booking(
            consumer_id=consumer.id,
            professional_id=professional.id,
            professional_type=data.professional_type,
            service_category=data.service_category,
            description=data.description,
            service_address=data.service_address.model_dump(),
            project_details=(
                data.project_details.model_dump(mode="json") if data.project_details else None
            ),
            reference_images=(
                [str(url) for url in data.reference_images] if data.reference_images else None
            ),
            scheduled_date=start,
            estimated_duration=data.estimated_duration,
            estimated_price=data.estimated_price,
            status=BookingStatus.PENDING.value,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)

        logger.info(f"Booking {booking.id} requested by {consumer.id} for professional {professional.id}")
        return booking

    async def _has_overlapping_booking(
        self,
        db: AsyncSession,
        professional_id: UUID,
        start: datetime,
        end: datetime,
    ) -> bool:
        """Check the professional's active bookings for a slot overlapping [start, end)."""
        result = await db.execute(
            select(Booking).where(
                Booking.professional_id == professional_id,
                Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
                Booking.scheduled_date < end,
            )
        )
        for other in result.scalars().all():
            if as_utc(other.scheduled_end) > start:
                return True
        return False

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def transition(
        self,
        db: AsyncSession,
        booking_id: UUID,
        target: BookingStatus,
        actor: User,
        **changes: Any,
    ) -> Booking:
        """Load a booking and move it to the target status on behalf of actor."""
        booking = await self.get_booking(db, booking_id)
        return await self.apply_transition(db, booking, target, actor, **changes)

    async def apply_transition(
        self,
        db: AsyncSession,
        booking: Booking,
        target: BookingStatus,
        actor: User,
        *,
        now: datetime | None = None,
        **changes: Any,
    ) -> Booking:
        """Guard and persist a status change.

        Args:
            db: Database session
            booking: Booking as last read by the caller
            target: Requested status
            actor: Authenticated user requesting the change
            now: Clock override for the dispute window and timestamps
            **changes: Extra columns written in the same UPDATE
                (e.g. cancellation_reason, actual_price)

        Returns:
            The refreshed booking

        Raises:
            UnauthorizedError: actor is not a participant
            TransitionRejected: the guard refused the change
            ConflictError: the booking's status changed since it was read
        """
        target = BookingStatus(target)
        role = self.resolve_actor_role(booking, actor)
        current = booking.status
        now = now or datetime.now(UTC)

        try:
            assert_booking_transition(
                current,
                target,
                role,
                completed_at=booking.completed_at,
                dispute_window=self.dispute_window,
                now=now,
            )
        except TransitionRejected as e:
            logger.warning(
                f"Rejected booking {booking.id} {current} → {target.value} by {role.value}: {e.reason}"
            )
            raise

        values: dict[str, Any] = {"status": target.value, "updated_at": now, **changes}
        timestamp_column = TRANSITION_TIMESTAMPS.get(target)
        if timestamp_column:
            values[timestamp_column] = now

        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking.id, Booking.status == current)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                f"Concurrent update on booking {booking.id}: expected status {current}"
            )
            raise ConflictError(f"Booking {booking.id} was modified by another request")

        await db.refresh(booking, attribute_names=list(values))

        await audit_service.log_booking_transition(
            db,
            user_id=actor.id,
            booking_id=booking.id,
            old_status=current,
            new_status=target.value,
            actor_role=role.value,
            details={key: str(value) for key, value in changes.items() if value is not None},
        )

        logger.info(f"Booking {booking.id} {current} → {target.value} by {role.value} {actor.id}")
        return booking

    async def accept(self, db: AsyncSession, booking_id: UUID, actor: User) -> Booking:
        return await self.transition(db, booking_id, BookingStatus.CONFIRMED, actor)

    async def reject(
        self, db: AsyncSession, booking_id: UUID, actor: User, reason: str | None = None
    ) -> Booking:
        return await self.transition(
            db, booking_id, BookingStatus.REJECTED, actor, rejection_reason=reason
        )

    async def start(self, db: AsyncSession, booking_id: UUID, actor: User) -> Booking:
        return await self.transition(db, booking_id, BookingStatus.IN_PROGRESS, actor)

    async def complete(
        self, db: AsyncSession, booking_id: UUID, actor: User, actual_price: Decimal | None = None
    ) -> Booking:
        changes = {"actual_price": actual_price} if actual_price is not None else {}
        return await self.transition(db, booking_id, BookingStatus.COMPLETED, actor, **changes)

    async def cancel(self, db: AsyncSession, booking_id: UUID, actor: User, reason: str) -> Booking:
        return await self.transition(
            db, booking_id, BookingStatus.CANCELLED, actor, cancellation_reason=reason
        )

    async def update_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor: User,
        new_status: str,
        notes: str | None = None,
        actual_price: Decimal | None = None,
    ) -> Booking:
        """Generic status change dispatching to the matching transition."""
        target = BookingStatus(new_status)
        if target is BookingStatus.CANCELLED:
            if not notes:
                raise ValidationError("A cancellation reason is required")
            return await self.cancel(db, booking_id, actor, notes)
        if target is BookingStatus.REJECTED:
            return await self.reject(db, booking_id, actor, notes)
        if target is BookingStatus.COMPLETED:
            return await self.complete(db, booking_id, actor, actual_price)
        if target in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS):
            return await self.transition(db, booking_id, target, actor)
        raise ValidationError(f"Status '{new_status}' cannot be set through this endpoint")


booking_service = BookingService()
