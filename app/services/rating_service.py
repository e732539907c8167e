"""Service rating and moderation service."""

import logging
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.models.rating import ServiceRating
from app.models.user import ProfessionalProfile, User
from app.schemas.rating import RatingCreate
from app.services.audit_service import audit_service
from app.utils.content_filter import contains_inappropriate_content

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def average_score(scores: list[int]) -> Decimal:
    """Arithmetic mean rounded to two decimals; 0 for no scores."""
    if not scores:
        return Decimal("0")
    return (Decimal(sum(scores)) / len(scores)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def category_averages(ratings: list[ServiceRating]) -> dict[str, Decimal]:
    """Average score per rating category across the given ratings."""
    scores: dict[str, list[int]] = defaultdict(list)
    for rating in ratings:
        for category_rating in rating.category_ratings or []:
            scores[category_rating["category"]].append(category_rating["score"])
    return {category: average_score(values) for category, values in scores.items()}


class RatingService:
    """Service for booking ratings and professional aggregates."""

    async def create_rating(self, db: AsyncSession, user: User, data: RatingCreate) -> ServiceRating:
        """Rate a completed booking. One rating per booking."""
        result = await db.execute(select(Booking).where(Booking.id == data.booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(data.booking_id))

        if booking.consumer_id != user.id:
            raise UnauthorizedError("You can only rate your own bookings")

        if booking.status != BookingStatus.COMPLETED.value:
            raise ConflictError(
                f"Only completed bookings can be rated (booking is {booking.status})",
                code="BookingNotCompleted",
            )

        existing = await db.execute(
            select(ServiceRating.id).where(ServiceRating.booking_id == booking.id)
        )
        if existing.scalar_one_or_none():
            raise ConflictError("A rating already exists for this booking", code="AlreadyRated")

        moderation_status = "flagged" if contains_inappropriate_content(data.comment) else "approved"

        rating = ServiceRating(
            booking_id=booking.id,
            user_id=user.id,
            professional_id=booking.professional_id,
            score=data.score,
            comment=data.comment,
            category_ratings=[c.model_dump() for c in data.category_ratings],
            photo_urls=[str(url) for url in data.photo_urls] if data.photo_urls else [],
            is_verified=True,
            moderation_status=moderation_status,
        )

        # The unique booking_id constraint catches a concurrent duplicate
        db.add(rating)
        try:
            await db.flush()
        except IntegrityError:
            logger.warning(f"Duplicate rating for booking {booking.id}")
            raise ConflictError("A rating already exists for this booking", code="AlreadyRated")

        await db.refresh(rating)

        if moderation_status == "approved":
            await self.update_professional_rating(db, booking.professional_id)
        else:
            logger.info(f"Rating {rating.id} flagged for moderation")

        logger.info(f"Booking {booking.id} rated {data.score} by {user.id}")
        return rating

    async def get_rating(self, db: AsyncSession, rating_id: UUID) -> ServiceRating:
        """Get rating by ID or raise NotFoundError."""
        result = await db.execute(select(ServiceRating).where(ServiceRating.id == rating_id))
        rating = result.scalar_one_or_none()
        if not rating:
            raise NotFoundError("Rating", str(rating_id))
        return rating

    async def get_booking_rating(self, db: AsyncSession, booking_id: UUID) -> ServiceRating:
        result = await db.execute(
            select(ServiceRating).where(ServiceRating.booking_id == booking_id)
        )
        rating = result.scalar_one_or_none()
        if not rating:
            raise NotFoundError("Rating for booking", str(booking_id))
        return rating

    async def list_professional_ratings(
        self,
        db: AsyncSession,
        professional_id: UUID,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[ServiceRating], int]:
        """Approved ratings for a professional, newest first."""
        base = select(ServiceRating).where(
            ServiceRating.professional_id == professional_id,
            ServiceRating.moderation_status == "approved",
        )
        count_result = await db.execute(select(func.count()).select_from(base.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            base.order_by(ServiceRating.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    async def get_professional_stats(
        self, db: AsyncSession, professional_id: UUID
    ) -> tuple[Decimal, int, dict[str, Decimal]]:
        """Average, count and per-category averages of approved ratings."""
        ratings = await self._approved_ratings(db, professional_id)
        return (
            average_score([r.score for r in ratings]),
            len(ratings),
            category_averages(ratings),
        )

    async def update_professional_rating(self, db: AsyncSession, professional_id: UUID) -> Decimal:
        """Recompute the aggregate stored on the professional profile."""
        ratings = await self._approved_ratings(db, professional_id)
        average = average_score([r.score for r in ratings])
        await db.execute(
            update(ProfessionalProfile)
            .where(ProfessionalProfile.id == professional_id)
            .values(rating=average, total_ratings=len(ratings))
        )
        return average

    async def report_rating(
        self, db: AsyncSession, rating_id: UUID, user: User, reason: str
    ) -> ServiceRating:
        """Flag a rating for admin review."""
        rating = await self.get_rating(db, rating_id)
        previous_status = rating.moderation_status

        rating.moderation_status = "flagged"
        rating.moderation_reason = reason
        await db.flush()
        await db.refresh(rating)

        await audit_service.log_action(
            db,
            user_id=user.id,
            action="rating_reported",
            resource_type="rating",
            resource_id=rating.id,
            old_values={"moderation_status": previous_status},
            new_values={"moderation_status": "flagged", "reason": reason},
        )

        if previous_status != "flagged":
            await self.update_professional_rating(db, rating.professional_id)

        logger.info(f"Rating {rating.id} reported by {user.id}")
        return rating

    async def moderate_rating(
        self,
        db: AsyncSession,
        rating_id: UUID,
        admin: User,
        action: str,
        reason: str | None = None,
    ) -> ServiceRating:
        """Set a rating's moderation status (approved, rejected, flagged)."""
        rating = await self.get_rating(db, rating_id)
        previous_status = rating.moderation_status

        rating.moderation_status = action
        rating.moderation_reason = reason
        await db.flush()
        await db.refresh(rating)

        await audit_service.log_action(
            db,
            user_id=admin.id,
            action=f"rating_{action}",
            resource_type="rating",
            resource_id=rating.id,
            old_values={"moderation_status": previous_status},
            new_values={"moderation_status": action},
        )

        if previous_status != action:
            await self.update_professional_rating(db, rating.professional_id)

        logger.info(f"Rating {rating.id} moderated {previous_status} → {action} by {admin.id}")
        return rating

    async def _approved_ratings(self, db: AsyncSession, professional_id: UUID) -> list[ServiceRating]:
        result = await db.execute(
            select(ServiceRating).where(
                ServiceRating.professional_id == professional_id,
                ServiceRating.moderation_status == "approved",
            )
        )
        return list(result.scalars().all())


rating_service = RatingService()
