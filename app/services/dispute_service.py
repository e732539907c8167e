"""Dispute service.

Opening a dispute moves the booking completed → disputed; resolving it
moves the booking disputed → resolved. Both booking changes go through the
booking transition guard in the same transaction as the dispute record.
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, TransitionRejected
from app.domain.booking_state import BookingStatus
from app.domain.dispute_state import DisputeStatus, assert_dispute_transition, can_resolve_dispute
from app.models.admin import Dispute
from app.models.user import User
from app.schemas.dispute import DisputeCreate
from app.services.audit_service import audit_service
from app.services.booking_service import booking_service

logger = logging.getLogger(__name__)


class DisputeService:
    """Service for the dispute lifecycle."""

    async def open_dispute(
        self,
        db: AsyncSession,
        booking_id: UUID,
        reporter: User,
        data: DisputeCreate,
    ) -> Dispute:
        """Dispute a completed booking within the dispute window."""
        booking = await booking_service.get_booking(db, booking_id)
        booking = await booking_service.apply_transition(
            db, booking, BookingStatus.DISPUTED, reporter
        )

        dispute = Dispute(
            booking_id=booking.id,
            reporter_id=reporter.id,
            reported_user_id=booking.professional.user_id,
            issue_type=data.issue_type.value,
            description=data.description,
            photos=[str(url) for url in data.photos] if data.photos else None,
            status=DisputeStatus.OPEN.value,
        )
        db.add(dispute)
        await db.flush()
        await db.refresh(dispute)

        await audit_service.log_dispute_action(
            db,
            user_id=reporter.id,
            action="dispute_open",
            dispute_id=dispute.id,
            old_status=None,
            new_status=dispute.status,
        )

        logger.info(f"Dispute {dispute.id} opened on booking {booking.id}: {data.issue_type.value}")
        return dispute

    async def get_dispute(self, db: AsyncSession, dispute_id: UUID) -> Dispute:
        """Get dispute by ID or raise NotFoundError."""
        result = await db.execute(select(Dispute).where(Dispute.id == dispute_id))
        dispute = result.scalar_one_or_none()
        if not dispute:
            raise NotFoundError("Dispute", str(dispute_id))
        return dispute

    async def list_disputes(
        self,
        db: AsyncSession,
        status: str | None = None,
        issue_type: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Dispute], int]:
        """List disputes for the admin queue, newest first."""
        query = select(Dispute)
        if status:
            query = query.where(Dispute.status == status)
        if issue_type:
            query = query.where(Dispute.issue_type == issue_type)
        if created_from:
            query = query.where(Dispute.created_at >= created_from)
        if created_to:
            query = query.where(Dispute.created_at <= created_to)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = query.order_by(Dispute.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def start_review(
        self,
        db: AsyncSession,
        dispute_id: UUID,
        admin: User,
    ) -> Dispute:
        """Move dispute to under_review and assign it to the admin."""
        dispute = await self.get_dispute(db, dispute_id)
        old_status = dispute.status
        assert_dispute_transition(old_status, DisputeStatus.UNDER_REVIEW.value)

        dispute.status = DisputeStatus.UNDER_REVIEW.value
        dispute.assigned_to = admin.id
        await db.flush()
        await db.refresh(dispute)

        await audit_service.log_dispute_action(
            db,
            user_id=admin.id,
            action="dispute_review",
            dispute_id=dispute.id,
            old_status=old_status,
            new_status=dispute.status,
        )
        return dispute

    async def resolve_dispute(
        self,
        db: AsyncSession,
        dispute_id: UUID,
        admin: User,
        resolution_notes: str,
        admin_action: str | None = None,
    ) -> Dispute:
        """Resolve a dispute and close its booking."""
        dispute = await self.get_dispute(db, dispute_id)
        can_resolve, error = can_resolve_dispute(dispute.status)
        if not can_resolve:
            raise TransitionRejected("AlreadyTerminal", error)

        old_status = dispute.status
        assert_dispute_transition(old_status, DisputeStatus.RESOLVED.value)

        booking = await booking_service.get_booking(db, dispute.booking_id)
        await booking_service.apply_transition(db, booking, BookingStatus.RESOLVED, admin)

        dispute.status = DisputeStatus.RESOLVED.value
        dispute.resolution_notes = resolution_notes
        dispute.admin_action = admin_action
        dispute.resolved_by = admin.id
        dispute.resolved_at = datetime.now(UTC)
        await db.flush()
        await db.refresh(dispute)

        await audit_service.log_dispute_action(
            db,
            user_id=admin.id,
            action="dispute_resolve",
            dispute_id=dispute.id,
            old_status=old_status,
            new_status=dispute.status,
            admin_action=admin_action,
        )

        logger.info(f"Dispute {dispute.id} resolved by {admin.id}; booking {booking.id} closed")
        return dispute


dispute_service = DisputeService()
