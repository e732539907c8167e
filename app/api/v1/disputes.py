"""Dispute endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_current_active_user, get_current_admin, get_db
from app.domain.dispute_state import IssueType
from app.models.admin import Dispute
from app.models.user import User
from app.schemas.dispute import DisputeListResponse, DisputeResolve, DisputeResponse
from app.services.booking_service import booking_service
from app.services.dispute_service import dispute_service

router = APIRouter()


@router.get("", response_model=DisputeListResponse)
async def list_disputes(
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    pagination: Annotated[Pagination, Depends()],
    status: Annotated[str | None, Query(pattern="^(open|under_review|resolved)$")] = None,
    issue_type: IssueType | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> DisputeListResponse:
    """List disputes (admin only)."""
    disputes, total = await dispute_service.list_disputes(
        db,
        status=status,
        issue_type=issue_type.value if issue_type else None,
        created_from=created_from,
        created_to=created_to,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return DisputeListResponse(
        disputes=[DisputeResponse.model_validate(d) for d in disputes],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{dispute_id}", response_model=DisputeResponse)
async def get_dispute(
    dispute_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Dispute:
    """Get dispute details (parties and admins)."""
    dispute = await dispute_service.get_dispute(db, dispute_id)
    booking = await booking_service.get_booking(db, dispute.booking_id)
    booking_service.resolve_actor_role(booking, current_user)
    return dispute


@router.post("/{dispute_id}/review", response_model=DisputeResponse)
async def start_review(
    dispute_id: UUID,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Dispute:
    """Take a dispute under review (admin only)."""
    return await dispute_service.start_review(db, dispute_id, admin)


@router.post("/{dispute_id}/resolve", response_model=DisputeResponse)
async def resolve_dispute(
    dispute_id: UUID,
    data: DisputeResolve,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Dispute:
    """Resolve a dispute and close the disputed booking (admin only)."""
    return await dispute_service.resolve_dispute(
        db,
        dispute_id,
        admin,
        resolution_notes=data.resolution_notes,
        admin_action=data.admin_action,
    )
