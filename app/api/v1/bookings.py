"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_current_active_user, get_db
from app.models.admin import Dispute
from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import (
    BookingCancelRequest,
    BookingCompleteRequest,
    BookingCreate,
    BookingListResponse,
    BookingRejectRequest,
    BookingResponse,
    BookingStatusUpdate,
)
from app.schemas.dispute import DisputeCreate, DisputeResponse
from app.services.booking_service import booking_service
from app.services.dispute_service import dispute_service

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Request a booking with a professional."""
    return await booking_service.create_booking(db, current_user, data)


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    pagination: Annotated[Pagination, Depends()],
    role: Annotated[str, Query(pattern="^(consumer|professional)$")] = "consumer",
    filter: Annotated[str, Query(pattern="^(active|past|all)$")] = "all",
) -> BookingListResponse:
    """List the current user's bookings as consumer or as professional."""
    bookings, total = await booking_service.list_bookings(
        db,
        current_user,
        role=role,
        status_filter=filter,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details (participants and admins only)."""
    return await booking_service.get_booking_for_user(db, booking_id, current_user)


# ============ LIFECYCLE ============


@router.post("/{booking_id}/accept", response_model=BookingResponse)
async def accept_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Professional accepts a pending booking."""
    return await booking_service.accept(db, booking_id, current_user)


@router.post("/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    data: BookingRejectRequest | None = None,
) -> Booking:
    """Professional rejects a pending booking."""
    reason = data.reason if data else None
    return await booking_service.reject(db, booking_id, current_user, reason)


@router.post("/{booking_id}/start", response_model=BookingResponse)
async def start_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Mark a confirmed booking as in progress."""
    return await booking_service.start(db, booking_id, current_user)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    data: BookingCompleteRequest | None = None,
) -> Booking:
    """Professional completes an in-progress booking."""
    actual_price = data.actual_price if data else None
    return await booking_service.complete(db, booking_id, current_user, actual_price)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    data: BookingCancelRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Cancel a confirmed booking."""
    return await booking_service.cancel(db, booking_id, current_user, data.reason)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Generic status change. Disputes use their dedicated endpoints."""
    return await booking_service.update_status(
        db,
        booking_id,
        current_user,
        data.status,
        notes=data.notes,
        actual_price=data.actual_price,
    )


@router.post(
    "/{booking_id}/dispute",
    response_model=DisputeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def dispute_booking(
    booking_id: UUID,
    data: DisputeCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Dispute:
    """Consumer disputes a completed booking within the dispute window."""
    return await dispute_service.open_dispute(db, booking_id, current_user, data)
