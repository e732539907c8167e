"""Rating endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_current_active_user, get_db
from app.models.rating import ServiceRating
from app.models.user import User
from app.schemas.rating import (
    ProfessionalRatingsResponse,
    RatingCreate,
    RatingReportRequest,
    RatingResponse,
)
from app.services.rating_service import rating_service

router = APIRouter()


@router.post("", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def create_rating(
    data: RatingCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceRating:
    """Rate a completed booking (booking consumer only, once per booking)."""
    return await rating_service.create_rating(db, current_user, data)


@router.get("/bookings/{booking_id}", response_model=RatingResponse)
async def get_booking_rating(
    booking_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceRating:
    """Get the rating left on a booking."""
    return await rating_service.get_booking_rating(db, booking_id)


@router.get("/professionals/{professional_id}", response_model=ProfessionalRatingsResponse)
async def get_professional_ratings(
    professional_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    pagination: Annotated[Pagination, Depends()],
) -> ProfessionalRatingsResponse:
    """Approved ratings for a professional with aggregate statistics."""
    ratings, total = await rating_service.list_professional_ratings(
        db, professional_id, page=pagination.page, page_size=pagination.page_size
    )
    average, _, categories = await rating_service.get_professional_stats(db, professional_id)

    return ProfessionalRatingsResponse(
        ratings=[RatingResponse.model_validate(r) for r in ratings],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
        average_rating=average,
        category_averages=categories,
    )


@router.get("/{rating_id}", response_model=RatingResponse)
async def get_rating(
    rating_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceRating:
    """Get a rating by ID."""
    return await rating_service.get_rating(db, rating_id)


@router.post("/{rating_id}/report", response_model=RatingResponse)
async def report_rating(
    rating_id: UUID,
    data: RatingReportRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceRating:
    """Report a rating for inappropriate content."""
    return await rating_service.report_rating(db, rating_id, current_user, data.reason)
