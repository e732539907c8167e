"""Rating-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class CategoryRating(BaseModel):
    category: str = Field(..., min_length=1, max_length=50)
    score: int = Field(..., ge=1, le=5)


class RatingCreate(BaseModel):
    """Schema for rating a completed booking."""

    booking_id: UUID
    score: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)
    category_ratings: list[CategoryRating] = Field(default_factory=list)
    photo_urls: list[HttpUrl] | None = None


class RatingResponse(BaseModel):
    """Schema for rating response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    user_id: UUID
    professional_id: UUID
    score: int
    comment: str
    category_ratings: list[CategoryRating]
    photo_urls: list[str] | None
    is_verified: bool
    moderation_status: str
    created_at: datetime
    updated_at: datetime


class ProfessionalRatingsResponse(BaseModel):
    """Paginated ratings for a professional with aggregate statistics."""

    ratings: list[RatingResponse]
    total: int
    page: int
    page_size: int
    average_rating: Decimal
    category_averages: dict[str, Decimal]


class RatingReportRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RatingModerationRequest(BaseModel):
    """Schema for admin rating moderation."""

    action: str = Field(..., pattern="^(approved|rejected|flagged)$")
    reason: str | None = Field(None, max_length=500)
