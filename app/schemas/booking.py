"""Booking-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ServiceAddress(BaseModel):
    """Where the service takes place."""

    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    coordinates: Coordinates


class PriceRange(BaseModel):
    min: Decimal = Field(..., ge=0)
    max: Decimal = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)

    @model_validator(mode="after")
    def validate_bounds(self) -> "PriceRange":
        if self.max < self.min:
            raise ValueError("max must not be lower than min")
        return self


class ProjectDetails(BaseModel):
    """Artist-specific project description."""

    project_type: str = Field(..., min_length=1, max_length=100)
    estimated_duration: str = Field(..., min_length=1, max_length=100)
    price_range: PriceRange
    special_requirements: str | None = Field(None, max_length=2000)
    materials: list[str] | None = None


class BookingCreate(BaseModel):
    """Schema for a consumer requesting a booking."""

    professional_id: UUID
    professional_type: str = Field(..., pattern="^(handyman|artist)$")
    service_category: str = Field(..., min_length=1, max_length=100)
    scheduled_date: datetime
    estimated_duration: int = Field(..., ge=1, le=60 * 24 * 14)  # minutes
    service_address: ServiceAddress
    description: str = Field(..., min_length=1, max_length=5000)
    estimated_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    project_details: ProjectDetails | None = None
    reference_images: list[HttpUrl] | None = None


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    consumer_id: UUID
    professional_id: UUID

    # Service
    professional_type: str
    service_category: str
    description: str
    service_address: dict
    project_details: dict | None
    reference_images: list[str] | None

    # Schedule
    scheduled_date: datetime
    estimated_duration: int

    # Pricing
    estimated_price: Decimal
    actual_price: Decimal | None

    # Status
    status: str
    cancellation_reason: str | None
    rejection_reason: str | None

    # Timestamps
    confirmed_at: datetime | None
    started_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    disputed_at: datetime | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingRejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class BookingCancelRequest(BaseModel):
    """Schema for canceling a booking."""

    reason: str = Field(..., min_length=1, max_length=500)


class BookingCompleteRequest(BaseModel):
    actual_price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)


class BookingStatusUpdate(BaseModel):
    """Generic status change; disputes go through their own endpoints."""

    status: str = Field(..., pattern="^(confirmed|rejected|in_progress|completed|cancelled)$")
    notes: str | None = Field(None, max_length=500)
    actual_price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def validate_cancel_reason(self) -> "BookingStatusUpdate":
        if self.status == "cancelled" and not self.notes:
            raise ValueError("notes are required when cancelling a booking")
        return self
