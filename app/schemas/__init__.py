"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BookingCancelRequest,
    BookingCompleteRequest,
    BookingCreate,
    BookingListResponse,
    BookingRejectRequest,
    BookingResponse,
    BookingStatusUpdate,
)
from app.schemas.dispute import (
    AuditLogResponse,
    DisputeCreate,
    DisputeListResponse,
    DisputeResolve,
    DisputeResponse,
)
from app.schemas.rating import (
    ProfessionalRatingsResponse,
    RatingCreate,
    RatingModerationRequest,
    RatingReportRequest,
    RatingResponse,
)

__all__ = [
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingRejectRequest",
    "BookingCancelRequest",
    "BookingCompleteRequest",
    "BookingStatusUpdate",
    # Rating
    "RatingCreate",
    "RatingResponse",
    "ProfessionalRatingsResponse",
    "RatingReportRequest",
    "RatingModerationRequest",
    # Dispute
    "DisputeCreate",
    "DisputeResolve",
    "DisputeResponse",
    "DisputeListResponse",
    "AuditLogResponse",
]
