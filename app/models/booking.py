"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.rating import ServiceRating
    from app.models.user import ProfessionalProfile, User


class Booking(Base):
    """A scheduled service engagement between a consumer and a professional."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    consumer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    professional_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("professional_profiles.id"), nullable=False, index=True
    )

    # Service
    professional_type: Mapped[str] = mapped_column(String(20), nullable=False)  # handyman, artist
    service_category: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    service_address: Mapped[dict] = mapped_column(JSON, nullable=False)
    project_details: Mapped[dict | None] = mapped_column(JSON)  # artist bookings only
    reference_images: Mapped[list[str] | None] = mapped_column(JSON)

    # Schedule
    scheduled_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes

    # Pricing
    estimated_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    actual_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Status: see app.domain.booking_state
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Lifecycle timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    disputed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    consumer: Mapped["User"] = relationship("User", back_populates="bookings")
    professional: Mapped["ProfessionalProfile"] = relationship(
        "ProfessionalProfile", back_populates="bookings"
    )
    rating: Mapped["ServiceRating | None"] = relationship(
        "ServiceRating", back_populates="booking", uselist=False
    )

    @property
    def scheduled_end(self) -> datetime:
        """End of the booked time slot."""
        return self.scheduled_date + timedelta(minutes=self.estimated_duration)
