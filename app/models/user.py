"""User and professional profile database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.booking import Booking
    from app.models.rating import ServiceRating


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="consumer"
    )  # consumer, professional, provider, supplier, admin

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    professional_profile: Mapped["ProfessionalProfile | None"] = relationship(
        "ProfessionalProfile",
        back_populates="user",
        uselist=False,
        foreign_keys="[ProfessionalProfile.user_id]",
    )
    managed_professionals: Mapped[list["ProfessionalProfile"]] = relationship(
        "ProfessionalProfile",
        back_populates="provider",
        foreign_keys="[ProfessionalProfile.provider_id]",
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="consumer")


class ProfessionalProfile(Base):
    """A handyman or artist offering services, optionally managed by a provider."""

    __tablename__ = "professional_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )  # NULL = independent professional

    professional_type: Mapped[str] = mapped_column(String(20), nullable=False)  # handyman, artist
    business_name: Mapped[str | None] = mapped_column(String(200))
    bio: Mapped[str | None] = mapped_column(Text)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)

    # Aggregated from approved ratings
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0"))
    total_ratings: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="professional_profile", foreign_keys=[user_id]
    )
    provider: Mapped["User | None"] = relationship(
        "User", back_populates="managed_professionals", foreign_keys=[provider_id]
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="professional")
    ratings: Mapped[list["ServiceRating"]] = relationship(
        "ServiceRating", back_populates="professional"
    )
