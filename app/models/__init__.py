"""Database models."""

from app.models.admin import AuditLog, Dispute
from app.models.booking import Booking
from app.models.rating import ServiceRating
from app.models.user import ProfessionalProfile, User

__all__ = [
    # User
    "User",
    "ProfessionalProfile",
    # Booking
    "Booking",
    # Rating
    "ServiceRating",
    # Admin
    "AuditLog",
    "Dispute",
]
