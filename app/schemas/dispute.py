"""Dispute and audit log Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from app.domain.dispute_state import IssueType


class DisputeCreate(BaseModel):
    """Schema for a consumer disputing a completed booking."""

    issue_type: IssueType
    description: str = Field(..., min_length=20, max_length=5000)
    photos: list[HttpUrl] | None = None


class DisputeResolve(BaseModel):
    """Schema for resolving a dispute."""

    resolution_notes: str = Field(..., min_length=1, max_length=2000)
    admin_action: str | None = Field(None, max_length=500)


class DisputeResponse(BaseModel):
    """Schema for dispute response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    reporter_id: UUID
    reported_user_id: UUID
    issue_type: str
    description: str
    photos: list[str] | None
    status: str
    resolution_notes: str | None
    admin_action: str | None
    assigned_to: UUID | None
    resolved_by: UUID | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class DisputeListResponse(BaseModel):
    disputes: list[DisputeResponse]
    total: int
    page: int
    page_size: int


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None
    action: str
    resource_type: str
    resource_id: UUID | None
    old_values: dict | None
    new_values: dict | None
    created_at: datetime
