"""Admin endpoints for moderation and audit."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_db
from app.core.permissions import require_admin
from app.models.rating import ServiceRating
from app.models.user import User
from app.schemas.dispute import AuditLogResponse
from app.schemas.rating import RatingModerationRequest, RatingResponse
from app.services.audit_service import audit_service
from app.services.rating_service import rating_service

router = APIRouter()


@router.post("/ratings/{rating_id}/moderate", response_model=RatingResponse)
async def moderate_rating(
    rating_id: UUID,
    data: RatingModerationRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceRating:
    """Approve, reject or flag a rating."""
    return await rating_service.moderate_rating(db, rating_id, admin, data.action, data.reason)


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def list_audit_logs(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    pagination: Annotated[Pagination, Depends()],
    resource_type: str | None = None,
    resource_id: UUID | None = None,
) -> list[AuditLogResponse]:
    """List audit log entries, newest first."""
    logs, _ = await audit_service.list_logs(
        db,
        resource_type=resource_type,
        resource_id=resource_id,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return [AuditLogResponse.model_validate(log) for log in logs]
