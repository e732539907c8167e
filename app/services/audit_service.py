"""Audit trail service."""

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditLog


class AuditService:
    """Service for append-only audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Record an action in the caller's transaction.

        Args:
            db: Database session
            user_id: User performing the action
            action: Action name (e.g., "booking_confirmed")
            resource_type: Resource type (e.g., "booking", "dispute")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state
            ip_address: Client IP

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
        )
        db.add(audit)
        return audit

    async def log_booking_transition(
        self,
        db: AsyncSession,
        user_id: UUID,
        booking_id: UUID,
        old_status: str,
        new_status: str,
        actor_role: str,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Log a booking status change."""
        new_values: dict[str, Any] = {"status": new_status, "actor_role": actor_role}
        if details:
            new_values.update(details)

        return await self.log_action(
            db=db,
            user_id=user_id,
            action=f"booking_{new_status}",
            resource_type="booking",
            resource_id=booking_id,
            old_values={"status": old_status},
            new_values=new_values,
        )

    async def log_dispute_action(
        self,
        db: AsyncSession,
        user_id: UUID,
        action: str,
        dispute_id: UUID,
        old_status: str | None,
        new_status: str,
        admin_action: str | None = None,
    ) -> AuditLog:
        """Log dispute action."""
        new_values: dict[str, Any] = {"status": new_status}
        if admin_action:
            new_values["admin_action"] = admin_action

        return await self.log_action(
            db=db,
            user_id=user_id,
            action=action,
            resource_type="dispute",
            resource_id=dispute_id,
            old_values={"status": old_status} if old_status else None,
            new_values=new_values,
        )

    async def list_logs(
        self,
        db: AsyncSession,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[AuditLog], int]:
        """List audit entries, newest first."""
        query = select(AuditLog)
        if resource_type:
            query = query.where(AuditLog.resource_type == resource_type)
        if resource_id:
            query = query.where(AuditLog.resource_id == resource_id)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = query.order_by(AuditLog.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
        result = await db.execute(query)
        return list(result.scalars().all()), total


audit_service = AuditService()
