"""Audit business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import Capability
from app.core.permissions import Actor, require_capability
from app.modules.audit.models import AuditLog, OutboxEvent
from app.modules.audit.repository import AuditRepository


class AuditService:
    """Read access to the audit trail and the outbox."""

    def __init__(self, repository: AuditRepository) -> None:
        self.repository = repository

    async def list_logs(
        self,
        actor: Actor,
        limit: int,
        offset: int,
        booking_id: UUID | None = None,
    ) -> tuple[list[AuditLog], int]:
        """List audit logs, optionally the history of one booking."""
        require_capability(actor, Capability.VIEW_AUDIT)
        if booking_id is None:
            return await self.repository.list_audit_logs(limit=limit, offset=offset)
        return await self.repository.list_audit_logs(
            limit=limit,
            offset=offset,
            entity_type="booking",
            entity_id=str(booking_id),
        )

    async def list_pending_outbox(self, actor: Actor, limit: int) -> list[OutboxEvent]:
        require_capability(actor, Capability.VIEW_AUDIT)
        return await self.repository.list_pending_outbox(limit)


async def get_audit_service(session: AsyncSession = Depends(get_db_session)) -> AuditService:
    """Dependency provider for audit service."""
    return AuditService(AuditRepository(session))
