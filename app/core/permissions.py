"""Role capability sets and the request actor."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from app.core.enums import Capability, RoleEnum
from app.shared.exceptions import UnauthorizedException

ROLE_CAPABILITIES: dict[RoleEnum, frozenset[Capability]] = {
    RoleEnum.ADMIN: frozenset(Capability),
    RoleEnum.PHOTOGRAPHER: frozenset(
        {
            Capability.MANAGE_TIME_OFF,
            Capability.COMPLETE_BOOKINGS,
        },
    ),
    RoleEnum.CLIENT: frozenset({Capability.SCHEDULE_BOOKINGS}),
    RoleEnum.BROKER: frozenset({Capability.SCHEDULE_BOOKINGS}),
    RoleEnum.EDITOR: frozenset({Capability.VIEW_ALL_BOOKINGS}),
}


@dataclass(frozen=True, slots=True)
class Actor:
    """Authenticated caller resolved from the bearer token."""

    id: UUID
    role: RoleEnum
    client_id: UUID | None = None
    photographer_id: UUID | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES[self.role]


def require_capability(actor: Actor, capability: Capability, message: str | None = None) -> None:
    """Raise when actor's role does not grant capability."""
    if not actor.can(capability):
        raise UnauthorizedException(message or f"Role '{actor.role}' cannot {capability.replace('_', ' ')}")


def ensure_client_scope(actor: Actor, client_id: UUID) -> None:
    """Clients and brokers may only act on behalf of their own client account."""
    if actor.can(Capability.SCHEDULE_ANY_CLIENT):
        return
    if actor.client_id is None or actor.client_id != client_id:
        raise UnauthorizedException("You cannot schedule on behalf of another client")


def ensure_photographer_scope(actor: Actor, photographer_id: UUID) -> None:
    """Photographers may only touch their own calendar."""
    if actor.is_admin:
        return
    if actor.photographer_id is None or actor.photographer_id != photographer_id:
        raise UnauthorizedException("You cannot manage another photographer's calendar")


def ensure_booking_visible(actor: Actor, client_id: UUID, photographer_id: UUID | None) -> None:
    """Staff see every booking; others only those of their client or assigned to them."""
    if actor.can(Capability.VIEW_ALL_BOOKINGS) or actor.can(Capability.SCHEDULE_ANY_CLIENT):
        return
    if actor.client_id is not None and actor.client_id == client_id:
        return
    if actor.photographer_id is not None and actor.photographer_id == photographer_id:
        return
    raise UnauthorizedException("You cannot access this booking")
