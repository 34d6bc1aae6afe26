"""Clients API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.security import get_current_actor
from app.modules.clients.schemas import ClientCreate, ClientRead, ClientUpdate
from app.modules.clients.service import ClientsService, get_clients_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> ClientRead:
    """Create client."""
    client = await service.create_client(payload, current_actor)
    return ClientRead.model_validate(client)


@router.patch("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: UUID,
    payload: ClientUpdate,
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> ClientRead:
    """Update client."""
    client = await service.update_client(client_id, payload, current_actor)
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: UUID,
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> ClientRead:
    """Get client."""
    client = await service.get_client(client_id, current_actor)
    return ClientRead.model_validate(client)


@router.get("", response_model=Page[ClientRead])
async def list_clients(
    pagination=Depends(get_pagination_params),
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> Page[ClientRead]:
    """List clients."""
    items, total = await service.list_clients(current_actor, pagination.limit, pagination.offset)
    serialized = [ClientRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.put("/{client_id}/blocked-photographers/{photographer_id}", response_model=ClientRead)
async def block_photographer(
    client_id: UUID,
    photographer_id: UUID,
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> ClientRead:
    """Block photographer for this client."""
    client = await service.block_photographer(client_id, photographer_id, current_actor)
    return ClientRead.model_validate(client)


@router.delete("/{client_id}/blocked-photographers/{photographer_id}", response_model=ClientRead)
async def unblock_photographer(
    client_id: UUID,
    photographer_id: UUID,
    service: ClientsService = Depends(get_clients_service),
    current_actor=Depends(get_current_actor),
) -> ClientRead:
    """Remove photographer from client's block list."""
    client = await service.unblock_photographer(client_id, photographer_id, current_actor)
    return ClientRead.model_validate(client)
