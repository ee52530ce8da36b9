"""Client routes - client records managed by creators and agencies."""

import logging
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import (
    get_current_user,
    require_access,
    require_resource_access,
    require_roles,
)
from middleware.errors import access_denied, not_found
from models.client import Client, ClientStatus
from models.user import User, UserRole
from models.workspace import Workspace
from services.access_store import AccessStore, get_access_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])

MANAGER_ROLES = (UserRole.ADMIN, UserRole.AGENCY, UserRole.CREATOR)


# ============================================================================
# Pydantic Schemas
# ============================================================================

class ClientResponse(BaseModel):
    id: str
    name: str
    brand: Optional[str] = None
    email: Optional[str] = None
    industry: Optional[str] = None
    website_url: Optional[str] = None
    notes: Optional[str] = None
    status: ClientStatus
    user_id: Optional[str] = None
    creator_id: str
    workspace_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    industry: Optional[str] = Field(None, max_length=255)
    website_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    user_id: Optional[UUID] = None
    workspace_id: Optional[UUID] = None


class ClientUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    industry: Optional[str] = Field(None, max_length=255)
    website_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    status: Optional[ClientStatus] = None
    user_id: Optional[UUID] = None


class MessageResponse(BaseModel):
    message: str


async def _get_client_or_404(db: AsyncSession, client_id: str) -> Client:
    result = await db.execute(select(Client).where(Client.id == client_id))
    client = result.scalar_one_or_none()
    if client is None:
        raise not_found("Client")
    return client


async def _ensure_user_exists(db: AsyncSession, user_id: str) -> None:
    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        raise not_found("User")


# ============================================================================
# Client Routes
# ============================================================================

@router.get("", response_model=list[ClientResponse])
async def list_clients(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = Query(False, description="Include inactive and paused clients"),
):
    """List the clients visible to the caller."""
    query = select(Client)
    if not include_inactive:
        query = query.where(Client.status == ClientStatus.ACTIVE)

    if current_user.role == UserRole.CLIENT:
        query = query.where(Client.user_id == current_user.id)
    elif current_user.role != UserRole.ADMIN:
        owned_workspaces = select(Workspace.id).where(Workspace.owner_id == current_user.id)
        query = query.where(or_(
            Client.creator_id == current_user.id,
            Client.workspace_id.in_(owned_workspaces),
        ))

    result = await db.execute(query.order_by(Client.name))
    return result.scalars().all()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreateRequest,
    current_user: Annotated[User, Depends(require_roles(*MANAGER_ROLES))],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AccessStore, Depends(get_access_store)],
):
    """Create a client record owned by the caller, optionally inside a workspace."""
    workspace_id = str(data.workspace_id) if data.workspace_id else None
    if workspace_id:
        workspace = await store.get_workspace(workspace_id)
        if workspace is None:
            raise not_found("Workspace")
        # Clients are reached through their workspace owner, so only the
        # owner may file clients under it.
        if current_user.role != UserRole.ADMIN and workspace.owner_id != current_user.id:
            raise access_denied("Only the workspace owner can add clients to it")

    linked_user_id = str(data.user_id) if data.user_id else None
    if linked_user_id:
        await _ensure_user_exists(db, linked_user_id)

    client = Client(
        name=data.name.strip(),
        brand=data.brand,
        email=data.email,
        industry=data.industry,
        website_url=data.website_url,
        notes=data.notes,
        user_id=linked_user_id,
        creator_id=current_user.id,
        workspace_id=workspace_id,
        status=ClientStatus.ACTIVE,
    )
    db.add(client)
    await db.commit()
    await db.refresh(client)

    logger.info(f"Client created: {client.id} by user {current_user.id}")
    return client


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a client record."""
    return await _get_client_or_404(db, str(client_id))


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: UUID,
    data: ClientUpdateRequest,
    current_user: Annotated[User, Depends(require_access(*MANAGER_ROLES))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a client record (not available to the client's own login)."""
    client = await _get_client_or_404(db, str(client_id))

    updates = data.model_dump(exclude_unset=True)
    for field in ("name", "status"):
        if field in updates and updates[field] is None:
            del updates[field]
    if updates.get("user_id") is not None:
        updates["user_id"] = str(updates["user_id"])
        await _ensure_user_exists(db, updates["user_id"])
    if updates.get("name"):
        updates["name"] = updates["name"].strip()

    for field, value in updates.items():
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)

    logger.info(f"Client updated: {client.id} by user {current_user.id}")
    return client


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: UUID,
    current_user: Annotated[User, Depends(require_access(*MANAGER_ROLES))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a client record."""
    client = await _get_client_or_404(db, str(client_id))

    await db.delete(client)
    await db.commit()

    logger.info(f"Client deleted: {client_id} by user {current_user.id}")
    return MessageResponse(message="Client deleted successfully")
