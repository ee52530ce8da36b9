"""Workspace routes - agency workspaces, their members and their clients."""

import logging
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from middleware.auth import get_current_user, require_resource_access, require_roles
from middleware.errors import ApiError, access_denied, not_found
from models.client import Client
from models.user import User, UserRole
from models.workspace import MemberRole, MemberStatus, Workspace, WorkspaceMember
from routers.clients import ClientResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


# ============================================================================
# Pydantic Schemas
# ============================================================================

class WorkspaceMemberSchema(BaseModel):
    id: str
    user_id: str
    role: MemberRole
    status: MemberStatus
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkspaceSchema(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkspaceDetailSchema(WorkspaceSchema):
    members: list[WorkspaceMemberSchema] = []


class WorkspaceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class WorkspaceUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class MemberAddRequest(BaseModel):
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE


class MemberUpdateRequest(BaseModel):
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None


class MessageResponse(BaseModel):
    message: str


async def _load_workspace(db: AsyncSession, workspace_id: str) -> Workspace:
    result = await db.execute(
        select(Workspace)
        .options(selectinload(Workspace.members))
        .where(Workspace.id == workspace_id)
        .execution_options(populate_existing=True)
    )
    workspace = result.scalar_one_or_none()
    if workspace is None:
        raise not_found("Workspace")
    return workspace


def _require_owner(workspace: Workspace, user: User) -> None:
    """Members may read a workspace; only its owner (or an admin) may change it."""
    if user.role != UserRole.ADMIN and workspace.owner_id != user.id:
        raise access_denied("Only the workspace owner can manage this workspace")


# ============================================================================
# Workspace Routes
# ============================================================================

@router.post("", response_model=WorkspaceDetailSchema, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    data: WorkspaceCreateRequest,
    current_user: Annotated[
        User, Depends(require_roles(UserRole.ADMIN, UserRole.AGENCY, UserRole.CREATOR))
    ],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a workspace owned by the caller."""
    workspace = Workspace(
        name=data.name.strip(),
        description=data.description,
        owner_id=current_user.id,
    )
    db.add(workspace)
    await db.commit()

    logger.info(f"Workspace created: {workspace.id} by user {current_user.id}")
    return await _load_workspace(db, workspace.id)


@router.get("", response_model=list[WorkspaceSchema])
async def list_workspaces(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List workspaces the caller owns or is an active member of (admins: all)."""
    query = select(Workspace)
    if current_user.role != UserRole.ADMIN:
        member_of = select(WorkspaceMember.workspace_id).where(
            WorkspaceMember.user_id == current_user.id,
            WorkspaceMember.status == MemberStatus.ACTIVE,
        )
        query = query.where(or_(
            Workspace.owner_id == current_user.id,
            Workspace.id.in_(member_of),
        ))

    result = await db.execute(query.order_by(Workspace.name))
    return result.scalars().all()


@router.get("/{workspace_id}", response_model=WorkspaceDetailSchema)
async def get_workspace(
    workspace_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a workspace with its members."""
    return await _load_workspace(db, str(workspace_id))


@router.put("/{workspace_id}", response_model=WorkspaceDetailSchema)
async def update_workspace(
    workspace_id: UUID,
    data: WorkspaceUpdateRequest,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Rename or describe a workspace (owner or admin)."""
    workspace = await _load_workspace(db, str(workspace_id))
    _require_owner(workspace, current_user)

    if data.name:
        workspace.name = data.name.strip()
    if data.description is not None:
        workspace.description = data.description

    await db.commit()

    logger.info(f"Workspace updated: {workspace.id} by user {current_user.id}")
    return await _load_workspace(db, workspace.id)


@router.delete("/{workspace_id}", response_model=MessageResponse)
async def delete_workspace(
    workspace_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a workspace and its memberships (owner or admin)."""
    workspace = await _load_workspace(db, str(workspace_id))
    _require_owner(workspace, current_user)

    await db.delete(workspace)
    await db.commit()

    logger.info(f"Workspace deleted: {workspace_id} by user {current_user.id}")
    return MessageResponse(message="Workspace deleted successfully")


# ============================================================================
# Member Routes
# ============================================================================

@router.post(
    "/{workspace_id}/members",
    response_model=WorkspaceMemberSchema,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    workspace_id: UUID,
    data: MemberAddRequest,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Add a user to a workspace (owner or admin)."""
    workspace = await _load_workspace(db, str(workspace_id))
    _require_owner(workspace, current_user)

    user_id = str(data.user_id)
    user_result = await db.execute(select(User.id).where(User.id == user_id))
    if user_result.scalar_one_or_none() is None:
        raise not_found("User")

    if user_id == workspace.owner_id or any(m.user_id == user_id for m in workspace.members):
        raise ApiError(
            status.HTTP_409_CONFLICT,
            "Member already exists",
            "This user already belongs to the workspace",
        )

    member = WorkspaceMember(
        workspace_id=workspace.id,
        user_id=user_id,
        role=data.role,
        status=data.status,
        invited_by=current_user.id,
    )
    db.add(member)
    await db.commit()

    logger.info(f"Member {user_id} added to workspace {workspace.id} by user {current_user.id}")
    return member


@router.put("/{workspace_id}/members/{user_id}", response_model=WorkspaceMemberSchema)
async def update_member(
    workspace_id: UUID,
    user_id: UUID,
    data: MemberUpdateRequest,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Change a member's role or status (owner or admin).

    Only active members pass the ownership gate, so deactivating a member
    revokes their access without removing the membership.
    """
    workspace = await _load_workspace(db, str(workspace_id))
    _require_owner(workspace, current_user)

    member = next((m for m in workspace.members if m.user_id == str(user_id)), None)
    if member is None:
        raise not_found("Member")

    if data.role is not None:
        member.role = data.role
    if data.status is not None:
        member.status = data.status

    await db.commit()

    logger.info(f"Member {user_id} updated in workspace {workspace.id} by user {current_user.id}")
    return member


@router.delete("/{workspace_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    workspace_id: UUID,
    user_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Remove a user from a workspace (owner or admin)."""
    workspace = await _load_workspace(db, str(workspace_id))
    _require_owner(workspace, current_user)

    member = next((m for m in workspace.members if m.user_id == str(user_id)), None)
    if member is None:
        raise not_found("Member")

    await db.delete(member)
    await db.commit()

    logger.info(f"Member {user_id} removed from workspace {workspace.id} by user {current_user.id}")
    return MessageResponse(message="Member removed successfully")


# ============================================================================
# Workspace Client Routes
# ============================================================================

@router.get("/{workspace_id}/clients", response_model=list[ClientResponse])
async def list_workspace_clients(
    workspace_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List the clients grouped under a workspace."""
    result = await db.execute(
        select(Client)
        .where(Client.workspace_id == str(workspace_id))
        .order_by(Client.name)
    )
    return result.scalars().all()


@router.get("/{workspace_id}/clients/{client_id}", response_model=ClientResponse)
async def get_workspace_client(
    workspace_id: UUID,
    client_id: UUID,
    current_user: Annotated[User, Depends(require_resource_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get one client of a workspace. Both the workspace and the client are access-checked."""
    result = await db.execute(
        select(Client).where(
            Client.id == str(client_id),
            Client.workspace_id == str(workspace_id),
        )
    )
    client = result.scalar_one_or_none()
    if client is None:
        raise not_found("Client")
    return client
