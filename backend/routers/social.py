"""Social account routes - connected platform accounts.

Accounts are stored by the platform integrations; this router lists them
without their tokens and disconnects them.
"""

import logging
from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from middleware.auth import check_resource_access, get_current_user
from middleware.errors import ApiError, access_denied
from models.content import Platform
from models.social_account import SocialAccount, SocialAccountStatus
from models.user import User, UserRole
from services.access_store import AccessStore, get_access_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/social", tags=["social"])

# Profile fields safe to return from account_data
PUBLIC_ACCOUNT_FIELDS = ("followers_count", "profile_image", "verified")


# Response schemas
class AccountClientSummary(BaseModel):
    id: str
    name: str
    brand: Optional[str] = None

    class Config:
        from_attributes = True


class SocialAccountResponse(BaseModel):
    id: str
    platform: Platform
    username: str
    display_name: Optional[str] = None
    account_data: dict[str, Any] = {}
    status: SocialAccountStatus
    last_sync: Optional[datetime] = None
    client: Optional[AccountClientSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("account_data", mode="before")
    @classmethod
    def public_fields_only(cls, v):
        v = v or {}
        return {key: v.get(key) for key in PUBLIC_ACCOUNT_FIELDS}


class MessageResponse(BaseModel):
    message: str


# Endpoints
@router.get("/accounts", response_model=list[SocialAccountResponse])
async def list_accounts(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AccessStore, Depends(get_access_store)],
    platform: Optional[Platform] = Query(None),
    client_id: Optional[UUID] = Query(None),
):
    """List connected accounts.

    Admins see every account. Client users see the accounts they connected.
    Agency and creator users see their own accounts, or a client's accounts
    when `client_id` names a client they can access.
    """
    query = select(SocialAccount).options(selectinload(SocialAccount.client))

    if current_user.role == UserRole.CLIENT:
        query = query.where(SocialAccount.user_id == current_user.id)
    elif client_id is not None:
        await check_resource_access(store, current_user, client_id=str(client_id))
        query = query.where(SocialAccount.client_id == str(client_id))
    elif current_user.role != UserRole.ADMIN:
        query = query.where(SocialAccount.user_id == current_user.id)

    if platform:
        query = query.where(SocialAccount.platform == platform)

    result = await db.execute(query.order_by(SocialAccount.created_at.desc()))
    return result.scalars().all()


@router.delete("/accounts/{account_id}", response_model=MessageResponse)
async def disconnect_account(
    account_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Disconnect an account. Only the user who connected it, or an admin, may."""
    account = await db.get(SocialAccount, str(account_id))
    if account is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "Account not found",
            "The requested social media account does not exist",
        )

    if current_user.role != UserRole.ADMIN and account.user_id != current_user.id:
        if current_user.role == UserRole.CLIENT:
            raise access_denied("You can only disconnect your own accounts")
        raise access_denied("You can only disconnect accounts you manage")

    platform = account.platform.value
    await db.delete(account)
    await db.commit()

    logger.info(f"Social account disconnected: {platform} ({account.username}) by user {current_user.id}")
    return MessageResponse(message=f"{platform} account disconnected successfully")
