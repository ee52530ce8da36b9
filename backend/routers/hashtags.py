"""Hashtag pack routes - each user's saved hashtag sets."""

import logging
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import get_current_user
from middleware.errors import ApiError
from models.content import Platform
from models.hashtag_pack import HashtagPack
from models.user import User
from routers.content import normalize_hashtags
from routers.pagination import PageDep, Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hashtags", tags=["hashtags"])


# Request/Response schemas
class HashtagPackResponse(BaseModel):
    id: str
    name: str
    hashtags: list[str]
    purpose: Optional[str] = None
    platform: Optional[Platform] = None
    usage_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class HashtagPackListResponse(BaseModel):
    data: list[HashtagPackResponse]
    pagination: Pagination


class HashtagPackCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    hashtags: list[str] = Field(..., min_length=1, max_length=30)
    purpose: Optional[str] = Field(None, max_length=200)
    platform: Optional[Platform] = None

    @field_validator("name", "purpose", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("hashtags")
    @classmethod
    def clean_hashtags(cls, v):
        return normalize_hashtags(v)


class HashtagPackUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    hashtags: Optional[list[str]] = Field(None, min_length=1, max_length=30)
    purpose: Optional[str] = Field(None, max_length=200)
    platform: Optional[Platform] = None

    @field_validator("name", "purpose", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("hashtags")
    @classmethod
    def clean_hashtags(cls, v):
        return normalize_hashtags(v)


class MessageResponse(BaseModel):
    message: str


async def _get_own_pack(db: AsyncSession, pack_id: str, user: User) -> HashtagPack:
    """Packs are private: another user's pack is reported as missing."""
    result = await db.execute(
        select(HashtagPack).where(HashtagPack.id == pack_id, HashtagPack.user_id == user.id)
    )
    pack = result.scalar_one_or_none()
    if pack is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "Pack not found",
            "The requested hashtag pack does not exist",
        )
    return pack


# Endpoints
@router.get("/packs", response_model=HashtagPackListResponse)
async def list_packs(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: PageDep,
):
    """List the caller's hashtag packs, newest first."""
    query = select(HashtagPack).where(HashtagPack.user_id == current_user.id)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(HashtagPack.created_at.desc()).offset(page.offset).limit(page.limit)
    )

    return HashtagPackListResponse(
        data=[HashtagPackResponse.model_validate(p) for p in result.scalars().all()],
        pagination=page.pagination(total),
    )


@router.post("/packs", response_model=HashtagPackResponse, status_code=status.HTTP_201_CREATED)
async def create_pack(
    data: HashtagPackCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Save a new hashtag pack."""
    pack = HashtagPack(
        user_id=current_user.id,
        name=data.name,
        hashtags=data.hashtags,
        purpose=data.purpose,
        platform=data.platform,
    )
    db.add(pack)
    await db.commit()
    await db.refresh(pack)

    logger.info(f"Hashtag pack created: {pack.id} by user {current_user.id}")
    return pack


@router.get("/packs/{pack_id}", response_model=HashtagPackResponse)
async def get_pack(
    pack_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get one of the caller's hashtag packs."""
    return await _get_own_pack(db, str(pack_id), current_user)


@router.put("/packs/{pack_id}", response_model=HashtagPackResponse)
async def update_pack(
    pack_id: UUID,
    data: HashtagPackUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update one of the caller's hashtag packs."""
    pack = await _get_own_pack(db, str(pack_id), current_user)

    if data.name:
        pack.name = data.name
    if data.hashtags:
        pack.hashtags = data.hashtags
    if data.purpose:
        pack.purpose = data.purpose
    if data.platform is not None:
        pack.platform = data.platform

    await db.commit()
    await db.refresh(pack)

    logger.info(f"Hashtag pack updated: {pack.id} by user {current_user.id}")
    return pack


@router.delete("/packs/{pack_id}", response_model=MessageResponse)
async def delete_pack(
    pack_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete one of the caller's hashtag packs."""
    pack = await _get_own_pack(db, str(pack_id), current_user)

    await db.delete(pack)
    await db.commit()

    logger.info(f"Hashtag pack deleted: {pack_id} by user {current_user.id}")
    return MessageResponse(message="Hashtag pack deleted successfully")
