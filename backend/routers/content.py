"""Content routes - content items, their approval lifecycle and review comments.

Visibility is scoped by role: admins see everything, creators and agencies
see what they created, and client logins see items produced for the client
records linked to them.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from middleware.auth import get_current_user
from middleware.errors import ApiError, access_denied, not_found
from models.client import Client
from models.content import (
    CommentType,
    ContentComment,
    ContentItem,
    ContentStatus,
    ContentType,
    Platform,
    can_transition,
)
from models.user import User, UserRole
from routers.pagination import PageDep, Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/content", tags=["content"])

HASHTAG_RE = re.compile(r"^#?[A-Za-z0-9_]+$")

# Later states are reached only through updates and review comments
INITIAL_STATUSES = frozenset({ContentStatus.DRAFT, ContentStatus.REVIEW})

# Comment types that move the item through review
REVIEW_OUTCOMES = {
    CommentType.APPROVAL: ContentStatus.APPROVED,
    CommentType.REJECTION: ContentStatus.REJECTED,
}


# ============================================================================
# Pydantic Schemas
# ============================================================================

def normalize_hashtags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if not HASHTAG_RE.match(tag):
            raise ValueError(
                "Each hashtag must contain only letters, numbers, and underscores"
            )
        cleaned.append(tag if tag.startswith("#") else f"#{tag}")
    return cleaned


class CommentResponse(BaseModel):
    id: str
    content_item_id: str
    user_id: str
    comment: str
    type: CommentType
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContentResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    platform: Platform
    content_type: ContentType
    status: ContentStatus
    scheduled_date: Optional[datetime] = None
    published_date: Optional[datetime] = None
    client_id: Optional[str] = None
    creator_id: str
    script: Optional[str] = None
    caption: Optional[str] = None
    hashtags: Optional[list[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContentDetailResponse(ContentResponse):
    comments: list[CommentResponse] = []


class ContentListResponse(BaseModel):
    data: list[ContentResponse]
    pagination: Pagination


class ContentCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    platform: Platform
    content_type: ContentType
    scheduled_date: Optional[datetime] = None
    client_id: Optional[UUID] = None
    script: Optional[str] = None
    caption: Optional[str] = None
    hashtags: Optional[list[str]] = Field(None, max_length=30)
    status: ContentStatus = ContentStatus.DRAFT

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("hashtags")
    @classmethod
    def clean_hashtags(cls, v):
        return normalize_hashtags(v)

    @field_validator("status")
    @classmethod
    def initial_status(cls, v):
        if v not in INITIAL_STATUSES:
            raise ValueError("New content must start as draft or review")
        return v


class ContentUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    platform: Optional[Platform] = None
    content_type: Optional[ContentType] = None
    scheduled_date: Optional[datetime] = None
    client_id: Optional[UUID] = None
    script: Optional[str] = None
    caption: Optional[str] = None
    hashtags: Optional[list[str]] = Field(None, max_length=30)
    status: Optional[ContentStatus] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("hashtags")
    @classmethod
    def clean_hashtags(cls, v):
        return normalize_hashtags(v)


class CommentCreateRequest(BaseModel):
    comment: str = Field(..., max_length=5000)
    type: CommentType = CommentType.COMMENT


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# Helpers
# ============================================================================

def _scope_to_user(query: Select, user: User) -> Select:
    """Restrict a ContentItem query to the rows the user may see."""
    if user.role == UserRole.CLIENT:
        linked_clients = select(Client.id).where(Client.user_id == user.id)
        return query.where(ContentItem.client_id.in_(linked_clients))
    if user.role in (UserRole.CREATOR, UserRole.AGENCY):
        return query.where(ContentItem.creator_id == user.id)
    return query


async def _get_item_or_404(db: AsyncSession, content_id: str) -> ContentItem:
    result = await db.execute(select(ContentItem).where(ContentItem.id == content_id))
    item = result.scalar_one_or_none()
    if item is None:
        raise not_found("Content")
    return item


async def _linked_user_id(db: AsyncSession, client_id: Optional[str]) -> Optional[str]:
    """User id of the login linked to a client record, if any."""
    if client_id is None:
        return None
    result = await db.execute(select(Client.user_id).where(Client.id == client_id))
    return result.scalar_one_or_none()


async def _check_client_assignable(db: AsyncSession, client_id: str, user: User) -> None:
    """Content may only be filed under a client the caller created (admins: any)."""
    result = await db.execute(select(Client.creator_id).where(Client.id == client_id))
    creator_id = result.scalar_one_or_none()
    if creator_id is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "Client not found",
            "The specified client does not exist",
        )
    if creator_id != user.id and user.role != UserRole.ADMIN:
        raise access_denied("You do not have access to this client")


def _apply_status(item: ContentItem, target: ContentStatus) -> None:
    if not can_transition(item.status, target):
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid status transition",
            f"Content cannot move from {item.status.value} to {target.value}",
        )
    item.status = target
    if target == ContentStatus.PUBLISHED and item.published_date is None:
        item.published_date = datetime.now(timezone.utc)


# ============================================================================
# Content Routes
# ============================================================================

@router.get("", response_model=ContentListResponse)
async def list_content(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: PageDep,
    status_filter: Optional[ContentStatus] = Query(None, alias="status"),
    platform: Optional[Platform] = Query(None),
    client_id: Optional[UUID] = Query(None),
):
    """List content items visible to the caller, newest first."""
    query = _scope_to_user(select(ContentItem), current_user)
    if status_filter is not None:
        query = query.where(ContentItem.status == status_filter)
    if platform is not None:
        query = query.where(ContentItem.platform == platform)
    if client_id is not None:
        query = query.where(ContentItem.client_id == str(client_id))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(ContentItem.created_at.desc()).offset(page.offset).limit(page.limit)
    )

    return ContentListResponse(
        data=[ContentResponse.model_validate(item) for item in result.scalars().all()],
        pagination=page.pagination(total),
    )


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    data: ContentCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a content item owned by the caller."""
    client_id = str(data.client_id) if data.client_id else None
    if client_id:
        await _check_client_assignable(db, client_id, current_user)

    item = ContentItem(
        title=data.title,
        description=data.description,
        platform=data.platform,
        content_type=data.content_type,
        scheduled_date=data.scheduled_date,
        client_id=client_id,
        creator_id=current_user.id,
        script=data.script,
        caption=data.caption,
        hashtags=data.hashtags,
        status=data.status,
    )

    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Content item created: {item.id} by user {current_user.id}")
    return item


@router.get("/{content_id}", response_model=ContentDetailResponse)
async def get_content(
    content_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a content item with its comments. Items outside the caller's scope are 404."""
    query = _scope_to_user(
        select(ContentItem).options(selectinload(ContentItem.comments)),
        current_user,
    ).where(ContentItem.id == str(content_id))

    result = await db.execute(query)
    item = result.scalar_one_or_none()
    if item is None:
        raise not_found("Content")
    return item


@router.put("/{content_id}", response_model=ContentResponse)
async def update_content(
    content_id: UUID,
    data: ContentUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a content item. Status changes must follow the approval lifecycle."""
    item = await _get_item_or_404(db, str(content_id))

    if current_user.role == UserRole.CLIENT:
        if await _linked_user_id(db, item.client_id) != current_user.id:
            raise access_denied("You can only update your own content")
    elif current_user.role in (UserRole.CREATOR, UserRole.AGENCY):
        if item.creator_id != current_user.id:
            raise access_denied("You can only update content you created")

    updates = data.model_dump(exclude_unset=True)
    new_status = updates.pop("status", None)
    for field in ("title", "platform", "content_type"):
        if field in updates and updates[field] is None:
            del updates[field]

    if "client_id" in updates and updates["client_id"] is not None:
        updates["client_id"] = str(updates["client_id"])
        await _check_client_assignable(db, updates["client_id"], current_user)

    for field, value in updates.items():
        setattr(item, field, value)

    if new_status is not None:
        _apply_status(item, new_status)

    await db.commit()
    await db.refresh(item)

    logger.info(f"Content item updated: {item.id} by user {current_user.id}")
    return item


@router.delete("/{content_id}", response_model=MessageResponse)
async def delete_content(
    content_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a content item (its creator or an admin)."""
    item = await _get_item_or_404(db, str(content_id))

    if current_user.role != UserRole.ADMIN and item.creator_id != current_user.id:
        raise access_denied("You can only delete content you created")

    await db.delete(item)
    await db.commit()

    logger.info(f"Content item deleted: {content_id} by user {current_user.id}")
    return MessageResponse(message="Content item deleted successfully")


@router.post(
    "/{content_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    content_id: UUID,
    data: CommentCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Comment on a content item. Approvals and rejections also move its status."""
    text = data.comment.strip()
    if not text:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Comment required",
            "Comment text cannot be empty",
        )

    item = await _get_item_or_404(db, str(content_id))

    has_access = (
        current_user.role == UserRole.ADMIN
        or item.creator_id == current_user.id
        or await _linked_user_id(db, item.client_id) == current_user.id
    )
    if not has_access:
        raise access_denied("You do not have permission to comment on this content")

    target = REVIEW_OUTCOMES.get(data.type)
    if target is not None:
        _apply_status(item, target)

    comment = ContentComment(
        content_item_id=item.id,
        user_id=current_user.id,
        comment=text,
        type=data.type,
    )
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    logger.info(f"Comment ({data.type.value}) added to content {item.id} by user {current_user.id}")
    return comment
