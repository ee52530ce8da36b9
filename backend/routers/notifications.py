"""Notification routes - each user's in-app inbox and sending to other users."""

import logging
from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import get_current_user, require_roles
from middleware.errors import ApiError
from models.notification import Notification
from models.user import User, UserRole
from routers.pagination import PageDep, Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


# Request/Response schemas
class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    data: dict[str, Any] = {}
    read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    pagination: Pagination
    unread_count: int


class NotificationTypeCount(BaseModel):
    total: int
    unread: int


class NotificationSendRequest(BaseModel):
    user_id: UUID
    type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", "title", "message", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class ReadAllResult(BaseModel):
    updated_count: int


class ReadAllResponse(BaseModel):
    message: str
    data: ReadAllResult


class MessageResponse(BaseModel):
    message: str


async def _get_own_notification(db: AsyncSession, notification_id: str, user: User) -> Notification:
    """Another user's notification is reported as missing."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "Notification not found",
            "The requested notification does not exist",
        )
    return notification


# Endpoints
@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: PageDep,
    read: Optional[bool] = Query(None),
    notification_type: Optional[str] = Query(None, alias="type"),
):
    """List the caller's notifications, newest first, with the unread total."""
    query = select(Notification).where(Notification.user_id == current_user.id)
    if read is not None:
        query = query.where(Notification.read == read)
    if notification_type:
        query = query.where(Notification.type == notification_type)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(Notification.created_at.desc()).offset(page.offset).limit(page.limit)
    )

    unread = (await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == current_user.id,
            Notification.read.is_(False),
        )
    )).scalar() or 0

    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in result.scalars().all()],
        pagination=page.pagination(total),
        unread_count=unread,
    )


@router.get("/types", response_model=dict[str, NotificationTypeCount])
async def notification_types(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Total and unread counts per notification type."""
    result = await db.execute(
        select(
            Notification.type,
            func.count(Notification.id),
            func.sum(case((Notification.read.is_(False), 1), else_=0)),
        )
        .where(Notification.user_id == current_user.id)
        .group_by(Notification.type)
    )
    return {
        type_: NotificationTypeCount(total=total, unread=unread or 0)
        for type_, total, unread in result.all()
    }


@router.put("/read-all", response_model=ReadAllResponse)
async def mark_all_read(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Mark every unread notification of the caller as read."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.commit()

    count = result.rowcount or 0
    logger.info(f"{count} notifications marked read by user {current_user.id}")
    return ReadAllResponse(
        message=f"{count} notifications marked as read",
        data=ReadAllResult(updated_count=count),
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Mark one of the caller's notifications as read."""
    notification = await _get_own_notification(db, str(notification_id), current_user)
    notification.read = True
    await db.commit()
    await db.refresh(notification)
    return notification


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete one of the caller's notifications."""
    notification = await _get_own_notification(db, str(notification_id), current_user)

    await db.delete(notification)
    await db.commit()

    logger.info(f"Notification deleted: {notification_id} by user {current_user.id}")
    return MessageResponse(message="Notification deleted successfully")


@router.post("/send", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def send_notification(
    data: NotificationSendRequest,
    current_user: Annotated[
        User, Depends(require_roles(UserRole.ADMIN, UserRole.AGENCY, UserRole.CREATOR))
    ],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Send a notification to another user. The sender is recorded in `data`."""
    recipient = await db.get(User, str(data.user_id))
    if recipient is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "User not found",
            "The target user does not exist",
        )

    notification = Notification(
        user_id=recipient.id,
        type=data.type,
        title=data.title,
        message=data.message,
        data={**data.data, "sender_id": current_user.id},
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    logger.info(f"Notification sent to {recipient.id} by user {current_user.id}")
    return notification
