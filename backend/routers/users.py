"""Users router - profile management for everyone, account administration for admins."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import get_current_user, require_roles
from middleware.errors import ApiError, access_denied, not_found
from models.user import User, UserRole, UserStatus
from routers.pagination import PageDep, Pagination
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


# Request/Response schemas
class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    avatar_url: Optional[str] = None
    timezone: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    data: list[UserResponse]
    pagination: Pagination


class UserStatsResponse(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    suspended_users: int
    role_distribution: dict[str, int]
    recent_registrations: int
    generated_at: datetime


class UserUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    timezone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=1000)
    # Admin-only fields
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v


class PasswordChangeRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: str = Field(..., min_length=8, max_length=128)


class MessageResponse(BaseModel):
    message: str


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise not_found("User")
    return user


# Endpoints
@router.get("", response_model=UserListResponse)
async def list_users(
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: PageDep,
    role: Optional[UserRole] = Query(None),
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
):
    """List users with filters and pagination (admin only)."""
    query = select(User)
    if role is not None:
        query = query.where(User.role == role)
    if status_filter is not None:
        query = query.where(User.status == status_filter)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
        ))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(User.created_at.desc()).offset(page.offset).limit(page.limit)
    )

    return UserListResponse(
        data=[UserResponse.model_validate(u) for u in result.scalars().all()],
        pagination=page.pagination(total),
    )


@router.get("/stats", response_model=UserStatsResponse)
async def user_stats(
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Account counts by status and role (admin only)."""
    status_result = await db.execute(
        select(User.status, func.count(User.id)).group_by(User.status)
    )
    status_counts = {s.value: count for s, count in status_result.fetchall()}

    role_result = await db.execute(
        select(User.role, func.count(User.id))
        .where(User.status == UserStatus.ACTIVE)
        .group_by(User.role)
    )
    role_counts = {r.value: count for r, count in role_result.fetchall()}

    since = datetime.now(timezone.utc) - timedelta(days=30)
    recent = (await db.execute(
        select(func.count(User.id)).where(User.created_at >= since)
    )).scalar() or 0

    return UserStatsResponse(
        total_users=sum(status_counts.values()),
        active_users=status_counts.get(UserStatus.ACTIVE.value, 0),
        inactive_users=status_counts.get(UserStatus.INACTIVE.value, 0),
        suspended_users=status_counts.get(UserStatus.SUSPENDED.value, 0),
        role_distribution={r.value: role_counts.get(r.value, 0) for r in UserRole},
        recent_registrations=recent,
        generated_at=datetime.now(timezone.utc),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a user profile. Users see their own; admins see anyone's."""
    user_id = str(user_id)
    if user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise access_denied("You can only view your own profile")

    return await _get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    request: UserUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a profile. Only admins may change role or status, and never their own."""
    user_id = str(user_id)
    is_admin = current_user.role == UserRole.ADMIN
    if user_id != current_user.id and not is_admin:
        raise access_denied("You can only update your own profile")

    if (request.role is not None or request.status is not None) and not is_admin:
        raise access_denied("Only administrators can change user roles and status")

    user = await _get_user_or_404(db, user_id)

    if user.id == current_user.id and (
        (request.role is not None and request.role != user.role)
        or (request.status is not None and request.status != user.status)
    ):
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Cannot modify own account",
            "You cannot change your own role or status",
        )

    if request.email and request.email != user.email:
        existing = await db.execute(
            select(User.id).where(User.email == request.email, User.id != user.id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ApiError(
                status.HTTP_409_CONFLICT,
                "Email already exists",
                "Another user is already using this email address",
            )
        user.email = request.email

    if request.first_name:
        user.first_name = request.first_name
    if request.last_name:
        user.last_name = request.last_name
    if request.timezone:
        user.timezone = request.timezone
    if request.avatar_url:
        user.avatar_url = request.avatar_url
    if request.role is not None:
        user.role = request.role
    if request.status is not None:
        user.status = request.status

    await db.commit()
    await db.refresh(user)

    logger.info(f"User updated: {user.id} by user {current_user.id}")
    return user


@router.put("/{user_id}/password", response_model=MessageResponse)
async def change_password(
    user_id: UUID,
    request: PasswordChangeRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Change a password. Users must confirm their current one; admins may reset anyone's."""
    user_id = str(user_id)
    if user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise access_denied("You can only change your own password")

    user = await _get_user_or_404(db, user_id)

    if user.id == current_user.id:
        if not request.current_password:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "Current password required",
                "Please provide your current password",
            )
        if not AuthService.verify_password(request.current_password, user.password_hash):
            raise ApiError(
                status.HTTP_401_UNAUTHORIZED,
                "Invalid password",
                "Current password is incorrect",
            )

    user.password_hash = AuthService.hash_password(request.new_password)
    await db.commit()

    logger.info(f"Password changed for user: {user.id} by user {current_user.id}")
    return MessageResponse(message="Password updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a user (admin only)."""
    user_id = str(user_id)
    if user_id == current_user.id:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Cannot delete own account",
            "You cannot delete your own account",
        )

    user = await _get_user_or_404(db, user_id)

    await db.delete(user)
    await db.commit()

    logger.info(f"User deleted: {user_id} ({user.email}) by admin {current_user.id}")
    return MessageResponse(message="User deleted successfully")
