"""Authentication router - registration, login and the current-user profile."""

import logging
import re
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from database import get_db
from middleware.auth import get_current_user
from middleware.errors import ApiError
from middleware.rate_limit import limiter
from models.user import User, UserRole, UserStatus
from routers.users import UserResponse
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
settings = get_settings()

# Admin accounts are created by scripts/create_admin.py, never by sign-up
SELF_SERVICE_ROLES = (UserRole.AGENCY, UserRole.CREATOR, UserRole.CLIENT)


def check_password_strength(password: str) -> list[str]:
    """
    Check password strength and return list of problems.
    Returns empty list if password is strong.
    """
    problems = []

    if len(password) < 8:
        problems.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        problems.append("Password must contain at least one number")

    return problems


# Request/Response schemas
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., max_length=128)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    role: UserRole = UserRole.CREATOR

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        problems = check_password_strength(v)
        if problems:
            raise ValueError("; ".join(problems))
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        if v not in SELF_SERVICE_ROLES:
            raise ValueError(
                f"Role must be one of: {', '.join(r.value for r in SELF_SERVICE_ROLES)}"
            )
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int


def _auth_response(user: User) -> AuthResponse:
    token = AuthService.create_access_token(user.id, user.email, user.role.value)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


# Endpoints
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.login_rate_limit)
async def register(
    request: Request,  # Required for rate limiting - must be named 'request'
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create an account and return an access token for it."""
    existing = await db.execute(select(User.id).where(User.email == data.email))
    if existing.scalar_one_or_none() is not None:
        raise ApiError(
            status.HTTP_409_CONFLICT,
            "Email already exists",
            "An account with this email address already exists",
        )

    user = User(
        email=data.email,
        password_hash=AuthService.hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"User registered: {user.id} ({user.role.value})")
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,  # Required for rate limiting - must be named 'request'
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Login with email and password, returns a JWT access token."""
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if user is None or not AuthService.verify_password(login_data.password, user.password_hash):
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid credentials",
            "Invalid email or password",
        )

    if user.status != UserStatus.ACTIVE:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "Account inactive",
            "Your account has been deactivated",
        )

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    logger.info(f"User logged in: {user.id}")
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the authenticated user's profile."""
    return current_user
