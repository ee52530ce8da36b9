"""Authentication service - JWT issuing/decoding and password hashing."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from config import get_settings

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    """Base class for access token failures."""


class TokenExpiredError(TokenError):
    """Token signature is valid but the token is past its expiry."""


class InvalidTokenError(TokenError):
    """Token is malformed, badly signed or missing required claims."""


class TokenData(BaseModel):
    """Data extracted from JWT token."""
    user_id: str
    email: str | None = None
    role: str | None = None
    token_type: str = ACCESS_TOKEN_TYPE


class AccessToken(BaseModel):
    """Bearer token returned to clients on login/registration."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthService:
    """Authentication service for password hashing and JWT handling."""

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        password_bytes = password.encode("utf-8")
        salt = bcrypt.gensalt()
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8")
            )
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    @staticmethod
    def create_access_token(
        user_id: str,
        email: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> AccessToken:
        """Issue a signed access token for a user."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + expires_delta,
        }
        token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        return AccessToken(
            access_token=token,
            expires_in=int(expires_delta.total_seconds()),
        )

    @staticmethod
    def decode_access_token(token: str) -> TokenData:
        """Decode and validate an access token.

        Raises TokenExpiredError for a validly signed token past its expiry,
        and InvalidTokenError for anything else that is wrong with it.
        """
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("token expired") from exc
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidTokenError("token has no subject")

        token_type = payload.get("type", ACCESS_TOKEN_TYPE)
        if token_type != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError(f"unexpected token type: {token_type}")

        return TokenData(
            user_id=user_id,
            email=payload.get("email"),
            role=payload.get("role"),
            token_type=token_type,
        )
