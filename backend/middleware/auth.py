"""Authorization pipeline - token verification, role gate and ownership gate.

The three stages compose as FastAPI dependencies:

    get_current_user  ->  require_roles(...)  ->  require_resource_access

Each stage either returns the verified user to the next one or raises an
ApiError, which stops the request and renders {"error", "message"}.
"""

import logging
from typing import Annotated, Any, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from middleware.errors import ApiError, access_denied
from models.user import User, UserRole, UserStatus
from models.workspace import MemberStatus
from services.access_store import AccessStore, get_access_store
from services.auth_service import AuthService, InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported in the API error shape
security = HTTPBearer(auto_error=False)


# ============================================================================
# Token Verifier
# ============================================================================

async def authenticate(token: Optional[str], store: AccessStore) -> User:
    """Resolve a bearer token to an active user.

    401 for a missing, malformed or expired token or an unknown subject,
    403 for an account that is not active, 500 if the lookup itself fails.
    """
    if not token:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Access token required",
            "Please provide a valid authentication token",
        )

    try:
        token_data = AuthService.decode_access_token(token)
    except TokenExpiredError:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Token expired", "Please log in again")
    except InvalidTokenError:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid token",
            "The provided token is malformed",
        )

    try:
        user = await store.get_user(token_data.user_id)
    except Exception as exc:
        logger.exception(f"User lookup failed during authentication for {token_data.user_id}")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Authentication failed",
            "Internal server error during authentication",
        ) from exc

    if user is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid token",
            "User not found or token expired",
        )

    if user.status != UserStatus.ACTIVE:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "Account inactive",
            "Your account has been deactivated",
        )

    return user


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: Annotated[AccessStore, Depends(get_access_store)],
) -> User:
    """Verify the bearer token and attach the user to the request."""
    token = credentials.credentials if credentials else None
    user = await authenticate(token, store)
    request.state.user = user
    return user


# ============================================================================
# Role Gate
# ============================================================================

def check_role(user: Optional[Any], roles: tuple[UserRole, ...]) -> None:
    """Exact membership test; no role implies another."""
    if user is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Authentication required",
            "Please log in to access this resource",
        )
    if user.role not in roles:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "Insufficient permissions",
            f"This action requires one of the following roles: {', '.join(r.value for r in roles)}",
        )


def require_roles(*roles: UserRole):
    """Create a dependency that requires one of the given roles."""
    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        check_role(current_user, roles)
        return current_user
    return role_checker


# ============================================================================
# Ownership Gate
# ============================================================================

async def _lookup(store_call, resource_id: str):
    try:
        return await store_call(resource_id)
    except Exception as exc:
        logger.exception(f"Access check lookup failed for {resource_id}")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Access check failed",
            "Internal server error during access verification",
        ) from exc


async def check_resource_access(
    store: AccessStore,
    user: Any,
    workspace_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> None:
    """Check that `user` may act on the given workspace and/or client.

    Admins always pass. A workspace is accessible to its owner and its
    active members. A client is accessible to its linked user when the
    caller has the client role, and otherwise only to the owner of the
    client's workspace. When both ids are given both checks must pass.
    """
    if user.role == UserRole.ADMIN:
        return

    if workspace_id is not None:
        workspace = await _lookup(store.get_workspace, workspace_id)
        if workspace is None:
            raise ApiError(
                status.HTTP_404_NOT_FOUND,
                "Workspace not found",
                "The requested workspace does not exist",
            )

        is_owner = workspace.owner_id == user.id
        is_member = any(
            member.user_id == user.id and member.status == MemberStatus.ACTIVE
            for member in workspace.members
        )
        if not is_owner and not is_member:
            raise access_denied("You do not have access to this workspace")

    if client_id is not None:
        client = await _lookup(store.get_client, client_id)
        if client is None:
            raise ApiError(
                status.HTTP_404_NOT_FOUND,
                "Client not found",
                "The requested client does not exist",
            )

        if user.role == UserRole.CLIENT:
            if client.user_id != user.id:
                raise access_denied("You can only access your own client data")
        else:
            # Non-client roles are checked against the client's workspace
            # owner only, not the client's creator_id.
            workspace_owner_id = client.workspace.owner_id if client.workspace is not None else None
            if workspace_owner_id != user.id:
                raise access_denied("You do not have access to this client")


async def require_resource_access(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[AccessStore, Depends(get_access_store)],
) -> User:
    """Ownership gate for routes with {workspace_id} and/or {client_id} path params."""
    await check_resource_access(
        store,
        current_user,
        workspace_id=request.path_params.get("workspace_id"),
        client_id=request.path_params.get("client_id"),
    )
    return current_user


def require_access(*roles: UserRole):
    """Role gate followed by the ownership gate, in that order."""
    role_checker = require_roles(*roles)

    async def access_checker(
        request: Request,
        current_user: Annotated[User, Depends(role_checker)],
        store: Annotated[AccessStore, Depends(get_access_store)],
    ) -> User:
        await check_resource_access(
            store,
            current_user,
            workspace_id=request.path_params.get("workspace_id"),
            client_id=request.path_params.get("client_id"),
        )
        return current_user
    return access_checker
