"""Read-only lookups used by the authorization pipeline.

The pipeline stages never touch the ORM session directly; they receive an
AccessStore so tests (and alternative backends) can substitute their own.
"""

from typing import Annotated, Any, Optional, Protocol
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from models.client import Client
from models.user import User
from models.workspace import Workspace


class AccessStore(Protocol):
    """Lookups by primary key. Each returns None when the row does not exist.

    Returned objects are read by attribute:
    user -> id, role, status
    workspace -> owner_id, members[].user_id, members[].status
    client -> user_id, workspace (with owner_id) or None
    """

    async def get_user(self, user_id: str) -> Optional[Any]: ...

    async def get_workspace(self, workspace_id: str) -> Optional[Any]: ...

    async def get_client(self, client_id: str) -> Optional[Any]: ...


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


class SqlAccessStore:
    """AccessStore backed by the request's SQLAlchemy session.

    Ids that are not UUIDs cannot match a row and resolve to None without
    a query.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> Optional[User]:
        if not _is_uuid(user_id):
            return None
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        if not _is_uuid(workspace_id):
            return None
        result = await self.db.execute(
            select(Workspace)
            .options(selectinload(Workspace.members))
            .where(Workspace.id == workspace_id)
        )
        return result.scalar_one_or_none()

    async def get_client(self, client_id: str) -> Optional[Client]:
        if not _is_uuid(client_id):
            return None
        result = await self.db.execute(
            select(Client)
            .options(selectinload(Client.workspace))
            .where(Client.id == client_id)
        )
        return result.scalar_one_or_none()


async def get_access_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AccessStore:
    """Dependency providing the AccessStore for the current request."""
    return SqlAccessStore(db)
