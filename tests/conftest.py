"""
Shared pytest fixtures for the ContentFlow API test suite.

HTTP tests drive the real application through httpx's ASGI transport with
`get_db` pointed at a throwaway SQLite database, so every test starts from
an empty schema.
"""

import itertools
import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.client import Client
from models.content import ContentItem, ContentStatus, ContentType, Platform
from models.user import User, UserRole, UserStatus
from models.workspace import MemberStatus, Workspace, WorkspaceMember
from services.auth_service import AuthService

DEFAULT_PASSWORD = "Passw0rd!"

# bcrypt is deliberately slow; hash the shared password once
DEFAULT_PASSWORD_HASH = AuthService.hash_password(DEFAULT_PASSWORD)


# ============================================================================
# Database
# ============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'contentflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Session for arranging and inspecting rows directly."""
    async with session_factory() as session:
        yield session


# ============================================================================
# HTTP client
# ============================================================================


@pytest_asyncio.fixture
async def client(session_factory):
    """httpx client bound to the app, with the database swapped for the test one."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        token = AuthService.create_access_token(user.id, user.email, user.role.value)
        return {"Authorization": f"Bearer {token.access_token}"}

    return _auth_headers


# ============================================================================
# Row factories
# ============================================================================


@pytest.fixture
def make_user(session_factory):
    counter = itertools.count(1)

    async def _make_user(
        role: UserRole = UserRole.CREATOR,
        status: UserStatus = UserStatus.ACTIVE,
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        n = next(counter)
        async with session_factory() as session:
            user = User(
                email=email or f"{role.value}{n}@example.com",
                password_hash=DEFAULT_PASSWORD_HASH,
                first_name=first_name,
                last_name=last_name,
                role=role,
                status=status,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_workspace(session_factory):
    async def _make_workspace(
        owner: User,
        members: tuple = (),
        name: str = "Agency Workspace",
    ) -> Workspace:
        """`members` is a sequence of users or (user, MemberStatus) pairs."""
        async with session_factory() as session:
            workspace = Workspace(name=name, owner_id=owner.id)
            session.add(workspace)
            await session.flush()
            for entry in members:
                user, status = entry if isinstance(entry, tuple) else (entry, MemberStatus.ACTIVE)
                session.add(WorkspaceMember(
                    workspace_id=workspace.id,
                    user_id=user.id,
                    status=status,
                    invited_by=owner.id,
                ))
            await session.commit()
            await session.refresh(workspace)
        return workspace

    return _make_workspace


@pytest.fixture
def make_client(session_factory):
    async def _make_client(
        creator: User,
        workspace: Optional[Workspace] = None,
        linked_user: Optional[User] = None,
        name: str = "Acme Coffee",
    ) -> Client:
        async with session_factory() as session:
            client = Client(
                name=name,
                creator_id=creator.id,
                workspace_id=workspace.id if workspace else None,
                user_id=linked_user.id if linked_user else None,
            )
            session.add(client)
            await session.commit()
            await session.refresh(client)
        return client

    return _make_client


@pytest.fixture
def make_content(session_factory):
    async def _make_content(
        creator: User,
        client: Optional[Client] = None,
        status: ContentStatus = ContentStatus.DRAFT,
        title: str = "Launch teaser",
        platform: Platform = Platform.INSTAGRAM,
    ) -> ContentItem:
        async with session_factory() as session:
            item = ContentItem(
                title=title,
                platform=platform,
                content_type=ContentType.VIDEO,
                status=status,
                creator_id=creator.id,
                client_id=client.id if client else None,
            )
            session.add(item)
            await session.commit()
            await session.refresh(item)
        return item

    return _make_content
