"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tipbase.core.audit import AuditStore
from tipbase.core.database import Base, configure_sqlite, get_db
from tipbase.main import create_app
from tipbase.modules.attachments.storage import AttachmentStorage, get_attachment_storage
from tipbase.modules.tips.models import Tip
from tests.factories.tips import build_tip


IDENTITY_HEADER = "CF-Access-Authenticated-User-Email"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a throwaway SQLite database for one test.

    A file database (rather than :memory:) lets the audit store write
    through its own connection, as it does in production.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )
    configure_sqlite(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for arranging and inspecting data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_store(session_factory: async_sessionmaker[AsyncSession]) -> AuditStore:
    return AuditStore(session_factory)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads" / "tips"


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
    audit_store: AuditStore,
    upload_dir: Path,
) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app()
    application.state.audit_store = audit_store

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_attachment_storage] = lambda: AttachmentStorage(
        upload_dir
    )

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def authenticated_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client whose requests carry the access proxy's identity header.

    The resolved display name is "Jane Doe".
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={IDENTITY_HEADER: "jane.doe@example.com"},
    ) as client:
        yield client


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"


# ============================================================
# Domain Fixtures
# ============================================================


@pytest.fixture
async def tip(db: AsyncSession) -> Tip:
    """Create a tip directly in the database (not audited).

    Returns:
        A persisted Tip instance
    """
    tip = build_tip(
        title="Fix printer jam",
        category="Hardware",
        author_name="Alice",
    )
    db.add(tip)
    await db.commit()
    await db.refresh(tip)
    return tip
