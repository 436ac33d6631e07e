"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-long-enough-for-hs256-signing"
os.environ["BCRYPT_ROUNDS"] = "4"

from collections.abc import AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from core.security import hash_password  # noqa: E402
from db.session import build_engine  # noqa: E402
from models import Base  # noqa: E402
from models.user import User  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory database for each test."""
    engine = build_engine("sqlite+aiosqlite://")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """
    Create an async session for the test.

    API requests made through the `client` fixtures share this session, so tests can
    inspect what a request flushed without committing.
    """
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


async def _make_user(db_session: AsyncSession, email: str, name: str) -> User:
    user = User(email=email, name=name, password_hash=hash_password(TEST_PASSWORD))
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    return await _make_user(db_session, "test@example.com", "Test User")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create another test user for isolation tests."""
    return await _make_user(db_session, "other@example.com", "Other User")


@pytest.fixture
def client_factory(
    db_session: AsyncSession,
) -> Callable[[User | None], AsyncClient]:  # type: ignore
    """
    Factory fixture that creates test clients authenticated as a specific user.

    Pass None for a client without an authentication override (real bearer tokens
    are validated).

    Usage:
        client = client_factory(user_a)
        response = await client.get("/bookmarks/")
    """
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from core.auth import get_current_user
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    def create_client(user: User | None) -> AsyncClient:
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            async def override_get_current_user() -> User:
                return user

            app.dependency_overrides[get_current_user] = override_get_current_user
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        )

    yield create_client

    app.dependency_overrides.clear()


@pytest.fixture
async def client(
    client_factory: Callable[[User | None], AsyncClient],
    test_user: User,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client authenticated as `test_user`."""
    async with client_factory(test_user) as test_client:
        yield test_client


@pytest.fixture
async def anonymous_client(
    client_factory: Callable[[User | None], AsyncClient],
) -> AsyncGenerator[AsyncClient]:
    """Create a test client that must authenticate with real tokens."""
    async with client_factory(None) as test_client:
        yield test_client
