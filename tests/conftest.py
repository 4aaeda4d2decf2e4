"""
Pytest fixtures for testing.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import jobboard.database
from jobboard.database import Base
# Import ALL models so Base.metadata knows about all tables
from jobboard.models.session import AnonymousSession
from jobboard.models.listing import Listing
from jobboard.config import settings
from jobboard.api.deps import get_store, get_identity_provider
from jobboard.services.identity import IdentityProvider
from jobboard.services.store import DocumentStore

# Now import app (after we can override database)
from jobboard.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # Use StaticPool to keep single connection alive and reuse it
    # This ensures all sessions see the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    # Replace the app's engine and sessionmaker
    original_engine = jobboard.database.engine
    original_sessionmaker = jobboard.database.AsyncSessionLocal
    
    jobboard.database.engine = test_engine
    jobboard.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    
    session = jobboard.database.AsyncSessionLocal()
    
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            print(f"Warning: Failed to close session: {e}")
        
        try:
            async with test_engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except Exception as e:
            print(f"Warning: Failed to drop tables: {e}")
        
        try:
            await test_engine.dispose()
        except Exception as e:
            print(f"Warning: Failed to dispose engine: {e}")
        
        jobboard.database.engine = original_engine
        jobboard.database.AsyncSessionLocal = original_sessionmaker


@pytest_asyncio.fixture
async def store(db: AsyncSession) -> DocumentStore:
    """Document store bound to the test database."""
    return DocumentStore(jobboard.database.AsyncSessionLocal)


@pytest_asyncio.fixture
async def identity(db: AsyncSession) -> IdentityProvider:
    """Identity provider bound to the test database."""
    return IdentityProvider(jobboard.database.AsyncSessionLocal)


@pytest.fixture
def collection_path() -> str:
    return settings.collection_path()


@pytest_asyncio.fixture
async def async_client(
    store: DocumentStore,
    identity: IdentityProvider
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing endpoints.
    
    The lifespan does not run under ASGITransport, so the store and identity
    provider dependencies are overridden with the test instances.
    """
    fastapi_app.dependency_overrides[get_store] = lambda: store
    fastapi_app.dependency_overrides[get_identity_provider] = lambda: identity
    transport = ASGITransport(app=fastapi_app)
    
    try:
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
            follow_redirects=True  # Follow 307 redirects for trailing slashes
        ) as client:
            yield client
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_session(identity: IdentityProvider) -> AnonymousSession:
    """An anonymous session for tests that need an identity."""
    session_id = await identity.create_session("127.0.0.1")
    return await identity.resolve(session_id)


@pytest_asyncio.fixture
async def client(async_client: AsyncClient, test_session: AnonymousSession) -> AsyncClient:
    """Client carrying the session cookie."""
    async_client.cookies.set(settings.session_cookie_name, str(test_session.id))
    return async_client


@pytest.fixture
def job_seeker_form() -> dict:
    """A valid job seeker form as the page would send it."""
    return {
        "type": "job_seeker",
        "contact_number": "51-234-56-78",
        "email": "ali@example.com",
        "skills": "JS, React, SMM",
        "work_mode": "online",
        "job_title": "Kiçik Frontend Developer",
        "gender": "male",
        "age": 25,
        "experience": "2",
        "region": "Bakı, Nərimanov",
        "full_name": "Əli Məmmədov",
        "hide_my_name": False,
    }


@pytest.fixture
def employer_form() -> dict:
    """A valid employer form as the page would send it."""
    return {
        "type": "employer",
        "company": "Axtarget MMC",
        "experience": "none",
        "email": "hr@sirket.az",
        "contact_number": "55-123-45-67",
        "gender": "any",
        "worker_mode": "physical",
        "region": "Bakı, Xətai",
        "age_range": "18-26",
        "required_skills": "React, Node.js",
        "full_name": "Rəşad Əliyev",
        "hide_my_name": False,
    }


@pytest.fixture
def make_listing(db: AsyncSession, collection_path: str):
    """Insert a listing row directly, bypassing the editor (e.g. an approved one)."""
    base_time = datetime(2025, 1, 1, 12, 0, 0)
    
    async def _make(
        variant: str = "job_seeker",
        approved: bool = True,
        minutes: int | None = 0,
        **fields
    ) -> Listing:
        listing = Listing(
            collection_path=collection_path,
            variant=variant,
            user_id=fields.pop("user_id", "00000000-0000-0000-0000-000000000001"),
            approved=approved,
            created_at=None if minutes is None else base_time + timedelta(minutes=minutes),
            contact_number=fields.pop("contact_number", "512345678"),
            email=fields.pop("email", "someone@example.com"),
            **fields
        )
        db.add(listing)
        await db.commit()
        await db.refresh(listing)
        return listing
    
    return _make
