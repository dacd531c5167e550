"""
Pytest configuration and fixtures
"""

import os
import time

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["USE_MOCK_STORAGE"] = "true"
os.environ["AUTH_JWT_SECRET"] = "studio-uploads-test-secret-0123456789abcdef"

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import tables  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.services import MockStorageGateway, UploadLedger, get_storage_gateway
from app.services.rate_limiter import lead_rate_limiter

TEST_JWT_SECRET = "studio-uploads-test-secret-0123456789abcdef"


def make_token(user_id: str, expires_in: int = 3600, secret: str = TEST_JWT_SECRET) -> str:
    """Sign an access token the way the auth provider does."""
    return jwt.encode(
        {
            "sub": user_id,
            "aud": "authenticated",
            "exp": int(time.time()) + expires_in,
        },
        secret,
        algorithm="HS256",
    )


@pytest.fixture
def db_engine():
    """In-memory database shared by every session in a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    """In-memory storage gateway"""
    return MockStorageGateway(bucket="test-bucket")


@pytest.fixture
def client(session_factory, gateway):
    """FastAPI test client wired to the test database and mock gateway"""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_gateway] = lambda: gateway
    lead_rate_limiter.store.clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    lead_rate_limiter.store.clear()


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user id"""

    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def make_upload_session(db_session, gateway):
    """Create an in-progress upload session backed by an open mock multipart upload"""

    def _make(
        user_id: str = "user-1",
        total_size: int = 9_000_000,
        chunk_size: int = 3_000_000,
        total_chunks: int = 3,
        mime_type: str = "video/mp4",
        filename: str = "clip.mp4",
    ):
        storage_key = f"raw/general/1767225600000_{filename}"
        return UploadLedger(db_session).create(
            storage_upload_id=gateway.open_upload(storage_key, mime_type),
            user_id=user_id,
            project_id="project-1",
            filename=filename,
            mime_type=mime_type,
            file_type="raw",
            storage_key=storage_key,
            total_size=total_size,
            chunk_size=chunk_size,
            total_chunks=total_chunks,
        )

    return _make
