import logging
import os
from collections.abc import Generator

# Keep app import side effects (table creation, media mount) out of the
# working directory.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MEDIA_URL", "https://media.example.test")
os.environ.setdefault("STORAGE_BACKEND", "filesystem")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from portfolio.cache import page_cache
from portfolio.database import Base
from portfolio.deps import get_db, get_storage
from portfolio.main import app
from portfolio.storage import BlobStorage, unique_blob_name

# Configure basic logging for tests
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9"

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class MemoryBlobStorage(BlobStorage):
    """Blob backend keeping uploads in a dict, for assertions."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}

    def put(self, data: bytes, name: str, content_type: str | None = None) -> str:
        key = unique_blob_name(name)
        self.blobs[key] = data
        return f"https://blobs.example.test/{key}"


class FailingBlobStorage(BlobStorage):
    def put(self, data: bytes, name: str, content_type: str | None = None) -> str:
        error_message = "blob service unavailable"
        raise OSError(error_message)


@pytest.fixture(autouse=True)
def clear_page_cache() -> Generator[None, None, None]:
    page_cache.clear()
    yield
    page_cache.clear()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# Database Fixture (Overrides get_db dependency)
@pytest.fixture
def session() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def blob_storage() -> MemoryBlobStorage:
    return MemoryBlobStorage()


@pytest.fixture
def client(
    session: Session, blob_storage: MemoryBlobStorage
) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: blob_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def failing_storage() -> FailingBlobStorage:
    return FailingBlobStorage()
