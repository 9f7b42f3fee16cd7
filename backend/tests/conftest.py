"""
Pytest configuration and fixtures for backend tests.
"""
import os
import tempfile

# Keep the app's own engine and static dir away from the working tree
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="produtos-static-")

import shutil
import uuid
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from produtos_api.config import get_settings
from produtos_api.database import Base, get_db
from produtos_api.main import app
from produtos_api.repositories import ProdutoRepository
from produtos_api.services import ImageStorageService, ImageUpload, ProdutoService, get_image_storage
from produtos_api.schemas import ProdutoCreate

# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_image_bytes(width: int = 800, height: int = 400, fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    """Encode a solid-color test image."""
    img = Image.new("RGB", (width, height), color)
    if fmt == "GIF":
        img = img.convert("P")
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_upload():
    return ImageUpload(content=make_image_bytes(), content_type="image/png", filename="pizza.png")


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def image_storage():
    """Image storage in a per-test directory under the served static root."""
    settings = get_settings()
    subdir = f"test-uploads/{uuid.uuid4().hex}"
    storage = ImageStorageService(
        upload_dir=Path(settings.static_dir) / subdir,
        public_prefix=f"{settings.static_url}/{subdir}",
    )
    yield storage
    shutil.rmtree(storage.upload_dir, ignore_errors=True)


@pytest.fixture
def repository(db_session):
    return ProdutoRepository(db_session)


@pytest.fixture
def produto_service(repository, image_storage):
    return ProdutoService(repository, image_storage)


@pytest.fixture
def produto_data():
    """Valid create payload; override fields per test."""
    def _make(**overrides):
        data = {
            "name": "Test Product",
            "description": "Test Description",
            "price": "10.99",
            "category": "Test Category",
            "preparation_time": 15,
        }
        data.update(overrides)
        return ProdutoCreate(**data)
    return _make


@pytest.fixture(scope="function")
def client(db_session, image_storage):
    """
    Create a test client with database and image storage overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: image_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
