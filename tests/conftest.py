"""
Cat API — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is pointed at a throwaway SQLite file and upload
       directory BEFORE any catapi module is imported, because settings and
       the engine are built at import time.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── temp_storage: empty directory for ImageService instances
    ├── sample_image_bytes / png_image_bytes / gps_image_bytes: real images
    ├── truncated_jpeg_bytes: a JPEG cut off halfway through its pixel data
    ├── database: creates all tables, drops them afterwards
    ├── test_client: HTTPX AsyncClient bound to the app (needs `database`)
    ├── auth_headers: builds an Authorization header for any identity
    └── register_user: signs a user up through the API and logs them in
"""

import io
import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (must run before catapi is imported)
# ══════════════════════════════════════════════════════════════════════════

_TEST_DIR = tempfile.mkdtemp(prefix="catapi_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/catapi_test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "uploads")
os.environ["JWT_SECRET"] = "test-secret-for-the-cat-api-suite-0123456789"
os.environ["ADMIN_EMAIL"] = "admin@metropolia.fi"
os.environ["HARD_DELETE_USERS"] = "false"
os.environ["DEFAULT_COORDINATES"] = "24,61"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import ExifTags, Image  # noqa: E402

ADMIN_EMAIL = "admin@metropolia.fi"


def _encode_image(fmt: str, exif: bytes = b"") -> bytes:
    buffer = io.BytesIO()
    image = Image.new("RGB", (64, 48), (200, 120, 40))
    if exif:
        image.save(buffer, format=fmt, exif=exif)
    else:
        image.save(buffer, format=fmt)
    return buffer.getvalue()


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_cat(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = cat
            result = await cat_service.get_cat(mock_db_session, cat.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """A small real JPEG without EXIF data."""
    return _encode_image("JPEG")


@pytest.fixture
def png_image_bytes():
    return _encode_image("PNG")


@pytest.fixture
def gps_image_bytes():
    """
    A JPEG whose EXIF GPS block places it at 60°10'N, 24°56'E
    (lon 24.9333, lat 60.1667).
    """
    exif = Image.Exif()
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: "N",
        ExifTags.GPS.GPSLatitude: (60, 10, 0),
        ExifTags.GPS.GPSLongitudeRef: "E",
        ExifTags.GPS.GPSLongitude: (24, 56, 0),
    }
    return _encode_image("JPEG", exif=exif.tobytes())


@pytest.fixture
def truncated_jpeg_bytes():
    """The first half of a noisy 400x300 JPEG: the header parses, the pixels do not."""
    buffer = io.BytesIO()
    Image.effect_noise((400, 300), 64).convert("RGB").save(buffer, format="JPEG")
    content = buffer.getvalue()
    return content[: len(content) // 2]


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """Fresh tables for every API test."""
    from catapi.database import create_all, drop_all

    await create_all()
    yield
    await drop_all()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from catapi.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """
    Factory for bearer headers. The identity does not need a stored user:
    cat routes trust the signed token.
    """
    from catapi.auth import create_access_token

    def make(user_id="user-1", email="alice@metropolia.fi", role="user", user_name="alice"):
        token = create_access_token(
            user_id=user_id, email=email, role=role, user_name=user_name
        )
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers(user_id="admin-1", email=ADMIN_EMAIL, user_name="admin")


@pytest.fixture
def register_user(test_client):
    """
    Factory that signs a user up and logs in through the API.

    Returns (user_payload, headers).
    """

    async def register(user_name="alice", email="alice@metropolia.fi", password="secret"):
        created = await test_client.post(
            "/users",
            json={"user_name": user_name, "email": email, "password": password},
        )
        assert created.status_code == 200, created.text
        login = await test_client.post(
            "/auth/login", json={"username": email, "password": password}
        )
        assert login.status_code == 200, login.text
        body = login.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return register
