"""Shared fixtures: in-memory SQLite stores, a temp blob root and an HTTP client."""
import base64
import uuid
from io import BytesIO
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from files_manager.config import Settings
from files_manager.container import Services, assemble
from files_manager.database import build_session_factory
from files_manager.main import create_app
from files_manager.models import Base
from files_manager.types import OwnerId

OWNER_TOKEN = "owner-token"
OTHER_TOKEN = "other-token"


class InMemorySessionStore:
    """Token -> owner map standing in for Redis."""

    def __init__(self):
        self.tokens: dict[str, OwnerId] = {}

    async def resolve(self, token: str) -> Optional[OwnerId]:
        return self.tokens.get(token)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        FOLDER_PATH=str(tmp_path / "files"),
        CORS_ORIGINS="http://testserver",
    )


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def owner_id() -> OwnerId:
    return OwnerId(uuid.uuid4())


@pytest.fixture
def other_owner_id() -> OwnerId:
    return OwnerId(uuid.uuid4())


@pytest.fixture
def session_store(owner_id, other_owner_id):
    store = InMemorySessionStore()
    store.tokens[OWNER_TOKEN] = owner_id
    store.tokens[OTHER_TOKEN] = other_owner_id
    return store


@pytest.fixture
def services(settings, session_factory, session_store) -> Services:
    return assemble(settings, session_factory, session_store)


@pytest_asyncio.fixture
async def client(services):
    app = create_app(services=services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


def make_png(width: int = 800, height: int = 600) -> bytes:
    out = BytesIO()
    Image.new("RGB", (width, height), color=(200, 120, 40)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_b64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


async def read_all(chunks) -> bytes:
    return b"".join([chunk async for chunk in chunks])
