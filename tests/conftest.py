import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from infrastructure.database.database import SessionLocal, create_tables, engine  # noqa: E402
from infrastructure.image_store import ImageStoreError, UploadedImage, extract_public_id  # noqa: E402

STORE_URL_PREFIX = "https://res.cloudinary.com/demo/image/upload/v1700000000"


class FakeImageStore:
    """In-process stand-in for the hosted image store."""

    def __init__(self) -> None:
        self.uploaded: list[str] = []
        self.destroyed: list[str] = []
        self.fail_uploads: set[str] = set()
        self.fail_destroys: set[str] = set()

    async def upload(self, data: bytes, *, filename: str, content_type: str) -> UploadedImage:
        if filename in self.fail_uploads:
            raise ImageStoreError(f"upload of {filename} rejected")
        stem = filename.rsplit(".", 1)[0]
        public_id = f"catalog-products/{stem}"
        self.uploaded.append(filename)
        return UploadedImage(url=f"{STORE_URL_PREFIX}/{public_id}.jpg", public_id=public_id)

    async def destroy(self, public_id: str) -> None:
        if public_id in self.fail_destroys:
            raise ImageStoreError(f"destroy of {public_id} failed")
        self.destroyed.append(public_id)

    def extract_public_id(self, url: str):
        return extract_public_id(url, "res.cloudinary.com", "demo")


def store_url(name: str) -> str:
    return f"{STORE_URL_PREFIX}/catalog-products/{name}.jpg"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def database(anyio_backend):
    await create_tables()
    yield engine
    # Disposing the single in-memory connection throws the database away.
    await engine.dispose()


@pytest.fixture
async def session(database):
    async with SessionLocal() as db:
        yield db
        await db.rollback()


@pytest.fixture
def image_store():
    return FakeImageStore()
