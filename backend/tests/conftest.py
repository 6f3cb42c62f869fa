from __future__ import annotations
import os
import tempfile
import uuid
from datetime import datetime, timezone

_DB_DIR = tempfile.mkdtemp(prefix="gridrr-admin-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH_CONFIRM_EMAIL"] = "1"
os.environ["STORAGE_PUBLIC_URL"] = "https://cdn.gridrr.test/gridrr"

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

from gridrr_admin.db import Base, SessionLocal, engine
from gridrr_admin.errors import StorageError
from gridrr_admin.main import app
from gridrr_admin.models.submission import DesignSubmission, Submission, SubmissionMedia, WebsiteSubmission
from gridrr_admin.models.user import User
from gridrr_admin.security import hash_password
from gridrr_admin.services.storage import StoredObject, get_storage

STAFF_EMAIL = "staff@gridrr.test"
STAFF_PASSWORD = "supersecret"


class FakeStorage:
    """In-memory bucket with the same surface as ObjectStorage."""

    bucket = "gridrr-test"
    public_base = "https://cdn.gridrr.test/gridrr"

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_writes = False

    def exists(self, path: str) -> bool:
        return path in self.objects

    def put_bytes(self, path: str, data: bytes, content_type: str, *, overwrite: bool = False) -> None:
        self.calls.append(("put", path))
        if self.fail_writes:
            raise StorageError("storage unavailable")
        if not overwrite and path in self.objects:
            raise StorageError(f"The resource already exists: {path}")
        self.objects[path] = (data, content_type)

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        self.objects.pop(path, None)

    def list(self, prefix: str = "") -> list[StoredObject]:
        return [
            StoredObject(path=p, size=len(d), url=self.public_url(p))
            for p, (d, _) in sorted(self.objects.items())
            if p.startswith(prefix)
        ]

    def usage_bytes(self) -> int:
        return sum(len(d) for d, _ in self.objects.values())

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{path.lstrip('/')}"


@pytest_asyncio.fixture
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_schema):
    async with SessionLocal() as session:
        yield session


@pytest.fixture
def storage():
    return FakeStorage()


@pytest_asyncio.fixture
async def client(db_schema, storage):
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_user(email: str = STAFF_EMAIL, password: str = STAFF_PASSWORD, confirmed: bool = True) -> User:
    async with SessionLocal() as session:
        user = User(
            email=email,
            password_hash=hash_password(password),
            email_confirmed_at=datetime.now(timezone.utc) if confirmed else None,
        )
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def staff_user(db_schema):
    return await create_user()


@pytest_asyncio.fixture
async def auth_client(client, staff_user):
    r = await client.post("/signin", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert r.status_code == 200, r.text
    return client


@pytest.fixture
def make_submission(db_schema):
    async def _make(
        submission_type: str = "website",
        *,
        title: str = "Portfolio",
        status: str = "pending",
        contact_email: str = "maker@example.com",
        submitted_by: str | None = "Ada",
        url: str = "https://portfolio.example.com",
        tools: list[str] | None = None,
        built_with: str | None = "Webflow",
        design_type: str = "landing",
        media_url: str | None = "https://cdn.gridrr.test/gridrr/website-previews/clip.mp4",
        created_at: datetime | None = None,
        twitter: str | None = "@ada",
        instagram: str | None = None,
    ) -> uuid.UUID:
        async with SessionLocal() as session:
            s = Submission(
                title=title,
                submission_type=submission_type,
                contact_email=contact_email,
                submitted_by=submitted_by,
                status=status,
                twitter_handle=twitter,
                instagram_handle=instagram,
            )
            if created_at is not None:
                s.created_at = created_at
            if submission_type == "website":
                s.website_submissions.append(
                    WebsiteSubmission(url=url, tools_used=tools if tools is not None else ["Figma", "Webflow"], built_with=built_with)
                )
            else:
                s.design_submissions.append(
                    DesignSubmission(design_type=design_type, tools_used=tools if tools is not None else ["Figma"])
                )
            if media_url:
                s.media.append(SubmissionMedia(media_url=media_url, media_type="video/mp4", file_name="clip.mp4", file_size=1024))
            session.add(s)
            await session.commit()
            return s.id

    return _make
