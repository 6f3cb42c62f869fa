from __future__ import annotations
import io
import re
import pytest
from PIL import Image
from sqlalchemy import select
from gridrr_admin.config import settings
from gridrr_admin.db import SessionLocal
from gridrr_admin.errors import MediaRejected, ValidationFailed
from gridrr_admin.models.catalog import Design, Website
from gridrr_admin.schemas.upload import DesignForm, WebsiteForm
from gridrr_admin.services.catalog import is_valid_url, split_csv, validate_design_form, validate_website_form
from gridrr_admin.services.media import IMAGE_PREFIX, VIDEO_PREFIX, check_media, sniff_image
from gridrr_admin.services.uploads import delete_file, join_path, make_file_name, upload_file
from conftest import FakeStorage

MB = 1024 * 1024


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def test_file_name_shape():
    name = make_file_name("My Clip.final.MP4", now_ms=1700000000000)
    assert re.fullmatch(r"1700000000000-[0-9a-z]{8}\.MP4", name)
    assert make_file_name("a.png") != make_file_name("a.png")


def test_join_path_collapses_slashes():
    assert join_path("designs/", "x.png") == "designs/x.png"
    assert join_path("/a//b/", "x.png") == "/a/b/x.png"


def test_upload_file_returns_public_url():
    storage = FakeStorage()
    result = upload_file(storage, b"data", "clip.mp4", "video/mp4", "website-previews")
    assert result.success
    assert result.path.startswith("website-previews/") and result.path.endswith(".mp4")
    assert result.url == f"https://cdn.gridrr.test/gridrr/{result.path}"
    assert storage.objects[result.path] == (b"data", "video/mp4")


def test_upload_file_never_overwrites(monkeypatch):
    storage = FakeStorage()
    monkeypatch.setattr("gridrr_admin.services.uploads.make_file_name", lambda original: "fixed.png")
    assert upload_file(storage, b"one", "a.png", "image/png", "designs").success
    second = upload_file(storage, b"two", "a.png", "image/png", "designs")
    assert second.success is False
    assert "already exists" in second.error
    assert storage.objects["designs/fixed.png"][0] == b"one"


def test_upload_file_reports_storage_failure():
    storage = FakeStorage()
    storage.fail_writes = True
    result = upload_file(storage, b"x", "a.png", "image/png", "designs")
    assert result.success is False
    assert result.error == "storage unavailable"


def test_delete_file():
    storage = FakeStorage()
    storage.objects["designs/a.png"] = (b"x", "image/png")
    assert delete_file(storage, "designs/a.png").success
    assert storage.objects == {}


def test_check_media():
    check_media("video/mp4", 50 * MB, prefix=VIDEO_PREFIX, max_bytes=50 * MB, kind="video")
    with pytest.raises(MediaRejected, match="less than 50MB"):
        check_media("video/mp4", 50 * MB + 1, prefix=VIDEO_PREFIX, max_bytes=50 * MB, kind="video")
    with pytest.raises(MediaRejected, match="video file"):
        check_media("image/png", 10, prefix=VIDEO_PREFIX, max_bytes=50 * MB, kind="video")
    with pytest.raises(MediaRejected, match="an image file"):
        check_media(None, 10, prefix=IMAGE_PREFIX, max_bytes=50 * MB, kind="image")


def test_sniff_image():
    assert sniff_image(_png()) == "image/png"
    assert sniff_image(b"definitely not an image") is None


def test_url_shape():
    assert is_valid_url("example.com")
    assert is_valid_url("https://example.com/path?q=1")
    assert is_valid_url("https://a.com/x y")
    assert not is_valid_url("exa mple.com")
    assert not is_valid_url("https://exa mple.com/x")
    assert not is_valid_url("https://")
    assert not is_valid_url("http://host:notaport")


def test_split_csv():
    assert split_csv(" Figma, ,Webflow ,") == ["Figma", "Webflow"]
    assert split_csv("") == []


def test_form_validation_messages():
    with pytest.raises(ValidationFailed, match="required fields"):
        validate_website_form(WebsiteForm(title="t", url="example.com"))
    with pytest.raises(ValidationFailed, match="valid email"):
        validate_website_form(WebsiteForm(title="t", url="example.com", your_name="a", coded_by="b", email="nope"))
    with pytest.raises(ValidationFailed, match="select an image"):
        validate_design_form(DesignForm(title="t", email="a@b.co"))


# ---------- API ----------

WEBSITE_FIELDS = {
    "title": "Neon Portfolio",
    "url": "neon.example.com",
    "your_name": "Ada",
    "coded_by": "Grace",
    "email": "ada@example.com",
    "twitter": "@ada",
    "tags": "Portfolio, Dark ,",
}

DESIGN_FIELDS = {
    "title": "Poster",
    "designer_name": "Ada",
    "email": "ada@example.com",
    "twitter": "ada",
    "instagram": "@ada.designs",
    "tools_used": "Figma, Procreate",
    "tags": "print,bold",
}


@pytest.mark.asyncio
async def test_website_upload(auth_client, storage, staff_user):
    r = await auth_client.post(
        "/upload/website", data=WEBSITE_FIELDS, files={"video": ("clip.mp4", b"\x00\x00 fake video", "video/mp4")}
    )
    assert r.status_code == 201, r.text
    assert r.headers["Refresh"] == "2; url=/submissions"
    body = r.json()
    assert body["redirect_to"] == "/submissions"

    async with SessionLocal() as session:
        w = (await session.execute(select(Website))).scalars().one()
    assert w.url == "https://neon.example.com"
    assert w.status == "pending"
    assert w.tags == ["Portfolio", "Dark"]
    assert w.built_with == "Grace"
    assert w.submitted_by == str(staff_user.id)
    assert w.instagram_handle is None
    assert w.preview_video_url == body["media_url"]
    [(op, path)] = storage.calls
    assert op == "put" and path.startswith("website-previews/")


@pytest.mark.asyncio
async def test_website_upload_rejects_non_video_before_storage(auth_client, storage):
    r = await auth_client.post(
        "/upload/website", data=WEBSITE_FIELDS, files={"video": ("shot.png", _png(), "image/png")}
    )
    assert r.status_code == 422
    assert "video" in r.json()["detail"]
    assert storage.calls == []
    async with SessionLocal() as session:
        assert (await session.execute(select(Website))).scalars().all() == []


@pytest.mark.asyncio
async def test_website_upload_validation(auth_client, storage):
    r = await auth_client.post("/upload/website", data=WEBSITE_FIELDS)
    assert r.status_code == 422
    assert r.json()["detail"] == "Please upload a video preview"

    bad = dict(WEBSITE_FIELDS, email="not-an-email")
    r = await auth_client.post("/upload/website", data=bad, files={"video": ("c.mp4", b"v", "video/mp4")})
    assert r.status_code == 422
    assert r.json()["detail"] == "Please enter a valid email address"

    bad = dict(WEBSITE_FIELDS, url="not a url")
    r = await auth_client.post("/upload/website", data=bad, files={"video": ("c.mp4", b"v", "video/mp4")})
    assert r.json()["detail"] == "Please enter a valid URL"
    assert storage.calls == []


@pytest.mark.asyncio
async def test_website_upload_storage_failure_inserts_nothing(auth_client, storage):
    storage.fail_writes = True
    r = await auth_client.post(
        "/upload/website", data=WEBSITE_FIELDS, files={"video": ("clip.mp4", b"video", "video/mp4")}
    )
    assert r.status_code == 502
    async with SessionLocal() as session:
        assert (await session.execute(select(Website))).scalars().all() == []


@pytest.mark.asyncio
async def test_design_upload(auth_client, storage):
    r = await auth_client.post(
        "/upload/design", data=DESIGN_FIELDS, files={"image": ("poster.png", _png(), "image/png")}
    )
    assert r.status_code == 201, r.text
    assert r.headers["Refresh"] == "2; url=/dashboard"

    async with SessionLocal() as session:
        d = (await session.execute(select(Design))).scalars().one()
    assert d.status == "pending"
    assert d.twitter_handle == "@ada"
    assert d.instagram_handle == "@ada.designs"
    assert d.tools_used == ["Figma", "Procreate"]
    assert d.tags == ["print", "bold"]
    assert d.description == "Tags: print,bold"
    assert d.image_url.startswith("https://cdn.gridrr.test/gridrr/designs/")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "upload",
    [
        ("notes.txt", b"hello", "text/plain"),
        ("clip.mp4", b"video", "video/mp4"),
        ("fake.png", b"not really a png", "image/png"),
    ],
)
async def test_design_upload_rejects_bad_media(auth_client, storage, upload):
    r = await auth_client.post("/upload/design", data=DESIGN_FIELDS, files={"image": upload})
    assert r.status_code == 422
    assert storage.calls == []
    async with SessionLocal() as session:
        assert (await session.execute(select(Design))).scalars().all() == []


@pytest.mark.asyncio
async def test_design_upload_missing_fields(auth_client, storage):
    fields = dict(DESIGN_FIELDS, instagram="")
    r = await auth_client.post("/upload/design", data=fields, files={"image": ("p.png", _png(), "image/png")})
    assert r.status_code == 422
    assert r.json()["detail"] == "Please fill in all required fields and select an image"
    assert storage.calls == []


@pytest.mark.asyncio
async def test_oversized_video_rejected_before_storage(auth_client, storage, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 2 * MB)
    r = await auth_client.post(
        "/upload/website", data=WEBSITE_FIELDS, files={"video": ("big.mp4", b"\x00" * (2 * MB + 1), "video/mp4")}
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "Video file size should be less than 2MB"
    assert storage.calls == []
    async with SessionLocal() as session:
        assert (await session.execute(select(Website))).scalars().all() == []


@pytest.mark.asyncio
async def test_resubmitting_a_listed_website_conflicts(auth_client, storage, make_submission):
    sid = await make_submission(title="Neon")
    assert (await auth_client.post(f"/submissions/{sid}/approve")).status_code == 200

    r = await auth_client.post(f"/submissions/{sid}/resubmit")
    assert r.status_code == 303
    prefill = (await auth_client.get(r.headers["location"])).json()
    fields = {k: v for k, v in prefill.items() if k != "additional_notes"}

    r = await auth_client.post(
        "/upload/website", data=fields, files={"video": ("clip.mp4", b"new video", "video/mp4")}
    )
    assert r.status_code == 409
    assert "https://portfolio.example.com" in r.json()["detail"]
    # refused before upload, published row untouched
    assert storage.calls == []
    async with SessionLocal() as session:
        [w] = (await session.execute(select(Website))).scalars().all()
    assert (w.title, w.status) == ("Neon", "approved")
