from __future__ import annotations
import re
from urllib.parse import urlsplit
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.errors import AlreadyListed, StorageError, ValidationFailed
from gridrr_admin.models.catalog import Design, Website
from gridrr_admin.schemas.upload import DesignForm, DesignPrefill, WebsiteForm, WebsitePrefill
from gridrr_admin.schemas.submission import ResubmitPayload
from gridrr_admin.services.storage import ObjectStorage
from gridrr_admin.services.uploads import delete_file, upload_file

log = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

WEBSITE_FOLDER = "website-previews"
DESIGN_FOLDER = "designs"


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def with_scheme(url: str) -> str:
    return url if url.startswith("http") else f"https://{url}"


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(with_scheme(url.strip()))
        parts.port  # raises on a malformed port
    except ValueError:
        return False
    host = parts.hostname or ""
    # whitespace is tolerated in the path, never in the host
    return parts.scheme in ("http", "https") and bool(host) and not any(c.isspace() for c in host)


def at_handle(handle: str) -> str:
    return handle if handle.startswith("@") else f"@{handle}"


def validate_website_form(form: WebsiteForm) -> None:
    if not (form.title and form.url and form.your_name and form.coded_by and form.email):
        raise ValidationFailed("Please fill in all required fields")
    if not is_valid_url(form.url):
        raise ValidationFailed("Please enter a valid URL")
    if not EMAIL_RE.match(form.email):
        raise ValidationFailed("Please enter a valid email address")


def validate_design_form(form: DesignForm) -> None:
    required = (form.title, form.designer_name, form.email, form.twitter, form.instagram, form.tools_used)
    if not all(required):
        raise ValidationFailed("Please fill in all required fields and select an image")
    if not EMAIL_RE.match(form.email):
        raise ValidationFailed("Please enter a valid email address")


async def _insert(session: AsyncSession, storage: ObjectStorage, row, media_path: str):
    session.add(row)
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        # the object would otherwise be orphaned in the bucket
        delete_file(storage, media_path)
        raise
    return row


async def create_website(
    session: AsyncSession,
    storage: ObjectStorage,
    form: WebsiteForm,
    *,
    data: bytes,
    filename: str,
    content_type: str,
    user_id: str | None,
) -> Website:
    """Upload the preview video, then insert a pending catalog row pointing at it.

    URLs are unique in the catalog; a URL that is already listed is refused
    before anything is uploaded.
    """
    url = with_scheme(form.url.strip())
    if await session.scalar(select(Website.id).where(Website.url == url)) is not None:
        raise AlreadyListed(url)
    result = upload_file(storage, data, filename, content_type, WEBSITE_FOLDER)
    if not result.success:
        raise StorageError(result.error or "Failed to upload video")
    website = Website(
        title=form.title,
        url=url,
        built_with=form.coded_by,
        tags=split_csv(form.tags),
        preview_video_url=result.url,
        email=form.email,
        submitted_by=user_id,
        twitter_handle=form.twitter or None,
        instagram_handle=form.instagram or None,
        status="pending",
    )
    try:
        await _insert(session, storage, website, result.path)
    except IntegrityError as e:
        # listed concurrently between the check and the insert
        raise AlreadyListed(url) from e
    log.info("website_uploaded", website_id=str(website.id), url=website.url)
    return website


async def create_design(
    session: AsyncSession,
    storage: ObjectStorage,
    form: DesignForm,
    *,
    data: bytes,
    filename: str,
    content_type: str,
) -> Design:
    result = upload_file(storage, data, filename, content_type, DESIGN_FOLDER)
    if not result.success:
        raise StorageError(result.error or "Failed to upload image")
    tags = split_csv(form.tags)
    design = Design(
        title=form.title,
        description=f"Tags: {form.tags}" if form.tags else "",
        designer_name=form.designer_name,
        designer_email=form.email,
        twitter_handle=at_handle(form.twitter),
        instagram_handle=at_handle(form.instagram),
        tools_used=split_csv(form.tools_used),
        tags=tags,
        image_url=result.url,
        status="pending",
    )
    await _insert(session, storage, design, result.path)
    log.info("design_uploaded", design_id=str(design.id))
    return design


def website_prefill(payload: ResubmitPayload | None) -> WebsitePrefill:
    if payload is None:
        return WebsitePrefill()
    return WebsitePrefill(
        title=payload.title,
        your_name=payload.submitted_by,
        coded_by=payload.coded_by or payload.submitted_by,
        email=payload.contactEmail,
        twitter=payload.twitterHandle,
        instagram=payload.instagramHandle,
        url=payload.websiteUrl or "",
        tags=payload.toolsUsed or "",
        additional_notes=payload.additionalNotes,
    )


def design_prefill(payload: ResubmitPayload | None) -> DesignPrefill:
    if payload is None:
        return DesignPrefill()
    return DesignPrefill(
        title=payload.title,
        designer_name=payload.submitted_by,
        email=payload.contactEmail,
        twitter=payload.twitterHandle,
        instagram=payload.instagramHandle,
        tools_used=payload.toolsUsed or "",
        design_type=payload.designType or "",
        additional_notes=payload.additionalNotes,
    )
