from __future__ import annotations
import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.auth.deps import get_navigator, require_user
from gridrr_admin.config import settings
from gridrr_admin.db import get_session
from gridrr_admin.errors import AlreadyListed, StorageError, ValidationFailed
from gridrr_admin.navigation import Navigator, respond
from gridrr_admin.schemas.auth import AuthUser
from gridrr_admin.schemas.submission import ResubmitPayload
from gridrr_admin.schemas.upload import DesignForm, DesignPrefill, UploadAccepted, WebsiteForm, WebsitePrefill
from gridrr_admin.services.catalog import (
    create_design, create_website, design_prefill, validate_design_form, validate_website_form, website_prefill,
)
from gridrr_admin.services.media import IMAGE_PREFIX, VIDEO_PREFIX, check_media, sniff_image
from gridrr_admin.services.review import decode_resubmit_token
from gridrr_admin.services.storage import ObjectStorage, get_storage

log = structlog.get_logger()

router = APIRouter(prefix="/upload", tags=["upload"])


def _decode_prefill(data: str | None) -> ResubmitPayload | None:
    if not data:
        return None
    try:
        return decode_resubmit_token(data)
    except ValueError:
        log.warning("prefill_decode_failed")
        return None


@router.get("/website", response_model=WebsitePrefill)
async def website_form(data: str | None = Query(default=None), user: AuthUser = Depends(require_user)):
    return website_prefill(_decode_prefill(data))


@router.get("/design", response_model=DesignPrefill)
async def design_form(data: str | None = Query(default=None), user: AuthUser = Depends(require_user)):
    return design_prefill(_decode_prefill(data))


@router.post("/website", status_code=201)
async def upload_website(
    title: str = Form(default=""),
    url: str = Form(default=""),
    your_name: str = Form(default=""),
    coded_by: str = Form(default=""),
    email: str = Form(default=""),
    twitter: str = Form(default=""),
    instagram: str = Form(default=""),
    tags: str = Form(default=""),
    video: UploadFile | None = File(default=None),
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_storage),
    navigator: Navigator = Depends(get_navigator),
):
    form = WebsiteForm(
        title=title.strip(), url=url.strip(), your_name=your_name.strip(), coded_by=coded_by.strip(),
        email=email.strip(), twitter=twitter.strip(), instagram=instagram.strip(), tags=tags,
    )
    try:
        if video is None or not video.filename:
            raise ValidationFailed("Please upload a video preview")
        check_media(video.content_type, video.size, prefix=VIDEO_PREFIX, max_bytes=settings.max_upload_bytes, kind="video")
        validate_website_form(form)
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=str(e))

    data = await video.read()
    try:
        check_media(video.content_type, len(data), prefix=VIDEO_PREFIX, max_bytes=settings.max_upload_bytes, kind="video")
        website = await create_website(
            session, storage, form, data=data, filename=video.filename, content_type=video.content_type, user_id=user.id,
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AlreadyListed as e:
        log.info("website_already_listed", url=e.url)
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=502, detail=f"Failed to upload video: {e}")
    except SQLAlchemyError as e:
        log.error("website_insert_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to save website")

    navigator.push("/submissions", delay=settings.upload_redirect_delay)
    body = UploadAccepted(
        id=website.id,
        message="Website submitted successfully! It will be reviewed soon.",
        media_url=website.preview_video_url,
        redirect_to="/submissions",
    )
    return respond(navigator, content=body.model_dump(mode="json"), status_code=201)


@router.post("/design", status_code=201)
async def upload_design(
    title: str = Form(default=""),
    designer_name: str = Form(default=""),
    email: str = Form(default=""),
    twitter: str = Form(default=""),
    instagram: str = Form(default=""),
    tools_used: str = Form(default=""),
    tags: str = Form(default=""),
    image: UploadFile | None = File(default=None),
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_storage),
    navigator: Navigator = Depends(get_navigator),
):
    form = DesignForm(
        title=title.strip(), designer_name=designer_name.strip(), email=email.strip(),
        twitter=twitter.strip(), instagram=instagram.strip(), tools_used=tools_used, tags=tags,
    )
    try:
        if image is None or not image.filename:
            raise ValidationFailed("Please fill in all required fields and select an image")
        check_media(image.content_type, image.size, prefix=IMAGE_PREFIX, max_bytes=settings.max_upload_bytes, kind="image")
        validate_design_form(form)
        data = await image.read()
        check_media(image.content_type, len(data), prefix=IMAGE_PREFIX, max_bytes=settings.max_upload_bytes, kind="image")
        if sniff_image(data) is None:
            raise ValidationFailed("Please upload an image file")
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        design = await create_design(
            session, storage, form, data=data, filename=image.filename, content_type=image.content_type,
        )
    except StorageError as e:
        raise HTTPException(status_code=502, detail=f"Failed to upload design: {e}")
    except SQLAlchemyError as e:
        log.error("design_insert_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to upload design: could not save design")

    navigator.push("/dashboard", delay=settings.upload_redirect_delay)
    body = UploadAccepted(
        id=design.id,
        message="Design uploaded successfully!",
        media_url=design.image_url,
        redirect_to="/dashboard",
    )
    return respond(navigator, content=body.model_dump(mode="json"), status_code=201)
