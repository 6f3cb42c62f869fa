from __future__ import annotations
import base64
import binascii
import json
import uuid
from dataclasses import dataclass
from datetime import timezone
from functools import cmp_to_key
from typing import Any, Iterable
import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from gridrr_admin.errors import PublishError
from gridrr_admin.models.catalog import Website
from gridrr_admin.models.submission import Submission
from gridrr_admin.schemas.submission import (
    DesignDetail, ResubmitPayload, SubmissionMediaPublic, SubmissionPublic, WebsiteDetail,
)

log = structlog.get_logger()

DATE_KEYS = {"created_at"}


def normalize_tools(tools: str | list | None) -> list[str]:
    if not tools:
        return []
    if isinstance(tools, list):
        return [str(t) for t in tools]
    return [t.strip() for t in tools.split(",") if t.strip()]


def to_public(s: Submission) -> SubmissionPublic:
    detail = None
    if s.submission_type == "website" and s.website_submissions:
        w = s.website_submissions[0]
        detail = WebsiteDetail(url=w.url, tools_used=normalize_tools(w.tools_used), built_with=w.built_with)
    elif s.submission_type == "design" and s.design_submissions:
        d = s.design_submissions[0]
        detail = DesignDetail(design_type=d.design_type, tools_used=normalize_tools(d.tools_used))
    return SubmissionPublic(
        id=s.id,
        title=s.title,
        submission_type=s.submission_type,
        contact_email=s.contact_email,
        twitter_handle=s.twitter_handle,
        instagram_handle=s.instagram_handle,
        additional_notes=s.additional_notes,
        status=s.status,
        submitted_by=s.submitted_by,
        created_at=s.created_at,
        publish_state=s.publish_state,
        publish_error=s.publish_error,
        media=[
            SubmissionMediaPublic(media_url=m.media_url, media_type=m.media_type, file_name=m.file_name, file_size=m.file_size)
            for m in s.media
        ],
        detail=detail,
    )


# ---------- listing ----------

def _with_relations(q):
    return q.options(
        selectinload(Submission.media),
        selectinload(Submission.website_submissions),
        selectinload(Submission.design_submissions),
    )


async def list_submissions(session: AsyncSession) -> list[Submission]:
    return list((await session.execute(_with_relations(select(Submission)))).scalars().all())


async def get_submission(session: AsyncSession, submission_id: uuid.UUID) -> Submission | None:
    q = _with_relations(select(Submission).where(Submission.id == submission_id))
    return (await session.execute(q)).scalars().first()


def matches_search(s: SubmissionPublic, query: str) -> bool:
    q = query.lower()
    return any(q in (v or "").lower() for v in (s.title, s.submitted_by, str(s.id), s.contact_email))


def filter_submissions(items: Iterable[SubmissionPublic], query: str = "", status: str = "all") -> list[SubmissionPublic]:
    return [s for s in items if matches_search(s, query) and (status == "all" or s.status == status)]


@dataclass(frozen=True)
class SortConfig:
    key: str = "created_at"
    direction: str = "desc"

    def request(self, key: str) -> "SortConfig":
        """Same column flips asc -> desc; anything else starts ascending."""
        if key == self.key and self.direction == "asc":
            return SortConfig(key, "desc")
        return SortConfig(key, "asc")


def _sort_value(s: SubmissionPublic, key: str) -> Any:
    value = getattr(s, key)
    if value is None:
        return None
    if key in DATE_KEYS:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    return str(value)


def sort_submissions(items: Iterable[SubmissionPublic], config: SortConfig | None) -> list[SubmissionPublic]:
    items = list(items)
    if config is None:
        return items
    sign = 1 if config.direction == "asc" else -1

    def compare(a: SubmissionPublic, b: SubmissionPublic) -> int:
        av, bv = _sort_value(a, config.key), _sort_value(b, config.key)
        # nulls lead when ascending and trail when descending
        if av is None and bv is not None:
            return -sign
        if bv is None and av is not None:
            return sign
        if av is not None and av != bv:
            return sign if av > bv else -sign
        # tie: fall back to id so asc and desc are exact mirrors
        ai, bi = str(a.id), str(b.id)
        return 0 if ai == bi else (sign if ai > bi else -sign)

    return sorted(items, key=cmp_to_key(compare))


# ---------- status / approval ----------

async def set_status(session: AsyncSession, s: Submission, status: str) -> Submission:
    # No transition rules: any status may be written over any other
    previous = s.status
    s.status = status
    await session.commit()
    log.info("submission_status_changed", submission_id=str(s.id), previous=previous, status=status)
    return s


async def upsert_website(session: AsyncSession, s: Submission) -> tuple[Website, bool]:
    """Insert or update the catalog row for an approved website submission, keyed by URL."""
    detail = s.website_submissions[0]
    values = dict(
        title=s.title,
        built_with=detail.built_with or "",
        preview_video_url=s.media[0].media_url if s.media else "",
        email=s.contact_email,
        submitted_by=s.submitted_by or None,
        twitter_handle=s.twitter_handle,
        instagram_handle=s.instagram_handle,
        status="approved",
    )
    existing = await session.scalar(select(Website).where(Website.url == detail.url))
    if existing is not None:
        for k, v in values.items():
            setattr(existing, k, v)
        await session.flush()
        return existing, False
    website = Website(url=detail.url, **values)
    session.add(website)
    await session.flush()
    return website, True


@dataclass
class Approval:
    submission: Submission
    website: Website | None = None
    created: bool = False


async def approve_submission(session: AsyncSession, s: Submission) -> Approval:
    """Two recorded phases, not one transaction.

    Phase 1 commits ``status=approved`` (plus ``publish_state=pending`` for
    websites). Phase 2 upserts the catalog row and commits
    ``publish_state=published``. A phase-2 failure leaves the submission
    approved with ``publish_state=failed`` and raises PublishError.
    Design submissions stop after phase 1.
    """
    sid = s.id
    publishes = s.submission_type == "website" and bool(s.website_submissions)
    s.status = "approved"
    if publishes:
        s.publish_state = "pending"
        s.publish_error = None
    await session.commit()
    log.info("submission_approved", submission_id=str(s.id), submission_type=s.submission_type)

    if not publishes:
        if s.submission_type == "website":
            log.warning("approval_without_website_detail", submission_id=str(s.id))
        return Approval(submission=s)

    try:
        website, created = await upsert_website(session, s)
        s.publish_state = "published"
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        message = f"Failed to publish website: {e.__class__.__name__}: {e}"
        log.error("website_publish_failed", submission_id=str(sid), error=str(e))
        s = await get_submission(session, sid)
        s.publish_state = "failed"
        s.publish_error = message
        await session.commit()
        raise PublishError(sid, message) from e

    log.info("website_published", submission_id=str(s.id), website_id=str(website.id), created=created)
    return Approval(submission=s, website=website, created=created)


# ---------- resubmit-as-new ----------

def build_resubmit_payload(s: Submission) -> ResubmitPayload:
    payload = ResubmitPayload(
        submissionId=str(s.id),
        title=s.title,
        contactEmail=s.contact_email,
        twitterHandle=s.twitter_handle or "",
        instagramHandle=s.instagram_handle or "",
        additionalNotes=s.additional_notes or "",
        submitted_by=s.submitted_by or "",
        coded_by=s.submitted_by or "",
    )
    if s.submission_type == "website" and s.website_submissions:
        w = s.website_submissions[0]
        payload.websiteUrl = w.url
        payload.builtWith = w.built_with or ""
        tools = normalize_tools(w.tools_used)
        if tools:
            payload.toolsUsed = ",".join(tools)
    elif s.submission_type == "design" and s.design_submissions:
        d = s.design_submissions[0]
        payload.designType = d.design_type
        tools = normalize_tools(d.tools_used)
        if tools:
            payload.toolsUsed = ",".join(tools)
    return payload


def encode_resubmit_token(payload: ResubmitPayload) -> str:
    raw = json.dumps(payload.model_dump(exclude_none=True), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_resubmit_token(token: str) -> ResubmitPayload:
    """Unsigned and unexpiring: the token is trusted as ordinary client input."""
    try:
        raw = base64.b64decode(token, validate=True)
        return ResubmitPayload.model_validate(json.loads(raw.decode("utf-8")))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise ValueError("Invalid submission data") from e
