from __future__ import annotations
from urllib.parse import urlencode
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.auth.deps import require_user
from gridrr_admin.db import get_session
from gridrr_admin.errors import PublishError
from gridrr_admin.schemas.auth import AuthUser
from gridrr_admin.schemas.submission import (
    ApprovalOutcome, SortDirection, SortKey, StatusFilter, StatusUpdate, SubmissionList, SubmissionPublic,
)
from gridrr_admin.services.review import (
    SortConfig, approve_submission, build_resubmit_payload, encode_resubmit_token, filter_submissions,
    get_submission, list_submissions, set_status, sort_submissions, to_public,
)

log = structlog.get_logger()

router = APIRouter(prefix="/submissions", tags=["submissions"])


async def _load(session: AsyncSession, submission_id: UUID):
    s = await get_submission(session, submission_id)
    if not s:
        raise HTTPException(status_code=404, detail="Submission not found")
    return s


@router.get("", response_model=SubmissionList)
async def list_all(
    q: str = Query(default="", description="Case-insensitive search over title, submitter, id, email"),
    status: StatusFilter = Query(default="all"),
    sort: SortKey | None = Query(default="created_at"),
    direction: SortDirection = Query(default="desc"),
    toggle: SortKey | None = Query(default=None, description="Column header clicked on top of the current sort"),
    session: AsyncSession = Depends(get_session),
    user: AuthUser = Depends(require_user),
):
    config = SortConfig(sort, direction) if sort else None
    if toggle:
        config = (config or SortConfig(toggle, "desc")).request(toggle)
    rows = await list_submissions(session)
    items = filter_submissions((to_public(s) for s in rows), q, status)
    items = sort_submissions(items, config)
    return SubmissionList(
        items=items,
        total=len(items),
        sort=config.key if config else None,
        direction=config.direction if config else direction,
    )


@router.get("/{submission_id}", response_model=SubmissionPublic)
async def detail(
    submission_id: UUID,
    user: AuthUser = Depends(require_user),  # resolved before the query below is issued
    session: AsyncSession = Depends(get_session),
):
    return to_public(await _load(session, submission_id))


@router.post("/{submission_id}/status", response_model=SubmissionPublic)
async def update_status(
    submission_id: UUID,
    payload: StatusUpdate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    s = await _load(session, submission_id)
    await set_status(session, s, payload.status)
    return to_public(s)


@router.post("/{submission_id}/approve", response_model=ApprovalOutcome)
async def approve(
    submission_id: UUID,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    s = await _load(session, submission_id)
    try:
        result = await approve_submission(session, s)
    except PublishError as e:
        raise HTTPException(
            status_code=500,
            detail=f"Submission {e.submission_id} was approved but its website entry was not saved. {e}",
        )
    return ApprovalOutcome(
        submission=to_public(result.submission),
        website_id=result.website.id if result.website else None,
        website_created=result.created,
    )


@router.post("/{submission_id}/resubmit")
async def resubmit(
    submission_id: UUID,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    s = await _load(session, submission_id)
    token = encode_resubmit_token(build_resubmit_payload(s))
    log.info("submission_resubmit", submission_id=str(s.id), submission_type=s.submission_type)
    return RedirectResponse(f"/upload/{s.submission_type}?{urlencode({'data': token})}", status_code=303)
