from __future__ import annotations
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime

SubmissionType = Literal["website", "design"]
SubmissionStatus = Literal["pending", "in_review", "approved", "rejected"]
StatusFilter = Literal["pending", "in_review", "approved", "rejected", "all"]
SortKey = Literal["id", "title", "submitted_by", "created_at", "status"]
SortDirection = Literal["asc", "desc"]


class SubmissionMediaPublic(BaseModel):
    media_url: str
    media_type: str
    file_name: str | None = None
    file_size: int | None = None


class WebsiteDetail(BaseModel):
    kind: Literal["website"] = "website"
    url: str
    tools_used: list[str] = Field(default_factory=list)
    built_with: str | None = None


class DesignDetail(BaseModel):
    kind: Literal["design"] = "design"
    design_type: str
    tools_used: list[str] = Field(default_factory=list)


SubmissionDetail = Annotated[Union[WebsiteDetail, DesignDetail], Field(discriminator="kind")]


class SubmissionPublic(BaseModel):
    id: UUID
    title: str
    submission_type: SubmissionType
    contact_email: str
    twitter_handle: str | None = None
    instagram_handle: str | None = None
    additional_notes: str | None = None
    status: SubmissionStatus
    submitted_by: str | None = None
    created_at: datetime
    publish_state: str | None = None
    publish_error: str | None = None
    media: list[SubmissionMediaPublic] = Field(default_factory=list)
    # populated from the relation that matches submission_type, None if missing
    detail: SubmissionDetail | None = None


class SubmissionList(BaseModel):
    items: list[SubmissionPublic]
    total: int
    sort: SortKey | None
    direction: SortDirection


class StatusUpdate(BaseModel):
    status: SubmissionStatus


class ApprovalOutcome(BaseModel):
    submission: SubmissionPublic
    website_id: UUID | None = None
    website_created: bool = False


class ResubmitPayload(BaseModel):
    """Fields carried from an existing submission into a fresh upload form."""
    submissionId: str | None = None
    title: str = ""
    contactEmail: str = ""
    twitterHandle: str = ""
    instagramHandle: str = ""
    additionalNotes: str = ""
    submitted_by: str = ""
    coded_by: str = ""
    websiteUrl: str | None = None
    builtWith: str | None = None
    designType: str | None = None
    toolsUsed: str | None = None
