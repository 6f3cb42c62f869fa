from __future__ import annotations
from pydantic import BaseModel
from uuid import UUID


class UploadResult(BaseModel):
    success: bool
    path: str | None = None
    url: str | None = None
    file_name: str | None = None
    error: str | None = None


class WebsiteForm(BaseModel):
    title: str = ""
    url: str = ""
    your_name: str = ""
    coded_by: str = ""
    email: str = ""
    twitter: str = ""
    instagram: str = ""
    tags: str = ""


class DesignForm(BaseModel):
    title: str = ""
    designer_name: str = ""
    email: str = ""
    twitter: str = ""
    instagram: str = ""
    tools_used: str = ""
    tags: str = ""


class WebsitePrefill(WebsiteForm):
    additional_notes: str = ""


class DesignPrefill(DesignForm):
    design_type: str = ""
    additional_notes: str = ""


class UploadAccepted(BaseModel):
    id: UUID
    message: str
    media_url: str
    redirect_to: str


class MediaObject(BaseModel):
    path: str
    size: int
    url: str
