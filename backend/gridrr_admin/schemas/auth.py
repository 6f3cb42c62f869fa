from __future__ import annotations
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class SignInRequest(BaseModel):
    email: str
    password: str
    redirectedFrom: str | None = None

class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str | None = Field(default=None, max_length=120)

class AuthUser(BaseModel):
    id: str
    email: str
    user_metadata: dict = Field(default_factory=dict)

class Session(BaseModel):
    access_token: str
    expires_at: datetime
    user: AuthUser
    refreshed: bool = False

class AuthResponse(BaseModel):
    user: AuthUser | None = None
    session: Session | None = None

class AuthResult(BaseModel):
    """Tagged outcome of a login/signup/logout; `error` on success is a soft notice."""
    success: bool
    error: str | None = None
