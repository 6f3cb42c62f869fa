from __future__ import annotations
from typing import AsyncGenerator
from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.auth.client import AuthClient
from gridrr_admin.auth.context import AuthContext
from gridrr_admin.config import settings
from gridrr_admin.db import get_session
from gridrr_admin.navigation import Navigator
from gridrr_admin.schemas.auth import AuthUser
from gridrr_admin.services.auth import AuthService


def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)


def get_navigator() -> Navigator:
    return Navigator()


async def get_auth_context(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    navigator: Navigator = Depends(get_navigator),
) -> AsyncGenerator[AuthContext, None]:
    client = AuthClient(service, request.cookies.get(settings.session_cookie_name))
    ctx = AuthContext(client, navigator)
    await ctx.initialize()
    try:
        yield ctx
    finally:
        ctx.close()


async def require_user(ctx: AuthContext = Depends(get_auth_context)) -> AuthUser:
    """Resolves only once the auth check has finished; data access depends on this."""
    if not ctx.initialized or ctx.user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return ctx.user


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_min * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment not in ("dev", "test"),
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.session_cookie_name, path="/")
