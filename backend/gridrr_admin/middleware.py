from __future__ import annotations
import re
from urllib.parse import urlencode
import structlog
from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from gridrr_admin.auth.deps import set_session_cookie
from gridrr_admin.config import settings
from gridrr_admin.db import SessionLocal
from gridrr_admin.services.auth import AuthService

log = structlog.get_logger()

# static assets, image optimisation, favicon and the email-confirmation callback
EXCLUDED_PATHS = re.compile(r"^/(?:static|_image|favicon\.ico|auth/callback)")


def is_excluded(path: str) -> bool:
    return bool(EXCLUDED_PATHS.match(path))


def is_protected(path: str, prefixes: list[str] | None = None) -> bool:
    return any(path.startswith(p) for p in (prefixes if prefixes is not None else settings.protected_prefixes))


async def session_guard(request: Request, call_next):
    path = request.url.path
    if is_excluded(path):
        return await call_next(request)

    async with SessionLocal() as db:
        session = await AuthService(db).get_session(request.cookies.get(settings.session_cookie_name))

    if session is None and is_protected(path):
        log.info("guard_redirect_signin", path=path)
        target = request.url.replace(path=settings.signin_path, query=urlencode({"redirectedFrom": path}))
        return RedirectResponse(str(target), status_code=307)

    if session is not None and path in (settings.signin_path, settings.signup_path):
        return RedirectResponse(str(request.url.replace(path=settings.home_path, query="")), status_code=307)

    response: Response = await call_next(request)
    if session is not None and session.refreshed:
        set_session_cookie(response, session.access_token)
    return response
