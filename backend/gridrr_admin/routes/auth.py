from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, RedirectResponse
from gridrr_admin.auth.context import AuthContext
from gridrr_admin.auth.deps import (
    clear_session_cookie, get_auth_context, get_auth_service, require_user, set_session_cookie,
)
from gridrr_admin.config import settings
from gridrr_admin.errors import AuthError
from gridrr_admin.navigation import respond
from gridrr_admin.schemas.auth import AuthUser, SignInRequest, SignUpRequest
from gridrr_admin.services.auth import AuthService

router = APIRouter(tags=["auth"])


def safe_redirect(target: str | None) -> str | None:
    # only same-site absolute paths
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@router.get("/signin")
async def signin_page(redirectedFrom: str | None = Query(default=None)):
    return {"redirectedFrom": safe_redirect(redirectedFrom)}


@router.post("/signin")
async def signin(payload: SignInRequest, ctx: AuthContext = Depends(get_auth_context)):
    result = await ctx.login(payload.email, payload.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)
    target = safe_redirect(payload.redirectedFrom) or settings.home_path
    response = JSONResponse({"success": True, "redirect_to": target, "user": ctx.user.model_dump() if ctx.user else None})
    set_session_cookie(response, ctx.client.token)
    return response


@router.get("/signup")
async def signup_page():
    return {"fields": ["email", "password", "name"]}


@router.post("/signup", status_code=201)
async def signup(payload: SignUpRequest, ctx: AuthContext = Depends(get_auth_context)):
    result = await ctx.signup(payload.email, payload.password, payload.name)
    if not result.success:
        status_code = 409 if result.error and "already registered" in result.error else 400
        raise HTTPException(status_code=status_code, detail=result.error)
    if ctx.client.token is None:
        # user created, email confirmation outstanding
        return JSONResponse({"success": True, "message": result.error, "redirect_to": "/verify-email"}, status_code=201)
    response = JSONResponse({"success": True, "redirect_to": settings.home_path}, status_code=201)
    set_session_cookie(response, ctx.client.token)
    return response


@router.post("/signout")
async def signout(ctx: AuthContext = Depends(get_auth_context)):
    result = await ctx.logout()
    response = respond(ctx.navigator, content=result.model_dump())
    clear_session_cookie(response)
    return response


@router.get("/verify-email")
async def verify_email_page():
    return {
        "title": "Verify your email",
        "message": "We've sent a verification link to your email address.",
    }


@router.get("/auth/callback")
async def auth_callback(token: str | None = Query(default=None), service: AuthService = Depends(get_auth_service)):
    if not token:
        return RedirectResponse(settings.signin_path, status_code=303)
    try:
        resp = await service.verify_email(token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    response = RedirectResponse(settings.home_path, status_code=303)
    set_session_cookie(response, resp.session.access_token)
    return response


@router.get("/auth/me", response_model=AuthUser)
async def me(user: AuthUser = Depends(require_user)):
    return user
