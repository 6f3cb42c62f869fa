from __future__ import annotations
import asyncio
import uuid
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from gridrr_admin.config import settings
from gridrr_admin.logging_setup import configure_logging
from gridrr_admin.middleware import session_guard
from gridrr_admin.routes.system import router as system_router
from gridrr_admin.routes.auth import router as auth_router
from gridrr_admin.routes.dashboard import router as dashboard_router
from gridrr_admin.routes.submissions import router as submissions_router
from gridrr_admin.routes.upload import router as upload_router
from gridrr_admin.routes.media import router as media_router
from gridrr_admin.services.storage import check_bucket
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    # bucket check runs in the background; startup does not wait on storage
    app.state.bucket_check = asyncio.create_task(asyncio.to_thread(check_bucket))
    yield
    # Shutdown
    app.state.bucket_check.cancel()
    with suppress(asyncio.CancelledError):
        await app.state.bucket_check
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for reviewing and publishing Gridrr submissions",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(submissions_router)
app.include_router(upload_router)
app.include_router(media_router)

# Registered first so it runs inside the request-id middleware
app.middleware("http")(session_guard)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
