from __future__ import annotations
import os
from pydantic import BaseModel

def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "gridrr-admin")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Gridrr Admin")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = _csv(os.getenv("CORS_ORIGINS", "*"))
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/gridrr_dev")

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    session_ttl_min: int = int(os.getenv("SESSION_TTL_MIN", "60"))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "gridrr-session")
    auth_confirm_email: bool = os.getenv("AUTH_CONFIRM_EMAIL", "1") == "1"
    verify_ttl_min: int = int(os.getenv("VERIFY_TTL_MIN", "1440"))

    # Route guard
    protected_prefixes: list[str] = _csv(os.getenv("PROTECTED_PREFIXES", "/dashboard,/submissions,/upload,/media"))
    signin_path: str = "/signin"
    signup_path: str = "/signup"
    home_path: str = "/dashboard"
    logout_redirect_delay: float = float(os.getenv("LOGOUT_REDIRECT_DELAY", "0.1"))
    upload_redirect_delay: float = float(os.getenv("UPLOAD_REDIRECT_DELAY", "2"))

    # Object storage
    storage_endpoint: str = os.getenv("STORAGE_ENDPOINT", "http://minio:9000")
    storage_region: str = os.getenv("STORAGE_REGION", "ap-southeast-1")
    storage_access_key: str = os.getenv("STORAGE_KEY", "minioadmin")
    storage_secret_key: str = os.getenv("STORAGE_SECRET", "minioadmin")
    storage_bucket: str = os.getenv("STORAGE_BUCKET", "gridrr")
    storage_public_url: str = os.getenv("STORAGE_PUBLIC_URL", "")  # defaults to <endpoint>/<bucket>
    storage_cache_seconds: int = int(os.getenv("STORAGE_CACHE_SECONDS", "3600"))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

settings = Settings()
