from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from passlib.context import CryptContext
from gridrr_admin.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALG = "HS256"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def _make_token(sub: str, ttl_min: int, token_type: str, **claims: Any) -> tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=ttl_min)
    payload = {
        "sub": sub,
        "type": token_type,
        "iat": now.timestamp(),  # float keeps tokens minted in the same second distinct
        "exp": int(exp.timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG), exp

def make_session_token(sub: str, sid: str, ttl_min: int | None = None) -> tuple[str, datetime]:
    return _make_token(sub, ttl_min or settings.session_ttl_min, "session", sid=sid)

def make_verify_token(sub: str) -> str:
    token, _ = _make_token(sub, settings.verify_ttl_min, "verify")
    return token

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])
