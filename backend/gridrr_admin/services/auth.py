from __future__ import annotations
import uuid
from datetime import datetime, timedelta, timezone
import jwt
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.config import settings
from gridrr_admin.errors import AuthError
from gridrr_admin.models.user import User, AuthSession
from gridrr_admin.schemas.auth import AuthResponse, AuthUser, Session
from gridrr_admin.security import (
    decode_token, hash_password, make_session_token, make_verify_token, verify_password,
)

log = structlog.get_logger()

MIN_PASSWORD_LEN = 6


def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def to_auth_user(user: User) -> AuthUser:
    return AuthUser(id=str(user.id), email=user.email, user_metadata={"name": user.name} if user.name else {})


class AuthService:
    """Password auth backed by the users / auth_sessions tables.

    Sessions are rows plus a signed token carrying the row id. A session ends
    when its row is revoked (sign-out) or its token expires. Tokens past half of
    their lifetime are reissued by `get_session`.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _start_session(self, user: User) -> Session:
        row = AuthSession(
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.session_ttl_min),
        )
        self.db.add(row)
        await self.db.flush()
        token, exp = make_session_token(str(user.id), str(row.id))
        row.expires_at = exp
        await self.db.commit()
        return Session(access_token=token, expires_at=exp, user=to_auth_user(user))

    async def get_session(self, token: str | None) -> Session | None:
        if not token:
            return None
        try:
            data = decode_token(token)
        except jwt.PyJWTError:
            return None
        if data.get("type") != "session":
            return None
        try:
            sid = uuid.UUID(data["sid"])
            uid = uuid.UUID(data["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        row = await self.db.get(AuthSession, sid)
        if row is None or row.revoked_at is not None or row.user_id != uid:
            return None
        now = datetime.now(timezone.utc)
        if _aware(row.expires_at) <= now:
            return None
        user = await self.db.get(User, uid)
        if user is None:
            return None

        remaining = _aware(row.expires_at) - now
        if remaining < timedelta(minutes=settings.session_ttl_min) / 2:
            new_token, exp = make_session_token(str(user.id), str(row.id))
            row.expires_at = exp
            await self.db.commit()
            log.info("session_refreshed", user_id=str(user.id))
            return Session(access_token=new_token, expires_at=exp, user=to_auth_user(user), refreshed=True)
        return Session(access_token=token, expires_at=_aware(row.expires_at), user=to_auth_user(user))

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        user = await self.db.scalar(select(User).where(User.email == email))
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid login credentials")
        if settings.auth_confirm_email and user.email_confirmed_at is None:
            raise AuthError("Email not confirmed")
        session = await self._start_session(user)
        log.info("signed_in", user_id=str(user.id))
        return AuthResponse(user=session.user, session=session)

    async def sign_up(
        self, email: str, password: str, name: str | None = None, email_redirect_to: str | None = None
    ) -> AuthResponse:
        if len(password) < MIN_PASSWORD_LEN:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LEN} characters")
        exists = await self.db.scalar(select(User).where(User.email == email))
        if exists:
            raise AuthError("User already registered")
        user = User(email=email, password_hash=hash_password(password), name=name or None)
        if not settings.auth_confirm_email:
            user.email_confirmed_at = datetime.now(timezone.utc)
        self.db.add(user)
        await self.db.flush()

        if settings.auth_confirm_email:
            await self.db.commit()
            target = email_redirect_to or f"{settings.public_base_url}/auth/callback"
            # Mail delivery is handled outside this service; the link is logged for the mailer.
            log.info("verification_link_issued", user_id=str(user.id), link=f"{target}?token={make_verify_token(str(user.id))}")
            return AuthResponse(user=to_auth_user(user), session=None)

        session = await self._start_session(user)
        return AuthResponse(user=session.user, session=session)

    async def verify_email(self, token: str) -> AuthResponse:
        try:
            data = decode_token(token)
        except jwt.ExpiredSignatureError:
            raise AuthError("Email link is invalid or has expired")
        except jwt.PyJWTError:
            raise AuthError("Invalid verification token")
        if data.get("type") != "verify":
            raise AuthError("Wrong token type")
        try:
            user = await self.db.get(User, uuid.UUID(data.get("sub", "")))
        except ValueError:
            user = None
        if user is None:
            raise AuthError("User not found")
        if user.email_confirmed_at is None:
            user.email_confirmed_at = datetime.now(timezone.utc)
        session = await self._start_session(user)
        log.info("email_confirmed", user_id=str(user.id))
        return AuthResponse(user=session.user, session=session)

    async def sign_out(self, token: str | None) -> None:
        if not token:
            return
        try:
            data = decode_token(token)
            sid = uuid.UUID(data["sid"])
        except (jwt.PyJWTError, KeyError, TypeError, ValueError):
            return
        row = await self.db.get(AuthSession, sid)
        if row is not None and row.revoked_at is None:
            row.revoked_at = datetime.now(timezone.utc)
            await self.db.commit()
            log.info("signed_out", user_id=str(row.user_id))
