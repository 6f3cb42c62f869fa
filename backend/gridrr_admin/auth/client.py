from __future__ import annotations
from typing import Callable
import structlog
from gridrr_admin.schemas.auth import AuthResponse, Session
from gridrr_admin.services.auth import AuthService

log = structlog.get_logger()

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

AuthListener = Callable[[str, "Session | None"], None]


class Subscription:
    def __init__(self, listeners: list[AuthListener], callback: AuthListener):
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class AuthClient:
    """One browser's handle on the auth service.

    Holds the current session token and notifies subscribers whenever the
    session changes through this handle.
    """

    def __init__(self, service: AuthService, token: str | None = None):
        self.service = service
        self.token = token
        self._listeners: list[AuthListener] = []

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    def _emit(self, event: str, session: Session | None) -> None:
        log.debug("auth_state_change", auth_event=event, email=session.user.email if session else None)
        for cb in list(self._listeners):
            cb(event, session)

    async def get_session(self) -> Session | None:
        session = await self.service.get_session(self.token)
        if session is None:
            return None
        if session.refreshed:
            self.token = session.access_token
            self._emit(TOKEN_REFRESHED, session)
        return session

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        resp = await self.service.sign_in_with_password(email, password)
        self.token = resp.session.access_token
        self._emit(SIGNED_IN, resp.session)
        return resp

    async def sign_up(
        self, email: str, password: str, name: str | None = None, email_redirect_to: str | None = None
    ) -> AuthResponse:
        resp = await self.service.sign_up(email, password, name=name, email_redirect_to=email_redirect_to)
        if resp.session is not None:
            self.token = resp.session.access_token
            self._emit(SIGNED_IN, resp.session)
        return resp

    async def sign_out(self) -> None:
        token, self.token = self.token, None
        try:
            await self.service.sign_out(token)
        finally:
            self._emit(SIGNED_OUT, None)
