from __future__ import annotations
import structlog
from gridrr_admin.auth.client import AuthClient, SIGNED_OUT, Subscription
from gridrr_admin.config import settings
from gridrr_admin.errors import AuthError
from gridrr_admin.navigation import Navigator
from gridrr_admin.schemas.auth import AuthResult, AuthUser, Session

log = structlog.get_logger()

VERIFY_EMAIL_NOTICE = "Please check your email to verify your account"


class AuthContext:
    """Identity for one browser, passed explicitly to whatever needs it.

    Lifecycle: starts with ``loading=True, initialized=False, user=None``.
    ``initialize()`` resolves the current session once and then sets
    ``loading=False, initialized=True``; ``initialized`` never goes back to
    False. Afterwards ``user`` follows the auth client's state-change events.
    """

    def __init__(self, client: AuthClient, navigator: Navigator, *, email_redirect_to: str | None = None):
        self.client = client
        self.navigator = navigator
        self.email_redirect_to = email_redirect_to or f"{settings.public_base_url}/auth/callback"
        self.user: AuthUser | None = None
        self.loading = True
        self.initialized = False
        self._mounted = True
        self._subscription: Subscription | None = None

    def _on_auth_event(self, event: str, session: Session | None) -> None:
        if not self._mounted:
            return
        if event == SIGNED_OUT or session is None:
            self.user = None
        else:
            self.user = session.user

    async def initialize(self) -> None:
        if self.initialized or self._subscription is not None:
            return
        self._subscription = self.client.on_auth_state_change(self._on_auth_event)
        try:
            session = await self.client.get_session()
            if self._mounted:
                self.user = session.user if session else None
        except Exception:
            log.exception("auth_initialize_failed")
            if self._mounted:
                self.user = None
        finally:
            if self._mounted:
                self.loading = False
                self.initialized = True

    def close(self) -> None:
        self._mounted = False
        if self._subscription is not None:
            self._subscription.unsubscribe()

    async def login(self, email: str, password: str) -> AuthResult:
        # `user` is set by the SIGNED_IN event, not here
        self.loading = True
        try:
            resp = await self.client.sign_in_with_password(email.strip().lower(), password)
            if resp.user is None:
                return AuthResult(success=False, error="Login failed - no user data returned")
            return AuthResult(success=True)
        except AuthError as e:
            log.info("login_failed", reason=str(e))
            return AuthResult(success=False, error=str(e))
        except Exception as e:
            log.exception("login_error")
            return AuthResult(success=False, error=str(e) or "An unexpected error occurred")
        finally:
            self.loading = False

    async def signup(self, email: str, password: str, name: str | None = None) -> AuthResult:
        self.loading = True
        try:
            resp = await self.client.sign_up(
                email.strip().lower(), password, name=name, email_redirect_to=self.email_redirect_to
            )
            if resp.user is not None and resp.session is None:
                return AuthResult(success=True, error=VERIFY_EMAIL_NOTICE)
            return AuthResult(success=True)
        except AuthError as e:
            log.info("signup_failed", reason=str(e))
            return AuthResult(success=False, error=str(e))
        except Exception as e:
            log.exception("signup_error")
            return AuthResult(success=False, error=str(e) or "An unexpected error occurred")
        finally:
            self.loading = False

    async def logout(self) -> AuthResult:
        self.loading = True
        result = AuthResult(success=True)
        try:
            await self.client.sign_out()
        except Exception as e:
            # local state is cleared regardless
            log.exception("logout_error")
            result = AuthResult(success=False, error=str(e) or "An unexpected error occurred")
        finally:
            self.user = None
            self.loading = False
        self.navigator.push(settings.signin_path, delay=settings.logout_redirect_delay)
        return result
