"""
Session Context - the authenticated identity handed to every screen.

Built once per request from the auth service and the cookie token, then
passed explicitly to the view controllers. Lifecycle:

    INIT -> AUTHENTICATED | UNAUTHENTICATED -> DISPOSED

While in INIT the context is loading and screens must not render. After
resolve() it listens on the auth state channel, so signing out anywhere
(including through this context) flips it to UNAUTHENTICATED.
"""

from enum import Enum
from typing import Optional

from app.models.user import User
from app.services.auth import AuthEvent, AuthService, SessionRef, Subscription
from app.logging_config import get_logger, log_with_context

logger = get_logger("auth")


class SessionStatus(str, Enum):
    INIT = "INIT"
    AUTHENTICATED = "AUTHENTICATED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    DISPOSED = "DISPOSED"


class SessionContext:
    """
    Current user, loading flag and sign-out for one request.

    Args:
        auth: Auth service bound to the request's database session
        token: Raw session token from the browser cookie (may be None)
    """

    def __init__(self, auth: AuthService, token: Optional[str]):
        self._auth = auth
        self._token = token
        self._session_id: Optional[str] = None
        self._subscription: Optional[Subscription] = None
        self.status = SessionStatus.INIT
        self.current_user: Optional[User] = None

    @property
    def is_loading(self) -> bool:
        return self.status == SessionStatus.INIT

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED and self.current_user is not None

    def resolve(self) -> "SessionContext":
        """Ask the auth service for an existing session and start listening."""
        if self.status != SessionStatus.INIT:
            return self

        auth_session = self._auth.get_session(self._token)
        if auth_session is not None:
            self._session_id = auth_session.id
            self.current_user = auth_session.user
            self.status = SessionStatus.AUTHENTICATED
        else:
            self.status = SessionStatus.UNAUTHENTICATED

        self._subscription = self._auth.on_auth_state_change(self._on_auth_event)
        return self

    def sign_out(self) -> None:
        """End the current session. A context without a session stays as is."""
        if self.status == SessionStatus.DISPOSED:
            return
        self._auth.sign_out(self._token)
        # The channel event already cleared us; this covers a missing session
        self._clear()

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.status = SessionStatus.DISPOSED

    def _on_auth_event(self, event: AuthEvent, session_ref: SessionRef):
        if self.status == SessionStatus.DISPOSED:
            return
        if event == AuthEvent.SIGNED_OUT and session_ref.id == self._session_id:
            log_with_context(logger, "DEBUG", "Session context signed out",
                context={"session_id": session_ref.id, "user_id": session_ref.user_id})
            self._clear()

    def _clear(self):
        self._session_id = None
        self.current_user = None
        self.status = SessionStatus.UNAUTHENTICATED
