"""
Auth Service - user accounts, password sign-in and server-side sessions.

A successful sign-in issues an opaque random token. The browser keeps the
token in a cookie; the auth_sessions table keeps only its SHA-256 digest
together with an expiry. Looking a session up by token, signing out and
signing in all go through this service.

State changes are published on an AuthStateChannel so that session
contexts alive at the time can react (SIGNED_IN / SIGNED_OUT).
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

from app import config
from app.errors import (
    InvalidCredentials, EmailAlreadyRegistered, WeakPassword, TransportError,
)
from app.models.auth_session import AuthSession
from app.models.user import User
from app.services.validation import is_valid_email
from app.logging_config import get_logger, log_with_context

logger = get_logger("auth")


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class SessionRef(NamedTuple):
    """Identity of a session as carried by auth state events."""
    id: str
    user_id: str


class Subscription:
    """Handle returned by AuthStateChannel.subscribe."""

    def __init__(self, channel: "AuthStateChannel", listener: Callable):
        self._channel = channel
        self._listener = listener

    def unsubscribe(self):
        self._channel._remove(self._listener)


class AuthStateChannel:
    """
    Publish/subscribe channel for auth state changes.

    Listeners are called as ``listener(event, session_ref)``. One channel
    is owned by the application object and shared by every request.
    """

    def __init__(self):
        self._listeners: List[Callable] = []

    def subscribe(self, listener: Callable) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def publish(self, event: AuthEvent, session_ref: SessionRef):
        for listener in list(self._listeners):
            listener(event, session_ref)

    def _remove(self, listener: Callable):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    # Naive UTC, matching how DateTime columns round-trip on every backend
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    """
    Account and session operations.

    Args:
        db: SQLAlchemy session for the current request
        channel: Channel that receives SIGNED_IN / SIGNED_OUT events
    """

    def __init__(self, db: Session, channel: AuthStateChannel = None):
        self.db = db
        self.channel = channel or AuthStateChannel()

    def sign_up(self, email: str, password: str) -> User:
        """Create an account. The user still has to sign in afterwards."""
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidCredentials("Email inválido")
        if len(password or "") < config.MIN_PASSWORD_LENGTH:
            raise WeakPassword(
                "A senha deve ter pelo menos {} caracteres".format(config.MIN_PASSWORD_LENGTH)
            )

        user = User(email=email, password_hash=generate_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise EmailAlreadyRegistered()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._transport_error("sign_up", e)
        self.db.refresh(user)

        log_with_context(logger, "INFO", "User signed up",
            context={"user_id": user.id})
        return user

    def sign_in_with_password(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and open a session.

        Returns:
            Tuple of (user, raw token). The raw token is never stored.
        """
        user = self.get_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash, password or ""):
            log_with_context(logger, "WARNING", "Failed sign-in attempt",
                extra_data={"email": normalize_email(email)})
            raise InvalidCredentials()

        token = secrets.token_urlsafe(32)
        now = _utcnow()
        auth_session = AuthSession(
            user_id=user.id,
            token_hash=hash_token(token),
            created_at=now,
            expires_at=now + timedelta(hours=config.SESSION_TTL_HOURS),
        )
        self.db.add(auth_session)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._transport_error("sign_in", e)

        session_ref = SessionRef(auth_session.id, user.id)
        log_with_context(logger, "INFO", "User signed in",
            context={"user_id": user.id, "session_id": session_ref.id})
        self.channel.publish(AuthEvent.SIGNED_IN, session_ref)
        return user, token

    def get_session(self, token: Optional[str]) -> Optional[AuthSession]:
        """Return the live session for ``token``; expired sessions count as absent."""
        if not token:
            return None
        try:
            auth_session = (
                self.db.query(AuthSession)
                .filter(AuthSession.token_hash == hash_token(token))
                .first()
            )
        except SQLAlchemyError as e:
            raise self._transport_error("get_session", e)

        if auth_session is None:
            return None
        if auth_session.expires_at <= _utcnow():
            log_with_context(logger, "DEBUG", "Session expired",
                context={"session_id": auth_session.id})
            return None
        return auth_session

    def sign_out(self, token: Optional[str]) -> None:
        """End the session behind ``token``. Unknown tokens are ignored."""
        auth_session = self.get_session(token)
        if auth_session is None:
            return

        # Attributes expire on commit and the row is gone afterwards
        session_ref = SessionRef(auth_session.id, auth_session.user_id)
        self.db.delete(auth_session)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._transport_error("sign_out", e)

        log_with_context(logger, "INFO", "User signed out",
            context={"user_id": session_ref.user_id, "session_id": session_ref.id})
        self.channel.publish(AuthEvent.SIGNED_OUT, session_ref)

    def on_auth_state_change(self, listener: Callable) -> Subscription:
        return self.channel.subscribe(listener)

    def get_user_by_email(self, email: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.email == normalize_email(email)).first()
        except SQLAlchemyError as e:
            raise self._transport_error("get_user", e)

    def _transport_error(self, operation: str, exc: Exception) -> TransportError:
        log_with_context(logger, "ERROR",
            "Auth {} failed: {}".format(operation, exc),
            extra_data={"error_type": type(exc).__name__})
        return TransportError()
