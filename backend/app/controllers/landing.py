"""
Landing and login screens.
"""

from typing import Optional

from app.errors import AuthError, TransportError
from app.controllers.forms import (
    LOGIN_PATH, RECORDS_PATH, ScreenController, ScreenResult, resolve_notice,
)
from app.services.auth import AuthService
from app.services.session_context import SessionContext
from app.logging_config import get_logger, log_with_context

logger = get_logger("views")


class LandingController(ScreenController):
    """Send signed-in visitors to the list, everyone else gets a link to log in."""

    def show(self) -> Optional[ScreenResult]:
        if self.session.is_loading:
            raise RuntimeError("Session context must be resolved before rendering")
        if self.session.is_authenticated:
            return ScreenResult.redirect(RECORDS_PATH)
        return self.deliver(ScreenResult.render("landing.html", {"login_path": LOGIN_PATH}))


class LoginController(ScreenController):
    """Password sign-in, sign-up and sign-out."""

    def __init__(self, auth: AuthService, session: SessionContext):
        super().__init__(session)
        self.auth = auth

    def show(self, notice: str = None) -> Optional[ScreenResult]:
        if self.session.is_authenticated:
            return ScreenResult.redirect(RECORDS_PATH)
        return self._render(email="", notice=resolve_notice(notice))

    def sign_in(self, email: str, password: str) -> Optional[ScreenResult]:
        try:
            _, token = self.auth.sign_in_with_password(email, password)
        except (AuthError, TransportError) as e:
            status_code = 401 if isinstance(e, AuthError) else 503
            return self._render(email=email, error=e.message, status_code=status_code)
        return self.deliver(ScreenResult.redirect(RECORDS_PATH, session_token=token))

    def sign_up(self, email: str, password: str) -> Optional[ScreenResult]:
        try:
            user = self.auth.sign_up(email, password)
        except (AuthError, TransportError) as e:
            log_with_context(logger, "INFO", "Sign-up rejected: {}".format(e.code))
            status_code = 400 if isinstance(e, AuthError) else 503
            return self._render(email=email, error=e.message, status_code=status_code)
        log_with_context(logger, "INFO", "Account created", context={"user_id": user.id})
        return self.deliver(ScreenResult.redirect(LOGIN_PATH, notice="signed_up"))

    def sign_out(self) -> Optional[ScreenResult]:
        self.session.sign_out()
        return ScreenResult.redirect(LOGIN_PATH, notice="signed_out", clear_session=True)

    def _render(self, email: str, error: str = None, notice: dict = None,
                status_code: int = 200) -> Optional[ScreenResult]:
        context = {"email": email, "error": error, "notice": notice}
        return self.deliver(ScreenResult.render("login.html", context, status_code))
