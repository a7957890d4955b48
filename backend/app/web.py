"""
Glue between controllers and FastAPI: dependencies and response building.
"""

from pathlib import Path

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app import config
from app.controllers.forms import ScreenResult
from app.database import get_db
from app.services.auth import AuthService
from app.services.session_context import SessionContext
from app.services.student_store import StudentStore

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    """Auth service bound to the request's DB session and the app-wide event channel."""
    return AuthService(db, request.app.state.auth_events)


def get_session_context(request: Request, auth: AuthService = Depends(get_auth_service)):
    """
    FastAPI dependency that resolves the visitor's session.

    The context is resolved before any screen sees it (so it is never
    loading at render time) and disposed once the response is built.
    """
    context = SessionContext(auth, request.cookies.get(config.SESSION_COOKIE_NAME))
    try:
        context.resolve()
        yield context
    finally:
        context.dispose()


def get_store(db: Session = Depends(get_db)) -> StudentStore:
    return StudentStore(db)


def to_response(request: Request, result: ScreenResult) -> Response:
    """Render or redirect according to what the controller decided."""
    if result is None:
        # Only an unmounted controller returns None; routes never unmount one
        return Response(status_code=204)

    if result.is_redirect:
        response = RedirectResponse(result.redirect_to, status_code=303)
    else:
        context = {"app_title": config.APP_TITLE, **result.context}
        response = templates.TemplateResponse(
            request, result.template, context, status_code=result.status_code
        )

    if result.session_token:
        response.set_cookie(
            config.SESSION_COOKIE_NAME,
            result.session_token,
            max_age=config.SESSION_TTL_HOURS * 3600,
            httponly=True,
            samesite="lax",
            secure=config.SESSION_COOKIE_SECURE,
        )
    if result.clear_session:
        response.delete_cookie(config.SESSION_COOKIE_NAME)
    return response
