"""
Landing, login and logout routes.
"""

from fastapi import APIRouter, Depends, Form, Request
from typing import Optional

from app.controllers.landing import LandingController, LoginController
from app.services.auth import AuthService
from app.services.session_context import SessionContext
from app.web import get_auth_service, get_session_context, to_response

router = APIRouter()


@router.get("/")
def landing(request: Request, session: SessionContext = Depends(get_session_context)):
    """Landing page; signed-in visitors go straight to the list."""
    return to_response(request, LandingController(session).show())


@router.get("/login")
def login_page(
    request: Request,
    notice: Optional[str] = None,
    session: SessionContext = Depends(get_session_context),
    auth: AuthService = Depends(get_auth_service),
):
    return to_response(request, LoginController(auth, session).show(notice=notice))


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    session: SessionContext = Depends(get_session_context),
    auth: AuthService = Depends(get_auth_service),
):
    """Sign in with email and password and set the session cookie."""
    return to_response(request, LoginController(auth, session).sign_in(email, password))


@router.post("/signup")
def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    session: SessionContext = Depends(get_session_context),
    auth: AuthService = Depends(get_auth_service),
):
    return to_response(request, LoginController(auth, session).sign_up(email, password))


@router.post("/logout")
def logout(
    request: Request,
    session: SessionContext = Depends(get_session_context),
    auth: AuthService = Depends(get_auth_service),
):
    return to_response(request, LoginController(auth, session).sign_out())
