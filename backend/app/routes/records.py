"""
Student record routes - list, create, edit and delete.

Every route builds its controller with the request's store and session
context; the controller decides whether to render or redirect.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request

from app.controllers.records import CreateController, EditController, ListController
from app.services.session_context import SessionContext
from app.services.student_store import StudentStore
from app.services.validation import StudentDraft
from app.web import get_session_context, get_store, to_response

router = APIRouter()


def draft_form(
    full_name: str = Form(""),
    registration_number: str = Form(""),
    email: str = Form(""),
    course: str = Form(""),
) -> StudentDraft:
    """Collect the four form fields into a draft, untouched."""
    return StudentDraft(
        full_name=full_name,
        registration_number=registration_number,
        email=email,
        course=course,
    )


@router.get("/records")
def list_records(
    request: Request,
    delete: Optional[str] = None,
    notice: Optional[str] = None,
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    """List students; ``?delete=<id>`` opens the delete confirmation."""
    controller = ListController(store, session)
    return to_response(request, controller.show(delete_id=delete, notice=notice))


@router.post("/records/{record_id}/delete")
def delete_record(
    request: Request,
    record_id: str,
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    controller = ListController(store, session)
    return to_response(request, controller.confirm_delete(record_id))


@router.get("/records/new")
def new_record_form(
    request: Request,
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    return to_response(request, CreateController(store, session).show())


@router.post("/records/new")
def create_record(
    request: Request,
    draft: StudentDraft = Depends(draft_form),
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    return to_response(request, CreateController(store, session).submit(draft))


@router.get("/records/edit/{record_id}")
def edit_record_form(
    request: Request,
    record_id: str,
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    return to_response(request, EditController(store, session, record_id).show())


@router.post("/records/edit/{record_id}")
def update_record(
    request: Request,
    record_id: str,
    draft: StudentDraft = Depends(draft_form),
    store: StudentStore = Depends(get_store),
    session: SessionContext = Depends(get_session_context),
):
    return to_response(request, EditController(store, session, record_id).submit(draft))
