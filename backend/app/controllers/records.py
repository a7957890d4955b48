"""
Record screens - list, create and edit.

Each controller composes the validation service, the student store and
the session context. Store errors are caught here, logged and turned
into a message on the current screen; the user can always retry.
"""

from typing import Callable, Optional

from app.errors import (
    FieldError, DuplicateRecord, NotFound, StoreError, TransportError,
)
from app.controllers.forms import (
    RECORDS_PATH, RecordForm, ScreenController, ScreenResult,
    SubmissionInProgress, resolve_notice,
)
from app.services.session_context import SessionContext
from app.services.student_store import StudentStore
from app.services.validation import StudentDraft, validate_draft
from app.logging_config import get_logger, log_with_context

logger = get_logger("views")

# Re-rendered form status per failure kind
STATUS_VALIDATION = 422
STATUS_CONFLICT = 409
STATUS_NOT_FOUND = 404
STATUS_UNAVAILABLE = 503


class ListController(ScreenController):
    """Student list with two-phase delete (select, confirm or cancel)."""

    def __init__(self, store: StudentStore, session: SessionContext):
        super().__init__(session)
        self.store = store

    def show(self, delete_id: str = None, notice: str = None) -> Optional[ScreenResult]:
        redirect = self.gate()
        if redirect:
            return redirect

        notification = resolve_notice(notice)
        try:
            students = self.store.list()
        except StoreError as e:
            log_with_context(logger, "ERROR", "Failed to load students",
                extra_data={"error": e.code})
            students = []
            notification = {"level": "error", "message": "Erro ao carregar alunos"}

        pending_delete = None
        if delete_id:
            pending_delete = next((s for s in students if s.id == delete_id), None)
            if pending_delete is None and notification is None:
                notification = resolve_notice("not_found")

        context = self.base_context()
        context.update({
            "students": students,
            "pending_delete": pending_delete,
            "notice": notification,
        })
        return self.deliver(ScreenResult.render("records_list.html", context))

    def confirm_delete(self, record_id: str) -> Optional[ScreenResult]:
        redirect = self.gate()
        if redirect:
            return redirect

        try:
            self.store.delete_by_id(record_id)
        except NotFound:
            log_with_context(logger, "WARNING", "Delete target already gone",
                context={"record_id": record_id})
            return self.deliver(ScreenResult.redirect(RECORDS_PATH, notice="not_found"))
        except StoreError as e:
            log_with_context(logger, "ERROR", "Failed to delete student",
                context={"record_id": record_id}, extra_data={"error": e.code})
            return self.deliver(ScreenResult.redirect(RECORDS_PATH, notice="delete_failed"))

        return self.deliver(ScreenResult.redirect(RECORDS_PATH, notice="deleted"))


class _RecordFormController(ScreenController):
    """Validate-then-store submit flow shared by create and edit."""

    title = ""
    submit_label = "Salvar"
    transport_message = ""
    success_notice = ""

    def __init__(self, store: StudentStore, session: SessionContext):
        super().__init__(session)
        self.store = store
        self.form = RecordForm()

    def action_path(self) -> str:
        raise NotImplementedError

    def render_form(self, status_code: int = 200) -> Optional[ScreenResult]:
        context = self.base_context()
        context.update({
            "form": self.form,
            "title": self.title,
            "submit_label": self.submit_label,
            "action": self.action_path(),
        })
        return self.deliver(ScreenResult.render("record_form.html", context, status_code))

    def _submit(self, draft: StudentDraft, persist: Callable[[StudentDraft], None],
                context: dict = None) -> Optional[ScreenResult]:
        self.form.draft = draft
        try:
            self.form.begin_submit()
        except SubmissionInProgress as e:
            self.form.error = e
            return self.render_form(STATUS_CONFLICT)

        try:
            valid = validate_draft(draft)
        except FieldError as e:
            log_with_context(logger, "DEBUG", "Draft rejected: {}".format(e.code),
                context=context, extra_data={"field": e.field})
            self.form.fail(e)
            return self.render_form(STATUS_VALIDATION)

        try:
            persist(valid)
        except DuplicateRecord as e:
            log_with_context(logger, "WARNING", "Duplicate student: {}".format(e.code),
                context=context)
            self.form.fail(e)
            return self.render_form(STATUS_CONFLICT)
        except NotFound as e:
            log_with_context(logger, "WARNING", "Student vanished during submit",
                context=context)
            self.form.fail(e)
            return self.render_form(STATUS_NOT_FOUND)
        except TransportError:
            log_with_context(logger, "ERROR", self.transport_message, context=context)
            self.form.fail(TransportError(self.transport_message))
            return self.render_form(STATUS_UNAVAILABLE)

        self.form.succeed()
        return self.deliver(ScreenResult.redirect(RECORDS_PATH, notice=self.success_notice))


class CreateController(_RecordFormController):
    title = "Novo Aluno"
    submit_label = "Salvar"
    transport_message = "Erro ao cadastrar aluno"
    success_notice = "created"

    def action_path(self) -> str:
        return RECORDS_PATH + "/new"

    def show(self) -> Optional[ScreenResult]:
        return self.gate() or self.render_form()

    def submit(self, draft: StudentDraft) -> Optional[ScreenResult]:
        redirect = self.gate()
        if redirect:
            return redirect
        owner_id = self.session.current_user.id
        return self._submit(
            draft,
            lambda valid: self.store.create(valid, owner_id=owner_id),
            context={"user_id": owner_id},
        )


class EditController(_RecordFormController):
    title = "Editar Aluno"
    submit_label = "Salvar Alterações"
    transport_message = "Erro ao atualizar aluno"
    success_notice = "updated"

    def __init__(self, store: StudentStore, session: SessionContext, record_id: str):
        super().__init__(store, session)
        self.record_id = record_id

    def action_path(self) -> str:
        return "{}/edit/{}".format(RECORDS_PATH, self.record_id)

    def show(self) -> Optional[ScreenResult]:
        """Load the record and prefill the form; go back to the list if it cannot be loaded."""
        redirect = self.gate()
        if redirect:
            return redirect

        try:
            student = self.store.get_by_id(self.record_id)
        except StoreError as e:
            log_with_context(logger, "ERROR", "Failed to load student",
                context={"record_id": self.record_id}, extra_data={"error": e.code})
            return self.deliver(ScreenResult.redirect(RECORDS_PATH, notice="load_failed"))

        self.form.draft = StudentDraft(
            full_name=student.full_name,
            registration_number=student.registration_number,
            email=student.email,
            course=student.course,
        )
        return self.render_form()

    def submit(self, draft: StudentDraft) -> Optional[ScreenResult]:
        redirect = self.gate()
        if redirect:
            return redirect
        return self._submit(
            draft,
            lambda valid: self.store.update(self.record_id, valid),
            context={"record_id": self.record_id},
        )
