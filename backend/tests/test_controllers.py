from types import SimpleNamespace

import pytest

from app.controllers.forms import (
    FormState, RecordForm, ScreenResult, SubmissionInProgress, resolve_notice,
)
from app.controllers.landing import LandingController
from app.controllers.records import CreateController, EditController, ListController
from app.errors import (
    DuplicateRegistrationNumber, NotFound, RequiredField, TransportError,
)
from app.services.validation import StudentDraft
from app.web import to_response


class StubSession:
    """Resolved session context with a fixed user (or none)."""

    def __init__(self, user=None, loading=False):
        self.current_user = user
        self.is_loading = loading

    @property
    def is_authenticated(self):
        return self.current_user is not None


class SpyStore:
    """Records every call; raises ``fail_with`` when set."""

    def __init__(self, students=None, fail_with=None):
        self.students = list(students or [])
        self.fail_with = fail_with
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_with is not None:
            raise self.fail_with

    def list(self):
        self._call("list")
        return self.students

    def get_by_id(self, record_id):
        self._call("get_by_id", record_id)
        for student in self.students:
            if student.id == record_id:
                return student
        raise NotFound(record_id)

    def create(self, draft, owner_id):
        self._call("create", draft, owner_id)

    def update(self, record_id, draft):
        self._call("update", record_id, draft)

    def delete_by_id(self, record_id):
        self._call("delete_by_id", record_id)


USER = SimpleNamespace(id="user-1", email="professora@example.com")
ANA = SimpleNamespace(id="rec-1", full_name="Ana Silva", registration_number="2024001",
                      email="ana@example.com", course="Engenharia")


@pytest.fixture
def session():
    return StubSession(USER)


def ana_draft(**overrides):
    values = {"full_name": "Ana Silva", "registration_number": "2024001",
              "email": "ana@example.com", "course": "Engenharia"}
    values.update(overrides)
    return StudentDraft(**values)


# ── RecordForm ───────────────────────────────────────────────

def test_form_state_machine():
    form = RecordForm()
    assert form.state == FormState.IDLE
    assert not form.disabled

    form.begin_submit()
    assert form.state == FormState.SUBMITTING
    assert form.disabled

    form.succeed()
    assert form.state == FormState.SUCCESS


def test_form_failure_returns_to_idle_with_error():
    form = RecordForm()
    form.begin_submit()

    form.fail(RequiredField("course", "Curso é obrigatório"))

    assert form.state == FormState.IDLE
    assert form.error_message == "Curso é obrigatório"
    assert form.error_field == "course"
    assert not form.disabled


def test_form_refuses_second_submit_while_submitting():
    form = RecordForm()
    form.begin_submit()

    with pytest.raises(SubmissionInProgress):
        form.begin_submit()


def test_form_controller_refuses_concurrent_submit(session):
    store = SpyStore()
    controller = CreateController(store, session)
    controller.form.begin_submit()

    result = controller.submit(ana_draft())

    assert result.status_code == 409
    assert store.calls == []


# ── Create ───────────────────────────────────────────────────

def test_create_invalid_email_makes_no_store_call(session):
    store = SpyStore()
    controller = CreateController(store, session)

    result = controller.submit(ana_draft(email="not-an-email"))

    assert result.template == "record_form.html"
    assert result.status_code == 422
    assert controller.form.error_message == "Email inválido"
    assert controller.form.state == FormState.IDLE
    assert store.calls == []


def test_create_success_stores_trimmed_draft_and_redirects(session):
    store = SpyStore()
    controller = CreateController(store, session)

    result = controller.submit(ana_draft(full_name="  Ana Silva  "))

    assert result.redirect_to == "/records?notice=created"
    assert controller.form.state == FormState.SUCCESS
    assert store.calls == [("create", ana_draft(), USER.id)]


def test_create_duplicate_keeps_user_on_form(session):
    store = SpyStore(fail_with=DuplicateRegistrationNumber())
    controller = CreateController(store, session)

    result = controller.submit(ana_draft())

    assert result.status_code == 409
    assert controller.form.error_message == "Matrícula já cadastrada"
    assert controller.form.draft == ana_draft()
    assert controller.form.state == FormState.IDLE


def test_create_transport_failure(session):
    controller = CreateController(SpyStore(fail_with=TransportError()), session)

    result = controller.submit(ana_draft())

    assert result.status_code == 503
    assert controller.form.error_message == "Erro ao cadastrar aluno"


def test_create_requires_session():
    store = SpyStore()

    result = CreateController(store, StubSession(None)).submit(ana_draft())

    assert result.redirect_to == "/"
    assert store.calls == []


def test_screens_refuse_unresolved_session():
    with pytest.raises(RuntimeError):
        CreateController(SpyStore(), StubSession(USER, loading=True)).show()


# ── Edit ─────────────────────────────────────────────────────

def test_edit_prefills_form(session):
    controller = EditController(SpyStore([ANA]), session, ANA.id)

    result = controller.show()

    assert result.template == "record_form.html"
    assert result.context["action"] == "/records/edit/rec-1"
    assert controller.form.draft == ana_draft()


def test_edit_of_missing_record_goes_back_to_list(session):
    result = EditController(SpyStore(), session, "gone").show()

    assert result.redirect_to == "/records?notice=load_failed"


def test_edit_submit_updates(session):
    store = SpyStore([ANA])
    controller = EditController(store, session, ANA.id)

    result = controller.submit(ana_draft(course="Medicina"))

    assert result.redirect_to == "/records?notice=updated"
    assert store.calls == [("update", ANA.id, ana_draft(course="Medicina"))]


def test_edit_submit_on_vanished_record(session):
    controller = EditController(SpyStore(fail_with=NotFound("rec-1")), session, "rec-1")

    result = controller.submit(ana_draft())

    assert result.status_code == 404
    assert controller.form.error_message == "Aluno não encontrado"


# ── List ─────────────────────────────────────────────────────

def test_list_renders_students(session):
    result = ListController(SpyStore([ANA]), session).show()

    assert result.template == "records_list.html"
    assert result.context["students"] == [ANA]
    assert result.context["pending_delete"] is None
    assert result.context["user"] is USER


def test_list_delete_selection_opens_confirmation(session):
    result = ListController(SpyStore([ANA]), session).show(delete_id=ANA.id)

    assert result.context["pending_delete"] is ANA


def test_list_delete_selection_of_unknown_record(session):
    result = ListController(SpyStore([ANA]), session).show(delete_id="gone")

    assert result.context["pending_delete"] is None
    assert result.context["notice"] == {"level": "error", "message": "Aluno não encontrado"}


def test_list_load_failure_shows_error(session):
    result = ListController(SpyStore(fail_with=TransportError()), session).show()

    assert result.context["students"] == []
    assert result.context["notice"]["message"] == "Erro ao carregar alunos"


def test_confirm_delete(session):
    store = SpyStore([ANA])

    result = ListController(store, session).confirm_delete(ANA.id)

    assert result.redirect_to == "/records?notice=deleted"
    assert store.calls == [("delete_by_id", ANA.id)]


def test_confirm_delete_of_vanished_record(session):
    result = ListController(SpyStore(fail_with=NotFound("rec-1")), session).confirm_delete("rec-1")

    assert result.redirect_to == "/records?notice=not_found"


def test_confirm_delete_transport_failure(session):
    result = ListController(SpyStore(fail_with=TransportError()), session).confirm_delete("rec-1")

    assert result.redirect_to == "/records?notice=delete_failed"


def test_unmounted_controller_discards_results(session):
    store = SpyStore([ANA])
    controller = ListController(store, session)
    controller.unmount()

    assert controller.show() is None
    assert controller.confirm_delete(ANA.id) is None


# ── Landing & notices ────────────────────────────────────────

def test_landing_redirects_signed_in_user(session):
    assert LandingController(session).show().redirect_to == "/records"


def test_landing_offers_login_link():
    result = LandingController(StubSession(None)).show()

    assert result.template == "landing.html"
    assert result.context["login_path"] == "/login"


def test_resolve_notice():
    assert resolve_notice("deleted") == {"level": "success", "message": "Aluno excluído com sucesso!"}
    assert resolve_notice("<script>") is None
    assert resolve_notice(None) is None


def test_redirect_with_notice_encodes_query():
    assert ScreenResult.redirect("/login", notice="signed_out").redirect_to == "/login?notice=signed_out"


def test_discarded_result_becomes_empty_response():
    assert to_response(None, None).status_code == 204
