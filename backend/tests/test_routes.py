"""
End-to-end tests through the HTTP routes with FastAPI's TestClient.
"""

from app import config
from app.services.student_store import StudentStore

from conftest import TEST_USER_EMAIL, TEST_USER_PASSWORD

ANA_FORM = {
    "full_name": "Ana Silva",
    "registration_number": "2024001",
    "email": "ana@example.com",
    "course": "Engenharia",
}


def create_student(client, **overrides):
    data = dict(ANA_FORM, **overrides)
    return client.post("/records/new", data=data)


# ── Landing, auth and gating ─────────────────────────────────

def test_landing_links_to_login(client):
    response = client.get("/")

    assert response.status_code == 200
    assert 'href="/login"' in response.text
    assert "Acessar Sistema" in response.text


def test_records_require_sign_in(client):
    for path in ["/records", "/records/new", "/records/edit/anything"]:
        response = client.get(path, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/"


def test_sign_up_then_sign_in(client, db):
    response = client.post("/signup", data={"email": "novo@example.com", "password": "senha-forte"})

    assert response.status_code == 200
    assert response.url.path == "/login"
    assert "Conta criada! Entre para continuar" in response.text

    response = client.post("/login", data={"email": "novo@example.com", "password": "senha-forte"})

    assert response.url.path == "/records"
    assert "novo@example.com" in response.text
    assert config.SESSION_COOKIE_NAME in client.cookies


def test_wrong_password_stays_on_login(client, owner):
    response = client.post("/login", data={"email": TEST_USER_EMAIL, "password": "errada"})

    assert response.status_code == 401
    assert "Email ou senha inválidos" in response.text
    assert config.SESSION_COOKIE_NAME not in client.cookies


def test_signed_in_visitor_skips_landing_and_login(logged_in_client):
    for path in ["/", "/login"]:
        response = logged_in_client.get(path, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/records"


def test_logout_ends_session(logged_in_client):
    response = logged_in_client.post("/logout")

    assert response.url.path == "/login"
    assert "Você saiu do sistema" in response.text

    response = logged_in_client.get("/records", follow_redirects=False)
    assert response.headers["location"] == "/"


# ── List and create ──────────────────────────────────────────

def test_empty_list(logged_in_client):
    response = logged_in_client.get("/records")

    assert response.status_code == 200
    assert "Lista de Alunos" in response.text
    assert "Nenhum aluno cadastrado" in response.text


def test_new_form_is_empty(logged_in_client):
    response = logged_in_client.get("/records/new")

    assert response.status_code == 200
    assert "Novo Aluno" in response.text
    assert 'action="/records/new"' in response.text


def test_create_shows_new_student_first(logged_in_client, db):
    create_student(logged_in_client, full_name="Bruno Costa", registration_number="2024002",
                   email="bruno@example.com")

    response = create_student(logged_in_client)

    assert response.status_code == 200
    assert response.url.path == "/records"
    assert "Aluno cadastrado com sucesso!" in response.text
    assert response.text.index("Ana Silva") < response.text.index("Bruno Costa")
    assert StudentStore(db).count() == 2


def test_create_with_invalid_email_is_rejected(logged_in_client, db):
    response = create_student(logged_in_client, email="not-an-email")

    assert response.status_code == 422
    assert "Email inválido" in response.text
    # Values survive the round trip
    assert 'value="Ana Silva"' in response.text
    assert StudentStore(db).count() == 0


def test_create_with_blank_field_is_rejected(logged_in_client, db):
    response = create_student(logged_in_client, course="   ")

    assert response.status_code == 422
    assert "Curso é obrigatório" in response.text
    assert StudentStore(db).count() == 0


def test_create_duplicate_registration_number(logged_in_client, db):
    create_student(logged_in_client)

    response = create_student(logged_in_client, email="outra@example.com")

    assert response.status_code == 409
    assert "Matrícula já cadastrada" in response.text
    assert StudentStore(db).count() == 1


def test_create_duplicate_email(logged_in_client, db):
    create_student(logged_in_client)

    response = create_student(logged_in_client, registration_number="2024999")

    assert response.status_code == 409
    assert "Email já cadastrado" in response.text


# ── Edit ─────────────────────────────────────────────────────

def test_edit_prefills_and_updates(logged_in_client, db):
    create_student(logged_in_client)
    student = StudentStore(db).list()[0]

    response = logged_in_client.get(f"/records/edit/{student.id}")

    assert response.status_code == 200
    assert "Editar Aluno" in response.text
    assert 'value="ana@example.com"' in response.text

    response = logged_in_client.post(
        f"/records/edit/{student.id}", data=dict(ANA_FORM, course="Medicina")
    )

    assert response.url.path == "/records"
    assert "Aluno atualizado com sucesso!" in response.text
    assert "Medicina" in response.text


def test_edit_unknown_record_goes_back_to_list(logged_in_client):
    response = logged_in_client.get("/records/edit/does-not-exist")

    assert response.url.path == "/records"
    assert "Erro ao carregar aluno" in response.text


def test_edit_submit_for_unknown_record(logged_in_client):
    response = logged_in_client.post("/records/edit/does-not-exist", data=ANA_FORM)

    assert response.status_code == 404
    assert "Aluno não encontrado" in response.text


# ── Delete ───────────────────────────────────────────────────

def test_delete_asks_for_confirmation_first(logged_in_client, db):
    create_student(logged_in_client)
    student = StudentStore(db).list()[0]

    response = logged_in_client.get("/records", params={"delete": student.id})

    assert "Confirmar Exclusão" in response.text
    assert f'action="/records/{student.id}/delete"' in response.text
    assert StudentStore(db).count() == 1


def test_delete_confirmed(logged_in_client, db):
    create_student(logged_in_client)
    student = StudentStore(db).list()[0]

    response = logged_in_client.post(f"/records/{student.id}/delete")

    assert response.url.path == "/records"
    assert "Aluno excluído com sucesso!" in response.text
    assert "Nenhum aluno cadastrado" in response.text

    response = logged_in_client.post(f"/records/{student.id}/delete")

    assert "Aluno não encontrado" in response.text


# ── Misc ─────────────────────────────────────────────────────

def test_unknown_path_shows_not_found_page(client):
    response = client.get("/no/such/page")

    assert response.status_code == 404
    assert "Página não encontrada" in response.text


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"]


def test_unknown_notice_code_is_ignored(logged_in_client):
    response = logged_in_client.get("/records", params={"notice": "<script>alert(1)</script>"})

    assert response.status_code == 200
    assert "<script>" not in response.text


def test_login_page_without_session(client):
    response = client.get("/login")

    assert response.status_code == 200
    assert "Criar conta" in response.text
    assert TEST_USER_PASSWORD not in response.text
