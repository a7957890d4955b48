import pytest

from app.services.student_store import StudentStore
from load_data import load, to_draft

from conftest import TEST_USER_EMAIL


def test_to_draft_accepts_column_names():
    draft = to_draft({"nome_completo": "Ana Silva", "matricula": 2024001,
                      "email": "ana@example.com", "curso": "Engenharia"})

    assert draft.full_name == "Ana Silva"
    assert draft.registration_number == "2024001"
    assert draft.course == "Engenharia"


def test_load_reports_each_record(db, owner):
    raw = [
        {"full_name": "Ana Silva", "registration_number": "2024001",
         "email": "ana@example.com", "course": "Engenharia"},
        {"full_name": "Ana Outra", "registration_number": "2024001",
         "email": "outra@example.com", "course": "Direito"},
        {"full_name": "Sem Email", "registration_number": "2024003",
         "email": "", "course": "Letras"},
    ]

    summary = load(db, TEST_USER_EMAIL, raw)

    assert summary["inserted"] == 1
    assert summary["duplicates"] == 1
    assert summary["invalid"] == 1
    assert [d["status"] for d in summary["details"]] == ["INSERTED", "DUPLICATE", "INVALID"]
    assert summary["total_in_store"] == 1
    assert StudentStore(db).list()[0].owner_id == owner.id


def test_load_requires_existing_owner(db):
    with pytest.raises(SystemExit):
        load(db, "ninguem@example.com", [])
