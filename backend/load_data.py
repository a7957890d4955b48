"""
Data Loader Script - Seeds student records from a JSON file.

Reads a list of students and inserts each one through the student store,
so the same validation and duplicate handling as the web forms applies.
Records are owned by an existing account given by email.

Accepted keys per student: full_name / nome_completo,
registration_number / matricula, email, course / curso.

Usage:
    python load_data.py owner@example.com                    # Uses ./students.json
    python load_data.py owner@example.com data/alunos.json   # Custom file
"""

import json
import os
import sys

from app.database import SessionLocal, DATABASE_URL, create_tables
from app.errors import FieldError, DuplicateRecord, StoreError
from app.logging_config import setup_logging
from app.services.auth import AuthService
from app.services.student_store import StudentStore
from app.services.validation import StudentDraft, validate_draft
from app import models  # noqa: F401


def to_draft(raw: dict) -> StudentDraft:
    """Accept both the English and the table's own column names."""
    return StudentDraft(
        full_name=raw.get("full_name", raw.get("nome_completo", "")) or "",
        registration_number=str(raw.get("registration_number", raw.get("matricula", "")) or ""),
        email=raw.get("email", "") or "",
        course=raw.get("course", raw.get("curso", "")) or "",
    )


def load(db, owner_email: str, raw_students: list) -> dict:
    """
    Insert every student and report what happened to each one.

    Returns:
        Summary dict with counts and per-record details
    """
    owner = AuthService(db).get_user_by_email(owner_email)
    if owner is None:
        raise SystemExit(f"Error: no account for {owner_email}; sign up first")

    store = StudentStore(db)
    summary = {"total_received": len(raw_students), "inserted": 0,
               "duplicates": 0, "invalid": 0, "errors": 0, "details": []}

    for raw in raw_students:
        draft = to_draft(raw)
        label = draft.registration_number or "?"
        try:
            valid = validate_draft(draft)
            store.create(valid, owner_id=owner.id)
        except FieldError as e:
            summary["invalid"] += 1
            summary["details"].append({"matricula": label, "status": "INVALID", "reason": e.message})
        except DuplicateRecord as e:
            summary["duplicates"] += 1
            summary["details"].append({"matricula": label, "status": "DUPLICATE", "reason": e.message})
        except StoreError as e:
            summary["errors"] += 1
            summary["details"].append({"matricula": label, "status": "ERROR", "reason": e.message})
        else:
            summary["inserted"] += 1
            summary["details"].append({"matricula": label, "status": "INSERTED"})

    summary["total_in_store"] = store.count()
    return summary


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    owner_email = sys.argv[1]
    data_file = sys.argv[2] if len(sys.argv) > 2 else "students.json"
    if not os.path.exists(data_file):
        print(f"Error: Could not find {data_file}")
        sys.exit(1)

    setup_logging()
    if DATABASE_URL.startswith("sqlite"):
        create_tables()

    print(f"Loading data from: {data_file}")
    with open(data_file, "r", encoding="utf-8") as f:
        raw_students = json.load(f)

    db = SessionLocal()
    try:
        result = load(db, owner_email, raw_students)
    finally:
        db.close()

    print("=" * 60)
    print("SEED SUMMARY")
    print("=" * 60)
    print(f"  Total Received:  {result['total_received']}")
    print(f"  Inserted:        {result['inserted']}")
    print(f"  Duplicates:      {result['duplicates']}")
    print(f"  Invalid:         {result['invalid']}")
    print(f"  Errors:          {result['errors']}")
    print(f"  Total in store:  {result['total_in_store']}")
    print("=" * 60)
    print()

    for d in result["details"]:
        status = d["status"]
        icon = "✅" if status == "INSERTED" else ("🔁" if status == "DUPLICATE" else "❌")
        extra = f" ({d['reason']})" if "reason" in d else ""
        print(f"  {icon} {d['matricula']}: {status}{extra}")


if __name__ == "__main__":
    main()
