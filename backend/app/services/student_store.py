"""
Student Store - the client every screen uses to talk to the alunos table.

Each method is a single round trip against the database session and maps
what comes back onto the registry's error taxonomy:
- unique constraint violations become DuplicateRegistrationNumber,
  DuplicateEmail or DuplicateOther
- a missing row becomes NotFound
- any other database failure becomes TransportError

Nothing is cached here; screens hold whatever list they last loaded.
"""

import time
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.errors import (
    DuplicateRecord, DuplicateRegistrationNumber, DuplicateEmail,
    DuplicateOther, NotFound, TransportError,
)
from app.models.student import Student
from app.services.validation import StudentDraft
from app.logging_config import get_logger, log_with_context

logger = get_logger("store")

# Constraint names as created by the models and the initial migration
CONSTRAINT_ERRORS = {
    "alunos_matricula_key": DuplicateRegistrationNumber,
    "alunos_email_key": DuplicateEmail,
}


def translate_integrity_error(exc: IntegrityError) -> DuplicateRecord:
    """
    Work out which unique field an IntegrityError refers to.

    PostgreSQL (psycopg2) exposes the violated constraint name through
    ``diag.constraint_name``; when it does, that is used. Otherwise the
    driver message is searched for the column name, which covers SQLite
    ("UNIQUE constraint failed: alunos.matricula") and any driver that only
    reports text.

    Args:
        exc: The IntegrityError raised by SQLAlchemy

    Returns:
        The DuplicateRecord subclass instance to raise
    """
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name in CONSTRAINT_ERRORS:
        return CONSTRAINT_ERRORS[constraint_name]()

    message = str(exc.orig).lower()
    if "matricula" in message:
        return DuplicateRegistrationNumber()
    if "email" in message:
        return DuplicateEmail()
    return DuplicateOther()


def _is_unique_violation(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    if getattr(diag, "constraint_name", None) in CONSTRAINT_ERRORS:
        return True
    return "unique" in str(exc.orig).lower()


class StudentStore:
    """
    Façade over the alunos table.

    Args:
        db: SQLAlchemy session for the current request
    """

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Student]:
        """Return every record, newest first."""
        start_time = time.time()
        try:
            students = self.db.query(Student).order_by(Student.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise self._transport_error("list", e)

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "DEBUG",
            "Listed {} students".format(len(students)),
            extra_data={"duration_ms": round(duration_ms, 2)})
        return students

    def get_by_id(self, record_id: str) -> Student:
        """Return one record or raise NotFound."""
        try:
            student = self.db.get(Student, record_id)
        except SQLAlchemyError as e:
            raise self._transport_error("get", e, record_id)

        if student is None:
            raise NotFound(record_id)
        return student

    def create(self, draft: StudentDraft, owner_id: str) -> Student:
        """
        Insert a new record owned by ``owner_id``.

        ``id`` and ``created_at`` are assigned by the model defaults.
        """
        student = Student(
            full_name=draft.full_name,
            registration_number=draft.registration_number,
            email=draft.email,
            course=draft.course,
            owner_id=owner_id,
        )
        self.db.add(student)
        self._commit("create", context={"user_id": owner_id})
        try:
            self.db.refresh(student)
        except SQLAlchemyError as e:
            raise self._transport_error("create", e)

        log_with_context(logger, "INFO",
            "Student created: {}".format(student.registration_number),
            context={"record_id": student.id, "user_id": owner_id})
        return student

    def update(self, record_id: str, draft: StudentDraft) -> None:
        """Replace the editable fields of an existing record."""
        student = self.get_by_id(record_id)

        student.full_name = draft.full_name
        student.registration_number = draft.registration_number
        student.email = draft.email
        student.course = draft.course
        self._commit("update", context={"record_id": record_id})

        log_with_context(logger, "INFO",
            "Student updated: {}".format(student.registration_number),
            context={"record_id": record_id})

    def delete_by_id(self, record_id: str) -> None:
        """
        Delete a record.

        Deleting a record that is already gone raises NotFound, the same
        as get_by_id and update do.
        """
        student = self.get_by_id(record_id)
        self.db.delete(student)
        self._commit("delete", context={"record_id": record_id})

        log_with_context(logger, "INFO", "Student deleted",
            context={"record_id": record_id})

    def count(self) -> int:
        try:
            return self.db.query(Student).count()
        except SQLAlchemyError as e:
            raise self._transport_error("count", e)

    # ── helpers ──────────────────────────────────────────────

    def _commit(self, operation: str, context: dict = None):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not _is_unique_violation(e):
                raise self._transport_error(operation, e)
            error = translate_integrity_error(e)
            log_with_context(logger, "WARNING",
                "Unique constraint violated on {}: {}".format(operation, error.code),
                context=context,
                extra_data={"error": str(e.orig)})
            raise error
        except StaleDataError:
            # Row deleted by someone else between load and flush
            self.db.rollback()
            record_id = (context or {}).get("record_id")
            log_with_context(logger, "WARNING",
                "Student vanished during {}".format(operation), context=context)
            raise NotFound(record_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._transport_error(operation, e)

    def _transport_error(self, operation: str, exc: Exception,
                         record_id: str = None) -> TransportError:
        log_with_context(logger, "ERROR",
            "Store {} failed: {}".format(operation, exc),
            context={"record_id": record_id} if record_id else None,
            extra_data={"error_type": type(exc).__name__})
        return TransportError()
