"""
Validation Service - checks a student draft before it reaches the store.

Rules, checked fail-fast in field order (full name, registration number,
email, course), and within a field in the order required → too long →
syntax:
1. Every field is trimmed first
2. A field that is empty after trimming raises RequiredField
3. A field longer than its column raises TooLong
4. An email that does not look like an email raises InvalidEmail

Only the first violation is reported. The function is pure: it never
touches the database, so a failing draft never costs a round trip.
"""

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from app.errors import RequiredField, TooLong, InvalidEmail
from app.models.student import (
    FULL_NAME_MAX_LENGTH, REGISTRATION_NUMBER_MAX_LENGTH,
    EMAIL_MAX_LENGTH, COURSE_MAX_LENGTH,
)


class StudentDraft(BaseModel):
    """Unsaved field values for a student record."""
    full_name: str = ""
    registration_number: str = ""
    email: str = ""
    course: str = ""


# (attribute, label used in messages, max length, required message)
FIELD_RULES = [
    ("full_name", "Nome completo", FULL_NAME_MAX_LENGTH, "Nome completo é obrigatório"),
    ("registration_number", "Matrícula", REGISTRATION_NUMBER_MAX_LENGTH, "Matrícula é obrigatória"),
    ("email", "Email", EMAIL_MAX_LENGTH, "Email é obrigatório"),
    ("course", "Curso", COURSE_MAX_LENGTH, "Curso é obrigatório"),
]


def is_valid_email(value: str) -> bool:
    """
    Return True when ``value`` is a syntactically valid address.

    Same checks pydantic's EmailStr runs, without the DNS lookup and
    without accepting the "Name <address>" form.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_draft(draft: StudentDraft) -> StudentDraft:
    """
    Validate a draft and return its trimmed copy.

    Args:
        draft: The raw values submitted by the user

    Returns:
        A new StudentDraft with every field trimmed

    Raises:
        RequiredField, TooLong or InvalidEmail for the first violated rule
    """
    trimmed = {}
    for field, label, max_length, required_message in FIELD_RULES:
        value = (getattr(draft, field) or "").strip()

        if not value:
            raise RequiredField(field, required_message)

        if len(value) > max_length:
            raise TooLong(
                field,
                f"{label} deve ter no máximo {max_length} caracteres",
                max_length,
            )

        if field == "email" and not is_valid_email(value):
            raise InvalidEmail(field, "Email inválido")

        trimmed[field] = value

    return StudentDraft(**trimmed)
