"""
Error taxonomy for the student registry.

Every error carries a user-facing ``message`` (shown as a notification on
the current screen) and a machine-readable ``code``. Nothing here is fatal
to the application: controllers catch these, log them and let the user
retry.
"""


class RegistryError(Exception):
    """Base class for all registry errors."""
    code = "REGISTRY_ERROR"
    message = "Erro inesperado"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Validation (local, never reach the store) ─────────────────

class FieldError(RegistryError):
    """A draft field violated one of its constraints."""
    code = "FIELD_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class RequiredField(FieldError):
    code = "REQUIRED_FIELD"


class TooLong(FieldError):
    code = "TOO_LONG"

    def __init__(self, field: str, message: str, max_length: int):
        self.max_length = max_length
        super().__init__(field, message)


class InvalidEmail(FieldError):
    code = "INVALID_EMAIL"


# ── Store (reported by the database) ──────────────────────────

class StoreError(RegistryError):
    """A store round trip failed."""
    code = "STORE_ERROR"


class DuplicateRecord(StoreError):
    """A unique constraint on the alunos table was violated."""
    code = "DUPLICATE"
    message = "Dados duplicados"
    field = None


class DuplicateRegistrationNumber(DuplicateRecord):
    code = "DUPLICATE_REGISTRATION_NUMBER"
    message = "Matrícula já cadastrada"
    field = "registration_number"


class DuplicateEmail(DuplicateRecord):
    code = "DUPLICATE_EMAIL"
    message = "Email já cadastrado"
    field = "email"


class DuplicateOther(DuplicateRecord):
    code = "DUPLICATE_OTHER"


class NotFound(StoreError):
    code = "NOT_FOUND"
    message = "Aluno não encontrado"

    def __init__(self, record_id: str = None, message: str = None):
        self.record_id = record_id
        super().__init__(message)


class TransportError(StoreError):
    """The database could not be reached or failed to answer."""
    code = "TRANSPORT_ERROR"
    message = "Serviço indisponível"


# ── Auth ──────────────────────────────────────────────────────

class AuthError(RegistryError):
    code = "AUTH_ERROR"


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    message = "Email ou senha inválidos"


class EmailAlreadyRegistered(AuthError):
    code = "EMAIL_ALREADY_REGISTERED"
    message = "Email já registrado"


class WeakPassword(AuthError):
    code = "WEAK_PASSWORD"
