"""
Shared pieces for the screen controllers.

- ScreenResult: what a controller hands back to the route (a template to
  render or a location to redirect to)
- NOTICES: the transient notifications a redirect can carry
- RecordForm: the per-form submit state machine
- ScreenController: session gate and unmount guard common to all screens
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from app.errors import RegistryError
from app.services.session_context import SessionContext
from app.services.validation import StudentDraft
from app.logging_config import get_logger, log_with_context

logger = get_logger("views")

LANDING_PATH = "/"
LOGIN_PATH = "/login"
RECORDS_PATH = "/records"

# code -> (level, message)
NOTICES = {
    "created": ("success", "Aluno cadastrado com sucesso!"),
    "updated": ("success", "Aluno atualizado com sucesso!"),
    "deleted": ("success", "Aluno excluído com sucesso!"),
    "not_found": ("error", "Aluno não encontrado"),
    "load_failed": ("error", "Erro ao carregar aluno"),
    "delete_failed": ("error", "Erro ao excluir aluno"),
    "signed_up": ("success", "Conta criada! Entre para continuar"),
    "signed_out": ("success", "Você saiu do sistema"),
}


def resolve_notice(code: Optional[str]) -> Optional[dict]:
    """Turn a notice code from the query string into something a template can show."""
    if not code or code not in NOTICES:
        return None
    level, message = NOTICES[code]
    return {"level": level, "message": message}


@dataclass
class ScreenResult:
    """Outcome of a controller action."""
    template: Optional[str] = None
    context: dict = field(default_factory=dict)
    status_code: int = 200
    redirect_to: Optional[str] = None
    session_token: Optional[str] = None
    clear_session: bool = False

    @classmethod
    def render(cls, template: str, context: dict, status_code: int = 200) -> "ScreenResult":
        return cls(template=template, context=context, status_code=status_code)

    @classmethod
    def redirect(cls, path: str, notice: str = None, **kwargs) -> "ScreenResult":
        if notice:
            path = "{}?{}".format(path, urlencode({"notice": notice}))
        return cls(redirect_to=path, **kwargs)

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None


class FormState(str, Enum):
    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"


class SubmissionInProgress(RegistryError):
    code = "SUBMISSION_IN_PROGRESS"
    message = "Aguarde, o formulário já está sendo enviado"


class RecordForm:
    """
    Submit state machine for the create and edit forms.

    IDLE -> SUBMITTING -> SUCCESS, or back to IDLE with ``error`` set when
    the submission fails. Inputs and the submit button are disabled while
    SUBMITTING and a second submit is refused.
    """

    def __init__(self, draft: StudentDraft = None):
        self.draft = draft or StudentDraft()
        self.state = FormState.IDLE
        self.error: Optional[RegistryError] = None

    @property
    def disabled(self) -> bool:
        return self.state == FormState.SUBMITTING

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def error_field(self) -> Optional[str]:
        return getattr(self.error, "field", None)

    def begin_submit(self):
        if self.state == FormState.SUBMITTING:
            raise SubmissionInProgress()
        self.state = FormState.SUBMITTING
        self.error = None

    def succeed(self):
        self.state = FormState.SUCCESS

    def fail(self, error: RegistryError):
        self.error = error
        self.state = FormState.IDLE


class ScreenController:
    """
    Base for every screen.

    Args:
        session: Resolved session context for the request
    """

    def __init__(self, session: SessionContext):
        self.session = session
        self.mounted = True

    def unmount(self):
        """
        Stop applying results; anything still in flight is discarded.

        Route handlers run synchronously and never unmount a controller
        mid-request, so this is only reached by callers that drive a
        controller directly (the controller tests do).
        """
        self.mounted = False

    def gate(self) -> Optional[ScreenResult]:
        """
        Redirect to the landing page when nobody is signed in.

        Returns None when the screen may render.
        """
        if self.session.is_loading:
            raise RuntimeError("Session context must be resolved before rendering")
        if not self.session.is_authenticated:
            return ScreenResult.redirect(LANDING_PATH)
        return None

    def deliver(self, result: ScreenResult) -> Optional[ScreenResult]:
        if not self.mounted:
            log_with_context(logger, "DEBUG",
                "Discarding result for unmounted {}".format(type(self).__name__))
            return None
        return result

    def base_context(self) -> dict:
        return {"user": self.session.current_user}
