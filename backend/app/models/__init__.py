from app.models.student import Student
from app.models.user import User
from app.models.auth_session import AuthSession

__all__ = ["Student", "User", "AuthSession"]
