"""SQLAlchemy models exposed by the backend."""
from .base import Base
from .login_attempt import LoginAttempt
from .password_reset import PasswordReset
from .session import UserSession
from .user import Role, User

__all__ = [
    "Base",
    "LoginAttempt",
    "PasswordReset",
    "Role",
    "User",
    "UserSession",
]
