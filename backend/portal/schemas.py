"""Pydantic schemas used across the backend API.

Field names are camelCase on the wire and snake_case in Python.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel

from .models import Role

PASSWORD_MIN_LENGTH = 8


def _check_password_length(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return password


def _require(value: str, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value


def is_company_email(email: str, domain: str) -> bool:
    """Domain membership is checked by callers holding the app's ``Settings``."""

    return email.lower().endswith(domain.lower())


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(CamelModel):
    """Payload for user registration."""

    username: str
    email: EmailStr
    password: str
    role: Role
    first_name: str
    last_name: str

    @field_validator("username")
    @classmethod
    def _username(cls, value: str) -> str:
        return _require(value.strip(), "Username is required")

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return _check_password_length(value)

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, value: str) -> str:
        return _require(value.strip(), "First name is required")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, value: str) -> str:
        return _require(value.strip(), "Last name is required")


class UserLogin(CamelModel):
    """Credentials supplied during login."""

    user_id: str
    password: str
    role: Role
    remember_me: bool = False
    recaptcha_token: str

    @field_validator("user_id")
    @classmethod
    def _user_id(cls, value: str) -> str:
        return _require(value, "User ID or email is required")

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return _require(value, "Password is required")

    @field_validator("recaptcha_token")
    @classmethod
    def _recaptcha_token(cls, value: str) -> str:
        return _require(value, "reCAPTCHA verification is required")


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str

    @field_validator("token")
    @classmethod
    def _token(cls, value: str) -> str:
        return _require(value, "Reset token is required")

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, value: str) -> str:
        return _check_password_length(value)


class UserRead(CamelModel):
    """Public representation of a user; never carries the password hash."""

    id: str
    username: str
    email: str
    role: Role
    first_name: str
    last_name: str
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str


class ActivityItem(BaseModel):
    id: int
    action: str
    timestamp: datetime


class UpdateItem(BaseModel):
    id: int
    title: str
    date: datetime


class ManagementDashboard(CamelModel):
    total_employees: int
    active_projects: int
    pending_approvals: int
    recent_activities: list[ActivityItem]


class EmployeeDashboard(CamelModel):
    assigned_tasks: int
    completed_tasks: int
    upcoming_deadlines: int
    recent_updates: list[UpdateItem]


class TraineeDashboard(CamelModel):
    training_progress: int
    completed_modules: int
    total_modules: int
    next_assignment: str
    mentor: str
    upcoming_training: list[UpdateItem]
