"""Reusable FastAPI dependencies."""
from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .database import get_session
from .errors import AuthorizationError, Unauthenticated
from .mailer import Mailer
from .models import Role, User
from .recaptcha import CaptchaVerifier
from .sessions import SessionStore
from .users import get_user


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an AsyncSession."""
    async for session in get_session(request):
        yield session


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


def get_captcha_verifier(request: Request) -> CaptchaVerifier:
    return request.app.state.captcha


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_session_store(session: AsyncSession = Depends(get_db_session)) -> SessionStore:
    return SessionStore(session)


def get_session_id(request: Request) -> str | None:
    settings: Settings = request.app.state.settings
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Return the user behind the session cookie.

    Missing, expired or revoked sessions, removed accounts and deactivated
    accounts are all unauthenticated.
    """

    user_id = await store.resolve(session_id)
    if user_id is None:
        raise Unauthenticated()

    user = await get_user(session, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated()
    return user


def require_role(role: Role) -> Callable[..., Awaitable[User]]:
    """Gate an endpoint to authenticated users holding ``role``."""

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise AuthorizationError(f"{role.value.capitalize()} role required")
        return current_user

    return dependency
