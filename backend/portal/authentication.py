"""Login, registration and logout orchestration.

The login decision itself is :func:`evaluate_login`, a pure function of the
resolved account, the requested role and the password check. Everything with
side effects (audit row, last-login stamp, session) is sequenced around it in
:class:`AuthenticationFlow`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from .errors import (
    AccountDeactivated,
    AuthenticationError,
    DuplicateEmail,
    DuplicateResourceError,
    DuplicateUsername,
    PortalError,
)
from .login_attempts import record_login_attempt
from .models import Role, User
from .passwords import DUMMY_PASSWORD_HASH, hash_password, verify_password
from .recaptcha import CaptchaVerifier
from .schemas import UserCreate, UserLogin
from .sessions import SessionStore
from .users import (
    create_user,
    get_user_by_email,
    get_user_by_identifier,
    get_user_by_username,
    touch_last_login,
)

logger = logging.getLogger(__name__)

RECAPTCHA_FAILED = "reCAPTCHA verification failed"


@dataclass(frozen=True)
class LoginContext:
    """Request facts the flow needs beyond the submitted credentials."""

    ip_address: str
    session_ttl: timedelta
    remember_me_ttl: timedelta


@dataclass(frozen=True)
class Authenticated:
    user: User
    session_id: str
    session_ttl: timedelta


def evaluate_login(
    user: Optional[User], requested_role: Role, password_valid: bool
) -> Optional[PortalError]:
    """Decide a login attempt; ``None`` means the credentials are accepted.

    Unknown account, wrong role and wrong password share one generic error.
    A deactivated account is reported as such.
    """
    if user is None or user.role != requested_role:
        return AuthenticationError()
    if not user.is_active:
        return AccountDeactivated()
    if not password_valid:
        return AuthenticationError()
    return None


class AuthenticationFlow:
    def __init__(
        self,
        session: AsyncSession,
        sessions: SessionStore,
        captcha: CaptchaVerifier,
    ) -> None:
        self._session = session
        self._sessions = sessions
        self._captcha = captcha

    async def login(self, credentials: UserLogin, context: LoginContext) -> Authenticated:
        # Cheapest check first: no database work for bots.
        if not await self._captcha.verify(credentials.recaptcha_token, context.ip_address):
            logger.info("Login rejected for %s from %s: reCAPTCHA", credentials.user_id, context.ip_address)
            raise AuthenticationError(RECAPTCHA_FAILED)

        user = await get_user_by_identifier(self._session, credentials.user_id)
        stored_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
        password_valid = await run_in_threadpool(verify_password, credentials.password, stored_hash)
        if user is None:
            password_valid = False

        error = evaluate_login(user, credentials.role, password_valid)

        await record_login_attempt(
            self._session,
            identifier=credentials.user_id,
            ip_address=context.ip_address,
            successful=error is None,
        )
        if error is not None:
            logger.info(
                "Login rejected for %s from %s: %s",
                credentials.user_id,
                context.ip_address,
                error.detail,
            )
            raise error

        await touch_last_login(self._session, user)
        ttl = context.remember_me_ttl if credentials.remember_me else context.session_ttl
        session_id = await self._sessions.create(user.id, ttl)
        logger.info("User %s logged in as %s", user.id, user.role.value)
        return Authenticated(user=user, session_id=session_id, session_ttl=ttl)

    async def register(self, payload: UserCreate, session_ttl: timedelta) -> Authenticated:
        if await get_user_by_username(self._session, payload.username) is not None:
            raise DuplicateUsername()
        if await get_user_by_email(self._session, payload.email) is not None:
            raise DuplicateEmail()

        password_hash = await run_in_threadpool(hash_password, payload.password)
        try:
            user = await create_user(
                self._session,
                username=payload.username,
                email=payload.email,
                password_hash=password_hash,
                role=payload.role,
                first_name=payload.first_name,
                last_name=payload.last_name,
            )
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateResourceError("Username or email already exists") from exc
        session_id = await self._sessions.create(user.id, session_ttl)
        logger.info("Registered user %s (%s)", user.id, user.role.value)
        return Authenticated(user=user, session_id=session_id, session_ttl=session_ttl)

    async def logout(self, session_id: Optional[str]) -> None:
        await self._sessions.destroy(session_id)


__all__ = ["Authenticated", "AuthenticationFlow", "LoginContext", "evaluate_login"]
