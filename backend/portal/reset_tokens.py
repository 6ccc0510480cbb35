"""Issuing and redeeming single-use password reset tokens."""
from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable
from urllib.parse import urlencode

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from .errors import InvalidOrExpiredToken
from .models import PasswordReset, User
from .models.base import utcnow
from .passwords import hash_password
from .users import get_user_by_email, update_password

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def build_reset_url(frontend_origin: str, token: str) -> str:
    """Link embedded in the reset email."""

    return f"{frontend_origin.rstrip('/')}/reset-password?{urlencode({'token': token})}"


class ResetTokenIssuer:
    """Create and redeem password reset capabilities.

    ``issue`` persists a record whether or not the email belongs to an account,
    so callers cannot use it to probe for registered addresses. ``redeem``
    succeeds at most once per token.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._ttl = ttl
        self._clock = clock

    async def issue(self, email: str) -> str:
        token = generate_reset_token()
        self._session.add(
            PasswordReset(
                email=email,
                token_hash=hash_reset_token(token),
                expires_at=self._clock() + self._ttl,
                used=False,
            )
        )
        await self._session.commit()
        return token

    async def redeem(self, token: str, new_password: str) -> User:
        """Set ``new_password`` on the account the token was issued for.

        Raises :class:`InvalidOrExpiredToken` when the token is unknown, used,
        expired, or no longer maps to an account.
        """

        result = await self._session.execute(
            select(PasswordReset).where(PasswordReset.token_hash == hash_reset_token(token))
        )
        record = result.scalar_one_or_none()
        if record is None or record.used or record.expires_at <= self._clock():
            raise InvalidOrExpiredToken()

        user = await get_user_by_email(self._session, record.email)
        if user is None:
            raise InvalidOrExpiredToken()

        password_hash = await run_in_threadpool(hash_password, new_password)

        # Conditional update: of two concurrent redemptions only one flips the flag.
        claimed = await self._session.execute(
            update(PasswordReset)
            .where(PasswordReset.id == record.id, PasswordReset.used.is_(False))
            .values(used=True)
        )
        if claimed.rowcount != 1:
            await self._session.rollback()
            raise InvalidOrExpiredToken()

        await update_password(self._session, user.id, password_hash)
        await self._session.commit()
        await self._session.refresh(user)
        logger.info("Password reset completed for user %s", user.id)
        return user


__all__ = ["ResetTokenIssuer", "build_reset_url", "generate_reset_token", "hash_reset_token"]
