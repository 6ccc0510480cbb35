"""Append-only audit of login attempts."""
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import LoginAttempt


async def record_login_attempt(
    session: AsyncSession,
    *,
    identifier: str,
    ip_address: str,
    successful: bool,
) -> LoginAttempt:
    """Persist one attempt. Rows are never updated or deleted."""

    attempt = LoginAttempt(identifier=identifier, ip_address=ip_address, successful=successful)
    session.add(attempt)
    await session.commit()
    return attempt


async def recent_login_attempts(session: AsyncSession, limit: int = 50) -> Sequence[LoginAttempt]:
    result = await session.execute(
        select(LoginAttempt).order_by(LoginAttempt.attempted_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
