"""Database-backed session handling for logged-in users."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import UserSession
from .models.base import utcnow


class SessionStore:
    """Generate, resolve, and revoke login sessions.

    Session ids are opaque random strings handed to the browser as a cookie;
    everything else lives in the ``user_sessions`` table. Expiry is fixed at
    creation time.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._clock = clock

    async def create(self, user_id: str, ttl: timedelta) -> str:
        session_id = secrets.token_urlsafe(32)
        self._session.add(
            UserSession(id=session_id, user_id=user_id, expires_at=self._clock() + ttl)
        )
        await self._session.commit()
        return session_id

    async def resolve(self, session_id: Optional[str]) -> Optional[str]:
        """Return the user id behind ``session_id`` or ``None`` if it is unknown or expired."""

        if not session_id:
            return None
        record = await self._session.get(UserSession, session_id)
        if record is None:
            return None
        if record.expires_at <= self._clock():
            await self._session.delete(record)
            await self._session.commit()
            return None
        return record.user_id

    async def destroy(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        await self._session.execute(delete(UserSession).where(UserSession.id == session_id))
        await self._session.commit()

    async def destroy_for_user(self, user_id: str) -> None:
        await self._session.execute(delete(UserSession).where(UserSession.user_id == user_id))
        await self._session.commit()


__all__ = ["SessionStore"]
