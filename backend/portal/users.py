"""Credential store queries for user accounts."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Role, User
from .models.base import utcnow


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_identifier(session: AsyncSession, identifier: str) -> User | None:
    """Resolve a login identifier: an email when it contains ``@``, else a username."""

    if "@" in identifier:
        return await get_user_by_email(session, identifier)
    return await get_user_by_username(session, identifier)


async def create_user(
    session: AsyncSession,
    *,
    username: str,
    email: str,
    password_hash: str,
    role: Role,
    first_name: str,
    last_name: str,
) -> User:
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        role=role,
        first_name=first_name,
        last_name=last_name,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def touch_last_login(session: AsyncSession, user: User) -> None:
    user.last_login = utcnow()
    await session.commit()


async def update_password(session: AsyncSession, user_id: str, password_hash: str) -> None:
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(password_hash=password_hash, updated_at=utcnow())
    )


async def set_active(session: AsyncSession, username: str, active: bool) -> User | None:
    """Flip the active flag for ``username``; returns ``None`` when unknown."""

    user = await get_user_by_username(session, username)
    if user is None:
        return None
    user.is_active = active
    await session.commit()
    return user
