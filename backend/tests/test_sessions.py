"""Tests for the database-backed session store."""
from datetime import datetime, timedelta

import pytest

from portal.models import Role
from portal.passwords import hash_password
from portal.sessions import SessionStore
from portal.users import create_user


class ManualClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now


async def _user_id(db_session) -> str:
    user = await create_user(
        db_session,
        username="trainee1",
        email="trainee1@eil.com",
        password_hash=hash_password("secret123"),
        role=Role.TRAINEE,
        first_name="T",
        last_name="One",
    )
    return user.id


@pytest.mark.asyncio
async def test_create_and_resolve(db_session) -> None:
    user_id = await _user_id(db_session)
    store = SessionStore(db_session)

    session_id = await store.create(user_id, timedelta(hours=24))

    assert len(session_id) >= 40
    assert await store.resolve(session_id) == user_id
    assert await store.resolve("unknown") is None
    assert await store.resolve(None) is None


@pytest.mark.asyncio
async def test_expired_session_is_dropped(db_session) -> None:
    user_id = await _user_id(db_session)
    clock = ManualClock()
    store = SessionStore(db_session, clock=clock)
    session_id = await store.create(user_id, timedelta(hours=24))

    clock.now += timedelta(hours=23, minutes=59)
    assert await store.resolve(session_id) == user_id

    clock.now += timedelta(minutes=1)
    assert await store.resolve(session_id) is None

    clock.now -= timedelta(hours=1)
    assert await store.resolve(session_id) is None


@pytest.mark.asyncio
async def test_destroy_and_destroy_for_user(db_session) -> None:
    user_id = await _user_id(db_session)
    store = SessionStore(db_session)
    first = await store.create(user_id, timedelta(hours=1))
    second = await store.create(user_id, timedelta(hours=1))

    await store.destroy(first)
    assert await store.resolve(first) is None
    assert await store.resolve(second) == user_id

    await store.destroy_for_user(user_id)
    assert await store.resolve(second) is None
