# tests/conftest.py
from __future__ import annotations

import os
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from typing import Any

import jwt
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

TEST_JWT_SECRET = "test-secret-used-only-by-the-test-suite-0123456789"

os.environ["SUPABASE_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["PAGE_CACHE_TTL_SECONDS"] = "0"

from threads_app.cache import page_cache
from threads_app.config import get_settings
from threads_app.database import init_models
from threads_app.main import app as fastapi_app
from threads_app.models import Community, Thread, User

get_settings.cache_clear()


def make_token(sub: str, email: str | None = None, expires_in: int = 3600, secret: str = TEST_JWT_SECRET) -> str:
    """HS256 token shaped like the ones Supabase issues."""
    now = int(time.time())
    payload: dict[str, Any] = {"sub": sub, "iat": now, "exp": now + expires_in, "role": "authenticated"}
    if email:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(sub: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture()
async def db() -> AsyncIterator[Any]:
    """Fresh in-memory database per test."""
    database = AsyncMongoMockClient()["threads_test"]
    await init_models(database)
    page_cache.clear()
    yield database
    page_cache.clear()


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
async def client(app: FastAPI, db: Any) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db: Any) -> Callable[..., Awaitable[User]]:
    async def _make(
        external_id: str,
        username: str | None = None,
        name: str | None = None,
        onboarded: bool = True,
        created_at: datetime | None = None,
    ) -> User:
        user = User(
            external_id=external_id,
            username=username or external_id.lower(),
            name=name or external_id.title(),
            image=f"https://img.example.com/{external_id}.png",
            bio="Hello there",
            onboarded=onboarded,
        )
        if created_at is not None:
            user.created_at = created_at
        await user.insert()
        return user

    return _make


@pytest.fixture()
async def alice(make_user) -> User:
    return await make_user("user_alice", username="alice", name="Alice Liddell")


@pytest.fixture()
async def bob(make_user) -> User:
    return await make_user("user_bob", username="bob", name="Bob Builder")


@pytest.fixture()
async def community(alice: User) -> Community:
    """A community created by alice, with alice as its only member."""
    community = Community(
        external_id="org_py",
        username="pythonistas",
        name="Pythonistas",
        bio="All things Python",
        created_by=alice.id,
        members=[alice.id],
    )
    await community.insert()
    alice.communities.append(community.id)
    await alice.save_changes()
    return community


@pytest.fixture()
def make_thread(db: Any) -> Callable[..., Awaitable[Thread]]:
    """Insert a thread and link it the way the actions do."""

    async def _make(
        author: User,
        text: str = "Hello world",
        parent: Thread | None = None,
        community: Community | None = None,
        created_at: datetime | None = None,
    ) -> Thread:
        thread = Thread(
            text=text,
            author=author.id,
            community=community.id if community else None,
            parent_id=str(parent.id) if parent else None,
        )
        if created_at is not None:
            thread.created_at = created_at
        await thread.insert()
        if parent is not None:
            parent.children.append(thread.id)
            await parent.save_changes()
        else:
            await User.find_one(User.id == author.id).update({"$push": {"threads": thread.id}})
            if community is not None:
                await Community.find_one(Community.id == community.id).update({"$push": {"threads": thread.id}})
        return thread

    return _make
