"""Shared fixtures: an in-memory SQLite store, fake Redis sessions and a Quart test client."""

import asyncio
from contextlib import asynccontextmanager

import pytest

from helpers import (
    OTHER_TOKEN,
    OTHER_USER,
    TOKEN,
    USER,
    Api,
    FakeRedis,
    RecordingStore,
    seed_reference_rows,
    sqlite_store,
)
from storefront.app import create_app
from storefront.common.auth import RedisSessionResolver, session_key
from storefront.common.config import settings


@pytest.fixture
def run():
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run


@pytest.fixture(autouse=True)
def fast_compensation(monkeypatch):
    monkeypatch.setattr(settings, "COMPENSATION_BACKOFF", 0.0)
    monkeypatch.setattr(settings, "COMPENSATION_ATTEMPTS", 3)


@pytest.fixture
def make_store():
    """Async context manager yielding a seeded SqlStore."""

    @asynccontextmanager
    async def factory():
        async with sqlite_store() as store:
            await seed_reference_rows(store)
            yield store

    return factory


@pytest.fixture
def make_api():
    """Async context manager yielding an Api around a fresh app."""

    @asynccontextmanager
    async def factory(fail_insert=(), fail_select=(), fail_delete=()):
        async with sqlite_store() as store:
            await seed_reference_rows(store)
            recorder = RecordingStore(store, fail_insert=fail_insert, fail_select=fail_select, fail_delete=fail_delete)
            redis = FakeRedis({session_key(TOKEN): USER, session_key(OTHER_TOKEN): OTHER_USER})

            async def redis_factory():
                return redis

            app = create_app(store=recorder, identity_resolver=RedisSessionResolver(redis_factory=redis_factory))
            yield Api(client=app.test_client(), store=store, recorder=recorder, redis=redis)

    return factory
