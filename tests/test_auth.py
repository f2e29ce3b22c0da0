"""Tests for bearer-token parsing and Redis-backed session resolution."""

from types import SimpleNamespace

import pytest

from helpers import TOKEN, USER, FakeRedis
from storefront.common import auth
from storefront.common.auth import RedisSessionResolver, bearer_token, session_key


def _request(headers):
    return SimpleNamespace(headers=headers, path="/orders")


@pytest.fixture
def redis(monkeypatch):
    fake = FakeRedis({session_key(TOKEN): USER})

    async def factory():
        return fake

    monkeypatch.setattr(auth, "get_redis", factory)
    return fake


class TestBearerToken:

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer   abc  ", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("Bearer    ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parsing(self, header, expected):
        assert bearer_token(header) == expected


class TestRedisSessionResolver:

    def _resolver(self, fake):
        async def factory():
            return fake

        return RedisSessionResolver(redis_factory=factory)

    def test_known_token_resolves_to_user(self, run):
        resolver = self._resolver(FakeRedis({session_key(TOKEN): USER}))
        assert run(resolver.resolve(_request({"Authorization": f"Bearer {TOKEN}"}))) == USER

    def test_unknown_token_resolves_to_none(self, run):
        resolver = self._resolver(FakeRedis())
        assert run(resolver.resolve(_request({"Authorization": "Bearer nope"}))) is None

    def test_missing_header_skips_redis(self, run):
        async def factory():
            raise AssertionError("redis must not be consulted")

        resolver = RedisSessionResolver(redis_factory=factory)
        assert run(resolver.resolve(_request({}))) is None


class TestSessions:

    def test_create_session_stores_user(self, run, redis):
        token = run(auth.create_session("someone"))
        assert token
        assert redis.data[session_key(token)] == "someone"

    def test_create_session_with_explicit_token(self, run, redis):
        assert run(auth.create_session("someone", token="fixed")) == "fixed"
        assert redis.data[session_key("fixed")] == "someone"

    def test_revoke_session(self, run, redis):
        assert run(auth.revoke_session(TOKEN)) is True
        assert run(auth.revoke_session(TOKEN)) is False
        assert session_key(TOKEN) not in redis.data
