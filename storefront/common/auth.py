import logging
import secrets
from typing import Awaitable, Callable, Optional

from quart import request
from redis.asyncio import Redis

from .config import settings
from .context import get_identity_resolver
from .redis_client import get_redis

_logger = logging.getLogger(__name__)


def session_key(token: str) -> str:
    return f"{settings.SESSION_KEY_PREFIX}{token}"


def bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class RedisSessionResolver:
    """Maps ``Authorization: Bearer <token>`` to the user id stored under the token's session key."""

    def __init__(self, redis_factory: Callable[[], Awaitable[Redis]] = get_redis):
        self._redis_factory = redis_factory

    async def resolve(self, req) -> Optional[str]:
        token = bearer_token(req.headers.get("Authorization"))
        if token is None:
            return None
        r = await self._redis_factory()
        user_uid = await r.get(session_key(token))
        if not user_uid:
            _logger.debug("Unknown session token | path=%s", req.path)
            return None
        return str(user_uid)


async def create_session(user_uid: str, token: Optional[str] = None, ttl: Optional[int] = None) -> str:
    token = token or secrets.token_urlsafe(32)
    ttl = settings.SESSION_TTL_SECONDS if ttl is None else ttl
    r = await get_redis()
    await r.set(session_key(token), user_uid, ex=ttl or None)
    _logger.info("Session created | user_uid=%s ttl=%s", user_uid, ttl)
    return token


async def revoke_session(token: str) -> bool:
    r = await get_redis()
    return bool(await r.delete(session_key(token)))


async def current_user() -> Optional[str]:
    return await get_identity_resolver().resolve(request)
