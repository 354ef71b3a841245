"""Category lookup table: key -> display name, kept in a Redis hash.

Events reference categories by key only. Nothing here validates an event's
category; an unknown key simply has no display name. Redis holds nothing
else: balances, bets and the ledger live in PostgreSQL.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

CATEGORIES_KEY = "rm:categories"

DEFAULT_CATEGORIES: dict[str, str] = {
    "battle": "Rap Battles",
    "charts": "Charts",
    "streaming": "Streaming",
    "tour": "Tours & Konzerte",
    "awards": "Awards",
    "general": "Allgemein",
}

_pool: aioredis.Redis | None = None


class CategoryStore:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def seed_defaults(self) -> int:
        """Add missing default categories; existing display names are kept."""
        added = 0
        for key, name in DEFAULT_CATEGORIES.items():
            added += await self._redis.hsetnx(CATEGORIES_KEY, key, name)
        if added:
            logger.info("Seeded %d default categories", added)
        return added

    async def list_categories(self) -> dict[str, str]:
        return dict(sorted((await self._redis.hgetall(CATEGORIES_KEY)).items()))

    async def get_name(self, key: str) -> str | None:
        return await self._redis.hget(CATEGORIES_KEY, key)


async def get_category_store() -> CategoryStore:
    """FastAPI dependency. The Redis pool is created on first use."""
    global _pool  # noqa: PLW0603
    if _pool is None:
        _pool = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return CategoryStore(_pool)


async def close_category_store() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None
