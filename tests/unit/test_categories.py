"""Unit tests for the Redis-backed category lookup table."""

from unittest.mock import AsyncMock

from src.rm_catalog.application.service import EventCatalogService
from src.rm_catalog.infrastructure.categories import CATEGORIES_KEY, DEFAULT_CATEGORIES, CategoryStore


async def test_seed_defaults_counts_new_keys() -> None:
    redis = AsyncMock()
    redis.hsetnx.side_effect = [1, 0, 1, 1, 0, 1]

    added = await CategoryStore(redis).seed_defaults()

    assert added == 4
    assert redis.hsetnx.await_count == len(DEFAULT_CATEGORIES)
    redis.hsetnx.assert_any_await(CATEGORIES_KEY, "battle", "Rap Battles")


async def test_list_categories_sorted_by_key() -> None:
    redis = AsyncMock()
    redis.hgetall.return_value = {"tour": "Tours & Konzerte", "battle": "Rap Battles"}

    categories = await CategoryStore(redis).list_categories()

    assert list(categories) == ["battle", "tour"]


async def test_catalog_lists_categories() -> None:
    redis = AsyncMock()
    redis.hgetall.return_value = {"charts": "Charts", "awards": "Awards"}

    result = await EventCatalogService(repo=AsyncMock()).list_categories(CategoryStore(redis))

    assert [(c.key, c.name) for c in result] == [("awards", "Awards"), ("charts", "Charts")]


async def test_unknown_category_has_no_name() -> None:
    redis = AsyncMock()
    redis.hget.return_value = None

    assert await CategoryStore(redis).get_name("drill") is None
