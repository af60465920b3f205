"""
Unit Tests: cache invalidation side channel and catalogue admin mutations
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from enums.cache_key import CacheKey
from enums.special_status import SpecialStatus
from exceptions.common import UnauthorizedException, ValidationException
from exceptions.product import ProductNotFoundException
from repositories.product import ProductRepository
from repositories.special import SpecialRepository
from services.cache_invalidation import CacheInvalidationService, RedisCacheInvalidator
from services.catalogue import CatalogueService
from services.pricing import PricingService

ADMIN_ID = 123456789


class TestCacheInvalidationService:

    @pytest.mark.asyncio
    async def test_emit_deduplicates_and_notifies(self):
        subscriber = AsyncMock()
        CacheInvalidationService.subscribe(subscriber)

        emitted = await CacheInvalidationService.emit([CacheKey.PRODUCTS, CacheKey.HOME, CacheKey.PRODUCTS])

        assert emitted == [CacheKey.PRODUCTS, CacheKey.HOME]
        subscriber.assert_awaited_once_with([CacheKey.PRODUCTS, CacheKey.HOME])

    @pytest.mark.asyncio
    async def test_failing_subscriber_is_isolated(self):
        failing = AsyncMock(side_effect=RuntimeError("cache down"))
        healthy = AsyncMock()
        CacheInvalidationService.subscribe(failing)
        CacheInvalidationService.subscribe(healthy)

        await CacheInvalidationService.emit([CacheKey.SPECIALS])

        healthy.assert_awaited_once_with([CacheKey.SPECIALS])

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        subscriber = AsyncMock()
        CacheInvalidationService.subscribe(subscriber)
        CacheInvalidationService.unsubscribe(subscriber)
        await CacheInvalidationService.emit([CacheKey.SPECIALS])
        subscriber.assert_not_awaited()


class TestRedisCacheInvalidator:

    @pytest.mark.asyncio
    async def test_deletes_prefixed_keys(self, redis_client):
        await redis_client.set("storefront:products", "[...]")
        await redis_client.set("storefront:home", "<html>")
        await redis_client.set("storefront:specials", "[...]")
        CacheInvalidationService.subscribe(RedisCacheInvalidator(redis_client))

        await CacheInvalidationService.emit([CacheKey.PRODUCTS, CacheKey.HOME])

        assert await redis_client.exists("storefront:products") == 0
        assert await redis_client.exists("storefront:home") == 0
        assert await redis_client.get("storefront:specials") == "[...]"

    @pytest.mark.asyncio
    async def test_redis_error_is_raised_to_emitter_and_logged(self):
        redis = AsyncMock()
        redis.delete.side_effect = RedisConnectionError("connection refused")
        invalidator = RedisCacheInvalidator(redis, prefix="shop")

        with pytest.raises(RedisConnectionError):
            await invalidator([CacheKey.CATEGORIES])

        CacheInvalidationService.subscribe(invalidator)
        assert await CacheInvalidationService.emit([CacheKey.CATEGORIES]) == [CacheKey.CATEGORIES]
        redis.delete.assert_awaited_with("shop:categories")


class TestCatalogueMutations:

    @pytest.mark.asyncio
    async def test_disable_product_emits_listing_keys(self, session, catalogue, redis_client):
        await redis_client.set("storefront:products", "cached")
        CacheInvalidationService.subscribe(RedisCacheInvalidator(redis_client))

        keys = await CatalogueService.set_product_enabled(catalogue.enclosure_id, False, ADMIN_ID, session)

        assert CacheKey.PRODUCTS in keys and CacheKey.CATEGORIES in keys
        assert await redis_client.exists("storefront:products") == 0
        product = await ProductRepository.get_by_id_with_parameters(catalogue.enclosure_id, session)
        assert product.is_enabled is False

    @pytest.mark.asyncio
    async def test_parameter_price_change(self, session, catalogue):
        subscriber = AsyncMock()
        CacheInvalidationService.subscribe(subscriber)

        keys = await CatalogueService.set_parameter_price(catalogue.blue_id, 9.999, ADMIN_ID, session)

        assert CacheKey.PARAMETER_GROUPS in keys
        product = await ProductRepository.get_by_id_with_parameters(catalogue.enclosure_id, session)
        assert PricingService.resolve_unit_price(product, {catalogue.color_id: catalogue.blue_id}) == 110.0
        subscriber.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_special_status(self, session, catalogue):
        keys = await CatalogueService.set_special_status(catalogue.draft_id, "available", ADMIN_ID, session)
        assert keys == [CacheKey.SPECIALS, CacheKey.HOME]
        special = await SpecialRepository.get_by_id(catalogue.draft_id, session)
        assert special.status == SpecialStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_invalid_special_status(self, session, catalogue):
        with pytest.raises(ValidationException):
            await CatalogueService.set_special_status(catalogue.draft_id, "archived", ADMIN_ID, session)

    @pytest.mark.asyncio
    async def test_non_admin_emits_nothing(self, session, catalogue):
        subscriber = AsyncMock()
        CacheInvalidationService.subscribe(subscriber)
        with pytest.raises(UnauthorizedException):
            await CatalogueService.set_product_enabled(catalogue.enclosure_id, False, 1, session)
        subscriber.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_product_emits_nothing(self, session, catalogue):
        subscriber = AsyncMock()
        CacheInvalidationService.subscribe(subscriber)
        with pytest.raises(ProductNotFoundException):
            await CatalogueService.set_product_enabled(9999, True, ADMIN_ID, session)
        subscriber.assert_not_awaited()
