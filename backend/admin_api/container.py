"""
Application container.

Builds the document store and everything that depends on it from Settings.
Routers reach it through ``request.app.state.container``; tests build one
around a MemoryDocumentStore and install it on the app before startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import redis.asyncio as redis

from admin_api.repositories import CategoryRepository, MenuItemRepository, ProfileRepository
from admin_api.services import (
    AccessGate,
    AuthorizationOracle,
    CategoryService,
    MediaService,
    MenuItemService,
    PlatformAggregator,
    ProfileService,
    create_uploader,
)
from admin_api.services.media import AssetUploader
from shared.config.logging import get_logger
from shared.config.settings import Settings
from shared.infrastructure.change_feed import RedisChangeFeed
from shared.infrastructure.docstore import DocumentStore, create_document_store
from shared.infrastructure.redis_pool import close_redis_client, create_redis_client
from shared.utils.clock import MonotonicClock

logger = get_logger(__name__)


@dataclass
class AppContainer:
    settings: Settings
    store: DocumentStore
    profiles: ProfileRepository
    categories: CategoryRepository
    menu_items: MenuItemRepository
    profile_service: ProfileService
    category_service: CategoryService
    menu_item_service: MenuItemService
    aggregator: PlatformAggregator
    oracle: AuthorizationOracle
    gate: AccessGate
    media: MediaService
    redis_client: redis.Redis | None = None
    change_feed: RedisChangeFeed | None = field(default=None)

    @classmethod
    def build(
        cls,
        settings: Settings,
        store: DocumentStore | None = None,
        uploader: AssetUploader | None = None,
        clock: MonotonicClock | None = None,
    ) -> AppContainer:
        store = store or create_document_store(settings)
        clock = clock or MonotonicClock()

        profiles = ProfileRepository(store, clock)
        categories = CategoryRepository(store, clock)
        menu_items = MenuItemRepository(store, clock)
        oracle = AuthorizationOracle(profiles)

        redis_client = None
        change_feed = None
        if settings.change_feed_enabled:
            redis_client = create_redis_client(settings)
            change_feed = RedisChangeFeed(store, redis_client, settings.change_feed_channel)

        return cls(
            settings=settings,
            store=store,
            profiles=profiles,
            categories=categories,
            menu_items=menu_items,
            profile_service=ProfileService(
                profiles,
                categories,
                menu_items,
                default_restaurant_name=settings.default_restaurant_name,
            ),
            category_service=CategoryService(categories, menu_items),
            menu_item_service=MenuItemService(menu_items, categories),
            aggregator=PlatformAggregator(profiles, categories, menu_items),
            oracle=oracle,
            gate=AccessGate(oracle),
            media=MediaService(uploader or create_uploader(settings), max_bytes=settings.max_image_bytes),
            redis_client=redis_client,
            change_feed=change_feed,
        )

    async def start(self) -> None:
        if self.change_feed is not None:
            await self.change_feed.start()

    async def aclose(self) -> None:
        if self.change_feed is not None:
            await self.change_feed.stop()
        await close_redis_client(self.redis_client)
        await self.media.aclose()
        await self.store.close()
        logger.info("Application container closed")
