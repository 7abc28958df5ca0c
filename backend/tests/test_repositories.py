"""
Tests for the tenant repositories.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from admin_api.repositories import CategoryRepository, MenuItemRepository, ProfileRepository
from shared.infrastructure.docstore import MemoryDocumentStore
from shared.utils.clock import MonotonicClock
from shared.utils.exceptions import NotFoundError, ValidationError


class SpyStore(MemoryDocumentStore):
    """Memory store that records every path it is asked to touch."""

    def __init__(self):
        super().__init__()
        self.paths: list[str] = []

    async def _read(self, path):
        self.paths.append(path)
        return await super()._read(path)

    async def _write(self, path, data):
        self.paths.append(path)
        await super()._write(path, data)

    async def _merge(self, path, partial):
        self.paths.append(path)
        return await super()._merge(path, partial)

    async def _remove(self, path):
        self.paths.append(path)
        return await super()._remove(path)

    async def _scan(self, collection):
        self.paths.append(collection)
        return await super()._scan(collection)


class FixedStepClock(MonotonicClock):
    """Clock returning the same instant on every call (stamps still strictly increase)."""

    def __init__(self):
        super().__init__(source=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc))


class TestTenantIsolation:
    @pytest.mark.asyncio
    async def test_list_never_returns_another_tenants_entities(self, categories):
        await categories.create("tenant-a", {"name": "A starters"})
        await categories.create("tenant-b", {"name": "B starters"})

        listed = await categories.list("tenant-a")

        assert [c.name for c in listed] == ["A starters"]

    @pytest.mark.asyncio
    async def test_every_store_call_stays_in_the_tenant_namespace(self):
        store = SpyStore()
        categories = CategoryRepository(store)
        items = MenuItemRepository(store)

        category = await categories.create("tenant-a", {"name": "Mains"})
        item = await items.create("tenant-a", {"name": "Steak", "price": 20, "category_id": category.id})
        await categories.list("tenant-a")
        await items.list_by_category("tenant-a", category.id)
        await items.update("tenant-a", item.id, {"price": 22})
        await items.delete("tenant-a", item.id)

        assert store.paths
        assert all(path.startswith("tenants/tenant-a/") for path in store.paths)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["", "a/b", "..", "x" * 200])
    async def test_malformed_tenant_ids_are_rejected_before_any_store_call(self, bad_id):
        store = SpyStore()
        categories = CategoryRepository(store)

        with pytest.raises(ValidationError):
            await categories.list(bad_id)
        assert store.paths == []


class TestCategoryRepository:
    @pytest.mark.asyncio
    async def test_create_sets_timestamps_and_id(self, categories):
        category = await categories.create("u1", {"name": "Desserts", "order": 1})

        assert category.id
        assert category.created_at == category.updated_at
        stored = await categories.get("u1", category.id)
        assert stored == category

    @pytest.mark.asyncio
    async def test_create_ignores_client_supplied_id_and_timestamps(self, categories):
        past = datetime(2000, 1, 1, tzinfo=timezone.utc)
        category = await categories.create(
            "u1", {"name": "Drinks", "id": "chosen", "createdAt": past, "updatedAt": past}
        )
        assert category.id != "chosen"
        assert category.created_at > past

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_order(self, categories):
        await categories.create("u1", {"name": "Third", "order": 3})
        await categories.create("u1", {"name": "First", "order": 1})
        await categories.create("u1", {"name": "Second", "order": 2})

        assert [c.name for c in await categories.list("u1")] == ["First", "Second", "Third"]

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at_and_keeps_created_at(self, categories):
        category = await categories.create("u1", {"name": "Soups"})

        await categories.update("u1", category.id, {"name": "Soups & Stews", "createdAt": None, "id": "x"})

        updated = await categories.get("u1", category.id)
        assert updated.name == "Soups & Stews"
        assert updated.id == category.id
        assert updated.created_at == category.created_at
        assert updated.updated_at > category.updated_at

    @pytest.mark.asyncio
    async def test_updated_at_increases_even_when_the_wall_clock_does_not(self):
        categories = CategoryRepository(MemoryDocumentStore(), FixedStepClock())
        category = await categories.create("u1", {"name": "Salads"})

        await categories.update("u1", category.id, {"visible": False})
        first = await categories.get("u1", category.id)
        await categories.update("u1", category.id, {"visible": True})
        second = await categories.get("u1", category.id)

        assert category.updated_at < first.updated_at < second.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_entity_raises_not_found(self, categories):
        with pytest.raises(NotFoundError):
            await categories.update("u1", "missing", {"name": "x"})
        assert await categories.get("u1", "missing") is None

    @pytest.mark.asyncio
    async def test_delete_is_permanent(self, categories):
        category = await categories.create("u1", {"name": "Old"})

        await categories.delete("u1", category.id)

        assert await categories.get("u1", category.id) is None
        with pytest.raises(NotFoundError):
            await categories.delete("u1", category.id)

    @pytest.mark.asyncio
    async def test_invalid_document_is_never_written(self, categories):
        with pytest.raises(ValidationError):
            await categories.create("u1", {"description": "no name"})
        assert await categories.list("u1") == []


class TestMenuItemRepository:
    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, menu_items):
        first = await menu_items.create("u1", {"name": "Old", "price": 1, "category_id": "c"})
        second = await menu_items.create("u1", {"name": "New", "price": 2, "category_id": "c"})

        assert [i.id for i in await menu_items.list("u1")] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_by_category(self, menu_items):
        await menu_items.create("u1", {"name": "Cake", "price": 5, "category_id": "desserts"})
        await menu_items.create("u1", {"name": "Soup", "price": 4, "category_id": "starters"})

        cakes = await menu_items.list_by_category("u1", "desserts")

        assert [i.name for i in cakes] == ["Cake"]
        assert await menu_items.count_by_category("u1", "starters") == 1


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_subscribe_delivers_full_ordered_lists(self, categories):
        lists = []
        subscription = await categories.subscribe("u1", lambda cats: lists.append([c.name for c in cats]))

        await categories.create("u1", {"name": "B", "order": 2})
        await categories.store.drain_listeners()
        await categories.create("u1", {"name": "A", "order": 1})
        await categories.store.drain_listeners()
        subscription.unsubscribe()
        await categories.create("u1", {"name": "C", "order": 3})

        assert lists == [[], ["B"], ["A", "B"]]
        assert not subscription.active

    @pytest.mark.asyncio
    async def test_second_unsubscribe_is_harmless(self, categories):
        subscription = await categories.subscribe("u1", lambda cats: None)
        subscription.unsubscribe()
        subscription.unsubscribe()
        assert not subscription.active

    @pytest.mark.asyncio
    async def test_watch_releases_subscription_on_exit(self, categories):
        lists = []

        async def on_change(cats):
            lists.append(len(cats))

        async with categories.watch("u1", on_change) as subscription:
            await categories.create("u1", {"name": "Inside"})
            await categories.store.drain_listeners()
            assert subscription.active

        await categories.create("u1", {"name": "Outside"})

        assert lists == [0, 1]
        assert categories.store.listener_count == 0

    @pytest.mark.asyncio
    async def test_watch_releases_subscription_when_body_raises(self, categories):
        with pytest.raises(RuntimeError):
            async with categories.watch("u1", lambda cats: None):
                raise RuntimeError("component crashed")
        assert categories.store.listener_count == 0

    @pytest.mark.asyncio
    async def test_stuck_subscriber_does_not_block_crud(self, categories):
        async def never_returns(cats):
            if cats:
                await asyncio.Event().wait()

        subscription = await categories.subscribe("u1", never_returns)

        first = await asyncio.wait_for(categories.create("u1", {"name": "Mains", "order": 1}), timeout=2)
        await asyncio.wait_for(categories.create("u1", {"name": "Sides", "order": 2}), timeout=2)
        await asyncio.wait_for(categories.update("u1", first.id, {"name": "Grill"}), timeout=2)

        assert [c.name for c in await categories.list("u1")] == ["Grill", "Sides"]
        subscription.unsubscribe()

    @pytest.mark.asyncio
    async def test_subscriber_can_create_from_its_callback(self, categories):
        lists = []

        async def seed_default(cats):
            lists.append([c.name for c in cats])
            if len(lists) == 2:
                await categories.create("u1", {"name": "Drinks", "order": 2})

        async with categories.watch("u1", seed_default):
            await asyncio.wait_for(categories.create("u1", {"name": "Mains", "order": 1}), timeout=2)
            await asyncio.wait_for(categories.store.drain_listeners(), timeout=2)

        assert lists == [[], ["Mains"], ["Mains", "Drinks"]]
        assert categories.store.listener_count == 0


class TestProfileRepository:
    @pytest.mark.asyncio
    async def test_new_signup_scenario(self, profiles):
        assert await profiles.get_profile("u1") is None

        await profiles.create_profile("u1", "a@b.com", "My Restaurant")

        profile = await profiles.get_profile("u1")
        assert profile.role == "restaurant_owner"
        assert profile.is_active is True
        assert profile.restaurant_name == "My Restaurant"
        assert profile.email == "a@b.com"

    @pytest.mark.asyncio
    async def test_update_profile_keeps_identity_fields(self, profiles):
        created = await profiles.create_profile("u1", "a@b.com", "Before")

        await profiles.update_profile("u1", {"restaurantName": "After", "email": "x@y.z", "createdAt": None})

        profile = await profiles.get_profile("u1")
        assert profile.restaurant_name == "After"
        assert profile.email == "a@b.com"
        assert profile.created_at == created.created_at
        assert profile.updated_at > created.updated_at

    @pytest.mark.asyncio
    async def test_malformed_profile_is_a_validation_error_not_a_crash(self, profiles):
        created = await profiles.create_profile("u1", "a@b.com", "Kept")
        await profiles.create_profile("u2", "c@d.com", "Other")
        stored = {**created.to_document(), "role": "emperor"}
        await profiles._store.set_doc("tenants/u1", stored)

        with pytest.raises(ValidationError) as exc_info:
            await profiles.get_profile("u1")

        assert exc_info.value.status_code == 400
        assert "role" in exc_info.value.detail
        assert [p.id for p in await profiles.list_profiles()] == ["u2"]
        assert (await profiles._store.get_doc("tenants/u1"))["role"] == "emperor"

    @pytest.mark.asyncio
    async def test_update_missing_profile_raises(self, profiles):
        with pytest.raises(NotFoundError):
            await profiles.update_profile("ghost", {"isActive": False})

    @pytest.mark.asyncio
    async def test_list_profiles_newest_first(self, profiles):
        await profiles.create_profile("first", "1@x.com", "One")
        await profiles.create_profile("second", "2@x.com", "Two")

        assert [p.id for p in await profiles.list_profiles()] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_profiles_ignore_nested_collections(self, profiles, categories):
        await profiles.create_profile("u1", "1@x.com", "One")
        await categories.create("u1", {"name": "Starters"})

        assert [p.id for p in await profiles.list_profiles()] == ["u1"]

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(self, profiles):
        with pytest.raises(ValidationError):
            await profiles.create_profile("u1", "1@x.com", "One", role="emperor")


class TestFixedClock:
    def test_monotonic_clock_never_repeats(self):
        clock = FixedStepClock()
        readings = [clock() for _ in range(5)]
        assert all(b - a == timedelta(microseconds=1) for a, b in zip(readings, readings[1:]))
