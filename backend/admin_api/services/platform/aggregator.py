"""
Platform Aggregator - cross-tenant reads and account administration.

This service performs no authorization of its own. Only the super-admin
routes use it, after the access gate has let the caller through.
"""

from __future__ import annotations

import asyncio

from admin_api.models import PlatformStats, Profile, RestaurantDetail, RestaurantStats
from admin_api.repositories import CategoryRepository, MenuItemRepository, ProfileRepository
from shared.config.constants import Roles
from shared.config.logging import audit_admin_action, get_logger
from shared.utils.exceptions import LastSuperAdminError, NotFoundError, ValidationError

logger = get_logger(__name__)

TENANT_ROLES = frozenset(Roles.ALL)


def round_half_up(numerator: int, denominator: int) -> int:
    """numerator / denominator rounded to the nearest integer, .5 rounding up."""
    if denominator <= 0:
        return 0
    return (2 * numerator + denominator) // (2 * denominator)


class PlatformAggregator:
    """Read and administer every tenant on the platform."""

    def __init__(
        self,
        profiles: ProfileRepository,
        categories: CategoryRepository,
        menu_items: MenuItemRepository,
    ):
        self._profiles = profiles
        self._categories = categories
        self._menu_items = menu_items

    # =========================================================================
    # Listings
    # =========================================================================

    async def list_tenants(self) -> list[Profile]:
        """Restaurant accounts (owners and super-admins), newest first."""
        return [p for p in await self._profiles.list_profiles() if p.role in TENANT_ROLES]

    async def list_all_users(self) -> list[Profile]:
        return await self._profiles.list_profiles()

    # =========================================================================
    # Statistics
    # =========================================================================

    async def stats_for(self, tenant_id: str) -> RestaurantStats | None:
        """
        Counts for one tenant, or None when it has no Profile.

        Categories and menu items are read concurrently.
        """
        profile = await self._profiles.get_profile(tenant_id)
        if profile is None:
            return None
        return await self._stats_from_profile(profile)

    async def all_stats(self) -> list[RestaurantStats]:
        tenants = await self.list_tenants()
        results = await asyncio.gather(*(self.stats_for(t.id) for t in tenants))
        return [stats for stats in results if stats is not None]

    async def platform_stats(self) -> PlatformStats:
        all_stats = await self.all_stats()

        totals = PlatformStats(total_restaurants=len(all_stats))
        for stats in all_stats:
            if stats.is_active:
                totals.active_restaurants += 1
            else:
                totals.inactive_restaurants += 1
            totals.total_categories += stats.total_categories
            totals.total_menu_items += stats.total_menu_items
            totals.active_menu_items += stats.active_menu_items

        totals.average_items_per_restaurant = round_half_up(
            totals.total_menu_items, totals.total_restaurants
        )
        return totals

    async def restaurant_detail(self, tenant_id: str) -> RestaurantDetail:
        """
        Raises:
            NotFoundError: The tenant has no Profile.
        """
        profile = await self._profiles.get_profile(tenant_id)
        if profile is None:
            raise NotFoundError("Restaurant", tenant_id)
        categories, menu_items = await asyncio.gather(
            self._categories.list(tenant_id),
            self._menu_items.list(tenant_id),
        )
        return RestaurantDetail(
            profile=profile,
            categories=categories,
            menu_items=menu_items,
            stats=_fold_stats(profile, categories, menu_items),
        )

    # =========================================================================
    # Administration
    # =========================================================================

    async def set_tenant_active(self, tenant_id: str, active: bool, actor: str | None = None) -> None:
        """
        Raises:
            NotFoundError: The tenant has no Profile.
            LastSuperAdminError: Deactivating the only active super-admin.
        """
        if not active:
            await self._guard_last_super_admin(tenant_id)
        await self._profiles.update_profile(tenant_id, {"is_active": active})
        audit_admin_action("SET_ACTIVE", actor or "-", tenant_id, is_active=active)

    async def toggle_tenant_active(self, tenant_id: str, actor: str | None = None) -> bool:
        """Flip ``isActive`` and return the new value."""
        profile = await self._profiles.get_profile(tenant_id)
        if profile is None:
            raise NotFoundError("Restaurant", tenant_id)
        new_value = not profile.is_active
        await self.set_tenant_active(tenant_id, new_value, actor=actor)
        return new_value

    async def set_tenant_role(self, tenant_id: str, role: str, actor: str | None = None) -> None:
        """
        Raises:
            ValidationError: Unknown role.
            NotFoundError: The tenant has no Profile.
            LastSuperAdminError: Demoting the only active super-admin.
        """
        if role not in TENANT_ROLES:
            raise ValidationError(f"Unknown role: {role}", field="role")
        if role != Roles.SUPER_ADMIN:
            await self._guard_last_super_admin(tenant_id)
        await self._profiles.update_profile(tenant_id, {"role": role})
        audit_admin_action("SET_ROLE", actor or "-", tenant_id, role=role)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _stats_from_profile(self, profile: Profile) -> RestaurantStats:
        categories, menu_items = await asyncio.gather(
            self._categories.list(profile.id),
            self._menu_items.list(profile.id),
        )
        return _fold_stats(profile, categories, menu_items)

    async def _guard_last_super_admin(self, tenant_id: str) -> None:
        """Refuse to remove the last active super-admin from the platform."""
        profiles = await self._profiles.list_profiles()
        active_admins = {p.id for p in profiles if p.is_super_admin and p.is_active}
        if active_admins == {tenant_id}:
            raise LastSuperAdminError(tenant_id)


def _fold_stats(profile: Profile, categories: list, menu_items: list) -> RestaurantStats:
    return RestaurantStats(
        user_id=profile.id,
        restaurant_name=profile.restaurant_name,
        email=profile.email,
        is_active=profile.is_active,
        total_categories=len(categories),
        total_menu_items=len(menu_items),
        active_menu_items=sum(1 for item in menu_items if item.available),
        created_at=profile.created_at,
        last_updated=profile.updated_at,
    )
