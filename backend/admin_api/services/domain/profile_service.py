"""
Profile Service - the owner's own restaurant profile and dashboard.
"""

from __future__ import annotations

import asyncio
from typing import Any

from admin_api.models import OwnerDashboardStats, Profile
from admin_api.repositories import CategoryRepository, MenuItemRepository, ProfileRepository
from shared.config.constants import Limits
from shared.config.logging import get_logger
from shared.security.auth import Identity
from shared.utils.exceptions import ValidationError
from shared.utils.validators import validate_http_url, validate_image_url

logger = get_logger(__name__)

# Profile fields an owner may edit
OWNER_EDITABLE_FIELDS = frozenset({"restaurant_name", "website_url", "qr_code_image"})


class ProfileService:
    """
    Owner-facing profile operations.

    The first authenticated request of a new account finds no Profile;
    ensure_profile() creates the default one.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        categories: CategoryRepository,
        menu_items: MenuItemRepository,
        default_restaurant_name: str = "My Restaurant",
    ):
        self._profiles = profiles
        self._categories = categories
        self._menu_items = menu_items
        self._default_restaurant_name = default_restaurant_name

    async def get_profile(self, tenant_id: str) -> Profile | None:
        return await self._profiles.get_profile(tenant_id)

    async def ensure_profile(self, identity: Identity) -> Profile:
        """The caller's Profile, created with defaults if it does not exist yet."""
        profile = await self._profiles.get_profile(identity.uid)
        if profile is not None:
            return profile
        logger.info("No profile for identity, creating default", tenant_id=identity.uid)
        return await self._profiles.create_profile(
            identity.uid,
            identity.email,
            self._default_restaurant_name,
        )

    async def update_profile(self, identity: Identity, data: dict[str, Any]) -> Profile:
        """Apply owner edits (restaurant name, website, QR image) and return the result."""
        changes = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in Profile.to_field_names(data).items()
            if key in OWNER_EDITABLE_FIELDS
        }
        self._validate(changes)

        await self.ensure_profile(identity)
        if changes:
            await self._profiles.update_profile(identity.uid, changes)
            logger.info("Profile updated", tenant_id=identity.uid, fields=sorted(changes))
        return await self.ensure_profile(identity)

    async def dashboard_stats(self, identity: Identity) -> OwnerDashboardStats:
        profile, categories, items = await asyncio.gather(
            self.ensure_profile(identity),
            self._categories.list(identity.uid),
            self._menu_items.list(identity.uid),
        )
        return OwnerDashboardStats(
            restaurant_name=profile.restaurant_name,
            total_categories=len(categories),
            visible_categories=sum(1 for c in categories if c.visible),
            total_menu_items=len(items),
            available_menu_items=sum(1 for i in items if i.available),
            featured_menu_items=sum(1 for i in items if i.featured),
        )

    @staticmethod
    def _validate(changes: dict[str, Any]) -> None:
        if "restaurant_name" in changes:
            name = changes["restaurant_name"]
            if not isinstance(name, str) or not name:
                raise ValidationError("Restaurant name is required", field="restaurant_name")
            if len(name) > Limits.MAX_NAME_LENGTH:
                raise ValidationError("Restaurant name is too long", field="restaurant_name")
        try:
            if "website_url" in changes:
                changes["website_url"] = validate_http_url(changes["website_url"])
            if "qr_code_image" in changes:
                changes["qr_code_image"] = validate_image_url(changes["qr_code_image"])
        except ValueError as e:
            raise ValidationError(str(e)) from e
