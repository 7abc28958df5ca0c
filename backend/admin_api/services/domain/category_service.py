"""
Category Service.

Business rules:
- a category needs a non-blank name
- new categories are appended: order = current count + 1 (no renumbering on delete)
- a category cannot be deleted while menu items reference it
- renaming a category rewrites the denormalized ``categoryName`` of its items

The dependency check and the delete are two separate store calls, so an
item created in between can end up pointing at a deleted category;
find_orphaned_items() reports such items.
"""

from __future__ import annotations

import asyncio
from typing import Any

from admin_api.models import Category, MenuItem
from admin_api.repositories import CategoryRepository, MenuItemRepository
from admin_api.services.base_service import TenantCRUDService
from shared.config.constants import Limits
from shared.config.logging import get_logger
from shared.utils.exceptions import HasDependentsError, ValidationError

logger = get_logger(__name__)


class CategoryService(TenantCRUDService[Category]):
    """Owner-facing category management."""

    def __init__(self, categories: CategoryRepository, menu_items: MenuItemRepository):
        super().__init__(categories)
        self._menu_items = menu_items

    # =========================================================================
    # Commands
    # =========================================================================

    async def toggle_visibility(self, tenant_id: str, category_id: str) -> Category:
        category = await self.get_or_404(tenant_id, category_id)
        return await self.update(tenant_id, category_id, {"visible": not category.visible})

    async def set_image(self, tenant_id: str, category_id: str, image_url: str | None) -> Category:
        return await self.update(tenant_id, category_id, {"image": image_url})

    async def find_orphaned_items(self, tenant_id: str) -> list[MenuItem]:
        """Menu items whose category no longer exists. Reports only; nothing is changed."""
        categories, items = await asyncio.gather(
            self.repo.list(tenant_id),
            self._menu_items.list(tenant_id),
        )
        known = {category.id for category in categories}
        orphans = [item for item in items if item.category_id not in known]
        if orphans:
            logger.warning(
                "Menu items reference missing categories",
                tenant_id=tenant_id,
                orphaned=len(orphans),
                item_ids=[item.id for item in orphans],
            )
        return orphans

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    async def _validate_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        self._validate_name(data.get("name"))

    async def _validate_update(self, tenant_id: str, current: Category, data: dict[str, Any]) -> None:
        if "name" in data:
            self._validate_name(data["name"])
        if "order" in data and (data["order"] is None or data["order"] < 0):
            raise ValidationError("Order must be a non-negative number", field="order")

    async def _validate_delete(self, tenant_id: str, current: Category) -> None:
        dependents = await self._menu_items.count_by_category(tenant_id, current.id)
        if dependents > 0:
            raise HasDependentsError(current.id, dependents, tenant_id=tenant_id)

    async def _before_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        data["order"] = await self.repo.count(tenant_id) + 1

    async def _after_update(self, tenant_id: str, previous: Category, data: dict[str, Any]) -> None:
        await super()._after_update(tenant_id, previous, data)
        new_name = data.get("name")
        if new_name and new_name != previous.name:
            await self._rename_in_items(tenant_id, previous.id, new_name)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _validate_name(name: Any) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Category name is required", field="name")
        if len(name) > Limits.MAX_NAME_LENGTH:
            raise ValidationError(
                f"Category name is too long (max {Limits.MAX_NAME_LENGTH} characters)",
                field="name",
            )

    async def _rename_in_items(self, tenant_id: str, category_id: str, new_name: str) -> None:
        items = await self._menu_items.list_by_category(tenant_id, category_id)
        if not items:
            return
        await asyncio.gather(*(
            self._menu_items.update(tenant_id, item.id, {"category_name": new_name})
            for item in items
        ))
        logger.info(
            "Category rename propagated to menu items",
            tenant_id=tenant_id,
            category_id=category_id,
            items=len(items),
        )
