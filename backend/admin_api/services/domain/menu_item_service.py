"""
Menu Item Service.

Business rules:
- name and category are required, price must be greater than 0
- the category must exist in the same tenant
- ``categoryName`` is copied from the category on every write that sets
  the category; callers cannot set it directly
"""

from __future__ import annotations

from typing import Any

from admin_api.models import Category, MenuItem
from admin_api.repositories import CategoryRepository, MenuItemRepository
from admin_api.services.base_service import TenantCRUDService
from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError


class MenuItemService(TenantCRUDService[MenuItem]):
    """Owner-facing menu item management."""

    def __init__(self, menu_items: MenuItemRepository, categories: CategoryRepository):
        super().__init__(menu_items)
        self._categories = categories

    async def list_by_category(self, tenant_id: str, category_id: str) -> list[MenuItem]:
        return await self.repo.list_by_category(tenant_id, category_id)

    async def toggle_availability(self, tenant_id: str, item_id: str) -> MenuItem:
        item = await self.get_or_404(tenant_id, item_id)
        return await self.update(tenant_id, item_id, {"available": not item.available})

    async def set_image(self, tenant_id: str, item_id: str, image_url: str | None) -> MenuItem:
        return await self.update(tenant_id, item_id, {"image": image_url})

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    async def _validate_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        data.pop("category_name", None)
        self._validate_name(data.get("name"))
        if not data.get("category_id"):
            raise ValidationError("Please select a category", field="category_id")
        self._validate_price(data.get("price"))

    async def _validate_update(self, tenant_id: str, current: MenuItem, data: dict[str, Any]) -> None:
        data.pop("category_name", None)
        if "name" in data:
            self._validate_name(data["name"])
        if "category_id" in data and not data["category_id"]:
            raise ValidationError("Please select a category", field="category_id")
        if "price" in data:
            self._validate_price(data["price"])

    async def _before_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        category = await self._require_category(tenant_id, data["category_id"])
        data["category_name"] = category.name

    async def _before_update(self, tenant_id: str, current: MenuItem, data: dict[str, Any]) -> None:
        if "category_id" in data:
            category = await self._require_category(tenant_id, data["category_id"])
            data["category_name"] = category.name

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _validate_name(name: Any) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Item name is required", field="name")
        if len(name) > Limits.MAX_NAME_LENGTH:
            raise ValidationError(
                f"Item name is too long (max {Limits.MAX_NAME_LENGTH} characters)",
                field="name",
            )

    @staticmethod
    def _validate_price(price: Any) -> None:
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise ValidationError("Price must be a number", field="price")
        if price <= 0:
            raise ValidationError("Price must be greater than 0", field="price", value=price)
        if price > Limits.MAX_PRICE:
            raise ValidationError(f"Price cannot exceed {Limits.MAX_PRICE:,.0f}", field="price")

    async def _require_category(self, tenant_id: str, category_id: str) -> Category:
        category = await self._categories.get(tenant_id, category_id)
        if category is None:
            raise ValidationError(
                "Selected category does not exist",
                field="category_id",
                category_id=category_id,
                tenant_id=tenant_id,
            )
        return category
