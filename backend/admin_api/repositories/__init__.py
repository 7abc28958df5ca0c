"""
Repository layer: tenant-scoped access to the document store.

Usage:
    from admin_api.repositories import CategoryRepository

    repo = CategoryRepository(store)
    categories = await repo.list(tenant_id)
    async with repo.watch(tenant_id, on_change):
        ...
"""

from .base import (
    TenantCollectionRepository,
    Subscription,
    tenant_path,
)
from .category import CategoryRepository
from .menu_item import MenuItemRepository
from .profile import ProfileRepository

__all__ = [
    "TenantCollectionRepository",
    "Subscription",
    "tenant_path",
    "CategoryRepository",
    "MenuItemRepository",
    "ProfileRepository",
]
