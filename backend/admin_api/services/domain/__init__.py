"""
Owner-facing domain services.

Usage:
    from admin_api.services.domain import CategoryService

    service = CategoryService(category_repo, menu_item_repo)
    category = await service.create(tenant_id, {"name": "Starters"})
"""

from .category_service import CategoryService
from .menu_item_service import MenuItemService
from .profile_service import ProfileService

__all__ = [
    "CategoryService",
    "MenuItemService",
    "ProfileService",
]
