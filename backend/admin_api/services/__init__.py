"""
Services module for business logic.

- domain/: owner-facing services (categories, menu items, profile)
- platform/: cross-tenant reads and administration for super-admins
- permissions/: the authorization oracle
- access/: route gates built on the oracle
- media/: image uploads

Usage:
    from admin_api.services.domain import CategoryService
    service = CategoryService(category_repo, menu_item_repo)
    categories = await service.list(tenant_id)
"""

from .access import AccessGate, GateDecision, GateState, View
from .domain import CategoryService, MenuItemService, ProfileService
from .media import MediaService, create_uploader
from .permissions import AuthorizationOracle
from .platform import PlatformAggregator

__all__ = [
    "AccessGate",
    "GateDecision",
    "GateState",
    "View",
    "CategoryService",
    "MenuItemService",
    "ProfileService",
    "MediaService",
    "create_uploader",
    "AuthorizationOracle",
    "PlatformAggregator",
]
