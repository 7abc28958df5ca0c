"""
Menu Item Repository - menu items of one tenant, newest first.
"""

from shared.config.constants import Collections
from shared.infrastructure.docstore import DESCENDING, Query

from admin_api.models import MenuItem
from .base import TenantCollectionRepository, check_entity_id


class MenuItemRepository(TenantCollectionRepository[MenuItem]):
    """Repository for MenuItem documents at ``tenants/{id}/menuItems``."""

    entity_name = "Menu item"

    @property
    def model(self) -> type[MenuItem]:
        return MenuItem

    @property
    def collection(self) -> str:
        return Collections.MENU_ITEMS

    def _base_query(self, collection_path: str) -> Query:
        return Query(collection_path).order("createdAt", DESCENDING)

    async def list_by_category(self, tenant_id: str, category_id: str) -> list[MenuItem]:
        """Items whose ``categoryId`` equals ``category_id``."""
        check_entity_id(category_id, "Category")
        query = Query(self.collection_path(tenant_id)).where("categoryId", "==", category_id)
        snapshots = await self.store.query(query)
        return self._to_entities(snapshots, tenant_id)

    async def count_by_category(self, tenant_id: str, category_id: str) -> int:
        return len(await self.list_by_category(tenant_id, category_id))
