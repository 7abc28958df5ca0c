"""
Category Repository - categories of one tenant, ordered by display order.
"""

from shared.config.constants import Collections
from shared.infrastructure.docstore import Query

from admin_api.models import Category
from .base import TenantCollectionRepository


class CategoryRepository(TenantCollectionRepository[Category]):
    """Repository for Category documents at ``tenants/{id}/categories``."""

    entity_name = "Category"

    @property
    def model(self) -> type[Category]:
        return Category

    @property
    def collection(self) -> str:
        return Collections.CATEGORIES

    def _base_query(self, collection_path: str) -> Query:
        return Query(collection_path).order("order")
