"""
Base Service Classes.

Provides an abstract base for owner-facing CRUD services that:
- use a tenant repository for all data access
- run validation hooks before anything reaches the store
- expose after-hooks for follow-up work (denormalization, logging)

Architecture:
    Router (thin) -> Service (business rules) -> Repository (tenant paths) -> DocumentStore

Usage:
    class CategoryService(TenantCRUDService[Category]):
        def _validate_create(self, tenant_id, data):
            if not (data.get("name") or "").strip():
                raise ValidationError("Category name is required", field="name")
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from admin_api.models import DocumentModel
from admin_api.repositories.base import EntityCallback, Subscription, TenantCollectionRepository
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.validators import validate_image_url

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=DocumentModel)


class TenantCRUDService(Generic[ModelT]):
    """
    Base service for one tenant-scoped entity type.

    Subclasses override the hooks they need; the defaults do nothing.
    """

    def __init__(
        self,
        repo: TenantCollectionRepository[ModelT],
        *,
        image_url_fields: set[str] | None = None,
    ):
        self._repo = repo
        self._image_url_fields = image_url_fields or {"image"}

    @property
    def repo(self) -> TenantCollectionRepository[ModelT]:
        return self._repo

    @property
    def entity_name(self) -> str:
        return self._repo.entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def list(self, tenant_id: str) -> list[ModelT]:
        return await self._repo.list(tenant_id)

    async def get(self, tenant_id: str, entity_id: str) -> ModelT | None:
        return await self._repo.get(tenant_id, entity_id)

    async def get_or_404(self, tenant_id: str, entity_id: str) -> ModelT:
        entity = await self._repo.get(tenant_id, entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id, tenant_id=tenant_id)
        return entity

    async def subscribe(self, tenant_id: str, callback: EntityCallback) -> Subscription:
        return await self._repo.subscribe(tenant_id, callback)

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def create(self, tenant_id: str, data: dict[str, Any]) -> ModelT:
        data = self._clean_payload(data)
        self._validate_image_urls(data)
        await self._validate_create(tenant_id, data)
        await self._before_create(tenant_id, data)
        entity = await self._repo.create(tenant_id, data)
        await self._after_create(tenant_id, entity)
        return entity

    async def update(self, tenant_id: str, entity_id: str, data: dict[str, Any]) -> ModelT:
        """Apply a partial update and return the entity as stored afterwards."""
        data = self._clean_payload(data)
        self._validate_image_urls(data)
        current = await self.get_or_404(tenant_id, entity_id)
        await self._validate_update(tenant_id, current, data)
        await self._before_update(tenant_id, current, data)
        await self._repo.update(tenant_id, entity_id, data)
        await self._after_update(tenant_id, current, data)
        return await self.get_or_404(tenant_id, entity_id)

    async def delete(self, tenant_id: str, entity_id: str) -> None:
        current = await self.get_or_404(tenant_id, entity_id)
        await self._validate_delete(tenant_id, current)
        await self._repo.delete(tenant_id, entity_id)
        await self._after_delete(tenant_id, current)

    # =========================================================================
    # Hooks
    # =========================================================================

    async def _validate_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        """Raise ValidationError if ``data`` may not be created."""

    async def _validate_update(self, tenant_id: str, current: ModelT, data: dict[str, Any]) -> None:
        """Raise ValidationError if ``data`` may not be applied to ``current``."""

    async def _validate_delete(self, tenant_id: str, current: ModelT) -> None:
        """Raise if ``current`` may not be deleted."""

    async def _before_create(self, tenant_id: str, data: dict[str, Any]) -> None:
        """Adjust ``data`` in place before it is written."""

    async def _before_update(self, tenant_id: str, current: ModelT, data: dict[str, Any]) -> None:
        """Adjust ``data`` in place before it is merged."""

    async def _after_create(self, tenant_id: str, entity: ModelT) -> None:
        logger.info(f"{self.entity_name} created", tenant_id=tenant_id, entity_id=entity.id)

    async def _after_update(self, tenant_id: str, previous: ModelT, data: dict[str, Any]) -> None:
        logger.info(
            f"{self.entity_name} updated",
            tenant_id=tenant_id,
            entity_id=previous.id,
            fields=sorted(data),
        )

    async def _after_delete(self, tenant_id: str, entity: ModelT) -> None:
        logger.info(f"{self.entity_name} deleted", tenant_id=tenant_id, entity_id=entity.id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _clean_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        """Copy of ``data`` keyed by attribute name, with string values stripped."""
        return {
            key: value.strip() if isinstance(value, str) else value
            for key, value in self._repo.model.to_field_names(data).items()
        }

    def _validate_image_urls(self, data: dict[str, Any]) -> None:
        for field_name in self._image_url_fields:
            if field_name in data:
                try:
                    data[field_name] = validate_image_url(data[field_name])
                except ValueError as e:
                    raise ValidationError(str(e), field=field_name) from e
