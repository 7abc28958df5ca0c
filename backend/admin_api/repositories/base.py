"""
Base Repository implementation.
Provides tenant-scoped data access over the document store.

Every path a repository touches is built under ``tenants/{tenantId}``; the
tenant id is validated first, so a malformed id can never address another
tenant's documents.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from admin_api.models import DocumentModel
from shared.config.constants import Collections
from shared.config.logging import get_logger
from shared.infrastructure.docstore import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    ListenerRegistration,
    Query,
    join_path,
)
from shared.utils.clock import MonotonicClock, utc_now
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.validators import validate_document_id

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=DocumentModel)

EntityCallback = Callable[[list[Any]], Union[Awaitable[None], None]]

# Fields a caller may never overwrite through update()
IMMUTABLE_FIELDS = frozenset({"id", "createdAt"})


def tenant_path(tenant_id: str) -> str:
    """``tenants/{tenantId}`` after validating the id."""
    try:
        validate_document_id(tenant_id, "tenant id")
    except ValueError as e:
        raise ValidationError(str(e), field="tenant_id") from e
    return join_path(Collections.TENANTS, tenant_id)


def check_entity_id(entity_id: str, entity: str) -> str:
    try:
        return validate_document_id(entity_id, f"{entity} id")
    except ValueError as e:
        raise ValidationError(str(e), field="id") from e


class Subscription:
    """
    Live query handle owned by whoever called subscribe().

    Release it exactly once with unsubscribe(), or use it as a context
    manager. A second unsubscribe() is a logged no-op.
    """

    def __init__(self, registration: ListenerRegistration, description: str):
        self._registration = registration
        self._description = description

    @property
    def active(self) -> bool:
        return self._registration.active

    def unsubscribe(self) -> None:
        if not self._registration.remove():
            logger.warning("Subscription already released", subscription=self._description)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self.active:
            self.unsubscribe()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self.active:
            self.unsubscribe()


class TenantCollectionRepository(ABC, Generic[ModelT]):
    """
    Abstract repository for one per-tenant collection.

    Subclasses define:
    - model: pydantic model of the stored entity
    - collection: collection name under the tenant document
    - _base_query(): ordering applied to list() and subscribe()
    """

    entity_name = "Entity"

    def __init__(self, store: DocumentStore, clock: MonotonicClock | None = None):
        self._store = store
        self._clock = clock or utc_now

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        ...

    @property
    @abstractmethod
    def collection(self) -> str:
        ...

    @abstractmethod
    def _base_query(self, collection_path: str) -> Query:
        ...

    @property
    def store(self) -> DocumentStore:
        return self._store

    # =========================================================================
    # Paths
    # =========================================================================

    def collection_path(self, tenant_id: str) -> str:
        return f"{tenant_path(tenant_id)}/{self.collection}"

    def document_path(self, tenant_id: str, entity_id: str) -> str:
        return f"{self.collection_path(tenant_id)}/{check_entity_id(entity_id, self.entity_name)}"

    # =========================================================================
    # Reads
    # =========================================================================

    async def list(self, tenant_id: str) -> list[ModelT]:
        """All entities of the tenant in the collection's canonical order."""
        snapshots = await self._store.query(self._base_query(self.collection_path(tenant_id)))
        return self._to_entities(snapshots, tenant_id)

    async def get(self, tenant_id: str, entity_id: str) -> ModelT | None:
        path = self.document_path(tenant_id, entity_id)
        data = await self._store.get_doc(path)
        if data is None:
            return None
        return self._to_entity(entity_id, data, tenant_id)

    async def count(self, tenant_id: str) -> int:
        return len(await self.list(tenant_id))

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(self, tenant_id: str, data: dict[str, Any]) -> ModelT:
        """
        Persist a new entity with a generated id.

        ``createdAt`` and ``updatedAt`` are both set to now; any values for
        them (or for ``id``) in ``data`` are ignored.
        """
        now = self._clock()
        fields = self.model.to_document_fields(data)
        for key in IMMUTABLE_FIELDS | {"updatedAt"}:
            fields.pop(key, None)
        fields.update(createdAt=now, updatedAt=now)

        # Validate the complete document before anything is written
        entity = self._validate({**fields, "id": "pending"})
        new_id = await self._store.add_doc(self.collection_path(tenant_id), entity.to_document())
        logger.debug(
            f"{self.entity_name} created",
            tenant_id=tenant_id,
            entity_id=new_id,
        )
        return entity.model_copy(update={"id": new_id})

    async def update(self, tenant_id: str, entity_id: str, partial: dict[str, Any]) -> None:
        """
        Merge ``partial`` into an existing entity and refresh ``updatedAt``.

        ``id`` and ``createdAt`` in ``partial`` are discarded.

        Raises:
            NotFoundError: The entity does not exist (nothing is created).
        """
        fields = self.model.to_document_fields(partial)
        for key in self._immutable_fields():
            fields.pop(key, None)
        fields["updatedAt"] = self._clock()

        path = self.document_path(tenant_id, entity_id)
        try:
            await self._store.update_doc(path, fields)
        except DocumentNotFoundError:
            raise NotFoundError(self.entity_name, entity_id, tenant_id=tenant_id) from None

    async def delete(self, tenant_id: str, entity_id: str) -> None:
        """
        Hard delete.

        Raises:
            NotFoundError: The entity does not exist.
        """
        if not await self._store.delete_doc(self.document_path(tenant_id, entity_id)):
            raise NotFoundError(self.entity_name, entity_id, tenant_id=tenant_id)

    # =========================================================================
    # Live queries
    # =========================================================================

    async def subscribe(self, tenant_id: str, callback: EntityCallback) -> Subscription:
        """
        Deliver the full ordered entity list now and after every change.

        The caller owns the returned Subscription and must release it.
        """
        query = self._base_query(self.collection_path(tenant_id))

        async def deliver(snapshots: list[DocumentSnapshot]) -> None:
            outcome = callback(self._to_entities(snapshots, tenant_id))
            if inspect.isawaitable(outcome):
                await outcome

        registration = await self._store.on_snapshot(query, deliver)
        return Subscription(registration, f"{self.collection}:{tenant_id}")

    @asynccontextmanager
    async def watch(self, tenant_id: str, callback: EntityCallback) -> AsyncIterator[Subscription]:
        """
        Subscription bound to a scope:

            async with repo.watch(tenant_id, on_change):
                ...
        """
        subscription = await self.subscribe(tenant_id, callback)
        try:
            yield subscription
        finally:
            if subscription.active:
                subscription.unsubscribe()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _immutable_fields(self) -> frozenset[str]:
        return IMMUTABLE_FIELDS

    def _validate(self, document: dict[str, Any]) -> ModelT:
        try:
            return self.model.model_validate(document)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.entity_name.lower()} data: {first_error(e)}",
                entity=self.entity_name,
            ) from e

    def _to_entity(self, entity_id: str, data: dict[str, Any], tenant_id: str) -> ModelT | None:
        try:
            return self.model.model_validate({**data, "id": entity_id})
        except PydanticValidationError as e:
            logger.warning(
                f"Skipping malformed {self.entity_name.lower()} document",
                tenant_id=tenant_id,
                entity_id=entity_id,
                error=first_error(e),
            )
            return None

    def _to_entities(self, snapshots: list[DocumentSnapshot], tenant_id: str) -> list[ModelT]:
        entities = []
        for snap in snapshots:
            entity = self._to_entity(snap.id, snap.data, tenant_id)
            if entity is not None:
                entities.append(entity)
        return entities


def first_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
