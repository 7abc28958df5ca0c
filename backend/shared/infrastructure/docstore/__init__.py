"""
Document store adapter.

Two implementations of one contract:
- MemoryDocumentStore: in-process, for development and tests
- SqlDocumentStore: SQLAlchemy-backed, for deployments

Usage:
    from shared.infrastructure.docstore import Query, create_document_store

    store = create_document_store(settings)
    item_id = await store.add_doc("tenants/u1/menuItems", {...})
    items = await store.query(Query("tenants/u1/menuItems").order("createdAt", "desc"))
"""

from shared.config.settings import Settings
from shared.config.logging import get_logger
from shared.infrastructure.db import build_engine
from .base import (
    DocumentStore,
    DocumentNotFoundError,
    ListenerRegistration,
    SnapshotCallback,
)
from .memory import MemoryDocumentStore
from .query import DocumentSnapshot, Filter, OrderBy, Query, ASCENDING, DESCENDING
from .sql import SqlDocumentStore
from .paths import generate_id, join_path

logger = get_logger(__name__)


def create_document_store(settings: Settings) -> DocumentStore:
    """Build the store selected by STORE_BACKEND; creates the SQL schema if needed."""
    if settings.store_backend == "memory":
        logger.warning("Using in-memory document store; data is lost on restart")
        return MemoryDocumentStore()

    engine = build_engine(settings.database_url, echo=settings.database_echo)
    store = SqlDocumentStore(engine)
    store.create_schema()
    logger.info("SQL document store ready", dialect=engine.dialect.name)
    return store


__all__ = [
    "DocumentStore",
    "DocumentNotFoundError",
    "ListenerRegistration",
    "SnapshotCallback",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "DocumentSnapshot",
    "Filter",
    "OrderBy",
    "Query",
    "ASCENDING",
    "DESCENDING",
    "generate_id",
    "join_path",
    "create_document_store",
]
