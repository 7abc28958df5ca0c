"""
Document store persisted through SQLAlchemy.

All documents live in one ``documents`` table keyed by path, with the parent
collection indexed for scans and the body stored as JSON text. Filtering and
ordering run in Python (see query.py), so any SQLAlchemy dialect works.

Each operation opens its own session inside a worker thread
(``asyncio.to_thread``) and never holds it across an ``await``. SQLite
engines share a single connection, so their operations are serialized.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import threading
from datetime import datetime
from typing import Any, Callable, TypeVar

from sqlalchemy import Engine, String, Text, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from shared.config.logging import get_logger
from shared.infrastructure.db import build_session_factory, ping, session_scope
from shared.utils.exceptions import StoreUnavailableError
from .base import DocumentStore, snapshot_from
from .paths import document_id, parent_collection
from .query import DocumentSnapshot

logger = get_logger(__name__)

T = TypeVar("T")

# Tag for datetimes inside the JSON body
_TIMESTAMP_KEY = "$ts"


class DocstoreBase(DeclarativeBase):
    """Declarative base for the document table."""

    pass


class DocumentRow(DocstoreBase):
    """One stored document."""

    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)
    collection: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    doc_id: Mapped[str] = mapped_column(String(128), nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)


# =============================================================================
# JSON codec
# =============================================================================


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_TIMESTAMP_KEY: value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    return value


def _decode_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and _TIMESTAMP_KEY in obj:
        return datetime.fromisoformat(obj[_TIMESTAMP_KEY])
    return obj


def encode_document(data: dict[str, Any]) -> str:
    return json.dumps(_encode_value(data), separators=(",", ":"))


def decode_document(raw: str) -> dict[str, Any]:
    return json.loads(raw, object_hook=_decode_hook)


# =============================================================================
# Store
# =============================================================================


class SqlDocumentStore(DocumentStore):
    """SQLAlchemy-backed document store."""

    backend_name = "sql"

    def __init__(self, engine: Engine, session_factory: sessionmaker[Session] | None = None):
        super().__init__()
        self._engine = engine
        self._session_factory = session_factory or build_session_factory(engine)
        self._serialize = engine.dialect.name == "sqlite"
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create the documents table if missing (idempotent)."""
        DocstoreBase.metadata.create_all(bind=self._engine)

    def drop_schema(self) -> None:
        DocstoreBase.metadata.drop_all(bind=self._engine)

    async def ping(self) -> None:
        await self._run("ping", lambda: ping(self._engine))

    async def close(self) -> None:
        await super().close()
        self._engine.dispose()

    # =========================================================================
    # Primitives
    # =========================================================================

    async def _read(self, path: str) -> dict[str, Any] | None:
        def op() -> dict[str, Any] | None:
            with session_scope(self._session_factory) as session:
                row = session.get(DocumentRow, path)
                return decode_document(row.data) if row is not None else None

        return await self._run("get_doc", op)

    async def _write(self, path: str, data: dict[str, Any]) -> None:
        body = encode_document(data)

        def op() -> None:
            with session_scope(self._session_factory) as session:
                row = session.get(DocumentRow, path)
                if row is None:
                    session.add(DocumentRow(
                        path=path,
                        collection=parent_collection(path),
                        doc_id=document_id(path),
                        data=body,
                    ))
                else:
                    row.data = body

        await self._run("set_doc", op)

    async def _merge(self, path: str, partial: dict[str, Any]) -> bool:
        def op() -> bool:
            with session_scope(self._session_factory) as session:
                row = session.get(DocumentRow, path)
                if row is None:
                    return False
                current = decode_document(row.data)
                current.update(partial)
                row.data = encode_document(current)
                return True

        return await self._run("update_doc", op)

    async def _remove(self, path: str) -> bool:
        def op() -> bool:
            with session_scope(self._session_factory) as session:
                result = session.execute(delete(DocumentRow).where(DocumentRow.path == path))
                return (result.rowcount or 0) > 0

        return await self._run("delete_doc", op)

    async def _scan(self, collection: str) -> list[DocumentSnapshot]:
        def op() -> list[DocumentSnapshot]:
            with session_scope(self._session_factory) as session:
                rows = session.execute(
                    select(DocumentRow.path, DocumentRow.data)
                    .where(DocumentRow.collection == collection)
                ).all()
                return [snapshot_from(path, decode_document(data)) for path, data in rows]

        return await self._run("query", op)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _run(self, operation: str, fn: Callable[[], T]) -> T:
        def guarded() -> T:
            guard = self._lock if self._serialize else contextlib.nullcontext()
            with guard:
                return fn()

        try:
            return await asyncio.to_thread(guarded)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(operation, error=str(e)) from e
