"""
Document store contract and the live-query machinery shared by all stores.

Subclasses provide five storage primitives (_read, _write, _merge, _remove,
_scan). This base class turns them into the public API, validates paths and
keeps snapshot listeners up to date after every write.

Listener semantics:
- the initial result set is delivered before on_snapshot() returns;
- after each write to a collection, its listeners are scheduled to re-run
  their query and are called only if the result set changed; the writer
  never waits for a listener;
- each listener is served by its own delivery task, so deliveries to one
  listener never overlap and a slow callback only delays itself;
- a delivery carries the latest committed state (intermediate states may
  be skipped);
- a callback that raises is logged and does not affect the writer or
  other listeners;
- nothing is delivered after the registration is removed.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

from shared.config.logging import get_logger
from shared.utils.exceptions import StoreUnavailableError
from .paths import (
    document_id,
    generate_id,
    join_path,
    parent_collection,
    require_collection_path,
    require_document_path,
    split_path,
)
from .query import DocumentSnapshot, Query

logger = get_logger(__name__)

SnapshotCallback = Callable[[list[DocumentSnapshot]], Union[Awaitable[None], None]]
ChangeHook = Callable[[str], Awaitable[None]]


class DocumentNotFoundError(LookupError):
    """update_doc() addressed a document that does not exist."""

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


@dataclass(eq=False)
class _Listener:
    listener_id: int
    query: Query
    callback: SnapshotCallback
    active: bool = True
    last_delivered: list[tuple[str, dict[str, Any]]] | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    pending: bool = False
    task: asyncio.Task | None = None


class ListenerRegistration:
    """Handle returned by on_snapshot(); remove() stops deliveries."""

    def __init__(self, store: DocumentStore, listener: _Listener):
        self._store = store
        self._listener = listener

    @property
    def active(self) -> bool:
        return self._listener.active

    @property
    def query(self) -> Query:
        return self._listener.query

    def remove(self) -> bool:
        """Detach the listener. Returns False if it was already removed."""
        return self._store._remove_listener(self._listener)


class DocumentStore(ABC):
    """
    Abstract document store.

    Paths follow the ``collection/doc/collection/doc`` layout. Document data
    is a JSON-like dict; datetimes are allowed as values.
    """

    backend_name = "abstract"

    def __init__(self) -> None:
        self._listeners: dict[int, _Listener] = {}
        self._listener_ids = itertools.count(1)
        self._change_hooks: list[ChangeHook] = []

    # =========================================================================
    # Storage primitives
    # =========================================================================

    @abstractmethod
    async def _read(self, path: str) -> dict[str, Any] | None:
        """Return a copy of the document data, or None."""

    @abstractmethod
    async def _write(self, path: str, data: dict[str, Any]) -> None:
        """Create or fully overwrite a document."""

    @abstractmethod
    async def _merge(self, path: str, partial: dict[str, Any]) -> bool:
        """Merge fields into an existing document. False if it does not exist."""

    @abstractmethod
    async def _remove(self, path: str) -> bool:
        """Delete a document. False if it did not exist."""

    @abstractmethod
    async def _scan(self, collection: str) -> list[DocumentSnapshot]:
        """Every document directly inside a collection."""

    async def close(self) -> None:
        """Remove every listener and stop their delivery tasks."""
        listeners = list(self._listeners.values())
        for listener in listeners:
            self._remove_listener(listener)
        tasks = [lst.task for lst in listeners if lst.task is not None and lst.task is not _current_task()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def ping(self) -> None:
        """Raise StoreUnavailableError if the backend cannot be reached."""

    # =========================================================================
    # Public API
    # =========================================================================

    async def get_doc(self, path: str) -> dict[str, Any] | None:
        return await self._read(require_document_path(path))

    async def set_doc(self, path: str, data: dict[str, Any]) -> None:
        """Full overwrite; creates the document if absent."""
        require_document_path(path)
        await self._write(path, copy.deepcopy(data))
        await self._changed(path)

    async def update_doc(self, path: str, partial: dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: The document does not exist; nothing is written.
        """
        require_document_path(path)
        if not await self._merge(path, copy.deepcopy(partial)):
            raise DocumentNotFoundError(path)
        await self._changed(path)

    async def delete_doc(self, path: str) -> bool:
        """Delete a document. Returns whether it existed."""
        require_document_path(path)
        existed = await self._remove(path)
        if existed:
            await self._changed(path)
        return existed

    async def add_doc(self, collection: str, data: dict[str, Any]) -> str:
        """Store ``data`` under a generated id and return that id."""
        require_collection_path(collection)
        new_id = generate_id()
        await self.set_doc(join_path(*split_path(collection), new_id), data)
        return new_id

    async def query(self, query: Query) -> list[DocumentSnapshot]:
        require_collection_path(query.collection)
        return query.apply(await self._scan(query.collection))

    async def on_snapshot(self, query: Query, callback: SnapshotCallback) -> ListenerRegistration:
        """
        Register a live query. The current result set is delivered before
        this returns; a failure to read it propagates to the caller.
        """
        require_collection_path(query.collection)
        listener = _Listener(next(self._listener_ids), query, callback)
        self._listeners[listener.listener_id] = listener
        try:
            await self._deliver(listener, initial=True)
        except BaseException:
            self._remove_listener(listener)
            raise
        logger.debug(
            "Snapshot listener registered",
            listener_id=listener.listener_id,
            collection=query.collection,
        )
        return ListenerRegistration(self, listener)

    def add_change_hook(self, hook: ChangeHook) -> None:
        """Call ``hook(collection)`` after every local write (used by the change feed)."""
        self._change_hooks.append(hook)

    def remove_change_hook(self, hook: ChangeHook) -> None:
        if hook in self._change_hooks:
            self._change_hooks.remove(hook)

    async def dispatch_changes(self, collection: str) -> None:
        """
        Schedule the listeners of a collection to re-run, e.g. after a write by
        another process. Returns without waiting for any callback.
        """
        for listener in list(self._listeners.values()):
            if listener.query.collection == collection:
                self._schedule(listener)

    async def drain_listeners(self) -> None:
        """Wait until every scheduled delivery has been made."""
        current = _current_task()
        while True:
            tasks = [
                lst.task for lst in self._listeners.values()
                if lst.task is not None and not lst.task.done() and lst.task is not current
            ]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _changed(self, path: str) -> None:
        collection = parent_collection(path)
        await self.dispatch_changes(collection)
        for hook in list(self._change_hooks):
            await hook(collection)

    def _remove_listener(self, listener: _Listener) -> bool:
        if not listener.active:
            return False
        listener.active = False
        self._listeners.pop(listener.listener_id, None)
        task = listener.task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        logger.debug("Snapshot listener removed", listener_id=listener.listener_id)
        return True

    def _schedule(self, listener: _Listener) -> None:
        listener.pending = True
        if listener.task is None or listener.task.done():
            listener.task = asyncio.create_task(
                self._pump(listener), name=f"snapshot-listener-{listener.listener_id}"
            )

    async def _pump(self, listener: _Listener) -> None:
        # Writes that land during a delivery set pending again; one more pass
        # then delivers the latest state.
        while listener.active and listener.pending:
            listener.pending = False
            try:
                await self._deliver(listener)
            except Exception:
                logger.error(
                    "Snapshot delivery failed",
                    listener_id=listener.listener_id,
                    collection=listener.query.collection,
                    exc_info=True,
                )

    async def _deliver(self, listener: _Listener, initial: bool = False) -> None:
        async with listener.lock:
            if not listener.active:
                return
            try:
                results = await self.query(listener.query)
            except StoreUnavailableError:
                if initial:
                    raise
                # Already logged by the exception; the next write retries
                return

            fingerprint = [(snap.id, copy.deepcopy(snap.data)) for snap in results]
            if not initial and fingerprint == listener.last_delivered:
                return
            if not listener.active:
                return
            listener.last_delivered = fingerprint

            try:
                outcome = listener.callback(results)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                if initial:
                    raise
                logger.error(
                    "Snapshot listener callback failed",
                    listener_id=listener.listener_id,
                    collection=listener.query.collection,
                    exc_info=True,
                )


def snapshot_from(path: str, data: dict[str, Any]) -> DocumentSnapshot:
    return DocumentSnapshot(id=document_id(path), path=path, data=data)


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
