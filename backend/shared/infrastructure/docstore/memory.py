"""
In-process document store.

Used for local development (STORE_BACKEND=memory) and as the fast test
double. Data is deep-copied on the way in and out, so callers can never
mutate stored documents through a reference they hold.
"""

from __future__ import annotations

import copy
from typing import Any

from .base import DocumentStore, snapshot_from
from .paths import parent_collection
from .query import DocumentSnapshot


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store keyed by document path."""

    backend_name = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._documents: dict[str, dict[str, Any]] = {}

    async def _read(self, path: str) -> dict[str, Any] | None:
        data = self._documents.get(path)
        return copy.deepcopy(data) if data is not None else None

    async def _write(self, path: str, data: dict[str, Any]) -> None:
        self._documents[path] = copy.deepcopy(data)

    async def _merge(self, path: str, partial: dict[str, Any]) -> bool:
        current = self._documents.get(path)
        if current is None:
            return False
        current.update(copy.deepcopy(partial))
        return True

    async def _remove(self, path: str) -> bool:
        return self._documents.pop(path, None) is not None

    async def _scan(self, collection: str) -> list[DocumentSnapshot]:
        return [
            snapshot_from(path, copy.deepcopy(data))
            for path, data in self._documents.items()
            if parent_collection(path) == collection
        ]

    def clear(self) -> None:
        """Drop every document (listeners stay registered)."""
        self._documents.clear()

    def __len__(self) -> int:
        return len(self._documents)
