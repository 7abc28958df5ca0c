"""
Cross-process change notifications over Redis pub/sub.

Snapshot listeners only see writes made through their own store instance.
When several API processes share one database, each process publishes the
collection it wrote to, and every other process re-runs its listeners for
that collection.

Publishing is best-effort: a Redis failure is logged and never fails the
write that triggered it.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any

import redis.asyncio as redis

from shared.config.logging import get_logger
from shared.infrastructure.docstore import DocumentStore

logger = get_logger(__name__)

MAX_RECONNECT_DELAY = 30.0


class RedisChangeFeed:
    """
    Bridges a DocumentStore to a Redis channel.

    Usage:
        feed = RedisChangeFeed(store, redis_client, "docstore:changes")
        await feed.start()
        ...
        await feed.stop()
    """

    def __init__(
        self,
        store: DocumentStore,
        client: redis.Redis,
        channel: str,
        origin: str | None = None,
    ):
        self._store = store
        self._client = client
        self._channel = channel
        self._origin = origin or uuid.uuid4().hex
        self._task: asyncio.Task | None = None

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def publish(self, collection: str) -> None:
        message = json.dumps({"collection": collection, "origin": self._origin})
        try:
            await self._client.publish(self._channel, message)
        except (redis.RedisError, OSError) as e:
            logger.warning(
                "Change feed publish failed",
                channel=self._channel,
                collection=collection,
                error=str(e),
            )

    async def handle_message(self, raw: Any) -> None:
        """Dispatch one pub/sub payload to local listeners."""
        try:
            payload = json.loads(raw)
            collection = payload["collection"]
        except (TypeError, ValueError, KeyError):
            logger.warning("Ignoring malformed change feed message", channel=self._channel)
            return
        if payload.get("origin") == self._origin:
            return
        await self._store.dispatch_changes(collection)

    async def start(self) -> None:
        self._store.add_change_hook(self.publish)
        self._task = asyncio.create_task(self._listen(), name="docstore-change-feed")
        logger.info("Change feed started", channel=self._channel, origin=self._origin)

    async def stop(self) -> None:
        self._store.remove_change_hook(self.publish)
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Change feed stopped", channel=self._channel)

    async def _listen(self) -> None:
        delay = 1.0
        while True:
            pubsub = self._client.pubsub(ignore_subscribe_messages=True)
            try:
                await pubsub.subscribe(self._channel)
                delay = 1.0
                async for message in pubsub.listen():
                    if message.get("type") == "message":
                        await self.handle_message(message.get("data"))
            except (redis.RedisError, OSError) as e:
                logger.warning(
                    "Change feed connection lost, reconnecting",
                    channel=self._channel,
                    delay_seconds=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, MAX_RECONNECT_DELAY)
            finally:
                try:
                    await pubsub.aclose()
                except (redis.RedisError, OSError):
                    pass
