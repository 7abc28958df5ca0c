"""
Infrastructure module: database engine, document store, Redis change feed,
request correlation.

Provides:
- SQLAlchemy engine/session factories (db.py)
- The document store adapter (docstore/)
- Cross-process change notifications (change_feed.py, redis_pool.py)
"""

from shared.infrastructure.db import (
    build_engine,
    build_session_factory,
    session_scope,
)
from shared.infrastructure.redis_pool import create_redis_client, close_redis_client

__all__ = [
    # db
    "build_engine",
    "build_session_factory",
    "session_scope",
    # redis
    "create_redis_client",
    "close_redis_client",
]
