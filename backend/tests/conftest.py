"""
Pytest configuration and fixtures for backend tests.
"""

import asyncio
import os

# Must be set before the application settings are first loaded
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CHANGE_FEED_ENABLED", "false")
os.environ.setdefault("IMAGEKIT_PUBLIC_KEY", "")
os.environ.setdefault("IMAGEKIT_PRIVATE_KEY", "")

import pytest
from fastapi.testclient import TestClient

from admin_api.container import AppContainer
from admin_api.main import app
from admin_api.repositories import CategoryRepository, MenuItemRepository, ProfileRepository
from admin_api.services.media import InlineImageUploader
from shared.config.settings import get_settings
from shared.infrastructure.db import build_engine
from shared.infrastructure.docstore import MemoryDocumentStore, SqlDocumentStore
from shared.security.auth import sign_identity_token
from shared.utils.clock import MonotonicClock


def run(coro):
    """Run a coroutine from a synchronous test or fixture."""
    return asyncio.run(coro)


# =============================================================================
# Document stores
# =============================================================================


def _sql_store() -> SqlDocumentStore:
    # SQLite in-memory database shared through a StaticPool
    store = SqlDocumentStore(build_engine("sqlite://"))
    store.create_schema()
    return store


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every store implementation; contract tests run against both."""
    if request.param == "memory":
        yield MemoryDocumentStore()
        return
    sql_store = _sql_store()
    yield sql_store
    sql_store.drop_schema()
    sql_store.engine.dispose()


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


@pytest.fixture
def clock():
    return MonotonicClock()


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def profiles(store, clock):
    return ProfileRepository(store, clock)


@pytest.fixture
def categories(store, clock):
    return CategoryRepository(store, clock)


@pytest.fixture
def menu_items(store, clock):
    return MenuItemRepository(store, clock)


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def container(memory_store):
    """Container around an in-memory store, images stored inline."""
    return AppContainer.build(get_settings(), store=memory_store, uploader=InlineImageUploader())


@pytest.fixture
def client(container):
    """Test client whose app uses the ``container`` fixture."""
    app.state.container = container
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        del app.state.container


def auth_headers_for(uid: str, email: str = "") -> dict[str, str]:
    token = sign_identity_token(uid, email or f"{uid}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return auth_headers_for("owner-1", "owner@example.com")


@pytest.fixture
def seed_owner(container):
    """An existing restaurant owner profile (uid ``owner-1``)."""
    return run(container.profiles.create_profile("owner-1", "owner@example.com", "Owner Bistro"))


@pytest.fixture
def seed_super_admin(container):
    """An active super-admin profile (uid ``admin-1``)."""
    return run(container.profiles.create_profile(
        "admin-1", "admin@example.com", "Platform HQ", role="super_admin"
    ))


@pytest.fixture
def admin_headers(seed_super_admin):
    return auth_headers_for("admin-1", "admin@example.com")
