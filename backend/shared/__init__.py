"""
Shared building blocks for the menu administration API and CLI.

STRUCTURE:
- shared.security: Identity tokens and rate limiting
  - auth.py: JWT signing/verification, bearer extraction, optional_identity
  - rate_limit.py: slowapi limiter keyed by identity or client IP

- shared.infrastructure: Storage and messaging
  - db.py: SQLAlchemy engine/session factories
  - docstore/: Document store adapter (memory and SQL backends)
  - change_feed.py: Redis pub/sub fan-out of collection changes
  - correlation.py: Request id propagation

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, collections, routes, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Id, URL and search term validation
  - clock.py: Monotonic UTC timestamps
  - health.py: Component health checks

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, optional_identity
    from shared.infrastructure.docstore import DocumentStore, create_document_store
    from shared.config.settings import settings
    from shared.config.constants import Roles, Collections
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.validators import validate_image_url
"""
