"""
Utilities module: Exceptions, validators, clock.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    HasDependentsError,
    LastSuperAdminError,
    StoreUnavailableError,
)
from shared.utils.validators import (
    validate_document_id,
    validate_image_url,
    normalize_search_term,
)
from shared.utils.clock import MonotonicClock, utc_now

__all__ = [
    # exceptions
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "HasDependentsError",
    "LastSuperAdminError",
    "StoreUnavailableError",
    # validators
    "validate_document_id",
    "validate_image_url",
    "normalize_search_term",
    # clock
    "MonotonicClock",
    "utc_now",
]
