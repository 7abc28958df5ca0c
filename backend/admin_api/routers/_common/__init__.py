from .deps import (
    current_identity,
    get_container,
    raise_for_decision,
    require_owner,
    require_super_admin,
)
from .pagination import PaginatedResponse, Pagination, get_pagination

__all__ = [
    "current_identity",
    "get_container",
    "raise_for_decision",
    "require_owner",
    "require_super_admin",
    "PaginatedResponse",
    "Pagination",
    "get_pagination",
]
