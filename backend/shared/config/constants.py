"""
Centralized constants for the backend.
Roles, document collections, navigation targets and validation limits.
"""

from typing import Final


# =============================================================================
# Role Constants
# =============================================================================


class Roles:
    """Tenant role constants (stored on the Profile document)."""

    RESTAURANT_OWNER: Final[str] = "restaurant_owner"
    SUPER_ADMIN: Final[str] = "super_admin"

    ALL: Final[list[str]] = [RESTAURANT_OWNER, SUPER_ADMIN]


DEFAULT_ROLE: Final[str] = Roles.RESTAURANT_OWNER


# =============================================================================
# Document Store Layout
# =============================================================================


class Collections:
    """
    Collection names of the document layout:

        tenants/{tenantId}
        tenants/{tenantId}/categories/{categoryId}
        tenants/{tenantId}/menuItems/{itemId}
    """

    TENANTS: Final[str] = "tenants"
    CATEGORIES: Final[str] = "categories"
    MENU_ITEMS: Final[str] = "menuItems"


# =============================================================================
# Navigation Targets
# =============================================================================


class Routes:
    """Client routes the access gate navigates to."""

    ROOT: Final[str] = "/"
    LOGIN: Final[str] = "/login"
    OWNER_DASHBOARD: Final[str] = "/dashboard"
    SUPER_ADMIN_DASHBOARD: Final[str] = "/super-admin/dashboard"


# =============================================================================
# Filters
# =============================================================================


class StatusFilter:
    """Status filter values for the management listings."""

    ALL: Final[str] = "all"
    ACTIVE: Final[str] = "active"
    INACTIVE: Final[str] = "inactive"

    VALUES: Final[frozenset[str]] = frozenset({ALL, ACTIVE, INACTIVE})


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100
    MAX_ID_LENGTH: Final[int] = 128

    # Price limits
    MAX_PRICE: Final[float] = 100_000.0

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 10
    MAX_PAGE_SIZE: Final[int] = 200

    # Root redirect keys a RoleRedirectTracker remembers
    MAX_REDIRECT_KEYS: Final[int] = 1024


class ImageLimits:
    """Accepted uploads for category and menu item images."""

    ALLOWED_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
        {"image/jpeg", "image/jpg", "image/png", "image/webp"}
    )
    MAX_BYTES: Final[int] = 5 * 1024 * 1024
    DEFAULT_QUALITY: Final[int] = 80
    THUMBNAIL_SIZE: Final[int] = 150
