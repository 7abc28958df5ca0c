"""
Shared validators for input sanitization.

Validation happens before anything reaches the document store: an invalid
identifier would otherwise address a path outside the caller's tenant.
"""

from urllib.parse import urlparse
from typing import Optional

from shared.config.constants import Limits


# Schemes that are never accepted in an image field
BLOCKED_SCHEMES = {"javascript", "file", "ftp", "mailto", "tel"}

# Inline images produced by client-side compression
DATA_IMAGE_PREFIX = "data:image/"


def validate_document_id(value: str, kind: str = "id") -> str:
    """
    Validate a single path segment (tenant id, category id, item id).

    Raises:
        ValueError: If the value is empty, too long, or contains a path separator.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{kind} must be a non-empty string")
    if "/" in value:
        raise ValueError(f"{kind} must not contain '/'")
    if value in (".", ".."):
        raise ValueError(f"{kind} must not be a relative path segment")
    if len(value) > Limits.MAX_ID_LENGTH:
        raise ValueError(f"{kind} is too long (max {Limits.MAX_ID_LENGTH} characters)")
    return value


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate an image reference stored on a category or menu item.

    Accepts http(s) URLs and inline ``data:image/...`` URIs.

    Returns:
        The stripped URL, or None for an empty value.

    Raises:
        ValueError: If the URL is malformed or uses a disallowed scheme.
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if url.startswith(DATA_IMAGE_PREFIX):
        return url

    return validate_http_url(url)


def validate_http_url(url: Optional[str]) -> Optional[str]:
    """
    Validate an http(s) URL such as a restaurant website.

    Returns:
        The stripped URL, or None for an empty value.

    Raises:
        ValueError: If the URL is malformed or not http(s).
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES or scheme == "data":
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")
    if not parsed.netloc:
        raise ValueError("URL has no host")
    if len(url) > Limits.MAX_URL_LENGTH:
        raise ValueError(f"URL too long (max {Limits.MAX_URL_LENGTH} characters)")

    return url


def normalize_search_term(term: Optional[str]) -> str:
    """Trim, cap and lowercase a free-text search term."""
    if not term:
        return ""
    return term.strip()[: Limits.MAX_SEARCH_TERM_LENGTH].lower()
