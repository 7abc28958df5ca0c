"""
Slash-separated document paths.

A collection path has an odd number of segments (``tenants``,
``tenants/u1/categories``); a document path has an even number
(``tenants/u1``, ``tenants/u1/categories/c9``).
"""

import secrets
import string

from shared.utils.validators import validate_document_id


_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20


def generate_id() -> str:
    """Random 20-character alphanumeric document id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def split_path(path: str) -> list[str]:
    if not path or path.startswith("/") or path.endswith("/"):
        raise ValueError(f"Malformed path: '{path}'")
    segments = path.split("/")
    for segment in segments:
        validate_document_id(segment, "path segment")
    return segments


def join_path(*segments: str) -> str:
    for segment in segments:
        validate_document_id(segment, "path segment")
    return "/".join(segments)


def is_document_path(path: str) -> bool:
    return len(split_path(path)) % 2 == 0


def require_document_path(path: str) -> str:
    if not is_document_path(path):
        raise ValueError(f"Not a document path: '{path}'")
    return path


def require_collection_path(path: str) -> str:
    if is_document_path(path):
        raise ValueError(f"Not a collection path: '{path}'")
    return path


def parent_collection(document_path: str) -> str:
    """``tenants/u1/categories/c9`` -> ``tenants/u1/categories``."""
    return document_path.rsplit("/", 1)[0] if "/" in document_path else ""


def document_id(document_path: str) -> str:
    return document_path.rsplit("/", 1)[-1]
