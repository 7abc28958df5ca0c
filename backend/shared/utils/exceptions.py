"""
Centralized HTTP exceptions for consistent error handling.

Every exception logs itself on construction, so a raise site never needs a
separate log call.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Category", category_id, tenant_id=tenant_id)
    raise ForbiddenError("manage restaurants")
    raise ValidationError("Price must be greater than 0", field="price")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions inherit from this class to get consistent logging
    and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Read paths return None for absent entities; this is raised by the
    update and delete paths only.

    Usage:
        raise NotFoundError("Category", category_id, tenant_id=tenant_id)
    """

    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} '{entity_id}' not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("edit this restaurant", identity=uid)
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400). Raised before anything reaches the store.

    Usage:
        raise ValidationError("Category name is required", field="name")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidImageError(ValidationError):
    """Uploaded file is not an accepted image."""

    def __init__(self, reason: str, **log_context: Any):
        super().__init__(f"Invalid image: {reason}", **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Restaurant is already inactive")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class HasDependentsError(ConflictError):
    """A category cannot be deleted while menu items still reference it."""

    def __init__(self, category_id: str, dependents: int, **log_context: Any):
        super().__init__(
            "This category contains menu items. Please remove all items first.",
            category_id=category_id,
            dependents=dependents,
            **log_context,
        )
        self.category_id = category_id
        self.dependents = dependents


class LastSuperAdminError(ConflictError):
    """The change would leave the platform without an active super-admin."""

    def __init__(self, tenant_id: str, **log_context: Any):
        super().__init__(
            "Cannot demote or deactivate the last active super admin",
            tenant_id=tenant_id,
            **log_context,
        )


# =============================================================================
# 5xx Errors
# =============================================================================


class StoreUnavailableError(AppException):
    """
    The document store could not be reached or failed mid-operation (503).

    Always surfaced to the caller; CRUD paths never swallow it.
    """

    def __init__(self, operation: str, retry_after: int | None = None, **log_context: Any):
        headers = None
        if retry_after:
            headers = {"Retry-After": str(retry_after)}

        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Document store unavailable during {operation}. Please try again.",
            log_level="error",
            headers=headers,
            operation=operation,
            **log_context,
        )
        self.operation = operation


class ExternalServiceError(AppException):
    """External service error (502 or 503)."""

    def __init__(
        self,
        service: str,
        is_unavailable: bool = False,
        **log_context: Any,
    ):
        if is_unavailable:
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            detail = f"{service} is temporarily unavailable"
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
            detail = f"Error communicating with {service}"

        super().__init__(
            status_code=status_code,
            detail=detail,
            log_level="error",
            service=service,
            **log_context,
        )
