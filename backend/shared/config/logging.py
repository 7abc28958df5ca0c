"""
Structured logging for the API and CLI.

Records are JSON lines in production and compact colored lines elsewhere.
Both forms carry the request id and acting tenant when a request bound them.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"
DIM = "\033[2m"


def _context(record: logging.LogRecord) -> dict[str, str]:
    context = {}
    for key in ("request_id", "tenant_id"):
        value = getattr(record, key, "")
        if value:
            context[key] = value
    return context


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if getattr(record, "extra_data", None):
            entry["data"] = record.extra_data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            entry["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line colored output for a terminal:

        [12:00:01] INFO     [3f2a9c1e u1] admin_api.services: Category created (category_id=abc)
    """

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, RESET)
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        context = _context(record)
        tags = " ".join(filter(None, [context.get("request_id", "")[:8], context.get("tenant_id")]))
        prefix = f"{DIM}[{tags}]{RESET} " if tags else ""

        line = f"{color}[{stamp}] {record.levelname:8}{RESET} {prefix}{record.name}: {record.getMessage()}"

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            line += " (" + ", ".join(f"{k}={v}" for k, v in extra_data.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger that accepts structured context as keyword arguments.

        logger.info("Category created", tenant_id="u1", category_id="abc")
    """

    def _log(
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: dict | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **data: Any,
    ) -> None:
        extra = dict(extra or {})
        extra["extra_data"] = data or None
        super()._log(
            level, msg, args, exc_info=exc_info, extra=extra, stack_info=stack_info, stacklevel=stacklevel
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Configure logging for the application.
    Call this once at application startup.
    """
    # Imported here to avoid a circular import with correlation -> logging
    from shared.infrastructure.correlation import CorrelationIdFilter

    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(CorrelationIdFilter())

    if settings.environment == "production":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = ConsoleFormatter()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Profile created", tenant_id=uid, email=mask_email(email))
        logger.error("Snapshot listener failed", listener_id=7, exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """
    Mask an email address for logging.

    Converts "owner@example.com" to "ow***@example.com": the first two
    characters of the local part and the full domain are kept.
    """
    if not email:
        return "<no-email>"

    try:
        local, domain = email.split("@", 1)
    except ValueError:
        return "***@invalid"
    if len(local) <= 2:
        masked_local = local[:1] + "***"
    else:
        masked_local = local[:2] + "***"
    return f"{masked_local}@{domain}"


# Pre-configured loggers for common modules
admin_api_logger = get_logger("admin_api")
security_audit_logger = get_logger("security.audit")


def audit_access_event(
    event_type: str,
    identity: str | None,
    route: str,
    allowed: bool,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Record an access-control decision in the security audit log.

    Denials are written at WARNING so they stand out from the stream of
    granted requests.

    Args:
        event_type: Gate that produced the decision (SUPER_ADMIN_ROUTE, ...).
        identity: Authenticated principal, None when unauthenticated.
        route: Path that was requested.
        allowed: Whether access was granted.
        reason: Why access was refused (if applicable).
        **extra: Additional context data.
    """
    log_level = logging.INFO if allowed else logging.WARNING
    security_audit_logger.log(
        log_level,
        f"ACCESS_AUDIT: {event_type}",
        event_type=event_type,
        identity=identity,
        route=route,
        allowed=allowed,
        reason=reason,
        **extra,
    )


def audit_admin_action(
    action: str,
    actor: str,
    target_tenant: str,
    **changes: Any,
) -> None:
    """
    Record a privileged mutation (role or status change) made by a super-admin.

    There is no persisted audit trail for these changes; the log is it.
    """
    security_audit_logger.info(
        f"ADMIN_AUDIT: {action}",
        action=action,
        actor=actor,
        target_tenant=target_tenant,
        **changes,
    )
