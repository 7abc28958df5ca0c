"""
Request correlation.

Every request gets an X-Request-ID, and once a route gate has resolved the
caller, the tenant it acts for. Both are attached to each log record the
request produces, including records from snapshot listeners its writes fire.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
tenant_id_var: ContextVar[str] = ContextVar("tenant_id", default="")


def get_request_id() -> str:
    return request_id_var.get()


def bind_tenant(tenant_id: str) -> None:
    """Tag the rest of the current request's log records with ``tenant_id``."""
    tenant_id_var.set(tenant_id)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint one, and echo it on the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request_token = request_id_var.set(request_id)
        tenant_token = tenant_id_var.set("")
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            tenant_id_var.reset(tenant_token)
            request_id_var.reset(request_token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class CorrelationIdFilter(logging.Filter):
    """Copy the bound request and tenant ids onto each record ("" when unbound)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.tenant_id = tenant_id_var.get()
        return True
