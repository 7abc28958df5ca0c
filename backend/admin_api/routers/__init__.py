"""
HTTP and WebSocket routers.
"""

from .health import router as health_router
from .live import router as live_router
from .owner import router as owner_router
from .root import router as root_router
from .super_admin import router as super_admin_router

__all__ = [
    "health_router",
    "live_router",
    "owner_router",
    "root_router",
    "super_admin_router",
]
