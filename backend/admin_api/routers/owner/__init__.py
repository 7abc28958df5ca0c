"""
Owner area: everything scoped to the caller's own restaurant.
"""

from fastapi import APIRouter

from .categories import router as categories_router
from .menu_items import router as menu_items_router
from .profile import router as profile_router

router = APIRouter()
router.include_router(profile_router)
router.include_router(categories_router)
router.include_router(menu_items_router)

__all__ = ["router"]
