"""
Domain models.

Documents are stored with camelCase keys (``restaurantName``, ``categoryId``);
Python code uses snake_case attributes. Every model accepts either spelling
and serializes by alias, so ``model_dump(by_alias=True)`` is the stored form.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.config.constants import Roles

RoleName = Literal["restaurant_owner", "super_admin"]


class DocumentModel(BaseModel):
    """Base for everything that maps to or from a stored document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Stored form: camelCase keys, without the id (it lives in the path)."""
        return self.model_dump(by_alias=True, exclude={"id"})

    @classmethod
    def field_alias(cls, name: str) -> str:
        """Stored key for a field given by attribute name or alias."""
        info = cls.model_fields.get(name)
        if info is not None:
            return info.alias or name
        if any(field_info.alias == name for field_info in cls.model_fields.values()):
            return name
        raise KeyError(name)

    @classmethod
    def to_field_names(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Rename keys of a (partial) payload to attribute names; unknown keys are dropped."""
        by_alias = {info.alias or name: name for name, info in cls.model_fields.items()}
        fields: dict[str, Any] = {}
        for key, value in data.items():
            if key in cls.model_fields:
                fields[key] = value
            elif key in by_alias:
                fields[by_alias[key]] = value
        return fields

    @classmethod
    def to_document_fields(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Rename keys of a (partial) payload to their stored names; unknown keys are dropped."""
        fields: dict[str, Any] = {}
        for key, value in data.items():
            try:
                fields[cls.field_alias(key)] = value
            except KeyError:
                continue
        return fields


# =============================================================================
# Stored entities
# =============================================================================


class Profile(DocumentModel):
    """One per tenant, stored at ``tenants/{id}``."""

    id: str
    email: str = ""
    restaurant_name: str
    role: RoleName = Roles.RESTAURANT_OWNER
    is_active: bool = True
    website_url: Optional[str] = None
    qr_code_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_super_admin(self) -> bool:
        return self.role == Roles.SUPER_ADMIN


class Category(DocumentModel):
    id: str
    name: str
    description: str = ""
    visible: bool = True
    order: int = 0
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MenuItem(DocumentModel):
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    category_id: str
    # Copy of the category's name at write time
    category_name: str = ""
    image: Optional[str] = None
    available: bool = True
    featured: bool = False
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Write payloads
# =============================================================================


class CategoryCreate(DocumentModel):
    name: str = ""
    description: str = ""
    visible: bool = True
    image: Optional[str] = None


class CategoryUpdate(DocumentModel):
    name: Optional[str] = None
    description: Optional[str] = None
    visible: Optional[bool] = None
    order: Optional[int] = None
    image: Optional[str] = None


class MenuItemCreate(DocumentModel):
    name: str = ""
    description: str = ""
    price: float = 0
    category_id: str = ""
    image: Optional[str] = None
    available: bool = True
    featured: bool = False


class MenuItemUpdate(DocumentModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category_id: Optional[str] = None
    image: Optional[str] = None
    available: Optional[bool] = None
    featured: Optional[bool] = None


class ProfileUpdate(DocumentModel):
    """Fields an owner may change on their own profile."""

    restaurant_name: Optional[str] = None
    website_url: Optional[str] = None
    qr_code_image: Optional[str] = None


class RoleUpdate(DocumentModel):
    role: RoleName


class StatusUpdate(DocumentModel):
    is_active: bool


# =============================================================================
# Derived views
# =============================================================================


class RestaurantStats(DocumentModel):
    user_id: str
    restaurant_name: str
    email: str
    is_active: bool
    total_categories: int
    total_menu_items: int
    active_menu_items: int
    created_at: datetime
    last_updated: datetime


class PlatformStats(DocumentModel):
    total_restaurants: int = 0
    active_restaurants: int = 0
    inactive_restaurants: int = 0
    total_categories: int = 0
    total_menu_items: int = 0
    active_menu_items: int = 0
    average_items_per_restaurant: int = 0


class OwnerDashboardStats(DocumentModel):
    restaurant_name: str
    total_categories: int
    visible_categories: int
    total_menu_items: int
    available_menu_items: int
    featured_menu_items: int


class RestaurantDetail(DocumentModel):
    """A tenant's profile with its full menu, for the super-admin detail page."""

    profile: Profile
    categories: list[Category]
    menu_items: list[MenuItem]
    stats: RestaurantStats
