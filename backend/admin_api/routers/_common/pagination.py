"""
Pagination for the super-admin listings.

Usage:
    @router.get("/restaurants")
    async def list_restaurants(pagination: Pagination = Depends(get_pagination)):
        page = pagination.slice(stats)
        return PaginatedResponse(items=page, pagination=pagination, total=len(stats)).to_dict()
"""

from dataclasses import dataclass
from typing import Any, Sequence

from fastapi import Query

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Attributes:
        limit: Maximum items per page (1 to max_limit)
        offset: Number of items to skip
    """

    limit: int
    offset: int
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        self.limit = min(max(1, self.limit), self.max_limit)
        self.offset = max(0, self.offset)

    @property
    def page(self) -> int:
        return (self.offset // self.limit) + 1

    def slice(self, items: Sequence[Any]) -> list[Any]:
        return list(items[self.offset:self.offset + self.limit])

    def to_dict(self, total: int | None = None) -> dict[str, Any]:
        result = {
            "limit": self.limit,
            "offset": self.offset,
            "page": self.page,
        }
        if total is not None:
            result["total"] = total
            result["pages"] = (total + self.limit - 1) // self.limit
            result["hasNext"] = self.offset + self.limit < total
            result["hasPrev"] = self.offset > 0
        return result


def get_pagination(
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of items to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Number of items to skip",
    ),
) -> Pagination:
    return Pagination(limit=limit, offset=offset)


@dataclass
class PaginatedResponse:
    items: list[Any]
    pagination: Pagination
    total: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "pagination": self.pagination.to_dict(self.total),
        }
