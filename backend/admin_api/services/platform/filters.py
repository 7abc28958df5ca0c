"""
Search and status filters for the super-admin listings.
"""

from __future__ import annotations

from typing import Iterable

from admin_api.models import Profile, RestaurantStats
from shared.config.constants import Roles, StatusFilter
from shared.utils.exceptions import ValidationError
from shared.utils.validators import normalize_search_term


ROLE_FILTER_ALL = "all"


def _check_status(status: str) -> str:
    status = (status or StatusFilter.ALL).lower()
    if status not in StatusFilter.VALUES:
        raise ValidationError(f"Unknown status filter: {status}", field="status")
    return status


def _status_matches(is_active: bool, status: str) -> bool:
    if status == StatusFilter.ACTIVE:
        return is_active
    if status == StatusFilter.INACTIVE:
        return not is_active
    return True


def _text_matches(term: str, *values: str) -> bool:
    return not term or any(term in (value or "").lower() for value in values)


def filter_stats(
    stats: Iterable[RestaurantStats],
    search: str | None = None,
    status: str = StatusFilter.ALL,
) -> list[RestaurantStats]:
    """Restaurants whose name or e-mail contains ``search`` and whose status matches."""
    term = normalize_search_term(search)
    status = _check_status(status)
    return [
        s for s in stats
        if _text_matches(term, s.restaurant_name, s.email) and _status_matches(s.is_active, status)
    ]


def filter_users(
    users: Iterable[Profile],
    search: str | None = None,
    role: str = ROLE_FILTER_ALL,
    status: str = StatusFilter.ALL,
) -> list[Profile]:
    term = normalize_search_term(search)
    status = _check_status(status)
    role = role or ROLE_FILTER_ALL
    if role != ROLE_FILTER_ALL and role not in Roles.ALL:
        raise ValidationError(f"Unknown role filter: {role}", field="role")
    return [
        u for u in users
        if _text_matches(term, u.restaurant_name, u.email)
        and (role == ROLE_FILTER_ALL or u.role == role)
        and _status_matches(u.is_active, status)
    ]
