"""
Authorization Oracle.

Roles are read from the Profile on every check. Nothing is cached, so a
role change made in another session applies to the very next request.
"""

from __future__ import annotations

from admin_api.repositories import ProfileRepository
from shared.config.logging import get_logger
from shared.utils.exceptions import ForbiddenError

logger = get_logger(__name__)


class AuthorizationOracle:
    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    async def is_super_admin(self, identity: str | None) -> bool:
        """
        True when the identity's Profile has the super-admin role.

        A missing Profile is simply not a super-admin. Store failures propagate.
        """
        if not identity:
            return False
        profile = await self._profiles.get_profile(identity)
        return profile is not None and profile.is_super_admin

    @staticmethod
    def can_edit_own_data(identity: str | None, tenant_id: str) -> bool:
        return bool(identity) and identity == tenant_id

    async def can_edit_any_tenant(self, identity: str | None) -> bool:
        return await self.is_super_admin(identity)

    async def require_tenant_access(self, identity: str | None, tenant_id: str) -> None:
        """
        Raises:
            ForbiddenError: The identity neither owns the tenant nor is a super-admin.
        """
        if self.can_edit_own_data(identity, tenant_id):
            return
        if await self.can_edit_any_tenant(identity):
            return
        raise ForbiddenError(
            "access this restaurant",
            identity=identity,
            tenant_id=tenant_id,
        )
