"""
Profile Repository - the single tenant document at ``tenants/{id}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from shared.config.constants import Collections, DEFAULT_ROLE
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.docstore import (
    DESCENDING,
    DocumentNotFoundError,
    DocumentStore,
    Query,
)
from shared.utils.clock import MonotonicClock, utc_now
from shared.utils.exceptions import NotFoundError, ValidationError

from admin_api.models import Profile
from .base import first_error, tenant_path

logger = get_logger(__name__)

# Never changed through update_profile(): identity, creation stamp, account e-mail
PROFILE_IMMUTABLE_FIELDS = frozenset({"id", "createdAt", "email"})


class ProfileRepository:
    """
    Repository for tenant Profiles.

    A missing Profile for an authenticated identity is a normal transient
    state (first sign-in); get_profile() returns None and callers create one.
    """

    def __init__(self, store: DocumentStore, clock: MonotonicClock | None = None):
        self._store = store
        self._clock = clock or utc_now

    async def get_profile(self, tenant_id: str) -> Profile | None:
        """
        Raises:
            ValidationError: The stored document is not a valid Profile. It is
                left untouched so it is never replaced by a fresh default.
        """
        data = await self._store.get_doc(tenant_path(tenant_id))
        if data is None:
            return None
        try:
            return Profile.model_validate({**data, "id": tenant_id})
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid profile data: {first_error(e)}",
                tenant_id=tenant_id,
            ) from e

    async def create_profile(
        self,
        tenant_id: str,
        email: str,
        restaurant_name: str,
        role: str = DEFAULT_ROLE,
    ) -> Profile:
        """
        Write the tenant's Profile (full overwrite of ``tenants/{id}``).

        New profiles are always active.
        """
        now = self._clock()
        try:
            profile = Profile(
                id=tenant_id,
                email=email or "",
                restaurant_name=restaurant_name,
                role=role,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid profile data: {e.errors()[0]['msg']}", tenant_id=tenant_id) from e

        await self._store.set_doc(tenant_path(tenant_id), profile.to_document())
        logger.info(
            "Profile created",
            tenant_id=tenant_id,
            email=mask_email(email),
            role=role,
        )
        return profile

    async def update_profile(self, tenant_id: str, partial: dict[str, Any]) -> None:
        """
        Merge fields into the Profile and refresh ``updatedAt``.

        Raises:
            NotFoundError: The tenant has no Profile.
        """
        fields = Profile.to_document_fields(partial)
        for key in PROFILE_IMMUTABLE_FIELDS:
            fields.pop(key, None)
        fields["updatedAt"] = self._clock()

        try:
            await self._store.update_doc(tenant_path(tenant_id), fields)
        except DocumentNotFoundError:
            raise NotFoundError("Profile", tenant_id) from None

    async def list_profiles(self) -> list[Profile]:
        """Every Profile on the platform, newest first."""
        snapshots = await self._store.query(
            Query(Collections.TENANTS).order("createdAt", DESCENDING)
        )
        profiles = []
        for snap in snapshots:
            try:
                profiles.append(Profile.model_validate({**snap.data, "id": snap.id}))
            except PydanticValidationError as e:
                logger.warning(
                    "Skipping malformed profile document",
                    tenant_id=snap.id,
                    error=first_error(e),
                )
        return profiles
