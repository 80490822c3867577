"""Resource permission grants: effective levels, sharing and unsharing.

Owners and operators hold admin on every resource they can see. Everyone
else holds whatever grant is stored. Levels only move up through grant()
and invite redemption; revoke removes the grant entirely.
"""

from __future__ import annotations

import logging

from notifyhub.application.dtos.sharing import PermissionGrantResult
from notifyhub.application.dtos.user import Principal
from notifyhub.application.interfaces.repositories import (
    IPermissionGrantRepository,
    IResourceRepository,
    IUserRepository,
)
from notifyhub.domain.enums import PermissionLevel
from notifyhub.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from notifyhub.domain.value_objects import ResourceRef

logger = logging.getLogger(__name__)


class PermissionGrantService:
    """Authorize resource access and manage direct grants."""

    def __init__(
        self,
        resource_repo: IResourceRepository,
        grant_repo: IPermissionGrantRepository,
        user_repo: IUserRepository,
    ) -> None:
        self._resources = resource_repo
        self._grants = grant_repo
        self._users = user_repo

    async def _owner_id(self, resource: ResourceRef) -> str:
        owner_id = await self._resources.get_owner_id(resource)
        if owner_id is None:
            raise ResourceNotFoundException(
                resource.resource_type.value, resource.resource_id
            )
        return owner_id

    async def effective_level(
        self, resource: ResourceRef, principal: Principal
    ) -> PermissionLevel | None:
        """Return the principal's level on resource, or None.

        Raises:
            ResourceNotFoundException: resource does not exist.
        """
        owner_id = await self._owner_id(resource)
        if principal.is_operator or owner_id == principal.id:
            return PermissionLevel.ADMIN
        return await self._grants.get_level(resource, principal.id)

    async def authorize(
        self, resource: ResourceRef, principal: Principal, required: PermissionLevel
    ) -> bool:
        level = await self.effective_level(resource, principal)
        return level is not None and level >= required

    async def require(
        self, resource: ResourceRef, principal: Principal, required: PermissionLevel
    ) -> PermissionLevel:
        """Return the principal's level, raising AuthorizationException when below required."""
        level = await self.effective_level(resource, principal)
        if level is None or level < required:
            raise AuthorizationException(
                resource=resource.resource_type.value, action=required.value
            )
        return level

    async def grant(
        self,
        resource: ResourceRef,
        granter: Principal,
        grantee_identifier: str,
        level: PermissionLevel,
    ) -> PermissionGrantResult:
        """Share resource with the user named by username or email (upgrade-only merge).

        Raises:
            ResourceNotFoundException: resource or grantee does not exist.
            AuthorizationException: granter lacks admin.
            ValidationException: granter shares with themselves.
        """
        await self.require(resource, granter, PermissionLevel.ADMIN)
        grantee = await self._users.find_by_identifier(grantee_identifier)
        if grantee is None:
            raise ResourceNotFoundException("user", grantee_identifier)
        if grantee.id == granter.id:
            raise ValidationException(
                "Cannot share a resource with yourself", field="identifier"
            )
        result = await self._grants.upsert_max(
            resource, grantee.id, level, granted_by_id=granter.id
        )
        logger.info(
            "Granted %s on %s to %s (stored %s) by %s",
            level.value,
            resource,
            grantee.id,
            result.level.value,
            granter.id,
        )
        return result

    async def merge_grant(
        self,
        resource: ResourceRef,
        grantee_id: str,
        level: PermissionLevel,
        granted_by_id: str | None = None,
        invite_code_id: str | None = None,
    ) -> PermissionGrantResult:
        """Store max(existing, level) without authorization checks (invite redemption)."""
        return await self._grants.upsert_max(
            resource,
            grantee_id,
            level,
            granted_by_id=granted_by_id,
            invite_code_id=invite_code_id,
        )

    async def revoke(
        self, resource: ResourceRef, granter: Principal, grantee_identifier: str
    ) -> None:
        """Remove the grantee's grant. Revoking a grant that does not exist succeeds."""
        await self.require(resource, granter, PermissionLevel.ADMIN)
        grantee = await self._users.find_by_identifier(grantee_identifier)
        if grantee is None:
            raise ResourceNotFoundException("user", grantee_identifier)
        if await self._grants.delete_grant(resource, grantee.id):
            logger.info("Revoked grant on %s from %s by %s", resource, grantee.id, granter.id)

    async def list_grants(
        self, resource: ResourceRef, requester: Principal
    ) -> list[PermissionGrantResult]:
        await self.require(resource, requester, PermissionLevel.ADMIN)
        return await self._grants.list_for_resource(resource)
