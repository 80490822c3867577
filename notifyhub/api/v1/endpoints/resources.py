"""Resource sharing API: grants and invite codes on a topic or relay target.

All routes live under /resources/{resource_type}/{resource_id}. Managing
shares and invites needs admin on the resource (owners and operators
always have it).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from notifyhub.api.v1.dependencies import (
    CurrentPrincipal,
    get_invite_code_service,
    get_permission_grant_service,
)
from notifyhub.application.services import InviteCodeService, PermissionGrantService
from notifyhub.core.limiter import limit_writes
from notifyhub.domain.enums import ResourceType
from notifyhub.domain.exceptions import ValidationException
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.schemas.sharing import (
    EffectivePermissionResponse,
    InviteCodeCreateRequest,
    InviteCodeResponse,
    PermissionGrantResponse,
    ShareCreateRequest,
)

router = APIRouter()


def get_resource_ref(resource_type: ResourceType, resource_id: str) -> ResourceRef:
    """Path parameters as a ResourceRef."""
    try:
        return ResourceRef(resource_type, resource_id)
    except ValueError as e:
        raise ValidationException(str(e), field="resource_id") from e


Resource = Annotated[ResourceRef, Depends(get_resource_ref)]


@router.get(
    "/{resource_type}/{resource_id}/permission",
    response_model=EffectivePermissionResponse,
)
async def get_effective_permission(
    resource: Resource,
    principal: CurrentPrincipal,
    grant_service: Annotated[PermissionGrantService, Depends(get_permission_grant_service)],
):
    """The caller's own level on the resource."""
    level = await grant_service.effective_level(resource, principal)
    return EffectivePermissionResponse(
        resource_type=resource.resource_type,
        resource_id=resource.resource_id,
        level=level,
    )


@router.get(
    "/{resource_type}/{resource_id}/shares",
    response_model=list[PermissionGrantResponse],
)
async def list_shares(
    resource: Resource,
    principal: CurrentPrincipal,
    grant_service: Annotated[PermissionGrantService, Depends(get_permission_grant_service)],
):
    grants = await grant_service.list_grants(resource, principal)
    return [PermissionGrantResponse.from_result(g) for g in grants]


@router.post(
    "/{resource_type}/{resource_id}/shares",
    response_model=PermissionGrantResponse,
    status_code=201,
)
@limit_writes
async def share_resource(
    request: Request,
    resource: Resource,
    body: ShareCreateRequest,
    principal: CurrentPrincipal,
    grant_service: Annotated[PermissionGrantService, Depends(get_permission_grant_service)],
):
    """Share with a user by username or email. Existing higher grants are kept."""
    grant = await grant_service.grant(resource, principal, body.identifier, body.level)
    return PermissionGrantResponse.from_result(grant)


@router.delete("/{resource_type}/{resource_id}/shares/{identifier}", status_code=204)
@limit_writes
async def unshare_resource(
    request: Request,
    resource: Resource,
    identifier: str,
    principal: CurrentPrincipal,
    grant_service: Annotated[PermissionGrantService, Depends(get_permission_grant_service)],
) -> Response:
    await grant_service.revoke(resource, principal, identifier)
    return Response(status_code=204)


@router.get(
    "/{resource_type}/{resource_id}/invite-codes",
    response_model=list[InviteCodeResponse],
)
async def list_invite_codes(
    resource: Resource,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
):
    invites = await invite_service.list_for_resource(resource, principal)
    return [InviteCodeResponse.from_result(i) for i in invites]


@router.post(
    "/{resource_type}/{resource_id}/invite-codes",
    response_model=InviteCodeResponse,
    status_code=201,
)
@limit_writes
async def create_invite_code(
    request: Request,
    resource: Resource,
    body: InviteCodeCreateRequest,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
):
    """Create an invite; redeemers receive the highest listed permission."""
    invite = await invite_service.create(
        resource,
        principal,
        body.permissions,
        max_uses=body.max_uses,
        expires_at=body.expires_at,
    )
    return InviteCodeResponse.from_result(invite)
