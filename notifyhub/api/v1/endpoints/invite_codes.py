"""Invite codes API: redeem, inspect, update, delete.

Invites are created under /resources/{resource_type}/{resource_id}/invite-codes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from notifyhub.api.v1.dependencies import CurrentPrincipal, get_invite_code_service
from notifyhub.application.services import InviteCodeService
from notifyhub.core.limiter import limit_redeem, limit_writes
from notifyhub.domain.exceptions import InviteRedemptionException
from notifyhub.schemas.sharing import (
    InviteCodeResponse,
    InviteCodeUpdateRequest,
    InviteRedeemRequest,
    InviteRedeemResponse,
)

router = APIRouter()


@router.post("/redeem", response_model=InviteRedeemResponse)
@limit_redeem
async def redeem_invite_code(
    request: Request,
    body: InviteRedeemRequest,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
):
    """Redeem a code. Failures map to INVITE_INVALID_CODE, INVITE_EXPIRED,
    INVITE_EXHAUSTED or INVITE_ALREADY_SATISFIED."""
    result = await invite_service.redeem(body.code, principal)
    if not result.success:
        raise InviteRedemptionException(result.failure)  # type: ignore[arg-type]
    return InviteRedeemResponse.from_result(result)


@router.get("/{invite_id}", response_model=InviteCodeResponse)
async def get_invite_code(
    invite_id: str,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
):
    return InviteCodeResponse.from_result(await invite_service.get(invite_id, principal))


@router.patch("/{invite_id}", response_model=InviteCodeResponse)
@limit_writes
async def update_invite_code(
    request: Request,
    invite_id: str,
    body: InviteCodeUpdateRequest,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
):
    """Partial update of permissions, max_uses or expires_at."""
    invite = await invite_service.update(
        invite_id, principal, body.model_dump(exclude_unset=True)
    )
    return InviteCodeResponse.from_result(invite)


@router.delete("/{invite_id}", status_code=204)
@limit_writes
async def delete_invite_code(
    request: Request,
    invite_id: str,
    principal: CurrentPrincipal,
    invite_service: Annotated[InviteCodeService, Depends(get_invite_code_service)],
) -> Response:
    await invite_service.delete(invite_id, principal)
    return Response(status_code=204)
