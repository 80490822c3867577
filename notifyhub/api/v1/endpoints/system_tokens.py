"""System access tokens API: issue, list, inspect, update, revoke, and quota reset.

Issuance, revocation and manual quota resets are operator-only. Requesters
may list and read their own tokens and change their description.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from notifyhub.api.v1.dependencies import (
    CurrentPrincipal,
    Operator,
    get_quota_reset_scheduler,
    get_system_token_service,
    require_system_token,
)
from notifyhub.application.dtos.system_token import SystemTokenResult
from notifyhub.application.services import SystemTokenService
from notifyhub.core.constants import SCOPE_TOKEN_INTROSPECT
from notifyhub.core.limiter import limit_writes
from notifyhub.infrastructure.scheduler import QuotaResetScheduler
from notifyhub.schemas.system_token import (
    IssuedSystemTokenResponse,
    QuotaResetResponse,
    SystemTokenCreateRequest,
    SystemTokenResponse,
    SystemTokenUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=IssuedSystemTokenResponse, status_code=201)
@limit_writes
async def issue_system_token(
    request: Request,
    body: SystemTokenCreateRequest,
    operator: Operator,
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
):
    """Issue a token. The bearer is in the response once and never again."""
    issued = await token_service.issue(
        max_calls=body.max_calls,
        expires_at=body.expires_at,
        requester_id=body.requester_id,
        description=body.description,
        scopes=body.scopes,
        requester_identifier=body.requester_identifier,
    )
    response = SystemTokenResponse.from_result(issued.token, include_echo=True)
    return IssuedSystemTokenResponse(**response.model_dump(), token=issued.raw_token)


@router.get("", response_model=list[SystemTokenResponse])
async def list_system_tokens(
    principal: CurrentPrincipal,
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
    skip: int = 0,
    limit: int = 100,
):
    """Operators see every token; other users see the tokens issued to them."""
    tokens = await token_service.list_tokens(principal, skip=skip, limit=min(limit, 500))
    return [
        SystemTokenResponse.from_result(t, include_echo=principal.is_operator)
        for t in tokens
    ]


@router.get("/me", response_model=SystemTokenResponse)
async def get_calling_system_token(
    token: Annotated[
        SystemTokenResult, Depends(require_system_token(SCOPE_TOKEN_INTROSPECT))
    ],
):
    """Introspect the calling system token (does not count as a call)."""
    return SystemTokenResponse.from_result(token)


@router.post("/quota-reset", response_model=QuotaResetResponse)
@limit_writes
async def run_quota_reset(
    request: Request,
    operator: Operator,
    scheduler: Annotated[QuotaResetScheduler, Depends(get_quota_reset_scheduler)],
):
    """Run a quota reset pass now. 409 when a run is already in progress."""
    result = await scheduler.trigger()
    return QuotaResetResponse.from_result(result)


@router.get("/{token_id}", response_model=SystemTokenResponse)
async def get_system_token(
    token_id: str,
    principal: CurrentPrincipal,
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
):
    token = await token_service.get_token(token_id, principal)
    return SystemTokenResponse.from_result(token, include_echo=principal.is_operator)


@router.patch("/{token_id}", response_model=SystemTokenResponse)
@limit_writes
async def update_system_token(
    request: Request,
    token_id: str,
    body: SystemTokenUpdateRequest,
    principal: CurrentPrincipal,
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
):
    """Partial update. Requesters may only change description."""
    token = await token_service.update(
        token_id, principal, body.model_dump(exclude_unset=True)
    )
    return SystemTokenResponse.from_result(token, include_echo=principal.is_operator)


@router.delete("/{token_id}", status_code=204)
@limit_writes
async def revoke_system_token(
    request: Request,
    token_id: str,
    operator: Operator,
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
) -> Response:
    """Revoke (hard delete). Later requests with the token get 401."""
    await token_service.revoke(token_id)
    return Response(status_code=204)
