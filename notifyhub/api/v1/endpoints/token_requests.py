"""System token requests API: users ask for tokens, operators approve or decline."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from notifyhub.api.v1.dependencies import (
    CurrentPrincipal,
    Operator,
    get_token_request_service,
)
from notifyhub.application.services import TokenRequestService
from notifyhub.core.limiter import limit_writes
from notifyhub.schemas.token_request import (
    TokenRequestApprove,
    TokenRequestCreate,
    TokenRequestDecline,
    TokenRequestResponse,
    TokenRevealResponse,
)

router = APIRouter()


@router.post("", response_model=TokenRequestResponse, status_code=201)
@limit_writes
async def create_token_request(
    request: Request,
    body: TokenRequestCreate,
    principal: CurrentPrincipal,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
):
    created = await service.create(principal, body.max_requests, body.description)
    return TokenRequestResponse.model_validate(created)


@router.get("", response_model=list[TokenRequestResponse])
async def list_token_requests(
    principal: CurrentPrincipal,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
    skip: int = 0,
    limit: int = 100,
):
    """Operators see every request; other users see their own."""
    requests = await service.list_requests(principal, skip=skip, limit=min(limit, 500))
    return [TokenRequestResponse.model_validate(r) for r in requests]


@router.get("/{request_id}", response_model=TokenRequestResponse)
async def get_token_request(
    request_id: str,
    principal: CurrentPrincipal,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
):
    return TokenRequestResponse.model_validate(await service.get(request_id, principal))


@router.post("/{request_id}/approve", response_model=TokenRequestResponse)
@limit_writes
async def approve_token_request(
    request: Request,
    request_id: str,
    operator: Operator,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
    body: TokenRequestApprove | None = None,
):
    """Approve a pending request and issue its token. 409 if already decided."""
    params = body or TokenRequestApprove()
    approved = await service.approve(
        request_id, operator, expires_at=params.expires_at, scopes=params.scopes
    )
    return TokenRequestResponse.model_validate(approved)


@router.post("/{request_id}/decline", response_model=TokenRequestResponse)
@limit_writes
async def decline_token_request(
    request: Request,
    request_id: str,
    operator: Operator,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
    body: TokenRequestDecline | None = None,
):
    params = body or TokenRequestDecline()
    declined = await service.decline(request_id, operator, reason=params.reason)
    return TokenRequestResponse.model_validate(declined)


@router.post("/{request_id}/reveal", response_model=TokenRevealResponse)
@limit_writes
async def reveal_token(
    request: Request,
    request_id: str,
    principal: CurrentPrincipal,
    service: Annotated[TokenRequestService, Depends(get_token_request_service)],
):
    """Return the approved bearer to the requester exactly once."""
    token = await service.reveal_token(request_id, principal)
    return TokenRevealResponse(request_id=request_id, token=token)
