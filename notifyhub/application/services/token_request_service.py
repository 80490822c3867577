"""Self-service system token requests: users ask, operators approve or decline."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from notifyhub.application.dtos.token_request import TokenRequestResult
from notifyhub.application.dtos.user import Principal
from notifyhub.application.interfaces.repositories import ITokenRequestRepository
from notifyhub.application.services.system_token_service import SystemTokenService
from notifyhub.domain.enums import TokenRequestStatus
from notifyhub.domain.exceptions import (
    AuthorizationException,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def _require_operator(actor: Principal, action: str) -> None:
    if not actor.is_operator:
        raise AuthorizationException(resource="system_token_request", action=action)


class TokenRequestService:
    """Lifecycle of system token requests: pending -> approved | declined."""

    def __init__(
        self,
        request_repo: ITokenRequestRepository,
        token_service: SystemTokenService,
    ) -> None:
        self._requests = request_repo
        self._tokens = token_service

    async def create(
        self, principal: Principal, max_requests: int, description: str | None = None
    ) -> TokenRequestResult:
        if max_requests < 0:
            raise ValidationException("max_requests must be >= 0", field="max_requests")
        request = await self._requests.create_request(principal.id, max_requests, description)
        logger.info("Token request %s created by %s", request.id, principal.id)
        return request

    async def _load(self, request_id: str) -> TokenRequestResult:
        request = await self._requests.get_request(request_id)
        if request is None:
            raise ResourceNotFoundException("system_token_request", request_id)
        return request

    async def _transition_failed(self, request_id: str) -> InvalidStateTransitionException:
        current = await self._load(request_id)
        return InvalidStateTransitionException(
            "system_token_request", request_id, current.status.value
        )

    async def approve(
        self,
        request_id: str,
        approver: Principal,
        expires_at: datetime | None = None,
        scopes: Iterable[str] | None = None,
    ) -> TokenRequestResult:
        """Approve a pending request and issue its token (plaintext kept for one reveal).

        Raises:
            AuthorizationException: approver is not an operator.
            ResourceNotFoundException: unknown request.
            InvalidStateTransitionException: request is no longer pending.
        """
        _require_operator(approver, "approve")
        request = await self._load(request_id)
        if not await self._requests.transition_from_pending(
            request_id, TokenRequestStatus.APPROVED
        ):
            raise await self._transition_failed(request_id)
        issued = await self._tokens.issue(
            max_calls=request.max_requests,
            expires_at=expires_at,
            requester_id=request.user_id,
            description=request.description,
            scopes=scopes,
        )
        await self._requests.set_issued_token(request_id, issued.token.id, issued.raw_token)
        logger.info(
            "Token request %s approved by %s (token %s)", request_id, approver.id, issued.token.id
        )
        return await self._load(request_id)

    async def decline(
        self, request_id: str, approver: Principal, reason: str | None = None
    ) -> TokenRequestResult:
        _require_operator(approver, "decline")
        request = await self._load(request_id)
        changes: dict[str, str] = {}
        if reason:
            note = f"Declined: {reason}"
            changes["description"] = (
                f"{request.description}\n\n{note}" if request.description else note
            )
        if not await self._requests.transition_from_pending(
            request_id, TokenRequestStatus.DECLINED, changes
        ):
            raise await self._transition_failed(request_id)
        logger.info("Token request %s declined by %s", request_id, approver.id)
        return await self._load(request_id)

    async def list_requests(
        self, actor: Principal, skip: int = 0, limit: int = 100
    ) -> list[TokenRequestResult]:
        user_id = None if actor.is_operator else actor.id
        return await self._requests.list_requests(user_id=user_id, skip=skip, limit=limit)

    async def get(self, request_id: str, actor: Principal) -> TokenRequestResult:
        request = await self._load(request_id)
        if not actor.is_operator and request.user_id != actor.id:
            raise ResourceNotFoundException("system_token_request", request_id)
        return request

    async def reveal_token(self, request_id: str, actor: Principal) -> str:
        """Return the approved token's plaintext to its requester, exactly once."""
        request = await self._load(request_id)
        if request.user_id != actor.id:
            raise AuthorizationException(resource="system_token_request", action="reveal")
        if request.status is not TokenRequestStatus.APPROVED:
            raise InvalidStateTransitionException(
                "system_token_request", request_id, request.status.value
            )
        token = await self._requests.take_plain_text_token(request_id)
        if token is None:
            raise ResourceNotFoundException("system_token_plaintext", request_id)
        logger.info("Token for request %s revealed to %s", request_id, actor.id)
        return token
