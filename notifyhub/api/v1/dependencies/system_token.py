"""System access token guard and usage-transparency headers.

require_system_token(*scopes) authenticates the bearer, checks scopes and
attaches X-Token-* headers to the successful response. Rejections carry
no usage headers. The guard itself never counts a call; endpoints record
usage after their work completes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials

from notifyhub.api.v1.dependencies.auth import _http_bearer
from notifyhub.api.v1.dependencies.db import get_system_token_service
from notifyhub.application.dtos.system_token import SystemTokenResult
from notifyhub.application.services import SystemTokenService
from notifyhub.core.constants import (
    HEADER_TOKEN_CALLS,
    HEADER_TOKEN_FAILED_CALLS,
    HEADER_TOKEN_ID,
    HEADER_TOKEN_LAST_RESET,
    HEADER_TOKEN_MAX_CALLS,
    HEADER_TOKEN_REMAINING,
    HEADER_TOKEN_TOTAL_CALLS,
    HEADER_TOKEN_TOTAL_FAILED_CALLS,
)
from notifyhub.shared.utils.datetime import to_header_value


def usage_headers(token: SystemTokenResult) -> dict[str, str]:
    """X-Token-* values for token. Remaining only for limited tokens."""
    headers = {
        HEADER_TOKEN_ID: token.id,
        HEADER_TOKEN_MAX_CALLS: str(token.max_calls),
        HEADER_TOKEN_CALLS: str(token.calls),
        HEADER_TOKEN_TOTAL_CALLS: str(token.total_calls),
        HEADER_TOKEN_FAILED_CALLS: str(token.failed_calls),
        HEADER_TOKEN_TOTAL_FAILED_CALLS: str(token.total_failed_calls),
    }
    if token.remaining is not None:
        headers[HEADER_TOKEN_REMAINING] = str(token.remaining)
    if token.last_reset_at is not None:
        headers[HEADER_TOKEN_LAST_RESET] = to_header_value(token.last_reset_at)
    return headers


def apply_usage_headers(response: Response, token: SystemTokenResult) -> None:
    """Set (or overwrite) the usage headers on response."""
    for name, value in usage_headers(token).items():
        response.headers[name] = value


def require_system_token(
    *scopes: str,
) -> Callable[..., Awaitable[SystemTokenResult]]:
    """Dependency factory: the request must carry a valid system token with scopes."""

    async def _guard(
        request: Request,
        response: Response,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None, Depends(_http_bearer)
        ],
        token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
    ) -> SystemTokenResult:
        bearer = credentials.credentials if credentials else None
        token = await token_service.authenticate(bearer, scopes)
        request.state.system_token = token
        apply_usage_headers(response, token)
        return token

    return _guard
