"""Interactive caller authentication (user JWTs) and operator checks."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notifyhub.api.v1.dependencies.db import get_user_repo
from notifyhub.application.dtos.user import Principal
from notifyhub.domain.exceptions import AuthenticationException, AuthorizationException
from notifyhub.infrastructure.persistence.repositories import UserRepository
from notifyhub.infrastructure.security.jwt import verify_token

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_http_bearer)
    ],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> Principal:
    """Resolve the bearer JWT to an active user.

    Raises:
        AuthenticationException: missing, invalid or expired token, or inactive user.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        logger.debug("Rejected user token: %s", e)
        raise AuthenticationException("Invalid or expired token") from e
    user = await user_repo.get_by_id(payload["sub"])
    if user is None or not user.is_active:
        raise AuthenticationException("Invalid or expired token")
    return Principal.from_user(user)


async def require_operator(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Principal who may administer system tokens and token requests."""
    if not principal.is_operator:
        raise AuthorizationException(resource="system_token", action="operate")
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
Operator = Annotated[Principal, Depends(require_operator)]
