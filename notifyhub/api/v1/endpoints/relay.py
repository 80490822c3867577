"""Passthrough relay receiving endpoint.

Another deployment POSTs notifications here with a system access token
holding relay:notify. Usage headers in the response reflect the counters
after this call was recorded.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from notifyhub.api.v1.dependencies import (
    apply_usage_headers,
    get_relay_use_case,
    get_secret_codec,
    get_system_token_service,
    require_system_token,
)
from notifyhub.application.dtos.relay import RelayRequest
from notifyhub.application.dtos.system_token import SystemTokenResult
from notifyhub.application.services import SystemTokenService
from notifyhub.application.use_cases import RelayNotificationUseCase
from notifyhub.core.config import get_settings
from notifyhub.core.constants import HEADER_RELAY_SIGNATURE, SCOPE_RELAY_NOTIFY
from notifyhub.core.limiter import limit_relay
from notifyhub.domain.exceptions import AuthenticationException
from notifyhub.infrastructure.security import SecretCodec
from notifyhub.schemas.relay import RelayNotifyRequest, RelayNotifyResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/notify-external", response_model=RelayNotifyResponse)
@limit_relay
async def notify_external(
    request: Request,
    response: Response,
    body: RelayNotifyRequest,
    token: Annotated[SystemTokenResult, Depends(require_system_token(SCOPE_RELAY_NOTIFY))],
    use_case: Annotated[RelayNotificationUseCase, Depends(get_relay_use_case)],
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
    codec: Annotated[SecretCodec, Depends(get_secret_codec)],
):
    """Deliver a relayed notification through the local push dispatcher.

    When RELAY_SIGNING_SECRET is set, X-Relay-Signature-256 must match the
    HMAC of the raw body; a mismatch is 401 and counts nothing.
    """
    settings = get_settings()
    if settings.relay_signing_secret is not None:
        raw = await request.body()
        if not codec.verify_signature(
            settings.relay_signing_secret.get_secret_value(),
            raw,
            request.headers.get(HEADER_RELAY_SIGNATURE),
        ):
            logger.warning("Relay signature mismatch for system token %s", token.id)
            raise AuthenticationException("Invalid relay signature")

    result = await use_case.execute(
        token,
        RelayRequest(
            platform=body.platform, notification=body.notification, device=body.device
        ),
    )
    refreshed = await token_service.get_token(token.id)
    apply_usage_headers(response, refreshed)
    return RelayNotifyResponse.model_validate(result)
