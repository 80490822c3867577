"""Receive a passthrough relay request and hand it to the local push dispatcher.

Counters follow the delivery outcome: a delivered notification counts as a
call, a failed delivery attempt counts as a failed call, and a request that
never reached a provider changes neither. Provider error text stays in the
logs; the caller only learns a generic error class.
"""

from __future__ import annotations

import logging

from notifyhub.application.dtos.relay import DispatchOutcome, RelayRequest, RelayResult
from notifyhub.application.dtos.system_token import SystemTokenResult
from notifyhub.application.interfaces.services import IPushDispatcher
from notifyhub.application.services.system_token_service import SystemTokenService
from notifyhub.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

RELAY_DELIVERY_FAILED = "delivery_failed"
RELAY_DELIVERY_UNAVAILABLE = "delivery_unavailable"


class RelayNotificationUseCase:
    """Dispatch one relayed notification on behalf of a system token."""

    def __init__(
        self, dispatcher: IPushDispatcher, token_service: SystemTokenService
    ) -> None:
        self._dispatcher = dispatcher
        self._tokens = token_service

    async def _dispatch(self, request: RelayRequest) -> DispatchOutcome:
        try:
            return await self._dispatcher.dispatch(request)
        except Exception as e:
            logger.exception("Push dispatcher raised for %s relay", request.platform.value)
            return DispatchOutcome(attempted=False, success=False, error=str(e))

    async def execute(
        self, token: SystemTokenResult, request: RelayRequest
    ) -> RelayResult:
        outcome = await self._dispatch(request)
        if outcome.success:
            await self._tokens.increment_usage(token.id)
            return RelayResult(success=True, platform=request.platform, sent_at=utc_now())

        if outcome.attempted:
            await self._tokens.record_failure(token.id)
            error = RELAY_DELIVERY_FAILED
        else:
            error = RELAY_DELIVERY_UNAVAILABLE
        logger.warning(
            "Relay for system token %s failed (platform=%s, attempted=%s): %s",
            token.id,
            request.platform.value,
            outcome.attempted,
            outcome.error,
        )
        return RelayResult(
            success=False, platform=request.platform, sent_at=utc_now(), error=error
        )
