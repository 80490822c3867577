"""Push dispatchers: where accepted notifications go for delivery.

PUSH_MODE selects one: gateway (local push gateway over HTTP), passthrough
(relay to another deployment) or off.
"""

from __future__ import annotations

import logging

import httpx

from notifyhub.application.dtos.relay import DispatchOutcome, RelayRequest
from notifyhub.application.interfaces.services import IPushDispatcher
from notifyhub.core.config import Settings
from notifyhub.infrastructure.external.relay.client import (
    RELAY_NOT_CONFIGURED,
    RELAY_UNAVAILABLE,
    PassthroughRelayClient,
    build_relay_body,
)
from notifyhub.infrastructure.security.secret_codec import SecretCodec

logger = logging.getLogger(__name__)

_ERROR_TEXT_LIMIT = 200


class PushGatewayDispatcher:
    """POSTs the notification to an HTTP push gateway (APNs/FCM/WebPush fan-out)."""

    def __init__(
        self, http_client: httpx.AsyncClient, gateway_url: str | None, timeout: float = 15.0
    ) -> None:
        self._http = http_client
        self._gateway_url = gateway_url
        self._timeout = timeout

    async def dispatch(self, request: RelayRequest) -> DispatchOutcome:
        if not self._gateway_url:
            return DispatchOutcome(
                attempted=False, success=False, error="push gateway URL not configured"
            )
        try:
            response = await self._http.post(
                self._gateway_url,
                content=build_relay_body(request),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            return DispatchOutcome(attempted=False, success=False, error=str(e))
        if response.is_success:
            return DispatchOutcome(attempted=True, success=True)
        return DispatchOutcome(
            attempted=True,
            success=False,
            error=f"HTTP {response.status_code}: {response.text[:_ERROR_TEXT_LIMIT]}",
        )


class PassthroughRelayDispatcher:
    """Delivers through another deployment via PassthroughRelayClient."""

    def __init__(self, client: PassthroughRelayClient) -> None:
        self._client = client

    async def dispatch(self, request: RelayRequest) -> DispatchOutcome:
        outcome = await self._client.send(request)
        if outcome.success:
            return DispatchOutcome(attempted=True, success=True)
        attempted = outcome.error not in (RELAY_NOT_CONFIGURED, RELAY_UNAVAILABLE)
        return DispatchOutcome(attempted=attempted, success=False, error=outcome.error)


class DisabledPushDispatcher:
    """PUSH_MODE=off: nothing is delivered and nothing is attempted."""

    async def dispatch(self, request: RelayRequest) -> DispatchOutcome:
        return DispatchOutcome(
            attempted=False, success=False, error="push delivery disabled"
        )


def build_push_dispatcher(
    settings: Settings,
    http_client: httpx.AsyncClient,
    codec: SecretCodec | None = None,
) -> IPushDispatcher:
    """Return the dispatcher for settings.push_mode."""
    if settings.push_mode == "gateway":
        return PushGatewayDispatcher(
            http_client, settings.push_gateway_url, timeout=settings.relay_timeout_seconds
        )
    if settings.push_mode == "passthrough":
        client = PassthroughRelayClient(
            http_client,
            settings.relay_server_url,
            settings.relay_token.get_secret_value() if settings.relay_token else None,
            signing_secret=(
                settings.relay_signing_secret.get_secret_value()
                if settings.relay_signing_secret
                else None
            ),
            timeout=settings.relay_timeout_seconds,
            codec=codec,
        )
        return PassthroughRelayDispatcher(client)
    logger.info("Push delivery disabled (PUSH_MODE=off)")
    return DisabledPushDispatcher()
