"""Sending side of the passthrough relay: post notifications to another deployment.

The remote deployment authenticates us with a system access token and
reports its usage counters in X-Token-* response headers.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from notifyhub.application.dtos.relay import RelayOutcome, RelayRequest, RelayTokenUsage
from notifyhub.core.constants import (
    HEADER_RELAY_SIGNATURE,
    HEADER_TOKEN_CALLS,
    HEADER_TOKEN_FAILED_CALLS,
    HEADER_TOKEN_ID,
    HEADER_TOKEN_LAST_RESET,
    HEADER_TOKEN_MAX_CALLS,
    HEADER_TOKEN_REMAINING,
    HEADER_TOKEN_TOTAL_CALLS,
    HEADER_TOKEN_TOTAL_FAILED_CALLS,
    RELAY_NOTIFY_PATH,
)
from notifyhub.infrastructure.security.secret_codec import SecretCodec

logger = logging.getLogger(__name__)

RELAY_NOT_CONFIGURED = "relay_not_configured"
RELAY_UNAUTHORIZED = "relay_unauthorized"
RELAY_FORBIDDEN = "relay_forbidden"
RELAY_REJECTED = "relay_rejected"
RELAY_UNAVAILABLE = "relay_unavailable"


def _int_header(headers: httpx.Headers, name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_usage_headers(headers: httpx.Headers) -> RelayTokenUsage:
    """Read X-Token-* headers; missing or malformed values become None."""
    return RelayTokenUsage(
        token_id=headers.get(HEADER_TOKEN_ID),
        max_calls=_int_header(headers, HEADER_TOKEN_MAX_CALLS),
        calls=_int_header(headers, HEADER_TOKEN_CALLS),
        total_calls=_int_header(headers, HEADER_TOKEN_TOTAL_CALLS),
        failed_calls=_int_header(headers, HEADER_TOKEN_FAILED_CALLS),
        total_failed_calls=_int_header(headers, HEADER_TOKEN_TOTAL_FAILED_CALLS),
        remaining=_int_header(headers, HEADER_TOKEN_REMAINING),
        last_reset=headers.get(HEADER_TOKEN_LAST_RESET),
    )


def build_relay_body(request: RelayRequest) -> bytes:
    """Canonical JSON body; the signature covers these exact bytes."""
    payload: dict[str, Any] = {
        "platform": request.platform.value,
        "notification": request.notification,
        "device": request.device,
    }
    return json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")


class PassthroughRelayClient:
    """Posts notifications to <server_url>/api/v1/relay/notify-external."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        server_url: str | None,
        token: str | None,
        *,
        signing_secret: str | None = None,
        timeout: float = 15.0,
        codec: SecretCodec | None = None,
    ) -> None:
        self._http = http_client
        self._server_url = server_url.rstrip("/") if server_url else None
        self._token = token
        self._signing_secret = signing_secret
        self._timeout = timeout
        self._codec = codec or SecretCodec()

    @property
    def is_configured(self) -> bool:
        return bool(self._server_url and self._token)

    async def send(self, request: RelayRequest) -> RelayOutcome:
        if not self.is_configured:
            logger.error("Passthrough relay enabled but server URL or token not configured")
            return RelayOutcome(success=False, error=RELAY_NOT_CONFIGURED)

        body = build_relay_body(request)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }
        if self._signing_secret:
            headers[HEADER_RELAY_SIGNATURE] = self._codec.sign_payload(
                self._signing_secret, body
            )
        url = f"{self._server_url}{RELAY_NOTIFY_PATH}"
        try:
            response = await self._http.post(
                url, content=body, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            logger.warning("Passthrough relay to %s failed: %s", self._server_url, e)
            return RelayOutcome(success=False, error=RELAY_UNAVAILABLE)

        usage = parse_usage_headers(response.headers)
        status = response.status_code
        if status == 401:
            return RelayOutcome(success=False, error=RELAY_UNAUTHORIZED, usage=usage)
        if status == 403:
            return RelayOutcome(success=False, error=RELAY_FORBIDDEN, usage=usage)
        if status >= 500 or status == 429:
            logger.warning("Passthrough relay server returned %d", status)
            return RelayOutcome(success=False, error=RELAY_UNAVAILABLE, usage=usage)
        if status >= 400:
            logger.warning("Passthrough relay rejected request: %d", status)
            return RelayOutcome(success=False, error=RELAY_REJECTED, usage=usage)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if isinstance(data, dict) and data.get("success") is True:
            return RelayOutcome(success=True, usage=usage)
        remote_error = data.get("error") if isinstance(data, dict) else None
        logger.warning("Passthrough relay delivery failed remotely: %s", remote_error)
        return RelayOutcome(success=False, error=RELAY_REJECTED, usage=usage)
