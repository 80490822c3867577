"""Passthrough relay client and push dispatchers."""

from notifyhub.infrastructure.external.relay.client import (
    RELAY_FORBIDDEN,
    RELAY_NOT_CONFIGURED,
    RELAY_REJECTED,
    RELAY_UNAUTHORIZED,
    RELAY_UNAVAILABLE,
    PassthroughRelayClient,
    parse_usage_headers,
)
from notifyhub.infrastructure.external.relay.dispatchers import (
    DisabledPushDispatcher,
    PassthroughRelayDispatcher,
    PushGatewayDispatcher,
    build_push_dispatcher,
)

__all__ = [
    "RELAY_FORBIDDEN",
    "RELAY_NOT_CONFIGURED",
    "RELAY_REJECTED",
    "RELAY_UNAUTHORIZED",
    "RELAY_UNAVAILABLE",
    "DisabledPushDispatcher",
    "PassthroughRelayClient",
    "PassthroughRelayDispatcher",
    "PushGatewayDispatcher",
    "build_push_dispatcher",
    "parse_usage_headers",
]
