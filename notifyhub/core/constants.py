"""Core constants: wire header names and scope names shared across layers.

Single source of truth so the receiving guard and the sending relay client
agree on the same literals.
"""

# Usage-transparency headers on system-token-gated responses.
HEADER_TOKEN_ID = "X-Token-Id"
HEADER_TOKEN_MAX_CALLS = "X-Token-MaxCalls"
HEADER_TOKEN_CALLS = "X-Token-Calls"
HEADER_TOKEN_TOTAL_CALLS = "X-Token-TotalCalls"
HEADER_TOKEN_FAILED_CALLS = "X-Token-FailedCalls"
HEADER_TOKEN_TOTAL_FAILED_CALLS = "X-Token-TotalFailedCalls"
HEADER_TOKEN_REMAINING = "X-Token-Remaining"
HEADER_TOKEN_LAST_RESET = "X-Token-LastReset"

# HMAC signature of the raw relay body: sha256=<hex>.
HEADER_RELAY_SIGNATURE = "X-Relay-Signature-256"

# Receiving endpoint path (relative to the remote server's base URL).
RELAY_NOTIFY_PATH = "/api/v1/relay/notify-external"

# System token scopes.
SCOPE_RELAY_NOTIFY = "relay:notify"
SCOPE_TOKEN_INTROSPECT = "system-tokens:read"
