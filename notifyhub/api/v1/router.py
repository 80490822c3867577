"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from notifyhub.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from notifyhub.api.v1.endpoints import (
    health,
    invite_codes,
    relay,
    resources,
    system_tokens,
    token_requests,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    system_tokens.router, prefix="/system-tokens", tags=["system-tokens"]
)
api_router.include_router(
    token_requests.router, prefix="/system-token-requests", tags=["system-token-requests"]
)
api_router.include_router(resources.router, prefix="/resources", tags=["sharing"])
api_router.include_router(
    invite_codes.router, prefix="/invite-codes", tags=["invite-codes"]
)
api_router.include_router(relay.router, prefix="/relay", tags=["relay"])
