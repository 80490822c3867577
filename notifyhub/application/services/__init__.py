"""Application services: token authority, grants, invites, token requests, quota periods."""

from notifyhub.application.services.invite_code_service import InviteCodeService
from notifyhub.application.services.permission_grant_service import (
    PermissionGrantService,
)
from notifyhub.application.services.quota_period import (
    add_months,
    current_period_start,
    needs_reset,
)
from notifyhub.application.services.system_token_service import SystemTokenService
from notifyhub.application.services.token_request_service import TokenRequestService

__all__ = [
    "InviteCodeService",
    "PermissionGrantService",
    "SystemTokenService",
    "TokenRequestService",
    "add_months",
    "current_period_start",
    "needs_reset",
]
