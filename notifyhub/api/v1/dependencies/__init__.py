"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for authenticated principals, the system token
guard and application services. Routes depend only on these, never on
repositories directly.
"""

from notifyhub.api.v1.dependencies.auth import (
    CurrentPrincipal,
    Operator,
    get_current_principal,
    require_operator,
)
from notifyhub.api.v1.dependencies.db import (
    get_invite_code_service,
    get_permission_grant_service,
    get_push_dispatcher,
    get_quota_reset_scheduler,
    get_relay_use_case,
    get_secret_codec,
    get_system_token_service,
    get_token_request_service,
    get_user_repo,
)
from notifyhub.api.v1.dependencies.system_token import (
    apply_usage_headers,
    require_system_token,
    usage_headers,
)

__all__ = [
    "CurrentPrincipal",
    "Operator",
    "apply_usage_headers",
    "get_current_principal",
    "get_invite_code_service",
    "get_permission_grant_service",
    "get_push_dispatcher",
    "get_quota_reset_scheduler",
    "get_relay_use_case",
    "get_secret_codec",
    "get_system_token_service",
    "get_token_request_service",
    "get_user_repo",
    "require_operator",
    "require_system_token",
    "usage_headers",
]
