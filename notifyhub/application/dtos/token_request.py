"""DTOs for self-service system token requests."""

from dataclasses import dataclass
from datetime import datetime

from notifyhub.domain.enums import TokenRequestStatus


@dataclass(frozen=True)
class TokenRequestResult:
    """Token request read-model. has_plain_text_token tells the owner a reveal is pending."""

    id: str
    user_id: str
    max_requests: int
    description: str | None
    status: TokenRequestStatus
    system_access_token_id: str | None
    has_plain_text_token: bool
    created_at: datetime
    updated_at: datetime | None = None
