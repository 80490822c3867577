"""DTOs for system access tokens (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SystemTokenResult:
    """System access token read-model. Never carries the secret or its hash."""

    id: str
    max_calls: int
    calls: int
    total_calls: int
    failed_calls: int
    total_failed_calls: int
    scopes: list[str]
    expires_at: datetime | None
    last_reset_at: datetime | None
    requester_id: str | None
    requester_identifier: str | None
    description: str | None
    created_at: datetime
    updated_at: datetime | None = None
    plain_text_echo: str | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.max_calls == 0

    @property
    def remaining(self) -> int | None:
        """Calls left in the current period; None when unlimited."""
        if self.is_unlimited:
            return None
        return max(self.max_calls - self.calls, 0)


@dataclass(frozen=True)
class SystemTokenRecord:
    """Token row as needed for validation: read-model plus the stored hash."""

    token: SystemTokenResult
    token_hash: str


@dataclass(frozen=True)
class IssuedSystemToken:
    """Result of issuance: the stored token and the plaintext bearer (shown once)."""

    token: SystemTokenResult
    raw_token: str


@dataclass(frozen=True)
class SystemTokenCreate:
    """Fields for a new token row (hash already computed)."""

    token_id: str
    token_hash: str
    max_calls: int
    scopes: list[str] = field(default_factory=list)
    expires_at: datetime | None = None
    requester_id: str | None = None
    requester_identifier: str | None = None
    description: str | None = None
    plain_text_echo: str | None = None


@dataclass(frozen=True)
class QuotaResetCandidate:
    """Minimal token projection read by the quota reset job."""

    id: str
    created_at: datetime
    last_reset_at: datetime | None


@dataclass(frozen=True)
class QuotaResetRunResult:
    """Outcome of one quota reset run."""

    tokens_scanned: int
    tokens_reset: int
    error_count: int
    failed_batches: int = 0
