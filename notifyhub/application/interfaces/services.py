"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from notifyhub.application.dtos.relay import DispatchOutcome, RelayRequest


class ISecretCodec(Protocol):
    """Protocol for secret generation, hashing and constant-time comparison."""

    def generate_secret(self) -> str:
        """Return a new random secret (hex)."""

    def hash_secret(self, secret: str) -> str:
        """Return a one-way hash of secret suitable for storage."""

    def verify_secret(self, secret: str, hashed: str) -> bool:
        """Return True if secret matches hashed; False for malformed hashes."""

    def dummy_verify(self, secret: str) -> None:
        """Spend the same time as verify_secret without a stored hash."""

    def secure_compare(self, a: str, b: str) -> bool:
        """Constant-time string equality."""

    def generate_code(self, length: int) -> str:
        """Return a random human-typeable code."""


class IPushDispatcher(Protocol):
    """Protocol for handing a notification to the delivery pipeline."""

    async def dispatch(self, request: RelayRequest) -> DispatchOutcome:
        """Deliver one notification; never raises for delivery failures."""
