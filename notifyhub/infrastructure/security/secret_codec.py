"""Secret generation, hashing and comparison for system access tokens and invites.

Secrets are hashed with bcrypt over a SHA-256 pre-hash: bcrypt truncates
inputs at 72 bytes, and the pre-hash yields a fixed-length input. Relay
payload signatures use HMAC-SHA256 with the GitHub-style ``sha256=`` prefix.
"""

import base64
import hashlib
import hmac
import secrets

import bcrypt

# No 0/O or 1/I/L, so codes survive being read aloud or retyped.
INVITE_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
SIGNATURE_PREFIX = "sha256="
SECRET_BYTES = 24


def _prehash(secret: str) -> bytes:
    """SHA-256 pre-hash to avoid bcrypt's 72-byte truncation."""
    return base64.b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class SecretCodec:
    """Implements ISecretCodec with bcrypt (configurable cost) and the secrets module."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        self._dummy_hash: str | None = None

    def generate_secret(self) -> str:
        """Return 192 bits of randomness as 48 hex characters."""
        return secrets.token_hex(SECRET_BYTES)

    def hash_secret(self, secret: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_prehash(secret), salt).decode("utf-8")

    def verify_secret(self, secret: str, hashed: str) -> bool:
        try:
            return bool(bcrypt.checkpw(_prehash(secret), hashed.encode("utf-8")))
        except (ValueError, TypeError):
            return False

    def dummy_verify(self, secret: str) -> None:
        """Run a verify against a throwaway hash so unknown ids cost the same time."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_secret("not-a-real-secret")
        self.verify_secret(secret, self._dummy_hash)

    def secure_compare(self, a: str, b: str) -> bool:
        """Constant-time comparison; differing lengths are unequal."""
        a_bytes = a.encode("utf-8")
        b_bytes = b.encode("utf-8")
        if len(a_bytes) != len(b_bytes):
            return False
        return hmac.compare_digest(a_bytes, b_bytes)

    def generate_code(self, length: int) -> str:
        return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))

    def sign_payload(self, secret: str, body: bytes) -> str:
        """Return 'sha256=<hex(hmac_sha256(secret, body))>'."""
        digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_PREFIX}{digest}"

    def verify_signature(self, secret: str, body: bytes, header: str | None) -> bool:
        """Return True if header carries a valid signature of body."""
        if not header or not header.startswith(SIGNATURE_PREFIX):
            return False
        return self.secure_compare(header.strip(), self.sign_payload(secret, body))
