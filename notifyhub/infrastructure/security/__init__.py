"""Security: JWT verification, secret hashing and signatures."""

from notifyhub.infrastructure.security.jwt import create_access_token, verify_token
from notifyhub.infrastructure.security.secret_codec import SecretCodec

__all__ = [
    "SecretCodec",
    "create_access_token",
    "verify_token",
]
