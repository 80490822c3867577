"""User JWTs (sub = user id).

Interactive callers arrive with a JWT minted by the registration service.
This service only verifies them; create_access_token is used by scripts and
tests to mint one with the same key.
"""

from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from notifyhub.core.config import get_settings
from notifyhub.shared.utils.datetime import utc_now


def create_access_token(
    user_id: str,
    extra_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a JWT for user_id, valid for expires_delta (default from settings)."""
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {**(extra_claims or {}), "sub": user_id, "exp": utc_now() + ttl}
    return cast(
        str,
        jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode a user JWT and return its claims.

    A system access token is never a JWT and is refused before decoding.

    Raises:
        ValueError: malformed, expired, wrongly signed, or missing exp/sub.
    """
    settings = get_settings()
    if token.startswith(settings.system_token_prefix):
        raise ValueError("System access tokens are not accepted here")
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not claims.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return claims
