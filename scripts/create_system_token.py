"""Issue a system access token from the command line (bootstrap, automation).

Usage:
    python -m scripts.create_system_token --max-calls 1000 --scope relay:notify \
        [--requester <user_id>] [--expires-days 90] [--description "..."]
The bearer is printed once; only its hash is stored.
"""

import argparse
import asyncio
import sys
from datetime import timedelta

from notifyhub.application.services import SystemTokenService
from notifyhub.core.config import get_settings
from notifyhub.domain.exceptions import NotifyHubException
from notifyhub.infrastructure.persistence.database import dispose_engine, session_scope
from notifyhub.infrastructure.persistence.repositories import (
    SystemTokenRepository,
    UserRepository,
)
from notifyhub.infrastructure.security import SecretCodec
from notifyhub.shared.utils.datetime import utc_now


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue a system access token")
    parser.add_argument("--max-calls", type=int, default=0, help="0 = unlimited")
    parser.add_argument("--scope", action="append", default=[], dest="scopes")
    parser.add_argument("--requester", default=None, help="Requesting user id")
    parser.add_argument("--requester-identifier", default=None)
    parser.add_argument("--expires-days", type=int, default=None)
    parser.add_argument("--description", default=None)
    return parser.parse_args(argv)


async def main(argv: list[str]) -> None:
    """Issue one token in a single transaction and print the bearer."""
    args = _parse_args(argv)
    settings = get_settings()
    expires_at = (
        utc_now() + timedelta(days=args.expires_days) if args.expires_days else None
    )
    try:
        async with session_scope() as session:
            service = SystemTokenService(
                SystemTokenRepository(session),
                UserRepository(session),
                SecretCodec(rounds=settings.secret_hash_rounds),
                prefix=settings.system_token_prefix,
                store_plaintext=settings.system_token_store_plaintext,
            )
            issued = await service.issue(
                max_calls=args.max_calls,
                expires_at=expires_at,
                requester_id=args.requester,
                description=args.description,
                scopes=args.scopes,
                requester_identifier=args.requester_identifier,
            )
    except NotifyHubException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        await dispose_engine()

    print(f"Created system token: {issued.token.id}")
    print(f"Scopes: {', '.join(issued.token.scopes) or '(unrestricted)'}")
    print(f"Token: {issued.raw_token}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
