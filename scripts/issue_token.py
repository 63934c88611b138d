"""Mint a session token for local testing of protected routes.

Skips the MFA step entirely, so it only works with the JWT_SECRET of a
development environment.
"""

import argparse
import os
import sys
from datetime import timedelta

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mfa_bridge.config import get_settings
from mfa_bridge.services.token_service import SessionClaims, TokenCodec


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--subject", default=settings.DEMO_USER_ID)
    parser.add_argument("--email", default=settings.DEMO_USER_EMAIL)
    parser.add_argument("--minutes", type=int, default=settings.SESSION_TOKEN_TTL_MINUTES)
    args = parser.parse_args()

    if settings.ENVIRONMENT == "production":
        print("ERROR: refusing to mint tokens with production settings")
        sys.exit(1)

    codec = TokenCodec(settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    token = codec.issue(SessionClaims(subject=args.subject, contact=args.email), ttl=timedelta(minutes=args.minutes))
    print(token)


if __name__ == "__main__":
    main()
