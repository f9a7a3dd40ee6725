#!/usr/bin/env python
"""
Issue a development bearer token.

Usage:
    python scripts/issue_token.py <username> [authority ...]
"""
import sys

from meco.core.config import get_settings
from meco.security.jwt_provider import JwtTokenProvider


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    username, authorities = sys.argv[1], sys.argv[2:] or ["ROLE_USER"]
    settings = get_settings()
    token = JwtTokenProvider.from_settings(settings).create_token(username, authorities)
    print("=== Development Token ===")
    print(f"Subject     : {username}")
    print(f"Authorities : {', '.join(authorities)}")
    print(f"Expires in  : {settings.jwt_validity_minutes} minutes")
    print(f"Header      : Authorization: Bearer {token}")


if __name__ == "__main__":
    main()
