#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
"""
Script to issue a bearer token for an agency, business or worker during
local development.

Usage:
    JWT_SECRET=... python scripts/issue_dev_token.py agency 64b7f0c2e4b0a1a2b3c4d5e6
"""

import os
import sys
import argparse

# Add the parent directory to the path so we can import from api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.enums import OwnerKind
from services.auth import AuthService, TokenValidationError


def main(argv=None):
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("role", choices=[kind.value for kind in OwnerKind])
    parser.add_argument("owner_id", help="ID of the agency, business or worker document")
    parser.add_argument("--email")
    parser.add_argument("--name")
    parser.add_argument("--expires", type=int, help="Lifetime in seconds")
    args = parser.parse_args(argv)

    auth_service = AuthService(access_token_expires=args.expires)
    token = auth_service.issue_token(args.owner_id, OwnerKind(args.role), args.email, args.name)

    try:
        auth_service.validate_token(token)
    except TokenValidationError as e:
        print(f"Issued token failed validation: {e}", file=sys.stderr)
        return 1

    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
