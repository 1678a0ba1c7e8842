import argparse
import os
import sys
from datetime import timedelta

# make `app` importable when run from backend/scripts
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from app.core.security import DEFAULT_ROLE, create_access_token


def main(argv=None):
    parser = argparse.ArgumentParser(description="Mint an access token for the admin dashboard")
    parser.add_argument("subject", help="user id or email the token is issued to")
    parser.add_argument("--role", default=DEFAULT_ROLE)
    parser.add_argument("--minutes", type=int, default=None, help="lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES")
    args = parser.parse_args(argv)

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.subject, role=args.role, expires_delta=expires))


if __name__ == "__main__":
    main()
