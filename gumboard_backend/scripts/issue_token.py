"""Print a session token for a local user, for poking the API with curl."""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from gumboard.security import create_session_token  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id")
    parser.add_argument("--email")
    parser.add_argument("--expires-in", type=int, default=3600)
    args = parser.parse_args()
    print(create_session_token(args.user_id, email=args.email, expires_in=args.expires_in))


if __name__ == '__main__':
    main()
