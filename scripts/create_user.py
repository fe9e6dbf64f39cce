import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userstore.client import DEFAULT_SERVICE_URL, UserServiceClient, UserServiceError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user on a running user service")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Email address for the user")
    parser.add_argument(
        "--service-url",
        dest="service_url",
        default=None,
        help=f"Base URL of the service (defaults to USERSTORE_URL or {DEFAULT_SERVICE_URL})",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    service_url = args.service_url or os.getenv("USERSTORE_URL") or DEFAULT_SERVICE_URL

    with UserServiceClient(service_url) as client:
        try:
            user = client.create_user(args.name, args.email)
        except UserServiceError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    print(f"Created user {user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
