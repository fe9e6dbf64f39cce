"""Command-line interface for the user record service."""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Sequence

from userstore.client import DEFAULT_SERVICE_URL, UserServiceClient, UserServiceError
from userstore.config import ServiceConfig, load_config

logger = logging.getLogger("userstore.main")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="In-memory user record service")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides the config file)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (overrides the config file)")
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (defaults to USERSTORE_CONFIG or config/userstore.yaml)",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        choices=["critical", "error", "warning", "info", "debug"],
        help="Logging verbosity",
    )

    users_parser = subparsers.add_parser("users", help="Manage users on a running service")
    users_parser.add_argument(
        "--service-url",
        default=DEFAULT_SERVICE_URL,
        help=f"Base URL of the running service (default: {DEFAULT_SERVICE_URL})",
    )
    actions = users_parser.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="List all users")

    get_parser = actions.add_parser("get", help="Show a single user")
    get_parser.add_argument("user_id")

    create_parser = actions.add_parser("create", help="Create a user")
    create_parser.add_argument("name")
    create_parser.add_argument("email")

    update_parser = actions.add_parser("update", help="Replace a user's name and email")
    update_parser.add_argument("user_id")
    update_parser.add_argument("name")
    update_parser.add_argument("email")

    delete_parser = actions.add_parser("delete", help="Delete a user")
    delete_parser.add_argument("user_id")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_serve_config(args: argparse.Namespace) -> ServiceConfig:
    config = load_config(args.config)
    return ServiceConfig.from_dict(
        {
            "host": args.host or config.host,
            "port": args.port if args.port is not None else config.port,
            "log_level": args.log_level or config.log_level,
        }
    )


def _serve(config: ServiceConfig) -> None:
    from userstore.service import create_app
    import uvicorn

    logger.info("Starting user service on http://%s:%s", config.host, config.port)

    app = create_app()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


def _run_users_command(args: argparse.Namespace) -> int:
    try:
        client = UserServiceClient(args.service_url)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    with client:
        try:
            if args.action == "list":
                result: object = [user.model_dump() for user in client.list_users()]
            elif args.action == "get":
                result = client.get_user(args.user_id).model_dump()
            elif args.action == "create":
                result = client.create_user(args.name, args.email).model_dump()
            elif args.action == "update":
                result = client.update_user(args.user_id, args.name, args.email).model_dump()
            elif args.action == "delete":
                result = client.delete_user(args.user_id).model_dump()
            else:  # pragma: no cover - argparse restricts the choices
                raise SystemExit(f"Unknown action: {args.action}")
        except UserServiceError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    print(json.dumps(result, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "serve":
        config = _resolve_serve_config(args)
        logging.basicConfig(level=config.logging_level, format=_LOG_FORMAT)
        _serve(config)
        return 0

    logging.basicConfig(level=logging.WARNING, format=_LOG_FORMAT)
    return _run_users_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
