"""wechat-connect entry point.

Loads settings from the environment (and ``.env``), validates the WeChat
credentials and starts the HTTP server.
"""

import argparse
import logging
import os
import sys

from wechat_connect import __version__
from wechat_connect.config import REQUIRED_ENV_HELP, Settings
from wechat_connect.errors import ConfigError
from wechat_connect.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wechat-connect",
        description="WeChat OAuth2 login and official-account webhook server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wechat-connect                     Start the server using environment settings
  wechat-connect --dev               Mock WeChat login with a fixed test profile
  wechat-connect --port 8080         Override SERVER_PORT
  wechat-connect --check-config      Validate configuration and exit
""",
    )
    parser.add_argument("--host", help="Bind address (overrides SERVER_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (overrides SERVER_PORT)")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode: mock login flow, no real WeChat callback (sets DEV_MODE)",
    )
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate configuration and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Exported rather than passed so --reload worker processes see them too.
    if args.dev:
        os.environ["DEV_MODE"] = "true"
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level

    try:
        settings = Settings.load()
    except ValueError as exc:
        print(f"Failed to load configuration: {exc}", file=sys.stderr)
        return 1

    updates = {}
    if args.host:
        updates["server_host"] = args.host
    if args.port:
        updates["server_port"] = args.port
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(settings.log_level)

    try:
        settings.validate_required()
    except ConfigError as exc:
        print(f"Configuration validation failed: {exc}", file=sys.stderr)
        print(REQUIRED_ENV_HELP, file=sys.stderr)
        return 1

    if args.check_config:
        print(f"Configuration OK (app id {settings.wechat_app_id}, dev mode {settings.dev_mode})")
        return 0

    from wechat_connect.api.serve import run_server

    run_server(settings, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
