"""authrelay entry point.

Examples:
  authrelay                          Start the broker with settings from the environment
  authrelay --port 8080              Override the listen port
  authrelay --dev                    Auto-reload on code changes
"""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from pydantic import ValidationError

from authrelay.config import LOG_LEVELS, get_settings
from authrelay.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return get_version("authrelay")
    except PackageNotFoundError:
        return "unknown"


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="authrelay",
        description="OAuth2 PKCE broker for sandboxed plugin hosts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--host", type=str, default=None, help="Host to bind (default: settings)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to bind (default: settings)")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override AUTHRELAY_LOG_LEVEL",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_package_version()}")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        setup_logging(level="INFO")
        logger.error("Invalid configuration:\n%s", exc)
        return 2

    setup_logging(level=args.log_level or settings.log_level)

    from authrelay.api.serve import run_server

    run_server(settings, host=args.host, port=args.port, dev=args.dev)
    return 0


if __name__ == "__main__":
    sys.exit(main())
