#!/usr/bin/env python3
"""
GitHub OAuth login example -- server launcher.

Usage:
  python main.py
  python main.py --port 9000
  python main.py --host 0.0.0.0 --reload

Environment variables (or .env):
  GITHUB_CLIENT_ID      OAuth app client ID. Required.
  GITHUB_CLIENT_SECRET  OAuth app client secret. Required.
  SESSION_SECRET        Cookie signing key, at least 32 characters. Required
                        unless DEBUG=true, which generates a throwaway key.
  REDIRECT_URL          Callback URL registered with the OAuth app.
                        Default: http://localhost:8080/callback

Configuration is validated before uvicorn starts; a missing credential exits
with status 1 and a single CRITICAL log line.
"""

import argparse
import logging
import sys

import uvicorn

from core.config import ConfigError, get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("ghlogin.main")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the GitHub OAuth login example server.",
    )
    parser.add_argument("--host", help="Bind address (default: HOST setting, 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Bind port (default: PORT setting, 8080)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.critical("%s", e)
        return 1

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Server starting on %s:%d", host, port)
    uvicorn.run(
        "asgi:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
