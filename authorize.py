# authorize.py
"""
One-time Drive provisioning: run before starting the server.

    python authorize.py            # interactive, skipped if a token exists
    python authorize.py --force    # discard the stored token and re-authorize
"""
import argparse
import asyncio
import logging
import os
import sys
from config.container import breaker_policy, build_bootstrap
from config.settings import settings
from core.circuit_breaker import BreakerRegistry, CallFailed
from util.enums import Color
from util.logger import init_logger

logger = logging.getLogger(__name__)


def _prompt_for_code(auth_url: str) -> str:
    print("-" * 65)
    print("STEP 1: Authorize this application by visiting this URL:")
    print(f"{Color.BLUE}{auth_url}{Color.RESET}")
    print("-" * 65)
    return input("STEP 2: Enter the code from that page here: ")


async def _run(force: bool) -> int:
    if force and os.path.exists(settings.GOOGLE_TOKEN_PATH):
        os.remove(settings.GOOGLE_TOKEN_PATH)
        logger.info("authorize.token.discarded path=%s", settings.GOOGLE_TOKEN_PATH)

    bootstrap = build_bootstrap(BreakerRegistry(breaker_policy()))
    try:
        await bootstrap.acquire(_prompt_for_code)
    except CallFailed as e:
        print(f"{Color.RED}Authorization failed ({e.reason}): {e}{Color.RESET}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"{Color.RED}Cannot read client secrets: {e}{Color.RESET}", file=sys.stderr)
        return 1
    print(f"{Color.GREEN}Token saved to {settings.GOOGLE_TOKEN_PATH}{Color.RESET}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Provision Google Drive credentials.")
    parser.add_argument("--force", action="store_true", help="re-authorize even if a token exists")
    args = parser.parse_args(argv)
    init_logger()
    return asyncio.run(_run(args.force))


if __name__ == "__main__":
    sys.exit(main())
