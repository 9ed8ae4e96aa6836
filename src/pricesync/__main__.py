"""Command line entry point: ``python -m pricesync``."""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from .config.errors import ConfigurationError
from .config.settings import SyncSettings
from .runtime_profile import PROFILES
from .service_runner import SERVICE_NAME, run_async_service, run_price_sync


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=SERVICE_NAME, description="Poll and cache LME metal prices.")
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        help="Runtime profile overriding PRICESYNC_PROFILE",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        settings = SyncSettings.from_env()
    except ConfigurationError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return 2

    if args.profile:
        settings = replace(settings, profile_name=args.profile)

    run_async_service(lambda: run_price_sync(settings), service_name=SERVICE_NAME)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
