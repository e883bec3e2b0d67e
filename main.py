from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from listing_watcher.config import Settings
from listing_watcher.exchanges import build_exchanges
from listing_watcher.logs import configure_logging
from listing_watcher.runner import run
from listing_watcher.state import JsonStateStore, init_state

log = logging.getLogger("listing_watcher")


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect new trading pairs on centralized exchanges.")
    parser.add_argument("--init", action="store_true", help="create missing state documents and exit")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        settings = Settings()
    except Exception as exc:  # noqa: BLE001
        logging.basicConfig(level=logging.INFO)
        logging.error("Failed to load configuration: %s", exc)
        return 1
    configure_logging(settings.log_dir, settings.log_level)

    if args.init:
        store = JsonStateStore(settings.snapshot_file, settings.listings_file, settings.status_file)
        created = init_state(store, [exchange.key for exchange in build_exchanges()])
        log.info("Initialized %d state document(s)", len(created))
        return 0

    try:
        asyncio.run(run(settings))
    except Exception as exc:  # noqa: BLE001
        log.error("✗ Script failed: %s", exc)
        return 1
    log.info("✓ Script completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
