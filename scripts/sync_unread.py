"""
This script fetches unread entries from Miniflux and summarizes the eligible ones.
It is the periodic counterpart of the webhook: run it from cron to catch entries that arrived while the relay was down.
Entries that already carry a summary block are skipped by the eligibility rules, so repeated runs are safe.
To run this script, use the command: `python scripts/sync_unread.py [--limit N]` from the root of the project.
"""

import argparse
import asyncio
import sys

from miniflux_summary.config import load_settings
from miniflux_summary.core.exceptions import ConfigurationError, FetchEntriesError
from miniflux_summary.core.use_cases import EntryPipeline

from miniflux_summary.utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="scripts.log")


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize unread Miniflux entries")
    parser.add_argument("--limit", type=positive_int, help="Maximum number of unread entries to fetch (default: SYNC_LIMIT)")
    return parser.parse_args(argv)


async def sync(limit=None) -> int:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 2

    pipeline = EntryPipeline.from_settings(settings)
    try:
        logger.info("🔍 Searching for unread entries...")
        report = await pipeline.sync_unread(limit)
    except FetchEntriesError as e:
        logger.error(f"❌ Cannot fetch unread entries from Miniflux: {e}")
        return 1
    finally:
        pipeline.close()

    counts = report.counts()
    logger.info(
        f"✅ Sync complete! {counts['summarized']} summarized, "
        f"{counts['skipped']} skipped, {counts['failed']} failed."
    )
    return 0


if __name__ == "__main__":
    args = parse_args()
    sys.exit(asyncio.run(sync(args.limit)))
