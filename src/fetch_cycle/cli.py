"""CLI for running the scheduled fetch cycle."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from common.cli_helpers import format_summary, setup_logging
from common.config import load_config
from feed_db.connection import configure, get_session, init_db
from fetch_cycle.helpers import parse_fetch_cycle_args
from fetch_cycle.run_fetch_cycle import run_configured_cycle
from ingest_articles.sources import seed_sources

load_dotenv()

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_fetch_cycle_args(argv)

    config = load_config(args.config)
    if args.max_sources:
        config.cycle.max_sources_per_run = args.max_sources
    configure(config.database)
    init_db()

    with get_session() as session:
        if args.seed:
            seed_sources(session)

        cycles = 0
        while True:
            cycles += 1
            summary = run_configured_cycle(session, config)
            print(format_summary(summary))

            if not args.until_done or not summary.has_more_work:
                break
            if cycles >= args.max_cycles:
                logger.warning("Stopping after %d cycles with work remaining", cycles)
                break

    return 1 if summary.processed and summary.failed == summary.processed else 0


if __name__ == "__main__":
    sys.exit(main())
