"""CLI for managing the RSS sources the fetch cycle ingests from."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from common.cli_helpers import setup_logging
from common.config import load_config
from feed_db.connection import configure, get_session, init_db
from ingest_articles.errors import IngestError
from ingest_articles.helpers import parse_ingest_articles_args
from ingest_articles.sources import (
    create_source,
    delete_source,
    list_sources,
    seed_sources,
    set_source_active,
)

load_dotenv()

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_ingest_articles_args(argv)

    config = load_config(args.config)
    configure(config.database)
    init_db()

    with get_session() as session:
        try:
            if args.command == "seed":
                seed_sources(session)
            elif args.command == "list":
                for source in list_sources(session, active_only=args.active_only):
                    status = "active" if source.is_active else "inactive"
                    print(f"{source.id}\t{status}\t{source.name}\t{source.url}")
            elif args.command == "add":
                source = create_source(session, args.name, args.url)
                print(source.id)
            elif args.command == "activate":
                set_source_active(session, args.source_id, True)
            elif args.command == "deactivate":
                set_source_active(session, args.source_id, False)
            elif args.command == "delete":
                delete_source(session, args.source_id)
        except IngestError as e:
            logger.error("%s (%s)", e.message, e.code)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
