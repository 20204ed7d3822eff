"""One-shot schema setup for ``diet_logs``.

Run manually, separate from the server::

    python -m diet_tracker.migrate [--database-url URL] [--echo]

Both statements are ``IF NOT EXISTS`` so re-running is harmless. Exits 1 if
anything fails.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from sqlalchemy.schema import CreateIndex, CreateTable
from sqlalchemy.ext.asyncio import create_async_engine

from diet_tracker.core.db import normalize_database_url, safe_url
from diet_tracker.core.logging import configure_logging
from diet_tracker.core.settings import get_settings
from diet_tracker.models.diet_log import DietLog

logger = logging.getLogger("diet_tracker.migrate")


async def run_migration(database_url: str, echo: bool = False) -> None:
    u, connect_args = normalize_database_url(database_url)
    logger.info("Running migration against %s", safe_url(u))

    engine = create_async_engine(u, connect_args=connect_args, echo=echo)
    table = DietLog.__table__
    try:
        async with engine.begin() as conn:
            await conn.execute(CreateTable(table, if_not_exists=True))
            for index in sorted(table.indexes, key=lambda ix: ix.name):
                await conn.execute(CreateIndex(index, if_not_exists=True))
    finally:
        await engine.dispose()

    logger.info('Migration completed successfully, table "%s" is in place', table.name)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the diet_logs table if it does not exist.")
    parser.add_argument("--database-url", help="Overrides DATABASE_URL.")
    parser.add_argument("--echo", action="store_true", help="Echo emitted SQL.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    try:
        database_url = args.database_url or get_settings().database.url
        asyncio.run(run_migration(database_url, echo=args.echo))
    except Exception:
        logger.exception("Migration failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
