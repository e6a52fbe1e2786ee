"""Rebuild the search materialized view. Run from cron or another scheduler.

Usage:
    python -m scripts.refresh_search_view
Exits with status 1 when DATABASE_URL is not PostgreSQL or the refresh fails.
SEARCH_VIEW_NAME and SEARCH_REFRESH_CONCURRENTLY come from config.
"""

import asyncio
import sys

import pkgsearch.infrastructure.persistence.database as database
from pkgsearch.application.use_cases.refresh_search_view import RefreshSearchViewUseCase
from pkgsearch.core.config import get_settings
from pkgsearch.domain.exceptions import SqlNotConfiguredException, ViewRefreshException
from pkgsearch.infrastructure.persistence.repositories import SearchRepository
from pkgsearch.shared.telemetry.logging import setup_logging


async def refresh() -> None:
    database.ensure_engine()
    assert database.AsyncSessionLocal is not None
    try:
        async with database.AsyncSessionLocal() as session:
            use_case = RefreshSearchViewUseCase(
                SearchRepository(session), get_settings().search_config()
            )
            await use_case.run()
    finally:
        await database.dispose_engine()


def main() -> int:
    setup_logging()
    try:
        asyncio.run(refresh())
    except SqlNotConfiguredException as e:
        print(f"{e.message} {e.details.get('reason', '')}".strip(), file=sys.stderr)
        return 1
    except ViewRefreshException as e:
        print(f"{e.message}: {e.details['reason']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
