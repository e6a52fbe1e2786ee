"""Search repository. Reads the search materialized view and refreshes it."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pkgsearch.application.dtos.search import SearchRecord
from pkgsearch.application.query.fragment import SearchQuery
from pkgsearch.domain.exceptions import SearchUnavailableException, ViewRefreshException
from pkgsearch.infrastructure.persistence.search_compiler import PostgresCompiler

logger = logging.getLogger(__name__)


class SearchRepository:
    """Executes compiled search statements on one request-scoped session."""

    def __init__(self, db: AsyncSession, compiler: PostgresCompiler | None = None) -> None:
        self.db = db
        self.compiler = compiler or PostgresCompiler()

    async def fetch_records(self, query: SearchQuery) -> list[SearchRecord]:
        """Run the combined statement and decode rows into SearchRecord.

        Rows with a missing or unknown match_type are dropped (logged at debug).
        """
        stmt = self.compiler.compile(query)
        try:
            result = await self.db.execute(stmt)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.exception("Search statement failed")
            raise SearchUnavailableException(type(e).__name__) from e

        records: list[SearchRecord] = []
        for row in rows:
            record = SearchRecord.from_row(row)
            if record is None:
                logger.debug("Skipping search row without a valid match_type: %r", dict(row))
                continue
            records.append(record)
        return records

    async def refresh_view(self, view_name: str, concurrently: bool) -> None:
        """REFRESH MATERIALIZED VIEW in its own transaction (commit on success, rollback on error)."""
        stmt = self.compiler.refresh_view_statement(view_name, concurrently)
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Refreshing materialized view %s failed", view_name)
            raise ViewRefreshException(view_name, type(e).__name__) from e
