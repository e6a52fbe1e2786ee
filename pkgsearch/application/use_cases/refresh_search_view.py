"""Rebuild the search materialized view. Run by an external scheduler, never from fetch."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pkgsearch.core.config import SearchConfig
from pkgsearch.shared.telemetry.tracing import traced

if TYPE_CHECKING:
    from pkgsearch.application.interfaces.repositories import ISearchRepository

logger = logging.getLogger(__name__)


class RefreshSearchViewUseCase:
    def __init__(
        self,
        search_repo: "ISearchRepository",
        config: SearchConfig | None = None,
    ) -> None:
        self.search_repo = search_repo
        self.config = config or SearchConfig()

    @traced("search.refresh_view")
    async def run(self) -> None:
        """Refresh the view named in config. Raises ViewRefreshException on failure."""
        started = time.monotonic()
        logger.info(
            "Refreshing materialized view %s (concurrently=%s)",
            self.config.view_name,
            self.config.refresh_concurrently,
        )
        await self.search_repo.refresh_view(
            self.config.view_name, self.config.refresh_concurrently
        )
        logger.info(
            "Refreshed materialized view %s in %.2fs",
            self.config.view_name,
            time.monotonic() - started,
        )
