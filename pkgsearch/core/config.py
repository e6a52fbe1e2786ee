"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. DATABASE_URL is validated when the engine is created
(startup), not at import time.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "pkgsearch"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (PostgreSQL only: search relies on ~*, ILIKE, levenshtein and materialized views)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Search
    search_default_page_size: int = 20
    search_max_page_size: int = 100
    search_max_terms: int = 20
    search_fuzzy_match_limit: int = 50
    search_view_name: str = "search"
    # CONCURRENTLY keeps readers on the old snapshot; plain refresh takes an exclusive lock.
    search_refresh_concurrently: bool = True
    # Bearer token for POST /api/v1/search/refresh. Unset disables the route (always 401).
    search_refresh_token: str | None = None

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_search_limits(self) -> "Settings":
        """Validate search limits are positive and consistent."""
        if self.search_default_page_size < 1:
            raise ValueError("SEARCH_DEFAULT_PAGE_SIZE must be >= 1")
        if self.search_max_page_size < self.search_default_page_size:
            raise ValueError(
                "SEARCH_MAX_PAGE_SIZE must be >= SEARCH_DEFAULT_PAGE_SIZE"
            )
        if self.search_max_terms < 1:
            raise ValueError("SEARCH_MAX_TERMS must be >= 1")
        if self.search_fuzzy_match_limit < 1:
            raise ValueError("SEARCH_FUZZY_MATCH_LIMIT must be >= 1")
        if not self.search_view_name.isidentifier():
            raise ValueError(
                f"SEARCH_VIEW_NAME must be a plain SQL identifier, got: {self.search_view_name!r}"
            )
        return self

    def search_config(self) -> "SearchConfig":
        """Return the search knobs as an explicit, immutable config struct."""
        return SearchConfig(
            view_name=self.search_view_name,
            max_terms=self.search_max_terms,
            fuzzy_match_limit=self.search_fuzzy_match_limit,
            refresh_concurrently=self.search_refresh_concurrently,
        )


@dataclass(frozen=True)
class SearchConfig:
    """Search settings passed to query builders and use cases at construction."""

    view_name: str = "search"
    max_terms: int = 20
    fuzzy_match_limit: int = 50
    refresh_concurrently: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    In tests, call get_settings.cache_clear() before overriding env vars so
    the next get_settings() uses the new values.
    """
    return Settings()
