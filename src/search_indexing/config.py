"""Centralized configuration for the search indexing engine using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from search_indexing.search.query import FuzzyLimits


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``SEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    service_name: str = Field(default="search-indexing", description="Service name reported in traces and logs")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Fuzzy query bounds
    fuzzy_max_distance: int = Field(default=2, ge=0, le=5, description="Maximum edit distance for fuzzy matches")
    fuzzy_max_query_terms: int = Field(
        default=8, ge=1, description="Query terms expanded by fuzzy matching; later terms match exactly only"
    )
    fuzzy_max_vocabulary: int = Field(
        default=100_000, ge=1, description="Vocabulary terms scanned per fuzzy query term"
    )

    # Search paging
    default_search_limit: int = Field(default=10, ge=1, description="Results per page when no limit is given")
    max_search_limit: int = Field(default=100, ge=1, description="Largest page size accepted over HTTP")

    # Startup
    bootstrap_default_indexes: bool = Field(
        default=True, description="Create the built-in 'profiles' and 'repositories' indexes at startup"
    )

    # HTTP server
    http_host: str = Field(default="127.0.0.1", description="HTTP bind host")
    http_port: int = Field(default=8080, ge=1, le=65535, description="HTTP bind port")

    @model_validator(mode="after")
    def _check_limits(self) -> "Settings":
        if self.default_search_limit > self.max_search_limit:
            raise ValueError(
                f"SEARCH_DEFAULT_SEARCH_LIMIT ({self.default_search_limit}) must not exceed "
                f"SEARCH_MAX_SEARCH_LIMIT ({self.max_search_limit})"
            )
        return self

    def fuzzy_limits(self) -> FuzzyLimits:
        """Return the fuzzy cost bounds for the query engine."""
        return FuzzyLimits(
            max_distance=self.fuzzy_max_distance,
            max_query_terms=self.fuzzy_max_query_terms,
            max_vocabulary=self.fuzzy_max_vocabulary,
        )
