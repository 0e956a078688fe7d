"""In-memory full-text indexing for profiles, repositories, users and skills."""

from search_indexing.defaults import create_default_registry
from search_indexing.domain import IndexConfig, IndexStats, ScoredDocument, SearchDocument, SearchOptions
from search_indexing.errors import IndexConfigurationError, IndexInvariantError, SearchIndexError, SnapshotParseError
from search_indexing.registry import IndexRegistry


__all__ = [
    "IndexConfig",
    "IndexConfigurationError",
    "IndexInvariantError",
    "IndexRegistry",
    "IndexStats",
    "ScoredDocument",
    "SearchDocument",
    "SearchIndexError",
    "SearchOptions",
    "SnapshotParseError",
    "create_default_registry",
]
