"""Domain models for documents, index configuration and query results."""

from search_indexing.domain.model import (
    DEFAULT_STOP_WORDS,
    SNAPSHOT_FORMAT_VERSION,
    DocumentType,
    IndexConfig,
    IndexSnapshot,
    IndexStats,
    MetadataValue,
    ScoredDocument,
    SearchDocument,
    SearchOptions,
)


__all__ = [
    "DEFAULT_STOP_WORDS",
    "SNAPSHOT_FORMAT_VERSION",
    "DocumentType",
    "IndexConfig",
    "IndexSnapshot",
    "IndexStats",
    "MetadataValue",
    "ScoredDocument",
    "SearchDocument",
    "SearchOptions",
]
