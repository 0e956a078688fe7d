"""Exception hierarchy for the search indexing engine.

Unknown index names are not errors: mutators silently do nothing and readers
return empty values. Only the write path raises.
"""


class SearchIndexError(Exception):
    """Base class for all search indexing errors."""


class IndexConfigurationError(SearchIndexError, ValueError):
    """Raised when an index name or IndexConfig fails validation."""


class SnapshotParseError(SearchIndexError, ValueError):
    """Raised when an import payload cannot be parsed or validated."""


class IndexInvariantError(SearchIndexError, RuntimeError):
    """Raised when posting structures disagree with the stored documents."""
