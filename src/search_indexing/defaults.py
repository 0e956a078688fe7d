"""Built-in index definitions and registry bootstrap."""

from __future__ import annotations

import logging

from search_indexing.config import Settings
from search_indexing.domain.model import IndexConfig
from search_indexing.registry import IndexRegistry
from search_indexing.search.query import QueryEngine


logger = logging.getLogger(__name__)


PROFILES_CONFIG = IndexConfig(
    fields=("title", "description", "tags", "skills"),
    weights={"title": 3, "tags": 2, "skills": 2, "description": 1},
)

REPOSITORIES_CONFIG = IndexConfig(
    fields=("name", "description", "language", "topics"),
    weights={"name": 3, "topics": 2, "language": 2, "description": 1},
)

DEFAULT_INDEXES: dict[str, IndexConfig] = {
    "profiles": PROFILES_CONFIG,
    "repositories": REPOSITORIES_CONFIG,
}


def create_default_registry(settings: Settings | None = None) -> IndexRegistry:
    """Build a registry wired to ``settings``.

    The ``profiles`` and ``repositories`` indexes are created unless
    ``bootstrap_default_indexes`` is off.
    """
    settings = settings or Settings()
    registry = IndexRegistry(query_engine=QueryEngine(settings.fuzzy_limits()))
    if settings.bootstrap_default_indexes:
        for name, config in DEFAULT_INDEXES.items():
            registry.create_index(name, config)
    logger.info("Registry ready with indexes: %s", registry.get_index_names())
    return registry
