"""Index registry: the single entry point for document sources and query consumers.

The registry owns ``name -> ManagedIndex``. Each managed index pairs a
PostingStore with a writer-preferring read/write lock: searches, stats and
exports share the lock, every mutation takes it exclusively. A separate mutex
guards the name map itself.

Unknown index names never raise. Mutators log and return, ``search`` returns
``[]``, ``get_index_stats`` and ``export_index`` return ``None``. Invalid
configs and malformed import payloads raise before any state changes.

Usage:
    registry = IndexRegistry()
    registry.create_index("profiles", IndexConfig(fields=["title", "tags"], weights={"title": 3}))
    registry.add_document("profiles", document)
    hits = registry.search("profiles", "golang", fields=["title"], fuzzy=True)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
import threading
from typing import Any

from pydantic import ValidationError

from search_indexing.domain.model import IndexConfig, IndexStats, ScoredDocument, SearchDocument, SearchOptions
from search_indexing.errors import IndexConfigurationError
from search_indexing.observability.context import index_context
from search_indexing.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_MUTATIONS,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    SEARCH_RESULTS,
    track_latency,
)
from search_indexing.observability.tracing import create_span
from search_indexing.search.locking import ReadWriteLock
from search_indexing.search.postings import PostingStore
from search_indexing.search.query import QueryEngine
from search_indexing.search.snapshot import export_snapshot, parse_snapshot, restore_store
from search_indexing.search.stats import compute_index_stats


logger = logging.getLogger(__name__)

DocumentInput = SearchDocument | Mapping[str, Any]
ConfigInput = IndexConfig | Mapping[str, Any]


@dataclass
class ManagedIndex:
    """A posting store and the lock that guards it."""

    store: PostingStore
    lock: ReadWriteLock = field(default_factory=ReadWriteLock)


def _coerce_config(config: ConfigInput) -> IndexConfig:
    if isinstance(config, IndexConfig):
        return config
    try:
        return IndexConfig.model_validate(config)
    except ValidationError as exc:
        raise IndexConfigurationError(f"Invalid index config: {exc}") from exc


def _coerce_document(document: DocumentInput) -> SearchDocument:
    if isinstance(document, SearchDocument):
        return document
    return SearchDocument.model_validate(document)


def _check_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise IndexConfigurationError(f"Index name must be a non-empty string, got {name!r}")
    return name


class IndexRegistry:
    """Owns every named index and exposes the indexing and query API."""

    def __init__(self, query_engine: QueryEngine | None = None) -> None:
        self._indexes: dict[str, ManagedIndex] = {}
        self._lock = threading.Lock()
        self.query_engine = query_engine or QueryEngine()

    def __len__(self) -> int:
        return len(self._indexes)

    def __contains__(self, name: object) -> bool:
        return name in self._indexes

    def _get(self, name: str) -> ManagedIndex | None:
        with self._lock:
            return self._indexes.get(name)

    def _install(self, name: str, store: PostingStore) -> None:
        """Register ``store`` under ``name``, replacing any existing entry.

        Calls already holding the old entry finish against the old store.
        """
        with self._lock:
            self._indexes[name] = ManagedIndex(store=store)
        INDEX_DOC_COUNT.labels(index=name).set(len(store))

    def _record_mutation(self, name: str, operation: str, store: PostingStore) -> None:
        INDEX_MUTATIONS.labels(index=name, operation=operation).inc()
        INDEX_DOC_COUNT.labels(index=name).set(len(store))

    def create_index(self, name: str, config: ConfigInput) -> None:
        """Create an empty index, replacing any index with the same name.

        Raises:
            IndexConfigurationError: ``name`` is blank or ``config`` is invalid.
        """
        _check_name(name)
        resolved = _coerce_config(config)
        replaced = name in self
        self._install(name, PostingStore(name, resolved))
        logger.info("Created index %s (fields=%s, replaced=%s)", name, list(resolved.fields), replaced)

    def delete_index(self, name: str) -> bool:
        """Remove an index entirely. Returns False when it did not exist."""
        with self._lock:
            removed = self._indexes.pop(name, None)
        if removed is None:
            return False
        INDEX_DOC_COUNT.labels(index=name).set(0)
        logger.info("Deleted index %s", name)
        return True

    def get_index_names(self) -> list[str]:
        with self._lock:
            return list(self._indexes)

    def has_index(self, name: str) -> bool:
        return name in self

    def add_document(self, name: str, document: DocumentInput) -> None:
        """Store and index one document; an existing id is replaced."""
        managed = self._get(name)
        if managed is None:
            logger.debug("add_document: index %s not found, ignoring", name)
            return
        resolved = _coerce_document(document)
        with managed.lock.write_locked():
            managed.store.add(resolved)
            self._record_mutation(name, "add", managed.store)

    def add_documents(self, name: str, documents: Iterable[DocumentInput]) -> None:
        """Add every document in one exclusive section."""
        managed = self._get(name)
        if managed is None:
            logger.debug("add_documents: index %s not found, ignoring", name)
            return
        resolved = [_coerce_document(document) for document in documents]
        with managed.lock.write_locked():
            count = managed.store.add_many(resolved)
            self._record_mutation(name, "add", managed.store)
        with index_context(name):
            logger.info("Indexed %d documents into %s", count, name)

    def update_document(self, name: str, document: DocumentInput) -> None:
        """Atomically replace a document; readers never see it missing."""
        managed = self._get(name)
        if managed is None:
            logger.debug("update_document: index %s not found, ignoring", name)
            return
        resolved = _coerce_document(document)
        with managed.lock.write_locked():
            managed.store.add(resolved)
            self._record_mutation(name, "update", managed.store)

    def remove_document(self, name: str, doc_id: str) -> None:
        managed = self._get(name)
        if managed is None:
            logger.debug("remove_document: index %s not found, ignoring", name)
            return
        with managed.lock.write_locked():
            if managed.store.remove(doc_id):
                self._record_mutation(name, "remove", managed.store)

    def search(
        self,
        name: str,
        query: str,
        *,
        fields: Sequence[str] | None = None,
        limit: int = 10,
        offset: int = 0,
        fuzzy: bool = False,
    ) -> list[SearchDocument]:
        """Return the documents matching ``query``, best first.

        Unknown indexes and queries without usable terms return ``[]``.
        """
        hits = self.search_with_scores(name, query, fields=fields, limit=limit, offset=offset, fuzzy=fuzzy)
        return [hit.document for hit in hits]

    def search_with_scores(
        self,
        name: str,
        query: str,
        *,
        fields: Sequence[str] | None = None,
        limit: int = 10,
        offset: int = 0,
        fuzzy: bool = False,
    ) -> list[ScoredDocument]:
        """Like ``search`` but keeps the relevance score of each hit."""
        managed = self._get(name)
        if managed is None:
            SEARCH_REQUESTS.labels(index="_unknown", status="not_found").inc()
            return []

        options = SearchOptions(
            fields=tuple(fields) if fields is not None else None,
            limit=limit,
            offset=offset,
            fuzzy=fuzzy,
        )

        attributes = {"search.index": name, "search.fuzzy": fuzzy, "search.limit": limit, "search.offset": offset}
        with (
            index_context(name),
            create_span("index.search", attributes=attributes) as span,
            track_latency(SEARCH_LATENCY, index=name, fuzzy=str(fuzzy).lower()),
            managed.lock.read_locked(),
        ):
            hits = self.query_engine.search(managed.store, query, options)
            span.set_attribute("search.results", len(hits))

        SEARCH_REQUESTS.labels(index=name, status="ok").inc()
        SEARCH_RESULTS.labels(index=name).observe(len(hits))
        return hits

    def get_index_stats(self, name: str) -> IndexStats | None:
        managed = self._get(name)
        if managed is None:
            return None
        with managed.lock.read_locked():
            return compute_index_stats(managed.store)

    def rebuild_index(self, name: str, config: ConfigInput | None = None) -> None:
        """Regenerate postings from the stored documents.

        Runs under the exclusive lock: searches block until the rebuild
        commits. Passing ``config`` switches the index to new tokenization or
        weighting rules.

        Raises:
            IndexConfigurationError: ``config`` is invalid (nothing changes).
        """
        resolved = _coerce_config(config) if config is not None else None
        managed = self._get(name)
        if managed is None:
            logger.debug("rebuild_index: index %s not found, ignoring", name)
            return
        with (
            index_context(name),
            create_span("index.rebuild", attributes={"search.index": name}),
            managed.lock.write_locked(),
        ):
            managed.store.rebuild(resolved)
            self._record_mutation(name, "rebuild", managed.store)
            logger.info(
                "Rebuilt index %s: %d documents, %d terms",
                name,
                len(managed.store),
                len(managed.store.inverted_index),
            )

    def clear_index(self, name: str) -> None:
        """Drop all documents and postings but keep the config."""
        managed = self._get(name)
        if managed is None:
            logger.debug("clear_index: index %s not found, ignoring", name)
            return
        with managed.lock.write_locked():
            managed.store.clear()
            self._record_mutation(name, "clear", managed.store)

    def export_index(self, name: str) -> str | None:
        """Serialize an index to a JSON snapshot, or None when unknown."""
        managed = self._get(name)
        if managed is None:
            return None
        with create_span("index.export", attributes={"search.index": name}), managed.lock.read_locked():
            return export_snapshot(managed.store)

    def import_index(self, name: str, payload: str | bytes) -> None:
        """Create or destructively replace ``name`` from a snapshot.

        The payload is fully parsed and the new store fully built before it
        is installed, so a bad payload leaves the registry unchanged.

        Raises:
            SnapshotParseError: The payload is malformed.
            IndexConfigurationError: ``name`` is blank.
        """
        _check_name(name)
        with index_context(name), create_span("index.import", attributes={"search.index": name}):
            snapshot = parse_snapshot(payload)
            store = restore_store(name, snapshot)
            self._install(name, store)
            INDEX_MUTATIONS.labels(index=name, operation="import").inc()
            logger.info("Imported index %s with %d documents", name, len(store))
