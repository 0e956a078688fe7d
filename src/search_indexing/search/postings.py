"""Posting store: documents plus inverted and per-field postings for one index.

Documents get a stable integer handle when first stored. Posting lists are
sorted ``array("I")`` vectors of handles, which keeps them compact and makes
the emptiness check trivial. A forward map (handle -> field -> terms) lets
removal touch only the buckets a document actually appears in.

The store itself is not thread-safe; ``IndexRegistry`` wraps every call in the
index's read/write lock.
"""

from __future__ import annotations

from array import array
from bisect import bisect_left
from collections.abc import Iterable, Iterator
from datetime import datetime
import logging

from search_indexing.domain.model import IndexConfig, SearchDocument, utc_now
from search_indexing.errors import IndexInvariantError
from search_indexing.search.analyzers import AnalyzerPipeline, build_analyzer
from search_indexing.search.fields import get_field_value


logger = logging.getLogger(__name__)

Postings = array
TermBuckets = dict[str, Postings]


def _add_handle(buckets: TermBuckets, term: str, handle: int) -> None:
    postings = buckets.get(term)
    if postings is None:
        buckets[term] = array("I", [handle])
        return
    position = bisect_left(postings, handle)
    if position == len(postings) or postings[position] != handle:
        postings.insert(position, handle)


def _discard_handle(buckets: TermBuckets, term: str, handle: int) -> None:
    postings = buckets.get(term)
    if postings is None:
        return
    position = bisect_left(postings, handle)
    if position < len(postings) and postings[position] == handle:
        del postings[position]
    if not postings:
        del buckets[term]


class PostingStore:
    """In-memory search index for one name.

    Attributes:
        name: Registry name of the index.
        config: Active tokenization and weighting rules.
        documents: Stored documents keyed by id, in insertion order.
        inverted_index: term -> sorted handles of documents containing it in any field.
        field_index: field -> term -> sorted handles.
        last_updated: UTC time of the last mutation.
    """

    def __init__(self, name: str, config: IndexConfig) -> None:
        self.name = name
        self.config = config
        self.documents: dict[str, SearchDocument] = {}
        self.inverted_index: TermBuckets = {}
        self.field_index: dict[str, TermBuckets] = {field: {} for field in config.fields}
        self.last_updated: datetime = utc_now()
        self._analyzer: AnalyzerPipeline = build_analyzer(config)
        self._handles: dict[str, int] = {}
        self._ids: dict[int, str] = {}
        self._forward: dict[int, dict[str, frozenset[str]]] = {}
        self._next_handle = 0

    def __len__(self) -> int:
        return len(self.documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.documents

    def add(self, document: SearchDocument) -> bool:
        """Store ``document`` and index its configured fields.

        A document with an existing id replaces the old one; the old content's
        postings are purged first.

        Returns:
            True when an existing document was replaced.
        """
        handle = self._handles.get(document.id)
        replaced = handle is not None
        if handle is None:
            handle = self._allocate(document.id)
        else:
            self._unindex(handle)

        self.documents[document.id] = document
        self._index(handle, document)
        self.touch()
        return replaced

    def add_many(self, documents: Iterable[SearchDocument]) -> int:
        count = 0
        for document in documents:
            self.add(document)
            count += 1
        return count

    def remove(self, doc_id: str) -> bool:
        """Remove a document and every posting that references it.

        Returns:
            False when the id is unknown (nothing changes).
        """
        handle = self._handles.pop(doc_id, None)
        if handle is None:
            return False
        self._unindex(handle)
        del self._ids[handle]
        del self.documents[doc_id]
        self.touch()
        return True

    def rebuild(self, config: IndexConfig | None = None) -> None:
        """Regenerate all postings from the stored documents.

        ``config`` replaces the active config first, which is how tokenization
        changes reach documents that are already indexed. The new structures
        are built aside and swapped in, so a failure leaves the store intact.
        """
        active = config or self.config
        fresh = PostingStore(self.name, active)
        fresh.add_many(self.documents.values())

        self.config = active
        self._analyzer = fresh._analyzer
        self.documents = fresh.documents
        self.inverted_index = fresh.inverted_index
        self.field_index = fresh.field_index
        self._handles = fresh._handles
        self._ids = fresh._ids
        self._forward = fresh._forward
        self._next_handle = fresh._next_handle
        self.touch()
        logger.debug("Rebuilt index %s: %d documents, %d terms", self.name, len(self.documents), len(self.inverted_index))

    def clear(self) -> None:
        """Drop every document and posting; the config is kept."""
        self.documents = {}
        self.inverted_index = {}
        self.field_index = {field: {} for field in self.config.fields}
        self._handles = {}
        self._ids = {}
        self._forward = {}
        self.touch()

    def touch(self, when: datetime | None = None) -> None:
        self.last_updated = when or utc_now()

    def tokenize(self, text: str) -> list[str]:
        return self._analyzer(text)

    def vocabulary(self) -> Iterator[str]:
        """Iterate the distinct terms of the inverted index."""
        return iter(self.inverted_index)

    def doc_id(self, handle: int) -> str | None:
        return self._ids.get(handle)

    def resolve(self, handle: int) -> SearchDocument | None:
        doc_id = self._ids.get(handle)
        if doc_id is None:
            return None
        return self.documents.get(doc_id)

    def postings(self, term: str) -> list[str]:
        """Return the ids of documents containing ``term`` in any field."""
        return self._to_ids(self.inverted_index.get(term, ()))

    def field_postings(self, field: str, term: str) -> list[str]:
        """Return the ids of documents containing ``term`` in ``field``."""
        return self._to_ids(self.field_index.get(field, {}).get(term, ()))

    def terms_for(self, doc_id: str) -> dict[str, frozenset[str]]:
        """Return the indexed terms of a document, per field."""
        handle = self._handles.get(doc_id)
        if handle is None:
            return {}
        return dict(self._forward.get(handle, {}))

    def verify(self) -> None:
        """Check posting invariants.

        Raises:
            IndexInvariantError: A posting references a missing document, a
                term bucket is empty, or the handle maps disagree.
        """
        if set(self._handles) != set(self.documents):
            raise IndexInvariantError(f"Index '{self.name}': handle map does not match stored documents")

        buckets: list[tuple[str, str, Postings]] = [("*", term, p) for term, p in self.inverted_index.items()]
        for field, terms in self.field_index.items():
            buckets.extend((field, term, p) for term, p in terms.items())

        for field, term, postings in buckets:
            if not postings:
                raise IndexInvariantError(f"Index '{self.name}': empty bucket for term {term!r} in {field}")
            for handle in postings:
                if handle not in self._ids:
                    raise IndexInvariantError(
                        f"Index '{self.name}': term {term!r} in {field} references deleted handle {handle}"
                    )

    def _allocate(self, doc_id: str) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._handles[doc_id] = handle
        self._ids[handle] = doc_id
        return handle

    def _index(self, handle: int, document: SearchDocument) -> None:
        per_field: dict[str, frozenset[str]] = {}
        union: set[str] = set()
        for field in self.config.fields:
            terms = frozenset(self._analyzer(get_field_value(document, field)))
            if not terms:
                continue
            per_field[field] = terms
            union.update(terms)
            field_buckets = self.field_index.setdefault(field, {})
            for term in terms:
                _add_handle(field_buckets, term, handle)

        for term in union:
            _add_handle(self.inverted_index, term, handle)
        self._forward[handle] = per_field

    def _unindex(self, handle: int) -> None:
        per_field = self._forward.pop(handle, {})
        union: set[str] = set()
        for field, terms in per_field.items():
            field_buckets = self.field_index.get(field)
            union.update(terms)
            if field_buckets is None:
                continue
            for term in terms:
                _discard_handle(field_buckets, term, handle)

        for term in union:
            _discard_handle(self.inverted_index, term, handle)

    def _to_ids(self, postings: Iterable[int]) -> list[str]:
        return [self._ids[handle] for handle in postings if handle in self._ids]
