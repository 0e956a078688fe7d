"""Index statistics.

The size estimate is a heuristic for dashboards, not memory accounting: a
fixed cost per document plus, for each term, its length and a fixed cost per
posting.
"""

from __future__ import annotations

from search_indexing.domain.model import IndexStats
from search_indexing.search.postings import PostingStore


DOCUMENT_BYTES = 500
POSTING_BYTES = 50


def estimate_index_size(store: PostingStore) -> int:
    """Return the approximate size of ``store`` in bytes."""

    size = len(store.documents) * DOCUMENT_BYTES
    for term, postings in store.inverted_index.items():
        size += len(term) + len(postings) * POSTING_BYTES
    return size


def compute_index_stats(store: PostingStore) -> IndexStats:
    return IndexStats(
        document_count=len(store.documents),
        term_count=len(store.inverted_index),
        last_updated=store.last_updated,
        index_size=estimate_index_size(store),
    )
