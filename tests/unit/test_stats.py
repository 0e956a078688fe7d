"""Unit tests for index statistics."""

import pytest

from search_indexing.domain import IndexConfig
from search_indexing.search.postings import PostingStore
from search_indexing.search.stats import DOCUMENT_BYTES, POSTING_BYTES, compute_index_stats, estimate_index_size


@pytest.mark.unit
class TestIndexStats:
    def test_empty_store(self):
        store = PostingStore("empty", IndexConfig(fields=["title"]))

        stats = compute_index_stats(store)

        assert stats.document_count == 0
        assert stats.term_count == 0
        assert stats.index_size == 0
        assert stats.last_updated == store.last_updated

    def test_counts_and_size(self, make_doc):
        store = PostingStore("titles", IndexConfig(fields=["title"]))
        store.add(make_doc("a", title="go rust"))
        store.add(make_doc("b", title="go"))

        stats = compute_index_stats(store)

        assert stats.document_count == 2
        assert stats.term_count == 2
        # "go" has two postings, "rust" one
        expected = 2 * DOCUMENT_BYTES + (2 + 2 * POSTING_BYTES) + (4 + POSTING_BYTES)
        assert stats.index_size == expected == estimate_index_size(store)

    def test_size_shrinks_after_removal(self, make_doc):
        store = PostingStore("titles", IndexConfig(fields=["title"]))
        store.add(make_doc("a", title="go rust"))
        before = estimate_index_size(store)

        store.remove("a")

        assert estimate_index_size(store) < before
