"""Query engine: additive term-presence scoring over a PostingStore.

Scoring for each query term:
- +1 for every document holding the term in any indexed field
- +weight(field) for every requested field holding the term
- +similarity(term, match) for every vocabulary term within the fuzzy
  distance, when fuzzy matching is on

Scores are summed without length normalization. Results sort by descending
score, then ascending document id, and are paginated last.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging

from search_indexing.domain.model import ScoredDocument, SearchOptions
from search_indexing.search.fuzzy import DEFAULT_MAX_DISTANCE, find_fuzzy_matches
from search_indexing.search.postings import PostingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FuzzyLimits:
    """Bounds on fuzzy query cost.

    Fuzzy expansion scans the whole vocabulary per query term, so these caps
    keep one query from holding an index's read lock for too long.
    """

    max_distance: int = DEFAULT_MAX_DISTANCE
    max_query_terms: int | None = 8
    max_vocabulary: int | None = 100_000


class QueryEngine:
    """Scores, ranks and paginates queries against a posting store."""

    def __init__(self, limits: FuzzyLimits | None = None) -> None:
        self.limits = limits or FuzzyLimits()

    def search(self, store: PostingStore, query: str, options: SearchOptions | None = None) -> list[ScoredDocument]:
        """Run ``query`` against ``store``.

        An empty token list yields an empty result, never an error. Documents
        are resolved from ``store.documents`` at call time.
        """
        options = options or SearchOptions()
        terms = store.tokenize(query)
        if not terms:
            return []

        scores = self.score(store, terms, options)
        ranked = self._rank(store, scores)
        page = ranked[options.offset : options.offset + options.limit]

        results: list[ScoredDocument] = []
        for doc_id, score in page:
            document = store.documents.get(doc_id)
            if document is None:
                logger.error("Index %s: scored document %s is missing, skipping", store.name, doc_id)
                continue
            results.append(ScoredDocument(document=document, score=score))
        return results

    def score(self, store: PostingStore, terms: list[str], options: SearchOptions) -> dict[int, float]:
        """Return handle -> additive score for the analyzed query ``terms``."""
        scores: dict[int, float] = defaultdict(float)

        for term in terms:
            for handle in store.inverted_index.get(term, ()):
                scores[handle] += 1.0

            for field in options.fields or ():
                field_buckets = store.field_index.get(field)
                if not field_buckets:
                    continue
                weight = store.config.weight_for(field)
                for handle in field_buckets.get(term, ()):
                    scores[handle] += weight

        if options.fuzzy:
            self._score_fuzzy(store, terms, scores)

        return scores

    def _score_fuzzy(self, store: PostingStore, terms: list[str], scores: dict[int, float]) -> None:
        expanded = terms
        cap = self.limits.max_query_terms
        if cap is not None and len(terms) > cap:
            logger.warning(
                "Index %s: fuzzy expansion limited to %d of %d query terms", store.name, cap, len(terms)
            )
            expanded = terms[:cap]

        for term in expanded:
            matches = find_fuzzy_matches(
                term,
                store.vocabulary(),
                max_distance=self.limits.max_distance,
                max_vocabulary=self.limits.max_vocabulary,
            )
            for matched, distance in matches:
                # same value as similarity(term, matched), from the distance already computed
                bonus = 1.0 - distance / max(len(term), len(matched))
                for handle in store.inverted_index.get(matched, ()):
                    scores[handle] += bonus

    def _rank(self, store: PostingStore, scores: dict[int, float]) -> list[tuple[str, float]]:
        ranked: list[tuple[str, float]] = []
        for handle, score in scores.items():
            doc_id = store.doc_id(handle)
            if doc_id is None:
                logger.error("Index %s: posting references unknown handle %d", store.name, handle)
                continue
            ranked.append((doc_id, score))
        ranked.sort(key=lambda item: (-item[1], item[0]))
        return ranked
