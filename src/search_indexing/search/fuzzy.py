"""Fuzzy matching for typo-tolerant search.

Scalability bound: ``find_fuzzy_matches`` scans the whole vocabulary, so a
fuzzy query costs O(query terms x vocabulary size x term length^2). Callers
bound it with ``max_vocabulary`` and by limiting how many query terms are
expanded (see ``FuzzyLimits`` in ``search.query``).
"""

from __future__ import annotations

from collections.abc import Iterable
import logging


logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 2


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Classic full-matrix dynamic programming over insertions, deletions and
    substitutions.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    rows, cols = len(s1) + 1, len(s2) + 1
    matrix = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if s1[i - 1] == s2[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i][j - 1],  # insertion
                    matrix[i - 1][j],  # deletion
                )

    return matrix[-1][-1]


def similarity(s1: str, s2: str) -> float:
    """Return ``1 - distance / max(len)`` in [0, 1].

    Two empty strings are identical, so they score 1.0.
    """
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / longest


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
    max_vocabulary: int | None = None,
) -> list[tuple[str, int]]:
    """Find vocabulary terms within ``max_distance`` edits of ``query_term``.

    Args:
        query_term: The (possibly misspelled) query term.
        vocabulary: Distinct indexed terms, scanned linearly.
        max_distance: Maximum accepted edit distance (inclusive).
        max_vocabulary: Stop after scanning this many terms; None scans all.

    Returns:
        ``(term, distance)`` pairs sorted by distance, then term. An exact
        match is included with distance 0.
    """
    if not query_term:
        return []

    matches: list[tuple[str, int]] = []
    scanned = 0
    for term in vocabulary:
        if max_vocabulary is not None and scanned >= max_vocabulary:
            logger.warning("Fuzzy scan for %r stopped after %d vocabulary terms", query_term, max_vocabulary)
            break
        scanned += 1
        if abs(len(term) - len(query_term)) > max_distance:
            continue
        distance = levenshtein_distance(query_term, term)
        if distance <= max_distance:
            matches.append((term, distance))

    matches.sort(key=lambda match: (match[1], match[0]))
    return matches
