"""Tokenizer and token filters driven by an IndexConfig.

The analyzer is a composable pipeline in the Whoosh style: a splitting
tokenizer followed by filters. Analyzers are pure; the same text and config
always yield the same terms. Duplicate terms are kept because posting sets
collapse them on insertion.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
import re
from typing import Protocol

from search_indexing.domain.model import IndexConfig


# Whitespace plus the punctuation that separates words in titles, tags and
# slugs such as "distributed-systems" or "snake_case".
SPLIT_PATTERN = r"[\s\-_.,;:!?()\[\]{}]+"


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[str]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:  # pragma: no cover - interface definition
        ...


class SplitTokenizer:
    """Splits text on whitespace and a fixed punctuation set."""

    def __init__(self, pattern: str = SPLIT_PATTERN) -> None:
        self.pattern = re.compile(pattern, re.UNICODE)

    def __call__(self, text: str) -> Iterator[str]:
        for piece in self.pattern.split(text):
            if piece:
                yield piece


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            yield token if token.islower() else token.lower()


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if len(token) >= self.min_length:
                yield token


class StopFilter:
    """Removes stop words from the stream.

    Matching is exact: with a case-sensitive config, "The" survives a stop
    list containing "the".
    """

    def __init__(self, stop_words: Iterable[str]) -> None:
        self.stop_words = frozenset(stop_words)

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if token not in self.stop_words:
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[str]:
        if not text:
            return []
        stream: Iterable[str] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


def build_analyzer(config: IndexConfig) -> AnalyzerPipeline:
    """Return the analyzer pipeline described by ``config``."""

    filters: list[TokenFilter] = []
    if not config.case_sensitive:
        filters.append(LowercaseFilter())
    filters.append(MinLengthFilter(config.min_word_length))
    filters.append(StopFilter(config.stop_words))
    return AnalyzerPipeline(SplitTokenizer(), filters)


def tokenize(text: str, config: IndexConfig) -> list[str]:
    """Split ``text`` into index terms according to ``config``.

    Examples:
        >>> tokenize("Senior Go Engineer", IndexConfig(fields=["title"]))
        ['senior', 'go', 'engineer']
    """

    return build_analyzer(config)(text)
