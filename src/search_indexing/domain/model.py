"""Domain models for the search indexing engine.

Value objects are immutable (frozen=True). Wire names follow the snapshot
format, which uses camelCase keys (``stopWords``, ``lastUpdated``); Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


DocumentType = Literal["profile", "repository", "user", "skill"]

MetadataValue = str | int | float | bool | tuple[str, ...]

DEFAULT_STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "has",
        "he",
        "in",
        "is",
        "it",
        "its",
        "of",
        "on",
        "that",
        "the",
        "to",
        "was",
        "will",
        "with",
    }
)

SNAPSHOT_FORMAT_VERSION = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _freeze(value: Mapping) -> Mapping:
    return value if isinstance(value, MappingProxyType) else MappingProxyType(dict(value))


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SearchDocument(_WireModel):
    """A searchable record: a profile, repository, user or skill.

    ``score`` is a baseline supplied by the document source; the engine stores
    it but never uses it for ranking.
    ``metadata`` is a read-only mapping: a stored document must not change
    under its postings.
    """

    id: str = Field(min_length=1)
    type: DocumentType
    title: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, MetadataValue] = Field(default_factory=dict, validate_default=True)
    score: float = 0.0
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("metadata")
    @classmethod
    def _freeze_metadata(cls, value: Mapping[str, MetadataValue]) -> Mapping[str, MetadataValue]:
        return _freeze(value)

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Mapping[str, MetadataValue]) -> dict[str, MetadataValue]:
        return dict(value)


class IndexConfig(_WireModel):
    """Tokenization and weighting rules for one named index."""

    fields: tuple[str, ...] = Field(min_length=1)
    weights: Mapping[str, float] = Field(default_factory=dict, validate_default=True)
    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    min_word_length: int = Field(default=2, ge=1)
    case_sensitive: bool = False

    @field_validator("fields")
    @classmethod
    def _check_fields(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(name.strip() for name in value)
        if any(not name for name in cleaned):
            raise ValueError("field names must be non-empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("field names must be unique")
        return cleaned

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, value: Mapping[str, float]) -> Mapping[str, float]:
        negative = sorted(name for name, weight in value.items() if weight < 0)
        if negative:
            raise ValueError(f"weights must be non-negative: {negative}")
        return _freeze(value)

    @field_serializer("weights")
    def _serialize_weights(self, value: Mapping[str, float]) -> dict[str, float]:
        return dict(value)

    @field_serializer("stop_words")
    def _serialize_stop_words(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    def weight_for(self, field: str) -> float:
        """Return the multiplier for ``field``, defaulting to 1."""
        return self.weights.get(field, 1.0)


class SearchOptions(BaseModel):
    """Options accepted by a search call."""

    model_config = ConfigDict(frozen=True)

    fields: tuple[str, ...] | None = None
    limit: int = Field(default=10, ge=0)
    offset: int = Field(default=0, ge=0)
    fuzzy: bool = False


class ScoredDocument(BaseModel):
    """A search hit together with its additive relevance score."""

    model_config = ConfigDict(frozen=True)

    document: SearchDocument
    score: float


class IndexStats(BaseModel):
    """Statistics about one named index.

    ``index_size`` is a heuristic byte estimate, not memory accounting.
    """

    model_config = ConfigDict(frozen=True)

    document_count: int
    term_count: int
    last_updated: datetime
    index_size: int


class IndexSnapshot(_WireModel):
    """Export format: config plus documents, without derived postings."""

    format_version: int = SNAPSHOT_FORMAT_VERSION
    config: IndexConfig
    documents: list[tuple[str, SearchDocument]] = Field(default_factory=list)
    last_updated: datetime
