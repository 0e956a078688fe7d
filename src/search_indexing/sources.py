"""Builders that turn application records into SearchDocuments.

Records are plain mappings as returned by the API layer (profile, repository,
user and skill payloads). Nested skill and language lists may hold either
strings or objects with a ``name`` key. Anything a default index weights but
SearchDocument has no attribute for (skills, language, topics) lands in
``metadata`` under the field name the index config uses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from search_indexing.domain.model import MetadataValue, SearchDocument, utc_now


Record = Mapping[str, Any]


def _names(items: Iterable[Any] | None) -> tuple[str, ...]:
    names: list[str] = []
    for item in items or ():
        name = item.get("name") if isinstance(item, Mapping) else item
        if name:
            names.append(str(name))
    return tuple(names)


def _text(record: Record, *keys: str) -> str:
    """Return the first non-empty value among ``keys``."""
    for key in keys:
        value = record.get(key)
        if value:
            return str(value)
    return ""


def _timestamp(record: Record, *keys: str) -> datetime:
    for key in keys:
        value = record.get(key)
        if isinstance(value, datetime):
            return value
        if isinstance(value, str) and value:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return utc_now()


def _metadata(**values: MetadataValue | None) -> dict[str, MetadataValue]:
    return {key: value for key, value in values.items() if value not in (None, "", ())}


def profile_document(record: Record) -> SearchDocument:
    """Build a ``profile`` document.

    Skills go to ``metadata["skills"]`` and languages to ``tags`` so the
    default profiles index can weight them separately from the headline.
    """
    return SearchDocument(
        id=str(record["id"]),
        type="profile",
        title=_text(record, "headline", "name", "username"),
        description=_text(record, "bio", "summary"),
        tags=_names(record.get("languages")),
        metadata=_metadata(
            skills=_names(record.get("skills")),
            username=_text(record, "username"),
            name=_text(record, "name"),
            location=_text(record, "location"),
            experienceLevel=_text(record, "experienceLevel", "experience_level"),
        ),
        score=float(record.get("talentScore") or record.get("score") or 0.0),
        timestamp=_timestamp(record, "updatedAt", "updated_at"),
    )


def repository_document(record: Record) -> SearchDocument:
    topics = _names(record.get("topics"))
    return SearchDocument(
        id=str(record["id"]),
        type="repository",
        title=_text(record, "fullName", "full_name", "name"),
        description=_text(record, "description"),
        tags=topics,
        metadata=_metadata(
            name=_text(record, "name"),
            language=_text(record, "language"),
            topics=topics,
            owner=_text(record, "owner"),
            stars=int(record.get("stargazersCount") or record.get("stars") or 0) or None,
        ),
        score=float(record.get("stargazersCount") or record.get("stars") or 0.0),
        timestamp=_timestamp(record, "pushedAt", "updatedAt", "updated_at"),
    )


def user_document(record: Record) -> SearchDocument:
    return SearchDocument(
        id=str(record["id"]),
        type="user",
        title=_text(record, "name", "username"),
        description=_text(record, "bio"),
        tags=_names(record.get("roles")),
        metadata=_metadata(
            username=_text(record, "username"),
            location=_text(record, "location"),
        ),
        timestamp=_timestamp(record, "updatedAt", "createdAt"),
    )


def skill_document(record: Record) -> SearchDocument:
    return SearchDocument(
        id=str(record["id"]),
        type="skill",
        title=_text(record, "name"),
        description=_text(record, "description"),
        tags=_names(record.get("aliases")),
        metadata=_metadata(category=_text(record, "category")),
        score=float(record.get("endorsements") or 0.0),
        timestamp=_timestamp(record, "updatedAt"),
    )
