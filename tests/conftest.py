"""Shared test fixtures and configuration."""

from datetime import datetime, timezone
import os

import pytest

from search_indexing.defaults import PROFILES_CONFIG
from search_indexing.domain import IndexConfig, SearchDocument
from search_indexing.registry import IndexRegistry


# Settings read SEARCH_* variables; pin the ones tests rely on.
TEST_ENV = {
    "SEARCH_LOG_LEVEL": "info",
    "SEARCH_LOG_JSON": "true",
    "SEARCH_BOOTSTRAP_DEFAULT_INDEXES": "true",
    "SEARCH_DEFAULT_SEARCH_LIMIT": "10",
    "SEARCH_MAX_SEARCH_LIMIT": "100",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


FIXED_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def make_document(doc_id: str, **overrides: object) -> SearchDocument:
    """Build a profile document with sensible defaults."""

    base: dict[str, object] = {
        "id": doc_id,
        "type": "profile",
        "title": "",
        "description": "",
        "tags": (),
        "metadata": {},
        "timestamp": FIXED_TIME,
    }
    base.update(overrides)
    return SearchDocument.model_validate(base)


@pytest.fixture
def go_engineer() -> SearchDocument:
    return make_document(
        "u1",
        title="Senior Go Engineer",
        description="Builds distributed systems",
        tags=("golang", "distributed-systems"),
        metadata={"skills": ("go", "kubernetes")},
    )


@pytest.fixture
def python_developer() -> SearchDocument:
    return make_document(
        "u2",
        title="Python Developer",
        description="Data pipelines and APIs",
        tags=("python", "django"),
        metadata={"skills": ("python", "postgres")},
    )


@pytest.fixture
def profiles_config() -> IndexConfig:
    return PROFILES_CONFIG


@pytest.fixture
def registry() -> IndexRegistry:
    return IndexRegistry()


@pytest.fixture
def profiles_registry(registry, profiles_config, go_engineer) -> IndexRegistry:
    registry.create_index("profiles", profiles_config)
    registry.add_document("profiles", go_engineer)
    return registry


@pytest.fixture
def make_doc():
    """Factory fixture for ad-hoc profile documents."""
    return make_document
