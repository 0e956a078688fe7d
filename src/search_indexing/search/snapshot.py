"""Export/import snapshots of a posting store.

A snapshot holds the config, the documents as ordered ``[id, document]``
pairs and ``lastUpdated``. Postings are derived data and are never written;
import replays every document through the tokenizer active at import time.

Format (JSON)::

    {
      "formatVersion": 1,
      "config": {"fields": [...], "weights": {...}, "stopWords": [...], ...},
      "documents": [["u1", {"id": "u1", "type": "profile", ...}], ...],
      "lastUpdated": "2024-01-15T10:30:00+00:00"
    }

Payloads without ``formatVersion`` predate the version tag and are read as
version 1.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
from pydantic import ValidationError

from search_indexing.domain.model import SNAPSHOT_FORMAT_VERSION, IndexSnapshot
from search_indexing.errors import SnapshotParseError
from search_indexing.search.postings import PostingStore


logger = logging.getLogger(__name__)

SUPPORTED_FORMAT_VERSIONS = frozenset({1})


def build_snapshot(store: PostingStore) -> IndexSnapshot:
    return IndexSnapshot(
        format_version=SNAPSHOT_FORMAT_VERSION,
        config=store.config,
        documents=list(store.documents.items()),
        last_updated=store.last_updated,
    )


def export_snapshot(store: PostingStore) -> str:
    """Serialize ``store`` to a JSON snapshot string."""

    payload = build_snapshot(store).model_dump(mode="json", by_alias=True)
    return orjson.dumps(payload).decode("utf-8")


def parse_snapshot(payload: str | bytes) -> IndexSnapshot:
    """Parse and validate a snapshot payload.

    Raises:
        SnapshotParseError: The payload is not JSON, has the wrong shape, or
            carries an unsupported ``formatVersion``.
    """
    try:
        raw: Any = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise SnapshotParseError(f"Snapshot is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise SnapshotParseError(f"Snapshot must be a JSON object, got {type(raw).__name__}")

    version = raw.get("formatVersion", 1)
    if version not in SUPPORTED_FORMAT_VERSIONS:
        raise SnapshotParseError(
            f"Unsupported snapshot formatVersion {version!r}; supported: {sorted(SUPPORTED_FORMAT_VERSIONS)}"
        )

    try:
        snapshot = IndexSnapshot.model_validate({**raw, "formatVersion": version})
    except ValidationError as exc:
        raise SnapshotParseError(f"Snapshot failed validation: {exc}") from exc

    for pair_id, document in snapshot.documents:
        if pair_id != document.id:
            raise SnapshotParseError(f"Snapshot pair id {pair_id!r} does not match document id {document.id!r}")
    return snapshot


def restore_store(name: str, snapshot: IndexSnapshot) -> PostingStore:
    """Build a fresh store named ``name`` by replaying the snapshot's documents."""

    store = PostingStore(name, snapshot.config)
    store.add_many(document for _, document in snapshot.documents)
    store.touch(snapshot.last_updated)
    logger.debug("Restored index %s with %d documents", name, len(store))
    return store
