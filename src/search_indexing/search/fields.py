"""Field extraction: map a document and a field name to indexable text."""

from __future__ import annotations

from search_indexing.domain.model import MetadataValue, SearchDocument


def get_field_value(document: SearchDocument, field: str) -> str:
    """Return the raw text of ``field`` for tokenization.

    ``title`` and ``description`` map directly and ``tags`` joins the tag list
    with spaces. Any other name is looked up in ``metadata``. Absent keys and
    falsy scalars yield an empty string, which contributes no terms.
    """

    if field == "title":
        return document.title
    if field == "description":
        return document.description
    if field == "tags":
        return " ".join(document.tags)
    return _render_metadata(document.metadata.get(field))


def _render_metadata(value: MetadataValue | None) -> str:
    if isinstance(value, (tuple, list)):
        return " ".join(str(item) for item in value)
    if not value:
        return ""
    if isinstance(value, bool):
        return "true"
    return str(value)
