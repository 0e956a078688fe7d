"""Unit tests for field extraction."""

import pytest

from search_indexing.search.fields import get_field_value


@pytest.mark.unit
class TestGetFieldValue:
    def test_title_and_description(self, go_engineer):
        assert get_field_value(go_engineer, "title") == "Senior Go Engineer"
        assert get_field_value(go_engineer, "description") == "Builds distributed systems"

    def test_tags_joined_with_spaces(self, go_engineer):
        assert get_field_value(go_engineer, "tags") == "golang distributed-systems"

    def test_metadata_list(self, go_engineer):
        assert get_field_value(go_engineer, "skills") == "go kubernetes"

    def test_missing_metadata_key(self, go_engineer):
        assert get_field_value(go_engineer, "location") == ""

    def test_metadata_scalars(self, make_doc):
        doc = make_doc("x", metadata={"language": "Rust", "stars": 42, "archived": True, "empty": ""})
        assert get_field_value(doc, "language") == "Rust"
        assert get_field_value(doc, "stars") == "42"
        assert get_field_value(doc, "archived") == "true"
        assert get_field_value(doc, "empty") == ""

    def test_falsy_number_contributes_nothing(self, make_doc):
        doc = make_doc("x", metadata={"stars": 0})
        assert get_field_value(doc, "stars") == ""
