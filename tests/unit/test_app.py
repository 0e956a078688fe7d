"""Unit tests for the HTTP surface."""

from __future__ import annotations

import threading

import orjson
import pytest
from starlette.testclient import TestClient

from search_indexing.app import create_app
from search_indexing.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, default_search_limit=10, max_search_limit=20)


@pytest.fixture
def client(profiles_registry, settings) -> TestClient:
    return TestClient(create_app(profiles_registry, settings))


@pytest.mark.unit
class TestReadRoutes:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["indexes"]["profiles"]["documents"] == 1

    def test_list_indexes(self, client):
        assert client.get("/indexes").json() == {"indexes": ["profiles"]}

    def test_search(self, client):
        response = client.get("/indexes/profiles/search", params={"q": "go", "fields": "title,skills"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert [hit["document"]["id"] for hit in results] == ["u1"]
        assert results[0]["score"] == 6.0

    def test_search_unknown_index_is_empty(self, client):
        response = client.get("/indexes/missing/search", params={"q": "go"})

        assert response.status_code == 200
        assert response.json()["results"] == []

    def test_search_fuzzy_flag(self, client):
        plain = client.get("/indexes/profiles/search", params={"q": "kubernetse"}).json()
        fuzzy = client.get("/indexes/profiles/search", params={"q": "kubernetse", "fuzzy": "true"}).json()

        assert plain["results"] == []
        assert [hit["document"]["id"] for hit in fuzzy["results"]] == ["u1"]

    def test_search_limit_clamped(self, client):
        assert client.get("/indexes/profiles/search", params={"q": "go", "limit": "500"}).json()["limit"] == 20

    @pytest.mark.parametrize("params", [{"limit": "abc"}, {"offset": "-1"}])
    def test_search_bad_paging(self, client, params):
        response = client.get("/indexes/profiles/search", params={"q": "go", **params})
        assert response.status_code == 400

    def test_stats(self, client):
        body = client.get("/indexes/profiles/stats").json()
        assert body["document_count"] == 1
        assert body["term_count"] > 0

    def test_stats_unknown(self, client):
        assert client.get("/indexes/missing/stats").status_code == 404

    def test_metrics(self, client):
        client.get("/indexes/profiles/search", params={"q": "go"})
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "search_requests_total" in response.text


@pytest.mark.unit
class TestWriteRoutes:
    def test_add_single_and_list(self, client):
        single = client.post(
            "/indexes/profiles/documents", json={"id": "u2", "type": "profile", "title": "Rust Developer"}
        )
        many = client.post(
            "/indexes/profiles/documents",
            json=[{"id": "u3", "type": "profile", "title": "Rust Lead"}, {"id": "u4", "type": "user"}],
        )

        assert single.status_code == 201
        assert many.json()["indexed"] == 2
        hits = client.get("/indexes/profiles/search", params={"q": "rust"}).json()["results"]
        assert [hit["document"]["id"] for hit in hits] == ["u2", "u3"]

    def test_add_invalid_document(self, client):
        response = client.post("/indexes/profiles/documents", json={"id": "x", "type": "company"})
        assert response.status_code == 400

    def test_add_to_unknown_index(self, client):
        response = client.post("/indexes/missing/documents", json={"id": "x", "type": "user"})
        assert response.status_code == 404

    def test_delete_document(self, client):
        assert client.delete("/indexes/profiles/documents/u1").status_code == 200
        assert client.get("/indexes/profiles/search", params={"q": "go"}).json()["results"] == []

    def test_rebuild_with_config(self, client):
        response = client.post("/indexes/profiles/rebuild", json={"fields": ["title"], "minWordLength": 3})

        assert response.status_code == 200
        assert client.get("/indexes/profiles/search", params={"q": "go"}).json()["results"] == []

    def test_rebuild_invalid_config(self, client):
        response = client.post("/indexes/profiles/rebuild", json={"fields": []})
        assert response.status_code == 400

    def test_export_import(self, client):
        exported = client.get("/indexes/profiles/export")
        assert exported.status_code == 200
        assert orjson.loads(exported.content)["formatVersion"] == 1

        imported = client.put("/indexes/copy/import", content=exported.content)

        assert imported.status_code == 200
        hits = client.get("/indexes/copy/search", params={"q": "go"}).json()["results"]
        assert [hit["document"]["id"] for hit in hits] == ["u1"]

    def test_export_unknown(self, client):
        assert client.get("/indexes/missing/export").status_code == 404

    def test_import_malformed(self, client):
        assert client.put("/indexes/profiles/import", content=b"{oops").status_code == 400


@pytest.mark.unit
class TestEventLoopIsolation:
    def test_locked_index_does_not_stall_other_routes(self, profiles_registry, settings):
        lock = profiles_registry._indexes["profiles"].lock
        search_done = threading.Event()
        listing_done = threading.Event()
        responses: dict[str, object] = {}

        def run_search():
            responses["search"] = client.get("/indexes/profiles/search", params={"q": "go"})
            search_done.set()

        def run_listing():
            responses["indexes"] = client.get("/indexes")
            listing_done.set()

        with TestClient(create_app(profiles_registry, settings)) as client:
            lock.acquire_write()
            try:
                threading.Thread(target=run_search, daemon=True).start()
                assert not search_done.wait(0.2)

                threading.Thread(target=run_listing, daemon=True).start()
                assert listing_done.wait(2)
                assert not search_done.is_set()
            finally:
                lock.release_write()

            assert search_done.wait(2)

        assert responses["indexes"].json() == {"indexes": ["profiles"]}
        assert [hit["document"]["id"] for hit in responses["search"].json()["results"]] == ["u1"]
