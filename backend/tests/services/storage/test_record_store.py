"""
Tests for the in-memory and JSON-file record stores.
"""

import pytest

from app.services.pharmacogenomics.config import StorageConfig
from app.services.storage.record_store import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    StoreUnavailableError,
    create_record_store,
)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryRecordStore("profiles")
    return JsonFileRecordStore(tmp_path / "profiles.json")


class TestRecordStoreContract:

    def test_satisfies_protocol(self, store):
        assert isinstance(store, RecordStore)

    def test_create_assigns_id_and_timestamps(self, store):
        row = store.create({"name": "Patient A"})
        assert row["id"]
        assert row["created_at"]
        assert row["updated_at"]
        assert row["name"] == "Patient A"

    def test_find_by_id(self, store):
        row = store.create({"name": "Patient A"})
        assert store.find_by_id(row["id"])["name"] == "Patient A"

    def test_find_missing_returns_none(self, store):
        assert store.find_by_id("nope") is None

    def test_update_merges_fields(self, store):
        row = store.create({"name": "Patient A", "file_name": "a.vcf"})
        updated = store.update(row["id"], {"name": "Patient B", "id": "hijack"})

        assert updated["id"] == row["id"]
        assert updated["name"] == "Patient B"
        assert updated["file_name"] == "a.vcf"
        assert store.find_by_id(row["id"])["name"] == "Patient B"

    def test_update_missing_returns_none(self, store):
        assert store.update("nope", {"name": "x"}) is None

    def test_list_newest_first(self, store):
        store.create({"name": "old", "created_at": "2026-01-01T00:00:00+00:00"})
        store.create({"name": "new", "created_at": "2026-03-01T00:00:00+00:00"})
        store.create({"name": "mid", "created_at": "2026-02-01T00:00:00+00:00"})

        assert [r["name"] for r in store.list_all()] == ["new", "mid", "old"]

    def test_same_instant_lists_latest_insert_first(self, store):
        stamp = "2026-01-01T00:00:00+00:00"
        store.create({"name": "first", "created_at": stamp})
        store.create({"name": "second", "created_at": stamp})

        assert [r["name"] for r in store.list_all()] == ["second", "first"]


class TestJsonFileRecordStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "notifications.json"
        row = JsonFileRecordStore(path).create({"title": "t"})
        assert JsonFileRecordStore(path).find_by_id(row["id"])["title"] == "t"

    def test_corrupt_file_is_unavailable_not_missing(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text("{corrupt")
        store = JsonFileRecordStore(path)

        with pytest.raises(StoreUnavailableError):
            store.find_by_id("anything")
        with pytest.raises(StoreUnavailableError):
            store.list_all()

    def test_non_list_file_is_unavailable(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text('{"id": "x"}')
        with pytest.raises(StoreUnavailableError):
            JsonFileRecordStore(path).create({"name": "x"})


class TestCreateRecordStore:

    def test_memory_backend(self):
        assert isinstance(create_record_store("profiles", StorageConfig(backend="memory")), InMemoryRecordStore)

    def test_json_backend(self, tmp_path):
        store = create_record_store("profiles", StorageConfig(backend="json", path=str(tmp_path)))
        assert isinstance(store, JsonFileRecordStore)
        assert store.file_path == tmp_path / "profiles.json"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_record_store("profiles", StorageConfig(backend="postgres"))
