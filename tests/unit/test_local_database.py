# =============================================================================
# tests/unit/test_local_database.py
# Unit Tests for the Local Record Store
# =============================================================================

import pytest

from osca_core.errors import RecordValidationError, StorageUnavailable
from osca_core.offline import LocalDatabase, LocalRecordStore


class TestLocalDatabase:
    """Test SQLite database lifecycle"""

    def test_initialize_creates_tables(self, local_db):
        rows = local_db.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        names = {row["name"] for row in rows}

        assert {"offline_seniors", "sync_queue"} <= names

    def test_initialize_is_idempotent(self, local_db):
        local_db.initialize()
        local_db.initialize()

    def test_creates_parent_directory(self, tmp_path):
        db = LocalDatabase(tmp_path / "nested" / "dir" / "osca.db")
        db.initialize()

        assert (tmp_path / "nested" / "dir" / "osca.db").exists()
        db.close()

    def test_in_memory_database(self):
        db = LocalDatabase(":memory:")

        assert db.in_memory
        assert LocalRecordStore(db).count() == 0
        db.close()

    def test_unopenable_path_raises_storage_unavailable(self, tmp_path):
        """A directory where the database file should be"""
        db = LocalDatabase(tmp_path)

        with pytest.raises(StorageUnavailable) as exc:
            db.initialize()

        assert exc.value.code == "STORE_001"
        assert exc.value.details["db_path"] == str(tmp_path)


class TestLocalRecordStore:
    """Test saving, listing and deleting offline records"""

    def test_save_and_get(self, store, senior_factory):
        record = senior_factory()

        store.save(record)
        loaded = store.get(record.id)

        assert loaded.full_name == "Test Offline"
        assert loaded.is_offline

    def test_save_is_idempotent(self, store, senior_factory):
        """Saving the same id twice leaves one row with the latest content"""
        record = senior_factory()
        store.save(record)
        record.notes = "second visit"
        store.save(record)

        assert store.count() == 1
        assert store.get(record.id).notes == "second visit"

    def test_list_tags_records_offline(self, store, senior_factory):
        store.save(senior_factory("Ana", "Reyes", isOffline=False))

        records = list(store.list())

        assert [r.is_offline for r in records] == [True]

    def test_list_is_restartable(self, store, senior_factory):
        store.save(senior_factory("Ana", "Reyes"))
        view = store.list()

        assert len(list(view)) == 1
        assert len(list(view)) == 1

    def test_list_reflects_later_writes(self, store, senior_factory):
        view = store.list()
        assert not view

        store.save(senior_factory("Ana", "Reyes"))

        assert len(view) == 1
        assert [r.first_name for r in view] == ["Ana"]

    def test_list_filters_by_barangay(self, store, senior_factory):
        store.save(senior_factory("Ana", "Reyes", barangay="Santiago"))
        store.save(senior_factory("Ben", "Cruz", barangay="Cadlan"))

        names = [r.first_name for r in store.list(barangay="Santiago")]

        assert names == ["Ana"]
        assert store.count("Cadlan") == 1

    def test_delete(self, store, senior_factory):
        record = store.save(senior_factory())

        assert store.delete(record.id)
        assert store.get(record.id) is None
        assert store.count() == 0

    def test_delete_missing_is_noop(self, store):
        assert store.delete("offline-does-not-exist") is False

    def test_save_rejects_non_records(self, store):
        with pytest.raises(RecordValidationError):
            store.save({"id": "offline-1", "firstName": "Ana"})

    def test_ids_in_save_order(self, store, senior_factory):
        first = store.save(senior_factory("Ana", "Reyes", record_id="offline-a"))
        second = store.save(senior_factory("Ben", "Cruz", record_id="offline-b"))

        assert store.ids() == [first.id, second.id]

    def test_survives_reopen(self, tmp_path, senior_factory):
        """Records persist across database connections"""
        path = tmp_path / "osca.db"
        db = LocalDatabase(path)
        LocalRecordStore(db).save(senior_factory(record_id="offline-keep"))
        db.close()

        reopened = LocalDatabase(path)
        assert LocalRecordStore(reopened).get("offline-keep") is not None
        reopened.close()
