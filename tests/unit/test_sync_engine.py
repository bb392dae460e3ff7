# =============================================================================
# tests/unit/test_sync_engine.py
# Unit Tests for the Sync Reconciler
# =============================================================================

import pytest

from osca_core.errors import OfflineSyncRejected, PartialSyncFailure
from osca_core.offline import QueueOperation, SyncOutcome, SyncReconciler, SyncReport


class TestSyncAll:
    """Test bulk sync of offline records"""

    def test_success_removes_local_record(self, reconciler, store, queue, fake_api, senior_factory):
        record = store.save(senior_factory())
        queue.append(record.id, QueueOperation.CREATE, record.to_dict())

        report = reconciler.sync_all()

        assert report.all_succeeded
        assert store.get(record.id) is None
        assert queue.count() == 0
        assert len(fake_api.records) == 1
        assert report.outcomes[0].server_id in fake_api.records

    def test_failure_preserves_local_record(self, reconciler, store, queue, fake_api, senior_factory):
        record = store.save(senior_factory())
        queued = queue.append(record.id, QueueOperation.CREATE, record.to_dict())
        fake_api.fail_names.add("Test Offline")

        report = reconciler.sync_all()

        assert not report.all_succeeded
        assert report.outcomes[0].error == "Email already registered"
        assert store.get(record.id) is not None
        stored_entry = queue.entries(record.id)[0]
        assert stored_entry.entry_id == queued.entry_id
        assert stored_entry.attempts == 1

    def test_raising_api_is_a_failed_record(self, reconciler, store, fake_api, senior_factory):
        record = store.save(senior_factory())
        fake_api.raise_names.add("Test Offline")

        report = reconciler.sync_all()

        assert report.outcomes[0].error == "network down"
        assert store.get(record.id) is not None
        assert not reconciler.is_syncing

    def test_partial_sync_continues_after_failure(self, reconciler, store, fake_api, senior_factory):
        """A failure for one record never stops the next one"""
        store.save(senior_factory("Bea", "Bad", record_id="offline-1"))
        store.save(senior_factory("Ana", "Good", record_id="offline-2"))
        fake_api.fail_names.add("Bea Bad")

        report = reconciler.sync_all()

        assert [o.success for o in report.outcomes] == [False, True]
        assert store.ids() == ["offline-1"]
        assert report.summary().level == "warning"
        assert report.summary().message == "Synced 1 of 2 record(s); 1 failed"

    def test_offline_rejected_without_remote_calls(self, reconciler, connection, store, fake_api, senior_factory):
        store.save(senior_factory())
        connection.set_simulate_offline(True)

        with pytest.raises(OfflineSyncRejected):
            reconciler.sync_all()

        assert fake_api.calls == []
        assert store.count() == 1

    def test_placeholder_password_used(self, reconciler, store, fake_api, senior_factory):
        store.save(senior_factory(password=None))

        reconciler.sync_all()

        assert fake_api.calls_of("create")[0][1]["password"] == "temp123"

    def test_create_payload_has_no_offline_fields(self, reconciler, store, fake_api, senior_factory):
        store.save(senior_factory())

        reconciler.sync_all()

        payload = fake_api.calls_of("create")[0][1]
        assert "id" not in payload
        assert "isOffline" not in payload

    def test_queued_update_and_delete_replayed(self, reconciler, queue, fake_api, senior_factory):
        kept = fake_api.add_existing(senior_factory("Ana", "Reyes", record_id="server-1"))
        fake_api.add_existing(senior_factory("Ben", "Cruz", record_id="server-2"))
        queue.append(kept.id, QueueOperation.UPDATE, {"notes": "moved", "firstName": "Ana", "lastName": "Reyes"})
        queue.append("server-2", QueueOperation.DELETE)

        report = reconciler.sync_all()

        assert report.all_succeeded
        assert fake_api.records["server-1"].notes == "moved"
        assert "server-2" not in fake_api.records
        assert queue.count() == 0
        assert [n.message for n in report.notifications()[:2]] == [
            "Changes to Ana Reyes synced to server",
            "Deletion of server-2 synced to server",
        ]

    def test_failed_update_stays_queued(self, reconciler, queue, fake_api):
        queue.append("server-missing", QueueOperation.UPDATE, {"notes": "x"})

        report = reconciler.sync_all()

        assert report.outcomes[0].error == "Senior citizen not found"
        assert queue.entries()[0].attempts == 1

    def test_created_then_deleted_offline_never_reaches_server(self, reconciler, queue, fake_api):
        queue.append("offline-gone", QueueOperation.CREATE, {"firstName": "Gone"})
        queue.append("offline-gone", QueueOperation.DELETE)

        report = reconciler.sync_all()

        assert report.outcomes == []
        assert fake_api.calls == []
        assert queue.count() == 0

    def test_nothing_to_sync(self, reconciler):
        report = reconciler.sync_all()

        assert report.summary().message == "No offline data to sync"
        assert report.to_error() is None

    def test_without_api_records_fail(self, store, queue, connection, senior_factory):
        reconciler = SyncReconciler(store, queue, None, connection)
        record = store.save(senior_factory())

        report = reconciler.sync_all()

        assert report.outcomes[0].error == "Supabase is not configured"
        assert store.get(record.id) is not None


class TestSyncOne:
    """Test individual sync"""

    def test_sync_one_record(self, reconciler, store, fake_api, senior_factory):
        store.save(senior_factory("Ana", "Reyes", record_id="offline-a"))
        store.save(senior_factory("Ben", "Cruz", record_id="offline-b"))

        outcome = reconciler.sync_one("offline-b")

        assert outcome.success
        assert outcome.notification().message == "Ben Cruz synced to server successfully!"
        assert store.ids() == ["offline-a"]
        assert len(fake_api.calls_of("create")) == 1

    def test_sync_one_failure_message(self, reconciler, store, fake_api, senior_factory):
        store.save(senior_factory("Ana", "Reyes", record_id="offline-a"))
        fake_api.fail_names.add("Ana Reyes")

        outcome = reconciler.sync_one("offline-a")

        assert not outcome.success
        assert outcome.notification().message == "Failed to sync Ana Reyes"
        assert reconciler.state.last_error == "Email already registered"

    def test_sync_one_offline_rejected(self, reconciler, network, connection, store, fake_api, senior_factory):
        store.save(senior_factory(record_id="offline-a"))
        network.online = False
        connection.check_connection()

        with pytest.raises(OfflineSyncRejected):
            reconciler.sync_one("offline-a")

        assert fake_api.calls == []

    def test_sync_one_queued_update(self, reconciler, queue, fake_api, senior_factory):
        fake_api.add_existing(senior_factory("Ana", "Reyes", record_id="server-1"))
        queue.append("server-1", QueueOperation.UPDATE, {"status": "inactive"})

        outcome = reconciler.sync_one("server-1")

        assert outcome.success
        assert fake_api.records["server-1"].status.value == "inactive"

    def test_sync_one_unknown_record(self, reconciler):
        outcome = reconciler.sync_one("offline-nothing")

        assert not outcome.success
        assert outcome.error == "No pending changes for this record"


class TestPendingAndState:

    def test_pending_count_counts_logical_records(self, reconciler, store, queue, senior_factory):
        record = store.save(senior_factory(record_id="offline-a"))
        queue.append(record.id, QueueOperation.CREATE, record.to_dict())
        queue.append(record.id, QueueOperation.UPDATE, {"notes": "x"})
        queue.append("server-1", QueueOperation.UPDATE, {"notes": "y"})
        queue.append("offline-z", QueueOperation.CREATE)
        queue.append("offline-z", QueueOperation.DELETE)

        assert reconciler.pending_count() == 2

    def test_state_after_sync(self, reconciler, store, senior_factory):
        store.save(senior_factory())

        reconciler.sync_all()

        assert not reconciler.is_syncing
        display = reconciler.get_status_display()
        assert display["total_synced"] == 1
        assert display["pending"] == 0
        assert display["last_success"] is not None

    def test_state_keeps_last_error(self, reconciler, store, fake_api, senior_factory):
        store.save(senior_factory())
        fake_api.fail_names.add("Test Offline")

        reconciler.sync_all()

        display = reconciler.get_status_display()
        assert display["failed"] == 1
        assert display["pending"] == 1
        assert display["last_error"] == "Email already registered"
        assert display["last_success"] is None


class TestSyncReport:
    """Test notification and error aggregation"""

    def _outcome(self, name, success):
        return SyncOutcome(record_id=name, name=name, operation=QueueOperation.CREATE, success=success)

    def test_all_succeeded(self):
        report = SyncReport([self._outcome("A", True), self._outcome("B", True)])

        assert report.summary().message == "All offline data synced successfully"
        assert [n.level for n in report.notifications()] == ["success", "success", "success"]

    def test_all_failed(self):
        report = SyncReport([self._outcome("A", False)])

        assert report.summary().level == "error"
        assert report.summary().message == "Sync failed for all 1 record(s)"

    def test_partial_failure_error(self):
        report = SyncReport([self._outcome("A", True), self._outcome("B", False)])

        error = report.to_error()

        assert isinstance(error, PartialSyncFailure)
        assert error.succeeded == 1
        assert error.failed_ids == ["B"]
        assert [n.message for n in report.notifications()] == [
            "A synced to server successfully!",
            "Failed to sync B",
            "Synced 1 of 2 record(s); 1 failed",
        ]
