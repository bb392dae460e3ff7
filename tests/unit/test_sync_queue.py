# =============================================================================
# tests/unit/test_sync_queue.py
# Unit Tests for the Offline Mutation Queue
# =============================================================================

import pytest

from osca_core.offline import OfflineQueueEntry, QueueOperation, fold


def entry(entry_id, record_id, operation, **payload):
    return OfflineQueueEntry(entry_id, record_id, QueueOperation(operation), payload)


class TestFold:
    """Test collapsing the log into one mutation per record"""

    def test_single_entries_pass_through(self):
        pending = fold([entry(1, "a", "create", firstName="Ana"), entry(2, "b", "delete")])

        assert [(p.record_id, p.operation) for p in pending] == [
            ("a", QueueOperation.CREATE),
            ("b", QueueOperation.DELETE),
        ]

    def test_create_then_update_stays_create(self):
        pending = fold([
            entry(1, "a", "create", firstName="Ana", notes="old"),
            entry(2, "a", "update", firstName="Ana", notes="new"),
        ])

        assert len(pending) == 1
        assert pending[0].operation == QueueOperation.CREATE
        assert pending[0].payload["notes"] == "new"
        assert pending[0].entry_ids == [1, 2]

    def test_updates_merge_newest_wins(self):
        pending = fold([
            entry(1, "a", "update", notes="one", status="active"),
            entry(2, "a", "update", notes="two"),
        ])

        assert pending[0].operation == QueueOperation.UPDATE
        assert pending[0].payload == {"notes": "two", "status": "active"}

    def test_update_then_delete_is_delete(self):
        pending = fold([entry(1, "a", "update", notes="x"), entry(2, "a", "delete")])

        assert pending[0].operation == QueueOperation.DELETE
        assert pending[0].payload == {}

    def test_create_then_delete_is_cancelled(self):
        """Nothing reaches the server for a record never synced"""
        pending = fold([entry(1, "a", "create", firstName="Ana"), entry(2, "a", "delete")])

        assert pending[0].cancelled
        assert pending[0].entry_ids == [1, 2]

    def test_entries_after_delete_are_ignored(self):
        pending = fold([entry(1, "a", "delete"), entry(2, "a", "update", notes="late")])

        assert pending[0].operation == QueueOperation.DELETE
        assert pending[0].entry_ids == [1, 2]

    def test_order_follows_first_entry(self):
        pending = fold([
            entry(1, "b", "update", notes="b"),
            entry(2, "a", "create"),
            entry(3, "b", "update", notes="b2"),
        ])

        assert [p.record_id for p in pending] == ["b", "a"]

    def test_empty_log(self):
        assert fold([]) == []


class TestOfflineQueue:
    """Test the persistent sync_queue table"""

    def test_append_and_entries(self, queue):
        queue.append("offline-1", QueueOperation.CREATE, {"firstName": "Ana"})
        queue.append("offline-1", "update", {"notes": "x"})

        entries = queue.entries()

        assert [e.operation for e in entries] == [QueueOperation.CREATE, QueueOperation.UPDATE]
        assert entries[0].payload == {"firstName": "Ana"}
        assert entries[0].entry_id < entries[1].entry_id

    def test_invalid_operation_is_rejected(self, queue):
        with pytest.raises(ValueError):
            queue.append("offline-1", "upsert", {})

    def test_entries_for_one_record(self, queue):
        queue.append("a", QueueOperation.CREATE)
        queue.append("b", QueueOperation.DELETE)

        assert [e.record_id for e in queue.entries("b")] == ["b"]

    def test_pending_is_folded(self, queue):
        queue.append("a", QueueOperation.CREATE, {"notes": "1"})
        queue.append("a", QueueOperation.UPDATE, {"notes": "2"})

        pending = queue.pending()

        assert len(pending) == 1
        assert pending[0].payload == {"notes": "2"}

    def test_remove(self, queue):
        first = queue.append("a", QueueOperation.CREATE)
        queue.append("b", QueueOperation.CREATE)

        assert queue.remove([first.entry_id]) == 1
        assert queue.pending_record_ids() == ["b"]
        assert queue.remove([]) == 0

    def test_discard(self, queue):
        queue.append("a", QueueOperation.CREATE)
        queue.append("a", QueueOperation.UPDATE, {"notes": "x"})
        queue.append("b", QueueOperation.DELETE)

        assert queue.discard("a") == 2
        assert queue.count() == 1

    def test_mark_failed_keeps_entries(self, queue):
        queued = queue.append("a", QueueOperation.UPDATE, {"notes": "x"})

        queue.mark_failed([queued.entry_id], "Senior citizen not found")
        queue.mark_failed([queued.entry_id], "Senior citizen not found")

        stored = queue.entries()[0]
        assert stored.attempts == 2
        assert stored.last_error == "Senior citizen not found"
