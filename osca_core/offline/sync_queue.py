# =============================================================================
# osca_core/offline/sync_queue.py
# Append-only log of offline mutations
# =============================================================================
"""
OfflineQueue - every create/update/delete made while a record cannot reach
the server is appended here as one entry. Entries leave the log only after
the matching remote call succeeds.

``fold`` collapses the log into at most one pending mutation per record, in
enqueue order, so the reconciler replays the net effect:

    CREATE, UPDATE   -> CREATE (newest payload)
    CREATE, CREATE   -> CREATE (newest payload)
    UPDATE, UPDATE   -> UPDATE (payloads merged, newest wins)
    UPDATE, DELETE   -> DELETE
    CREATE, DELETE   -> cancelled, nothing reaches the server
    DELETE, ...      -> DELETE (later entries are ignored)
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from osca_core.logging import get_logger
from osca_core.offline.local_database import LocalDatabase

logger = get_logger(__name__)


class QueueOperation(str, Enum):
    """Kind of pending mutation."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class OfflineQueueEntry:
    """One pending mutation as it was enqueued."""
    entry_id: int
    record_id: str
    operation: QueueOperation
    payload: Dict[str, Any] = field(default_factory=dict)
    enqueued_at: datetime = field(default_factory=datetime.now)
    attempts: int = 0
    last_error: Optional[str] = None


@dataclass
class PendingMutation:
    """Net effect of all queued entries for one record."""
    record_id: str
    operation: QueueOperation
    payload: Dict[str, Any]
    entry_ids: List[int]
    cancelled: bool = False


def fold(entries: Iterable[OfflineQueueEntry]) -> List[PendingMutation]:
    """
    Collapse queue entries into one PendingMutation per record.

    Args:
        entries: Entries in enqueue order

    Returns:
        Mutations ordered by each record's first entry
    """
    pending: Dict[str, PendingMutation] = {}

    for entry in entries:
        current = pending.get(entry.record_id)

        if current is None:
            pending[entry.record_id] = PendingMutation(
                record_id=entry.record_id,
                operation=entry.operation,
                payload=dict(entry.payload),
                entry_ids=[entry.entry_id],
            )
            continue

        current.entry_ids.append(entry.entry_id)

        if current.cancelled:
            continue

        if current.operation == QueueOperation.DELETE:
            logger.warning(
                f"Ignoring {entry.operation.value} queued after delete for {entry.record_id}"
            )
        elif entry.operation == QueueOperation.DELETE:
            if current.operation == QueueOperation.CREATE:
                current.cancelled = True
            else:
                current.operation = QueueOperation.DELETE
            current.payload = {}
        elif current.operation == QueueOperation.CREATE:
            # create + update/create: still a create, with the latest snapshot
            current.payload = dict(entry.payload)
        elif entry.operation == QueueOperation.UPDATE:
            current.payload = {**current.payload, **entry.payload}
        else:
            # update followed by a create: the full snapshot replaces the partial update
            current.operation = QueueOperation.CREATE
            current.payload = dict(entry.payload)

    return list(pending.values())


class OfflineQueue:
    """
    Persistent mutation log stored in the ``sync_queue`` table.

    Usage:
        queue = OfflineQueue(db)
        queue.append(record.id, QueueOperation.CREATE, record.to_dict())
        for mutation in queue.pending():
            ...
        queue.remove(mutation.entry_ids)
    """

    TABLE = "sync_queue"

    def __init__(self, db: LocalDatabase):
        self.db = db

    def append(
        self,
        record_id: str,
        operation: QueueOperation,
        payload: Optional[Dict[str, Any]] = None,
    ) -> OfflineQueueEntry:
        """Add an entry to the end of the log."""
        operation = QueueOperation(operation)
        enqueued_at = datetime.now()
        with self.db.transaction("queue append") as conn:
            cursor = conn.execute(
                f"""
                INSERT INTO {self.TABLE} (record_id, operation, payload_json, enqueued_at)
                VALUES (?, ?, ?, ?)
                """,
                [record_id, operation.value, json.dumps(payload or {}), enqueued_at.isoformat()],
            )
            entry_id = cursor.lastrowid

        logger.debug(f"Queued {operation.value} for {record_id} (entry {entry_id})")
        return OfflineQueueEntry(
            entry_id=entry_id,
            record_id=record_id,
            operation=operation,
            payload=dict(payload or {}),
            enqueued_at=enqueued_at,
        )

    def entries(self, record_id: Optional[str] = None) -> List[OfflineQueueEntry]:
        """Entries in enqueue order, optionally for one record."""
        sql = f"SELECT * FROM {self.TABLE}"
        params: List[Any] = []
        if record_id is not None:
            sql += " WHERE record_id = ?"
            params.append(record_id)
        sql += " ORDER BY id"

        return [
            OfflineQueueEntry(
                entry_id=row["id"],
                record_id=row["record_id"],
                operation=QueueOperation(row["operation"]),
                payload=json.loads(row["payload_json"] or "{}"),
                enqueued_at=datetime.fromisoformat(row["enqueued_at"]),
                attempts=row["attempts"] or 0,
                last_error=row["last_error"],
            )
            for row in self.db.query(sql, params, operation="queue read")
        ]

    def pending(self, record_id: Optional[str] = None) -> List[PendingMutation]:
        """Folded view of the log."""
        return fold(self.entries(record_id))

    def remove(self, entry_ids: Sequence[int]) -> int:
        """Drop entries whose remote call succeeded."""
        if not entry_ids:
            return 0
        placeholders = ", ".join("?" for _ in entry_ids)
        with self.db.transaction("queue remove") as conn:
            cursor = conn.execute(
                f"DELETE FROM {self.TABLE} WHERE id IN ({placeholders})", list(entry_ids)
            )
            return cursor.rowcount

    def discard(self, record_id: str) -> int:
        """Drop every entry for a record (local-only record deleted before sync)."""
        with self.db.transaction("queue discard") as conn:
            cursor = conn.execute(f"DELETE FROM {self.TABLE} WHERE record_id = ?", [record_id])
            return cursor.rowcount

    def mark_failed(self, entry_ids: Sequence[int], error: str) -> None:
        """Record a failed replay; the entries stay queued for the next sync."""
        if not entry_ids:
            return
        placeholders = ", ".join("?" for _ in entry_ids)
        with self.db.transaction("queue mark failed") as conn:
            conn.execute(
                f"""
                UPDATE {self.TABLE}
                SET attempts = attempts + 1, last_error = ?
                WHERE id IN ({placeholders})
                """,
                [error, *entry_ids],
            )

    def count(self) -> int:
        """Number of raw entries in the log."""
        rows = self.db.query(f"SELECT COUNT(*) FROM {self.TABLE}", operation="queue count")
        return int(rows[0][0])

    def pending_record_ids(self) -> List[str]:
        rows = self.db.query(
            f"SELECT record_id FROM {self.TABLE} GROUP BY record_id ORDER BY MIN(id)",
            operation="queue ids",
        )
        return [row["record_id"] for row in rows]
