# =============================================================================
# osca_core/offline/sync_engine.py
# Sync Reconciler: replays offline work against Supabase
# =============================================================================
"""
SyncReconciler - pushes records captured offline to the server.

Features:
- Bulk sync (every stored record, then queued updates/deletes)
- Individual sync of one record
- Partial success: one failed record never stops the others
- Per-record outcomes plus one aggregate summary
- Sync status (last sync, last error) for the page

Sync runs only when the user asks for it; nothing here reacts to
connectivity changes by itself.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from osca_core.errors import Notification, OfflineSyncRejected, PartialSyncFailure
from osca_core.logging import LogContext, get_logger
from osca_core.models import SeniorRecord, build_create_payload, is_local_id
from osca_core.offline.connection_manager import ConnectionManager
from osca_core.offline.local_database import LocalRecordStore
from osca_core.offline.sync_queue import OfflineQueue, PendingMutation, QueueOperation

if TYPE_CHECKING:
    from osca_core.data.supabase_client import SeniorCitizensAPI

logger = get_logger(__name__)


@dataclass
class SyncOutcome:
    """Result of replaying one record."""
    record_id: str
    name: str
    operation: QueueOperation
    success: bool
    server_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.record_id

    def notification(self) -> Notification:
        if self.operation == QueueOperation.CREATE:
            if self.success:
                return Notification.success(f"{self.label} synced to server successfully!")
            return Notification.error(f"Failed to sync {self.label}")
        if self.operation == QueueOperation.DELETE:
            if self.success:
                return Notification.success(f"Deletion of {self.label} synced to server")
            return Notification.error(f"Failed to sync deletion of {self.label}")
        if self.success:
            return Notification.success(f"Changes to {self.label} synced to server")
        return Notification.error(f"Failed to sync changes to {self.label}")


@dataclass
class SyncReport:
    """All outcomes of one bulk sync."""
    outcomes: List[SyncOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> List[SyncOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[SyncOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def summary(self) -> Notification:
        if not self.outcomes:
            return Notification.info("No offline data to sync")
        if self.all_succeeded:
            return Notification.success("All offline data synced successfully")
        if not self.succeeded:
            return Notification.error(f"Sync failed for all {self.total} record(s)")
        return Notification.warning(
            f"Synced {len(self.succeeded)} of {self.total} record(s); {len(self.failed)} failed"
        )

    def notifications(self) -> List[Notification]:
        """One notification per record, followed by the aggregate summary."""
        return [o.notification() for o in self.outcomes] + [self.summary()]

    def to_error(self) -> Optional[PartialSyncFailure]:
        if self.all_succeeded:
            return None
        return PartialSyncFailure(
            self.summary().message,
            succeeded=len(self.succeeded),
            failed_ids=[o.record_id for o in self.failed],
        )


@dataclass
class SyncState:
    """Current sync state."""
    is_syncing: bool = False
    last_sync: Optional[datetime] = None
    last_sync_success: Optional[datetime] = None
    total_synced: int = 0
    failed_count: int = 0
    last_error: Optional[str] = None


class SyncReconciler:
    """
    Drains the local store and the offline queue into Supabase.

    Usage:
        reconciler = SyncReconciler(store, queue, api, connection)
        report = reconciler.sync_all()
        for notification in report.notifications():
            notify(notification)
    """

    def __init__(
        self,
        store: LocalRecordStore,
        queue: OfflineQueue,
        api: SeniorCitizensAPI,
        connection: ConnectionManager,
        placeholder_password: str = "temp123",
    ):
        self.store = store
        self.queue = queue
        self.api = api
        self.connection = connection
        self.placeholder_password = placeholder_password
        self._state = SyncState()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._state.is_syncing

    def pending_count(self) -> int:
        """Logical records still waiting for the server."""
        pending = set(self.store.ids())
        for mutation in self.queue.pending():
            if not mutation.cancelled and not is_local_id(mutation.record_id):
                pending.add(mutation.record_id)
        return len(pending)

    def _require_online(self) -> None:
        if not self.connection.effective_online:
            logger.info("Sync rejected: effectively offline")
            raise OfflineSyncRejected()

    # -------------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------------

    def sync_all(self) -> SyncReport:
        """
        Sync every pending record.

        Raises:
            OfflineSyncRejected: when effectively offline (no call is made)
        """
        self._require_online()
        report = SyncReport()
        self._start()

        try:
            with LogContext(logger, "Bulk sync"):
                for record in list(self.store.list()):
                    report.outcomes.append(self._push_create(record))

                for mutation in self.queue.pending():
                    outcome = self._replay(mutation)
                    if outcome is not None:
                        report.outcomes.append(outcome)
        finally:
            report.finished_at = datetime.now()
            self._finish(report.outcomes)

        logger.info(
            f"Bulk sync finished: {len(report.succeeded)} succeeded, {len(report.failed)} failed"
        )
        return report

    def sync_one(self, record_id: str) -> SyncOutcome:
        """
        Sync a single record chosen by the user.

        Raises:
            OfflineSyncRejected: when effectively offline (no call is made)
        """
        self._require_online()
        self._start()
        outcome = None

        try:
            record = self.store.get(record_id)
            if record is not None:
                outcome = self._push_create(record)
            else:
                for mutation in self.queue.pending(record_id):
                    outcome = self._replay(mutation)
            if outcome is None:
                outcome = SyncOutcome(
                    record_id=record_id,
                    name="",
                    operation=QueueOperation.CREATE,
                    success=False,
                    error="No pending changes for this record",
                )
        finally:
            self._finish([outcome] if outcome else [])

        return outcome

    # -------------------------------------------------------------------------
    # Replay
    # -------------------------------------------------------------------------

    def _push_create(self, record: SeniorRecord) -> SyncOutcome:
        payload = build_create_payload(record, self.placeholder_password)
        outcome = SyncOutcome(
            record_id=record.id,
            name=record.full_name,
            operation=QueueOperation.CREATE,
            success=False,
        )

        result = self._call_remote("create_senior_citizen", payload)
        if result is not None and result.success:
            outcome.success = True
            outcome.server_id = _server_id(result.data)
            self.store.delete(record.id)
            self.queue.discard(record.id)
            logger.info(f"Synced offline senior {record.id} -> {outcome.server_id}")
        else:
            outcome.error = _failure_message(result)
            entry_ids = [entry.entry_id for entry in self.queue.entries(record.id)]
            self.queue.mark_failed(entry_ids, outcome.error)
            logger.warning(f"Failed to sync offline senior {record.id}: {outcome.error}")

        return outcome

    def _replay(self, mutation: PendingMutation) -> Optional[SyncOutcome]:
        """Replay one queued mutation; None when nothing had to reach the server."""
        if mutation.cancelled:
            self.queue.remove(mutation.entry_ids)
            return None

        if is_local_id(mutation.record_id):
            # Local records are pushed from the store snapshot; leftovers
            # without a snapshot belong to records already removed locally.
            if self.store.get(mutation.record_id) is None:
                logger.warning(f"Dropping queued {mutation.operation.value} for removed record {mutation.record_id}")
                self.queue.remove(mutation.entry_ids)
            return None

        name = _payload_name(mutation.payload)
        outcome = SyncOutcome(
            record_id=mutation.record_id,
            name=name,
            operation=mutation.operation,
            success=False,
        )

        if mutation.operation == QueueOperation.DELETE:
            result = self._call_remote("delete_senior_citizen", mutation.record_id)
        else:
            result = self._call_remote("update_senior_citizen", mutation.record_id, mutation.payload)

        if result is not None and result.success:
            outcome.success = True
            outcome.server_id = mutation.record_id
            self.queue.remove(mutation.entry_ids)
        else:
            outcome.error = _failure_message(result)
            self.queue.mark_failed(mutation.entry_ids, outcome.error)
            logger.warning(
                f"Failed to replay {mutation.operation.value} for {mutation.record_id}: {outcome.error}"
            )
        return outcome

    def _call_remote(self, method: str, *args) -> Any:
        if self.api is None:
            return _Failure("Supabase is not configured")
        try:
            return getattr(self.api, method)(*args)
        except Exception as e:
            logger.error(f"Remote call {method} raised: {e}")
            return _Failure(str(e))

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _start(self) -> None:
        self._state.is_syncing = True
        self._state.last_sync = datetime.now()

    def _finish(self, outcomes: List[SyncOutcome]) -> None:
        succeeded = sum(1 for o in outcomes if o.success)
        failed = len(outcomes) - succeeded
        self._state.is_syncing = False
        self._state.total_synced += succeeded
        self._state.failed_count = failed
        if failed == 0:
            self._state.last_sync_success = datetime.now()
            self._state.last_error = None
        else:
            self._state.last_error = next(o.error for o in outcomes if not o.success)

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        return {
            "is_syncing": self._state.is_syncing,
            "pending": self.pending_count(),
            "failed": self._state.failed_count,
            "total_synced": self._state.total_synced,
            "last_sync": self._state.last_sync.isoformat() if self._state.last_sync else None,
            "last_success": (
                self._state.last_sync_success.isoformat()
                if self._state.last_sync_success else None
            ),
            "last_error": self._state.last_error,
        }


@dataclass
class _Failure:
    """Stand-in result for a remote call that raised."""
    message: str
    success: bool = False
    data: Any = None


def _server_id(data: Any) -> Optional[str]:
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    return None


def _failure_message(result: Any) -> str:
    message = getattr(result, "message", None)
    return message or "Remote call failed"


def _payload_name(payload: Dict[str, Any]) -> str:
    return f"{payload.get('firstName', '')} {payload.get('lastName', '')}".strip()
