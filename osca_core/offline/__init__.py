# =============================================================================
# osca_core/offline/__init__.py
# Offline Capture and Sync for Senior Citizen Records
# =============================================================================
"""
Offline Capture and Sync Module

Records registered while Supabase cannot be reached are kept in a local
SQLite file and pushed to the server when the user asks for a sync.

Architecture:
------------
┌─────────────────────────────────────────────────────────────────┐
│                       OFFLINE CAPTURE & SYNC                     │
├─────────────────────────────────────────────────────────────────┤
│                                                                  │
│   ┌──────────────────┐        ┌──────────────────────────────┐  │
│   │  ConnectionMgr   │        │        SeniorService          │  │
│   │ (effective state)│───────►│  (register / update / delete) │  │
│   └──────────────────┘        └──────────────────────────────┘  │
│                                      │                │          │
│                        offline       ▼                ▼  online  │
│              ┌──────────────────┐ ┌──────────┐   ┌──────────┐   │
│              │ LocalRecordStore │ │ Offline  │   │ Supabase │   │
│              │    (snapshots)   │ │  Queue   │   │  (API)   │   │
│              └──────────────────┘ └──────────┘   └──────────┘   │
│                        │               │              ▲          │
│                        └───────┬───────┘              │          │
│                                ▼                      │          │
│                      ┌──────────────────┐             │          │
│                      │  SyncReconciler  │─────────────┘          │
│                      │ (bulk / single)  │                        │
│                      └──────────────────┘                        │
└─────────────────────────────────────────────────────────────────┘

Usage:
------
from osca_core.offline import get_local_database, LocalRecordStore, OfflineQueue

db = get_local_database("local_data/osca.db")
store = LocalRecordStore(db)
queue = OfflineQueue(db)
"""

from osca_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

from osca_core.offline.local_database import (
    LocalDatabase,
    LocalRecordStore,
    StoredRecords,
    get_local_database,
)

from osca_core.offline.sync_queue import (
    OfflineQueue,
    OfflineQueueEntry,
    PendingMutation,
    QueueOperation,
    fold,
)

from osca_core.offline.sync_engine import (
    SyncOutcome,
    SyncReconciler,
    SyncReport,
    SyncState,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Local Database
    "LocalDatabase",
    "LocalRecordStore",
    "StoredRecords",
    "get_local_database",
    # Offline Queue
    "OfflineQueue",
    "OfflineQueueEntry",
    "PendingMutation",
    "QueueOperation",
    "fold",
    # Sync Reconciler
    "SyncOutcome",
    "SyncReconciler",
    "SyncReport",
    "SyncState",
]
