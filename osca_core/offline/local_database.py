# =============================================================================
# osca_core/offline/local_database.py
# Local SQLite Database for Offline Senior Records
# =============================================================================
"""
LocalDatabase - SQLite file that holds senior records captured while offline
and the log of mutations still to be replayed against Supabase.

LocalRecordStore - key-value view over the ``offline_seniors`` table.

Features:
- Automatic schema creation
- Upsert by local id (idempotent save)
- Restartable, lazily evaluated listing
- Every sqlite/filesystem failure surfaces as StorageUnavailable
"""

from __future__ import annotations
import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from osca_core.errors import RecordValidationError, StorageUnavailable
from osca_core.logging import get_logger
from osca_core.models import SeniorRecord

logger = get_logger(__name__)


class LocalDatabase:
    """
    Local SQLite database for offline data storage.

    One connection per instance; the Streamlit script thread is the only
    reader and writer.
    """

    DEFAULT_DB_PATH = Path("local_data") / "osca.db"

    SCHEMA = {
        "offline_seniors": """
            CREATE TABLE IF NOT EXISTS offline_seniors (
                id TEXT PRIMARY KEY,
                barangay TEXT,
                payload_json TEXT NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """,
        "sync_queue": """
            CREATE TABLE IF NOT EXISTS sync_queue (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                record_id TEXT NOT NULL,
                operation TEXT NOT NULL,
                payload_json TEXT,
                enqueued_at TEXT NOT NULL,
                attempts INTEGER DEFAULT 0,
                last_error TEXT
            )
        """,
        "sync_queue_record_idx": """
            CREATE INDEX IF NOT EXISTS sync_queue_record_idx ON sync_queue (record_id)
        """,
    }

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Initialize local database.

        Args:
            db_path: Path to SQLite database file (":memory:" is allowed)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self._connection: Optional[sqlite3.Connection] = None
        self._initialized = False

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == ":memory:"

    def _unavailable(self, operation: str, error: Exception) -> StorageUnavailable:
        logger.error(f"Local storage failure during {operation}: {error}")
        return StorageUnavailable(
            f"Local storage is unavailable: {error}",
            db_path=str(self.db_path),
            operation=operation,
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Open (once) and return the database connection."""
        if self._connection is None:
            try:
                if not self.in_memory:
                    self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
                self._connection.row_factory = sqlite3.Row
            except (sqlite3.Error, OSError) as e:
                raise self._unavailable("connect", e)
        return self._connection

    @contextmanager
    def transaction(self, operation: str = "transaction"):
        """Context manager for database transactions."""
        self.initialize()
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            conn.rollback()
            raise self._unavailable(operation, e)
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        conn = self._get_connection()
        try:
            for name, schema in self.SCHEMA.items():
                conn.execute(schema)
                logger.debug(f"Created/verified: {name}")
            conn.commit()
        except sqlite3.Error as e:
            raise self._unavailable("initialize", e)

        self._initialized = True
        logger.info(f"Local database initialized at: {self.db_path}")

    def query(self, sql: str, params: Optional[List] = None, operation: str = "query") -> List[sqlite3.Row]:
        """Execute a read query and return all rows."""
        self.initialize()
        try:
            return self._get_connection().execute(sql, params or []).fetchall()
        except sqlite3.Error as e:
            raise self._unavailable(operation, e)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._initialized = False


class StoredRecords:
    """
    Lazily evaluated, restartable view over the local store.

    Each iteration runs a fresh query, so the view reflects writes made
    after it was created and can be walked any number of times.
    """

    def __init__(self, store: LocalRecordStore, barangay: Optional[str] = None):
        self._store = store
        self._barangay = barangay

    def __iter__(self) -> Iterator[SeniorRecord]:
        return self._store._iter_records(self._barangay)

    def __len__(self) -> int:
        return self._store.count(self._barangay)

    def __bool__(self) -> bool:
        return len(self) > 0


class LocalRecordStore:
    """
    Offline store of senior records keyed by their (local) id.

    Usage:
        store = LocalRecordStore(LocalDatabase("local_data/osca.db"))
        store.save(record)
        for senior in store.list():
            ...
        store.delete(record.id)
    """

    TABLE = "offline_seniors"

    def __init__(self, db: LocalDatabase):
        self.db = db

    def save(self, record: SeniorRecord) -> SeniorRecord:
        """
        Insert or replace a record by id. Saving the same record twice leaves
        one row.

        Returns:
            The stored record (flagged is_offline)
        """
        if not isinstance(record, SeniorRecord):
            raise RecordValidationError("Only SeniorRecord instances can be stored offline")

        record.is_offline = True
        payload = record.to_dict()
        now = datetime.now().isoformat()

        with self.db.transaction("save") as conn:
            conn.execute(
                f"""
                INSERT INTO {self.TABLE} (id, barangay, payload_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    barangay = excluded.barangay,
                    payload_json = excluded.payload_json,
                    updated_at = excluded.updated_at
                """,
                [record.id, record.barangay, json.dumps(payload), now, now],
            )

        logger.debug(f"Saved offline senior {record.id}")
        return record

    def get(self, record_id: str) -> Optional[SeniorRecord]:
        rows = self.db.query(
            f"SELECT payload_json FROM {self.TABLE} WHERE id = ?", [record_id], operation="get"
        )
        return self._to_record(rows[0]) if rows else None

    def list(self, barangay: Optional[str] = None) -> StoredRecords:
        """All locally stored records (optionally one barangay), each with is_offline=True."""
        return StoredRecords(self, barangay)

    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False (and does nothing) when absent."""
        with self.db.transaction("delete") as conn:
            cursor = conn.execute(f"DELETE FROM {self.TABLE} WHERE id = ?", [record_id])
            removed = cursor.rowcount > 0
        if removed:
            logger.debug(f"Deleted offline senior {record_id}")
        return removed

    def count(self, barangay: Optional[str] = None) -> int:
        if barangay:
            rows = self.db.query(
                f"SELECT COUNT(*) FROM {self.TABLE} WHERE barangay = ?", [barangay], operation="count"
            )
        else:
            rows = self.db.query(f"SELECT COUNT(*) FROM {self.TABLE}", operation="count")
        return int(rows[0][0])

    def ids(self) -> List[str]:
        rows = self.db.query(f"SELECT id FROM {self.TABLE} ORDER BY created_at, id", operation="ids")
        return [row["id"] for row in rows]

    def _iter_records(self, barangay: Optional[str]) -> Iterator[SeniorRecord]:
        sql = f"SELECT payload_json FROM {self.TABLE}"
        params: List[Any] = []
        if barangay:
            sql += " WHERE barangay = ?"
            params.append(barangay)
        sql += " ORDER BY created_at, id"
        for row in self.db.query(sql, params, operation="list"):
            yield self._to_record(row)

    @staticmethod
    def _to_record(row: sqlite3.Row) -> SeniorRecord:
        data: Dict[str, Any] = json.loads(row["payload_json"])
        record = SeniorRecord.from_dict(data)
        record.is_offline = True
        return record


# Convenience accessor mirroring the other offline components
def get_local_database(db_path: Optional[Union[str, Path]] = None) -> LocalDatabase:
    """Create and initialize a LocalDatabase."""
    db = LocalDatabase(db_path)
    db.initialize()
    return db
