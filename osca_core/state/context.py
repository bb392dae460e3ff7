# =============================================================================
# osca_core/state/context.py
# Application Context (explicitly passed, no module globals)
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from osca_core.config import Settings
from osca_core.data import SeniorCitizensAPI, get_supabase_client
from osca_core.errors import Notification
from osca_core.logging import get_logger
from osca_core.offline import (
    ConnectionManager,
    LocalDatabase,
    LocalRecordStore,
    OfflineQueue,
    SyncReconciler,
    get_local_database,
)
from osca_core.offline.connection_manager import ConnectionState, Probe

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Everything a page or service needs, built once per session."""
    settings: Settings
    connection: ConnectionManager
    database: LocalDatabase
    store: LocalRecordStore
    queue: OfflineQueue
    api: Optional[SeniorCitizensAPI]
    reconciler: SyncReconciler
    notices: List[Notification] = field(default_factory=list)

    def on_connection_change(self, state: ConnectionState) -> None:
        """Turn an online/offline flip into a notice for the next page render."""
        if state.effective_online:
            pending = self.reconciler.pending_count()
            message = "Back online."
            if pending:
                message += f" {pending} record(s) waiting for sync."
            self.notices.append(Notification.success(message))
        else:
            self.notices.append(
                Notification.warning("You are offline. New records will be saved on this device.")
            )

    def drain_notices(self) -> List[Notification]:
        notices, self.notices = self.notices, []
        return notices

    def close(self) -> None:
        self.connection.unregister_callback(self.on_connection_change)
        self.database.close()


def build_app_context(
    settings: Settings,
    api: Optional[SeniorCitizensAPI] = None,
    probe: Optional[Probe] = None,
) -> AppContext:
    """
    Wire up the offline store, queue, connectivity monitor, API client and
    reconciler.

    Args:
        settings: Resolved settings
        api: API client to use instead of a real Supabase one (tests)
        probe: Reachability check replacing the network probes (tests)
    """
    database = get_local_database(settings.local_db_path)
    store = LocalRecordStore(database)
    queue = OfflineQueue(database)

    connection = ConnectionManager(
        supabase_url=settings.supabase_url,
        internet_probe=probe,
        supabase_probe=probe,
        timeout=settings.connection_timeout,
        check_interval=settings.check_interval,
    )

    if api is None and settings.has_remote:
        api = SeniorCitizensAPI(get_supabase_client(settings))
    elif api is None:
        logger.warning("Supabase is not configured; running offline only")

    reconciler = SyncReconciler(
        store=store,
        queue=queue,
        api=api,
        connection=connection,
        placeholder_password=settings.placeholder_password,
    )

    context = AppContext(
        settings=settings,
        connection=connection,
        database=database,
        store=store,
        queue=queue,
        api=api,
        reconciler=reconciler,
    )
    connection.register_callback(context.on_connection_change)
    return context
