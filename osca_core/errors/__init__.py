# =============================================================================
# osca_core/errors/__init__.py
# Centralized Error Handling for the OSCA Dashboard
# =============================================================================

from .exceptions import (
    OscaError,
    StorageUnavailable,
    RecordValidationError,
    RemoteCreateFailed,
    RemoteOperationFailed,
    PartialSyncFailure,
    OfflineSyncRejected,
    ConfigurationError,
)

from .handlers import (
    Notification,
    handle_error,
    notify,
    error_boundary,
)

__all__ = [
    # Exceptions
    "OscaError",
    "StorageUnavailable",
    "RecordValidationError",
    "RemoteCreateFailed",
    "RemoteOperationFailed",
    "PartialSyncFailure",
    "OfflineSyncRejected",
    "ConfigurationError",
    # Handlers
    "Notification",
    "handle_error",
    "notify",
    "error_boundary",
]
