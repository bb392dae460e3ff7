# =============================================================================
# osca_core/errors/exceptions.py
# Custom Exception Hierarchy for the OSCA Dashboard
# =============================================================================

from typing import Optional, Dict, Any, List


class OscaError(Exception):
    """
    Base exception for all OSCA dashboard errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "SYNC_001")
        details: Additional context as a dictionary
        recoverable: Whether the user can retry the operation
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "OSCA_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# LOCAL STORAGE EXCEPTIONS
# =============================================================================

class StorageUnavailable(OscaError):
    """Raised when the local SQLite store cannot be opened, read or written"""

    def __init__(
        self,
        message: str,
        db_path: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if db_path:
            details["db_path"] = db_path
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# DATA VALIDATION EXCEPTIONS
# =============================================================================

class RecordValidationError(OscaError):
    """Raised when a senior record or registration form fails validation"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )
        self.field = field
        self.errors = errors or ({field: message} if field else {})


# =============================================================================
# SYNC / REMOTE EXCEPTIONS
# =============================================================================

class RemoteCreateFailed(OscaError):
    """Raised when the backend rejects or fails to create a senior record"""

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if record_id:
            details["record_id"] = record_id

        super().__init__(
            message=message,
            code="SYNC_001",
            details=details,
            **kwargs,
        )
        self.record_id = record_id


class RemoteOperationFailed(OscaError):
    """Raised when a remote update or delete fails"""

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if record_id:
            details["record_id"] = record_id
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="SYNC_002",
            details=details,
            **kwargs,
        )
        self.record_id = record_id


class PartialSyncFailure(OscaError):
    """Raised when a bulk sync finished with one or more failed records"""

    def __init__(
        self,
        message: str,
        succeeded: int = 0,
        failed_ids: Optional[List[str]] = None,
        **kwargs,
    ):
        failed_ids = failed_ids or []
        details = kwargs.pop("details", {})
        details["succeeded"] = succeeded
        details["failed"] = len(failed_ids)
        details["failed_ids"] = failed_ids

        super().__init__(
            message=message,
            code="SYNC_003",
            details=details,
            **kwargs,
        )
        self.succeeded = succeeded
        self.failed_ids = failed_ids


class OfflineSyncRejected(OscaError):
    """Raised when a sync is requested while effectively offline"""

    def __init__(self, message: str = "Cannot sync while offline", **kwargs):
        super().__init__(message=message, code="SYNC_004", **kwargs)


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(OscaError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
