# =============================================================================
# osca_core/services/base_service.py
# Base Service Class with Common Functionality
# =============================================================================

from __future__ import annotations
from abc import ABC
from typing import Optional, Dict, Any, Callable, List
from dataclasses import dataclass, field

from osca_core.logging import get_logger, LogContext
from osca_core.errors import handle_error, Notification, OscaError


@dataclass
class ServiceResult:
    """
    Standard result container for service operations.

    Provides consistent structure for all service method returns. Pages
    turn ``notifications`` into toasts.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    notifications: List[Notification] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(
        cls,
        data: Any = None,
        metadata: Dict[str, Any] = None,
        notifications: Optional[List[Notification]] = None,
    ) -> ServiceResult:
        """Create a successful result"""
        return cls(success=True, data=data, metadata=metadata, notifications=notifications or [])

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Dict[str, Any] = None,
        notifications: Optional[List[Notification]] = None,
    ) -> ServiceResult:
        """Create a failed result"""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata,
            notifications=notifications or [Notification.error(error)],
        )

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        """Create a failed result from an exception"""
        if isinstance(e, OscaError):
            return cls(
                success=False,
                error=e.message,
                error_code=e.code,
                metadata=e.details,
                notifications=[Notification.error(e.message)],
            )
        return cls(
            success=False,
            error=str(e),
            error_code="EXCEPTION",
            notifications=[Notification.error(str(e))],
        )


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Logging
    - Error handling
    - Result standardization

    Usage:
        class MyService(BaseService):
            def do_something(self) -> ServiceResult:
                with self.log_operation("Doing something"):
                    result = ...
                    return ServiceResult.ok(result)
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str) -> LogContext:
        """
        Create a logging context for an operation.

        Usage:
            with self.log_operation("Syncing offline data"):
                reconciler.sync_all()
        """
        return LogContext(self.logger, operation)

    def safe_execute(
        self,
        operation: str,
        func: Callable[..., Any],
        *args,
        **kwargs
    ) -> ServiceResult:
        """
        Execute a function with error handling and logging.

        Args:
            operation: Description of the operation
            func: Function to execute
            *args, **kwargs: Arguments to pass to func

        Returns:
            ServiceResult with success/failure status
        """
        try:
            with self.log_operation(operation):
                result = func(*args, **kwargs)
            return ServiceResult.ok(result)
        except OscaError as e:
            handle_error(e, show_user_message=False)
            return ServiceResult.from_exception(e)
        except Exception as e:
            self.logger.error(f"{operation} failed: {e}", exc_info=True)
            return ServiceResult.fail(str(e))
