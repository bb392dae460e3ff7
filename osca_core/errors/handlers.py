# =============================================================================
# osca_core/errors/handlers.py
# Error Handling Utilities for the OSCA Dashboard
# =============================================================================

from __future__ import annotations
import functools
import traceback
from dataclasses import dataclass
from typing import Optional, Callable, TypeVar
import streamlit as st

from osca_core.logging import get_logger
from .exceptions import OscaError

logger = get_logger(__name__)

T = TypeVar("T")

TOAST_ICONS = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
}


@dataclass(frozen=True)
class Notification:
    """A user-facing message produced by a service or the sync reconciler."""
    level: str
    message: str

    @classmethod
    def success(cls, message: str) -> Notification:
        return cls("success", message)

    @classmethod
    def error(cls, message: str) -> Notification:
        return cls("error", message)

    @classmethod
    def warning(cls, message: str) -> Notification:
        return cls("warning", message)

    @classmethod
    def info(cls, message: str) -> Notification:
        return cls("info", message)


def notify(notification: Notification) -> None:
    """Render a notification as a Streamlit toast."""
    icon = TOAST_ICONS.get(notification.level, TOAST_ICONS["info"])
    st.toast(notification.message, icon=icon)


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Centralized error handling function.

    Every failure of a page action ends here: it is logged and turned into
    a toast. Nothing is re-raised, so the page keeps rendering.

    Args:
        error: The exception to handle
        show_user_message: Whether to display the error to the user
        log_error: Whether to log the error
        user_message: Custom message to show user (uses error message if None)
    """
    if isinstance(error, OscaError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=error,
        )

    if show_user_message:
        if recoverable:
            notify(Notification.error(message))
        else:
            st.error(f"Critical Error: {message}. Please contact the OSCA administrator.")

        if details and st.session_state.get("debug_mode", False):
            with st.expander("Error Details", expanded=False):
                st.json(details)


def error_boundary(
    default_return=None,
    error_message: Optional[str] = None,
):
    """
    Decorator to wrap page callbacks with error handling.

    Usage:
        @error_boundary(default_return=[], error_message="Could not load seniors")
        def load_rows():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                handle_error(e, user_message=error_message)
                return default_return

        return wrapper

    return decorator
