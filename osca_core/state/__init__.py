from .context import AppContext, build_app_context
from .session import (
    SESSION_DEFAULTS,
    init_state,
    get_app_context,
    get_session_user,
    set_session_user,
    switch_session_user,
    reset_filters,
)

__all__ = [
    "AppContext",
    "build_app_context",
    "SESSION_DEFAULTS",
    "init_state",
    "get_app_context",
    "get_session_user",
    "set_session_user",
    "switch_session_user",
    "reset_filters",
]
