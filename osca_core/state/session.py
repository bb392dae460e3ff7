import streamlit as st

from osca_core.config import load_settings
from osca_core.logging import get_logger, setup_logging
from osca_core.models import SessionUser, UserRole
from osca_core.state.context import AppContext, build_app_context

logger = get_logger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "role": UserRole.OSCA.value,
    "barangay": None,
    "user_id": None,
    "user_name": "",
    "simulate_offline": False,
    "active_tab": "online",
    "editing_id": None,
    "search_query": "",
    "status_filter": "all",
    "barangay_filter": "all",
    "debug_mode": False,
    "_app_context": None,
}

@st.cache_resource
def _configure_logging(level: int, log_to_file: bool) -> bool:
    """Once per server process; reruns must not stack handlers."""
    setup_logging(level=level, log_to_file=log_to_file)
    return True


def init_state():
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_app_context() -> AppContext:
    """One AppContext per browser session, built on first use."""
    init_state()
    context = st.session_state.get("_app_context")
    if context is None:
        settings = load_settings()
        _configure_logging(settings.logging_level, settings.log_to_file)
        context = build_app_context(settings)
        st.session_state["_app_context"] = context
        logger.info("Application context created for session")

    # The toggle lives in session state; the connection manager follows it
    context.connection.simulate_offline = bool(st.session_state.get("simulate_offline", False))
    return context


def get_session_user() -> SessionUser:
    init_state()
    return SessionUser(
        role=UserRole(st.session_state.get("role") or UserRole.OSCA.value),
        barangay=st.session_state.get("barangay"),
        user_id=st.session_state.get("user_id"),
        name=st.session_state.get("user_name") or "",
    )


def set_session_user(role: UserRole, barangay=None, name: str = "") -> None:
    st.session_state["role"] = UserRole(role).value
    st.session_state["barangay"] = barangay
    st.session_state["user_name"] = name
    # BASCA users only ever filter their own barangay
    st.session_state["barangay_filter"] = barangay if role == UserRole.BASCA and barangay else "all"


def reset_filters() -> None:
    for key in ("search_query", "status_filter", "barangay_filter", "active_tab"):
        st.session_state[key] = SESSION_DEFAULTS[key]


def switch_session_user(role: UserRole, barangay=None, name: str = "") -> bool:
    """
    Sign in as ``role``; filters from the previous role are cleared when the
    role or barangay scope changes.

    Returns:
        True when the scope changed
    """
    role = UserRole(role)
    current = get_session_user()
    changed = current.role != role or current.barangay != barangay
    if changed:
        reset_filters()
        logger.info(f"Session switched to {role.value} ({barangay or 'all barangays'})")
    set_session_user(role, barangay, name)
    return changed
