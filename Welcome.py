from __future__ import annotations
import streamlit as st

from osca_core.constants import PILI_BARANGAYS
from osca_core.models import UserRole
from osca_core.state import get_app_context, get_session_user, init_state, switch_session_user
from osca_core.ui import apply_css, header, render_connection_badge

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="OSCA Dashboard - Pili, Camarines Sur",
    page_icon="👵",
    layout="wide",
)

# Initialize session state
init_state()

apply_css()

ROLE_LABELS = {
    UserRole.OSCA: "OSCA (Office for Senior Citizens Affairs)",
    UserRole.BASCA: "BASCA (Barangay staff)",
    UserRole.SENIOR: "Senior citizen",
}

# ============================================================================
# HERO HEADER
# ============================================================================
header(
    "OSCA Senior Citizen Dashboard",
    "Registration and offline-ready records for the senior citizens of Pili, Camarines Sur",
)

context = get_app_context()
context.connection.refresh()
render_connection_badge(
    context.connection.get_status_display(),
    context.reconciler.pending_count(),
)

# ============================================================================
# SESSION ROLE
# ============================================================================
st.markdown("### Who is using the dashboard?")

user = get_session_user()
roles = list(UserRole)

with st.form("session_role"):
    role = st.radio(
        "Role",
        roles,
        index=roles.index(user.role),
        format_func=lambda r: ROLE_LABELS[r],
    )
    barangay = st.selectbox(
        "Barangay (BASCA only)",
        PILI_BARANGAYS,
        index=PILI_BARANGAYS.index(user.barangay) if user.barangay in PILI_BARANGAYS else 0,
    )
    name = st.text_input("Your name", value=user.name)
    submitted = st.form_submit_button("Continue")

if submitted:
    switch_session_user(role, barangay if role == UserRole.BASCA else None, name)
    st.toast(f"Signed in as {ROLE_LABELS[role]}", icon="✅")
    st.switch_page("pages/01_Senior_Citizens.py")

st.caption(
    "BASCA users only see and register senior citizens of their own barangay. "
    "Records captured while offline stay on this device until synced."
)
