# =============================================================================
# 01_Senior_Citizens.py - Senior Citizen Records (online + offline)
# =============================================================================
"""
Senior Citizens page

Layout:
1. Connection badge, pending-sync count, "Simulate offline" toggle, "Sync Data"
2. Stat cards (online + offline records)
3. Search / status / barangay filters
4. Tabs: "Online Data" (Supabase, per-record Edit / Delete) and "Offline Data"
   (local store, per-record Sync)
5. Add Senior Citizen form and a test-record button

Every action runs as a widget callback so the lists rendered afterwards
already reflect it; the notifications it produced are shown as toasts.
"""
from __future__ import annotations
from datetime import date
from typing import Any, Dict, List

import streamlit as st

from osca_core.constants import PILI_BARANGAYS
from osca_core.errors import error_boundary, notify
from osca_core.models import (
    Gender,
    HousingCondition,
    LivingCondition,
    PhysicalHealthCondition,
    SeniorStatus,
)
from osca_core.services import (
    SeniorService,
    ServiceResult,
    calculate_stats,
    filter_seniors,
    unique_barangays,
)
from osca_core.state import get_app_context, get_session_user, init_state
from osca_core.ui import (
    apply_css,
    header,
    render_connection_badge,
    render_seniors_table,
    render_stat_cards,
    render_sync_status,
)

st.set_page_config(
    page_title="Senior Citizens - OSCA Dashboard",
    page_icon="👵",
    layout="wide",
)

init_state()
apply_css()

context = get_app_context()
service = SeniorService(context)
user = get_session_user()

MAX_BENEFICIARIES = 5
FORM_PREFIX = "form_"
EDIT_PREFIX = "edit_"


# =============================================================================
# ACTION CALLBACKS
# =============================================================================

def _queue_notifications(result: ServiceResult) -> None:
    st.session_state.setdefault("_notifications", []).extend(result.notifications)


@error_boundary(error_message="Sync failed")
def on_sync_all() -> None:
    _queue_notifications(service.sync_all())


@error_boundary(error_message="Sync failed")
def on_sync_one(record_id: str) -> None:
    _queue_notifications(service.sync_one(record_id))


@error_boundary(error_message="Could not delete the record")
def on_delete(record_id: str) -> None:
    _queue_notifications(service.delete_senior(record_id))


@error_boundary(error_message="Failed to create test offline data")
def on_create_test_record() -> None:
    result = service.create_test_offline_record(user)
    _queue_notifications(result)
    if result.success:
        st.session_state["active_tab"] = "offline"


def on_start_edit(record_id: str) -> None:
    st.session_state["editing_id"] = record_id
    st.session_state["_edit_errors"] = {}


def on_cancel_edit() -> None:
    st.session_state["editing_id"] = None
    st.session_state["_edit_errors"] = {}


@error_boundary(error_message="Could not save the changes")
def on_save_edit(record) -> None:
    prefix = f"{EDIT_PREFIX}{record.id}_"
    values = {
        key[len(prefix):]: value
        for key, value in st.session_state.items()
        if isinstance(key, str) and key.startswith(prefix)
    }
    result = service.edit_senior(record, values, user)
    _queue_notifications(result)
    if result.success:
        on_cancel_edit()
    else:
        st.session_state["_edit_errors"] = (result.metadata or {}).get("errors", {})


def _form_value(key: str, default: Any = None) -> Any:
    return st.session_state.get(FORM_PREFIX + key, default)


def _lines(key: str) -> List[str]:
    return [line.strip() for line in (_form_value(key) or "").splitlines() if line.strip()]


def _collect_form() -> Dict[str, Any]:
    beneficiaries = []
    for i in range(int(st.session_state.get("beneficiary_count", 0))):
        name = _form_value(f"ben_{i}_name", "")
        if not name:
            continue
        dob = _form_value(f"ben_{i}_dob")
        beneficiaries.append({
            "name": name,
            "relationship": _form_value(f"ben_{i}_relationship", ""),
            "dateOfBirth": dob.isoformat() if dob else "",
            "gender": _form_value(f"ben_{i}_gender", Gender.OTHER).value,
            "contactPhone": _form_value(f"ben_{i}_phone") or None,
            "isDependent": bool(_form_value(f"ben_{i}_dependent", False)),
        })

    dob = _form_value("dateOfBirth")
    return {
        "firstName": _form_value("firstName", ""),
        "lastName": _form_value("lastName", ""),
        "dateOfBirth": dob.isoformat() if dob else "",
        "gender": _form_value("gender", Gender.MALE).value,
        "barangay": _form_value("barangay", ""),
        "address": _form_value("address", ""),
        "contactPerson": _form_value("contactPerson") or None,
        "contactPhone": _form_value("contactPhone") or None,
        "contactRelationship": _form_value("contactRelationship") or None,
        "emergencyContactName": _form_value("emergencyContactName", ""),
        "emergencyContactPhone": _form_value("emergencyContactPhone", ""),
        "emergencyContactRelationship": _form_value("emergencyContactRelationship", ""),
        "medicalConditions": _lines("medicalConditions"),
        "medications": _lines("medications"),
        "notes": _form_value("notes") or None,
        "housingCondition": _form_value("housingCondition", HousingCondition.OWNED).value,
        "physicalHealthCondition": _form_value("physicalHealthCondition", PhysicalHealthCondition.GOOD).value,
        "monthlyIncome": _form_value("monthlyIncome", 0.0),
        "monthlyPension": _form_value("monthlyPension", 0.0),
        "livingCondition": _form_value("livingCondition", LivingCondition.INDEPENDENT).value,
        "beneficiaries": beneficiaries,
        "email": _form_value("email", ""),
        "password": _form_value("password", ""),
        "confirmPassword": _form_value("confirmPassword", ""),
    }


@error_boundary(error_message="Failed to add senior citizen")
def on_register() -> None:
    result = service.register_senior(_collect_form(), user)
    _queue_notifications(result)
    st.session_state["_form_errors"] = (result.metadata or {}).get("errors", {}) if not result.success else {}
    if result.success and not service.is_online:
        st.session_state["active_tab"] = "offline"


# =============================================================================
# HEADER + CONNECTION BAR
# =============================================================================
header(
    "Senior Citizens",
    "Registered senior citizens"
    + (f" of Barangay {user.barangay}" if user.scoped_barangay else " of Pili, Camarines Sur"),
)

for notification in st.session_state.pop("_notifications", []):
    notify(notification)

context.connection.refresh()
for notice in context.drain_notices():
    notify(notice)
effective_online = context.connection.effective_online

bar_status, bar_toggle, bar_sync = st.columns([3, 1.2, 1])
with bar_status:
    render_connection_badge(context.connection.get_status_display(), service.pending_sync_count())
    render_sync_status(context.reconciler.get_status_display())
with bar_toggle:
    st.toggle("Simulate offline", key="simulate_offline", help="Testing aid: act as if Supabase were unreachable")
with bar_sync:
    st.button(
        "🔄 Sync Data",
        on_click=on_sync_all,
        disabled=not effective_online,
        use_container_width=True,
    )

# =============================================================================
# DATA
# =============================================================================
online_result = service.fetch_online_seniors(user, st.session_state.get("barangay_filter"))
if not online_result.success:
    for notification in online_result.notifications:
        notify(notification)
elif effective_online:
    st.session_state["_server_snapshot"] = online_result.data or []

# Offline: the last server list loaded in this session, edits queued on top
showing_snapshot = not effective_online
server_records = st.session_state.get("_server_snapshot", []) if showing_snapshot else (online_result.data or [])
online_seniors = service.with_queued_changes(server_records).data or []
queued_ids = set(service.queued_record_ids())

offline_result = service.fetch_offline_seniors(user)
offline_seniors = offline_result.data or []

# =============================================================================
# STAT CARDS
# =============================================================================
render_stat_cards(calculate_stats(online_seniors, offline_seniors).cards())

# =============================================================================
# FILTERS
# =============================================================================
col_search, col_status, col_barangay = st.columns([2, 1, 1])
with col_search:
    st.text_input("Search", key="search_query", placeholder="Name, OSCA ID, barangay or address")
with col_status:
    st.selectbox(
        "Status",
        ["all"] + [s.value for s in SeniorStatus],
        key="status_filter",
        format_func=lambda v: "All statuses" if v == "all" else v.title(),
    )
with col_barangay:
    if user.scoped_barangay:
        st.selectbox("Barangay", [user.scoped_barangay], disabled=True)
        barangay_filter = user.scoped_barangay
    else:
        options = ["all"] + unique_barangays(online_seniors, offline_seniors)
        if st.session_state.get("barangay_filter") not in options:
            st.session_state["barangay_filter"] = "all"
        barangay_filter = st.selectbox(
            "Barangay",
            options,
            key="barangay_filter",
            format_func=lambda v: "All barangays" if v == "all" else v,
        )


def _apply_filters(records):
    return filter_seniors(
        records,
        search=st.session_state.get("search_query", ""),
        status=st.session_state.get("status_filter", "all"),
        barangay=barangay_filter,
    )


# =============================================================================
# TABS
# =============================================================================
tab_online, tab_offline = st.tabs([
    f"🌐 Online Data ({len(online_seniors)})",
    f"💾 Offline Data ({len(offline_seniors)})",
])

if st.session_state.get("active_tab") == "offline" and offline_seniors:
    st.caption("New records were saved offline; open the **Offline Data** tab to review them.")


def _render_edit_form(record) -> None:
    prefix = f"{EDIT_PREFIX}{record.id}_"
    errors = st.session_state.get("_edit_errors") or {}
    if errors:
        st.error("\n".join(f"- **{field}**: {message}" for field, message in errors.items()))

    with st.form(f"edit_senior_{record.id}"):
        st.markdown(f"#### Edit {record.full_name}")
        c1, c2, c3 = st.columns(3)
        c1.text_input("Contact person", value=record.contact_person or "", key=prefix + "contactPerson")
        c2.text_input("Contact phone", value=record.contact_phone or "", key=prefix + "contactPhone")
        c3.text_input(
            "Relationship", value=record.contact_relationship or "", key=prefix + "contactRelationship"
        )
        c1.text_input(
            "Emergency contact name", value=record.emergency_contact_name, key=prefix + "emergencyContactName"
        )
        c2.text_input(
            "Emergency contact phone", value=record.emergency_contact_phone, key=prefix + "emergencyContactPhone"
        )
        c3.text_input(
            "Emergency contact relationship",
            value=record.emergency_contact_relationship,
            key=prefix + "emergencyContactRelationship",
        )

        c1, c2, c3 = st.columns(3)
        c1.selectbox(
            "Housing condition", list(HousingCondition),
            index=list(HousingCondition).index(record.housing_condition),
            format_func=lambda v: v.value.replace("_", " ").title(), key=prefix + "housingCondition",
        )
        c2.selectbox(
            "Physical health", list(PhysicalHealthCondition),
            index=list(PhysicalHealthCondition).index(record.physical_health_condition),
            format_func=lambda v: v.value.title(), key=prefix + "physicalHealthCondition",
        )
        c3.selectbox(
            "Living condition", list(LivingCondition),
            index=list(LivingCondition).index(record.living_condition),
            format_func=lambda v: v.value.replace("_", " ").title(), key=prefix + "livingCondition",
        )
        c1.number_input(
            "Monthly income (₱)", min_value=0.0, step=100.0,
            value=float(record.monthly_income), key=prefix + "monthlyIncome",
        )
        c2.number_input(
            "Monthly pension (₱)", min_value=0.0, step=100.0,
            value=float(record.monthly_pension), key=prefix + "monthlyPension",
        )
        c3.selectbox(
            "Status", list(SeniorStatus),
            index=list(SeniorStatus).index(record.status),
            format_func=lambda v: v.value.title(), key=prefix + "status",
        )
        st.text_area("Notes", value=record.notes or "", key=prefix + "notes")

        c_save, c_cancel = st.columns(2)
        c_save.form_submit_button(
            "Save changes" if effective_online else "Save offline (queued)",
            on_click=on_save_edit,
            args=(record,),
        )
        c_cancel.form_submit_button("Cancel", on_click=on_cancel_edit)


with tab_online:
    if showing_snapshot:
        st.warning(
            "You are offline. Showing the server records last loaded in this session; "
            "edits and deletions are queued until the next sync."
        )
    filtered_online = _apply_filters(online_seniors)
    render_seniors_table(filtered_online, "No senior citizens found on the server.")

    editing_id = st.session_state.get("editing_id")
    for record in filtered_online:
        col_name, col_edit, col_delete = st.columns([4, 1, 1])
        with col_name:
            badge = " · ⏳ changes queued" if record.id in queued_ids else ""
            st.markdown(f"**{record.full_name}** · {record.barangay} · {record.status.value.title()}{badge}")
        with col_edit:
            st.button(
                "Edit",
                key=f"start_edit_{record.id}",
                on_click=on_start_edit,
                args=(record.id,),
                use_container_width=True,
            )
        with col_delete:
            st.button(
                "Delete",
                key=f"delete_online_{record.id}",
                on_click=on_delete,
                args=(record.id,),
                use_container_width=True,
            )
        if record.id == editing_id:
            _render_edit_form(record)

with tab_offline:
    filtered_offline = _apply_filters(offline_seniors)
    render_seniors_table(filtered_offline, "No offline records waiting for sync.")

    for record in filtered_offline:
        col_name, col_sync, col_delete = st.columns([4, 1, 1])
        with col_name:
            st.markdown(f"**{record.full_name}** · {record.barangay} · ⏳ pending sync")
        with col_sync:
            st.button(
                "Sync",
                key=f"sync_{record.id}",
                on_click=on_sync_one,
                args=(record.id,),
                disabled=not effective_online,
                use_container_width=True,
            )
        with col_delete:
            st.button(
                "Delete",
                key=f"delete_{record.id}",
                on_click=on_delete,
                args=(record.id,),
                use_container_width=True,
            )

    st.button("🧪 Create test offline record", on_click=on_create_test_record)

# =============================================================================
# ADD SENIOR CITIZEN
# =============================================================================
with st.expander("➕ Add Senior Citizen", expanded=False):
    errors = st.session_state.get("_form_errors") or {}
    if errors:
        st.error("\n".join(f"- **{field}**: {message}" for field, message in errors.items()))

    st.number_input("Number of beneficiaries", 0, MAX_BENEFICIARIES, key="beneficiary_count")

    with st.form("add_senior", clear_on_submit=False):
        st.markdown("#### Personal information")
        c1, c2 = st.columns(2)
        c1.text_input("First name", key=FORM_PREFIX + "firstName")
        c2.text_input("Last name", key=FORM_PREFIX + "lastName")
        c1.date_input(
            "Date of birth",
            value=date(1960, 1, 1),
            min_value=date(1900, 1, 1),
            max_value=date.today(),
            key=FORM_PREFIX + "dateOfBirth",
        )
        c2.selectbox("Gender", list(Gender), format_func=lambda g: g.value.title(), key=FORM_PREFIX + "gender")

        st.markdown("#### Address")
        if user.scoped_barangay:
            st.text_input("Barangay", value=user.scoped_barangay, disabled=True)
        else:
            st.selectbox("Barangay", PILI_BARANGAYS, key=FORM_PREFIX + "barangay")
        st.text_area("Address", key=FORM_PREFIX + "address")

        st.markdown("#### Contacts")
        c1, c2, c3 = st.columns(3)
        c1.text_input("Contact person", key=FORM_PREFIX + "contactPerson")
        c2.text_input("Contact phone", key=FORM_PREFIX + "contactPhone")
        c3.text_input("Relationship", key=FORM_PREFIX + "contactRelationship")
        c1.text_input("Emergency contact name", key=FORM_PREFIX + "emergencyContactName")
        c2.text_input("Emergency contact phone", key=FORM_PREFIX + "emergencyContactPhone")
        c3.text_input("Emergency contact relationship", key=FORM_PREFIX + "emergencyContactRelationship")

        st.markdown("#### Health and welfare")
        c1, c2 = st.columns(2)
        c1.text_area("Medical conditions (one per line)", key=FORM_PREFIX + "medicalConditions")
        c2.text_area("Medications (one per line)", key=FORM_PREFIX + "medications")
        c1, c2, c3 = st.columns(3)
        c1.selectbox(
            "Housing condition", list(HousingCondition),
            format_func=lambda v: v.value.replace("_", " ").title(), key=FORM_PREFIX + "housingCondition",
        )
        c2.selectbox(
            "Physical health", list(PhysicalHealthCondition), index=1,
            format_func=lambda v: v.value.title(), key=FORM_PREFIX + "physicalHealthCondition",
        )
        c3.selectbox(
            "Living condition", list(LivingCondition),
            format_func=lambda v: v.value.replace("_", " ").title(), key=FORM_PREFIX + "livingCondition",
        )
        c1.number_input("Monthly income (₱)", min_value=0.0, step=100.0, key=FORM_PREFIX + "monthlyIncome")
        c2.number_input("Monthly pension (₱)", min_value=0.0, step=100.0, key=FORM_PREFIX + "monthlyPension")
        st.text_area("Notes", key=FORM_PREFIX + "notes")

        for i in range(int(st.session_state.get("beneficiary_count", 0))):
            st.markdown(f"#### Beneficiary {i + 1}")
            c1, c2, c3 = st.columns(3)
            c1.text_input("Name", key=f"{FORM_PREFIX}ben_{i}_name")
            c2.text_input("Relationship", key=f"{FORM_PREFIX}ben_{i}_relationship")
            c3.date_input(
                "Date of birth", value=date(1990, 1, 1), min_value=date(1900, 1, 1),
                key=f"{FORM_PREFIX}ben_{i}_dob",
            )
            c1.selectbox(
                "Gender", list(Gender), format_func=lambda g: g.value.title(),
                key=f"{FORM_PREFIX}ben_{i}_gender",
            )
            c2.text_input("Phone", key=f"{FORM_PREFIX}ben_{i}_phone")
            c3.checkbox("Dependent", key=f"{FORM_PREFIX}ben_{i}_dependent")

        st.markdown("#### Login account")
        c1, c2, c3 = st.columns(3)
        c1.text_input("Email", key=FORM_PREFIX + "email")
        c2.text_input("Password", type="password", key=FORM_PREFIX + "password")
        c3.text_input("Confirm password", type="password", key=FORM_PREFIX + "confirmPassword")

        st.form_submit_button(
            "Save senior citizen" if effective_online else "Save offline",
            on_click=on_register,
        )
