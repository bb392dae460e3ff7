from typing import Dict, Iterable, List, Optional

import pandas as pd
import streamlit as st

from osca_core.models import SeniorRecord
from .theme import CARD_COLORS, PRIMARY_COLOR

# Columns of the seniors table, in display order
SENIOR_COLUMNS = [
    "ID", "Name", "Age", "Gender", "Barangay", "Address",
    "Status", "Emergency Contact", "Registered", "Offline",
]


def header(title: str, subtitle: str, icon: str = "👵"):
    st.markdown(f"""
        <div class="main-header">
            <div style="display:flex;gap:1.2rem;align-items:center;">
                <div style="font-size:3rem;filter:drop-shadow(0 0 15px rgba(255,255,255,.5));">{icon}</div>
                <div>
                    <h1 style="margin:0; font-size:2.4rem; color:white;">{title}</h1>
                    <p style="margin:.35rem 0 0 0;color:rgba(255,255,255,.85);font-size:1.05rem">{subtitle}</p>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)


def render_connection_badge(status: Dict, pending: int) -> None:
    """
    Connection pill plus pending-sync count.

    Args:
        status: ConnectionManager.get_status_display()
        pending: Records waiting for sync
    """
    if status.get("simulate_offline"):
        css, icon, label = "status-warning", "🧪", "Offline (simulated)"
    elif status.get("effective_online"):
        css, icon, label = "status-good", "🟢", "Online"
    elif status.get("status") == "degraded":
        css, icon, label = "status-warning", "🟠", "Server unreachable"
    else:
        css, icon, label = "status-danger", "🔴", "Offline"

    pending_html = ""
    if pending:
        pending_html = (
            f'<span class="status-badge status-warning">⏳ {pending} pending sync</span>'
        )

    st.markdown(f"""
        <div style="display:flex;gap:.6rem;align-items:center;">
            <span class="status-badge {css}"><span>{icon}</span><span>{label}</span></span>
            {pending_html}
        </div>
    """, unsafe_allow_html=True)


def render_stat_cards(cards: List[Dict[str, str]]) -> None:
    """Render SeniorStats.cards() as a row of metric cards."""
    columns = st.columns(len(cards))
    for column, card in zip(columns, cards):
        color = CARD_COLORS.get(card.get("color"), PRIMARY_COLOR)
        with column:
            st.markdown(f"""
                <div class="metric-card">
                    <div class="metric-title">{card['title']}</div>
                    <div class="metric-value" style="color:{color};">{card['value']}</div>
                    <div class="metric-change">{card['change']}</div>
                </div>
            """, unsafe_allow_html=True)


def seniors_to_dataframe(records: Iterable[SeniorRecord]) -> pd.DataFrame:
    """Flatten records into the table shown on the seniors page."""
    rows = []
    for record in records:
        rows.append({
            "ID": record.osca_id or record.id,
            "Name": record.full_name,
            "Age": record.age(),
            "Gender": record.gender.value.title(),
            "Barangay": record.barangay,
            "Address": record.address,
            "Status": record.status.value.title(),
            "Emergency Contact": (
                f"{record.emergency_contact_name} ({record.emergency_contact_phone})"
                if record.emergency_contact_name else ""
            ),
            "Registered": (record.registration_date or record.created_at or "")[:10],
            "Offline": record.is_offline,
        })
    return pd.DataFrame(rows, columns=SENIOR_COLUMNS)


def render_seniors_table(records: List[SeniorRecord], empty_message: Optional[str] = None) -> None:
    if not records:
        st.info(empty_message or "No senior citizens found.")
        return
    st.dataframe(seniors_to_dataframe(records), use_container_width=True, hide_index=True)


def sync_status_caption(status: Dict) -> Optional[str]:
    """
    One line about the last sync, or None before the first one.

    Args:
        status: SyncReconciler.get_status_display()
    """
    if status.get("is_syncing"):
        return "🔄 Syncing..."
    last_sync = status.get("last_sync")
    if not last_sync:
        return None
    when = last_sync[:16].replace("T", " ")
    if status.get("last_error"):
        return f"⚠️ Last sync {when}: {status.get('failed', 0)} failed ({status['last_error']})"
    return f"✅ Last sync {when}: {status.get('total_synced', 0)} synced this session"


def render_sync_status(status: Dict) -> None:
    caption = sync_status_caption(status)
    if caption:
        st.caption(caption)
