import streamlit as st

# === COLOR PALETTE (OSCA green) ===
PRIMARY_COLOR    = "#00af8f"
SECONDARY_COLOR  = "#00977b"
ACCENT_COLOR     = "#ffd416"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
TEXT_COLOR       = "#2c3e50"
SUBTLE_TEXT      = "#495057"
GRID_COLOR       = "#e5e7eb"
BACKGROUND_COLOR = "#f8f9fa"
CARD_BG_LIGHT    = "#ffffff"

# Stat-card color keys -> hex
CARD_COLORS = {
    "primary": PRIMARY_COLOR,
    "accent": ACCENT_COLOR,
    "danger": DANGER_COLOR,
}


def apply_css():
    """Global page styling shared by every page."""
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Segoe UI','Inter','SF Pro Display',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            padding: 2rem; border-radius: 16px; margin-bottom: 2rem;
            border: 1px solid rgba(255,255,255,0.1); box-shadow: 0 8px 32px rgba(0,175,143,.3);
        }}
        .stTabs [data-baseweb="tab-list"] {{
            gap: 8px; background-color: {CARD_BG_LIGHT}; padding: 8px; border-radius: 10px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.05); border: 1px solid {GRID_COLOR};
        }}
        .stTabs [data-baseweb="tab"] {{
            height: 50px; padding: 0 24px; background-color: {BACKGROUND_COLOR}; border-radius: 8px;
            color: {SUBTLE_TEXT}; font-weight: 500; border: none; transition: all 0.3s ease;
        }}
        .stTabs [aria-selected="true"] {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white; font-weight: 600; box-shadow: 0 4px 12px rgba(0,175,143,.4);
        }}
        .metric-card {{
            background: {CARD_BG_LIGHT}; padding: 20px; border-radius: 10px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.08); margin: 10px 0; border: 1px solid {GRID_COLOR};
        }}
        .metric-card .metric-title {{ color: {SUBTLE_TEXT}; font-size: .85rem; margin-bottom: .35rem; }}
        .metric-card .metric-value {{ font-size: 1.9rem; font-weight: 700; }}
        .metric-card .metric-change {{ color: {SUBTLE_TEXT}; font-size: .8rem; margin-top: .25rem; }}
        .status-badge {{
            display: inline-flex; gap: .4rem; align-items: center; padding: .35rem .8rem;
            border-radius: 999px; font-size: .85rem; font-weight: 600;
        }}
        .status-good {{ background: rgba(16,185,129,.15); color: {SUCCESS_COLOR}; border: 1px solid rgba(16,185,129,.3); }}
        .status-warning {{ background: rgba(245,158,11,.15); color: {WARNING_COLOR}; border: 1px solid rgba(245,158,11,.3); }}
        .status-danger {{ background: rgba(239,68,68,.15); color: {DANGER_COLOR}; border: 1px solid rgba(239,68,68,.3); }}
        .stButton button {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white; border: none; border-radius: 10px; padding: .48rem 1.2rem; font-weight: 600;
            transition: all .3s ease; cursor: pointer;
        }}
        .stButton button:hover {{ transform: translateY(-2px); box-shadow: 0 6px 20px rgba(0,175,143,.3); }}
        .stButton button:disabled {{ background: #ced4da; color: #6c757d; cursor: not-allowed; opacity: 0.65; }}
        </style>
    """, unsafe_allow_html=True)
