from .theme import apply_css
from .components import (
    header,
    render_connection_badge,
    render_stat_cards,
    render_seniors_table,
    render_sync_status,
    seniors_to_dataframe,
    sync_status_caption,
)

__all__ = [
    "apply_css",
    "header",
    "render_connection_badge",
    "render_stat_cards",
    "render_seniors_table",
    "render_sync_status",
    "seniors_to_dataframe",
    "sync_status_caption",
]
