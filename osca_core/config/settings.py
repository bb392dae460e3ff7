# =============================================================================
# osca_core/config/settings.py
# Application Settings (Streamlit secrets with environment fallback)
# =============================================================================
"""
Settings for the OSCA dashboard.

Expected secrets in .streamlit/secrets.toml:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"
    service_role_key = "your-service-role-key"

    [app]
    local_db_path = "local_data/osca.db"
    log_level = "INFO"

Every value can also come from the environment (SUPABASE_URL, SUPABASE_KEY,
SUPABASE_SERVICE_ROLE_KEY, OSCA_LOCAL_DB, OSCA_LOG_LEVEL), which is how the
tests and scripts run without a secrets file.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from osca_core.errors import ConfigurationError

DEFAULT_DB_PATH = Path("local_data") / "osca.db"


@dataclass
class Settings:
    """Resolved configuration for one app process."""
    supabase_url: str = ""
    supabase_key: str = ""
    service_role_key: str = ""
    local_db_path: Path = DEFAULT_DB_PATH
    connection_timeout: float = 5.0
    check_interval: float = 30.0
    # Used when a local snapshot no longer holds the account password
    placeholder_password: str = "temp123"
    log_level: str = "INFO"
    log_to_file: bool = True

    @property
    def has_remote(self) -> bool:
        return bool(self.supabase_url and (self.service_role_key or self.supabase_key))

    @property
    def api_key(self) -> str:
        """Service-role key when present (needed to provision auth users)."""
        return self.service_role_key or self.supabase_key

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def require_remote(self) -> None:
        """Raise ConfigurationError unless the Supabase backend is configured."""
        if not self.supabase_url:
            raise ConfigurationError(
                "Supabase URL is not configured", config_key="supabase.url"
            )
        if not self.api_key:
            raise ConfigurationError(
                "Supabase key is not configured", config_key="supabase.key"
            )


def _read_secrets() -> Dict[str, Any]:
    """Return st.secrets as a plain dict, or {} when no secrets file exists."""
    try:
        import streamlit as st
        return {section: dict(values) for section, values in st.secrets.items()
                if hasattr(values, "items")}
    except Exception:
        # st.secrets raises when .streamlit/secrets.toml is absent
        return {}


def load_settings(secrets: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings from Streamlit secrets, falling back to environment variables.

    Args:
        secrets: Pre-loaded secrets mapping (defaults to st.secrets)

    Returns:
        Settings instance
    """
    if secrets is None:
        secrets = _read_secrets()

    supabase = secrets.get("supabase", {})
    app = secrets.get("app", {})

    db_path = app.get("local_db_path") or os.getenv("OSCA_LOCAL_DB")

    return Settings(
        supabase_url=supabase.get("url") or os.getenv("SUPABASE_URL", ""),
        supabase_key=supabase.get("key") or os.getenv("SUPABASE_KEY", ""),
        service_role_key=(
            supabase.get("service_role_key")
            or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        ),
        local_db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
        connection_timeout=float(app.get("connection_timeout", 5.0)),
        check_interval=float(app.get("check_interval", 30.0)),
        placeholder_password=app.get("placeholder_password", "temp123"),
        log_level=app.get("log_level") or os.getenv("OSCA_LOG_LEVEL", "INFO"),
        log_to_file=bool(app.get("log_to_file", True)),
    )
