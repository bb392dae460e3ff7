# =============================================================================
# osca_core/config/__init__.py
# =============================================================================

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
