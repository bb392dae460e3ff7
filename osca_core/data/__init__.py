# =============================================================================
# osca_core/data/__init__.py
# Remote data access (Supabase)
# =============================================================================

from .supabase_client import ApiResult, SeniorCitizensAPI, get_supabase_client

__all__ = ["ApiResult", "SeniorCitizensAPI", "get_supabase_client"]
