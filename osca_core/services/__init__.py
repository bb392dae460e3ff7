# =============================================================================
# osca_core/services/__init__.py
# Service Layer for the OSCA Dashboard
# Separates business logic from UI presentation
# =============================================================================
"""
Service Layer for the OSCA Dashboard

Pages never touch Supabase, the local store or the offline queue
directly; they call a service and render the notifications it returns.

Usage Example:
-------------
    from osca_core.errors import notify
    from osca_core.services import SeniorService
    from osca_core.state import get_app_context

    service = SeniorService(get_app_context())

    # Register (goes to Supabase when online, local store when offline)
    result = service.register_senior(form, user)

    # Bulk sync of everything captured offline
    result = service.sync_all()
    for notification in result.notifications:
        notify(notification)
"""

from .base_service import BaseService, ServiceResult
from .senior_service import (
    SeniorService,
    SeniorStats,
    calculate_stats,
    edit_changes,
    filter_seniors,
    unique_barangays,
)

__all__ = [
    "BaseService",
    "ServiceResult",
    "SeniorService",
    "SeniorStats",
    "calculate_stats",
    "edit_changes",
    "filter_seniors",
    "unique_barangays",
]
