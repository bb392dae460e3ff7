# =============================================================================
# osca_core/__init__.py
# Core package for the OSCA Senior Citizen Welfare Dashboard
# =============================================================================
"""
OSCA Senior Citizen Welfare Dashboard - core package.

Senior-citizen registration for the Office for Senior Citizens Affairs (OSCA)
and the barangay associations (BASCA), with offline capture and later sync
of records to the Supabase backend.
"""

__version__ = "0.1.0"
