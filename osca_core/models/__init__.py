# =============================================================================
# osca_core/models/__init__.py
# Senior Citizen Data Model
# =============================================================================

from .senior import (
    Gender,
    HousingCondition,
    PhysicalHealthCondition,
    LivingCondition,
    SeniorStatus,
    UserRole,
    RegionComponent,
    ProvinceComponent,
    CityComponent,
    BarangayComponent,
    AddressData,
    Beneficiary,
    SeniorRecord,
    build_create_payload,
    payload_to_row,
    new_local_id,
    is_local_id,
    now_iso,
)
from .user import SessionUser
from .validation import (
    SENIOR_MIN_AGE,
    calculate_age,
    is_valid_email,
    validate_registration,
)

__all__ = [
    "Gender",
    "HousingCondition",
    "PhysicalHealthCondition",
    "LivingCondition",
    "SeniorStatus",
    "UserRole",
    "RegionComponent",
    "ProvinceComponent",
    "CityComponent",
    "BarangayComponent",
    "AddressData",
    "Beneficiary",
    "SeniorRecord",
    "build_create_payload",
    "payload_to_row",
    "new_local_id",
    "is_local_id",
    "now_iso",
    "SessionUser",
    "SENIOR_MIN_AGE",
    "calculate_age",
    "is_valid_email",
    "validate_registration",
]
