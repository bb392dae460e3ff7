from .barangays import (
    PILI_BARANGAYS,
    DEFAULT_REGION,
    DEFAULT_PROVINCE,
    DEFAULT_CITY,
    is_valid_barangay,
    get_barangay_code,
    default_address_data,
)

__all__ = [
    "PILI_BARANGAYS",
    "DEFAULT_REGION",
    "DEFAULT_PROVINCE",
    "DEFAULT_CITY",
    "is_valid_barangay",
    "get_barangay_code",
    "default_address_data",
]
