# =============================================================================
# osca_core/constants/barangays.py
# Official barangay list for Pili, Camarines Sur
# =============================================================================

import re
from typing import Dict

PILI_BARANGAYS = (
    "Anayan",
    "Bagong Sirang",
    "Binanwaanan",
    "Binobong",
    "Cadlan",
    "Caroyroyan",
    "Curry",
    "Del Rosario",
    "Himaao",
    "La Purisima",
    "New San Roque",
    "Old San Roque",
    "Palestina",
    "Pawili",
    "Sagrada",
    "Sagurong",
    "San Agustin",
    "San Antonio",
    "San Isidro",
    "San Jose",
    "San Juan",
    "San Vicente",
    "Santiago",
    "Santo Niño",
    "Tagbong",
    "Tinangis",
)

# Municipality every BASCA account belongs to
DEFAULT_REGION = {"region_code": "05", "region_name": "Region V - Bicol"}
DEFAULT_PROVINCE = {"province_code": "0517", "province_name": "Camarines Sur"}
DEFAULT_CITY = {"city_code": "051724", "city_name": "Pili"}


def is_valid_barangay(barangay: str) -> bool:
    return barangay in PILI_BARANGAYS


def get_barangay_code(barangay: str) -> str:
    """'Santo Niño (Pob.)' -> 'santo_niño_pob.'"""
    code = re.sub(r"\s+", "_", barangay.strip().lower())
    code = re.sub(r"[()]", "", code)
    return re.sub(r"__+", "_", code)


def default_address_data(barangay: str) -> Dict[str, Dict[str, str]]:
    """Address breakdown auto-filled for BASCA users."""
    return {
        "region": dict(DEFAULT_REGION),
        "province": dict(DEFAULT_PROVINCE),
        "city": dict(DEFAULT_CITY),
        "barangay": {
            "brgy_code": get_barangay_code(barangay),
            "brgy_name": barangay,
        },
    }
