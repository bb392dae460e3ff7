# =============================================================================
# osca_core/models/senior.py
# Senior Citizen Record Model
# =============================================================================
"""
Typed records for senior citizens and their beneficiaries.

Three shapes of the same record exist:

* the local snapshot (camelCase keys, what the offline store persists),
* the create payload sent to the Remote API Client (the snapshot without
  offline-only fields),
* the remote ``senior_citizens`` row (snake_case columns, address breakdown
  flattened to codes, email/phone on the joined ``users`` row).

``SeniorRecord.from_dict`` is the store boundary: unknown keys or values of
the wrong shape raise ``RecordValidationError`` instead of being carried
along silently.
"""

from __future__ import annotations
import re
import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from osca_core.errors import RecordValidationError

LOCAL_ID_PREFIX = "offline-"

E = TypeVar("E", bound=Enum)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class HousingCondition(str, Enum):
    OWNED = "owned"
    RENTED = "rented"
    WITH_FAMILY = "with_family"
    INSTITUTION = "institution"
    OTHER = "other"


class PhysicalHealthCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"


class LivingCondition(str, Enum):
    INDEPENDENT = "independent"
    WITH_FAMILY = "with_family"
    WITH_CAREGIVER = "with_caregiver"
    INSTITUTION = "institution"
    OTHER = "other"


class SeniorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DECEASED = "deceased"


class UserRole(str, Enum):
    """Who is acting on the dashboard."""
    OSCA = "osca"        # Municipal office, all barangays
    BASCA = "basca"      # Barangay association, one barangay
    SENIOR = "senior"    # Self-service


# =============================================================================
# KEY CONVERSION / COERCION HELPERS
# =============================================================================

def to_camel(name: str) -> str:
    """'emergency_contact_name' -> 'emergencyContactName'"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_snake(name: str) -> str:
    """'emergencyContactName' -> 'emergency_contact_name'"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def new_local_id() -> str:
    """Identifier for a record created while offline."""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4()}"


def is_local_id(record_id: Optional[str]) -> bool:
    """True for ids that were generated on this device and never reached the server."""
    return bool(record_id) and str(record_id).startswith(LOCAL_ID_PREFIX)


def now_iso() -> str:
    return datetime.now().isoformat()


def _reject_unknown(data: Mapping[str, Any], allowed, shape: str) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise RecordValidationError(
            f"Unknown {shape} field(s): {', '.join(unknown)}",
            field=unknown[0],
        )


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RecordValidationError(f"'{key}' must be text", field=key)
    return value


def _req_str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = _opt_str(data, key)
    return default if value is None else value


def _number(data: Mapping[str, Any], key: str, default: Optional[float] = 0.0) -> Optional[float]:
    value = data.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise RecordValidationError(f"'{key}' must be a number", field=key)
    try:
        number = float(value)
    except ValueError:
        raise RecordValidationError(f"'{key}' must be a number", field=key)
    if number < 0:
        raise RecordValidationError(f"'{key}' must be 0 or greater", field=key)
    return number


def _str_list(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key) or []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise RecordValidationError(f"'{key}' must be a list of text values", field=key)
    return list(value)


def _enum(enum_cls: Type[E], data: Mapping[str, Any], key: str, default: E) -> E:
    value = data.get(key)
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise RecordValidationError(f"'{key}' must be one of: {choices}", field=key)


def _coerce(enum_cls: Type[E], value: Any, default: E) -> E:
    """Lenient enum parse for server rows, which are not under our control."""
    try:
        return enum_cls(value) if value else default
    except ValueError:
        return default


def _bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise RecordValidationError(f"'{key}' must be true or false", field=key)
    return value


# =============================================================================
# ADDRESS BREAKDOWN (closed variants)
# =============================================================================

@dataclass(frozen=True)
class RegionComponent:
    region_code: str
    region_name: str = ""


@dataclass(frozen=True)
class ProvinceComponent:
    province_code: str
    province_name: str = ""


@dataclass(frozen=True)
class CityComponent:
    city_code: str
    city_name: str = ""


@dataclass(frozen=True)
class BarangayComponent:
    brgy_code: str
    brgy_name: str = ""


AddressComponent = Union[RegionComponent, ProvinceComponent, CityComponent, BarangayComponent]

# addressData key -> component type
ADDRESS_COMPONENTS = {
    "region": RegionComponent,
    "province": ProvinceComponent,
    "city": CityComponent,
    "barangay": BarangayComponent,
}


def _component_from_dict(key: str, raw: Any) -> Optional[AddressComponent]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise RecordValidationError(f"addressData.{key} must be an object", field=f"addressData.{key}")
    component_cls = ADDRESS_COMPONENTS[key]
    names = [f.name for f in fields(component_cls)]
    _reject_unknown(raw, names, f"addressData.{key}")
    code_field = names[0]
    if not raw.get(code_field):
        raise RecordValidationError(
            f"addressData.{key}.{code_field} is required", field=f"addressData.{key}"
        )
    return component_cls(**{name: _req_str(raw, name) for name in names})


@dataclass(frozen=True)
class AddressData:
    """Structured address; every level is independently optional."""
    region: Optional[RegionComponent] = None
    province: Optional[ProvinceComponent] = None
    city: Optional[CityComponent] = None
    barangay: Optional[BarangayComponent] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> AddressData:
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise RecordValidationError("addressData must be an object", field="addressData")
        _reject_unknown(data, ADDRESS_COMPONENTS, "addressData")
        return cls(**{key: _component_from_dict(key, data.get(key)) for key in ADDRESS_COMPONENTS})

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        result = {}
        for key in ADDRESS_COMPONENTS:
            component = getattr(self, key)
            if component is not None:
                result[key] = {f.name: getattr(component, f.name) for f in fields(component)}
        return result

    def is_empty(self) -> bool:
        return all(getattr(self, key) is None for key in ADDRESS_COMPONENTS)


# =============================================================================
# BENEFICIARY
# =============================================================================

@dataclass
class Beneficiary:
    name: str
    relationship: str
    date_of_birth: str
    gender: Gender = Gender.OTHER
    address: Optional[str] = None
    contact_phone: Optional[str] = None
    occupation: Optional[str] = None
    monthly_income: Optional[float] = None
    is_dependent: bool = False
    id: Optional[str] = None
    senior_citizen_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Beneficiary:
        if not isinstance(data, Mapping):
            raise RecordValidationError("Each beneficiary must be an object", field="beneficiaries")
        _reject_unknown(data, BENEFICIARY_KEYS, "beneficiary")
        return cls(
            name=_req_str(data, "name"),
            relationship=_req_str(data, "relationship"),
            date_of_birth=_req_str(data, "dateOfBirth"),
            gender=_enum(Gender, data, "gender", Gender.OTHER),
            address=_opt_str(data, "address"),
            contact_phone=_opt_str(data, "contactPhone"),
            occupation=_opt_str(data, "occupation"),
            monthly_income=_number(data, "monthlyIncome", default=None),
            is_dependent=_bool(data, "isDependent"),
            id=_opt_str(data, "id"),
            senior_citizen_id=_opt_str(data, "seniorCitizenId"),
            created_at=_opt_str(data, "createdAt"),
            updated_at=_opt_str(data, "updatedAt"),
        )

    @classmethod
    def from_remote_row(cls, row: Mapping[str, Any]) -> Beneficiary:
        return cls(
            name=row.get("name") or "",
            relationship=row.get("relationship") or "",
            date_of_birth=row.get("date_of_birth") or "",
            gender=_coerce(Gender, row.get("gender"), Gender.OTHER),
            address=row.get("address"),
            contact_phone=row.get("contact_phone"),
            occupation=row.get("occupation"),
            monthly_income=row.get("monthly_income"),
            is_dependent=bool(row.get("is_dependent", False)),
            id=None if row.get("id") is None else str(row["id"]),
            senior_citizen_id=row.get("senior_citizen_id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name in BENEFICIARY_OPTIONAL_META:
                continue
            data[to_camel(f.name)] = value.value if isinstance(value, Enum) else value
        return data

    def to_remote_row(self, senior_citizen_id: str) -> Dict[str, Any]:
        row = {
            to_snake(key): value
            for key, value in self.to_dict().items()
            if key not in ("id", "createdAt", "updatedAt")
        }
        row["senior_citizen_id"] = senior_citizen_id
        return row


BENEFICIARY_KEYS = tuple(to_camel(f.name) for f in fields(Beneficiary))
BENEFICIARY_OPTIONAL_META = ("id", "senior_citizen_id", "created_at", "updated_at")


# =============================================================================
# SENIOR RECORD
# =============================================================================

@dataclass
class SeniorRecord:
    """One senior citizen, either held locally (is_offline) or read from the server."""

    id: str
    first_name: str
    last_name: str
    date_of_birth: str
    gender: Gender = Gender.OTHER
    barangay: str = ""
    barangay_code: str = ""
    address: str = ""
    address_data: AddressData = field(default_factory=AddressData)

    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_relationship: Optional[str] = None
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    emergency_contact_relationship: str = ""

    medical_conditions: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)

    housing_condition: HousingCondition = HousingCondition.OWNED
    physical_health_condition: PhysicalHealthCondition = PhysicalHealthCondition.GOOD
    monthly_income: float = 0.0
    monthly_pension: float = 0.0
    living_condition: LivingCondition = LivingCondition.INDEPENDENT

    beneficiaries: List[Beneficiary] = field(default_factory=list)

    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None

    profile_picture: Optional[str] = None
    senior_id_photo: Optional[str] = None

    user_id: Optional[str] = None
    osca_id: Optional[str] = None
    status: SeniorStatus = SeniorStatus.ACTIVE
    notes: Optional[str] = None
    last_medical_checkup: Optional[str] = None
    documents: List[str] = field(default_factory=list)

    registration_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    is_offline: bool = False

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_local_id(self) -> bool:
        return is_local_id(self.id)

    def age(self, today: Optional[date] = None) -> Optional[int]:
        from osca_core.models.validation import calculate_age
        try:
            return calculate_age(self.date_of_birth, today)
        except ValueError:
            return None

    # -------------------------------------------------------------------------
    # Local snapshot (camelCase)
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SeniorRecord:
        """Parse a local snapshot, rejecting unknown keys and malformed values."""
        if not isinstance(data, Mapping):
            raise RecordValidationError("Senior record must be an object")
        _reject_unknown(data, SENIOR_KEYS, "senior record")

        beneficiaries = data.get("beneficiaries") or []
        if not isinstance(beneficiaries, (list, tuple)):
            raise RecordValidationError("'beneficiaries' must be a list", field="beneficiaries")

        record_id = data.get("id")
        if not record_id:
            raise RecordValidationError("Senior record has no id", field="id")

        return cls(
            id=str(record_id),
            first_name=_req_str(data, "firstName"),
            last_name=_req_str(data, "lastName"),
            date_of_birth=_req_str(data, "dateOfBirth"),
            gender=_enum(Gender, data, "gender", Gender.OTHER),
            barangay=_req_str(data, "barangay"),
            barangay_code=_req_str(data, "barangayCode"),
            address=_req_str(data, "address"),
            address_data=AddressData.from_dict(data.get("addressData")),
            contact_person=_opt_str(data, "contactPerson"),
            contact_phone=_opt_str(data, "contactPhone"),
            contact_relationship=_opt_str(data, "contactRelationship"),
            emergency_contact_name=_req_str(data, "emergencyContactName"),
            emergency_contact_phone=_req_str(data, "emergencyContactPhone"),
            emergency_contact_relationship=_req_str(data, "emergencyContactRelationship"),
            medical_conditions=_str_list(data, "medicalConditions"),
            medications=_str_list(data, "medications"),
            housing_condition=_enum(HousingCondition, data, "housingCondition", HousingCondition.OWNED),
            physical_health_condition=_enum(
                PhysicalHealthCondition, data, "physicalHealthCondition", PhysicalHealthCondition.GOOD
            ),
            monthly_income=_number(data, "monthlyIncome"),
            monthly_pension=_number(data, "monthlyPension"),
            living_condition=_enum(LivingCondition, data, "livingCondition", LivingCondition.INDEPENDENT),
            beneficiaries=[Beneficiary.from_dict(b) for b in beneficiaries],
            email=_opt_str(data, "email"),
            password=_opt_str(data, "password"),
            phone=_opt_str(data, "phone"),
            profile_picture=_opt_str(data, "profilePicture"),
            senior_id_photo=_opt_str(data, "seniorIdPhoto"),
            user_id=_opt_str(data, "userId"),
            osca_id=_opt_str(data, "oscaId"),
            status=_enum(SeniorStatus, data, "status", SeniorStatus.ACTIVE),
            notes=_opt_str(data, "notes"),
            last_medical_checkup=_opt_str(data, "lastMedicalCheckup"),
            documents=_str_list(data, "documents"),
            registration_date=_opt_str(data, "registrationDate"),
            created_at=_opt_str(data, "createdAt"),
            updated_at=_opt_str(data, "updatedAt"),
            created_by=_opt_str(data, "createdBy"),
            updated_by=_opt_str(data, "updatedBy"),
            is_offline=_bool(data, "isOffline"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase snapshot layout (JSON-safe)."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, AddressData):
                value = value.to_dict()
            elif f.name == "beneficiaries":
                value = [b.to_dict() for b in value]
            elif isinstance(value, list):
                value = list(value)
            data[to_camel(f.name)] = value
        return data

    # -------------------------------------------------------------------------
    # Remote row (snake_case)
    # -------------------------------------------------------------------------

    @classmethod
    def from_remote_row(cls, row: Mapping[str, Any]) -> SeniorRecord:
        """Map a ``senior_citizens`` row (with joined users/beneficiaries)."""
        user = row.get("users") or {}
        barangay_code = row.get("barangay_code")

        address = AddressData(
            region=RegionComponent(row["region_code"]) if row.get("region_code") else None,
            province=ProvinceComponent(row["province_code"]) if row.get("province_code") else None,
            city=CityComponent(row["city_code"]) if row.get("city_code") else None,
            barangay=(
                BarangayComponent(barangay_code, row.get("barangay") or "")
                if barangay_code else None
            ),
        )

        return cls(
            id=str(row["id"]),
            user_id=row.get("user_id"),
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            date_of_birth=row.get("date_of_birth") or "",
            gender=_coerce(Gender, row.get("gender"), Gender.OTHER),
            barangay=row.get("barangay") or "",
            barangay_code=barangay_code or "",
            address=row.get("address") or "",
            address_data=address,
            contact_person=row.get("contact_person"),
            contact_phone=row.get("contact_phone"),
            contact_relationship=row.get("contact_relationship"),
            emergency_contact_name=row.get("emergency_contact_name") or "",
            emergency_contact_phone=row.get("emergency_contact_phone") or "",
            emergency_contact_relationship=row.get("emergency_contact_relationship") or "",
            medical_conditions=list(row.get("medical_conditions") or []),
            medications=list(row.get("medications") or []),
            housing_condition=_coerce(HousingCondition, row.get("housing_condition"), HousingCondition.OWNED),
            physical_health_condition=_coerce(
                PhysicalHealthCondition, row.get("physical_health_condition"), PhysicalHealthCondition.GOOD
            ),
            monthly_income=float(row.get("monthly_income") or 0),
            monthly_pension=float(row.get("monthly_pension") or 0),
            living_condition=_coerce(LivingCondition, row.get("living_condition"), LivingCondition.INDEPENDENT),
            beneficiaries=[Beneficiary.from_remote_row(b) for b in row.get("beneficiaries") or []],
            email=user.get("email"),
            phone=user.get("phone"),
            profile_picture=row.get("profile_picture"),
            senior_id_photo=row.get("senior_id_photo"),
            osca_id=row.get("osca_id"),
            status=_coerce(SeniorStatus, row.get("status"), SeniorStatus.ACTIVE),
            notes=row.get("notes"),
            last_medical_checkup=row.get("last_medical_checkup"),
            documents=list(row.get("documents") or []),
            registration_date=row.get("registration_date"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            created_by=row.get("created_by"),
            updated_by=row.get("updated_by"),
            is_offline=False,
        )


SENIOR_KEYS = tuple(to_camel(f.name) for f in fields(SeniorRecord))


# =============================================================================
# REMOTE PAYLOADS
# =============================================================================

# Fields the Remote API Client accepts on create, in SeniorRecord attribute names
CREATE_PAYLOAD_FIELDS = (
    "email",
    "password",
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "barangay",
    "barangay_code",
    "address",
    "address_data",
    "contact_person",
    "contact_phone",
    "contact_relationship",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relationship",
    "medical_conditions",
    "medications",
    "notes",
    "housing_condition",
    "physical_health_condition",
    "monthly_income",
    "monthly_pension",
    "living_condition",
    "profile_picture",
    "senior_id_photo",
    "beneficiaries",
)

# Payload keys that never become senior_citizens columns
NON_COLUMN_KEYS = ("email", "password", "beneficiaries", "addressData", "id", "isOffline", "phone")

# addressData level -> code key, which is also the column name
ADDRESS_CODE_COLUMNS = {
    "region": "region_code",
    "province": "province_code",
    "city": "city_code",
}


def build_create_payload(record: SeniorRecord, placeholder_password: str = "temp123") -> Dict[str, Any]:
    """
    Remote "create" payload for a record (local id, offline flag and
    timestamps stripped). A placeholder password is filled in when the
    local snapshot no longer holds one.
    """
    snapshot = record.to_dict()
    payload = {to_camel(name): snapshot[to_camel(name)] for name in CREATE_PAYLOAD_FIELDS}
    if not payload.get("password"):
        payload["password"] = placeholder_password
    return payload


def payload_to_row(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate a camelCase payload (full or partial) to ``senior_citizens``
    columns. The address breakdown is flattened to its codes.
    """
    row = {
        to_snake(key): value
        for key, value in payload.items()
        if key not in NON_COLUMN_KEYS
    }

    address_data = payload.get("addressData")
    if address_data:
        for level, column in ADDRESS_CODE_COLUMNS.items():
            component = address_data.get(level)
            if component and component.get(column):
                row[column] = component[column]
        brgy = address_data.get("barangay")
        if brgy and brgy.get("brgy_code") and "barangay_code" not in row:
            row["barangay_code"] = brgy["brgy_code"]

    return row
