# =============================================================================
# osca_core/models/validation.py
# Registration Form Validation
# =============================================================================
"""
Rules applied to the "Add Senior Citizen" form before a record is created,
whether it goes to the server or to the offline store.

All problems are collected and raised together so the form can flag every
field in one pass.
"""

from __future__ import annotations
import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Union

from osca_core.errors import RecordValidationError
from osca_core.models.senior import (
    Gender,
    HousingCondition,
    LivingCondition,
    PhysicalHealthCondition,
)

SENIOR_MIN_AGE = 60
MIN_PASSWORD_LENGTH = 6
MIN_ADDRESS_LENGTH = 10
MIN_PHONE_LENGTH = 10

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_date(value: Union[str, date, datetime]) -> date:
    """Accept 'YYYY-MM-DD', a full ISO timestamp, or a date object."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError("empty date")
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def calculate_age(date_of_birth: Union[str, date, datetime], today: Optional[date] = None) -> int:
    """Age in whole years; one less if this year's birthday has not come yet."""
    birth = parse_date(date_of_birth)
    today = today or date.today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email.strip()))


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return value.strip() if isinstance(value, str) else ""


def _check_min_length(errors: Dict[str, str], form, key: str, minimum: int, message: str) -> None:
    if len(_text(form, key)) < minimum:
        errors[key] = message


def _check_choice(errors: Dict[str, str], form, key: str, enum_cls, required: bool = True) -> None:
    value = form.get(key)
    if value in (None, "") and not required:
        return
    if value not in {member.value for member in enum_cls} and value not in list(enum_cls):
        errors[key] = f"Select a valid {key}"


def _check_amount(errors: Dict[str, str], form, key: str, label: str, required: bool = True) -> None:
    value = form.get(key)
    if value in (None, ""):
        if required:
            errors[key] = f"{label} is required"
        return
    if isinstance(value, bool):
        errors[key] = f"{label} must be a number"
        return
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors[key] = f"{label} must be a number"
        return
    if number < 0:
        errors[key] = f"{label} must be 0 or greater"


def _validate_beneficiary(errors: Dict[str, str], index: int, beneficiary: Any) -> None:
    prefix = f"beneficiaries[{index}]"
    if not isinstance(beneficiary, Mapping):
        errors[prefix] = "Beneficiary details are incomplete"
        return
    local: Dict[str, str] = {}
    _check_min_length(local, beneficiary, "name", 2, "Beneficiary name must be at least 2 characters")
    _check_min_length(local, beneficiary, "relationship", 2, "Relationship is required")
    if not _text(beneficiary, "dateOfBirth"):
        local["dateOfBirth"] = "Date of birth is required"
    _check_choice(local, beneficiary, "gender", Gender)
    _check_amount(local, beneficiary, "monthlyIncome", "Monthly income", required=False)
    for key, message in local.items():
        errors[f"{prefix}.{key}"] = message


def validate_registration(form: Mapping[str, Any], today: Optional[date] = None) -> None:
    """
    Validate an "Add Senior Citizen" form.

    Args:
        form: camelCase form values (including confirmPassword)
        today: Reference date for the age gate (defaults to today)

    Raises:
        RecordValidationError: with ``errors`` mapping field -> message
    """
    errors: Dict[str, str] = {}

    _check_min_length(errors, form, "firstName", 2, "First name must be at least 2 characters")
    _check_min_length(errors, form, "lastName", 2, "Last name must be at least 2 characters")

    dob = _text(form, "dateOfBirth")
    if not dob:
        errors["dateOfBirth"] = "Date of birth is required"
    else:
        try:
            if calculate_age(dob, today) < SENIOR_MIN_AGE:
                errors["dateOfBirth"] = "Senior citizen must be at least 60 years old"
        except ValueError:
            errors["dateOfBirth"] = "Date of birth is not a valid date"

    _check_choice(errors, form, "gender", Gender)

    if not _text(form, "barangay"):
        errors["barangay"] = "Barangay is required"
    if not _text(form, "barangayCode"):
        errors["barangayCode"] = "Barangay code is required"
    _check_min_length(errors, form, "address", MIN_ADDRESS_LENGTH, "Address must be at least 10 characters")

    _check_min_length(errors, form, "emergencyContactName", 2, "Emergency contact name is required")
    _check_min_length(errors, form, "emergencyContactPhone", MIN_PHONE_LENGTH, "Emergency contact phone is required")
    _check_min_length(
        errors, form, "emergencyContactRelationship", 2, "Emergency contact relationship is required"
    )

    _check_choice(errors, form, "housingCondition", HousingCondition)
    _check_choice(errors, form, "physicalHealthCondition", PhysicalHealthCondition)
    _check_choice(errors, form, "livingCondition", LivingCondition)
    _check_amount(errors, form, "monthlyIncome", "Monthly income")
    _check_amount(errors, form, "monthlyPension", "Monthly pension")

    for index, beneficiary in enumerate(form.get("beneficiaries") or []):
        _validate_beneficiary(errors, index, beneficiary)

    if not is_valid_email(form.get("email")):
        errors["email"] = "Valid email is required"

    password = form.get("password") or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = "Password must be at least 6 characters"
    if password != (form.get("confirmPassword") or ""):
        errors["confirmPassword"] = "Passwords don't match"

    if errors:
        first_field = next(iter(errors))
        raise RecordValidationError(
            f"Please correct {len(errors)} field(s): {errors[first_field]}",
            field=first_field,
            errors=errors,
        )
