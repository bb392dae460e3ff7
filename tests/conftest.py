# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Set

import pytest
from unittest.mock import MagicMock

from osca_core.config import Settings
from osca_core.data import ApiResult
from osca_core.models import SeniorRecord, SessionUser, UserRole, new_local_id, payload_to_row
from osca_core.offline import (
    ConnectionManager,
    LocalDatabase,
    LocalRecordStore,
    OfflineQueue,
    SyncReconciler,
)
from osca_core.state import build_app_context


# =============================================================================
# FAKES
# =============================================================================

class FakeSeniorCitizensAPI:
    """
    In-memory stand-in for SeniorCitizensAPI.

    ``fail_names`` makes creates fail for those full names;
    ``raise_names`` makes them raise instead.
    """

    def __init__(self):
        self.records: Dict[str, SeniorRecord] = {}
        self.calls: List[tuple] = []
        self.fail_names: Set[str] = set()
        self.raise_names: Set[str] = set()
        self.fail_ids: Set[str] = set()

    def create_senior_citizen(self, payload: Dict[str, Any]) -> ApiResult:
        self.calls.append(("create", payload))
        name = f"{payload.get('firstName')} {payload.get('lastName')}"
        if name in self.raise_names:
            raise ConnectionError("network down")
        if name in self.fail_names:
            return ApiResult.fail("Email already registered")

        row = payload_to_row(payload)
        row.update({
            "id": str(uuid.uuid4()),
            "users": {"email": payload.get("email"), "phone": None},
            "beneficiaries": [],
        })
        self.records[row["id"]] = SeniorRecord.from_remote_row(row)
        return ApiResult.ok(row, "Senior citizen created successfully")

    def get_all_senior_citizens(self, barangay: Optional[str] = None) -> ApiResult:
        self.calls.append(("list", barangay))
        records = [r for r in self.records.values() if not barangay or r.barangay == barangay]
        return ApiResult.ok(records)

    def update_senior_citizen(self, senior_id: str, changes: Dict[str, Any]) -> ApiResult:
        self.calls.append(("update", senior_id, changes))
        if senior_id in self.fail_ids or senior_id not in self.records:
            return ApiResult.fail("Senior citizen not found")
        merged = {**self.records[senior_id].to_dict(), **changes}
        self.records[senior_id] = SeniorRecord.from_dict(merged)
        return ApiResult.ok(payload_to_row(merged))

    def delete_senior_citizen(self, senior_id: str) -> ApiResult:
        self.calls.append(("delete", senior_id))
        if senior_id in self.fail_ids or senior_id not in self.records:
            return ApiResult.fail("Senior citizen not found")
        del self.records[senior_id]
        return ApiResult.ok()

    def add_existing(self, record: SeniorRecord) -> SeniorRecord:
        """Seed a record that already lives on the server."""
        record.is_offline = False
        self.records[record.id] = record
        return record

    def calls_of(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]


class NetworkSwitch:
    """Reachability the probes report; flip ``online`` in a test."""

    def __init__(self, online: bool = True):
        self.online = online

    def probe(self) -> bool:
        return self.online


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def today():
    """Fixed reference date for age and month calculations"""
    return date(2024, 6, 15)


@pytest.fixture
def registration_form() -> Dict[str, Any]:
    """A valid "Add Senior Citizen" form"""
    return {
        "firstName": "Lourdes",
        "lastName": "Dela Cruz",
        "dateOfBirth": "1950-03-12",
        "gender": "female",
        "barangay": "San Jose",
        "barangayCode": "san_jose",
        "address": "Purok 3, San Jose, Pili, Camarines Sur",
        "emergencyContactName": "Ramon Dela Cruz",
        "emergencyContactPhone": "09171234567",
        "emergencyContactRelationship": "Son",
        "medicalConditions": ["Hypertension"],
        "medications": ["Amlodipine"],
        "housingCondition": "owned",
        "physicalHealthCondition": "good",
        "monthlyIncome": 3000,
        "monthlyPension": 1500,
        "livingCondition": "with_family",
        "beneficiaries": [
            {
                "name": "Ramon Dela Cruz",
                "relationship": "Son",
                "dateOfBirth": "1975-08-01",
                "gender": "male",
                "isDependent": False,
            }
        ],
        "email": "lourdes@example.com",
        "password": "secret123",
        "confirmPassword": "secret123",
    }


def make_senior(
    first_name: str = "Test",
    last_name: str = "Offline",
    record_id: Optional[str] = None,
    **overrides,
) -> SeniorRecord:
    """Build a SeniorRecord with sensible defaults"""
    data = {
        "id": record_id or new_local_id(),
        "firstName": first_name,
        "lastName": last_name,
        "dateOfBirth": "1950-01-01",
        "gender": "male",
        "barangay": "San Jose",
        "barangayCode": "san_jose",
        "address": "123 Test Street, San Jose, Pili",
        "emergencyContactName": "Test Contact",
        "emergencyContactPhone": "09123456789",
        "emergencyContactRelationship": "Son",
        "email": f"{first_name.lower()}.{last_name.lower()}@example.com",
        "password": "test123",
        "registrationDate": "2024-06-01T08:00:00",
        "createdAt": "2024-06-01T08:00:00",
    }
    data.update(overrides)
    return SeniorRecord.from_dict(data)


@pytest.fixture
def senior_factory():
    """Factory for SeniorRecord instances"""
    return make_senior


@pytest.fixture
def osca_user():
    return SessionUser(role=UserRole.OSCA, user_id="osca-admin")


@pytest.fixture
def basca_user():
    return SessionUser(role=UserRole.BASCA, barangay="Santiago", user_id="basca-santiago")


# =============================================================================
# OFFLINE STACK FIXTURES
# =============================================================================

@pytest.fixture
def local_db(tmp_path):
    """Temporary SQLite database"""
    db = LocalDatabase(tmp_path / "osca.db")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def store(local_db):
    return LocalRecordStore(local_db)


@pytest.fixture
def queue(local_db):
    return OfflineQueue(local_db)


@pytest.fixture
def fake_api():
    return FakeSeniorCitizensAPI()


@pytest.fixture
def network():
    return NetworkSwitch(online=True)


@pytest.fixture
def connection(network):
    """Connection manager driven by the network switch"""
    manager = ConnectionManager(
        supabase_url="https://test.supabase.co",
        internet_probe=network.probe,
        supabase_probe=network.probe,
        check_interval=0,
    )
    manager.check_connection()
    return manager


@pytest.fixture
def reconciler(store, queue, fake_api, connection):
    return SyncReconciler(store, queue, fake_api, connection, placeholder_password="temp123")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_key="anon-key",
        local_db_path=tmp_path / "context.db",
        check_interval=0,
        log_to_file=False,
    )


@pytest.fixture
def app_context(settings, fake_api, network):
    """Fully wired AppContext over the fake API"""
    context = build_app_context(settings, api=fake_api, probe=network.probe)
    context.connection.check_connection()
    yield context
    context.close()


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock Streamlit inside the error handlers"""
    from osca_core.errors import handlers

    mock_st = MagicMock()
    mock_st.session_state = {}
    monkeypatch.setattr(handlers, "st", mock_st)
    return mock_st


@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock()
    return mock_client
