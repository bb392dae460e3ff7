# =============================================================================
# tests/unit/test_supabase_client.py
# Unit Tests for the Supabase API Client
# =============================================================================

import pytest
from unittest.mock import MagicMock

from osca_core.config import Settings
from osca_core.data import SeniorCitizensAPI, get_supabase_client
from osca_core.errors import ConfigurationError
from osca_core.models import build_create_payload


@pytest.fixture
def tables(mock_supabase):
    """One mock per table name"""
    mocks = {name: MagicMock() for name in ("users", "senior_citizens", "beneficiaries")}
    mock_supabase.table.side_effect = lambda name: mocks[name]
    mock_supabase.auth.admin.create_user.return_value.user.id = "auth-user-1"
    mocks["senior_citizens"].insert.return_value.execute.return_value.data = [{"id": "senior-1"}]
    return mocks


@pytest.fixture
def api(mock_supabase):
    return SeniorCitizensAPI(mock_supabase)


@pytest.fixture
def payload(senior_factory):
    return build_create_payload(senior_factory(
        beneficiaries=[{"name": "Ana", "relationship": "Daughter", "dateOfBirth": "1980-01-01", "gender": "female"}],
    ))


class TestClientFactory:

    def test_missing_configuration(self):
        with pytest.raises(ConfigurationError):
            get_supabase_client(Settings())

    def test_without_client(self):
        result = SeniorCitizensAPI(None).get_all_senior_citizens()

        assert not result.success
        assert result.message == "Supabase is not connected"


class TestCreate:
    """Test account + record creation"""

    def test_create_inserts_all_rows(self, api, mock_supabase, tables, payload):
        result = api.create_senior_citizen(payload)

        assert result.success
        assert result.data == {"id": "senior-1"}

        auth_args = mock_supabase.auth.admin.create_user.call_args[0][0]
        assert auth_args["user_metadata"]["role"] == "senior"

        user_row = tables["users"].insert.call_args[0][0]
        assert user_row["id"] == "auth-user-1"
        assert user_row["role"] == "senior"

        senior_row = tables["senior_citizens"].insert.call_args[0][0]
        assert senior_row["user_id"] == "auth-user-1"
        assert senior_row["first_name"] == "Test"
        assert "password" not in senior_row
        assert "email" not in senior_row

        beneficiary_rows = tables["beneficiaries"].insert.call_args[0][0]
        assert beneficiary_rows[0]["senior_citizen_id"] == "senior-1"

    def test_failure_removes_auth_user(self, api, mock_supabase, tables, payload):
        tables["senior_citizens"].insert.return_value.execute.side_effect = RuntimeError("duplicate key")

        result = api.create_senior_citizen(payload)

        assert not result.success
        assert result.message == "duplicate key"
        mock_supabase.auth.admin.delete_user.assert_called_once_with("auth-user-1")
        tables["users"].delete.return_value.eq.assert_called_once_with("id", "auth-user-1")
        tables["senior_citizens"].delete.assert_not_called()

    def test_beneficiary_failure_removes_every_row(self, api, mock_supabase, tables, payload):
        """Nothing survives on the server when the last step fails"""
        tables["beneficiaries"].insert.return_value.execute.side_effect = RuntimeError("bad beneficiary")

        result = api.create_senior_citizen(payload)

        assert not result.success
        assert result.message == "bad beneficiary"
        tables["beneficiaries"].delete.return_value.eq.assert_called_once_with("senior_citizen_id", "senior-1")
        tables["senior_citizens"].delete.return_value.eq.assert_called_once_with("id", "senior-1")
        tables["users"].delete.return_value.eq.assert_called_once_with("id", "auth-user-1")
        mock_supabase.auth.admin.delete_user.assert_called_once_with("auth-user-1")

    def test_rollback_continues_past_cleanup_errors(self, api, mock_supabase, tables, payload):
        tables["beneficiaries"].insert.return_value.execute.side_effect = RuntimeError("bad beneficiary")
        tables["senior_citizens"].delete.side_effect = RuntimeError("permission denied")

        result = api.create_senior_citizen(payload)

        assert result.message == "bad beneficiary"
        tables["users"].delete.return_value.eq.assert_called_once_with("id", "auth-user-1")
        mock_supabase.auth.admin.delete_user.assert_called_once_with("auth-user-1")

    def test_auth_failure_never_inserts(self, api, mock_supabase, tables, payload):
        mock_supabase.auth.admin.create_user.side_effect = RuntimeError("User already registered")

        result = api.create_senior_citizen(payload)

        assert result.message == "User already registered"
        tables["users"].insert.assert_not_called()
        mock_supabase.auth.admin.delete_user.assert_not_called()


class TestRead:

    def test_paginates_past_row_limit(self, api, tables):
        chain = tables["senior_citizens"].select.return_value.order.return_value.range.return_value
        chain.execute.side_effect = [
            MagicMock(data=[{"id": i} for i in range(1000)]),
            MagicMock(data=[{"id": i} for i in range(1000, 1005)]),
        ]

        result = api.get_all_senior_citizens()

        assert len(result.data) == 1005
        assert result.data[0].id == "0"
        ranges = tables["senior_citizens"].select.return_value.order.return_value.range.call_args_list
        assert [c[0] for c in ranges] == [(0, 999), (1000, 1999)]

    def test_filters_by_barangay(self, api, tables):
        query = tables["senior_citizens"].select.return_value.eq.return_value
        query.order.return_value.range.return_value.execute.return_value.data = [
            {"id": "s1", "barangay": "Cadlan", "first_name": "Pedro"}
        ]

        result = api.get_all_senior_citizens("Cadlan")

        tables["senior_citizens"].select.return_value.eq.assert_called_once_with("barangay", "Cadlan")
        assert result.data[0].barangay == "Cadlan"

    def test_read_error(self, api, tables):
        tables["senior_citizens"].select.side_effect = RuntimeError("timeout")

        result = api.get_all_senior_citizens()

        assert not result.success
        assert result.message == "timeout"


class TestUpdateDelete:

    def test_update_maps_columns(self, api, tables):
        update = tables["senior_citizens"].update
        update.return_value.eq.return_value.execute.return_value.data = [{"id": "s1"}]

        result = api.update_senior_citizen("s1", {"emergencyContactName": "Rosa"})

        assert result.success
        row = update.call_args[0][0]
        assert row["emergency_contact_name"] == "Rosa"
        assert "updated_at" in row
        tables["beneficiaries"].delete.assert_not_called()

    def test_update_replaces_beneficiaries(self, api, tables):
        tables["senior_citizens"].update.return_value.eq.return_value.execute.return_value.data = [{"id": "s1"}]

        api.update_senior_citizen("s1", {"beneficiaries": [
            {"name": "Ana", "relationship": "Daughter", "dateOfBirth": "1980-01-01"},
        ]})

        tables["beneficiaries"].delete.return_value.eq.assert_called_once_with("senior_citizen_id", "s1")
        assert tables["beneficiaries"].insert.call_args[0][0][0]["name"] == "Ana"

    def test_update_not_found(self, api, tables):
        tables["senior_citizens"].update.return_value.eq.return_value.execute.return_value.data = []

        result = api.update_senior_citizen("missing", {"notes": "x"})

        assert result.message == "Senior citizen not found"

    def test_delete(self, api, tables):
        tables["senior_citizens"].delete.return_value.eq.return_value.execute.return_value.data = [{"id": "s1"}]

        result = api.delete_senior_citizen("s1")

        assert result.success
        tables["beneficiaries"].delete.return_value.eq.assert_called_once_with("senior_citizen_id", "s1")

    def test_delete_not_found(self, api, tables):
        tables["senior_citizens"].delete.return_value.eq.return_value.execute.return_value.data = []

        assert api.delete_senior_citizen("missing").message == "Senior citizen not found"
