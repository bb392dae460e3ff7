# =============================================================================
# osca_core/data/supabase_client.py
# Supabase Client Configuration for the OSCA Dashboard
# Handles the connection and CRUD operations for senior citizen records
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import streamlit as st

from osca_core.config import Settings
from osca_core.logging import get_logger
from osca_core.models import Beneficiary, SeniorRecord, now_iso, payload_to_row

logger = get_logger(__name__)


@st.cache_resource(ttl=3600)  # Cache for 1 hour, then refresh
def _cached_client(url: str, key: str):
    from supabase import create_client, Client

    client: Client = create_client(url, key)
    logger.info("Supabase client created")
    return client


def get_supabase_client(settings: Settings):
    """
    Return a cached Supabase client for the configured project.

    Expects secrets in .streamlit/secrets.toml:
        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"
        service_role_key = "your-service-role-key"

    The service-role key is preferred; creating login accounts for new
    seniors needs the admin auth API.

    Raises:
        ConfigurationError: when the URL or key is missing
    """
    settings.require_remote()
    return _cached_client(settings.supabase_url, settings.api_key)


@dataclass
class ApiResult:
    """{success, data, message} answer of every remote call."""
    success: bool
    data: Any = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> ApiResult:
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str) -> ApiResult:
        return cls(success=False, message=message)


class SeniorCitizensAPI:
    """
    CRUD for the ``senior_citizens`` table and the rows that hang off it
    (``users`` profile, ``beneficiaries``).

    No method raises: failures come back as ``ApiResult(success=False)``.
    """

    TABLE = "senior_citizens"
    USERS_TABLE = "users"
    BENEFICIARIES_TABLE = "beneficiaries"
    SELECT = "*, users(email, phone), beneficiaries(*)"
    BATCH_SIZE = 1000

    def __init__(self, client):
        self.client = client

    def is_connected(self) -> bool:
        """Check if Supabase client is available."""
        return self.client is not None

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_senior_citizen(self, payload: Dict[str, Any]) -> ApiResult:
        """
        Create a senior citizen with its login account.

        Steps: auth user -> ``users`` profile (role senior) ->
        ``senior_citizens`` row -> ``beneficiaries`` rows.

        Args:
            payload: camelCase create payload (see build_create_payload)

        Returns:
            ApiResult with the inserted senior row as data
        """
        if not self.is_connected():
            return ApiResult.fail("Supabase is not connected")

        user_id = None
        profile_created = False
        senior_id = None
        try:
            auth_response = self.client.auth.admin.create_user({
                "email": payload.get("email"),
                "password": payload.get("password"),
                "email_confirm": True,
                "user_metadata": {
                    "first_name": payload.get("firstName"),
                    "last_name": payload.get("lastName"),
                    "role": "senior",
                },
            })
            user_id = auth_response.user.id

            self.client.table(self.USERS_TABLE).insert({
                "id": user_id,
                "email": payload.get("email"),
                "first_name": payload.get("firstName"),
                "last_name": payload.get("lastName"),
                "phone": payload.get("contactPhone") or payload.get("emergencyContactPhone"),
                "role": "senior",
            }).execute()
            profile_created = True

            row = payload_to_row(payload)
            row["user_id"] = user_id
            row["registration_date"] = date.today().isoformat()
            response = self.client.table(self.TABLE).insert(row).execute()
            if not response.data:
                raise RuntimeError("Insert returned no senior citizen row")
            senior = response.data[0]
            senior_id = senior["id"]

            beneficiaries = [
                Beneficiary.from_dict(b).to_remote_row(senior_id)
                for b in payload.get("beneficiaries") or []
            ]
            if beneficiaries:
                self.client.table(self.BENEFICIARIES_TABLE).insert(beneficiaries).execute()

            logger.info(f"Created senior citizen {senior['id']}")
            return ApiResult.ok(senior, "Senior citizen created successfully")

        except Exception as e:
            logger.error(f"Error creating senior citizen: {e}")
            self._rollback_create(user_id, profile_created, senior_id)
            return ApiResult.fail(str(e))

    def _rollback_create(self, user_id: Optional[str], profile_created: bool,
                         senior_id: Optional[str]) -> None:
        """
        Undo whatever a failed create already wrote, newest step first.
        A failed create leaves no rows on the server.
        """
        if senior_id:
            self._undo(
                f"beneficiaries of {senior_id}",
                lambda: self.client.table(self.BENEFICIARIES_TABLE).delete().eq(
                    "senior_citizen_id", senior_id
                ).execute(),
            )
            self._undo(
                f"senior citizen {senior_id}",
                lambda: self.client.table(self.TABLE).delete().eq("id", senior_id).execute(),
            )
        if user_id and profile_created:
            self._undo(
                f"user profile {user_id}",
                lambda: self.client.table(self.USERS_TABLE).delete().eq("id", user_id).execute(),
            )
        if user_id:
            self._undo(f"auth user {user_id}", lambda: self.client.auth.admin.delete_user(user_id))

    @staticmethod
    def _undo(what: str, action) -> None:
        try:
            action()
        except Exception as e:
            logger.warning(f"Could not remove {what}: {e}")

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def get_all_senior_citizens(self, barangay: Optional[str] = None) -> ApiResult:
        """
        Fetch ALL senior citizens (handles Supabase 1000 row limit).

        Args:
            barangay: Only this barangay (optional)

        Returns:
            ApiResult with a list of SeniorRecord, newest first
        """
        if not self.is_connected():
            return ApiResult.fail("Supabase is not connected")

        try:
            all_data: List[Dict[str, Any]] = []
            offset = 0

            while True:
                query = self.client.table(self.TABLE).select(self.SELECT)
                if barangay:
                    query = query.eq("barangay", barangay)
                response = (
                    query.order("created_at", desc=True)
                    .range(offset, offset + self.BATCH_SIZE - 1)
                    .execute()
                )

                if response.data:
                    all_data.extend(response.data)
                    # Fewer than a full batch: last page
                    if len(response.data) < self.BATCH_SIZE:
                        break
                    offset += self.BATCH_SIZE
                else:
                    break

            return ApiResult.ok([SeniorRecord.from_remote_row(row) for row in all_data])

        except Exception as e:
            logger.error(f"Error fetching senior citizens: {e}")
            return ApiResult.fail(str(e))

    # -------------------------------------------------------------------------
    # Update / Delete
    # -------------------------------------------------------------------------

    def update_senior_citizen(self, senior_id: str, changes: Dict[str, Any]) -> ApiResult:
        """
        Update a senior citizen by server id.

        Args:
            senior_id: Server-assigned id
            changes: camelCase fields to change; ``beneficiaries`` replaces the list

        Returns:
            ApiResult with the updated row
        """
        if not self.is_connected():
            return ApiResult.fail("Supabase is not connected")

        try:
            row = payload_to_row(changes)
            row["updated_at"] = now_iso()
            response = self.client.table(self.TABLE).update(row).eq("id", senior_id).execute()
            if not response.data:
                return ApiResult.fail("Senior citizen not found")

            if "beneficiaries" in changes:
                self.client.table(self.BENEFICIARIES_TABLE).delete().eq(
                    "senior_citizen_id", senior_id
                ).execute()
                rows = [
                    Beneficiary.from_dict(b).to_remote_row(senior_id)
                    for b in changes.get("beneficiaries") or []
                ]
                if rows:
                    self.client.table(self.BENEFICIARIES_TABLE).insert(rows).execute()

            logger.info(f"Updated senior citizen {senior_id}")
            return ApiResult.ok(response.data[0], "Senior citizen updated successfully")

        except Exception as e:
            logger.error(f"Error updating senior citizen {senior_id}: {e}")
            return ApiResult.fail(str(e))

    def delete_senior_citizen(self, senior_id: str) -> ApiResult:
        """Delete a senior citizen and its beneficiaries by server id."""
        if not self.is_connected():
            return ApiResult.fail("Supabase is not connected")

        try:
            self.client.table(self.BENEFICIARIES_TABLE).delete().eq(
                "senior_citizen_id", senior_id
            ).execute()
            response = self.client.table(self.TABLE).delete().eq("id", senior_id).execute()
            if not response.data:
                return ApiResult.fail("Senior citizen not found")

            logger.info(f"Deleted senior citizen {senior_id}")
            return ApiResult.ok(message="Senior citizen deleted successfully")

        except Exception as e:
            logger.error(f"Error deleting senior citizen {senior_id}: {e}")
            return ApiResult.fail(str(e))
