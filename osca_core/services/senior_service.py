# =============================================================================
# osca_core/services/senior_service.py
# Senior Citizen Use Cases (online / offline aware)
# =============================================================================
"""
SeniorService - the one API the seniors page talks to.

Every write checks the *effective* online state first: online writes go
straight to Supabase, offline writes land in the local store and the
offline queue and wait for a sync.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional

from osca_core.constants import default_address_data, get_barangay_code
from osca_core.errors import (
    ConfigurationError,
    Notification,
    OfflineSyncRejected,
    OscaError,
    RecordValidationError,
    RemoteCreateFailed,
    RemoteOperationFailed,
)
from osca_core.models import (
    SeniorRecord,
    SeniorStatus,
    SessionUser,
    build_create_payload,
    is_local_id,
    new_local_id,
    now_iso,
    validate_registration,
)
from osca_core.models.senior import SENIOR_KEYS
from osca_core.offline import QueueOperation
from osca_core.services.base_service import BaseService, ServiceResult

if TYPE_CHECKING:
    from osca_core.state.context import AppContext

ALL = "all"

# Form-only fields that never become part of a record
FORM_ONLY_KEYS = ("confirmPassword",)

# Record fields a caller may not change through update_senior
PROTECTED_KEYS = ("id", "isOffline", "createdAt", "createdBy", "userId")

# Fields the online edit form may change
EDITABLE_FIELDS = (
    "contactPerson", "contactPhone", "contactRelationship",
    "emergencyContactName", "emergencyContactPhone", "emergencyContactRelationship",
    "housingCondition", "physicalHealthCondition", "livingCondition",
    "monthlyIncome", "monthlyPension", "status", "notes",
)
REQUIRED_EDIT_FIELDS = ("emergencyContactName", "emergencyContactPhone", "emergencyContactRelationship")
AMOUNT_FIELDS = ("monthlyIncome", "monthlyPension")


@dataclass
class SeniorStats:
    """Numbers behind the stat cards above the seniors table."""
    total: int = 0
    total_online: int = 0
    total_offline: int = 0
    active: int = 0
    new_this_month: int = 0
    inactive: int = 0
    deceased: int = 0

    @property
    def active_percent(self) -> int:
        return round(self.active / max(self.total, 1) * 100)

    def cards(self) -> List[Dict[str, str]]:
        return [
            {
                "title": "Total Seniors",
                "value": f"{self.total:,}",
                "change": f"{self.total_online} online, {self.total_offline} offline",
                "color": "primary",
            },
            {
                "title": "Active Seniors",
                "value": f"{self.active:,}",
                "change": f"{self.active_percent}%",
                "color": "primary",
            },
            {
                "title": "New This Month",
                "value": f"{self.new_this_month:,}",
                "change": f"+{self.new_this_month}",
                "color": "accent",
            },
            {
                "title": "Inactive/Deceased",
                "value": f"{self.inactive + self.deceased:,}",
                "change": f"{self.inactive} inactive, {self.deceased} deceased",
                "color": "danger",
            },
        ]


def _registered_on(record: SeniorRecord) -> Optional[date]:
    stamp = record.registration_date or record.created_at
    if not stamp:
        return None
    try:
        return datetime.fromisoformat(stamp.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def calculate_stats(
    online: Iterable[SeniorRecord],
    offline: Iterable[SeniorRecord],
    today: Optional[date] = None,
) -> SeniorStats:
    """Stat-card numbers over both the online and offline lists."""
    online = list(online)
    offline = list(offline)
    today = today or date.today()
    everyone = online + offline

    new_this_month = 0
    for record in everyone:
        registered = _registered_on(record)
        if registered and (registered.year, registered.month) == (today.year, today.month):
            new_this_month += 1

    return SeniorStats(
        total=len(everyone),
        total_online=len(online),
        total_offline=len(offline),
        active=sum(1 for r in everyone if r.status == SeniorStatus.ACTIVE),
        new_this_month=new_this_month,
        inactive=sum(1 for r in everyone if r.status == SeniorStatus.INACTIVE),
        deceased=sum(1 for r in everyone if r.status == SeniorStatus.DECEASED),
    )


def filter_seniors(
    records: Iterable[SeniorRecord],
    search: str = "",
    status: str = ALL,
    barangay: str = ALL,
) -> List[SeniorRecord]:
    """Search by name, OSCA id, barangay or address (case-insensitive), then filter."""
    needle = (search or "").strip().lower()
    result = []
    for record in records:
        if needle:
            haystack = (
                record.full_name,
                record.osca_id or "",
                record.barangay,
                record.address,
            )
            if not any(needle in value.lower() for value in haystack):
                continue
        if status and status != ALL and record.status.value != status:
            continue
        if barangay and barangay != ALL and record.barangay != barangay:
            continue
        result.append(record)
    return result


def unique_barangays(*groups: Iterable[SeniorRecord]) -> List[str]:
    """Sorted barangays present in any of the given lists."""
    return sorted({r.barangay for group in groups for r in group if r.barangay})


def edit_changes(record: SeniorRecord, values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Editable fields whose submitted value differs from ``record``.

    Blank optional text becomes None; enums are stored by value.
    """
    current = record.to_dict()
    changes: Dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in values:
            continue
        value = values[key]
        if isinstance(value, Enum):
            value = value.value
        elif key in AMOUNT_FIELDS:
            value = float(value or 0)
        elif isinstance(value, str):
            value = value.strip()
            if not value and key not in REQUIRED_EDIT_FIELDS:
                value = None
        if value != current.get(key):
            changes[key] = value
    return changes


class SeniorService(BaseService):
    """
    Register, edit, delete, list and sync senior citizens.

    Usage:
        service = SeniorService(get_app_context())
        result = service.register_senior(form, user)
        for notification in result.notifications:
            notify(notification)
    """

    def __init__(self, context: AppContext):
        super().__init__()
        self.context = context

    @property
    def is_online(self) -> bool:
        return self.context.connection.effective_online

    def _api(self):
        if self.context.api is None:
            raise ConfigurationError("Supabase is not configured", config_key="supabase")
        return self.context.api

    # -------------------------------------------------------------------------
    # Register
    # -------------------------------------------------------------------------

    def prepare_form(self, form: Mapping[str, Any], user: SessionUser) -> Dict[str, Any]:
        """Auto-fill barangay, code and address breakdown for BASCA users."""
        prepared = dict(form)
        if user.scoped_barangay:
            prepared["barangay"] = user.scoped_barangay
            prepared["barangayCode"] = get_barangay_code(user.scoped_barangay)
            prepared["addressData"] = default_address_data(user.scoped_barangay)
        elif prepared.get("barangay") and not prepared.get("barangayCode"):
            prepared["barangayCode"] = get_barangay_code(prepared["barangay"])
        return prepared

    def build_record(
        self,
        form: Mapping[str, Any],
        user: SessionUser,
        record_id: Optional[str] = None,
    ) -> SeniorRecord:
        """Turn a validated form into a SeniorRecord."""
        data = {key: value for key, value in form.items() if key not in FORM_ONLY_KEYS}
        stamp = now_iso()
        data.update({
            "id": record_id or new_local_id(),
            "registrationDate": data.get("registrationDate") or stamp,
            "createdAt": stamp,
            "updatedAt": stamp,
            "createdBy": user.user_id or user.role.value,
            "updatedBy": user.user_id or user.role.value,
        })
        return SeniorRecord.from_dict(data)

    def register_senior(
        self,
        form: Mapping[str, Any],
        user: SessionUser,
        today: Optional[date] = None,
    ) -> ServiceResult:
        """
        Validate the "Add Senior Citizen" form and create the record.

        Online: created on the server. Offline: saved locally and queued.

        Returns:
            ServiceResult with the SeniorRecord (offline) or server row (online)
        """
        form = self.prepare_form(form, user)
        try:
            validate_registration(form, today)
            record = self.build_record(form, user)
        except RecordValidationError as e:
            self.logger.info(f"Registration rejected: {e.errors}")
            result = ServiceResult.from_exception(e)
            result.metadata = {"errors": e.errors}
            return result

        if self.is_online:
            return self._register_online(record)
        return self._register_offline(record)

    def _register_online(self, record: SeniorRecord) -> ServiceResult:
        try:
            with self.log_operation(f"Registering {record.full_name}"):
                result = self._api().create_senior_citizen(build_create_payload(record))
                if not result.success:
                    raise RemoteCreateFailed(result.message or "Failed to create senior citizen", record.id)
        except OscaError as e:
            result = ServiceResult.from_exception(e)
            result.notifications = [Notification.error("Failed to add senior citizen")]
            return result
        return ServiceResult.ok(
            result.data,
            notifications=[Notification.success("Senior citizen registered successfully!")],
        )

    def _register_offline(self, record: SeniorRecord) -> ServiceResult:
        try:
            self.context.store.save(record)
            self.context.queue.append(record.id, QueueOperation.CREATE, record.to_dict())
        except OscaError as e:
            return ServiceResult.from_exception(e)
        self.logger.info(f"Saved {record.id} offline")
        return ServiceResult.ok(
            record,
            notifications=[Notification.warning(
                f"{record.full_name} saved offline. Sync when the connection is restored."
            )],
        )

    # -------------------------------------------------------------------------
    # Update / Delete
    # -------------------------------------------------------------------------

    def update_senior(
        self,
        record_id: str,
        changes: Mapping[str, Any],
        user: SessionUser,
    ) -> ServiceResult:
        """
        Apply camelCase field changes to a senior.

        Local-only records are edited in place. Server records are updated
        remotely when online and queued as UPDATE when offline.
        """
        unknown = sorted(set(changes) - set(SENIOR_KEYS))
        if unknown:
            return ServiceResult.from_exception(
                RecordValidationError(f"Unknown field(s): {', '.join(unknown)}", field=unknown[0])
            )
        blocked = sorted(set(changes) & set(PROTECTED_KEYS))
        if blocked:
            return ServiceResult.from_exception(
                RecordValidationError(f"Field(s) cannot be changed: {', '.join(blocked)}", field=blocked[0])
            )

        changes = {**changes, "updatedAt": now_iso(), "updatedBy": user.user_id or user.role.value}

        try:
            if is_local_id(record_id):
                return self._update_local(record_id, changes)

            if not self.is_online:
                self.context.queue.append(record_id, QueueOperation.UPDATE, changes)
                return ServiceResult.ok(
                    changes,
                    notifications=[Notification.warning("Changes saved offline and queued for sync")],
                )

            result = self._api().update_senior_citizen(record_id, changes)
            if not result.success:
                raise RemoteOperationFailed(
                    result.message or "Failed to update senior citizen", record_id, "update"
                )
        except OscaError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.ok(
            result.data,
            notifications=[Notification.success("Senior citizen updated successfully")],
        )

    def _update_local(self, record_id: str, changes: Dict[str, Any]) -> ServiceResult:
        record = self.context.store.get(record_id)
        if record is None:
            return ServiceResult.fail("Offline record not found", error_code="NOT_FOUND")

        updated = SeniorRecord.from_dict({**record.to_dict(), **changes})
        self.context.store.save(updated)
        self.context.queue.append(record_id, QueueOperation.UPDATE, changes)
        return ServiceResult.ok(
            updated,
            notifications=[Notification.success(f"Offline record for {updated.full_name} updated")],
        )

    def delete_senior(self, record_id: str) -> ServiceResult:
        """Delete a senior; local-only records never reach the server."""
        try:
            if is_local_id(record_id):
                removed = self.context.store.delete(record_id)
                self.context.queue.discard(record_id)
                if not removed:
                    return ServiceResult.fail("Offline record not found", error_code="NOT_FOUND")
                return ServiceResult.ok(
                    record_id, notifications=[Notification.success("Offline record deleted")]
                )

            if not self.is_online:
                self.context.queue.append(record_id, QueueOperation.DELETE, {})
                return ServiceResult.ok(
                    record_id,
                    notifications=[Notification.warning("Deletion queued; it will sync when online")],
                )

            result = self._api().delete_senior_citizen(record_id)
            if not result.success:
                raise RemoteOperationFailed(
                    result.message or "Failed to delete senior citizen", record_id, "delete"
                )
        except OscaError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.ok(
            record_id, notifications=[Notification.success("Senior citizen deleted successfully")]
        )

    def edit_senior(
        self,
        record: SeniorRecord,
        values: Mapping[str, Any],
        user: SessionUser,
    ) -> ServiceResult:
        """Save the edit form of one record; only changed fields are sent."""
        changes = edit_changes(record, values)

        errors = {
            key: "This field is required"
            for key in REQUIRED_EDIT_FIELDS
            if key in changes and not changes[key]
        }
        errors.update({
            key: "Amount cannot be negative"
            for key in AMOUNT_FIELDS
            if changes.get(key, 0) < 0
        })
        if errors:
            return ServiceResult.from_exception(
                RecordValidationError("Please correct the highlighted fields", errors=errors)
            )

        if not changes:
            return ServiceResult.ok(None, notifications=[Notification.info("No changes to save")])
        return self.update_senior(record.id, changes, user)

    def with_queued_changes(self, records: Iterable[SeniorRecord]) -> ServiceResult:
        """
        Server records as they will look once the offline queue is replayed:
        queued updates merged in, queued deletions left out.
        """
        def apply() -> List[SeniorRecord]:
            pending = {
                m.record_id: m
                for m in self.context.queue.pending()
                if not m.cancelled and not is_local_id(m.record_id)
            }
            result = []
            for record in records:
                mutation = pending.get(record.id)
                if mutation is None:
                    result.append(record)
                elif mutation.operation == QueueOperation.UPDATE:
                    result.append(SeniorRecord.from_dict({**record.to_dict(), **mutation.payload}))
                elif mutation.operation != QueueOperation.DELETE:
                    result.append(record)
            return result

        return self.safe_execute("Applying queued changes", apply)

    def queued_record_ids(self) -> List[str]:
        """Server ids with edits or deletions waiting in the queue."""
        return [rid for rid in self.context.queue.pending_record_ids() if not is_local_id(rid)]

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def fetch_online_seniors(
        self,
        user: SessionUser,
        barangay_filter: Optional[str] = None,
    ) -> ServiceResult:
        """Server records; BASCA users only ever get their own barangay."""
        if not self.is_online:
            return ServiceResult.ok([], metadata={"skipped": "offline"})

        barangay = user.scoped_barangay
        if barangay is None and barangay_filter and barangay_filter != ALL:
            barangay = barangay_filter

        try:
            result = self._api().get_all_senior_citizens(barangay)
        except OscaError as e:
            return ServiceResult.from_exception(e)

        if not result.success:
            self.logger.error(f"Failed to load senior citizens: {result.message}")
            return ServiceResult.fail(result.message or "Failed to load senior citizens")
        return ServiceResult.ok(result.data or [])

    def fetch_offline_seniors(self, user: SessionUser) -> ServiceResult:
        """Records waiting in the local store."""
        return self.safe_execute(
            "Loading offline seniors",
            lambda: list(self.context.store.list(user.scoped_barangay)),
        )

    # -------------------------------------------------------------------------
    # Test data
    # -------------------------------------------------------------------------

    def create_test_offline_record(self, user: SessionUser) -> ServiceResult:
        """Save a "Test Offline" senior straight to the local store."""
        barangay = user.barangay or "Test Barangay"
        code = get_barangay_code(barangay)
        stamp = now_iso()
        suffix = datetime.now().strftime("%Y%m%d%H%M%S%f")

        record = SeniorRecord.from_dict({
            "id": new_local_id(),
            "email": f"test-offline-{suffix}@example.com",
            "password": "test123",
            "firstName": "Test",
            "lastName": "Offline",
            "dateOfBirth": "1950-01-01",
            "gender": "male",
            "barangay": barangay,
            "barangayCode": code,
            "address": f"123 Test Street, {barangay}, Pili, Camarines Sur",
            "addressData": default_address_data(barangay),
            "emergencyContactName": "Test Contact",
            "emergencyContactPhone": "09123456789",
            "emergencyContactRelationship": "Son",
            "medicalConditions": ["Test Condition"],
            "medications": ["Test Medication"],
            "housingCondition": "owned",
            "physicalHealthCondition": "good",
            "monthlyIncome": 5000,
            "monthlyPension": 2000,
            "livingCondition": "independent",
            "beneficiaries": [],
            "status": "active",
            "registrationDate": stamp,
            "createdAt": stamp,
            "updatedAt": stamp,
            "isOffline": True,
        })

        try:
            self.context.store.save(record)
            self.context.queue.append(record.id, QueueOperation.CREATE, record.to_dict())
        except OscaError as e:
            result = ServiceResult.from_exception(e)
            result.notifications = [Notification.error("Failed to create test offline data")]
            return result

        return ServiceResult.ok(
            record, notifications=[Notification.success("Test offline data created successfully!")]
        )

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    def pending_sync_count(self) -> int:
        return self.context.reconciler.pending_count()

    def sync_all(self) -> ServiceResult:
        """Bulk sync; one notification per record plus a summary."""
        try:
            report = self.context.reconciler.sync_all()
        except OfflineSyncRejected as e:
            return ServiceResult.fail(e.message, error_code=e.code)
        except OscaError as e:
            return ServiceResult.from_exception(e)

        notifications = report.notifications()
        error = report.to_error()
        if error is not None:
            return ServiceResult(
                success=False,
                data=report,
                error=error.message,
                error_code=error.code,
                metadata=error.details,
                notifications=notifications,
            )
        return ServiceResult.ok(report, notifications=notifications)

    def sync_one(self, record_id: str) -> ServiceResult:
        """Individual sync of one pending record."""
        try:
            outcome = self.context.reconciler.sync_one(record_id)
        except OfflineSyncRejected as e:
            return ServiceResult.fail(e.message, error_code=e.code)
        except OscaError as e:
            return ServiceResult.from_exception(e)

        if outcome.success:
            return ServiceResult.ok(outcome, notifications=[outcome.notification()])
        result = ServiceResult.from_exception(
            RemoteCreateFailed(outcome.error or "Sync failed", outcome.record_id)
        )
        result.data = outcome
        result.notifications = [outcome.notification()]
        return result
