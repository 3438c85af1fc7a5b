"""Tests for collection record parsing and report tallies."""

from bson import ObjectId

from roomsync.models.records import RoomRecord, TenantRecord, UserRecord
from roomsync.models.report import LinkOutcome, LinkRepairReport, SyncOutcome, SyncReport
from roomsync.utils.helpers import coerce_object_id, display_value


class TestRecords:
    """Tests for parsing raw documents."""

    def test_tenant_from_document(self):
        tenant_id, user_id = ObjectId(), ObjectId()
        tenant = TenantRecord.model_validate({
            "_id": tenant_id,
            "userId": str(user_id),
            "firstName": "Maria",
            "lastName": "Santos",
            "roomNumber": "101",
            "phoneNumber": "+639171234567",
        })

        assert tenant.id == tenant_id
        assert tenant.user_id == user_id
        assert tenant.room_number == "101"
        assert tenant.full_name == "Maria Santos"

    def test_room_without_occupancy(self):
        room = RoomRecord.model_validate({"_id": ObjectId(), "roomNumber": "7"})

        assert room.current_tenant is None
        assert room.current_tenant_id is None
        assert room.occupancy.current == 0

    def test_room_with_null_occupancy(self):
        room = RoomRecord.model_validate({
            "_id": ObjectId(),
            "roomNumber": "7",
            "occupancy": None,
        })

        assert room.occupancy.current == 0

    def test_room_keeps_raw_link(self):
        room = RoomRecord.model_validate({
            "_id": ObjectId(),
            "roomNumber": "7",
            "currentTenant": "garbage123",
        })

        assert room.current_tenant == "garbage123"
        assert room.current_tenant_id is None

    def test_room_with_null_headcount(self):
        room = RoomRecord.model_validate({
            "_id": ObjectId(),
            "roomNumber": "7",
            "occupancy": {"current": None, "max": 2},
        })

        assert room.occupancy.current == 0
        assert room.occupancy.max == 2

    def test_numeric_room_number_is_text(self):
        room = RoomRecord.model_validate({"_id": ObjectId(), "roomNumber": 101})
        tenant = TenantRecord.model_validate({"_id": ObjectId(), "roomNumber": 101})

        assert room.room_number == "101"
        assert tenant.room_number == "101"

    def test_tenant_with_null_names(self):
        tenant_id = ObjectId()
        partial = TenantRecord.model_validate({
            "_id": tenant_id,
            "firstName": "Maria",
            "lastName": None,
        })
        nameless = TenantRecord.model_validate({"_id": tenant_id, "firstName": None})

        assert partial.full_name == "Maria"
        assert nameless.full_name == str(tenant_id)

    def test_user_ignores_extra_fields(self):
        user_id = ObjectId()
        user = UserRecord.model_validate({"_id": user_id, "email": "a@b.com"})

        assert user.id == user_id


class TestReports:
    """Tests for report tallies."""

    def test_link_repair_record(self):
        report = LinkRepairReport()
        for outcome in (
            LinkOutcome.REMAPPED,
            LinkOutcome.CLEARED,
            LinkOutcome.CLEARED,
            LinkOutcome.VALID,
            LinkOutcome.ERROR,
        ):
            report.record(outcome)

        assert report.total == 5
        assert report.fixed == 3
        assert report.already_valid == 1
        assert report.errors == 1

    def test_sync_record(self):
        report = SyncReport()
        report.record(SyncOutcome.SYNCED)
        report.record(SyncOutcome.SKIPPED)
        report.record(SyncOutcome.UNCHANGED)
        report.record(SyncOutcome.UNCHANGED)

        assert report.synced == 1
        assert report.skipped == 1
        assert report.unchanged == 2


class TestHelpers:
    """Tests for helper utilities."""

    def test_coerce_object_id(self):
        oid = ObjectId()

        assert coerce_object_id(oid) is oid
        assert coerce_object_id(str(oid)) == oid
        assert coerce_object_id("garbage123") is None
        assert coerce_object_id(None) is None
        assert coerce_object_id(42) is None

    def test_display_value(self):
        assert display_value(None) == "null"
        assert display_value("") == "null"
        assert display_value("101") == "101"
