"""Pydantic models for roomsync."""

from roomsync.models.records import (
    UserId,
    TenantId,
    RoomId,
    UserRecord,
    TenantRecord,
    Occupancy,
    RoomRecord,
)
from roomsync.models.report import (
    LinkOutcome,
    SyncOutcome,
    LinkRepairReport,
    VerificationReport,
    SyncReport,
    OrphanReport,
    ReconciliationReport,
)

__all__ = [
    # Collection records
    "UserId",
    "TenantId",
    "RoomId",
    "UserRecord",
    "TenantRecord",
    "Occupancy",
    "RoomRecord",
    # Run reports
    "LinkOutcome",
    "SyncOutcome",
    "LinkRepairReport",
    "VerificationReport",
    "SyncReport",
    "OrphanReport",
    "ReconciliationReport",
]
