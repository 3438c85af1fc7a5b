"""Reconciliation of room tenant links and cached tenant room numbers.

Some rooms were assigned with ``currentTenant`` set to a ``tenants._id``
instead of the owning ``users._id``. The job runs four phases in order:

1. link repair: remap tenant ids to user ids, clear links that resolve to
   neither;
2. verification: recount rooms whose link is a real user id;
3. sync: copy each linked room's ``roomNumber`` onto the tenant's cached
   ``roomNumber``;
4. orphan audit: report (and optionally clear) tenants caching a room
   number that no room assigns to them.

Every write is a single-document ``$set`` addressed by ``_id`` and is awaited
before the next room, so a crash leaves a partial but re-runnable state.
"""

import logging
from datetime import datetime
from collections import defaultdict
from itertools import islice
from typing import TypeVar
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, ValidationError
from pymongo.errors import PyMongoError

from roomsync.config import Settings, get_settings
from roomsync.models.records import (
    RoomRecord,
    TenantId,
    TenantRecord,
    UserId,
    UserRecord,
)
from roomsync.models.report import (
    LinkOutcome,
    LinkRepairReport,
    OrphanReport,
    ReconciliationReport,
    SyncOutcome,
    SyncReport,
    VerificationReport,
)
from roomsync.utils.helpers import display_value

logger = logging.getLogger(__name__)

LINKED_ROOMS_QUERY = {"currentTenant": {"$exists": True, "$ne": None}}

RecordT = TypeVar("RecordT", bound=BaseModel)


def parse_documents(
    model: type[RecordT],
    docs: list[dict],
    label: str,
) -> tuple[list[RecordT], list[dict]]:
    """Parse raw documents one by one.

    A document that fails validation is logged and returned in the second
    list instead of aborting the whole load.
    """
    parsed: list[RecordT] = []
    rejected: list[dict] = []
    for doc in docs:
        try:
            parsed.append(model.model_validate(doc))
        except ValidationError as e:
            logger.error(f"Skipping malformed {label} {doc.get('_id')}: {e}")
            rejected.append(doc)
    return parsed, rejected


def build_tenant_user_map(tenants: list[TenantRecord]) -> dict[TenantId, UserId]:
    """Map every tenant id to the id of the user that owns it."""
    mapping: dict[TenantId, UserId] = {}
    for tenant in tenants:
        if tenant.user_id is None:
            logger.warning(f"Tenant {tenant.id} ({tenant.full_name}) has no valid userId")
            continue
        mapping[tenant.id] = tenant.user_id
    return mapping


def decide_link(
    room: RoomRecord,
    tenant_map: dict[TenantId, UserId],
    user_ids: set[UserId],
) -> tuple[LinkOutcome, UserId | None]:
    """Decide what a room's ``currentTenant`` should become.

    Returns the outcome and the user id the room should point at afterwards
    (None when the link is cleared).
    """
    link = room.current_tenant_id
    if link is not None and link in tenant_map:
        return LinkOutcome.REMAPPED, tenant_map[link]
    if link is not None and link in user_ids:
        return LinkOutcome.VALID, UserId(link)
    return LinkOutcome.CLEARED, None


class ReconciliationService:
    """Repairs room/tenant/user references in one sequential pass."""

    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.users = db.users
        self.tenants = db.tenants
        self.rooms = db.rooms

    async def load_tenants(self) -> list[TenantRecord]:
        """Load every tenant profile, skipping malformed documents."""
        docs = await self.tenants.find({}).to_list(length=None)
        tenants, _ = parse_documents(TenantRecord, docs, "tenant")
        logger.info(f"Total tenants: {len(tenants)}")
        return tenants

    async def load_user_ids(self) -> set[UserId]:
        """Load the ids of every user."""
        docs = await self.users.find({}, {"_id": 1}).to_list(length=None)
        users, _ = parse_documents(UserRecord, docs, "user")
        return {user.id for user in users}

    async def fetch_linked_rooms(self) -> tuple[list[RoomRecord], list[dict]]:
        """Load rooms whose ``currentTenant`` is set.

        Returns the parsed rooms and the raw documents that failed to parse.
        """
        docs = await self.rooms.find(LINKED_ROOMS_QUERY).to_list(length=None)
        return parse_documents(RoomRecord, docs, "room")

    async def load_linked_rooms(self) -> list[RoomRecord]:
        """Load rooms whose ``currentTenant`` is set, skipping malformed ones."""
        rooms, _ = await self.fetch_linked_rooms()
        return rooms

    async def repair_links(
        self,
        tenants: list[TenantRecord],
        user_ids: set[UserId],
        dry_run: bool = False,
    ) -> tuple[LinkRepairReport, list[RoomRecord]]:
        """Point every room's ``currentTenant`` at a user id or clear it.

        Returns the phase report and the rooms as they look after the
        decisions were applied (planned state when ``dry_run``).
        """
        logger.info("=== FIXING ROOM ASSIGNMENTS ===")
        tenant_map = build_tenant_user_map(tenants)
        rooms, malformed = await self.fetch_linked_rooms()
        logger.info(f"Total rooms with tenants: {len(rooms) + len(malformed)}")

        preview = islice(tenant_map.items(), self.settings.mapping_preview_limit)
        for tenant_id, user_id in preview:
            logger.info(f"Tenant {tenant_id} -> User {user_id}")

        report = LinkRepairReport()
        repaired: list[RoomRecord] = []

        for doc in malformed:
            report.record(LinkOutcome.ERROR)
            report.failed_rooms.append(str(doc.get("_id")))

        for room in rooms:
            outcome, user_id = decide_link(room, tenant_map, user_ids)

            if outcome == LinkOutcome.VALID:
                report.record(outcome)
                repaired.append(room)
                continue

            if outcome == LinkOutcome.REMAPPED:
                logger.info(f"Fixing room {room.room_number}: {room.current_tenant} -> {user_id}")
                update = {"currentTenant": user_id}
                after = room.model_copy(update={"current_tenant": user_id})
            else:
                logger.info(
                    f"Room {room.room_number} has invalid currentTenant: "
                    f"{display_value(room.current_tenant)} - clearing assignment"
                )
                update = {"currentTenant": None, "occupancy.current": 0}
                after = room.model_copy(update={
                    "current_tenant": None,
                    "occupancy": room.occupancy.model_copy(update={"current": 0}),
                })

            if not dry_run:
                try:
                    await self.rooms.update_one({"_id": room.id}, {"$set": update})
                except PyMongoError as e:
                    logger.error(f"Error fixing room {room.room_number} ({room.id}): {e}")
                    report.record(LinkOutcome.ERROR)
                    report.failed_rooms.append(str(room.id))
                    repaired.append(room)
                    continue

            report.record(outcome)
            repaired.append(after)

        logger.info("=== FIX COMPLETE ===")
        logger.info(
            f"Successfully fixed: {report.fixed} rooms "
            f"({report.remapped} remapped, {report.cleared} cleared, "
            f"{report.already_valid} already valid)"
        )
        logger.info(f"Errors: {report.errors}")
        return report, repaired

    async def verify_links(
        self,
        rooms: list[RoomRecord] | None = None,
    ) -> tuple[VerificationReport, list[RoomRecord]]:
        """Count linked rooms whose ``currentTenant`` is a known user id.

        Rooms are re-queried unless a planned state is passed in (dry runs).
        Returns the report and the linked rooms that were checked.
        """
        logger.info("=== VERIFICATION ===")
        if rooms is None:
            linked = await self.load_linked_rooms()
        else:
            linked = [room for room in rooms if room.current_tenant is not None]
        user_ids = await self.load_user_ids()

        report = VerificationReport(
            rooms_linked=len(linked),
            valid_links=sum(1 for room in linked if room.current_tenant_id in user_ids),
        )

        logger.info(f"Rooms with currentTenant after fix: {report.rooms_linked}")
        logger.info(f"Valid room assignments (currentTenant matches user _id): {report.valid_links}")
        if not report.is_consistent:
            logger.warning(f"{report.invalid_links} room(s) still reference an unknown user")
        return report, linked

    async def sync_room_numbers(
        self,
        rooms: list[RoomRecord],
        tenants: list[TenantRecord],
        dry_run: bool = False,
    ) -> SyncReport:
        """Copy each linked room's number onto its tenant's cached copy.

        ``tenants`` is the snapshot loaded before repair; records are updated
        in place as they are synced. A user linked from more than one room
        has no single authoritative room number and is left alone.
        """
        logger.info("=== SYNCING TENANT ROOM NUMBERS ===")
        tenants_by_user: dict[UserId, TenantRecord] = {}
        for tenant in tenants:
            if tenant.user_id is not None:
                tenants_by_user.setdefault(tenant.user_id, tenant)

        rooms_by_user: dict[UserId, list[RoomRecord]] = defaultdict(list)
        for room in rooms:
            if room.current_tenant_id is not None:
                rooms_by_user[room.current_tenant_id].append(room)

        report = SyncReport()
        for user_id, shared in rooms_by_user.items():
            if len(shared) > 1:
                numbers = ", ".join(display_value(room.room_number) for room in shared)
                logger.warning(f"User {user_id} is assigned to several rooms ({numbers}) - not syncing")
                report.conflicts += 1

        for room in rooms:
            if len(rooms_by_user.get(room.current_tenant_id, ())) > 1:
                report.record(SyncOutcome.SKIPPED)
                continue

            tenant = tenants_by_user.get(room.current_tenant_id)
            if tenant is None:
                logger.debug(f"No tenant found for room {room.room_number} ({room.current_tenant})")
                report.record(SyncOutcome.SKIPPED)
                continue

            if tenant.room_number == room.room_number:
                report.record(SyncOutcome.UNCHANGED)
                continue

            logger.info(
                f"Syncing tenant {tenant.full_name}: "
                f"{display_value(tenant.room_number)} -> {room.room_number}"
            )
            if not dry_run:
                await self.tenants.update_one(
                    {"_id": tenant.id},
                    {"$set": {"roomNumber": room.room_number}},
                )
            tenant.room_number = room.room_number
            report.record(SyncOutcome.SYNCED)

        logger.info(f"Synced {report.synced} tenant room numbers")
        return report

    async def audit_orphans(
        self,
        rooms: list[RoomRecord],
        tenants: list[TenantRecord],
        clear: bool = False,
        dry_run: bool = False,
    ) -> OrphanReport:
        """Find tenants caching a room number no linked room gives them."""
        logger.info("=== CHECKING ORPHANED TENANT ROOM NUMBERS ===")
        assigned = {room.current_tenant_id for room in rooms if room.current_tenant_id is not None}
        report = OrphanReport()

        for tenant in tenants:
            if not tenant.room_number or tenant.user_id in assigned:
                continue

            report.orphaned += 1
            if not clear:
                logger.warning(
                    f"Tenant {tenant.full_name} has room number {tenant.room_number} "
                    f"but room is not assigned to them"
                )
                continue

            logger.info(
                f"Tenant {tenant.full_name} has room number {tenant.room_number} "
                f"but no room is assigned to them - clearing room number"
            )
            if not dry_run:
                try:
                    await self.tenants.update_one(
                        {"_id": tenant.id},
                        {"$set": {"roomNumber": None}},
                    )
                except PyMongoError as e:
                    logger.error(f"Error clearing room number for tenant {tenant.full_name}: {e}")
                    report.errors += 1
                    continue
            tenant.room_number = None
            report.cleared += 1

        logger.info(f"Found {report.orphaned} orphaned tenant room assignments")
        return report

    async def run(
        self,
        dry_run: bool = False,
        clear_orphans: bool = False,
    ) -> ReconciliationReport:
        """Run every phase in order and return the combined report."""
        report = ReconciliationReport(dry_run=dry_run)
        if dry_run:
            logger.info("Dry run: no changes will be written")

        tenants = await self.load_tenants()
        user_ids = await self.load_user_ids()

        report.link_repair, repaired = await self.repair_links(tenants, user_ids, dry_run=dry_run)
        report.verification, linked = await self.verify_links(repaired if dry_run else None)
        report.sync = await self.sync_room_numbers(linked, tenants, dry_run=dry_run)
        report.orphans = await self.audit_orphans(
            linked,
            tenants,
            clear=clear_orphans,
            dry_run=dry_run,
        )

        report.finished_at = datetime.utcnow()
        return report
