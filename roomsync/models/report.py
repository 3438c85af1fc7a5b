"""Outcome and report models for a reconciliation run."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class LinkOutcome(str, Enum):
    """What link repair decided for a single room."""
    REMAPPED = "remapped"
    CLEARED = "cleared"
    VALID = "valid"
    ERROR = "error"


class SyncOutcome(str, Enum):
    """What room number sync decided for a single room."""
    SYNCED = "synced"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


class LinkRepairReport(BaseModel):
    """Tallies from the link repair phase."""
    total: int = 0
    remapped: int = 0
    cleared: int = 0
    already_valid: int = 0
    errors: int = 0
    failed_rooms: list[str] = Field(default_factory=list)

    @property
    def fixed(self) -> int:
        return self.remapped + self.cleared

    def record(self, outcome: LinkOutcome) -> None:
        self.total += 1
        if outcome == LinkOutcome.REMAPPED:
            self.remapped += 1
        elif outcome == LinkOutcome.CLEARED:
            self.cleared += 1
        elif outcome == LinkOutcome.VALID:
            self.already_valid += 1
        else:
            self.errors += 1


class VerificationReport(BaseModel):
    """Read-only audit of room links after repair."""
    rooms_linked: int = 0
    valid_links: int = 0

    @property
    def invalid_links(self) -> int:
        return self.rooms_linked - self.valid_links

    @property
    def is_consistent(self) -> bool:
        return self.valid_links == self.rooms_linked


class SyncReport(BaseModel):
    """Tallies from the room number back-propagation phase."""
    synced: int = 0
    unchanged: int = 0
    skipped: int = 0
    conflicts: int = 0

    def record(self, outcome: SyncOutcome) -> None:
        if outcome == SyncOutcome.SYNCED:
            self.synced += 1
        elif outcome == SyncOutcome.UNCHANGED:
            self.unchanged += 1
        else:
            self.skipped += 1


class OrphanReport(BaseModel):
    """Tenants caching a room number that no room assigns to them."""
    orphaned: int = 0
    cleared: int = 0
    errors: int = 0


class ReconciliationReport(BaseModel):
    """Everything a single run decided, phase by phase."""
    dry_run: bool = False
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: datetime | None = None
    link_repair: LinkRepairReport = Field(default_factory=LinkRepairReport)
    verification: VerificationReport = Field(default_factory=VerificationReport)
    sync: SyncReport = Field(default_factory=SyncReport)
    orphans: OrphanReport = Field(default_factory=OrphanReport)

    @property
    def changed(self) -> int:
        """Number of documents a run wrote (or would write, when dry)."""
        return self.link_repair.fixed + self.sync.synced + self.orphans.cleared
