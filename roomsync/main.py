"""Command-line entry point for the room assignment reconciliation job."""

import argparse
import asyncio
import logging

from roomsync.config import Settings, get_settings
from roomsync.database import Database, DatabaseConnectionError
from roomsync.models.report import ReconciliationReport
from roomsync.services.reconciliation import ReconciliationService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for a job run."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def log_summary(report: ReconciliationReport) -> None:
    """Log the final tallies of a run."""
    prefix = "[dry run] " if report.dry_run else ""
    logger.info(
        f"{prefix}Reconciliation complete: "
        f"{report.link_repair.remapped} remapped, "
        f"{report.link_repair.cleared} cleared, "
        f"{report.link_repair.errors} errors, "
        f"{report.verification.valid_links}/{report.verification.rooms_linked} valid links, "
        f"{report.sync.synced} tenants synced, "
        f"{report.orphans.orphaned} orphaned tenants"
    )


async def run_reconciliation(
    settings: Settings | None = None,
    *,
    dry_run: bool = False,
    clear_orphans: bool = False,
    database: Database | None = None,
) -> ReconciliationReport | None:
    """Connect, run the reconciliation job and always disconnect.

    Raises DatabaseConnectionError if the database can't be reached. Any
    other failure is logged and None is returned.
    """
    settings = settings or get_settings()
    database = database or Database(settings)

    db = await database.connect()
    try:
        service = ReconciliationService(db, settings)
        report = await service.run(dry_run=dry_run, clear_orphans=clear_orphans)
    except Exception:
        logger.exception("Reconciliation failed")
        return None
    finally:
        await database.disconnect()

    log_summary(report)
    return report


def build_parser(description: str | None = None, allow_writes: bool = True) -> argparse.ArgumentParser:
    """Build the argument parser shared by the CLI and scripts."""
    parser = argparse.ArgumentParser(
        description=description or "Repair room tenant links and sync tenant room numbers",
    )
    if allow_writes:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without writing",
        )
    parser.add_argument(
        "--clear-orphans",
        action="store_true",
        help="Clear cached room numbers of tenants no room is assigned to",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: LOG_LEVEL setting)",
    )
    return parser


def run_cli(args: argparse.Namespace) -> int:
    """Run the job for parsed arguments and return the exit status."""
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        report = asyncio.run(run_reconciliation(
            settings,
            dry_run=getattr(args, "dry_run", True),
            clear_orphans=args.clear_orphans,
        ))
    except DatabaseConnectionError as e:
        logger.error(f"MongoDB connection error: {e}")
        return 1

    return 0 if report is not None else 1


def main(argv: list[str] | None = None) -> int:
    """Console script entry point."""
    args = build_parser().parse_args(argv)
    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
