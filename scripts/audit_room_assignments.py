"""Report room link and tenant room number problems without fixing them.

Usage:
  python scripts/audit_room_assignments.py [--clear-orphans]

``--clear-orphans`` only changes what is reported; nothing is written.
"""

import sys

from roomsync.main import build_parser, run_cli


if __name__ == "__main__":
    parser = build_parser(
        description="Audit room tenant links and tenant room numbers (read-only)",
        allow_writes=False,
    )
    args = parser.parse_args()
    args.dry_run = True
    sys.exit(run_cli(args))
