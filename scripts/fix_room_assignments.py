"""Repair room tenant links and sync tenant room numbers.

Usage:
  python scripts/fix_room_assignments.py [--dry-run] [--clear-orphans]
"""

import sys

from roomsync.main import build_parser, run_cli


if __name__ == "__main__":
    parser = build_parser()
    args = parser.parse_args()
    sys.exit(run_cli(args))
