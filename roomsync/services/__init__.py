"""Services for roomsync."""

from roomsync.services.reconciliation import (
    ReconciliationService,
    build_tenant_user_map,
    decide_link,
)

__all__ = [
    "ReconciliationService",
    "build_tenant_user_map",
    "decide_link",
]
