"""Room assignment reconciliation for the boarding-house database."""
