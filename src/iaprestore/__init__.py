"""Purchase restore reconciliation."""
