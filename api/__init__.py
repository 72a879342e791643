"""HTTP adapter for the expense ledger."""
