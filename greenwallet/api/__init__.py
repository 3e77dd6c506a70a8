"""HTTP API for the Green Wallet ledger engine."""
