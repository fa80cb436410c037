"""Stock Ledger - material inventory ledger and reorder workflow."""

__version__ = "1.0.0"
