"""Local-first habit tracker: scheduling, completion ledger and analytics."""

__version__ = "0.1.0"
