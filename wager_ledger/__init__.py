"""Wager Ledger: append-only operation log for wagers between Slack users."""

__version__ = "1.0.0"
