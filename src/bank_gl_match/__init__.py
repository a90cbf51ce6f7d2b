"""Match bank statement lines to accounting ledger entries."""

__version__ = "0.1.0"
