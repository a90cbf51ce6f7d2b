"""Custom exceptions for the bank-to-ledger matching application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class BankParseError(ReconciliationError):
    """Error parsing a bank statement file."""

    pass


class LedgerParseError(ReconciliationError):
    """Error parsing an accounting ledger export."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration or vendor mapping input."""

    pass


class MatchStateError(ReconciliationError):
    """Attempt to commit a record that already belongs to a match."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error writing exports or reports."""

    pass
