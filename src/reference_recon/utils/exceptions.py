"""Custom exceptions for the reference matching application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class TransactionParseError(ReconciliationError):
    """Error loading a transaction file."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
