"""Domain-specific exceptions for the expense ledger engine."""

class ValidationError(ValueError):
    """Raised when a draft or filter does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located in the ledger."""


class PersistenceError(IOError):
    """Raised when the snapshot storage cannot be read or written."""
