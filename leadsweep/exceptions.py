"""Custom exceptions for the leadsweep library."""


class LeadSweepError(Exception):
    """Base exception for all leadsweep errors."""
    pass


class SearchServiceError(LeadSweepError):
    """Raised when the place search service reports an error for any page."""

    def __init__(self, message: str, status: str = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigurationError(LeadSweepError):
    """Raised when configuration or static input data is invalid or incomplete."""
    pass


class PersistenceError(LeadSweepError):
    """Raised when the search log or the lead store cannot be written."""
    pass
