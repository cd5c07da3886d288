"""
Custom exceptions for the upload timing run.

Browser failures (missing elements, navigation and network timeouts) are left
as Playwright errors and are not wrapped here.
"""


class UploadTimingsException(Exception):
    """Base exception for all upload timing errors."""
    pass


class ConfigurationError(UploadTimingsException):
    """Raised when configuration is invalid or missing."""
    pass


class ExtractionError(UploadTimingsException):
    """Raised when an upload response cannot be turned into a timing."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not extract timing from {url}: {reason}")
