"""
Base exceptions for Locator IQ.
"""


class LocatorIQError(Exception):
    """
    Root of the Locator IQ exception hierarchy.

    Catch this to handle any failure raised by the library.

    Attributes:
        message: What went wrong
        details: Structured context (paths, keys, field names, ...)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} - Details: {self.details}"


class ConfigurationError(LocatorIQError):
    """
    Invalid or missing configuration.

    Covers settings, config files, pattern files and static locator files.
    """
