"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

The insights engine never raises for malformed case data; these exceptions
cover configuration and programming errors at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message, details or ({"source": source} if source else None))


class BusinessWindowException(ConfigurationException):
    """Exception raised when the daily business window is not usable."""

    def __init__(self, start_hour: int, end_hour: int):
        self.start_hour = start_hour
        self.end_hour = end_hour
        super().__init__(
            f"Business window start ({start_hour}) must be before end ({end_hour})",
            details={"start_hour": start_hour, "end_hour": end_hour}
        )
