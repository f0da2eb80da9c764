"""
Domain-specific exception hierarchy for the booking slot generator.
"""


class SlotError(Exception):
    """Base class for all application-level errors."""


class InvalidParameterError(SlotError, ValueError):
    """Raised when a generator parameter is rejected."""


class AvailabilityDataError(SlotError):
    """Raised when availability data cannot be loaded or parsed."""
