"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import AvailabilityDataError, InvalidParameterError, SlotError
from .models import (
    Availability,
    DateRange,
    FromUser,
    OutOfOfficeData,
    OutOfOfficeEntry,
    SlotCandidate,
    ToUser,
)
from .slot_generator import SlotGenerator, build_slots_with_date_ranges, select_interval

__all__ = [
    "Availability",
    "AvailabilityDataError",
    "DateRange",
    "FromUser",
    "InvalidParameterError",
    "OutOfOfficeData",
    "OutOfOfficeEntry",
    "SlotCandidate",
    "SlotError",
    "SlotGenerator",
    "ToUser",
    "build_slots_with_date_ranges",
    "select_interval",
]
