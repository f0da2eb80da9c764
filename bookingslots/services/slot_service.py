"""
Application services for offering bookable slots.

The service coordinates fetching availability via a provider adapter and
delegates the actual slot generation to the domain-level ``SlotGenerator``.
This keeps the CLI thin and improves testability by allowing the
availability source to be replaced via a simple protocol.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..config import SlotSettings
from ..domain.models import Availability, DateRange, OutOfOfficeData, SlotCandidate
from ..domain.slot_generator import SlotGenerator, TimezoneLike

logger = logging.getLogger(__name__)


class AvailabilityProviderProtocol(Protocol):
    """Protocol describing the availability source needed by the service."""

    async def get_availability(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> Availability:
        """Return availability windows and out-of-office data."""


def get_slots(
    invitee_date: DateTime,
    frequency: int,
    minimum_booking_notice: int,
    date_ranges: Sequence[DateRange],
    event_length: int,
    offset_start: int = 0,
    dates_out_of_office: Optional[OutOfOfficeData] = None,
    now: Optional[datetime] = None,
    generator: Optional[SlotGenerator] = None,
) -> List[SlotCandidate]:
    """
    Generate slots in the invitee's timezone.

    The target timezone is taken from ``invitee_date`` itself, so the
    returned slot times read as wall-clock times for the person booking.
    """
    timezone: TimezoneLike = invitee_date.tzinfo or "UTC"
    generator = generator or SlotGenerator()

    return generator.generate(
        date_ranges=date_ranges,
        frequency=frequency,
        event_length=event_length,
        timezone=timezone,
        minimum_booking_notice=minimum_booking_notice,
        offset_start=offset_start,
        dates_out_of_office=dates_out_of_office,
        now=now,
    )


class SlotService:
    """
    Orchestrates availability retrieval and slot generation.

    Dependency inversion toward a protocol makes it easy to plug in the file
    adapter or a stub in tests.
    """

    def __init__(
        self,
        provider: AvailabilityProviderProtocol,
        generator: SlotGenerator,
    ) -> None:
        self._provider = provider
        self._generator = generator

    async def find_slots(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        timezone: str,
        settings: SlotSettings,
        now: Optional[datetime] = None,
    ) -> List[SlotCandidate]:
        """
        Retrieve availability, restrict it to the window, and generate slots.
        """
        availability = await self.fetch_availability(
            start_date=start_date,
            end_date=end_date,
            timezone=timezone,
        )

        return self.calculate_slots(
            availability=availability,
            timezone=timezone,
            settings=settings,
            now=now,
        )

    async def fetch_availability(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        timezone: str,
    ) -> Availability:
        """Fetch availability and keep only what falls inside the window."""
        availability = await self._provider.get_availability(
            start_time=start_date,
            end_time=end_date,
            timezone=timezone,
        )

        return self._restrict_to_window(availability, start_date, end_date, timezone)

    def calculate_slots(
        self,
        *,
        availability: Availability,
        timezone: str,
        settings: SlotSettings,
        now: Optional[datetime] = None,
    ) -> List[SlotCandidate]:
        """Generate slots from already fetched availability."""
        return self._generator.generate(
            date_ranges=availability.date_ranges,
            frequency=settings.frequency_minutes,
            event_length=settings.event_length_minutes,
            timezone=timezone,
            minimum_booking_notice=settings.minimum_booking_notice_minutes,
            offset_start=settings.offset_start_minutes,
            dates_out_of_office=availability.dates_out_of_office,
            now=now,
        )

    @staticmethod
    def _restrict_to_window(
        availability: Availability,
        start_date: DateTime,
        end_date: DateTime,
        timezone: str,
    ) -> Availability:
        """
        Drop ranges and out-of-office dates outside the requested window.

        Providers may return more than was asked for; ranges are kept whole
        when they overlap the window at all.
        """
        ranges = [
            date_range for date_range in availability.date_ranges
            if date_range.overlaps(start_date, end_date)
        ]

        first_day = start_date.in_timezone(timezone).format("YYYY-MM-DD")
        last_day = end_date.in_timezone(timezone).format("YYYY-MM-DD")
        out_of_office = {
            day: entry for day, entry in availability.dates_out_of_office.items()
            if first_day <= day <= last_day
        }

        dropped = len(availability.date_ranges) - len(ranges)
        if dropped:
            logger.debug("Dropped %d range(s) outside %s - %s", dropped, start_date, end_date)

        return Availability(date_ranges=ranges, dates_out_of_office=out_of_office)
