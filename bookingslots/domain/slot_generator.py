"""
Core business logic for generating bookable slot start times.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O). Even the clock
is an argument, so identical inputs always give identical slots.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, List, Optional, Sequence, Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidParameterError
from .models import DateRange, OutOfOfficeData, SlotCandidate

logger = logging.getLogger(__name__)

# Start times align to these minute marks, coarsest first
INTERVALS_WITH_DEFINED_START_TIMES = (60, 30, 20, 15, 10, 5)
DEFAULT_INTERVAL_MINUTES = 1

# Half-hour start rule, see half_hour_offset_applies. Targets India
# specifically; a candidate for a general per-offset rule.
INDIA_TIMEZONE = "Asia/Kolkata"
INDIA_OFFSET_MINUTES = 330

TimezoneLike = Union[str, tzinfo]


def minimum_of_one(value: int) -> int:
    return 1 if value < 1 else value


def select_interval(frequency: int, default_interval: int = DEFAULT_INTERVAL_MINUTES) -> int:
    """
    Pick the start-time granularity for a booking frequency.

    Returns the first of 60, 30, 20, 15, 10, 5 that divides ``frequency``
    evenly, or ``default_interval`` when none does.
    """
    for interval in INTERVALS_WITH_DEFINED_START_TIMES:
        if frequency % interval == 0:
            return interval
    return minimum_of_one(default_interval)


def resolve_timezone(timezone: TimezoneLike) -> tzinfo:
    """Turn an IANA name into a timezone object; pass timezone objects through."""
    if not isinstance(timezone, str):
        return timezone
    try:
        return pendulum.timezone(timezone)
    except (ValueError, KeyError) as exc:
        raise InvalidParameterError(f"Unknown timezone: {timezone!r}") from exc


def timezone_name(tz: tzinfo) -> str:
    return getattr(tz, "name", None) or getattr(tz, "key", None) or str(tz)


def utc_offset_minutes(tz: tzinfo, at: DateTime) -> int:
    """Offset of ``tz`` from UTC at the instant ``at``, in minutes."""
    return int(at.in_timezone(tz).utcoffset().total_seconds() // 60)


def half_hour_offset_applies(
    tz: tzinfo,
    interval: int,
    date_ranges: Sequence[DateRange],
    now: DateTime,
) -> bool:
    """
    Decide whether hourly slots must start at minute 30 (UTC).

    Only hourly granularity is affected. India always qualifies; any other
    timezone qualifies when its offset is not a whole number of hours and
    at least one range starts on a half hour. The India special case is
    kept as is; a rule derived from the offset alone would replace it.
    """
    if interval != 60:
        return False

    offset = utc_offset_minutes(tz, now)
    if timezone_name(tz) == INDIA_TIMEZONE or offset == INDIA_OFFSET_MINUTES:
        return True

    is_half_hour_timezone = offset % 60 != 0
    has_half_hour_start_times = any(r.start.minute == 30 for r in date_ranges)

    return is_half_hour_timezone and has_half_hour_start_times


def _round_up_to_interval(dt: DateTime, interval: int) -> DateTime:
    """
    Round up to the next interval mark within the hour.

    Example (interval 15): 09:07 -> 09:15, 09:15 -> 09:15, 09:15:20 -> 09:30
    """
    micros_into_hour = (dt.minute * 60 + dt.second) * 1_000_000 + dt.microsecond
    step = interval * 60 * 1_000_000

    if micros_into_hour % step == 0:
        return dt

    marks = -(-micros_into_hour // step)
    return dt.start_of("hour").add(minutes=marks * interval)


def _force_half_hour(dt: DateTime) -> DateTime:
    return dt if dt.minute == 30 else dt.set(minute=30)


@dataclass
class _SlotRun:
    """Parameters and accumulated state of a single ``generate`` call."""
    tz: tzinfo
    step: int
    event_length: int
    offset_start: int
    interval: int
    earliest: DateTime
    apply_half_hour: bool
    dates_out_of_office: Optional[OutOfOfficeData]
    # there can only ever be one slot at a given start time
    slots: Dict[str, SlotCandidate] = field(default_factory=dict)
    placed: List[DateTime] = field(default_factory=list)

    def emit_range(self, date_range: DateRange) -> int:
        """Add the slots of one range; returns how many new slots were placed."""
        range_start = date_range.start.in_timezone("UTC")

        candidate = range_start if range_start > self.earliest else self.earliest
        candidate = _round_up_to_interval(candidate, self.interval)
        candidate = candidate.add(minutes=self.offset_start)
        if self.apply_half_hour:
            candidate = _force_half_hour(candidate)

        # A candidate inside an existing slot moves to that slot's start,
        # unless that start lies before this range; then it moves past it.
        for existing in self.placed:
            if existing < candidate < existing.add(minutes=self.step):
                if existing >= date_range.start:
                    candidate = existing
                else:
                    candidate = existing.add(minutes=self.step)
                if self.apply_half_hour:
                    candidate = _force_half_hour(candidate)

        placed_count = 0
        current = candidate
        while current.add(minutes=self.event_length).subtract(seconds=1) <= date_range.end:
            key = current.to_iso8601_string()
            if key not in self.slots:
                self.slots[key] = self._build_slot(current.in_timezone(self.tz))
                self.placed.append(current)
                placed_count += 1

            # Slots of one range stay exactly one step apart
            current = current.add(minutes=self.step)

        return placed_count

    def _build_slot(self, slot_time: DateTime) -> SlotCandidate:
        entry = None
        if self.dates_out_of_office:
            entry = self.dates_out_of_office.get(slot_time.format("YYYY-MM-DD"))

        if entry is None:
            return SlotCandidate(time=slot_time)

        return SlotCandidate(
            time=slot_time,
            away=True,
            from_user=entry.from_user or None,
            to_user=entry.to_user or None,
            reason=entry.reason or None,
            emoji=entry.emoji or None,
        )


class SlotGenerator:
    """
    Generates bookable start times from availability date ranges.

    Algorithm:
    1. Clamp frequency, event length and offset to sane minimums
    2. Pick the start-time granularity for the frequency
    3. For each range (sorted by start), find the first legal start:
       the later of range start and now + minimum notice, rounded up to
       the granularity, shifted by the offset
    4. Snap that start onto slots already placed by earlier ranges so no
       two slots are closer than one step
    5. Step through the range, emitting every slot that fits entirely
    """

    def __init__(
        self,
        default_interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        strict: bool = False,
    ):
        """
        Args:
            default_interval_minutes: Granularity used when no defined
                start-time interval divides the frequency
            strict: Reject negative frequency or event length instead of
                clamping them
        """
        self.default_interval_minutes = minimum_of_one(default_interval_minutes)
        self.strict = strict

    def generate(
        self,
        date_ranges: Sequence[DateRange],
        frequency: int,
        event_length: int,
        timezone: TimezoneLike,
        minimum_booking_notice: int,
        offset_start: int = 0,
        dates_out_of_office: Optional[OutOfOfficeData] = None,
        now: Optional[datetime] = None,
    ) -> List[SlotCandidate]:
        """
        Generate the slots a booking page should offer.

        Args:
            date_ranges: Availability windows, in any order
            frequency: Minutes between consecutive slot starts
            event_length: Duration of a booking in minutes
            timezone: Target timezone (IANA name or timezone object)
            minimum_booking_notice: Minutes between now and the earliest slot
            offset_start: Extra minutes added to every step
            dates_out_of_office: Out-of-office entries keyed by YYYY-MM-DD
            now: Current instant; defaults to the wall clock

        Returns:
            Slots in insertion order, unique per instant

        Raises:
            InvalidParameterError: In strict mode for negative durations,
                and for unknown timezone names
        """
        if self.strict:
            self._validate(frequency=frequency, event_length=event_length)

        frequency = minimum_of_one(frequency)
        event_length = minimum_of_one(event_length)
        offset_start = minimum_of_one(offset_start) if offset_start else 0

        tz = resolve_timezone(timezone)
        now_utc = pendulum.instance(now).in_timezone("UTC") if now else pendulum.now("UTC")
        interval = select_interval(frequency, self.default_interval_minutes)

        ordered_ranges = sorted(date_ranges, key=lambda r: r.start)
        apply_half_hour = half_hour_offset_applies(tz, interval, ordered_ranges, now_utc)

        logger.debug(
            "Generating slots: frequency=%d interval=%d event_length=%d timezone=%s half_hour=%s",
            frequency, interval, event_length, timezone_name(tz), apply_half_hour,
        )

        run = _SlotRun(
            tz=tz,
            step=frequency + offset_start,
            event_length=event_length,
            offset_start=offset_start,
            interval=interval,
            earliest=now_utc.add(minutes=minimum_booking_notice),
            apply_half_hour=apply_half_hour,
            dates_out_of_office=dates_out_of_office,
        )

        for date_range in ordered_ranges:
            placed = run.emit_range(date_range)
            logger.debug("Range %s produced %d slot(s)", date_range, placed)

        return list(run.slots.values())

    @staticmethod
    def _validate(frequency: int, event_length: int) -> None:
        if frequency < 0:
            raise InvalidParameterError(f"frequency must not be negative, got {frequency}")
        if event_length < 0:
            raise InvalidParameterError(f"event_length must not be negative, got {event_length}")


def build_slots_with_date_ranges(
    date_ranges: Sequence[DateRange],
    frequency: int,
    event_length: int,
    timezone: TimezoneLike,
    minimum_booking_notice: int,
    offset_start: int = 0,
    dates_out_of_office: Optional[OutOfOfficeData] = None,
    now: Optional[datetime] = None,
    default_interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[SlotCandidate]:
    """Generate slots with a default, non-strict generator."""
    generator = SlotGenerator(default_interval_minutes=default_interval_minutes)
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
