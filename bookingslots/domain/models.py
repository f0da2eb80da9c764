"""
Domain models for availability ranges and bookable slots.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime


def _as_datetime(value: datetime) -> DateTime:
    if isinstance(value, DateTime):
        return value
    return pendulum.instance(value)


@dataclass(frozen=True)
class DateRange:
    """
    A contiguous window during which the calendar owner is available.

    Unlike a meeting time range, a date range is allowed to be malformed
    (end before start). Such a range is accepted and simply yields no slots.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        object.__setattr__(self, "start", _as_datetime(self.start))
        object.__setattr__(self, "end", _as_datetime(self.end))

    def duration_minutes(self) -> int:
        """Return the duration in minutes (negative for malformed ranges)."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, start: DateTime, end: DateTime) -> bool:
        """Check if this range overlaps the window [start, end)."""
        return self.start < end and self.end > start

    def contains(self, start: DateTime, end: DateTime) -> bool:
        """Check if [start, end] lies entirely inside this range."""
        return self.start <= start and end <= self.end

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('YYYY-MM-DD HH:mm')}"


@dataclass(frozen=True)
class FromUser:
    """The user whose calendar is out of office."""
    id: int
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "display_name": self.display_name}


@dataclass(frozen=True)
class ToUser:
    """The user bookings are redirected to while the owner is away."""
    id: int
    username: Optional[str] = None
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "display_name": self.display_name}


@dataclass(frozen=True)
class OutOfOfficeEntry:
    """Out-of-office annotation for a single calendar date."""
    from_user: Optional[FromUser] = None
    to_user: Optional[ToUser] = None
    reason: Optional[str] = None
    emoji: Optional[str] = None


# Keyed by calendar date (YYYY-MM-DD) in the target timezone
OutOfOfficeData = Dict[str, OutOfOfficeEntry]


@dataclass
class SlotCandidate:
    """
    A single bookable start time.

    Optional fields stay ``None`` when absent and are left out of
    ``to_dict()`` entirely.
    """
    time: DateTime
    user_ids: Optional[List[int]] = None
    away: Optional[bool] = None
    from_user: Optional[FromUser] = None
    to_user: Optional[ToUser] = None
    reason: Optional[str] = None
    emoji: Optional[str] = None

    @property
    def key(self) -> str:
        """UTC ISO-8601 instant, unique per slot."""
        return self.time.in_timezone("UTC").to_iso8601_string()

    def to_dict(self) -> Dict[str, Any]:
        """Render the slot for an API response, omitting absent fields."""
        data: Dict[str, Any] = {"time": self.time.to_iso8601_string()}

        if self.user_ids is not None:
            data["user_ids"] = list(self.user_ids)
        if self.away:
            data["away"] = True
        if self.from_user:
            data["from_user"] = self.from_user.to_dict()
        if self.to_user:
            data["to_user"] = self.to_user.to_dict()
        if self.reason:
            data["reason"] = self.reason
        if self.emoji:
            data["emoji"] = self.emoji

        return data


@dataclass
class Availability:
    """Availability windows and out-of-office data for one calendar."""
    date_ranges: List[DateRange] = field(default_factory=list)
    dates_out_of_office: OutOfOfficeData = field(default_factory=dict)
