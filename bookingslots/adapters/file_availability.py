"""
Availability provider backed by a YAML or JSON document.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
import yaml
from pendulum import DateTime

from ..domain.exceptions import AvailabilityDataError
from ..domain.models import (
    Availability,
    DateRange,
    FromUser,
    OutOfOfficeData,
    OutOfOfficeEntry,
    ToUser,
)

logger = logging.getLogger(__name__)


class FileAvailabilityProvider:
    """
    Loads availability windows and out-of-office dates from a file.

    The document is YAML (JSON is accepted as well, being a subset):

        timezone: Europe/Berlin
        date_ranges:
          - start: "2024-06-03 09:00"
            end: "2024-06-03 17:00"
        out_of_office:
          "2024-06-04":
            reason: PTO
            emoji: "🌴"

    Timestamps without an offset are read in the document's timezone,
    falling back to ``default_timezone``.
    """

    def __init__(self, path: Path, default_timezone: str = "UTC"):
        """
        Initialize the provider and load the document.

        Args:
            path: Path to the availability document
            default_timezone: Timezone for naive timestamps

        Raises:
            FileNotFoundError: If the file doesn't exist
            AvailabilityDataError: If the document cannot be parsed
        """
        self.path = Path(path)
        self.default_timezone = default_timezone
        self._load_availability_data()

    def _load_availability_data(self) -> None:
        if not self.path.exists():
            raise FileNotFoundError(f"Availability file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise AvailabilityDataError(f"Invalid availability file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise AvailabilityDataError("Availability file must contain a mapping at the root level.")

        self.timezone = str(data.get("timezone") or self.default_timezone)
        try:
            pendulum.timezone(self.timezone)
        except (ValueError, KeyError) as exc:
            raise AvailabilityDataError(f"Unknown timezone in {self.path}: {self.timezone}") from exc

        self.date_ranges = self._parse_date_ranges(data.get("date_ranges") or [])
        self.dates_out_of_office = self._parse_out_of_office(data.get("out_of_office") or {})

        logger.debug(
            "Loaded %d range(s) and %d out-of-office date(s) from %s",
            len(self.date_ranges), len(self.dates_out_of_office), self.path,
        )

    async def get_availability(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "UTC",
    ) -> Availability:
        """
        Return the ranges overlapping the window plus all out-of-office data.

        Args:
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier of the caller

        Returns:
            Availability for the window
        """
        ranges = [r for r in self.date_ranges if r.overlaps(start_time, end_time)]
        return Availability(date_ranges=ranges, dates_out_of_office=dict(self.dates_out_of_office))

    def _parse_date_ranges(self, raw_ranges: Any) -> List[DateRange]:
        if not isinstance(raw_ranges, list):
            raise AvailabilityDataError("'date_ranges' must be a list.")

        ranges: List[DateRange] = []
        for index, raw in enumerate(raw_ranges):
            try:
                ranges.append(
                    DateRange(
                        start=self._parse_datetime(raw["start"]),
                        end=self._parse_datetime(raw["end"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid date range #%d: %s", index, exc)
                continue

        return ranges

    def _parse_datetime(self, value: Any) -> DateTime:
        if isinstance(value, datetime):
            return pendulum.instance(value, tz=self.timezone)

        if not isinstance(value, str):
            raise ValueError(f"Expected a timestamp, got {value!r}")

        parsed = pendulum.parse(value, tz=self.timezone)
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Expected a date and time, got {value!r}")
        return parsed

    def _parse_out_of_office(self, raw_entries: Any) -> OutOfOfficeData:
        if not isinstance(raw_entries, dict):
            raise AvailabilityDataError("'out_of_office' must be a mapping of dates.")

        entries: OutOfOfficeData = {}
        for day, raw in raw_entries.items():
            day_key = day.isoformat() if isinstance(day, date) else str(day)

            try:
                entries[day_key] = self._parse_out_of_office_entry(raw or {})
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid out-of-office entry for %s: %s", day_key, exc)
                continue

        return entries

    @staticmethod
    def _parse_out_of_office_entry(raw: Dict[str, Any]) -> OutOfOfficeEntry:
        if not isinstance(raw, dict):
            raise TypeError(f"Expected a mapping, got {raw!r}")

        from_user: Optional[FromUser] = None
        to_user: Optional[ToUser] = None

        if raw.get("from_user"):
            from_user = FromUser(
                id=int(raw["from_user"]["id"]),
                display_name=raw["from_user"].get("display_name"),
            )
        if raw.get("to_user"):
            to_user = ToUser(
                id=int(raw["to_user"]["id"]),
                username=raw["to_user"].get("username"),
                display_name=raw["to_user"].get("display_name"),
            )

        return OutOfOfficeEntry(
            from_user=from_user,
            to_user=to_user,
            reason=raw.get("reason"),
            emoji=raw.get("emoji"),
        )
