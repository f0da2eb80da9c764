"""
Tests for domain models.
"""

from datetime import datetime, timezone

import pendulum

from bookingslots.domain.models import DateRange, FromUser, SlotCandidate, ToUser


class TestDateRange:
    """Tests for DateRange model."""

    def test_create_date_range(self):
        """Test creating a date range."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

        dr = DateRange(start=start, end=end)

        assert dr.start == start
        assert dr.end == end
        assert dr.duration_minutes() == 480  # 8 hours

    def test_malformed_range_is_accepted(self):
        """End before start is legal input; it just has a negative duration."""
        dr = DateRange(
            start=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
        )

        assert dr.duration_minutes() == -480

    def test_stdlib_datetimes_are_coerced(self):
        dr = DateRange(
            start=datetime(2024, 11, 25, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 11, 25, 10, 0, tzinfo=timezone.utc),
        )

        assert isinstance(dr.start, pendulum.DateTime)
        assert isinstance(dr.end, pendulum.DateTime)
        assert dr.start == pendulum.parse("2024-11-25 09:00", tz="UTC")

    def test_overlaps(self):
        """Test overlap detection against a window."""
        dr = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )

        assert dr.overlaps(
            pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin"),
        )
        assert not dr.overlaps(
            pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin"),
        )

    def test_contains(self):
        dr = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )

        assert dr.contains(
            pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin"),
        )
        assert not dr.contains(
            pendulum.parse("2024-11-25 11:30", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 12:30", tz="Europe/Berlin"),
        )


class TestSlotCandidate:
    """Tests for SlotCandidate model."""

    def test_key_is_the_utc_instant(self):
        berlin = SlotCandidate(time=pendulum.parse("2024-06-03 11:00", tz="Europe/Berlin"))
        utc = SlotCandidate(time=pendulum.parse("2024-06-03 09:00", tz="UTC"))

        assert berlin.key == utc.key
        assert utc.key.startswith("2024-06-03T09:00:00")

    def test_to_dict_omits_absent_fields(self):
        slot = SlotCandidate(time=pendulum.parse("2024-06-03 09:00", tz="UTC"))

        data = slot.to_dict()

        assert set(data) == {"time"}
        assert data["time"].startswith("2024-06-03T09:00:00")

    def test_to_dict_includes_present_fields(self):
        slot = SlotCandidate(
            time=pendulum.parse("2024-06-03 09:00", tz="UTC"),
            user_ids=[4, 7],
            away=True,
            from_user=FromUser(id=1, display_name="Ana"),
            to_user=ToUser(id=2, username="ben"),
            reason="Conference",
        )

        data = slot.to_dict()

        assert data["user_ids"] == [4, 7]
        assert data["away"] is True
        assert data["from_user"] == {"id": 1, "display_name": "Ana"}
        assert data["to_user"] == {"id": 2, "username": "ben", "display_name": None}
        assert data["reason"] == "Conference"
        assert "emoji" not in data
