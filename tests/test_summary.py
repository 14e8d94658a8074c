"""Tests for the per-day availability summary."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from fieldbook.services.slots import BookingConfig, SlotsRepository, get_venue_availability
from fieldbook.services.slots.config import day_of_week
from fieldbook.services.slots.summary import classify_day
from fieldbook.services.slots.types import AvailabilityStatus
from tests.conftest import FUTURE_DATE, make_booking, make_override, make_venue


AVAILABLE = AvailabilityStatus.AVAILABLE
LIMITED = AvailabilityStatus.LIMITED
UNAVAILABLE = AvailabilityStatus.UNAVAILABLE


def _book_hours(db, venue, booking_date, count, field=None):
    """Book `count` consecutive hourly slots from 06:00."""
    for hour in range(6, 6 + count):
        start = f"{hour:02d}:00"
        end = f"{hour + 1:02d}:00"
        make_booking(db, venue, start, end, booking_date=booking_date, field=field, slots=[(start, end)])


class TestClassifyDay:
    @pytest.mark.parametrize(
        "total, available, expected",
        [
            (17, 10, AVAILABLE),
            (17, 4, LIMITED),
            (17, 0, UNAVAILABLE),
            (17, -2, UNAVAILABLE),
            (10, 3, LIMITED),
            (10, 4, AVAILABLE),
            (0, 0, UNAVAILABLE),
        ],
    )
    def test_thresholds(self, total, available, expected):
        assert classify_day(total, available) == expected

    def test_custom_threshold(self):
        config = BookingConfig(limited_threshold=0.5)
        assert classify_day(10, 5, config) == LIMITED
        assert classify_day(10, 6, config) == AVAILABLE


class TestGetVenueAvailability:
    def test_week_summary(self, db, repo):
        venue = make_venue(db)
        day3 = FUTURE_DATE + timedelta(days=2)
        day5 = FUTURE_DATE + timedelta(days=4)
        day6 = FUTURE_DATE + timedelta(days=5)
        _book_hours(db, venue, day3, 13)
        _book_hours(db, venue, day5, 17)
        _book_hours(db, venue, day6, 7)

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE + timedelta(days=6))

        assert list(summary) == [
            (FUTURE_DATE + timedelta(days=i)).isoformat() for i in range(7)
        ]
        assert summary[day3.isoformat()] == LIMITED
        assert summary[day5.isoformat()] == UNAVAILABLE
        assert summary[day6.isoformat()] == AVAILABLE
        assert summary[FUTURE_DATE.isoformat()] == AVAILABLE

    def test_closed_override_day_unavailable(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        make_override(db, venue, "closed")
        next_day = FUTURE_DATE + timedelta(days=1)

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, next_day)
        assert summary[FUTURE_DATE.isoformat()] == UNAVAILABLE
        assert summary[next_day.isoformat()] == AVAILABLE

        field_summary = get_venue_availability(
            repo, venue.id, FUTURE_DATE, FUTURE_DATE, field_id=venue.fields[0].id
        )
        assert field_summary[FUTURE_DATE.isoformat()] == UNAVAILABLE

    def test_inactive_weekday_unavailable(self, db, repo):
        other_days = [d for d in range(7) if d != day_of_week(FUTURE_DATE)]
        venue = make_venue(db, days_available=other_days)

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE)
        assert summary[FUTURE_DATE.isoformat()] == UNAVAILABLE

    def test_closed_field_unavailable(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        field = venue.fields[0]
        field.status = "closed"
        db.commit()

        assert get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE, field_id=field.id) == {
            FUTURE_DATE.isoformat(): UNAVAILABLE
        }
        assert get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE) == {
            FUTURE_DATE.isoformat(): AVAILABLE
        }

    def test_field_bookings_counted_per_field(self, db, repo):
        venue = make_venue(db, fields=["Field A", "Field B"])
        field_a, field_b = venue.fields
        _book_hours(db, venue, FUTURE_DATE, 17, field=field_a)

        def status(field_id):
            summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE, field_id=field_id)
            return summary[FUTURE_DATE.isoformat()]

        assert status(field_a.id) == UNAVAILABLE
        assert status(field_b.id) == AVAILABLE
        assert status(None) == AVAILABLE

    def test_duplicate_intervals_counted_once(self, db, repo):
        venue = make_venue(db, opening_time="10:00", closing_time="20:00")
        for _ in range(3):
            make_booking(db, venue, "10:00", "11:00", slots=[("10:00", "11:00")])

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE)
        assert summary[FUTURE_DATE.isoformat()] == AVAILABLE  # 9 of 10 free

    def test_reversed_range(self, db, repo):
        venue = make_venue(db)
        end = FUTURE_DATE + timedelta(days=2)

        summary = get_venue_availability(repo, venue.id, end, FUTURE_DATE)
        assert len(summary) == 3

    def test_generates_missing_grid(self, db, repo):
        venue = make_venue(db, with_grid=False)

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE)
        assert summary[FUTURE_DATE.isoformat()] == AVAILABLE

    def test_read_failure_marks_day_unavailable(self, db):
        venue = make_venue(db)
        repo = SlotsRepository(db)
        repo.list_confirmed_bookings = MagicMock(
            side_effect=OperationalError("SELECT", {}, Exception("down"))
        )

        summary = get_venue_availability(repo, venue.id, FUTURE_DATE, FUTURE_DATE + timedelta(days=1))
        assert set(summary.values()) == {UNAVAILABLE}
        assert len(summary) == 2
